"""Domain list file helpers."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable


def dedupe_entries(entries: Iterable[str]) -> list[str]:
    """Strip, lowercase and de-duplicate entries, keeping first-seen order."""
    seen: set[str] = set()
    result: list[str] = []
    for entry in entries:
        value = str(entry or "").strip().lower()
        if not value or value in seen:
            continue
        seen.add(value)
        result.append(value)
    return result


def read_domain_list(path: Path) -> list[str]:
    """Read list entries from disk (file order, normalized, de-duplicated)."""
    if not path.exists():
        return []

    values = []
    for line in path.read_text().splitlines():
        value = line.strip()
        if not value or value.startswith("#"):
            continue
        values.append(value)
    return dedupe_entries(values)


def write_domain_list(path: Path, entries: Iterable[str], *, title: str = "Domains") -> None:
    """Write list entries to disk (order preserved, atomic)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    header = [
        f"# {title} (one per line)",
        "# Bare domains also match subdomains; *.example.com is a wildcard",
    ]
    content = "\n".join(header + dedupe_entries(entries) + [""])
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    tmp_path.write_text(content)
    tmp_path.replace(path)
