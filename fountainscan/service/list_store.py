"""Mutable whitelist/blacklist owned by the host, with compiled blocking rules."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional

from ..engine.blocking import BlockRule, compile_blocking_rules
from ..utils.domains import normalize_list_domain
from ..utils.lists import dedupe_entries, write_domain_list
from .policy import add_to_blacklist

logger = logging.getLogger(__name__)


class ListKind(str, Enum):
    WHITELIST = "whitelist"
    BLACKLIST = "blacklist"


@dataclass(frozen=True)
class ListSnapshot:
    """Read-only copy of both lists handed to one scan."""

    whitelist: tuple[str, ...] = ()
    blacklist: tuple[str, ...] = ()


class DomainListStore:
    """Holds both domain lists and persists every change to disk."""

    def __init__(
        self,
        *,
        whitelist: Iterable[str] = (),
        blacklist: Iterable[str] = (),
        whitelist_path: Optional[Path] = None,
        blacklist_path: Optional[Path] = None,
    ):
        self._paths = {
            ListKind.WHITELIST: whitelist_path,
            ListKind.BLACKLIST: blacklist_path,
        }
        self._entries: dict[ListKind, tuple[str, ...]] = {
            ListKind.WHITELIST: tuple(dedupe_entries(whitelist)),
            ListKind.BLACKLIST: tuple(dedupe_entries(blacklist)),
        }
        self._lock = threading.RLock()
        self._rules: tuple[BlockRule, ...] = ()
        self._recompile()

    @classmethod
    def from_config(cls, config) -> "DomainListStore":
        return cls(
            whitelist=config.whitelist,
            blacklist=config.blacklist,
            whitelist_path=config.whitelist_path,
            blacklist_path=config.blacklist_path,
        )

    def snapshot(self) -> ListSnapshot:
        with self._lock:
            return ListSnapshot(
                whitelist=self._entries[ListKind.WHITELIST],
                blacklist=self._entries[ListKind.BLACKLIST],
            )

    def entries(self, kind: ListKind) -> tuple[str, ...]:
        with self._lock:
            return self._entries[ListKind(kind)]

    @property
    def rules(self) -> tuple[BlockRule, ...]:
        """Current blocking rules, always a complete set."""
        return self._rules

    def add(self, kind: ListKind, entry: str) -> bool:
        """Append an entry; False if it is empty or already listed."""
        kind = ListKind(kind)
        values = dedupe_entries([entry])
        if not values:
            return False
        value = values[0]
        with self._lock:
            current = self._entries[kind]
            if any(normalize_list_domain(e) == normalize_list_domain(value) for e in current):
                return False
            self._set(kind, current + (value,))
        logger.info("Added %s to %s", value, kind.value)
        return True

    def remove(self, kind: ListKind, entry: str) -> bool:
        """Remove every entry equal to ``entry`` after normalization."""
        kind = ListKind(kind)
        target = normalize_list_domain(entry)
        if not target:
            return False
        with self._lock:
            current = self._entries[kind]
            kept = tuple(e for e in current if normalize_list_domain(e) != target)
            if len(kept) == len(current):
                return False
            self._set(kind, kept)
        logger.info("Removed %s from %s", target, kind.value)
        return True

    def blacklist_host(self, url_or_domain: str) -> bool:
        """Blacklist the host of ``url_or_domain`` unless an entry already covers it."""
        with self._lock:
            updated, added = add_to_blacklist(url_or_domain, self._entries[ListKind.BLACKLIST])
            if added:
                self._set(ListKind.BLACKLIST, tuple(dedupe_entries(updated)))
        return added

    def replace(self, kind: ListKind, entries: Iterable[str]) -> None:
        kind = ListKind(kind)
        with self._lock:
            self._set(kind, tuple(dedupe_entries(entries)))

    def _set(self, kind: ListKind, entries: tuple[str, ...]) -> None:
        self._entries[kind] = entries
        path = self._paths.get(kind)
        if path:
            write_domain_list(path, entries, title=kind.value.capitalize())
        self._recompile()

    def _recompile(self) -> None:
        """Rebuild the full rule set and swap it in as one replacement."""
        rules = compile_blocking_rules(
            self._entries[ListKind.BLACKLIST],
            self._entries[ListKind.WHITELIST],
        )
        self._rules = tuple(rules)
        logger.debug("Blocking rules updated (%s rules)", len(rules))
