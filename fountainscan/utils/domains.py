"""Domain normalization utilities."""

from __future__ import annotations

import re
from urllib.parse import urlsplit

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)


def normalize_list_domain(value: str) -> str:
    """
    Normalize a domain or list pattern for comparison.

    - Strip surrounding whitespace
    - Strip an optional http:// or https:// prefix
    - Strip a leading "www."
    - Lowercase

    Wildcard prefixes ("*.") are preserved.
    """
    if not isinstance(value, str):
        return ""
    raw = _SCHEME_RE.sub("", value.strip()).lower()
    if raw.startswith("www."):
        raw = raw[4:]
    return raw


def extract_hostname(value: str) -> str:
    """Return the lowercased hostname of a URL (or bare host), without port."""
    raw = (value or "").strip()
    if not raw:
        return ""
    candidate = raw if "://" in raw else f"https://{raw}"
    try:
        host = urlsplit(candidate).hostname or ""
    except ValueError:
        return ""
    return host.strip(".").lower()


def url_scheme(url: str) -> str:
    """Return the lowercased scheme of an absolute URL.

    Raises ValueError when the URL cannot be parsed.
    """
    return urlsplit((url or "").strip()).scheme.lower()


def ensure_url(value: str) -> str:
    """Prefix bare hosts with https:// so they parse as absolute URLs."""
    raw = (value or "").strip()
    if not raw:
        return ""
    if "://" in raw:
        return raw
    return f"https://{raw}"
