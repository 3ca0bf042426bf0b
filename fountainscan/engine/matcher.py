"""Domain matching against whitelist/blacklist entries."""

from __future__ import annotations

from typing import Iterable

from ..utils.domains import normalize_list_domain

WILDCARD_PREFIX = "*."


def domain_matches(candidate: str, pattern: str) -> bool:
    """
    Return True if ``candidate`` is covered by the list entry ``pattern``.

    Both sides are normalized (scheme and leading "www." stripped,
    lowercased). A bare entry matches itself and any subdomain; a
    ``*.example.com`` entry matches ``example.com`` and any subdomain.
    Anything that is not a usable string simply fails to match.
    """
    current = normalize_list_domain(candidate)
    entry = normalize_list_domain(pattern)
    if not current or not entry:
        return False

    if current == entry:
        return True

    if current.endswith("." + entry):
        return True

    if entry.startswith(WILDCARD_PREFIX):
        base = entry[len(WILDCARD_PREFIX):]
        if not base:
            return False
        return current == base or current.endswith("." + base)

    return False


def first_match(candidate: str, patterns: Iterable[str] | None) -> str | None:
    """Return the first entry in ``patterns`` matching ``candidate``."""
    for pattern in patterns or ():
        if domain_matches(candidate, pattern):
            return pattern
    return None


def any_match(candidate: str, patterns: Iterable[str] | None) -> bool:
    return first_match(candidate, patterns) is not None
