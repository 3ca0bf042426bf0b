"""Whitelist/blacklist membership resolution."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .matcher import any_match


@dataclass(frozen=True)
class ListMembership:
    """Which domain lists a domain belongs to."""

    is_whitelisted: bool = False
    is_blacklisted: bool = False


def resolve(
    domain: str,
    whitelist: Sequence[str] | None,
    blacklist: Sequence[str] | None,
) -> ListMembership:
    """Report whitelist and blacklist membership for ``domain``.

    Both flags are always computed; callers decide precedence.
    """
    return ListMembership(
        is_whitelisted=any_match(domain, whitelist),
        is_blacklisted=any_match(domain, blacklist),
    )
