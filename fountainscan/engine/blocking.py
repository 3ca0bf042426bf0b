"""Compile domain lists into request-blocking rules."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence
from urllib.parse import quote

from ..utils.domains import normalize_list_domain
from .matcher import WILDCARD_PREFIX, any_match

BLOCKED_PAGE = "/blocked.html"
RULES_PER_ENTRY = 2


def encode_component(value: str) -> str:
    """Percent-encode a query value the way browsers' encodeURIComponent does."""
    return quote(value, safe="-_.!~*'()")


@dataclass(frozen=True)
class BlockRule:
    """A redirect rule for the browser's declarative request-blocking layer."""

    id: int
    url_pattern: str
    redirect_target: str
    priority: int = 1
    resource_types: tuple[str, ...] = field(default=("main_frame",))

    def to_dict(self) -> dict:
        """Serialize to the dynamic-rule wire format."""
        return {
            "id": self.id,
            "priority": self.priority,
            "action": {
                "type": "redirect",
                "redirect": {"extensionPath": self.redirect_target},
            },
            "condition": {
                "urlFilter": self.url_pattern,
                "resourceTypes": list(self.resource_types),
            },
        }


def compile_blocking_rules(
    blacklist: Sequence[str] | None,
    whitelist: Sequence[str] | None = None,
) -> list[BlockRule]:
    """
    Build redirect rules for every blacklist entry not covered by the whitelist.

    Each entry at position ``i`` owns rule ids ``2*i + 1`` (bare or wildcard
    pattern) and ``2*i + 2`` (``www.`` variant, skipped for wildcards), so ids
    are stable for a given list and never collide. The host is expected to
    replace its whole rule set with the result.
    """
    rules: list[BlockRule] = []
    for index, entry in enumerate(blacklist or ()):
        domain = normalize_list_domain(entry)
        if not domain:
            continue
        if any_match(domain, whitelist):
            continue

        target = f"{BLOCKED_PAGE}?url={encode_component(str(entry).strip())}"
        base_id = index * RULES_PER_ENTRY + 1

        if domain.startswith(WILDCARD_PREFIX):
            base = domain[len(WILDCARD_PREFIX):]
            if not base:
                continue
            rules.append(BlockRule(id=base_id, url_pattern=f"*://*.{base}/*", redirect_target=target))
            continue

        rules.append(BlockRule(id=base_id, url_pattern=f"*://{domain}/*", redirect_target=target))
        rules.append(
            BlockRule(id=base_id + 1, url_pattern=f"*://www.{domain}/*", redirect_target=target)
        )
    return rules
