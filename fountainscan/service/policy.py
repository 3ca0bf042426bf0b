"""Host-side decisions made from a scan result: notify, block, blacklist."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from ..constants import ScanStatus
from ..engine.blocking import BLOCKED_PAGE, encode_component
from ..engine.matcher import any_match
from ..engine.models import ScanResult
from ..utils.domains import extract_hostname

logger = logging.getLogger(__name__)

NOTIFICATION_TITLE = "FountainScan Security Alert"
NOTIFICATION_CONTEXT_ISSUES = 2

# Request-time quick scan (URL only, no page content).
PRESCREEN_PATTERNS: tuple[str, ...] = (
    "free-scholarship",
    "guaranteed-scholarship",
    "instant-scholarship",
    "scholarship-winner",
    "urgent-scholarship",
    "easy-cash",
    "instant-money",
    "guaranteed-loan",
    "quick-loan",
    "work-from-home",
    "get-rich-quick",
    "nin",
    "bvn",
    "bank-verification-number",
    "payment-verification",
)
PRESCREEN_POINTS = 2
PRESCREEN_DANGER_SCORE = 4


@dataclass(frozen=True)
class ScanSettings:
    """User settings that gate notifications and blocking."""

    alerts_enabled: bool = True
    blocking_enabled: bool = False


@dataclass(frozen=True)
class Notification:
    """A user-facing alert for a risky page."""

    title: str
    message: str
    context: str
    priority: int

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "message": self.message,
            "context": self.context,
            "priority": self.priority,
        }


@dataclass(frozen=True)
class PrescreenResult:
    score: int
    found_patterns: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_dangerous(self) -> bool:
        return self.score >= PRESCREEN_DANGER_SCORE

    @property
    def reason(self) -> str:
        return f"Suspicious patterns detected: {', '.join(self.found_patterns)}"


def _coerce_result(result: object) -> ScanResult | None:
    """Accept a ScanResult or its serialized form; None if neither is usable."""
    if isinstance(result, dict):
        return ScanResult.from_dict(result)
    if isinstance(result, ScanResult) and isinstance(result.status, ScanStatus):
        return result
    return None


def should_notify(settings: ScanSettings, result: ScanResult | dict | None) -> bool:
    """Alert on anything that is not safe, if alerts are enabled."""
    result = _coerce_result(result)
    if result is None:
        return False
    return settings.alerts_enabled and not result.is_safe


def build_notification(domain: str, result: ScanResult | dict | None) -> Notification | None:
    """Build the alert for a warning/danger result (None for safe or unusable results)."""
    result = _coerce_result(result)
    if result is None:
        return None
    if result.status == ScanStatus.DANGER:
        message = f"HIGH RISK: {domain} - Score: {result.score}"
        priority = 2
    elif result.status == ScanStatus.WARNING:
        message = f"SUSPICIOUS: {domain} - Score: {result.score}"
        priority = 1
    else:
        return None
    context = ", ".join(result.issues[:NOTIFICATION_CONTEXT_ISSUES])
    return Notification(title=NOTIFICATION_TITLE, message=message, context=context, priority=priority)


def should_block(
    settings: ScanSettings,
    result: ScanResult | dict | None,
    domain: str,
    whitelist: Sequence[str] | None = None,
) -> bool:
    """Block dangerous pages when blocking is on, never a whitelisted domain."""
    result = _coerce_result(result)
    if result is None or not settings.blocking_enabled:
        return False
    if result.status != ScanStatus.DANGER:
        return False
    return not any_match(domain, whitelist)


def blocked_page_url(url: str, reason: str) -> str:
    """Redirect target shown instead of a blocked page."""
    return f"{BLOCKED_PAGE}?url={encode_component(url or '')}&reason={encode_component(reason or '')}"


def block_reason(result: ScanResult) -> str:
    return ", ".join(result.issues) or "Domain is blacklisted"


def add_to_blacklist(url_or_domain: str, blacklist: Sequence[str]) -> tuple[list[str], bool]:
    """
    Return ``blacklist`` with the hostname of ``url_or_domain`` appended.

    Nothing is added when an existing entry already covers the host. The
    input sequence is never mutated.
    """
    entries = list(blacklist or ())
    host = extract_hostname(url_or_domain)
    if not host:
        return entries, False
    if any_match(host, entries):
        return entries, False
    entries.append(host)
    logger.info("Added %s to blacklist", host)
    return entries, True


def prescreen_url(url: str) -> PrescreenResult:
    """Quick URL-only pattern scan used before a page loads."""
    lower_url = (url or "").lower()
    found = tuple(p for p in PRESCREEN_PATTERNS if p in lower_url)
    return PrescreenResult(score=len(found) * PRESCREEN_POINTS, found_patterns=found)
