"""Score-to-status classification."""

from __future__ import annotations

from ..constants import ScanStatus

DANGER_THRESHOLD = 70
WARNING_THRESHOLD = 40


def classify(score: int) -> ScanStatus:
    """Map a numeric risk score to a status."""
    if score >= DANGER_THRESHOLD:
        return ScanStatus.DANGER
    if score >= WARNING_THRESHOLD:
        return ScanStatus.WARNING
    return ScanStatus.SAFE
