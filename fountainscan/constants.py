"""Centralized constants for FountainScan.

This module contains enums and constants used across multiple modules
to ensure consistency and reduce duplication.
"""

from enum import Enum


class ScanStatus(str, Enum):
    """Classification of a scanned page."""

    SAFE = "safe"
    WARNING = "warning"
    DANGER = "danger"

    @classmethod
    def from_string(cls, value: str | None) -> "ScanStatus":
        """Convert string status to enum, defaulting to SAFE."""
        if not value:
            return cls.SAFE
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.SAFE

    @property
    def rank(self) -> int:
        return STATUS_RANK[self.value]

    def __str__(self) -> str:
        return self.value


STATUS_RANK = {
    "danger": 2,
    "warning": 1,
    "safe": 0,
    None: 0,
    "": 0,
}


def status_escalated(current: str | None, previous: str | None) -> bool:
    """Check if a status has escalated (gotten worse)."""
    return ScanStatus.from_string(current).rank > ScanStatus.from_string(previous).rank
