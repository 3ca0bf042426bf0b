"""Scan input/output records."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..constants import ScanStatus
from ..utils.domains import extract_hostname

MAX_CONTENT_LENGTH = 5000


@dataclass(frozen=True)
class ScanInput:
    """A page to score: absolute URL, hostname, and lowercased page text."""

    url: str
    domain: str
    content: str = ""

    def __post_init__(self):
        object.__setattr__(self, "url", str(self.url or ""))
        object.__setattr__(self, "domain", str(self.domain or "").strip().lower())
        object.__setattr__(self, "content", str(self.content or "").lower())

    @classmethod
    def from_page(
        cls,
        url: str,
        content: str | None = None,
        *,
        max_content_length: int = MAX_CONTENT_LENGTH,
    ) -> "ScanInput":
        """Build an input from a raw URL and page text (collapsed and bounded)."""
        text = " ".join(str(content or "").split()).lower()
        if max_content_length and max_content_length > 0:
            text = text[:max_content_length]
        return cls(url=url, domain=extract_hostname(url), content=text)


@dataclass(frozen=True)
class ScanResult:
    """Outcome of scoring one page."""

    score: int
    status: ScanStatus
    issues: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "issues", tuple(self.issues))

    @property
    def is_safe(self) -> bool:
        return self.status == ScanStatus.SAFE

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "status": self.status.value,
            "issues": list(self.issues),
        }

    @classmethod
    def from_dict(cls, data: dict | None) -> "ScanResult | None":
        """Rebuild a result from a serialized payload; None if it is unusable."""
        if not isinstance(data, dict):
            return None
        try:
            score = int(data.get("score"))
        except (TypeError, ValueError):
            return None
        status = data.get("status")
        if status not in {s.value for s in ScanStatus}:
            return None
        issues = data.get("issues") or []
        if not isinstance(issues, (list, tuple)):
            return None
        return cls(score=score, status=ScanStatus(status), issues=tuple(str(i) for i in issues))
