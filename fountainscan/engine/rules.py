"""Weighted heuristic rule catalogue."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Mapping


class RuleKind(str, Enum):
    """Kinds of heuristic rule that contribute to a score."""

    HTTPS = "https"
    SUSPICIOUS_TLD = "suspicious_tld"
    URL_SHORTENER = "url_shortener"
    BLACKLIST_HIT = "blacklist_hit"
    KEYWORD_CATEGORY = "keyword_category"
    GENERIC_SUSPICIOUS = "generic_suspicious"


DEFAULT_RULE_WEIGHTS: Mapping[RuleKind, int] = MappingProxyType({
    RuleKind.HTTPS: 10,
    RuleKind.SUSPICIOUS_TLD: 15,
    RuleKind.URL_SHORTENER: 10,
    RuleKind.BLACKLIST_HIT: 70,
    RuleKind.KEYWORD_CATEGORY: 10,  # per matched keyword
    RuleKind.GENERIC_SUSPICIOUS: 3,  # per matched phrase
})

DEFAULT_SUSPICIOUS_TLDS: tuple[str, ...] = (
    ".tk",
    ".ml",
    ".ga",
    ".cf",
    ".pw",
    ".top",
    ".click",
)

DEFAULT_URL_SHORTENERS: tuple[str, ...] = (
    "bit.ly",
    "tinyurl.com",
    "goo.gl",
    "t.co",
    "short.link",
)

DEFAULT_KEYWORD_CATEGORIES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("scholarship", (
        "free-scholarship",
        "guaranteed-scholarship",
        "instant-scholarship",
        "scholarship-winner",
    )),
    ("financial", (
        "instant-money",
        "guaranteed-loan",
        "easy-cash",
        "quick-loan",
        "nin",
        "bvn",
    )),
    ("government", (
        "npower",
        "jamb-result",
        "waec-result",
        "inec-recruitment",
        "nnpc-recruitment",
    )),
    ("urgency", (
        "urgent",
        "limited-time",
        "expires-soon",
        "act-now",
        "deadline-today",
    )),
)

DEFAULT_GENERIC_SUSPICIOUS_PATTERNS: tuple[str, ...] = (
    "verify-account",
    "update-information",
    "confirm-identity",
    "security-alert",
    "account-suspended",
    "click-here-now",
)


@dataclass(frozen=True)
class RuleWeights:
    """Per-rule weights. Unspecified kinds fall back to the defaults."""

    weights: Mapping[RuleKind, int] = field(default_factory=lambda: DEFAULT_RULE_WEIGHTS)

    def __post_init__(self):
        merged = dict(DEFAULT_RULE_WEIGHTS)
        for kind, value in dict(self.weights).items():
            merged[RuleKind(kind)] = int(value)
        object.__setattr__(self, "weights", MappingProxyType(merged))

    def __getitem__(self, kind: RuleKind) -> int:
        return self.weights[kind]

    @property
    def https(self) -> int:
        return self.weights[RuleKind.HTTPS]

    @property
    def suspicious_tld(self) -> int:
        return self.weights[RuleKind.SUSPICIOUS_TLD]

    @property
    def url_shortener(self) -> int:
        return self.weights[RuleKind.URL_SHORTENER]

    @property
    def blacklist_hit(self) -> int:
        return self.weights[RuleKind.BLACKLIST_HIT]

    @property
    def keyword(self) -> int:
        return self.weights[RuleKind.KEYWORD_CATEGORY]

    @property
    def generic(self) -> int:
        return self.weights[RuleKind.GENERIC_SUSPICIOUS]


@dataclass(frozen=True)
class KeywordCategory:
    """Named group of fraud-indicator keywords."""

    name: str
    keywords: tuple[str, ...]

    def __post_init__(self):
        seen: set[str] = set()
        ordered: list[str] = []
        for keyword in self.keywords:
            value = str(keyword or "").strip().lower()
            if value and value not in seen:
                seen.add(value)
                ordered.append(value)
        object.__setattr__(self, "keywords", tuple(ordered))

    def matches(self, *haystacks: str) -> list[str]:
        """Return keywords found as a substring of any haystack, in category order."""
        return [k for k in self.keywords if any(k in h for h in haystacks if h)]


@dataclass(frozen=True)
class RuleSet:
    """Static tables consumed by the heuristic scorer."""

    weights: RuleWeights = field(default_factory=RuleWeights)
    suspicious_tlds: tuple[str, ...] = DEFAULT_SUSPICIOUS_TLDS
    url_shorteners: tuple[str, ...] = DEFAULT_URL_SHORTENERS
    keyword_categories: tuple[KeywordCategory, ...] = field(
        default_factory=lambda: tuple(
            KeywordCategory(name, keywords) for name, keywords in DEFAULT_KEYWORD_CATEGORIES
        )
    )
    generic_patterns: tuple[str, ...] = DEFAULT_GENERIC_SUSPICIOUS_PATTERNS

    def __post_init__(self):
        tlds = []
        for tld in self.suspicious_tlds:
            value = str(tld or "").strip().lower()
            if not value:
                continue
            tlds.append(value if value.startswith(".") else f".{value}")
        object.__setattr__(self, "suspicious_tlds", tuple(tlds))
        object.__setattr__(
            self,
            "url_shorteners",
            tuple(s.strip().lower() for s in self.url_shorteners if s and s.strip()),
        )
        object.__setattr__(self, "keyword_categories", tuple(self.keyword_categories))
        object.__setattr__(
            self,
            "generic_patterns",
            tuple(p.strip().lower() for p in self.generic_patterns if p and p.strip()),
        )

    def with_weights(self, **overrides: int) -> "RuleSet":
        """Return a copy with selected weights replaced (keys are RuleKind values)."""
        merged = dict(self.weights.weights)
        for key, value in overrides.items():
            merged[RuleKind(key)] = value
        return replace(self, weights=RuleWeights(merged))


DEFAULT_RULE_SET = RuleSet()
