"""Configuration management for FountainScan."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml
from dotenv import load_dotenv

from .engine.rules import (
    DEFAULT_GENERIC_SUSPICIOUS_PATTERNS,
    DEFAULT_KEYWORD_CATEGORIES,
    DEFAULT_RULE_WEIGHTS,
    DEFAULT_SUSPICIOUS_TLDS,
    DEFAULT_URL_SHORTENERS,
    KeywordCategory,
    RuleKind,
    RuleSet,
    RuleWeights,
)
from .engine.models import MAX_CONTENT_LENGTH
from .utils.lists import read_domain_list

logger = logging.getLogger(__name__)

WHITELIST_FILENAME = "whitelist.txt"
BLACKLIST_FILENAME = "blacklist.txt"
HEURISTICS_FILENAME = "heuristics.yaml"


@dataclass
class Config:
    """Application configuration loaded from environment."""

    # API server
    api_host: str = "127.0.0.1"
    api_port: int = 5000

    # Host behaviour
    alerts_enabled: bool = True
    blocking_enabled: bool = False
    auto_blacklist_reports: bool = True
    scan_retention_seconds: int = 3600
    scan_cooldown_seconds: float = 2.0
    scan_cleanup_interval_seconds: int = 3600
    max_content_length: int = MAX_CONTENT_LENGTH

    # Paths
    data_dir: Path = field(default_factory=lambda: Path("./data"))
    config_dir: Path = field(default_factory=lambda: Path("./config"))

    # Loaded lists (file order)
    whitelist: list[str] = field(default_factory=list)
    blacklist: list[str] = field(default_factory=list)

    # Heuristics (override via config/heuristics.yaml)
    rule_weights: dict[RuleKind, int] = field(default_factory=lambda: dict(DEFAULT_RULE_WEIGHTS))
    suspicious_tlds: list[str] = field(default_factory=lambda: list(DEFAULT_SUSPICIOUS_TLDS))
    url_shorteners: list[str] = field(default_factory=lambda: list(DEFAULT_URL_SHORTENERS))
    keyword_categories: list[tuple[str, list[str]]] = field(
        default_factory=lambda: [(name, list(words)) for name, words in DEFAULT_KEYWORD_CATEGORIES]
    )
    generic_patterns: list[str] = field(
        default_factory=lambda: list(DEFAULT_GENERIC_SUSPICIOUS_PATTERNS)
    )

    def __post_init__(self):
        """Ensure paths exist and load lists."""
        self.data_dir = Path(self.data_dir)
        self.config_dir = Path(self.config_dir)

        self.data_dir.mkdir(parents=True, exist_ok=True)

        self._load_lists()

    @property
    def whitelist_path(self) -> Path:
        return self.config_dir / WHITELIST_FILENAME

    @property
    def blacklist_path(self) -> Path:
        return self.config_dir / BLACKLIST_FILENAME

    @property
    def database_path(self) -> Path:
        return self.data_dir / "fountainscan.db"

    def _load_lists(self):
        """Load whitelist and blacklist from config files, if present."""
        if self.whitelist_path.exists():
            self.whitelist = read_domain_list(self.whitelist_path)
        if self.blacklist_path.exists():
            self.blacklist = read_domain_list(self.blacklist_path)

    def rule_set(self) -> RuleSet:
        """Build the immutable rule set handed to the scorer."""
        return RuleSet(
            weights=RuleWeights(self.rule_weights),
            suspicious_tlds=tuple(self.suspicious_tlds),
            url_shorteners=tuple(self.url_shorteners),
            keyword_categories=tuple(
                KeywordCategory(name, tuple(words)) for name, words in self.keyword_categories
            ),
            generic_patterns=tuple(self.generic_patterns),
        )


def _load_heuristics(config_dir: Path) -> dict:
    """Load heuristic overrides from config/heuristics.yaml (optional)."""
    path = Path(config_dir or ".") / HEURISTICS_FILENAME
    if not path.exists():
        return {}

    try:
        data = yaml.safe_load(path.read_text()) or {}
    except Exception as exc:
        logger.warning("Failed to parse %s: %s", HEURISTICS_FILENAME, exc)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring %s: expected a mapping at top level", HEURISTICS_FILENAME)
        return {}

    def _coerce_weights(raw) -> dict[RuleKind, int]:
        weights = dict(DEFAULT_RULE_WEIGHTS)
        if not isinstance(raw, dict):
            return weights
        for key, value in raw.items():
            try:
                kind = RuleKind(str(key).strip().lower())
                weights[kind] = int(value)
            except (ValueError, TypeError):
                logger.warning("Ignoring unknown or invalid weight %r=%r", key, value)
        return weights

    def _coerce_strings(raw, default):
        if not isinstance(raw, (list, tuple)):
            return list(default)
        items = [str(item).strip().lower() for item in raw if str(item or "").strip()]
        return items or list(default)

    def _coerce_categories(raw):
        default = [(name, list(words)) for name, words in DEFAULT_KEYWORD_CATEGORIES]
        categories: list[tuple[str, list[str]]] = []
        for entry in raw or []:
            if not isinstance(entry, dict):
                continue
            name = str(entry.get("name") or "").strip()
            if not name:
                continue
            keywords = [
                str(k).strip().lower()
                for k in entry.get("keywords") or []
                if str(k or "").strip()
            ]
            if keywords:
                categories.append((name, keywords))
        return categories or default

    return {
        "rule_weights": _coerce_weights(data.get("weights")),
        "suspicious_tlds": _coerce_strings(data.get("suspicious_tlds"), DEFAULT_SUSPICIOUS_TLDS),
        "url_shorteners": _coerce_strings(data.get("url_shorteners"), DEFAULT_URL_SHORTENERS),
        "keyword_categories": _coerce_categories(data.get("keyword_categories")),
        "generic_patterns": _coerce_strings(
            data.get("generic_patterns"), DEFAULT_GENERIC_SUSPICIOUS_PATTERNS
        ),
    }


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() == "true"


def load_config() -> Config:
    """Load configuration from environment variables."""
    load_dotenv()

    config_dir = Path(os.getenv("CONFIG_DIR", "./config"))
    heuristics = _load_heuristics(config_dir)

    return Config(
        api_host=os.getenv("API_HOST", "127.0.0.1"),
        api_port=int(os.getenv("API_PORT", "5000")),
        alerts_enabled=_env_flag("ALERTS_ENABLED", "true"),
        blocking_enabled=_env_flag("BLOCKING_ENABLED", "false"),
        auto_blacklist_reports=_env_flag("AUTO_BLACKLIST_REPORTS", "true"),
        scan_retention_seconds=int(os.getenv("SCAN_RETENTION_SECONDS", "3600")),
        scan_cooldown_seconds=float(os.getenv("SCAN_COOLDOWN_SECONDS", "2")),
        scan_cleanup_interval_seconds=int(os.getenv("SCAN_CLEANUP_INTERVAL_SECONDS", "3600")),
        max_content_length=int(os.getenv("MAX_CONTENT_LENGTH", str(MAX_CONTENT_LENGTH))),
        data_dir=Path(os.getenv("DATA_DIR", "./data")),
        config_dir=config_dir,
        **heuristics,
    )


def validate_config(config: Config) -> list[str]:
    """Validate configuration and return list of error messages."""
    errors: list[str] = []
    if not 0 < int(config.api_port) < 65536:
        errors.append(f"API_PORT out of range: {config.api_port}")
    if config.scan_retention_seconds <= 0:
        errors.append("SCAN_RETENTION_SECONDS must be positive")
    if config.scan_cooldown_seconds < 0:
        errors.append("SCAN_COOLDOWN_SECONDS must not be negative")
    if config.max_content_length <= 0:
        errors.append("MAX_CONTENT_LENGTH must be positive")
    negative = [kind.value for kind, weight in config.rule_weights.items() if weight < 0]
    if negative:
        errors.append(f"Rule weights must not be negative: {', '.join(negative)}")

    overlap = [entry for entry in config.blacklist if entry in set(config.whitelist)]
    if overlap:
        logger.info("Entries on both lists (whitelist takes precedence): %s", ", ".join(overlap))

    return errors
