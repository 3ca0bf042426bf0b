"""Heuristic risk scoring for visited pages."""

from __future__ import annotations

import logging
from typing import Sequence

from ..constants import ScanStatus
from ..utils.domains import url_scheme
from .classifier import classify
from .lists import ListMembership, resolve
from .models import ScanInput, ScanResult
from .rules import DEFAULT_RULE_SET, RuleSet

logger = logging.getLogger(__name__)

WHITELISTED_ISSUE = "Domain is whitelisted"
ANALYSIS_ERROR_ISSUE = "Error during analysis"


class HeuristicScorer:
    """Scores a page by summing the weights of every heuristic rule that fires."""

    def __init__(self, rule_set: RuleSet | None = None):
        self.rules = rule_set or DEFAULT_RULE_SET

    def score(
        self,
        scan: ScanInput,
        whitelist: Sequence[str] | None = None,
        blacklist: Sequence[str] | None = None,
    ) -> ScanResult:
        """Score a page against read-only snapshots of the domain lists.

        A whitelisted domain is always safe, whatever else matches. A check
        that fails is skipped; the remaining checks still run and a single
        "Error during analysis" issue is added instead of raising.
        """
        score = 0
        issues: list[str] = []
        failed = False

        try:
            membership = resolve(scan.domain, whitelist, blacklist)
        except Exception as exc:
            logger.warning("List resolution failed for %s: %s", getattr(scan, "url", scan), exc)
            membership = ListMembership()
            failed = True

        if membership.is_whitelisted:
            return ScanResult(score=0, status=ScanStatus.SAFE, issues=(WHITELISTED_ISSUE,))

        checks = (
            self._check_https,
            self._check_tld,
            self._check_shortener,
            self._check_blacklist,
            self._check_keyword_categories,
            self._check_generic_patterns,
        )
        for check in checks:
            try:
                points, reasons = check(scan, membership)
            except Exception as exc:
                logger.warning(
                    "Heuristic check %s failed for %s: %s",
                    check.__name__,
                    getattr(scan, "url", scan),
                    exc,
                )
                failed = True
                continue
            score += points
            issues.extend(reasons)

        if failed:
            issues.append(ANALYSIS_ERROR_ISSUE)

        return ScanResult(score=score, status=classify(score), issues=tuple(issues))

    def _check_https(self, scan: ScanInput, membership: ListMembership) -> tuple[int, list[str]]:
        """Penalize pages not served over HTTPS."""
        if url_scheme(scan.url) != "https":
            return self.rules.weights.https, ["No HTTPS encryption"]
        return 0, []

    def _check_tld(self, scan: ScanInput, membership: ListMembership) -> tuple[int, list[str]]:
        """Check for a low-trust TLD (first match only)."""
        for tld in self.rules.suspicious_tlds:
            if scan.domain.endswith(tld):
                return self.rules.weights.suspicious_tld, [f"Suspicious domain extension: {tld}"]
        return 0, []

    def _check_shortener(self, scan: ScanInput, membership: ListMembership) -> tuple[int, list[str]]:
        if any(shortener in scan.domain for shortener in self.rules.url_shorteners):
            return self.rules.weights.url_shortener, ["URL shortener detected"]
        return 0, []

    def _check_blacklist(self, scan: ScanInput, membership: ListMembership) -> tuple[int, list[str]]:
        if membership.is_blacklisted:
            return self.rules.weights.blacklist_hit, ["Domain is blacklisted"]
        return 0, []

    def _check_keyword_categories(
        self, scan: ScanInput, membership: ListMembership
    ) -> tuple[int, list[str]]:
        """Count category keywords found in the URL or page text."""
        score = 0
        reasons = []

        url_lower = scan.url.lower()
        for category in self.rules.keyword_categories:
            found = category.matches(scan.content, url_lower)
            if found:
                score += len(found) * self.rules.weights.keyword
                reasons.append(f"{category.name} scam indicators: {', '.join(found)}")

        return score, reasons

    def _check_generic_patterns(
        self, scan: ScanInput, membership: ListMembership
    ) -> tuple[int, list[str]]:
        """Check for ungrouped phishing phrases."""
        url_lower = scan.url.lower()
        found = [
            pattern
            for pattern in self.rules.generic_patterns
            if pattern in scan.content or pattern in url_lower
        ]
        if not found:
            return 0, []
        return len(found) * self.rules.weights.generic, [f"Phishing indicators: {', '.join(found)}"]
