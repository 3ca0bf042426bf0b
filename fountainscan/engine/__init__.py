"""Heuristic scoring and domain-list engine."""

from .blocking import BlockRule, compile_blocking_rules
from .classifier import DANGER_THRESHOLD, WARNING_THRESHOLD, classify
from .lists import ListMembership, resolve
from .matcher import domain_matches, first_match
from .models import ScanInput, ScanResult
from .rules import DEFAULT_RULE_SET, KeywordCategory, RuleKind, RuleSet, RuleWeights
from .scorer import HeuristicScorer

__all__ = [
    "BlockRule",
    "compile_blocking_rules",
    "DANGER_THRESHOLD",
    "WARNING_THRESHOLD",
    "classify",
    "ListMembership",
    "resolve",
    "domain_matches",
    "first_match",
    "ScanInput",
    "ScanResult",
    "DEFAULT_RULE_SET",
    "KeywordCategory",
    "RuleKind",
    "RuleSet",
    "RuleWeights",
    "HeuristicScorer",
]
