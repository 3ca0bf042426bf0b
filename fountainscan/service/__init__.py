"""Host-side services around the scoring engine."""

from .list_store import DomainListStore, ListKind, ListSnapshot
from .policy import ScanSettings
from .scan_cache import ScanCache, ScanSnapshot
from .scanner import ScanOutcome, ScanService
from .throttle import ScanThrottle

__all__ = [
    "DomainListStore",
    "ListKind",
    "ListSnapshot",
    "ScanSettings",
    "ScanCache",
    "ScanSnapshot",
    "ScanOutcome",
    "ScanService",
    "ScanThrottle",
]
