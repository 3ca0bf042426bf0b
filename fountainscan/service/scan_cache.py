"""Short-lived cache of scan snapshots for later display.

Entries are keyed by the host (tab id, session id, ...) and expire after a
fixed retention window. Expired entries are dropped lazily on read and in
bulk by ``purge_expired``.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from ..engine.models import ScanResult

logger = logging.getLogger(__name__)

DEFAULT_RETENTION_SECONDS = 60 * 60


@dataclass(frozen=True)
class ScanSnapshot:
    """A scan result with the page it belongs to and when it was taken."""

    url: str
    domain: str
    result: ScanResult
    timestamp: float

    def is_expired(self, retention_seconds: float, now: float) -> bool:
        return now - self.timestamp >= retention_seconds

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "domain": self.domain,
            "analysis": self.result.to_dict(),
            "timestamp": self.timestamp,
        }


class ScanCache:
    """In-memory snapshot store with a retention window."""

    def __init__(
        self,
        retention_seconds: float = DEFAULT_RETENTION_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.retention_seconds = retention_seconds
        self._clock = clock
        self._entries: Dict[str, ScanSnapshot] = {}
        self._lock = threading.RLock()

    def put(self, key: str, url: str, domain: str, result: ScanResult) -> ScanSnapshot:
        """Store (or replace) the snapshot for ``key``."""
        snapshot = ScanSnapshot(url=url, domain=domain, result=result, timestamp=self._clock())
        with self._lock:
            self._entries[str(key)] = snapshot
        return snapshot

    def get(self, key: str) -> Optional[ScanSnapshot]:
        """Get a snapshot if it exists and has not expired."""
        full_key = str(key)
        with self._lock:
            snapshot = self._entries.get(full_key)
            if snapshot is None:
                return None
            if snapshot.is_expired(self.retention_seconds, self._clock()):
                del self._entries[full_key]
                return None
            return snapshot

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(str(key), None) is not None

    def purge_expired(self) -> int:
        """Remove expired snapshots. Returns number removed."""
        now = self._clock()
        with self._lock:
            expired = [
                key
                for key, snapshot in self._entries.items()
                if snapshot.is_expired(self.retention_seconds, now)
            ]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.info("Cleaned up %s old scan results", len(expired))
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
