"""Per-key rescan cooldown."""

import threading
import time
from typing import Callable, Dict

DEFAULT_COOLDOWN_SECONDS = 2.0


class ScanThrottle:
    """Rejects a rescan of the same key inside the cooldown window."""

    def __init__(
        self,
        cooldown_seconds: float = DEFAULT_COOLDOWN_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.cooldown_seconds = cooldown_seconds
        self._clock = clock
        self._last: Dict[str, float] = {}
        self._lock = threading.Lock()

    def allow(self, key: str, *, force: bool = False) -> bool:
        """Record an attempt for ``key``; False if it is inside the cooldown."""
        now = self._clock()
        with self._lock:
            last = self._last.get(key)
            if not force and last is not None and (now - last) < self.cooldown_seconds:
                return False
            self._last[key] = now
            return True

    def forget(self, key: str) -> None:
        with self._lock:
            self._last.pop(key, None)

    def purge_stale(self) -> int:
        """Drop keys whose cooldown has already elapsed."""
        now = self._clock()
        with self._lock:
            stale = [k for k, last in self._last.items() if (now - last) >= self.cooldown_seconds]
            for key in stale:
                del self._last[key]
        return len(stale)
