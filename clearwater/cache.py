# clearwater/cache.py: in-memory TTL cache shared by geocode, system and report lookups
import logging
import threading
import time
from typing import Any, Callable, Hashable

logger = logging.getLogger(__name__)

DEFAULT_TTL = 24 * 60 * 60  # seconds
DEFAULT_MAX_ENTRIES = 1000


class TTLCache:
    """Bounded key/value store with lazy expiry.

    * ``get`` treats entries older than ``ttl`` as missing and drops them.
    * ``set`` on a full cache first evicts the single entry with the oldest
      timestamp (a full scan, not LRU: reads do not refresh age).

    Single-process only. The lock makes check-then-evict-then-write atomic for
    the thread pool used by report fetches; it does nothing across processes.
    """

    def __init__(self, ttl: float = DEFAULT_TTL, max_entries: int = DEFAULT_MAX_ENTRIES,
                 clock: Callable[[], float] = time.time):
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        self.ttl = ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries: dict[Hashable, tuple[Any, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: Hashable, default: Any = None) -> Any:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return default
            value, stored_at = entry
            if self._clock() - stored_at > self.ttl:
                del self._entries[key]
                logger.debug("cache expired: %s", key)
                return default
            return value

    def set(self, key: Hashable, value: Any) -> None:
        with self._lock:
            if key not in self._entries and len(self._entries) >= self.max_entries:
                oldest = min(self._entries, key=lambda k: self._entries[k][1])
                del self._entries[oldest]
                logger.debug("cache evicted: %s", oldest)
            self._entries[key] = (value, self._clock())

    def delete(self, key: Hashable) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: Hashable) -> bool:
        sentinel = object()
        return self.get(key, sentinel) is not sentinel

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
