"""
In-memory cache with a per-entry time to live.
Expired entries are removed the first time a read finds them.
"""
import time
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional


@dataclass
class CacheEntry:
    value: Any
    expires_at_ms: int


class ResultCache:
    """String-keyed store shared by the bounds, towns and search lookups."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def get(self, key: str) -> Optional[Any]:
        """Returns the cached value, or None if missing or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and self._now_ms() < entry.expires_at_ms:
                return entry.value
            self._entries.pop(key, None)
            return None

    def set(self, key: str, value: Any, ttl_minutes: float) -> None:
        expires_at_ms = self._now_ms() + int(ttl_minutes * 60 * 1000)
        with self._lock:
            self._entries[key] = CacheEntry(value=value, expires_at_ms=expires_at_ms)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
