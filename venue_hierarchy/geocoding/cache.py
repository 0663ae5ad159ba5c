"""
Geocode response cache.

A read-through/write-through side channel in front of the geocoder. Entries
expire after a fixed TTL. The term graph, not this cache, is the system of
record for resolved hierarchies.
"""

from __future__ import annotations

import hashlib
import re
import threading
import time
from collections.abc import Callable
from typing import Generic, TypeVar

T = TypeVar("T")

_WHITESPACE_RE = re.compile(r"\s+")


def cache_key(address: str) -> str:
    """Deterministic cache key for a free-text address."""
    normalized = _WHITESPACE_RE.sub(" ", address.strip().lower())
    return "geocode_" + hashlib.sha1(normalized.encode("utf-8")).hexdigest()


class TTLCache(Generic[T]):
    """Thread-safe in-process cache with a fixed time-to-live per entry."""

    def __init__(
        self,
        ttl_seconds: float = 3600,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[float, T]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> T | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: T) -> None:
        if self.ttl_seconds <= 0:
            return
        with self._lock:
            now = self._clock()
            self._purge_expired(now)
            self._entries[key] = (now + self.ttl_seconds, value)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def _purge_expired(self, now: float) -> None:
        expired = [k for k, (expires_at, _) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]
