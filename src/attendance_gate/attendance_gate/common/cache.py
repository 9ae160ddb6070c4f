from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from .datetime_utils import epoch_seconds


def cache_key(prefix: str, *parts: object) -> str:
    return ":".join([prefix, *(str(p) for p in parts)])


@dataclass
class _Entry:
    value: Any
    expires_at: float


class TTLCache:
    """Small in-process cache with an explicit TTL.

    Instances are injected into services; nothing in the decision core
    caches. ``clock`` returns epoch seconds and exists so tests can drive
    expiry without sleeping.
    """

    def __init__(self, ttl_seconds: float, *, clock: Optional[Callable[[], float]] = None):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self._ttl = float(ttl_seconds)
        self._clock = clock or epoch_seconds
        self._items: Dict[str, _Entry] = {}
        self._lock = threading.Lock()

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def get(self, key: str) -> Any:
        with self._lock:
            entry = self._items.get(key)
            if entry is None:
                return None
            if self._clock() > entry.expires_at:
                del self._items[key]
                return None
            return entry.value

    def set(self, key: str, value: Any, *, ttl_seconds: Optional[float] = None) -> None:
        ttl = self._ttl if ttl_seconds is None else float(ttl_seconds)
        with self._lock:
            self._items[key] = _Entry(value=value, expires_at=self._clock() + ttl)

    def invalidate(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)

    def invalidate_prefix(self, prefix: str) -> None:
        with self._lock:
            for key in [k for k in self._items if k.startswith(prefix)]:
                del self._items[key]

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def cleanup(self) -> int:
        """Drop expired entries, returning how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [k for k, e in self._items.items() if now > e.expires_at]
            for key in expired:
                del self._items[key]
        return len(expired)

    def __len__(self) -> int:
        return len(self._items)
