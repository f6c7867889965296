from __future__ import annotations

import hashlib
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass
class CacheEntry(Generic[T]):
    value: T
    expires_at: float


class TTLCache(Generic[T]):
    """In-memory TTL cache; the least recently used entry goes first when full."""

    def __init__(self, *, ttl_s: float, max_size: int) -> None:
        self.ttl_s = ttl_s
        self.max_size = max_size
        self._store: "OrderedDict[str, CacheEntry[T]]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def get(self, key: str) -> Optional[T]:
        now = time.monotonic()
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            if entry.expires_at < now:
                del self._store[key]
                return None
            self._store.move_to_end(key)
            return entry.value

    def set(self, key: str, value: T) -> None:
        if self.max_size <= 0:
            return
        now = time.monotonic()
        with self._lock:
            self._store.pop(key, None)
            while len(self._store) >= self.max_size:
                self._store.popitem(last=False)
            self._store[key] = CacheEntry(value=value, expires_at=now + self.ttl_s)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()


def query_cache_key(*parts: object) -> str:
    # Overpass queries are long; key on a digest instead of the raw text
    raw = "\n".join(str(part) for part in parts)
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()
