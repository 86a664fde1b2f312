"""In-process cache for paginated product listings.

Entries expire a fixed time after they were stored (absolute expiration).
Writes to the products table do not touch this cache, so a listing can be
up to one TTL stale after a mutation.
"""
import threading
import time
from typing import Callable, Generic, NamedTuple, Optional, TypeVar

T = TypeVar("T")

DEFAULT_TTL_SECONDS = 300


class ProductListKey(NamedTuple):
    page_number: int
    page_size: int
    sort_field: str
    ascending: bool


class ProductListCache(Generic[T]):

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[ProductListKey, tuple[float, T]] = {}
        self._lock = threading.Lock()

    def get(self, key: ProductListKey) -> Optional[T]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    def set(self, key: ProductListKey, value: T) -> None:
        with self._lock:
            now = self._clock()
            self._prune(now)
            self._entries[key] = (now + self.ttl_seconds, value)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def _prune(self, now: float) -> None:
        expired = [k for k, (expires_at, _) in self._entries.items() if now >= expires_at]
        for k in expired:
            del self._entries[k]

    def __len__(self) -> int:
        with self._lock:
            self._prune(self._clock())
            return len(self._entries)

    def __contains__(self, key: ProductListKey) -> bool:
        return self.get(key) is not None
