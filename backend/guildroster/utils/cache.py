"""In-memory single-slot cache with TTL expiration.

Holds one value (the full member listing) for the lifetime of the process.
The entry is an immutable (payload, computed_at) pair swapped under a lock,
so a reader never sees a payload from one refresh paired with the timestamp
of another. TTL: 5 minutes by default.
"""

import threading
import time
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

T = TypeVar("T")

Clock = Callable[[], float]

DEFAULT_TTL_SECONDS = 300.0


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    payload: T
    computed_at: float


class SnapshotCache(Generic[T]):
    """TTL-aware cache holding a single snapshot.

    A value stored at ``T`` is returned unchanged for every ``get`` in
    ``[T, T + ttl)`` and treated as absent afterwards. Expiry does not remove
    the entry; the next ``put`` replaces it.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Clock = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self._ttl = float(ttl_seconds)
        self._clock = clock
        self._entry: CacheEntry[T] | None = None
        self._lock = threading.Lock()

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def now(self) -> float:
        """Current time according to the injected clock."""
        return self._clock()

    def get(self, now: float | None = None) -> T | None:
        """Return the stored payload if it is younger than the TTL."""
        if now is None:
            now = self._clock()
        with self._lock:
            entry = self._entry
        if entry is None or now - entry.computed_at >= self._ttl:
            return None
        return entry.payload

    def put(self, payload: T, now: float | None = None) -> None:
        """Replace the stored payload and its timestamp as one unit."""
        if now is None:
            now = self._clock()
        entry = CacheEntry(payload=payload, computed_at=now)
        with self._lock:
            self._entry = entry

    def age(self, now: float | None = None) -> float | None:
        """Seconds since the last put, or None if never populated."""
        if now is None:
            now = self._clock()
        with self._lock:
            entry = self._entry
        if entry is None:
            return None
        return now - entry.computed_at

    def clear(self) -> None:
        with self._lock:
            self._entry = None
