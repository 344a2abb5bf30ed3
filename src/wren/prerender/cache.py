"""Bounded, time-expiring cache for prerendered HTML.

Entries are evicted least-recently-used first once ``max_entries`` is
exceeded, and expire ``ttl`` seconds after insertion regardless of how
often they are read.

Misses are single-flight: concurrent ``get()`` calls for the same
missing key share one ``load()``.  The first caller (the leader) runs
the load; the others wait on an ``anyio.Event`` and receive the
leader's value or exception.  Different keys never wait on each other.

Thread safety:
    The entry store is guarded by a ``threading.Lock``.  In-flight
    tracking belongs to the event loop that runs ``get()``; share one
    cache per event loop.
"""

import threading
import time
from collections import OrderedDict
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import anyio


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """A stored value and the clock reading at insertion."""

    value: str
    inserted_at: float


class _Flight:
    """One in-progress load shared by every caller of a missing key."""

    __slots__ = ("done", "error", "finished", "value")

    def __init__(self) -> None:
        self.done = anyio.Event()
        self.value: str | None = None
        self.error: Exception | None = None
        self.finished = False


class PrerenderCache:
    """LRU + TTL cache with single-flight read-through.

    Usage::

        cache = PrerenderCache(max_entries=1000, ttl=900)
        html = await cache.get("/detail/42", lambda: read_html(path))
    """

    __slots__ = (
        "_clock",
        "_entries",
        "_generation",
        "_inflight",
        "_lock",
        "max_entries",
        "ttl",
    )

    def __init__(
        self,
        max_entries: int = 1000,
        ttl: float = 15 * 60.0,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries < 1:
            msg = "max_entries must be at least 1"
            raise ValueError(msg)
        if ttl <= 0:
            msg = "ttl must be positive"
            raise ValueError(msg)
        self.max_entries = max_entries
        self.ttl = ttl
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._inflight: dict[str, _Flight] = {}
        # Bumped by invalidate()/clear(); loads started earlier are not stored
        self._generation = 0

    def __len__(self) -> int:
        with self._lock:
            self._purge_expired()
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            entry = self._entries.get(key)  # type: ignore[call-overload]
            return entry is not None and not self._expired(entry)

    def _expired(self, entry: CacheEntry) -> bool:
        return self._clock() - entry.inserted_at >= self.ttl

    def _purge_expired(self) -> None:
        for key in [k for k, e in self._entries.items() if self._expired(e)]:
            del self._entries[key]

    def peek(self, key: str) -> str | None:
        """Return the cached value or ``None``. A hit refreshes recency."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._expired(entry):
                del self._entries[key]
                return None
            self._entries.move_to_end(key)
            return entry.value

    def set(self, key: str, value: str) -> None:
        """Insert or replace *key*, evicting the LRU entry on overflow."""
        with self._lock:
            self._insert(key, value)

    def _insert(self, key: str, value: str) -> None:
        self._entries.pop(key, None)
        self._entries[key] = CacheEntry(value=value, inserted_at=self._clock())
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)

    def invalidate(self, key: str) -> None:
        """Drop *key*. A load already running for it is not stored."""
        with self._lock:
            self._entries.pop(key, None)
            self._inflight.pop(key, None)
            self._generation += 1

    def clear(self) -> None:
        """Drop every entry. Loads already running are not stored."""
        with self._lock:
            self._entries.clear()
            self._inflight.clear()
            self._generation += 1

    async def get(self, key: str, load: Callable[[], Awaitable[str]]) -> str:
        """Return the cached value for *key*, loading it on a miss.

        *load* runs at most once per miss, however many callers are
        waiting.  A failed load is not cached and its exception is
        raised in every waiting caller.  A load overtaken by
        ``invalidate()`` or ``clear()`` still answers its callers but is
        not stored, and later callers start a fresh load.
        """
        while True:
            value = self.peek(key)
            if value is not None:
                return value

            flight = self._inflight.get(key)
            if flight is None:
                return await self._lead(key, load)

            await flight.done.wait()
            if flight.error is not None:
                raise flight.error
            if flight.finished and flight.value is not None:
                return flight.value
            # Leader was cancelled before finishing; retry as a new leader

    async def _lead(self, key: str, load: Callable[[], Awaitable[str]]) -> str:
        flight = _Flight()
        self._inflight[key] = flight
        generation = self._generation
        try:
            value = await load()
        except Exception as exc:
            flight.error = exc
            raise
        else:
            with self._lock:
                if self._generation == generation:
                    self._insert(key, value)
            flight.value = value
            flight.finished = True
            return value
        finally:
            if self._inflight.get(key) is flight:
                del self._inflight[key]
            flight.done.set()
