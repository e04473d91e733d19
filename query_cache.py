"""Query cache keyed by request fingerprint.

Rules:

- A key is ``(operation, fingerprint)``; the fingerprint is the parameters
  rendered as canonical JSON, so equal parameters share one entry.
- A successful value is served from the cache while it is younger than the
  caller's ``stale_time`` and has not been invalidated. Otherwise the next read
  refetches.
- At most one request per key is in flight. Concurrent readers of the same key
  wait on that request instead of issuing their own.
- A failed refetch records the error but keeps the last good value.
- The cache holds at most ``max_entries`` settled keys and evicts the least
  recently read one first. Entries with a request in flight are held apart
  from the LRU store until they settle, so they are never evicted and may
  push the total over ``max_entries`` for a while.
- An invalidation that arrives while a request is in flight still applies to
  the value that request returns.
- Unsubscribing never aborts a request; its result still lands in the cache.
"""

from __future__ import annotations

import dataclasses
import json
import logging
import threading
import time
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Any, Callable

from cachetools import LRUCache

from config import DEFAULT_CACHE_MAX_ENTRIES
from retry import NO_RETRY, RetryPolicy, call_with_retry

QueryKey = tuple[str, str]
Listener = Callable[["CacheEntry"], None]

LOGGER = logging.getLogger(__name__)


def make_query_key(operation: str, params: Any = None) -> QueryKey:
    """Build a cache key from an operation name and its parameters."""
    if dataclasses.is_dataclass(params) and not isinstance(params, type):
        params = dataclasses.asdict(params)
    return operation, json.dumps(params, sort_keys=True, default=str)


@dataclass(frozen=True, slots=True)
class QueryPolicy:
    """Freshness and retry rules for one read operation.

    ``refetch_interval`` is informational for pollers; the cache itself only
    looks at ``stale_time`` and ``retry``.
    """

    stale_time: float = 0.0
    retry: RetryPolicy = NO_RETRY
    refetch_interval: float | None = None


@dataclass(slots=True)
class CacheEntry:
    key: QueryKey
    value: Any = None
    error: BaseException | None = None
    fetched_at: float | None = None
    status: str = "idle"
    invalidated: bool = False
    generation: int = 0
    in_flight: Future | None = None
    listeners: list[Listener] = field(default_factory=list)

    @property
    def is_fetching(self) -> bool:
        return self.in_flight is not None

    def is_stale(self, now: float, stale_time: float) -> bool:
        if self.fetched_at is None or self.invalidated:
            return True
        return now - self.fetched_at >= stale_time


class _EntryStore(LRUCache):
    """Settled entries in least-recently-read order."""

    def popitem(self) -> tuple[QueryKey, CacheEntry]:
        key, entry = super().popitem()
        LOGGER.debug("Evicted %s", key)
        return key, entry


class QueryCache:
    def __init__(
        self,
        max_entries: int = DEFAULT_CACHE_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self._clock = clock
        self._sleep = sleep if sleep is not None else time.sleep
        self._entries = _EntryStore(maxsize=max_entries)
        self._pinned: dict[QueryKey, CacheEntry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries) + len(self._pinned)

    def __contains__(self, key: object) -> bool:
        return key in self._pinned or key in self._entries

    def get_entry(self, key: QueryKey) -> CacheEntry | None:
        with self._lock:
            return self._lookup(key)

    def peek(self, key: QueryKey) -> Any:
        """Return the cached value without fetching, or None."""
        entry = self.get_entry(key)
        return entry.value if entry is not None else None

    def fetch(self, key: QueryKey, fn: Callable[[], Any], policy: QueryPolicy = QueryPolicy()) -> Any:
        """Return a fresh value for ``key``, calling ``fn`` only when needed."""
        with self._lock:
            entry = self._lookup(key) or CacheEntry(key=key)
            if entry.status == "success" and not entry.is_stale(self._clock(), policy.stale_time):
                LOGGER.debug("Cache hit for %s", key)
                return entry.value

            future = entry.in_flight
            if future is None:
                future = Future()
                entry.in_flight = future
                if entry.fetched_at is None:
                    entry.status = "loading"
                started_generation = entry.generation
                self._entries.pop(key, None)
                self._pinned[key] = entry
                owner = True
            else:
                owner = False

        if not owner:
            LOGGER.debug("Joining in-flight request for %s", key)
            return future.result()

        LOGGER.debug("Fetching %s", key)
        try:
            value = call_with_retry(fn, policy.retry, label=key[0], sleep=self._sleep)
        except BaseException as exc:
            with self._lock:
                entry.error = exc
                entry.status = "error"
                self._settle(entry)
                listeners = list(entry.listeners)
            future.set_exception(exc)
            self._notify(entry, listeners)
            raise

        with self._lock:
            entry.value = value
            entry.error = None
            entry.fetched_at = self._clock()
            entry.status = "success"
            entry.invalidated = entry.generation != started_generation
            self._settle(entry)
            listeners = list(entry.listeners)
        future.set_result(value)
        self._notify(entry, listeners)
        return value

    def subscribe(self, key: QueryKey, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` after every fetch of ``key``; returns an unsubscribe callable."""
        with self._lock:
            entry = self._lookup(key)
            if entry is None:
                entry = CacheEntry(key=key)
                self._entries[key] = entry
            entry.listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in entry.listeners:
                    entry.listeners.remove(listener)

        return unsubscribe

    def invalidate(self, operation: str) -> int:
        """Mark every entry of ``operation`` stale. Returns how many were marked."""
        count = 0
        with self._lock:
            for key in [*self._entries, *self._pinned]:
                if key[0] == operation:
                    entry = self._lookup(key)
                    entry.invalidated = True
                    entry.generation += 1
                    count += 1
        LOGGER.info("Invalidated %s cache entries for operation=%s", count, operation)
        return count

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._pinned.clear()

    def _lookup(self, key: QueryKey) -> CacheEntry | None:
        entry = self._pinned.get(key)
        if entry is None:
            entry = self._entries.get(key)
        return entry

    def _settle(self, entry: CacheEntry) -> None:
        entry.in_flight = None
        # Dropped by clear() while in flight.
        if self._pinned.get(entry.key) is entry:
            del self._pinned[entry.key]
            self._entries[entry.key] = entry

    @staticmethod
    def _notify(entry: CacheEntry, listeners: list[Listener]) -> None:
        for listener in listeners:
            try:
                listener(entry)
            except Exception:
                LOGGER.exception("Cache listener failed for %s", entry.key)
