"""Process-local TTL cache of retrieval results."""

from __future__ import annotations

import dataclasses
import threading
import time
from typing import Callable, Optional

from .models import AgentContext, CacheEntry, RetrievalOptions, ToolRetrievalResult

NO_CONTEXT = "no-context"
# Above this many entries, a write triggers a sweep of expired entries
MAX_ENTRIES_BEFORE_SWEEP = 1000


def cache_key(
    query: str,
    context: Optional[AgentContext] = None,
    options: Optional[RetrievalOptions] = None,
) -> str:
    """Build the cache key for a query, agent and (non-default) options."""
    if context is None:
        context_key = NO_CONTEXT
    else:
        task_type = context.task_context.task_type if context.task_context else ""
        permissions = ",".join(sorted(context.permissions))
        context_key = f"{context.agent_id}:{permissions}:{task_type}"

    key = f"{query.lower().strip()}:{context_key}"
    option_key = options.fingerprint() if options else ""
    if option_key:
        key = f"{key}:{option_key}"
    return key


def _copy_result(
    result: ToolRetrievalResult,
    cache_hit: Optional[bool] = None,
) -> ToolRetrievalResult:
    """Copy of ``result`` sharing no mutable state with it except the ToolSpecs."""
    metadata = dataclasses.replace(result.metadata)
    if cache_hit is not None:
        metadata.cache_hit = cache_hit
    return dataclasses.replace(
        result,
        tools=[dataclasses.replace(rt, match_reasons=list(rt.match_reasons)) for rt in result.tools],
        metadata=metadata,
    )


class ResultCache:
    """Memoises ToolRetrievalResult by cache key with a time-to-live.

    Entries are fresh while their age is at most ``ttl_ms``; a TTL of zero
    or less disables reuse. When the cache grows past
    MAX_ENTRIES_BEFORE_SWEEP, expired entries are swept. There is no LRU
    eviction of live entries. All operations take an internal lock.
    """

    def __init__(
        self,
        ttl_ms: int,
        clock: Callable[[], float] = time.monotonic,
        max_entries: int = MAX_ENTRIES_BEFORE_SWEEP,
    ) -> None:
        self.ttl_ms = ttl_ms
        self._clock = clock
        self._max_entries = max_entries
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def _expired(self, entry: CacheEntry, now: float) -> bool:
        if self.ttl_ms <= 0:
            return True
        return (now - entry.timestamp) * 1000 > self.ttl_ms

    def get(self, key: str) -> Optional[ToolRetrievalResult]:
        """Return a copy of the cached result flagged as a cache hit, or None.

        An expired entry is evicted on read.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._expired(entry, self._clock()):
                del self._entries[key]
                return None
            result = entry.result

        return _copy_result(result, cache_hit=True)

    def put(self, key: str, result: ToolRetrievalResult) -> int:
        """Store a result. Returns how many expired entries were swept (usually 0)."""
        with self._lock:
            self._entries[key] = CacheEntry(
                result=_copy_result(result), timestamp=self._clock(), key=key
            )
            if len(self._entries) > self._max_entries:
                return self._sweep_locked()
        return 0

    def sweep(self) -> int:
        """Evict every expired entry. Returns the number evicted."""
        with self._lock:
            return self._sweep_locked()

    def _sweep_locked(self) -> int:
        now = self._clock()
        expired = [k for k, e in self._entries.items() if self._expired(e, now)]
        for k in expired:
            del self._entries[k]
        return len(expired)

    def clear(self) -> int:
        """Remove every entry. Returns the number removed."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        return count

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries
