"""In-process TTL cache for resolved graph responses."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass

from blastgraph.models.graph import GraphResponse
from blastgraph.utils.logging import get_logger

logger = get_logger(__name__)

CacheKey = tuple[str, str, str, int]

DEFAULT_TTL_SECONDS = 30.0
DEFAULT_SWEEP_THRESHOLD = 100


@dataclass(frozen=True)
class _Entry:
    response: GraphResponse
    stored_at: float


class ResponseCache:
    """TTL cache keyed by ``(organization_id, focus_kind, focus_id, hops)``.

    A miss only costs latency, never changes the result. Stale entries are
    evicted on read, and swept in bulk by ``set`` once the map grows past
    ``sweep_threshold``. Concurrent misses on one key are not coalesced.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        sweep_threshold: int = DEFAULT_SWEEP_THRESHOLD,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._sweep_threshold = sweep_threshold
        self._clock = clock
        self._entries: dict[CacheKey, _Entry] = {}

    @staticmethod
    def key(organization_id: str, focus_kind: str, focus_id: str, hops: int) -> CacheKey:
        return (organization_id, focus_kind, focus_id, int(hops))

    def _is_stale(self, entry: _Entry, now: float) -> bool:
        return now - entry.stored_at > self._ttl

    def get(self, key: CacheKey) -> GraphResponse | None:
        try:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._is_stale(entry, self._clock()):
                del self._entries[key]
                return None
            return entry.response
        except Exception as exc:
            logger.warning("response_cache_get_failed", error=str(exc))
            return None

    def set(self, key: CacheKey, response: GraphResponse) -> None:
        try:
            now = self._clock()
            if len(self._entries) > self._sweep_threshold:
                self.sweep(now)
            self._entries[key] = _Entry(response=response, stored_at=now)
        except Exception as exc:
            logger.warning("response_cache_set_failed", error=str(exc))

    def sweep(self, now: float | None = None) -> int:
        """Drop every stale entry and return how many went."""
        now = self._clock() if now is None else now
        stale = [k for k, entry in self._entries.items() if self._is_stale(entry, now)]
        for k in stale:
            del self._entries[k]
        if stale:
            logger.debug("response_cache_swept", evicted=len(stale), remaining=len(self._entries))
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
