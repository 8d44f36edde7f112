"""Least-recently-used cache of computed layouts, keyed by query hash."""

from __future__ import annotations

from collections import OrderedDict

from blastgraph.models.graph import GraphLayout
from blastgraph.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CAPACITY = 20


class LayoutCache:
    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._entries: OrderedDict[str, GraphLayout] = OrderedDict()

    def get(self, query_hash: str) -> GraphLayout | None:
        layout = self._entries.get(query_hash)
        if layout is None:
            return None
        self._entries.move_to_end(query_hash)
        return layout

    def set(self, query_hash: str, layout: GraphLayout) -> None:
        if query_hash in self._entries:
            self._entries[query_hash] = layout
            self._entries.move_to_end(query_hash)
            return

        while len(self._entries) >= self.capacity:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("layout_cache_evicted", query_hash=evicted)

        self._entries[query_hash] = layout

    def keys(self) -> list[str]:
        """Keys from least to most recently used."""
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, query_hash: object) -> bool:
        return query_hash in self._entries
