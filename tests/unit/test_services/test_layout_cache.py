"""Unit tests for the layout LRU cache."""

from __future__ import annotations

import pytest

from blastgraph.models.graph import GraphLayout
from blastgraph.services.layout_cache import LayoutCache


def _layout(query_hash: str) -> GraphLayout:
    return GraphLayout(positions=[], query_hash=query_hash)


def test_miss_returns_none():
    assert LayoutCache().get("missing") is None


def test_never_exceeds_capacity():
    cache = LayoutCache(capacity=3)
    for i in range(10):
        cache.set(f"q{i}", _layout(f"q{i}"))
        assert len(cache) <= 3
    assert cache.keys() == ["q7", "q8", "q9"]


def test_evicts_least_recently_used_first():
    cache = LayoutCache(capacity=2)
    cache.set("a", _layout("a"))
    cache.set("b", _layout("b"))
    assert cache.get("a") is not None  # promotes a
    cache.set("c", _layout("c"))
    assert "b" not in cache
    assert cache.keys() == ["a", "c"]


def test_set_existing_key_replaces_without_eviction():
    cache = LayoutCache(capacity=2)
    cache.set("a", _layout("a"))
    cache.set("b", _layout("b"))
    replacement = _layout("a")
    cache.set("a", replacement)
    assert len(cache) == 2
    assert cache.get("a") is replacement
    assert cache.keys() == ["b", "a"]


def test_default_capacity_is_twenty():
    cache = LayoutCache()
    for i in range(25):
        cache.set(str(i), _layout(str(i)))
    assert len(cache) == 20
    assert "4" not in cache
    assert "5" in cache


def test_rejects_zero_capacity():
    with pytest.raises(ValueError):
        LayoutCache(capacity=0)
