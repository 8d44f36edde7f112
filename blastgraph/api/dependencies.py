"""Shared FastAPI dependency injection.

Long-lived collaborators (store, resolver, response cache) are built once per
app in the lifespan and kept on ``app.state``.
"""

from __future__ import annotations

from fastapi import Request

from blastgraph.services.cache_service import ResponseCache
from blastgraph.services.inventory_service import InventoryStore
from blastgraph.services.subgraph_service import SubgraphResolver


def _require(request: Request, name: str):
    value = getattr(request.app.state, name, None)
    if value is None:
        raise RuntimeError(f"{name} not initialized")
    return value


def get_inventory_store(request: Request) -> InventoryStore:
    return _require(request, "inventory_store")


def get_resolver(request: Request) -> SubgraphResolver:
    return _require(request, "resolver")


def get_response_cache(request: Request) -> ResponseCache:
    return _require(request, "response_cache")
