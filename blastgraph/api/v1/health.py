"""Health and readiness probe endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from blastgraph.api.dependencies import get_inventory_store
from blastgraph.services.inventory_service import InventoryStore

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict:
    return {"status": "healthy"}


@router.get("/ready")
async def ready(store: InventoryStore = Depends(get_inventory_store)) -> dict:
    try:
        ok = await store.health_check()
        return {"status": "ready" if ok else "degraded", "inventory": ok}
    except Exception as exc:
        return {"status": "not_ready", "error": str(exc)}
