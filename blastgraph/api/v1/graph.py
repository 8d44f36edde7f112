"""Graph API endpoint: blast-radius subgraph around a focus entity."""

from __future__ import annotations

import json

from fastapi import APIRouter, Depends, Query
from pydantic import ValidationError as PydanticValidationError

from blastgraph.api.dependencies import get_resolver, get_response_cache
from blastgraph.api.v1.schemas.graph import GraphQueryParams
from blastgraph.models.graph import GraphResponse
from blastgraph.services.cache_service import ResponseCache
from blastgraph.services.subgraph_service import SubgraphResolver
from blastgraph.utils.exceptions import ValidationError
from blastgraph.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/graph", tags=["graph"])


def parse_query(
    organization_id: str | None = Query(default=None, alias="organizationId"),
    focus_kind: str | None = Query(default=None, alias="focusKind"),
    focus_id: str | None = Query(default=None, alias="focusId"),
    hops: str | None = Query(default=None),
) -> GraphQueryParams:
    """Validate raw query strings so every failure becomes a 400, never a 422."""
    raw = {
        "organizationId": organization_id,
        "focusKind": focus_kind,
        "focusId": focus_id,
    }
    if hops not in (None, ""):
        raw["hops"] = hops
    try:
        return GraphQueryParams.model_validate(raw)
    except PydanticValidationError as exc:
        raise ValidationError(
            "Invalid query parameters",
            details=json.loads(exc.json(include_url=False)),
        ) from exc


@router.get("", response_model=GraphResponse)
async def get_graph(
    query: GraphQueryParams = Depends(parse_query),
    resolver: SubgraphResolver = Depends(get_resolver),
    cache: ResponseCache = Depends(get_response_cache),
) -> GraphResponse:
    """Resolve the scored blast-radius subgraph, served from the TTL cache when fresh."""
    key = cache.key(query.organization_id, query.focus_kind, query.focus_id, query.hops)
    cached = cache.get(key)
    if cached is not None:
        logger.debug("response_cache_hit", query_hash=cached.query_hash)
        return cached

    response = await resolver.resolve(
        query.organization_id,
        query.focus_kind,
        query.focus_id,
        query.hops,
    )
    cache.set(key, response)
    return response
