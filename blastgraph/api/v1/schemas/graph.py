"""Request/response models for the graph API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from blastgraph.models.graph import FocusKind

DEFAULT_HOPS = 3
MIN_HOPS = 1
MAX_HOPS = 5


class GraphQueryParams(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        frozen=True,
    )

    organization_id: str = Field(..., min_length=1)
    focus_kind: FocusKind
    focus_id: str = Field(..., min_length=1)
    hops: int = Field(default=DEFAULT_HOPS, ge=MIN_HOPS, le=MAX_HOPS)


class ErrorResponse(BaseModel):
    error: str
    details: Any = None
