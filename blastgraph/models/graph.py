"""Graph response and layout models shared by the API and the client.

Attributes are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

NodeKind = Literal["software", "dependency", "runtime"]
FocusKind = Literal["software", "dependency", "runtime", "domain"]

FOCUS_KINDS: tuple[str, ...] = ("software", "dependency", "runtime", "domain")


class WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class EnvPresence(WireModel):
    production: bool = False
    staging: bool = False
    development: bool = False


class GraphNode(WireModel):
    node_id: str
    kind: NodeKind
    display_name: str
    owner_name: str | None = None
    color_key: str
    hop_distance: int = Field(ge=0)
    impact_score: int = Field(ge=0, le=100)
    confidence_score: float = Field(ge=0.0, le=1.0)
    missing_fields: list[str] = Field(default_factory=list)
    env_presence: EnvPresence = Field(default_factory=EnvPresence)
    prod_interface_count: int = Field(default=0, ge=0)

    # Kept for in-process consumers, not part of the JSON shape.
    completeness_score: float = Field(default=1.0, exclude=True)
    incomplete_fields: list[str] = Field(default_factory=list, exclude=True)
    dependency_degree: int = Field(default=0, exclude=True)
    total_interface_count: int = Field(default=0, exclude=True)


class GraphEdge(WireModel):
    from_id: str
    to_id: str
    weight: float = 1.0


class GraphResponseMeta(WireModel):
    subgraph_size: int
    total_services_in_org: int = 0
    node_limit: int = 0


class GraphResponse(WireModel):
    nodes: list[GraphNode] = Field(default_factory=list)
    edges: list[GraphEdge] = Field(default_factory=list)
    focus_node_id: str
    truncated: bool = False
    query_hash: str
    meta: GraphResponseMeta


class NodePosition(WireModel):
    node_id: str
    x: float
    y: float
    z: float


class GraphLayout(WireModel):
    positions: list[NodePosition] = Field(default_factory=list)
    query_hash: str
