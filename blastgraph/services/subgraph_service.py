"""Blast-radius subgraph resolution.

One store read per call, then a pipeline of pure stages over frozen
snapshots:

    build_inventory_graph -> locate_focus -> traverse -> score_nodes
        -> truncate -> assemble_response

Each stage is importable on its own so it can be exercised in isolation.
"""

from __future__ import annotations

import re
import time
from collections import Counter, deque
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Literal

from blastgraph.models.graph import (
    FOCUS_KINDS,
    EnvPresence,
    GraphEdge,
    GraphNode,
    GraphResponse,
    GraphResponseMeta,
    NodeKind,
)
from blastgraph.models.inventory import Service
from blastgraph.services.inventory_service import InventoryStore
from blastgraph.services.scoring import (
    CompletenessFlags,
    ConfidenceFlags,
    compute_color_key,
    compute_completeness_score,
    compute_confidence_score,
    compute_dep_id,
    compute_impact_score,
    compute_query_hash,
    compute_runtime_id,
)
from blastgraph.utils.exceptions import NotFoundError, ValidationError
from blastgraph.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_NODE_LIMIT = 300
DEFAULT_MIN_HOPS = 1
DEFAULT_MAX_HOPS = 5

EdgeStrength = Literal["confirmed", "declared"]

EDGE_WEIGHTS: dict[str, float] = {
    "confirmed": 1.0,
    "declared": 0.5,
}

ENVIRONMENTS = ("production", "staging", "development")

_HOSTNAME_RE = re.compile(
    r"^(?=.{1,253}$)(?!-)[a-z0-9-]{1,63}(?<!-)(\.(?!-)[a-z0-9-]{1,63}(?<!-))+$"
)


@dataclass(frozen=True)
class InventoryNode:
    node_id: str
    kind: NodeKind
    display_name: str
    owner_name: str = ""
    env_presence: EnvPresence = field(default_factory=EnvPresence)
    prod_interface_count: int = 0
    total_interface_count: int = 0
    repository: str | None = None
    description: str | None = None
    language: str | None = None
    prod_domains: tuple[str, ...] = ()


@dataclass(frozen=True)
class InventoryEdge:
    from_id: str
    to_id: str
    strength: EdgeStrength

    @property
    def weight(self) -> float:
        return EDGE_WEIGHTS[self.strength]


@dataclass(frozen=True)
class InventoryGraph:
    nodes: Mapping[str, InventoryNode]
    edges: tuple[InventoryEdge, ...]
    adjacency: Mapping[str, tuple[str, ...]]
    name_counts: Mapping[str, int]
    domain_index: Mapping[str, str]
    service_count: int


@dataclass(frozen=True)
class Traversal:
    focus_node_id: str
    max_hops: int
    # Insertion order is BFS discovery order.
    hop_distances: Mapping[str, int]


@dataclass(frozen=True)
class TruncationResult:
    nodes: tuple[GraphNode, ...]
    edges: tuple[GraphEdge, ...]
    truncated: bool


def _key(value: str) -> str:
    return value.strip().lower()


def is_valid_domain(domain: str | None) -> bool:
    """True when ``domain`` is a syntactically valid hostname."""
    if not domain:
        return False
    return _HOSTNAME_RE.match(domain.strip().lower().rstrip(".")) is not None


# ---------------------------------------------------------------------------
# Stage 1: inventory -> adjacency
# ---------------------------------------------------------------------------


def _service_node(service: Service) -> InventoryNode:
    envs = {iface.env for iface in service.interfaces}
    prod = [iface for iface in service.interfaces if iface.env == "production"]
    return InventoryNode(
        node_id=service.id,
        kind="software",
        display_name=service.name,
        owner_name=(service.owner or "").strip(),
        env_presence=EnvPresence(**{env: env in envs for env in ENVIRONMENTS}),
        prod_interface_count=len(prod),
        total_interface_count=len(service.interfaces),
        repository=service.repository,
        description=service.description,
        language=service.language,
        prod_domains=tuple(iface.domain or "" for iface in prod),
    )


def build_inventory_graph(services: Iterable[Service]) -> InventoryGraph:
    """Turn raw services into nodes, deduplicated edges and a sorted adjacency.

    A dependency whose name matches exactly one service becomes a
    service-to-service edge; otherwise it becomes a virtual ``dep:`` node.
    Each distinct runtime type bound on a service's interfaces becomes an
    ``rt:`` node.
    """
    ordered = sorted(services, key=lambda s: s.id)

    name_to_ids: dict[str, list[str]] = {}
    for svc in ordered:
        name_to_ids.setdefault(_key(svc.name), []).append(svc.id)

    nodes: dict[str, InventoryNode] = {svc.id: _service_node(svc) for svc in ordered}
    edges: dict[tuple[str, str], InventoryEdge] = {}
    domain_index: dict[str, str] = {}

    def add_edge(from_id: str, to_id: str, strength: EdgeStrength) -> None:
        if from_id != to_id and (from_id, to_id) not in edges:
            edges[(from_id, to_id)] = InventoryEdge(from_id, to_id, strength)

    for svc in ordered:
        for dep in svc.dependencies:
            matched = name_to_ids.get(_key(dep.dependency_name), [])
            if len(matched) == 1:
                add_edge(svc.id, matched[0], "declared")
                continue
            dep_id = compute_dep_id(dep.dependency_name)
            nodes.setdefault(
                dep_id,
                InventoryNode(node_id=dep_id, kind="dependency", display_name=dep.dependency_name),
            )
            add_edge(svc.id, dep_id, "declared")

        for iface in sorted(svc.interfaces, key=lambda i: i.id):
            if iface.domain:
                domain_index.setdefault(_key(iface.domain), svc.id)
            if not iface.runtime_type:
                continue
            rt_id = compute_runtime_id(iface.runtime_type)
            nodes.setdefault(
                rt_id,
                InventoryNode(node_id=rt_id, kind="runtime", display_name=iface.runtime_type),
            )
            add_edge(svc.id, rt_id, "confirmed")

    neighbours: dict[str, set[str]] = {node_id: set() for node_id in nodes}
    for from_id, to_id in edges:
        neighbours[from_id].add(to_id)
        neighbours[to_id].add(from_id)

    return InventoryGraph(
        nodes=MappingProxyType(nodes),
        edges=tuple(edges.values()),
        adjacency=MappingProxyType({k: tuple(sorted(v)) for k, v in neighbours.items()}),
        name_counts=MappingProxyType(Counter(_key(svc.name) for svc in ordered)),
        domain_index=MappingProxyType(domain_index),
        service_count=len(ordered),
    )


# ---------------------------------------------------------------------------
# Stage 2: focus lookup
# ---------------------------------------------------------------------------


def locate_focus(graph: InventoryGraph, focus_kind: str, focus_id: str) -> str:
    """Map a ``(focus_kind, focus_id)`` pair to a node id or raise NotFoundError.

    Dependency and runtime focuses accept either the synthetic node id or the
    raw name/type, which hashes to the same id.
    """
    focus_id = focus_id.strip()
    candidate: str | None
    if focus_kind == "software":
        candidate = focus_id
    elif focus_kind == "dependency":
        candidate = focus_id if focus_id.startswith("dep:") else compute_dep_id(focus_id)
    elif focus_kind == "runtime":
        candidate = focus_id if focus_id.startswith("rt:") else compute_runtime_id(focus_id)
    elif focus_kind == "domain":
        candidate = graph.domain_index.get(_key(focus_id))
        focus_kind = "software"
    else:
        raise ValidationError(f"Unknown focus kind: {focus_kind}")

    node = graph.nodes.get(candidate) if candidate else None
    if node is None or node.kind != focus_kind:
        raise NotFoundError("Focus node not found")
    return node.node_id


# ---------------------------------------------------------------------------
# Stage 3: bounded BFS
# ---------------------------------------------------------------------------


def traverse(graph: InventoryGraph, focus_node_id: str, hops: int) -> Traversal:
    """Breadth-first walk keeping the first (shortest) hop distance per node."""
    distances: dict[str, int] = {focus_node_id: 0}
    queue: deque[str] = deque([focus_node_id])

    while queue:
        current = queue.popleft()
        depth = distances[current]
        if depth >= hops:
            continue
        for neighbour in graph.adjacency.get(current, ()):
            if neighbour not in distances:
                distances[neighbour] = depth + 1
                queue.append(neighbour)

    return Traversal(
        focus_node_id=focus_node_id,
        max_hops=hops,
        hop_distances=MappingProxyType(distances),
    )


# ---------------------------------------------------------------------------
# Stage 4: annotate + score
# ---------------------------------------------------------------------------


def subgraph_edges(graph: InventoryGraph, visited: Mapping[str, int]) -> tuple[GraphEdge, ...]:
    return tuple(
        GraphEdge(from_id=e.from_id, to_id=e.to_id, weight=e.weight)
        for e in graph.edges
        if e.from_id in visited and e.to_id in visited
    )


def score_node(
    node: InventoryNode,
    hop_distance: int,
    dependency_degree: int,
    max_hops: int,
    is_name_unique: bool,
) -> GraphNode:
    has_prod = node.env_presence.production
    confidence = compute_confidence_score(ConfidenceFlags(
        has_owner=bool(node.owner_name),
        has_repository=bool(node.repository),
        has_prod_interfaces=has_prod,
        has_any_interfaces=node.total_interface_count > 0,
        is_name_unique=is_name_unique,
        has_valid_prod_domains=has_prod and all(is_valid_domain(d) for d in node.prod_domains),
    ))
    completeness = compute_completeness_score(CompletenessFlags(
        has_description=bool(node.description),
        has_language=bool(node.language),
        has_interfaces=node.total_interface_count > 0,
    ))
    return GraphNode(
        node_id=node.node_id,
        kind=node.kind,
        display_name=node.display_name,
        owner_name=node.owner_name or None,
        color_key=compute_color_key(node.owner_name),
        hop_distance=hop_distance,
        impact_score=compute_impact_score(
            node.prod_interface_count, dependency_degree, hop_distance, max_hops
        ),
        confidence_score=confidence.score,
        missing_fields=confidence.missing_fields,
        env_presence=node.env_presence,
        prod_interface_count=node.prod_interface_count,
        completeness_score=completeness.score,
        incomplete_fields=completeness.incomplete_fields,
        dependency_degree=dependency_degree,
        total_interface_count=node.total_interface_count,
    )


def score_nodes(graph: InventoryGraph, traversal: Traversal) -> tuple[GraphNode, ...]:
    """Annotate and score every visited node, in BFS order.

    Dependency degree counts only edges whose endpoints were both visited.
    """
    visited = traversal.hop_distances
    degree: Counter[str] = Counter()
    for edge in graph.edges:
        if edge.from_id in visited and edge.to_id in visited:
            degree[edge.from_id] += 1
            degree[edge.to_id] += 1

    scored: list[GraphNode] = []
    for node_id, hop_distance in visited.items():
        node = graph.nodes[node_id]
        unique = node.kind != "software" or graph.name_counts.get(_key(node.display_name), 0) <= 1
        scored.append(score_node(node, hop_distance, degree[node_id], traversal.max_hops, unique))
    return tuple(scored)


# ---------------------------------------------------------------------------
# Stage 5: size cap
# ---------------------------------------------------------------------------


def truncation_rank(node: GraphNode) -> tuple[int, int, str]:
    return (-node.impact_score, node.hop_distance, node.node_id)


def truncate(
    nodes: Sequence[GraphNode],
    edges: Sequence[GraphEdge],
    focus_node_id: str,
    node_limit: int,
) -> TruncationResult:
    """Cap the subgraph at ``node_limit`` nodes, always keeping the focus.

    Survivors keep their original order; edges touching a dropped node go too.
    """
    if len(nodes) <= node_limit:
        return TruncationResult(tuple(nodes), tuple(edges), truncated=False)

    others = sorted((n for n in nodes if n.node_id != focus_node_id), key=truncation_rank)
    keep = {focus_node_id} | {n.node_id for n in others[: max(node_limit - 1, 0)]}
    return TruncationResult(
        nodes=tuple(n for n in nodes if n.node_id in keep),
        edges=tuple(e for e in edges if e.from_id in keep and e.to_id in keep),
        truncated=True,
    )


# ---------------------------------------------------------------------------
# Stage 6: response
# ---------------------------------------------------------------------------


def assemble_response(
    result: TruncationResult,
    focus_node_id: str,
    query_hash: str,
    total_services: int,
    node_limit: int,
) -> GraphResponse:
    return GraphResponse(
        nodes=list(result.nodes),
        edges=list(result.edges),
        focus_node_id=focus_node_id,
        truncated=result.truncated,
        query_hash=query_hash,
        meta=GraphResponseMeta(
            subgraph_size=len(result.nodes),
            total_services_in_org=total_services,
            node_limit=node_limit,
        ),
    )


class SubgraphResolver:
    """Resolves, scores and caps the blast radius around a focus entity."""

    def __init__(
        self,
        store: InventoryStore,
        node_limit: int = DEFAULT_NODE_LIMIT,
        min_hops: int = DEFAULT_MIN_HOPS,
        max_hops: int = DEFAULT_MAX_HOPS,
    ) -> None:
        if node_limit < 1:
            raise ValueError("node_limit must be at least 1")
        if min_hops > max_hops:
            raise ValueError("min_hops must not exceed max_hops")
        self._store = store
        self.node_limit = node_limit
        self.min_hops = min_hops
        self.max_hops = max_hops

    def clamp_hops(self, hops: int) -> int:
        return min(self.max_hops, max(self.min_hops, int(hops)))

    def query_hash(self, organization_id: str, focus_kind: str, focus_id: str, hops: int) -> str:
        return compute_query_hash(organization_id, focus_kind, focus_id, self.clamp_hops(hops))

    async def resolve(
        self,
        organization_id: str,
        focus_kind: str,
        focus_id: str,
        hops: int,
    ) -> GraphResponse:
        if focus_kind not in FOCUS_KINDS:
            raise ValidationError(f"Unknown focus kind: {focus_kind}")

        start = time.perf_counter()
        hops = self.clamp_hops(hops)
        services = await self._store.list_services(organization_id)

        graph = build_inventory_graph(services)
        focus_node_id = locate_focus(graph, focus_kind, focus_id)
        traversal = traverse(graph, focus_node_id, hops)
        scored = score_nodes(graph, traversal)
        result = truncate(
            scored,
            subgraph_edges(graph, traversal.hop_distances),
            focus_node_id,
            self.node_limit,
        )
        if result.truncated:
            logger.warning(
                "subgraph_truncated",
                reachable=len(scored),
                node_limit=self.node_limit,
                focus_node_id=focus_node_id,
            )

        response = assemble_response(
            result,
            focus_node_id,
            compute_query_hash(organization_id, focus_kind, focus_id, hops),
            graph.service_count,
            self.node_limit,
        )
        logger.info(
            "subgraph_resolved",
            organization_id=organization_id,
            focus_kind=focus_kind,
            hops=hops,
            nodes=len(response.nodes),
            edges=len(response.edges),
            truncated=response.truncated,
            compute_time_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return response
