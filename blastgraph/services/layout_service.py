"""Deterministic procedural 3D layout of a resolved subgraph.

The same nodes and query hash always produce bit-identical positions, so a
layout can be cached per query hash and shared through URLs. All integer
arithmetic is masked to 32 bits to keep the PRNG stream fixed.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from blastgraph.models.graph import GraphLayout, GraphNode, NodePosition

_MASK32 = 0xFFFFFFFF
NO_OWNER_BUCKET = "__none__"


@dataclass(frozen=True)
class LayoutConfig:
    """Tuned placement constants. Changing any of them moves shared layouts."""

    ring_radii: tuple[float, ...] = (0, 4, 8, 13, 19, 26)
    min_owner_slots: int = 8
    jitter: float = 0.6
    production_y: float = 1.5
    staging_y: float = 0.0
    other_y: float = -1.5
    relaxation_passes: int = 3
    min_distance: float = 1.2
    max_displacement: float = 0.5
    push_factor: float = 0.5
    coincident_epsilon: float = 0.001


DEFAULT_LAYOUT_CONFIG = LayoutConfig()


def _imul(a: int, b: int) -> int:
    return ((a & _MASK32) * (b & _MASK32)) & _MASK32


def hash_to_seed(query_hash: str) -> int:
    """Rolling ``h = 31*h + c`` over the hash characters, kept to 32 bits."""
    h = 0
    for ch in query_hash:
        h = (_imul(31, h) + ord(ch)) & _MASK32
    return h


def mulberry32(seed: int) -> Callable[[], float]:
    """Small seeded PRNG returning floats in [0, 1)."""
    state = seed & _MASK32

    def next_float() -> float:
        nonlocal state
        state = (state + 0x6D2B79F5) & _MASK32
        t = _imul(state ^ (state >> 15), state | 1)
        t = ((t + _imul(t ^ (t >> 7), t | 61)) & _MASK32) ^ t
        return ((t ^ (t >> 14)) & _MASK32) / 4294967296

    return next_float


def _env_y(node: GraphNode, config: LayoutConfig) -> float:
    if node.env_presence.production:
        return config.production_y
    if node.env_presence.staging:
        return config.staging_y
    return config.other_y


def _owner_key(node: GraphNode) -> str:
    return node.owner_name or NO_OWNER_BUCKET


def _relax(points: list[list[float]], config: LayoutConfig) -> None:
    """Push apart any pair closer than ``min_distance``, symmetrically, in place."""
    count = len(points)
    for _ in range(config.relaxation_passes):
        for i in range(count):
            for j in range(i + 1, count):
                a = points[i]
                b = points[j]
                dx = b[0] - a[0]
                dy = b[1] - a[1]
                dz = b[2] - a[2]
                dist = math.sqrt(dx * dx + dy * dy + dz * dz)
                if config.coincident_epsilon < dist < config.min_distance:
                    push = min((config.min_distance - dist) / 2 * config.push_factor, config.max_displacement)
                    nx = dx / dist * push
                    ny = dy / dist * push
                    nz = dz / dist * push
                    a[0] -= nx
                    a[1] -= ny
                    a[2] -= nz
                    b[0] += nx
                    b[1] += ny
                    b[2] += nz


def compute_layout(
    nodes: Sequence[GraphNode],
    query_hash: str,
    config: LayoutConfig = DEFAULT_LAYOUT_CONFIG,
) -> GraphLayout:
    """Place nodes on hop rings, grouped into owner slots.

    Radius comes from hop distance, angle from the owner's alphabetical slot
    plus a fan-out within the slot, height from environment presence. A few
    relaxation passes then separate near-collisions. Positions are returned
    in the same order as ``nodes``.
    """
    if not nodes:
        return GraphLayout(positions=[], query_hash=query_hash)

    rng = mulberry32(hash_to_seed(query_hash))

    owners = sorted({_owner_key(node) for node in nodes})
    owner_index = {owner: i for i, owner in enumerate(owners)}
    slot_angle = 2 * math.pi / max(len(owners), config.min_owner_slots)
    slot_counters: dict[tuple[int, str], int] = {}

    points: list[list[float]] = []
    for node in nodes:
        ring = min(node.hop_distance, len(config.ring_radii) - 1)
        radius = config.ring_radii[ring]
        if radius == 0:
            points.append([0.0, 0.0, 0.0])
            continue

        owner = _owner_key(node)
        sub_index = slot_counters.get((ring, owner), 0)
        slot_counters[(ring, owner)] = sub_index + 1

        sub_offset = sub_index * (slot_angle / max(sub_index + 2, 3))
        angle = owner_index[owner] * slot_angle + sub_offset

        jitter_x = (rng() - 0.5) * config.jitter
        jitter_z = (rng() - 0.5) * config.jitter
        points.append([
            math.cos(angle) * radius + jitter_x,
            _env_y(node, config),
            math.sin(angle) * radius + jitter_z,
        ])

    _relax(points, config)

    return GraphLayout(
        positions=[
            NodePosition(node_id=node.node_id, x=p[0], y=p[1], z=p[2])
            for node, p in zip(nodes, points)
        ],
        query_hash=query_hash,
    )
