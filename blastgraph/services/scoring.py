"""Impact, confidence and completeness scoring plus stable hash-derived ids.

Every function here is pure: no I/O, no clock, no shared state. Inputs are
validated by the caller, so nothing raises.
"""

from __future__ import annotations

import hashlib
import math
from dataclasses import dataclass, field

NO_OWNER_COLOR = "94a3b8"

IMPACT_PROD_WEIGHT = 40
IMPACT_DEGREE_WEIGHT = 30
IMPACT_PROXIMITY_WEIGHT = 30

# (condition name, penalty) in evaluation order.
CONFIDENCE_PENALTIES: dict[str, float] = {
    "owner": 0.25,
    "repository": 0.2,
    "production-owner": 0.3,
    "production-interface": 0.15,
    "unique-name": 0.1,
    "valid-production-domains": 0.15,
}

COMPLETENESS_PENALTIES: dict[str, float] = {
    "description": 0.15,
    "language": 0.1,
    "interfaces": 0.2,
}


@dataclass(frozen=True)
class ConfidenceFlags:
    has_owner: bool
    has_repository: bool
    has_prod_interfaces: bool
    has_any_interfaces: bool
    is_name_unique: bool
    has_valid_prod_domains: bool


@dataclass(frozen=True)
class ConfidenceResult:
    score: float
    missing_fields: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class CompletenessFlags:
    has_description: bool
    has_language: bool
    has_interfaces: bool


@dataclass(frozen=True)
class CompletenessResult:
    score: float
    incomplete_fields: list[str] = field(default_factory=list)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _normalize(value: str) -> str:
    return value.strip().lower()


def _sha1(value: str) -> str:
    return hashlib.sha1(value.encode("utf-8")).hexdigest()


def compute_impact_score(
    prod_interface_count: int,
    dependency_degree: int,
    hop_distance: int,
    max_hops: int,
) -> int:
    """Heuristic 0-100 consequence of a change at the focus for this node.

    Production exposure and fan-out dominate; proximity to the focus decays
    linearly with hop distance.
    """
    proximity = (max_hops - hop_distance) / max(max_hops, 1)
    raw = (
        prod_interface_count * IMPACT_PROD_WEIGHT
        + dependency_degree * IMPACT_DEGREE_WEIGHT
        + proximity * IMPACT_PROXIMITY_WEIGHT
    )
    return _round_half_up(min(100.0, max(0.0, raw)))


def _apply_penalties(conditions: list[tuple[str, bool]], penalties: dict[str, float]) -> tuple[float, list[str]]:
    score = 1.0
    failed: list[str] = []
    for name, missing in conditions:
        if missing:
            score -= penalties[name]
            failed.append(name)
    # Rounded so fixed penalties compare exactly (1.0 - 0.25 - 0.2 == 0.55).
    return round(max(0.0, score), 4), failed


def compute_confidence_score(flags: ConfidenceFlags) -> ConfidenceResult:
    """Score how trustworthy a node's operational metadata is.

    ``missing_fields`` follows evaluation order, not severity.
    """
    score, missing = _apply_penalties(
        [
            ("owner", not flags.has_owner),
            ("repository", not flags.has_repository),
            ("production-owner", flags.has_prod_interfaces and not flags.has_owner),
            ("production-interface", flags.has_any_interfaces and not flags.has_prod_interfaces),
            ("unique-name", not flags.is_name_unique),
            ("valid-production-domains", flags.has_prod_interfaces and not flags.has_valid_prod_domains),
        ],
        CONFIDENCE_PENALTIES,
    )
    return ConfidenceResult(score=score, missing_fields=missing)


def compute_completeness_score(flags: CompletenessFlags) -> CompletenessResult:
    score, incomplete = _apply_penalties(
        [
            ("description", not flags.has_description),
            ("language", not flags.has_language),
            ("interfaces", not flags.has_interfaces),
        ],
        COMPLETENESS_PENALTIES,
    )
    return CompletenessResult(score=score, incomplete_fields=incomplete)


def compute_color_key(owner_name: str | None) -> str:
    """Six hex chars derived from the owner name, case and whitespace insensitive."""
    if not owner_name or not owner_name.strip():
        return NO_OWNER_COLOR
    return _sha1(_normalize(owner_name))[:6]


def compute_dep_id(dependency_name: str) -> str:
    return f"dep:{_sha1(_normalize(dependency_name))}"


def compute_runtime_id(runtime_type: str) -> str:
    return f"rt:{_sha1(_normalize(runtime_type))}"


def compute_query_hash(organization_id: str, focus_kind: str, focus_id: str, hops: int) -> str:
    """Stable 16-hex-char digest of the normalized query tuple.

    Doubles as the response cache key and the layout PRNG seed.
    """
    payload = f"{organization_id.strip()}:{focus_kind.strip()}:{focus_id.strip()}:{int(hops)}"
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:16]
