"""Unit tests for the scoring functions."""

from __future__ import annotations

import hashlib
import itertools

import pytest

from blastgraph.services.scoring import (
    NO_OWNER_COLOR,
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

FULL_FLAGS = dict(
    has_owner=True,
    has_repository=True,
    has_prod_interfaces=True,
    has_any_interfaces=True,
    is_name_unique=True,
    has_valid_prod_domains=True,
)


def test_impact_score_formula():
    # 1*40 + 1*30 + (3-1)/3*30 = 90
    assert compute_impact_score(1, 1, 1, 3) == 90


def test_impact_score_clamps_to_100():
    assert compute_impact_score(5, 10, 0, 3) == 100


def test_impact_score_focus_only_proximity():
    assert compute_impact_score(0, 0, 0, 3) == 30
    assert compute_impact_score(0, 0, 3, 3) == 0


def test_impact_score_rounds_half_up():
    assert compute_impact_score(0, 0, 1, 4) == 23  # 22.5 -> 23


def test_impact_score_handles_zero_max_hops():
    assert compute_impact_score(0, 0, 0, 0) == 0


@pytest.mark.parametrize("prod,degree,hop,max_hops", itertools.product(
    [0, 1, 3], [0, 2, 7], [0, 1, 5], [1, 3, 5],
))
def test_impact_score_bounds(prod, degree, hop, max_hops):
    score = compute_impact_score(prod, degree, hop, max_hops)
    assert isinstance(score, int)
    assert 0 <= score <= 100


def test_confidence_full_metadata():
    result = compute_confidence_score(ConfidenceFlags(**FULL_FLAGS))
    assert result.score == 1.0
    assert result.missing_fields == []


def test_confidence_missing_owner_and_repository():
    flags = ConfidenceFlags(**{
        **FULL_FLAGS,
        "has_owner": False,
        "has_repository": False,
        "has_prod_interfaces": False,
        "has_any_interfaces": False,
        "has_valid_prod_domains": False,
    })
    result = compute_confidence_score(flags)
    assert result.score == 0.55
    assert result.missing_fields == ["owner", "repository"]


def test_confidence_missing_fields_keep_evaluation_order():
    flags = ConfidenceFlags(
        has_owner=False,
        has_repository=False,
        has_prod_interfaces=True,
        has_any_interfaces=True,
        is_name_unique=False,
        has_valid_prod_domains=False,
    )
    result = compute_confidence_score(flags)
    assert result.missing_fields == [
        "owner",
        "repository",
        "production-owner",
        "unique-name",
        "valid-production-domains",
    ]
    assert result.score == 0.0


def test_confidence_interfaces_without_production():
    flags = ConfidenceFlags(**{**FULL_FLAGS, "has_prod_interfaces": False, "has_valid_prod_domains": False})
    result = compute_confidence_score(flags)
    assert result.score == 0.85
    assert result.missing_fields == ["production-interface"]


def _all_flag_combinations():
    for values in itertools.product([True, False], repeat=6):
        yield ConfidenceFlags(*values)


def test_confidence_bounds_for_all_inputs():
    for flags in _all_flag_combinations():
        result = compute_confidence_score(flags)
        assert 0.0 <= result.score <= 1.0


def test_confidence_adding_a_missing_condition_never_increases_score():
    # Each good->bad flip of one input can only lower the score.
    bad_values = {
        "has_owner": False,
        "has_repository": False,
        "is_name_unique": False,
        "has_valid_prod_domains": False,
    }
    for flags in _all_flag_combinations():
        base = compute_confidence_score(flags).score
        for name, bad in bad_values.items():
            worse = ConfidenceFlags(**{**flags.__dict__, name: bad})
            assert compute_confidence_score(worse).score <= base


def test_completeness_penalties():
    result = compute_completeness_score(
        CompletenessFlags(has_description=False, has_language=False, has_interfaces=False)
    )
    assert result.score == 0.55
    assert result.incomplete_fields == ["description", "language", "interfaces"]


def test_completeness_full():
    result = compute_completeness_score(
        CompletenessFlags(has_description=True, has_language=True, has_interfaces=True)
    )
    assert result.score == 1.0
    assert result.incomplete_fields == []


def test_color_key_is_case_and_whitespace_insensitive():
    expected = hashlib.sha1(b"payments team").hexdigest()[:6]
    assert compute_color_key("Payments Team") == expected
    assert compute_color_key("  payments team \n") == expected
    assert compute_color_key("PAYMENTS TEAM") == expected


@pytest.mark.parametrize("owner", [None, "", "   "])
def test_color_key_sentinel_for_missing_owner(owner):
    assert compute_color_key(owner) == NO_OWNER_COLOR == "94a3b8"


def test_color_key_shape():
    key = compute_color_key("Storefront")
    assert len(key) == 6
    assert all(c in "0123456789abcdef" for c in key)


def test_synthetic_ids_are_normalized():
    assert compute_dep_id("Redis") == compute_dep_id(" redis ")
    assert compute_dep_id("redis").startswith("dep:")
    assert compute_runtime_id("Kubernetes") == "rt:" + hashlib.sha1(b"kubernetes").hexdigest()


def test_query_hash_is_stable_and_sensitive():
    first = compute_query_hash("org-1", "software", "svc-a", 2)
    assert first == compute_query_hash("org-1", "software", "svc-a", 2)
    assert len(first) == 16
    assert first != compute_query_hash("org-1", "software", "svc-a", 3)
    assert first != compute_query_hash("org-2", "software", "svc-a", 2)
    expected = hashlib.sha256(b"org-1:software:svc-a:2").hexdigest()[:16]
    assert first == expected
