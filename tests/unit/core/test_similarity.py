# tests/unit/core/test_similarity.py - v1
"""Tests for core/similarity.py: component scores and weighted signature similarity."""

from __future__ import annotations

import numpy as np
import pytest

from enpensent.archetypes.relatedness import ArchetypeRelatedness
from enpensent.core.models import QuadrantProfile, TemporalFlow
from enpensent.core.similarity import (
    SimilarityCache,
    SimilarityWeights,
    calculate_signature_similarity,
    flow_direction_affinity,
    quadrant_similarity,
    signature_similarity_matrix,
    temporal_flow_similarity,
)


def _profile(q1, q2, q3, q4, center=None):
    return QuadrantProfile(q1=q1, q2=q2, q3=q3, q4=q4, center=center)


def _flow(opening=0.4, middle=0.5, ending=0.6, trend="stable", momentum=0.0):
    return TemporalFlow(opening=opening, middle=middle, ending=ending, trend=trend, momentum=momentum)


class TestQuadrantSimilarity:
    @pytest.mark.parametrize("values", [
        (0.25, 0.25, 0.25, 0.25),
        (1.0, 0.0, 0.0, 0.0),
        (0.1, 0.7, 0.15, 0.05),
        (0.0, 0.0, 0.0, 0.0),
    ])
    def test_identity(self, values):
        p = _profile(*values)
        assert quadrant_similarity(p, p) == 1.0

    def test_opposite_corners(self):
        a = _profile(1, 0, 0, 0)
        b = _profile(0, 0, 0, 1)
        assert quadrant_similarity(a, b) == pytest.approx(0.5)

    def test_symmetry(self):
        a = _profile(0.4, 0.3, 0.2, 0.1)
        b = _profile(0.1, 0.1, 0.5, 0.3)
        assert quadrant_similarity(a, b) == quadrant_similarity(b, a)

    def test_center_used_when_both_present(self):
        a = _profile(0.25, 0.25, 0.25, 0.25, center=1.0)
        b = _profile(0.25, 0.25, 0.25, 0.25, center=0.0)
        assert quadrant_similarity(a, b) == pytest.approx(0.8)

    def test_center_ignored_when_one_missing(self):
        a = _profile(0.25, 0.25, 0.25, 0.25, center=1.0)
        b = _profile(0.25, 0.25, 0.25, 0.25)
        assert quadrant_similarity(a, b) == 1.0

    def test_clamped_at_zero(self):
        a = _profile(1, 1, 1, 1)
        b = _profile(0, 0, 0, 0)
        assert quadrant_similarity(a, b) == 0.0


class TestTemporalFlowSimilarity:
    def test_identity(self):
        f = _flow(trend="accelerating", momentum=0.5)
        assert temporal_flow_similarity(f, f) == pytest.approx(1.0)

    def test_symmetry(self):
        a = _flow(0.1, 0.5, 0.9, "accelerating", 0.8)
        b = _flow(0.7, 0.4, 0.2, "declining", -0.6)
        assert temporal_flow_similarity(a, b) == temporal_flow_similarity(b, a)

    def test_trend_mismatch_costs_trend_weight(self):
        a = _flow(trend="stable")
        b = _flow(trend="volatile")
        assert temporal_flow_similarity(a, b) == pytest.approx(0.8)

    def test_opposite_momentum(self):
        a = _flow(momentum=1.0)
        b = _flow(momentum=-1.0)
        # momentum component: 0.5 * (1 - 2/2) + 0.5 * 0 = 0
        assert temporal_flow_similarity(a, b) == pytest.approx(0.8)

    def test_zero_momentum_half_agreement(self):
        a = _flow(momentum=0.0)
        b = _flow(momentum=0.4)
        expected = 0.6 + 0.2 + 0.2 * (0.5 * (1 - 0.2) + 0.5 * 0.5)
        assert temporal_flow_similarity(a, b) == pytest.approx(expected)

    def test_bounded(self):
        a = _flow(0, 0, 0, "accelerating", 1.0)
        b = _flow(1, 1, 1, "declining", -1.0)
        assert temporal_flow_similarity(a, b) == pytest.approx(0.0)


class TestFlowDirectionAffinity:
    def test_table(self):
        assert flow_direction_affinity("forward", "forward") == 1.0
        assert flow_direction_affinity("forward", "backward") == 0.0
        assert flow_direction_affinity("lateral", "forward") == 0.5
        assert flow_direction_affinity("chaotic", "backward") == 0.25

    @pytest.mark.parametrize("a", ["forward", "lateral", "backward", "chaotic"])
    @pytest.mark.parametrize("b", ["forward", "lateral", "backward", "chaotic"])
    def test_symmetric(self, a, b):
        assert flow_direction_affinity(a, b) == flow_direction_affinity(b, a)


class TestSignatureSimilarity:
    def test_self_similarity(self, sample_signature):
        assert calculate_signature_similarity(sample_signature, sample_signature) == pytest.approx(1.0)

    def test_symmetry(self, make_signature):
        a = make_signature(archetype="x", intensity=0.2, trend="accelerating", momentum=0.5)
        b = make_signature(archetype="y", intensity=0.9, flow_direction="lateral")
        assert calculate_signature_similarity(a, b) == pytest.approx(
            calculate_signature_similarity(b, a)
        )

    def test_bounded(self, make_signature):
        a = make_signature(archetype="x", intensity=0.0, quadrants=(1, 0, 0, 0),
                           phases=(0, 0, 0), trend="accelerating", momentum=1.0)
        b = make_signature(archetype="y", intensity=1.0, quadrants=(0, 0, 0, 1),
                           phases=(1, 1, 1), trend="declining", momentum=-1.0,
                           flow_direction="backward")
        score = calculate_signature_similarity(a, b)
        assert 0.0 <= score <= 1.0

    def test_higher_archetype_weight_lowers_score_when_archetypes_differ(self, make_signature):
        a = make_signature(archetype="type_a", intensity=0.5)
        b = make_signature(
            archetype="type_b", intensity=0.6, quadrants=(0.4, 0.3, 0.2, 0.1),
            trend="accelerating", momentum=0.2, flow_direction="lateral",
        )
        high = calculate_signature_similarity(a, b, {"archetype": 0.8, "quadrant": 0.1, "temporal": 0.1})
        low = calculate_signature_similarity(a, b, {"archetype": 0.1, "quadrant": 0.45, "temporal": 0.45})
        assert high < low

    def test_higher_archetype_weight_raises_score_when_archetypes_match(self, make_signature):
        a = make_signature(archetype="type_a", intensity=0.5)
        b = make_signature(
            archetype="type_a", intensity=0.6, quadrants=(0.4, 0.3, 0.2, 0.1),
            trend="accelerating", momentum=0.2, flow_direction="lateral",
        )
        high = calculate_signature_similarity(a, b, {"archetype": 0.8, "quadrant": 0.1, "temporal": 0.1})
        low = calculate_signature_similarity(a, b, {"archetype": 0.1, "quadrant": 0.45, "temporal": 0.45})
        assert high > low

    def test_zero_weights_yield_zero(self, sample_signature):
        weights = SimilarityWeights(archetype=0, quadrant=0, temporal=0, intensity=0, flow_direction=0)
        assert calculate_signature_similarity(sample_signature, sample_signature, weights) == 0.0

    def test_partial_mapping_uses_defaults(self):
        weights = SimilarityWeights.model_validate({"archetype": 0.5})
        assert weights.archetype == 0.5
        assert weights.quadrant == 0.25
        assert weights.flow_direction == 0.1

    def test_weights_need_not_sum_to_one(self, make_signature):
        a = make_signature(archetype="x", intensity=0.3)
        b = make_signature(archetype="y", intensity=0.7)
        base = SimilarityWeights()
        doubled = SimilarityWeights(
            archetype=0.6, quadrant=0.5, temporal=0.5, intensity=0.2, flow_direction=0.2,
        )
        assert calculate_signature_similarity(a, b, base) == pytest.approx(
            calculate_signature_similarity(a, b, doubled)
        )

    def test_relatedness_strategy_is_consulted(self, make_signature):
        class Related(ArchetypeRelatedness):
            def score(self, a, b):
                return 1.0

        a = make_signature(archetype="x")
        b = make_signature(archetype="y")
        assert calculate_signature_similarity(a, b, relatedness=Related()) == pytest.approx(1.0)
        assert calculate_signature_similarity(a, b) == pytest.approx(0.7)


class TestSimilarityMatrix:
    def test_shape_and_symmetry(self, make_signature):
        sigs = [
            make_signature(archetype="a", intensity=0.1),
            make_signature(archetype="b", intensity=0.5),
            make_signature(archetype="a", intensity=0.9),
        ]
        m = signature_similarity_matrix(sigs)
        assert m.shape == (3, 3)
        assert np.allclose(m, m.T)
        assert np.allclose(np.diag(m), 1.0)

    def test_empty(self):
        assert signature_similarity_matrix([]).shape == (0, 0)


class TestSimilarityCache:
    def test_hits_on_reversed_pair(self, make_signature):
        a = make_signature(archetype="a", intensity=0.1)
        b = make_signature(archetype="b", intensity=0.5)
        cache = SimilarityCache()
        first = cache.similarity(a, b)
        second = cache.similarity(b, a)
        assert first == second
        assert cache.hits == 1
        assert cache.misses == 1

    def test_eviction(self, make_signature):
        cache = SimilarityCache(max_entries=2)
        sigs = [make_signature(archetype=f"a{i}", intensity=0.1 * i) for i in range(4)]
        for other in sigs[1:]:
            cache.similarity(sigs[0], other)
        assert len(cache) == 2

    def test_clear(self, make_signature):
        cache = SimilarityCache()
        sig = make_signature()
        cache.similarity(sig, sig)
        cache.clear()
        assert len(cache) == 0
        assert cache.misses == 0
