# tests/unit/matching/test_matcher.py - v1
"""Tests for matching/matcher.py: ranking, filtering and outcome aggregation."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from enpensent.core.models import PatternCandidate
from enpensent.matching.matcher import (
    MatchOptions,
    calculate_match_confidence,
    calculate_outcome_probabilities,
    calculate_pattern_diversity,
    find_similar_patterns,
    get_most_likely_outcome,
    summarize_matches,
)


def _candidate(make_signature, pattern_id, archetype="type_a", outcome="win", **sig_kwargs):
    return PatternCandidate(
        id=pattern_id,
        signature=make_signature(archetype=archetype, **sig_kwargs),
        outcome=outcome,
    )


class TestMatchOptions:
    def test_defaults(self):
        opts = MatchOptions()
        assert opts.min_similarity == 0.0
        assert opts.limit is None
        assert opts.archetype_filter is None

    @pytest.mark.parametrize("value", [-0.1, 1.5])
    def test_min_similarity_range(self, value):
        with pytest.raises(ValidationError):
            MatchOptions(min_similarity=value)


class TestFindSimilarPatterns:
    def test_empty_pool(self, sample_signature):
        assert find_similar_patterns(sample_signature, []) == []

    def test_sorted_descending(self, make_signature, candidate_pool):
        target = make_signature(archetype="type_a", intensity=0.2)
        matches = find_similar_patterns(target, candidate_pool)
        sims = [m.similarity for m in matches]
        assert sims == sorted(sims, reverse=True)
        assert matches[0].pattern_id == "cand_0"

    def test_similarities_bounded(self, sample_signature, candidate_pool):
        for match in find_similar_patterns(sample_signature, candidate_pool):
            assert 0.0 <= match.similarity <= 1.0

    def test_min_similarity_floor(self, make_signature, candidate_pool):
        target = make_signature(archetype="type_a", intensity=0.2)
        matches = find_similar_patterns(target, candidate_pool, MatchOptions(min_similarity=0.9))
        assert matches
        assert all(m.similarity >= 0.9 for m in matches)

    @pytest.mark.parametrize("limit", [1, 3, 6, 20])
    def test_limit(self, sample_signature, candidate_pool, limit):
        matches = find_similar_patterns(sample_signature, candidate_pool, MatchOptions(limit=limit))
        assert len(matches) == min(limit, len(candidate_pool))

    @pytest.mark.parametrize("limit", [1, 5, 20, 25])
    def test_limit_large_pool(self, make_signature, limit):
        pool = [
            _candidate(make_signature, f"c{i}", archetype=f"t{i % 3}", intensity=(i % 10) / 10)
            for i in range(24)
        ]
        matches = find_similar_patterns(make_signature(), pool, MatchOptions(limit=limit))
        assert len(matches) == min(limit, 24)

    @pytest.mark.parametrize("limit", [0, -1])
    def test_non_positive_limit(self, sample_signature, candidate_pool, limit):
        assert find_similar_patterns(sample_signature, candidate_pool, MatchOptions(limit=limit)) == []

    def test_archetype_filter(self, sample_signature, candidate_pool):
        matches = find_similar_patterns(
            sample_signature, candidate_pool, MatchOptions(archetype_filter=["type_a"]),
        )
        assert len(matches) == 3
        assert all(m.signature.archetype == "type_a" for m in matches)

    def test_empty_filter_disabled(self, sample_signature, candidate_pool):
        matches = find_similar_patterns(
            sample_signature, candidate_pool, MatchOptions(archetype_filter=[]),
        )
        assert len(matches) == len(candidate_pool)

    def test_outcome_filter(self, sample_signature, candidate_pool):
        matches = find_similar_patterns(
            sample_signature, candidate_pool, MatchOptions(outcome_filter=["loss"]),
        )
        assert {m.pattern_id for m in matches} == {"cand_4", "cand_5"}

    def test_metadata_carried(self, sample_signature, candidate_pool):
        matches = find_similar_patterns(sample_signature, candidate_pool)
        by_id = {m.pattern_id: m for m in matches}
        assert by_id["cand_3"].source_metadata == {"source": "test", "rank": 3}
        assert by_id["cand_3"].outcome == "win"

    def test_ties_keep_pool_order(self, make_signature):
        pool = [_candidate(make_signature, f"dup_{i}") for i in range(4)]
        matches = find_similar_patterns(make_signature(), pool)
        assert [m.pattern_id for m in matches] == ["dup_0", "dup_1", "dup_2", "dup_3"]

    def test_identical_signature_scores_one(self, sample_signature):
        pool = [PatternCandidate(id="self", signature=sample_signature, outcome="win")]
        assert find_similar_patterns(sample_signature, pool)[0].similarity == pytest.approx(1.0)

    def test_custom_weights(self, make_signature):
        target = make_signature(archetype="type_a")
        pool = [_candidate(make_signature, "other", archetype="type_b")]
        only_archetype = find_similar_patterns(
            target, pool, weights={"archetype": 1.0, "quadrant": 0, "temporal": 0,
                                   "intensity": 0, "flow_direction": 0},
        )
        assert only_archetype[0].similarity == pytest.approx(0.0)

    def test_accepts_generator(self, sample_signature, candidate_pool):
        matches = find_similar_patterns(sample_signature, (c for c in candidate_pool))
        assert len(matches) == len(candidate_pool)

    def test_persisted_patterns(self, sample_signature, make_persisted):
        pool = [make_persisted("p1", outcome="success"), make_persisted("p2", outcome="failure")]
        matches = find_similar_patterns(sample_signature, pool)
        assert {m.outcome for m in matches} == {"success", "failure"}


class TestOutcomeProbabilities:
    def test_empty(self):
        assert calculate_outcome_probabilities([]) == {}

    def test_similarity_weighted(self, scenario_matches):
        probs = calculate_outcome_probabilities(scenario_matches)
        assert probs["win"] == pytest.approx(1.7 / 2.2)
        assert probs["loss"] == pytest.approx(0.5 / 2.2)
        assert sum(probs.values()) == pytest.approx(1.0)

    def test_single_outcome(self, make_match):
        probs = calculate_outcome_probabilities([make_match("a", "win", 0.7), make_match("b", "win", 0.3)])
        assert probs == {"win": 1.0}

    def test_zero_similarity_counts(self, make_match):
        matches = [make_match("a", "win", 0.0, "1"), make_match("a", "win", 0.0, "2"),
                   make_match("a", "loss", 0.0, "3")]
        probs = calculate_outcome_probabilities(matches)
        assert probs["win"] == pytest.approx(2 / 3)
        assert probs["loss"] == pytest.approx(1 / 3)

    def test_zero_similarity_loser_gets_nothing(self, make_match):
        matches = [make_match("a", "win", 1.0, "1"), make_match("b", "loss", 0.0, "2")]
        assert calculate_outcome_probabilities(matches) == {"win": 1.0, "loss": 0.0}

    def test_first_seen_order(self, make_match):
        matches = [make_match("a", "loss", 0.1), make_match("a", "win", 0.9)]
        assert list(calculate_outcome_probabilities(matches)) == ["loss", "win"]

    def test_monotonic_in_similarity(self, make_match):
        base = [make_match("a", "win", 0.5, "1"), make_match("b", "loss", 0.5, "2")]
        boosted = [make_match("a", "win", 0.9, "1"), make_match("b", "loss", 0.5, "2")]
        assert (
            calculate_outcome_probabilities(boosted)["win"]
            > calculate_outcome_probabilities(base)["win"]
        )


class TestMostLikelyOutcome:
    def test_empty(self):
        assert get_most_likely_outcome([]) is None

    def test_scenario(self, scenario_matches):
        best = get_most_likely_outcome(scenario_matches)
        assert best.outcome == "win"
        assert best.probability == pytest.approx(1.7 / 2.2)

    def test_tie_goes_to_first_seen(self, make_match):
        matches = [make_match("a", "loss", 0.5), make_match("b", "win", 0.5)]
        assert get_most_likely_outcome(matches).outcome == "loss"


class TestPatternDiversity:
    def test_empty_and_single(self, make_match):
        assert calculate_pattern_diversity([]) == 0.0
        assert calculate_pattern_diversity([make_match("a", "win", 0.9)]) == 0.0

    def test_homogeneous(self, make_match):
        matches = [make_match("a", "win", 0.9, str(i)) for i in range(5)]
        assert calculate_pattern_diversity(matches) == 0.0

    def test_all_distinct(self, make_match):
        matches = [make_match("a", "win", 0.9), make_match("b", "loss", 0.8), make_match("c", "draw", 0.7)]
        assert calculate_pattern_diversity(matches) == pytest.approx(1.0)

    def test_scenario_strictly_between(self, scenario_matches):
        diversity = calculate_pattern_diversity(scenario_matches)
        assert 0.0 < diversity < 1.0
        # HHI = (2/3)^2 + (1/3)^2 = 5/9; (1 - 5/9) / (1 - 1/3) = 2/3
        assert diversity == pytest.approx(2 / 3)

    def test_same_archetype_different_outcome_counts(self, make_match):
        matches = [make_match("a", "win", 0.9), make_match("a", "loss", 0.9)]
        assert calculate_pattern_diversity(matches) == pytest.approx(1.0)


class TestMatchConfidence:
    def test_empty(self):
        assert calculate_match_confidence([]) == 0.0

    def test_formula(self, scenario_matches):
        mean_sim = (0.9 + 0.8 + 0.5) / 3
        expected = (3 / 5) * (0.6 * mean_sim + 0.4 * (1 - 2 / 3))
        assert calculate_match_confidence(scenario_matches) == pytest.approx(expected)

    def test_sample_size_saturates(self, make_match):
        matches = [make_match("a", "win", 1.0, str(i)) for i in range(10)]
        assert calculate_match_confidence(matches) == pytest.approx(1.0)

    def test_grows_with_sample(self, make_match):
        few = [make_match("a", "win", 0.8, str(i)) for i in range(2)]
        many = [make_match("a", "win", 0.8, str(i)) for i in range(5)]
        assert calculate_match_confidence(many) > calculate_match_confidence(few)

    def test_grows_with_similarity(self, make_match):
        low = [make_match("a", "win", 0.4, str(i)) for i in range(3)]
        high = [make_match("a", "win", 0.9, str(i)) for i in range(3)]
        assert calculate_match_confidence(high) > calculate_match_confidence(low)

    def test_consensus_beats_diversity(self, make_match):
        consensus = [make_match("a", "win", 0.7, str(i)) for i in range(3)]
        diverse = [make_match("a", "win", 0.7), make_match("b", "loss", 0.7), make_match("c", "draw", 0.7)]
        assert calculate_match_confidence(consensus) > calculate_match_confidence(diverse)

    @pytest.mark.parametrize("small,large", [(1, 3), (3, 5), (5, 10)])
    def test_larger_min_sample_never_raises_confidence(self, scenario_matches, small, large):
        assert calculate_match_confidence(scenario_matches, large) <= calculate_match_confidence(
            scenario_matches, small,
        )

    def test_custom_min_sample(self, make_match):
        matches = [make_match("a", "win", 1.0, "1")]
        assert calculate_match_confidence(matches, min_sample_size=1) == pytest.approx(1.0)

    def test_bounded(self, scenario_matches):
        assert 0.0 <= calculate_match_confidence(scenario_matches) <= 1.0


class TestSummarizeMatches:
    def test_empty(self):
        summary = summarize_matches([])
        assert summary.sample_size == 0
        assert summary.most_likely is None
        assert summary.average_similarity == 0.0

    def test_scenario(self, scenario_matches):
        summary = summarize_matches(scenario_matches)
        assert summary.sample_size == 3
        assert summary.most_likely.outcome == "win"
        assert summary.average_similarity == pytest.approx(2.2 / 3)
        assert summary.diversity == pytest.approx(2 / 3)


class TestEndToEndScenario:
    def test_min_similarity_excludes_weak_match(self, make_signature):
        target = make_signature(archetype="a", intensity=0.5)
        pool = [
            _candidate(make_signature, "p1", archetype="a", outcome="win", intensity=0.5),
            _candidate(make_signature, "p2", archetype="a", outcome="win", intensity=0.6),
            _candidate(
                make_signature, "p3", archetype="b", outcome="loss", intensity=1.0,
                quadrants=(1, 0, 0, 0), phases=(0.9, 0.1, 0.0), trend="volatile",
                momentum=-0.9, flow_direction="backward",
            ),
        ]
        all_matches = find_similar_patterns(target, pool)
        assert [m.pattern_id for m in all_matches] == ["p1", "p2", "p3"]
        assert get_most_likely_outcome(all_matches).outcome == "win"

        strong = find_similar_patterns(target, pool, MatchOptions(min_similarity=0.6))
        assert [m.pattern_id for m in strong] == ["p1", "p2"]
        assert calculate_outcome_probabilities(strong) == {"win": 1.0}
