# tests/unit/storage/test_stats.py - v1
"""Tests for storage/stats.py."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from enpensent.core.models import PersistedPattern
from enpensent.storage.stats import compute_pattern_stats


class TestComputePatternStats:
    def test_empty(self):
        stats = compute_pattern_stats([], "code")
        assert stats.total_patterns == 0
        assert stats.oldest_pattern is None

    def test_counts(self, make_persisted):
        patterns = [
            make_persisted("p1", archetype="rapid_growth", outcome="success", intensity=0.2, age_days=5),
            make_persisted("p2", archetype="rapid_growth", outcome="failure", intensity=0.4, age_days=1),
            make_persisted("p3", archetype="death_march", outcome="failure", intensity=0.6),
            make_persisted("c1", domain="chess", archetype="kingside_attack"),
        ]
        stats = compute_pattern_stats(patterns, "code")
        assert stats.total_patterns == 3
        assert stats.by_archetype == {"rapid_growth": 2, "death_march": 1}
        assert stats.by_outcome == {"failure": 2, "success": 1}
        assert stats.average_intensity == pytest.approx(0.4)
        assert stats.oldest_pattern < stats.newest_pattern
        assert list(stats.by_outcome) == ["failure", "success"]

    def test_other_domain_only(self, make_persisted):
        stats = compute_pattern_stats([make_persisted("c1", domain="chess")], "code")
        assert stats.total_patterns == 0

    def test_naive_and_aware_timestamps(self, make_persisted):
        aware = make_persisted("p1", age_days=3)
        naive = PersistedPattern.model_validate(
            {**make_persisted("p2").model_dump(), "created_at": datetime(2024, 2, 1)}
        )
        stats = compute_pattern_stats([aware, naive], "code")
        assert stats.oldest_pattern == aware.created_at
        assert stats.newest_pattern == datetime(2024, 2, 1, tzinfo=timezone.utc)
