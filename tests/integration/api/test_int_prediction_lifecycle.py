# tests/integration/api/test_int_prediction_lifecycle.py - v1
"""Integration tests for the record -> persist -> fetch -> predict cycle.

No external services required: filesystem and stdlib sqlite3 only.
"""

from __future__ import annotations

import pytest

from enpensent.api.facade import predict, record_pattern
from enpensent.api.models import PredictionRequest
from enpensent.archetypes.registry import get_builtin_registry
from enpensent.archetypes.resolver import ArchetypeResolver
from enpensent.config.settings import Settings
from enpensent.signature.builder import (
    build_signature,
    calculate_intensity,
    calculate_quadrant_profile,
    calculate_temporal_flow,
    detect_critical_moments,
    determine_dominant_force,
)
from enpensent.storage.store_factory import create_pattern_store


def _commit_history_signature(levels: list[float], regions: list[str]):
    """Build a code-domain signature from per-commit activity on a 0-100 scale."""
    registry = get_builtin_registry("code")
    unit_levels = [lvl / 100.0 for lvl in levels]
    profile = calculate_quadrant_profile(zip(regions, levels))
    flow = calculate_temporal_flow(unit_levels)
    intensity = calculate_intensity((lvl, 1.0) for lvl in unit_levels)
    moments = detect_critical_moments(unit_levels)
    force = determine_dominant_force(sum(unit_levels[len(unit_levels) // 2:]),
                                     sum(unit_levels[: len(unit_levels) // 2]))
    draft = build_signature(profile, flow, "unknown", intensity, force, critical_moments=moments)
    archetype = ArchetypeResolver(registry).resolve(draft).archetype
    return build_signature(profile, flow, archetype, intensity, force, critical_moments=moments)


GROWTH = ([10, 20, 35, 50, 65, 80, 90, 95], ["q1", "q1", "q2", "q1", "q2", "q1", "q2", "q1"])
DECLINE = ([90, 80, 60, 45, 30, 20, 10, 5], ["q3", "q4", "q3", "q4", "q3", "q4", "q3", "q4"])


@pytest.mark.parametrize("backend", ["json", "sqlite"])
class TestPredictionLifecycle:
    @pytest.mark.asyncio
    async def test_recorded_history_drives_prediction(self, tmp_path, backend):
        settings = Settings(_env_file=None, store_backend=backend, store_root=tmp_path / "store")
        store = create_pattern_store(settings)

        growth = _commit_history_signature(*GROWTH)
        decline = _commit_history_signature(*DECLINE)
        for i in range(4):
            await record_pattern(store, "code", growth, "success", metadata={"repo": f"g{i}"})
        await record_pattern(store, "code", decline, "failure", metadata={"repo": "d0"})

        request = PredictionRequest(
            domain="code", signature=growth, current_position=8, total_expected_length=40,
        )
        result = await predict(request, store, settings)

        assert result.pool_size == 5
        assert result.matches[0].similarity == pytest.approx(1.0)
        assert result.summary.most_likely.outcome == "success"
        trajectory = result.prediction.trajectory
        assert trajectory.primary_win_probability > trajectory.secondary_win_probability
        assert trajectory.pattern_sample_size == 5
        assert result.prediction.recommendation.alternatives

        if backend == "sqlite":
            store.close()

    @pytest.mark.asyncio
    async def test_store_reopened_between_runs(self, tmp_path, backend):
        settings = Settings(_env_file=None, store_backend=backend, store_root=tmp_path / "store")
        first = create_pattern_store(settings)
        growth = _commit_history_signature(*GROWTH)
        recorded = await record_pattern(first, "code", growth, "success")
        if backend == "sqlite":
            first.close()

        second = create_pattern_store(settings)
        reloaded = await second.get(recorded.id)
        assert reloaded == recorded
        if backend == "sqlite":
            second.close()
