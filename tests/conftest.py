# tests/conftest.py - v1
"""Shared test fixtures for all unit tests.

Provides signature factories, sample pools and match sets.
No external dependencies; all I/O goes to tmp_path.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from enpensent.core.models import (
    CriticalMoment,
    PatternCandidate,
    PatternMatch,
    PersistedPattern,
    QuadrantProfile,
    TemporalFlow,
    TemporalSignature,
)


def build_test_signature(
    archetype: str = "type_a",
    fingerprint: str | None = None,
    intensity: float = 0.5,
    quadrants: tuple[float, float, float, float] = (0.25, 0.25, 0.25, 0.25),
    phases: tuple[float, float, float] = (0.4, 0.5, 0.6),
    trend: str = "stable",
    momentum: float = 0.0,
    flow_direction: str = "forward",
    dominant_force: str = "balanced",
    critical_moments: list[CriticalMoment] | None = None,
) -> TemporalSignature:
    """Plain factory usable outside fixtures (e.g. in parametrize)."""
    q1, q2, q3, q4 = quadrants
    opening, middle, ending = phases
    return TemporalSignature(
        fingerprint=fingerprint or f"EP-{archetype.upper()[:4]}{int(intensity * 1000):04d}",
        archetype=archetype,
        dominant_force=dominant_force,
        flow_direction=flow_direction,
        intensity=intensity,
        quadrant_profile=QuadrantProfile(q1=q1, q2=q2, q3=q3, q4=q4),
        temporal_flow=TemporalFlow(
            opening=opening, middle=middle, ending=ending, trend=trend, momentum=momentum,
        ),
        critical_moments=critical_moments or [],
    )


def build_test_match(
    archetype: str, outcome: str, similarity: float, pattern_id: str | None = None,
) -> PatternMatch:
    return PatternMatch(
        pattern_id=pattern_id or f"{archetype}-{outcome}-{similarity}",
        similarity=similarity,
        signature=build_test_signature(archetype=archetype),
        outcome=outcome,
    )


# === FIXTURES: Signatures ===


@pytest.fixture
def make_signature():
    """Factory fixture for TemporalSignature."""
    return build_test_signature


@pytest.fixture
def sample_signature() -> TemporalSignature:
    """Mid-intensity accelerating signature."""
    return build_test_signature(
        archetype="rapid_growth",
        fingerprint="EP-0000TEST",
        intensity=0.65,
        quadrants=(0.4, 0.3, 0.2, 0.1),
        phases=(0.3, 0.5, 0.7),
        trend="accelerating",
        momentum=0.4,
        dominant_force="primary",
        critical_moments=[
            CriticalMoment(index=12, type="surge", severity=0.8, description="Sharp surge at step 12"),
            CriticalMoment(index=30, type="drop", severity=0.6, description="Sharp drop at step 30"),
        ],
    )


# === FIXTURES: Pools and matches ===


@pytest.fixture
def make_match():
    """Factory fixture for PatternMatch."""
    return build_test_match


@pytest.fixture
def scenario_matches() -> list[PatternMatch]:
    """The three-match reference scenario: two 'a' wins and one 'b' loss."""
    return [
        build_test_match("a", "win", 0.9, "p1"),
        build_test_match("a", "win", 0.8, "p2"),
        build_test_match("b", "loss", 0.5, "p3"),
    ]


@pytest.fixture
def candidate_pool(make_signature) -> list[PatternCandidate]:
    """Mixed pool of candidates across two archetypes."""
    pool: list[PatternCandidate] = []
    for i in range(6):
        archetype = "type_a" if i % 2 == 0 else "type_b"
        pool.append(PatternCandidate(
            id=f"cand_{i}",
            signature=make_signature(archetype=archetype, intensity=0.2 + i * 0.1),
            outcome="win" if i < 4 else "loss",
            metadata={"source": "test", "rank": i},
        ))
    return pool


@pytest.fixture
def make_persisted(make_signature):
    """Factory fixture for PersistedPattern."""
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def _make(
        pattern_id: str,
        domain: str = "code",
        archetype: str = "rapid_growth",
        outcome: str = "success",
        age_days: int = 0,
        intensity: float = 0.5,
        metadata: dict[str, Any] | None = None,
    ) -> PersistedPattern:
        signature = make_signature(archetype=archetype, intensity=intensity)
        return PersistedPattern(
            id=pattern_id,
            domain=domain,
            fingerprint=signature.fingerprint,
            archetype=archetype,
            outcome=outcome,
            signature=signature,
            metadata=metadata or {},
            created_at=base - timedelta(days=age_days),
        )

    return _make
