# src/signature/builder.py - v1
"""Domain-agnostic signature extraction helpers.

Domain adapters turn raw states into activity measurements, then call
these helpers to assemble a TemporalSignature. All helpers return values
in the canonical [0, 1] range; percent-scale inputs go through
normalize_unit / normalize_quadrant_profile first.
"""

from __future__ import annotations

import hashlib
import json
import logging
from collections.abc import Iterable, Sequence
from typing import Any

import numpy as np

from enpensent.core.models import (
    CriticalMoment,
    DominantForce,
    FlowDirection,
    QuadrantProfile,
    TemporalFlow,
    TemporalSignature,
    Trend,
)

logger = logging.getLogger(__name__)

FINGERPRINT_PREFIX = "EP-"

DEFAULT_PHASE_BOUNDARIES = {"opening": 0.33, "middle": 0.34}

TREND_THRESHOLD = 0.1
VOLATILITY_THRESHOLD = 0.25

_QUADRANT_REGIONS = ("q1", "q2", "q3", "q4")


# === HASHING ===


def hash_string(value: str) -> str:
    """Return an 8-character lowercase hex digest of a string."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()[:8]


def generate_fingerprint(
    quadrant_profile: QuadrantProfile,
    temporal_flow: TemporalFlow,
    archetype: str,
    intensity: float,
    dominant_force: DominantForce = "balanced",
    flow_direction: FlowDirection = "forward",
    critical_moments: Sequence[CriticalMoment] = (),
    domain_data: dict[str, Any] | None = None,
) -> str:
    """Deterministic ``EP-XXXXXXXX`` fingerprint of a signature's content.

    Every field that takes part in similarity scoring is hashed, so equal
    fingerprints imply equal similarity against any other signature.
    """
    center = quadrant_profile.center
    parts = [
        ",".join(f"{v:.4f}" for v in quadrant_profile.axes()),
        "-" if center is None else f"{center:.4f}",
        ",".join(f"{v:.4f}" for v in temporal_flow.phases()),
        temporal_flow.trend,
        f"{temporal_flow.momentum:.4f}",
        archetype,
        f"{intensity:.4f}",
        dominant_force,
        flow_direction,
        ";".join(f"{m.index}:{m.type}:{m.severity:.4f}" for m in critical_moments),
        json.dumps(domain_data or {}, sort_keys=True, default=str),
    ]
    return FINGERPRINT_PREFIX + hash_string("|".join(parts)).upper()


# === RANGE NORMALIZATION ===


def normalize_unit(value: float) -> float:
    """Map a scalar into [0, 1], treating values above 1 as percentages."""
    if value > 1.0:
        value = value / 100.0
    return max(0.0, min(1.0, value))


def normalize_quadrant_profile(profile: QuadrantProfile) -> QuadrantProfile:
    """Rescale a percent-range profile into [0, 1].

    A profile is treated as percent-range when any axis exceeds 1;
    in that case every axis (center included) is divided by 100.
    """
    values = list(profile.axes())
    if profile.center is not None:
        values.append(profile.center)
    if max(values, default=0.0) <= 1.0:
        return profile

    def scale(v: float) -> float:
        return max(0.0, min(1.0, v / 100.0))

    update: dict[str, Any] = {r: scale(getattr(profile, r)) for r in _QUADRANT_REGIONS}
    if profile.center is not None:
        update["center"] = scale(profile.center)
    return profile.model_copy(update=update)


# === PROFILES ===


def calculate_quadrant_profile(
    activities: Iterable[tuple[str, float]],
) -> QuadrantProfile:
    """Build a normalized profile from ``(region, weight)`` activity pairs.

    Regions are q1..q4 and "center"; other region names land in ``custom``.
    Weights are normalized to sum to 1. No activity yields 0.25 per quadrant.
    """
    totals: dict[str, float] = {}
    for region, weight in activities:
        if weight > 0:
            totals[region] = totals.get(region, 0.0) + weight

    grand_total = sum(totals.values())
    if grand_total <= 0:
        return QuadrantProfile(q1=0.25, q2=0.25, q3=0.25, q4=0.25)

    profile: dict[str, Any] = {
        r: totals.pop(r, 0.0) / grand_total for r in _QUADRANT_REGIONS
    }
    if "center" in totals:
        profile["center"] = totals.pop("center") / grand_total
    if totals:
        profile["custom"] = {k: v / grand_total for k, v in totals.items()}
    return QuadrantProfile(**profile)


def _phase_slices(n: int, boundaries: dict[str, float]) -> tuple[slice, slice, slice]:
    opening_cut = int(round(n * boundaries.get("opening", 0.33)))
    middle_cut = int(round(n * (boundaries.get("opening", 0.33) + boundaries.get("middle", 0.34))))
    if n >= 3:
        opening_cut = min(max(opening_cut, 1), n - 2)
        middle_cut = min(max(middle_cut, opening_cut + 1), n - 1)
    return slice(0, opening_cut), slice(opening_cut, middle_cut), slice(middle_cut, n)


def calculate_temporal_flow(
    activity_levels: Sequence[float],
    boundaries: dict[str, float] | None = None,
) -> TemporalFlow:
    """Summarize an activity curve into phase means, trend and momentum.

    Args:
        activity_levels: Per-step activity, clipped into [0, 1].
        boundaries: Fractions of the sequence for "opening" and "middle";
            the ending takes the rest.

    Returns:
        TemporalFlow. An empty curve is all zeros and stable.
    """
    if len(activity_levels) == 0:
        return TemporalFlow(opening=0.0, middle=0.0, ending=0.0, trend="stable", momentum=0.0)

    levels = np.clip(np.asarray(activity_levels, dtype=np.float64), 0.0, 1.0)
    overall = float(levels.mean())
    bounds = {**DEFAULT_PHASE_BOUNDARIES, **(boundaries or {})}

    phases = []
    for part in _phase_slices(len(levels), bounds):
        chunk = levels[part]
        phases.append(float(chunk.mean()) if chunk.size else overall)
    opening, middle, ending = phases

    momentum = max(-1.0, min(1.0, ending - opening))
    volatility = float(np.abs(np.diff(levels)).mean()) if levels.size > 1 else 0.0

    trend: Trend
    if volatility > VOLATILITY_THRESHOLD:
        trend = "volatile"
    elif momentum > TREND_THRESHOLD:
        trend = "accelerating"
    elif momentum < -TREND_THRESHOLD:
        trend = "declining"
    else:
        trend = "stable"

    return TemporalFlow(
        opening=opening, middle=middle, ending=ending, trend=trend, momentum=momentum,
    )


# === CRITICAL MOMENTS ===


def detect_critical_moments(
    values: Sequence[float],
    threshold: float = 0.2,
    min_severity: float = 0.3,
    max_moments: int = 10,
) -> list[CriticalMoment]:
    """Find step changes of at least ``threshold`` in a value series.

    Severity is the step size relative to the series range. When more than
    ``max_moments`` qualify, the most severe are kept. Output is chronological.
    """
    if len(values) < 3:
        return []

    series = np.asarray(values, dtype=np.float64)
    value_range = float(series.max() - series.min())
    if value_range <= 0:
        return []

    moments: list[CriticalMoment] = []
    for i in range(1, len(series)):
        delta = float(series[i] - series[i - 1])
        if abs(delta) < threshold:
            continue
        severity = min(1.0, abs(delta) / value_range)
        if severity < min_severity:
            continue
        kind = "surge" if delta > 0 else "drop"
        moments.append(CriticalMoment(
            index=i,
            type=kind,
            severity=severity,
            description=f"Sharp {kind} of {abs(delta):.2f} at step {i}",
            metadata={"delta": delta, "from": float(series[i - 1]), "to": float(series[i])},
        ))

    if len(moments) > max_moments:
        moments = sorted(moments, key=lambda m: m.severity, reverse=True)[:max_moments]
        moments.sort(key=lambda m: m.index)
    return moments


# === SCALARS ===


def calculate_intensity(metrics: Iterable[tuple[float, float]]) -> float:
    """Weighted average of ``(value, weight)`` pairs, clamped to [0, 1]."""
    total = 0.0
    total_weight = 0.0
    for value, weight in metrics:
        total += value * weight
        total_weight += weight
    if total_weight <= 0:
        return 0.0
    return max(0.0, min(1.0, total / total_weight))


def determine_dominant_force(
    primary: float, secondary: float, threshold: float = 0.05,
) -> DominantForce:
    """Which side leads, or "balanced" when within ``threshold``."""
    diff = primary - secondary
    if diff > threshold:
        return "primary"
    if diff < -threshold:
        return "secondary"
    return "balanced"


def determine_flow_direction(
    profile: QuadrantProfile, threshold: float = 0.1,
) -> FlowDirection:
    """Infer flow direction from quadrant concentration.

    q1+q2 against q3+q4 gives forward/backward; q1+q3 against q2+q4 gives
    lateral. An even spread is chaotic.
    """
    q1, q2, q3, q4 = profile.axes()
    total = q1 + q2 + q3 + q4
    if total <= 0:
        return "chaotic"

    vertical = ((q1 + q2) - (q3 + q4)) / total
    horizontal = ((q1 + q3) - (q2 + q4)) / total
    if abs(vertical) >= abs(horizontal) and abs(vertical) > threshold:
        return "forward" if vertical > 0 else "backward"
    if abs(horizontal) > threshold:
        return "lateral"
    return "chaotic"


# === ASSEMBLY ===


def build_signature(
    quadrant_profile: QuadrantProfile,
    temporal_flow: TemporalFlow,
    archetype: str,
    intensity: float,
    dominant_force: DominantForce = "balanced",
    flow_direction: FlowDirection | None = None,
    critical_moments: list[CriticalMoment] | None = None,
    domain_data: dict[str, Any] | None = None,
) -> TemporalSignature:
    """Assemble a TemporalSignature, normalizing ranges and fingerprinting it."""
    profile = normalize_quadrant_profile(quadrant_profile)
    unit_intensity = normalize_unit(intensity)
    direction = flow_direction or determine_flow_direction(profile)
    moments = critical_moments or []
    signature = TemporalSignature(
        fingerprint=generate_fingerprint(
            profile, temporal_flow, archetype, unit_intensity,
            dominant_force=dominant_force,
            flow_direction=direction,
            critical_moments=moments,
            domain_data=domain_data,
        ),
        archetype=archetype,
        dominant_force=dominant_force,
        flow_direction=direction,
        intensity=unit_intensity,
        quadrant_profile=profile,
        temporal_flow=temporal_flow,
        critical_moments=moments,
        domain_data=domain_data,
    )
    logger.debug("Built signature %s (%s)", signature.fingerprint, archetype)
    return signature
