# src/fusion/trajectory.py - v1
"""Trajectory prediction from a signature and its historical matches.

Outcome keys are mapped to primary/secondary/draw buckets via
PredictionConfig.outcome_mapping so any domain vocabulary
(white_wins, success, loss...) can feed the same forecast.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence

from enpensent.archetypes.models import ArchetypeDefinition
from enpensent.core.models import PatternMatch, TemporalSignature
from enpensent.fusion.models import (
    PredictionConfig,
    SustainabilityAssessment,
    TrajectoryMilestone,
    TrajectoryPrediction,
)
from enpensent.matching.matcher import (
    calculate_match_confidence,
    calculate_outcome_probabilities,
    get_most_likely_outcome,
)

logger = logging.getLogger(__name__)

DEFAULT_ARCHETYPE_CONFIDENCE = 0.5
MAX_MILESTONES = 5

ARCHETYPE_RECOMMENDATIONS: dict[str, str] = {
    "rapid_growth": "Sustain growth rate while building infrastructure",
    "refactor_cycle": "Complete refactoring before adding new features",
    "tech_debt_spiral": "Address technical debt immediately",
    "stability_plateau": "Consider innovation to avoid stagnation",
    "feature_burst": "Consolidate gains and improve test coverage",
    "death_march": "Reduce scope and prioritize sustainability",
    "kingside_attack": "Press the attack while maintaining defense",
    "queenside_expansion": "Expand territorial control",
    "central_domination": "Leverage central control for flexibility",
    "open_tactical": "Calculate carefully, avoid simplification",
}
FALLBACK_RECOMMENDATION = "Continue current strategy with vigilance"

_TREND_GUIDANCE = {
    "accelerating": "Momentum is building - capitalize on current trajectory",
    "declining": "Activity declining - consider repositioning or intervention",
    "volatile": "High volatility detected - exercise caution",
    "stable": "Stable trajectory - maintain current course",
}


def format_label(value: str) -> str:
    """``kingside_attack`` -> ``Kingside Attack``."""
    return " ".join(word.capitalize() for word in value.split("_") if word)


def archetype_recommendation(
    archetype: str, definition: ArchetypeDefinition | None = None,
) -> str:
    """First registry recommendation for an archetype, else the built-in map."""
    if definition is not None and definition.id == archetype and definition.recommendations:
        return definition.recommendations[0]
    return ARCHETYPE_RECOMMENDATIONS.get(archetype, FALLBACK_RECOMMENDATION)


# === PROBABILITIES ===


def _side_probabilities(
    probabilities: dict[str, float],
    definition: ArchetypeDefinition | None,
    config: PredictionConfig,
) -> tuple[float, float, float]:
    """Bucket outcome probabilities into (primary, secondary, draw) summing to 1."""
    if not probabilities:
        return _prior_probabilities(definition)

    mapping = config.outcome_mapping
    primary = secondary = draw = unmapped = 0.0
    for outcome, probability in probabilities.items():
        if outcome in mapping.primary_win:
            primary += probability
        elif outcome in mapping.secondary_win:
            secondary += probability
        elif outcome in mapping.draw:
            draw += probability
        else:
            unmapped += probability

    share = unmapped / 3.0
    return _normalized(primary + share, secondary + share, draw + share)


def _prior_probabilities(
    definition: ArchetypeDefinition | None,
) -> tuple[float, float, float]:
    """Archetype base rate when no matches exist; uniform without one."""
    if definition is None or definition.predicted_outcome == "uncertain":
        return _normalized(1.0, 1.0, 1.0)

    rate = definition.success_rate
    rest = (1.0 - rate) / 2.0
    if definition.predicted_outcome == "primary_wins":
        return _normalized(rate, rest, rest)
    if definition.predicted_outcome == "secondary_wins":
        return _normalized(rest, rate, rest)
    return _normalized(rest, rest, rate)


def _normalized(primary: float, secondary: float, draw: float) -> tuple[float, float, float]:
    total = primary + secondary + draw
    if total <= 0:
        return (1 / 3, 1 / 3, 1 / 3)
    p = primary / total
    s = secondary / total
    return (p, s, max(0.0, 1.0 - p - s))


# === MILESTONES ===


def _ahead(current_position: int, remaining: int, fraction: float) -> int:
    """Index a fraction into the remaining window, at least one step ahead."""
    return current_position + max(1, math.floor(remaining * fraction))


def _generate_milestones(
    signature: TemporalSignature,
    definition: ArchetypeDefinition | None,
    current_position: int,
    total_length: int,
) -> list[TrajectoryMilestone]:
    remaining = total_length - current_position
    if remaining <= 0:
        return []

    milestones = [
        TrajectoryMilestone(
            predicted_index=_ahead(current_position, remaining, 0.25),
            event="Critical Decision Point",
            probability=0.75,
            impact=0.8 if signature.intensity > 0.6 else 0.5,
            recommendation=(
                "Maintain momentum"
                if signature.temporal_flow.trend == "accelerating"
                else "Consider strategic pivot"
            ),
        ),
        TrajectoryMilestone(
            predicted_index=_ahead(current_position, remaining, 0.5),
            event="Trajectory Confirmation",
            probability=0.65,
            impact=0.6,
            recommendation="Evaluate if current pattern holds",
        ),
    ]

    if signature.archetype and remaining > 10:
        milestones.append(TrajectoryMilestone(
            predicted_index=_ahead(current_position, remaining, 0.7),
            event=f"{format_label(signature.archetype)} Phase",
            probability=0.7,
            impact=0.7,
            recommendation=archetype_recommendation(signature.archetype, definition),
        ))

    upcoming = [m for m in signature.critical_moments if m.index > current_position]
    for moment in upcoming[:2]:
        milestones.append(TrajectoryMilestone(
            predicted_index=moment.index,
            event=moment.description,
            probability=moment.severity,
            impact=moment.severity,
            recommendation=f"Prepare for {moment.type}",
        ))

    kept = [m for m in milestones if current_position < m.predicted_index <= total_length]
    kept.sort(key=lambda m: m.predicted_index)
    return kept[:MAX_MILESTONES]


# === GUIDANCE ===


def _strategic_guidance(
    signature: TemporalSignature,
    definition: ArchetypeDefinition | None,
    probabilities: dict[str, float],
) -> str:
    parts: list[str] = []
    if definition is not None:
        parts.append(f'Pattern matches "{definition.name}" archetype')
        if definition.success_rate > 0.6:
            parts.append(
                f"historically successful {round(definition.success_rate * 100)}% of the time"
            )

    parts.append(_TREND_GUIDANCE[signature.temporal_flow.trend])

    if signature.dominant_force != "balanced":
        side = "Primary" if signature.dominant_force == "primary" else "Secondary"
        parts.append(f"{side} force has initiative")

    if probabilities:
        outcome, probability = max(probabilities.items(), key=lambda item: item[1])
        if probability > 0.5:
            parts.append(
                f"{round(probability * 100)}% trajectory toward {format_label(outcome)}"
            )

    return ". ".join(parts) + "."


# === PUBLIC API ===


def generate_trajectory_prediction(
    signature: TemporalSignature,
    matches: Sequence[PatternMatch],
    archetype_definition: ArchetypeDefinition | None,
    current_position: int,
    total_expected_length: int,
    config: PredictionConfig | None = None,
) -> TrajectoryPrediction:
    """Forecast outcome probabilities, milestones and lookahead.

    Args:
        signature: Current signature.
        matches: Historical matches, typically from find_similar_patterns.
        archetype_definition: Definition of the signature's archetype, if any.
        current_position: Index of the current state.
        total_expected_length: Expected total sequence length.
        config: Prediction weights and outcome mapping.

    Returns:
        TrajectoryPrediction whose three side probabilities sum to 1.
    """
    cfg = config or PredictionConfig()

    probabilities = calculate_outcome_probabilities(matches)
    most_likely = get_most_likely_outcome(matches)

    match_confidence = calculate_match_confidence(matches, cfg.min_sample_size)
    archetype_confidence = (
        archetype_definition.confidence
        if archetype_definition is not None
        else DEFAULT_ARCHETYPE_CONFIDENCE
    )
    weight_total = cfg.match_confidence_weight + cfg.archetype_confidence_weight
    if weight_total > 0:
        confidence = (
            match_confidence * cfg.match_confidence_weight
            + archetype_confidence * cfg.archetype_confidence_weight
        ) / weight_total
    else:
        confidence = 0.0
    confidence = max(0.0, min(1.0, confidence))

    primary, secondary, draw = _side_probabilities(probabilities, archetype_definition, cfg)

    remaining = total_expected_length - current_position
    lookahead = max(0, min(remaining, math.floor(cfg.max_lookahead * confidence)))

    prediction = TrajectoryPrediction(
        predicted_outcome=most_likely.outcome if most_likely else "uncertain",
        confidence=confidence,
        primary_win_probability=primary,
        secondary_win_probability=secondary,
        draw_probability=draw,
        milestones=_generate_milestones(
            signature, archetype_definition, current_position, total_expected_length,
        ),
        strategic_guidance=_strategic_guidance(signature, archetype_definition, probabilities),
        lookahead_horizon=lookahead,
        pattern_sample_size=len(matches),
    )
    logger.debug(
        "Trajectory for %s: %s (confidence=%.3f, %d matches)",
        signature.fingerprint, prediction.predicted_outcome, confidence, len(matches),
    )
    return prediction


def calculate_trajectory_divergence(
    signature: TemporalSignature, matches: Sequence[PatternMatch],
) -> float:
    """How far the current path departs from its matches (1.0 with no matches)."""
    if not matches:
        return 1.0
    n = len(matches)
    mean_intensity = sum(m.signature.intensity for m in matches) / n
    mean_momentum = sum(m.signature.temporal_flow.momentum for m in matches) / n
    intensity_gap = abs(signature.intensity - mean_intensity)
    momentum_gap = abs(signature.temporal_flow.momentum - mean_momentum) / 2.0
    return (intensity_gap + momentum_gap) / 2.0


def assess_trajectory_sustainability(signature: TemporalSignature) -> SustainabilityAssessment:
    """Flag trajectories likely to burn out or lose direction."""
    flow = signature.temporal_flow

    if flow.trend == "accelerating" and signature.intensity > 0.8:
        return SustainabilityAssessment(
            sustainable=False,
            reason="High intensity with accelerating trend may lead to burnout",
            risk_level="high",
        )
    if flow.trend == "declining" and flow.momentum < -0.5:
        return SustainabilityAssessment(
            sustainable=False,
            reason="Declining trend with negative momentum indicates loss of direction",
            risk_level="high",
        )
    if sum(1 for m in signature.critical_moments if m.severity > 0.7) > 3:
        return SustainabilityAssessment(
            sustainable=False,
            reason="Too many critical moments indicate instability",
            risk_level="medium",
        )
    if flow.trend == "volatile":
        return SustainabilityAssessment(
            sustainable=True, reason="Volatile but may stabilize", risk_level="medium",
        )
    return SustainabilityAssessment(
        sustainable=True, reason="Current trajectory appears sustainable", risk_level="low",
    )
