# src/fusion/hybrid.py - v1
"""Hybrid fusion of tactical (calculation) and strategic (pattern) insight.

The tactical side is optional: domains without a calculation engine
still get a recommendation, with confidence reduced accordingly.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime, timezone

from enpensent.archetypes.models import ArchetypeDefinition, ArchetypeRegistry
from enpensent.core.models import PatternMatch, TemporalSignature
from enpensent.fusion.models import (
    FusedRecommendation,
    FusionConfig,
    HybridPrediction,
    PredictionConfig,
    Priority,
    StrategicInsight,
    StrategicTrajectory,
    TacticalInsight,
)
from enpensent.fusion.trajectory import (
    archetype_recommendation,
    assess_trajectory_sustainability,
    format_label,
    generate_trajectory_prediction,
)
from enpensent.matching.matcher import (
    DEFAULT_MIN_SAMPLE_SIZE,
    calculate_match_confidence,
    get_most_likely_outcome,
)

logger = logging.getLogger(__name__)

MOMENTUM_TRAJECTORY_THRESHOLD = 0.2
NO_PATTERN_DATA = "No historical pattern data"


# === STRATEGIC ===


def _dominant_archetype(matches: Sequence[PatternMatch], fallback: str) -> str:
    """Similarity-weighted archetype vote; first seen wins ties."""
    votes: dict[str, float] = {}
    for match in matches:
        archetype = match.signature.archetype
        votes[archetype] = votes.get(archetype, 0.0) + match.similarity
    if not votes or sum(votes.values()) <= 0:
        return fallback

    best, best_weight = fallback, -1.0
    for archetype, weight in votes.items():
        if weight > best_weight:
            best, best_weight = archetype, weight
    return best


def _trajectory_direction(signature: TemporalSignature) -> StrategicTrajectory:
    flow = signature.temporal_flow
    if flow.trend == "accelerating" or flow.momentum > MOMENTUM_TRAJECTORY_THRESHOLD:
        return "improving"
    if flow.trend == "declining" or flow.momentum < -MOMENTUM_TRAJECTORY_THRESHOLD:
        return "declining"
    return "stable"


def derive_strategic_insight(
    signature: TemporalSignature,
    matches: Sequence[PatternMatch],
    registry: ArchetypeRegistry | None = None,
    min_sample_size: int = DEFAULT_MIN_SAMPLE_SIZE,
) -> StrategicInsight:
    """Assess the long-term picture from historical matches.

    With no matches the archetype falls back to the signature's own and
    confidence is 0.
    """
    archetype = _dominant_archetype(matches, signature.archetype)
    definition = registry.get(archetype) if registry is not None else None

    factors: list[str] = []
    if definition is not None:
        factors.append(
            f"{definition.name} archetype (base rate {round(definition.success_rate * 100)}%)"
        )
    else:
        factors.append(f"{format_label(archetype)} archetype")
    factors.append(f"{format_label(signature.temporal_flow.trend)} trend")

    if matches:
        factors.append(f"{len(matches)} similar historical patterns")
        most_likely = get_most_likely_outcome(matches)
        if most_likely is not None:
            factors.append(
                f"{round(most_likely.probability * 100)}% lean toward {format_label(most_likely.outcome)}"
            )
    factors.append(assess_trajectory_sustainability(signature).reason)

    return StrategicInsight(
        archetype=archetype,
        trajectory=_trajectory_direction(signature),
        factors=factors,
        confidence=calculate_match_confidence(matches, min_sample_size),
    )


# === FUSION ===


def _priority(
    tactical: TacticalInsight | None,
    signature: TemporalSignature,
    confidence: float,
    config: FusionConfig,
) -> Priority:
    if tactical is not None and abs(tactical.evaluation) >= config.critical_evaluation_threshold:
        return "critical"
    if any(m.severity >= config.critical_severity for m in signature.critical_moments):
        return "critical"
    if confidence >= config.high_confidence:
        return "high"
    if confidence >= config.medium_confidence:
        return "medium"
    return "low"


def _alternatives(
    action: str,
    definition: ArchetypeDefinition | None,
    registry: ArchetypeRegistry | None,
    limit: int,
) -> list[str]:
    """Archetype-derived alternative actions, own recommendations first."""
    candidates: list[str] = []
    if definition is not None:
        candidates.extend(definition.recommendations)
        if registry is not None:
            for related_id in definition.related_archetypes:
                related = registry.get(related_id)
                if related is not None:
                    candidates.extend(related.recommendations[:1])

    alternatives: list[str] = []
    for candidate in candidates:
        if candidate != action and candidate not in alternatives:
            alternatives.append(candidate)
    return alternatives[:limit]


def fuse_recommendation(
    tactical: TacticalInsight | None,
    strategic: StrategicInsight,
    matches: Sequence[PatternMatch],
    signature: TemporalSignature,
    registry: ArchetypeRegistry | None = None,
    config: FusionConfig | None = None,
) -> FusedRecommendation:
    """Blend tactical and strategic insight into one recommendation.

    A missing tactical insight contributes zero confidence. The action
    then comes from the strategic archetype's recommendation.
    """
    cfg = config or FusionConfig()
    definition = registry.get(strategic.archetype) if registry is not None else None

    tactical_confidence = tactical.confidence if tactical is not None else 0.0
    weight_total = cfg.tactical_weight + cfg.strategic_weight
    if weight_total > 0:
        confidence = (
            cfg.tactical_weight * tactical_confidence
            + cfg.strategic_weight * strategic.confidence
        ) / weight_total
    else:
        confidence = 0.0
    confidence = max(0.0, min(1.0, confidence))

    if tactical is not None:
        action = tactical.best_action
        tactical_reason = f"Evaluation {tactical.evaluation:+.2f} at depth {tactical.depth}"
        if tactical.themes:
            tactical_reason += f" ({', '.join(tactical.themes)})"
    else:
        action = archetype_recommendation(strategic.archetype, definition)
        tactical_reason = "No tactical analysis available"

    label = definition.name if definition is not None else format_label(strategic.archetype)
    if not matches:
        strategic_reason = f"{NO_PATTERN_DATA}; assessment based on {label} archetype"
    else:
        most_likely = get_most_likely_outcome(matches)
        strategic_reason = f"{len(matches)} similar patterns, {label} archetype, {strategic.trajectory} trajectory"
        if most_likely is not None:
            strategic_reason += (
                f"; {round(most_likely.probability * 100)}% toward {format_label(most_likely.outcome)}"
            )

    return FusedRecommendation(
        action=action,
        tactical_reason=tactical_reason,
        strategic_reason=strategic_reason,
        confidence=confidence,
        priority=_priority(tactical, signature, confidence, cfg),
        alternatives=_alternatives(action, definition, registry, cfg.max_alternatives),
    )


def generate_hybrid_prediction(
    signature: TemporalSignature,
    matches: Sequence[PatternMatch],
    *,
    domain: str,
    current_state: str,
    current_position: int,
    total_expected_length: int,
    tactical: TacticalInsight | None = None,
    registry: ArchetypeRegistry | None = None,
    prediction_config: PredictionConfig | None = None,
    fusion_config: FusionConfig | None = None,
    timestamp: datetime | None = None,
) -> HybridPrediction:
    """Run strategic derivation, fusion and trajectory prediction together.

    ``overall_confidence`` is the mean of the recommendation and
    trajectory confidences.
    """
    pcfg = prediction_config or PredictionConfig()
    strategic = derive_strategic_insight(signature, matches, registry, pcfg.min_sample_size)
    recommendation = fuse_recommendation(
        tactical, strategic, matches, signature, registry, fusion_config,
    )
    definition = registry.get(signature.archetype) if registry is not None else None
    trajectory = generate_trajectory_prediction(
        signature, matches, definition, current_position, total_expected_length, pcfg,
    )

    overall = (recommendation.confidence + trajectory.confidence) / 2.0
    logger.debug(
        "Hybrid prediction for %s: action=%r priority=%s confidence=%.3f",
        signature.fingerprint, recommendation.action, recommendation.priority, overall,
    )
    return HybridPrediction(
        domain=domain,
        timestamp=timestamp or datetime.now(timezone.utc),
        current_state=current_state,
        tactical=tactical,
        strategic=strategic,
        recommendation=recommendation,
        trajectory=trajectory,
        overall_confidence=overall,
    )
