# src/fusion/models.py - v1
"""Models for trajectory prediction and tactical/strategic fusion."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Priority = Literal["critical", "high", "medium", "low"]
StrategicTrajectory = Literal["improving", "stable", "declining"]
RiskLevel = Literal["low", "medium", "high"]


class _FusionModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)


# === CONFIGURATION ===


class OutcomeMapping(_FusionModel):
    """Outcome keys counted toward each side of a prediction."""

    primary_win: list[str] = Field(
        default_factory=lambda: ["primary_wins", "white_wins", "success", "win"]
    )
    secondary_win: list[str] = Field(
        default_factory=lambda: ["secondary_wins", "black_wins", "failure", "loss"]
    )
    draw: list[str] = Field(
        default_factory=lambda: ["draw", "neutral", "uncertain", "tie"]
    )


class PredictionConfig(_FusionModel):
    """Weights and limits for trajectory prediction."""

    match_confidence_weight: float = Field(default=0.6, ge=0.0)
    archetype_confidence_weight: float = Field(default=0.4, ge=0.0)
    max_lookahead: int = Field(default=80, ge=0)
    min_sample_size: int = Field(default=5, ge=1)
    outcome_mapping: OutcomeMapping = Field(default_factory=OutcomeMapping)


class FusionConfig(_FusionModel):
    """Weights and thresholds for fusing tactical and strategic insight."""

    tactical_weight: float = Field(default=0.5, ge=0.0)
    strategic_weight: float = Field(default=0.5, ge=0.0)
    critical_evaluation_threshold: float = Field(default=3.0, ge=0.0)
    critical_severity: float = Field(default=0.9, ge=0.0, le=1.0)
    high_confidence: float = Field(default=0.7, ge=0.0, le=1.0)
    medium_confidence: float = Field(default=0.4, ge=0.0, le=1.0)
    max_alternatives: int = Field(default=3, ge=0)


# === INSIGHTS ===


class TacticalInsight(_FusionModel):
    """Calculation-based analysis supplied by a domain adapter."""

    evaluation: float
    best_action: str
    depth: int = Field(default=0, ge=0)
    confidence: float = Field(ge=0.0, le=1.0)
    themes: list[str] = Field(default_factory=list)


class StrategicInsight(_FusionModel):
    """Pattern-based assessment derived from historical matches."""

    archetype: str
    trajectory: StrategicTrajectory = "stable"
    factors: list[str] = Field(default_factory=list)
    confidence: float = Field(ge=0.0, le=1.0)


class FusedRecommendation(_FusionModel):
    """Blend of tactical and strategic recommendations."""

    action: str
    tactical_reason: str
    strategic_reason: str
    confidence: float = Field(ge=0.0, le=1.0)
    priority: Priority
    alternatives: list[str] = Field(default_factory=list)


# === TRAJECTORY ===


class TrajectoryMilestone(_FusionModel):
    """Predicted future event."""

    predicted_index: int
    event: str
    probability: float = Field(ge=0.0, le=1.0)
    impact: float = Field(ge=0.0, le=1.0)
    recommendation: str | None = None


class TrajectoryPrediction(_FusionModel):
    """Forecast of where the sequence is heading."""

    predicted_outcome: str
    confidence: float = Field(ge=0.0, le=1.0)
    primary_win_probability: float = Field(ge=0.0, le=1.0)
    secondary_win_probability: float = Field(ge=0.0, le=1.0)
    draw_probability: float = Field(ge=0.0, le=1.0)
    milestones: list[TrajectoryMilestone] = Field(default_factory=list)
    strategic_guidance: str = ""
    lookahead_horizon: int = Field(default=0, ge=0)
    pattern_sample_size: int = Field(default=0, ge=0)


class SustainabilityAssessment(_FusionModel):
    sustainable: bool
    reason: str
    risk_level: RiskLevel


class HybridPrediction(_FusionModel):
    """Complete hybrid analysis of one state."""

    domain: str
    timestamp: datetime
    current_state: str
    tactical: TacticalInsight | None = None
    strategic: StrategicInsight
    recommendation: FusedRecommendation
    trajectory: TrajectoryPrediction
    overall_confidence: float = Field(ge=0.0, le=1.0)
