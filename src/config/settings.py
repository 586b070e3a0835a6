# src/config/settings.py - v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for matching, prediction, storage and logging
settings. Environment variables use the ENPENSENT_ prefix
(e.g. ENPENSENT_MIN_SIMILARITY=0.6).
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from enpensent.core.similarity import SimilarityWeights
    from enpensent.fusion.models import FusionConfig, PredictionConfig


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_prefix="ENPENSENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Similarity weights ===
    weight_archetype: float = 0.3
    weight_quadrant: float = 0.25
    weight_temporal: float = 0.25
    weight_intensity: float = 0.1
    weight_flow_direction: float = 0.1
    relatedness: Literal["exact", "registry"] = "exact"

    # === Matching ===
    min_similarity: float = 0.0
    match_limit: int | None = None
    min_sample_size: int = 5

    # === Prediction ===
    match_confidence_weight: float = 0.6
    archetype_confidence_weight: float = 0.4
    max_lookahead: int = 80

    # === Fusion ===
    tactical_weight: float = 0.5
    strategic_weight: float = 0.5
    critical_evaluation_threshold: float = 3.0

    # === Pattern store ===
    store_backend: Literal["memory", "json", "sqlite"] = "json"
    store_root: Path = Path("~/.enpensent/patterns")
    store_fetch_limit: int | None = 500

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("max_lookahead")
    @classmethod
    def validate_max_lookahead(cls, v: int) -> int:
        if v < 0:
            raise ValueError("max_lookahead must be >= 0")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate weight and threshold consistency."""
        errors: list[str] = []

        weights = {
            "weight_archetype": self.weight_archetype,
            "weight_quadrant": self.weight_quadrant,
            "weight_temporal": self.weight_temporal,
            "weight_intensity": self.weight_intensity,
            "weight_flow_direction": self.weight_flow_direction,
            "match_confidence_weight": self.match_confidence_weight,
            "archetype_confidence_weight": self.archetype_confidence_weight,
            "tactical_weight": self.tactical_weight,
            "strategic_weight": self.strategic_weight,
        }
        negative = [name for name, value in weights.items() if value < 0]
        if negative:
            errors.append(f"Weights must be >= 0: {', '.join(negative)}")

        similarity_total = (
            self.weight_archetype + self.weight_quadrant + self.weight_temporal
            + self.weight_intensity + self.weight_flow_direction
        )
        if similarity_total <= 0:
            errors.append("At least one similarity weight must be > 0")

        if not 0.0 <= self.min_similarity <= 1.0:
            errors.append("MIN_SIMILARITY must be within [0, 1]")

        if self.min_sample_size < 1:
            errors.append("MIN_SAMPLE_SIZE must be >= 1")

        if self.critical_evaluation_threshold < 0:
            errors.append("CRITICAL_EVALUATION_THRESHOLD must be >= 0")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    def similarity_weights(self) -> SimilarityWeights:
        """Similarity component weights as a core parameter object."""
        from enpensent.core.similarity import SimilarityWeights

        return SimilarityWeights(
            archetype=self.weight_archetype,
            quadrant=self.weight_quadrant,
            temporal=self.weight_temporal,
            intensity=self.weight_intensity,
            flow_direction=self.weight_flow_direction,
        )

    def prediction_config(self) -> PredictionConfig:
        from enpensent.fusion.models import PredictionConfig

        return PredictionConfig(
            match_confidence_weight=self.match_confidence_weight,
            archetype_confidence_weight=self.archetype_confidence_weight,
            max_lookahead=self.max_lookahead,
            min_sample_size=self.min_sample_size,
        )

    def fusion_config(self) -> FusionConfig:
        from enpensent.fusion.models import FusionConfig

        return FusionConfig(
            tactical_weight=self.tactical_weight,
            strategic_weight=self.strategic_weight,
            critical_evaluation_threshold=self.critical_evaluation_threshold,
        )


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-request config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
