# src/core/models.py - v1
"""Shared Pydantic domain models used across modules.

No module redefines these types; all imports come from core.models.
Signatures are produced once by a domain adapter and are immutable
afterwards: every model here is frozen, adjustments go through
``model_copy(update=...)``.

Field names are snake_case; camelCase aliases (``quadrantProfile``,
``dominantForce``...) are accepted on input so pools exported by the
web store load unchanged.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

Trend = Literal["accelerating", "stable", "declining", "volatile"]
DominantForce = Literal["primary", "secondary", "balanced"]
FlowDirection = Literal["forward", "lateral", "backward", "chaotic"]


class _SignatureModel(BaseModel):
    """Base config: frozen, camelCase aliases, snake_case names."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


# === SIGNATURE PARTS ===


class QuadrantProfile(_SignatureModel):
    """Where activity concentrated spatially (canonical range [0, 1] per axis)."""

    q1: float = Field(ge=0.0)
    q2: float = Field(ge=0.0)
    q3: float = Field(ge=0.0)
    q4: float = Field(ge=0.0)
    center: float | None = Field(default=None, ge=0.0)
    custom: dict[str, float] | None = None

    def axes(self) -> tuple[float, float, float, float]:
        """Return the four mandatory quadrant values in order."""
        return (self.q1, self.q2, self.q3, self.q4)


class TemporalFlow(_SignatureModel):
    """Shape of the activity curve over the sequence duration."""

    opening: float = Field(ge=0.0, le=1.0)
    middle: float = Field(ge=0.0, le=1.0)
    ending: float = Field(ge=0.0, le=1.0)
    trend: Trend = "stable"
    momentum: float = Field(default=0.0, ge=-1.0, le=1.0)

    def phases(self) -> tuple[float, float, float]:
        return (self.opening, self.middle, self.ending)


class CriticalMoment(_SignatureModel):
    """Turning point in the state sequence."""

    index: int = Field(ge=0)
    type: str
    severity: float = Field(ge=0.0, le=1.0)
    description: str
    metadata: dict[str, Any] | None = None


class TemporalSignature(_SignatureModel):
    """Universal fingerprint of an analyzed sequence."""

    # --- Identity ---
    fingerprint: str
    archetype: str

    # --- Character ---
    dominant_force: DominantForce = "balanced"
    flow_direction: FlowDirection = "forward"
    intensity: float = Field(ge=0.0, le=1.0)

    # --- Profiles ---
    quadrant_profile: QuadrantProfile
    temporal_flow: TemporalFlow
    critical_moments: list[CriticalMoment] = Field(default_factory=list)

    # --- Domain extension (e.g. volatility for finance) ---
    domain_data: dict[str, Any] | None = None


# === PATTERN POOL ===


class PatternCandidate(_SignatureModel):
    """Minimal historical pool entry: a signature with its realized outcome."""

    id: str
    signature: TemporalSignature
    outcome: str
    metadata: dict[str, Any] | None = None


class PersistedPattern(_SignatureModel):
    """Durable pattern record owned by the pattern store."""

    id: str
    domain: str
    fingerprint: str
    archetype: str
    outcome: str
    signature: TemporalSignature
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    created_by: str | None = None

    @field_validator("created_at")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        """Naive timestamps are read as UTC so pools stay orderable."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class PatternMatch(_SignatureModel):
    """Historical signature scored against a target signature."""

    pattern_id: str
    similarity: float = Field(ge=0.0, le=1.0)
    signature: TemporalSignature
    outcome: str
    source_metadata: dict[str, Any] | None = None


class OutcomeLikelihood(_SignatureModel):
    """Most likely outcome of a match set with its probability."""

    outcome: str
    probability: float = Field(ge=0.0, le=1.0)


class PatternStats(_SignatureModel):
    """Aggregate statistics over a domain's pattern pool."""

    domain: str
    total_patterns: int = 0
    by_archetype: dict[str, int] = Field(default_factory=dict)
    by_outcome: dict[str, int] = Field(default_factory=dict)
    average_intensity: float = 0.0
    oldest_pattern: datetime | None = None
    newest_pattern: datetime | None = None
