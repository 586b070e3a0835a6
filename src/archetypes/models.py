# src/archetypes/models.py - v1
"""Archetype domain models: ArchetypeDefinition, ArchetypeRegistry, ArchetypeMatchResult."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

PredictedOutcome = Literal["primary_wins", "secondary_wins", "draw", "uncertain"]


class RegistryError(ValueError):
    """Raised when a registry cannot be resolved or loaded."""


class ArchetypeDefinition(BaseModel):
    """Named pattern class with its historical base rate."""

    model_config = ConfigDict(
        frozen=True, populate_by_name=True, alias_generator=to_camel,
    )

    id: str
    name: str
    description: str = ""
    success_rate: float = Field(ge=0.0, le=1.0)
    predicted_outcome: PredictedOutcome = "uncertain"
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    keywords: list[str] = Field(default_factory=list)
    related_archetypes: list[str] = Field(default_factory=list)

    # --- Optional guidance ---
    warning_signals: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    lookahead_moves: int | None = None


class ArchetypeRegistry(BaseModel):
    """Per-domain, versioned catalog of archetypes (read-only at match time)."""

    model_config = ConfigDict(frozen=True)

    domain: str
    version: str = "1.0.0"
    archetypes: dict[str, ArchetypeDefinition] = Field(default_factory=dict)

    def get(self, archetype_id: str) -> ArchetypeDefinition | None:
        """Return the definition for an id, or None if unregistered."""
        return self.archetypes.get(archetype_id)

    def ids(self) -> list[str]:
        return list(self.archetypes)

    def __contains__(self, archetype_id: object) -> bool:
        return archetype_id in self.archetypes

    def __len__(self) -> int:
        return len(self.archetypes)


class ArchetypeCandidate(BaseModel):
    """Scored alternative archetype."""

    archetype: str
    confidence: float


class ArchetypeMatchResult(BaseModel):
    """Result of resolving a signature against a registry."""

    archetype: str
    confidence: float
    match_reasons: list[str] = Field(default_factory=list)
    alternatives: list[ArchetypeCandidate] = Field(default_factory=list)
