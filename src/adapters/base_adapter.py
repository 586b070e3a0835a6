# src/adapters/base_adapter.py - v1
"""Abstract domain adapter interface.

Each domain (chess, code, market...) implements raw parsing and
signature extraction; the engine only consumes the resulting
TemporalSignature. Adapters must emit values in the canonical [0, 1]
range (see signature/builder.normalize_unit).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from enpensent.archetypes.models import ArchetypeRegistry
from enpensent.archetypes.resolver import ArchetypeResolver
from enpensent.core.models import TemporalSignature
from enpensent.core.similarity import calculate_signature_similarity
from enpensent.fusion.models import TacticalInsight

StateT = TypeVar("StateT")


class DomainAdapter(ABC, Generic[StateT]):
    """Unified interface for domain adapters."""

    @property
    @abstractmethod
    def domain(self) -> str:
        """Domain identifier (e.g., 'chess', 'code')."""

    @abstractmethod
    def parse_input(self, raw: Any) -> list[StateT]:
        """Convert raw input into a sequence of states."""

    @abstractmethod
    def extract_signature(self, states: list[StateT]) -> TemporalSignature:
        """Summarize a state sequence into a signature."""

    @abstractmethod
    def get_archetype_registry(self) -> ArchetypeRegistry:
        """Archetype registry for this domain."""

    @abstractmethod
    def render_state(self, state: StateT) -> str:
        """Human-readable rendering of a state."""

    def classify_archetype(self, signature: TemporalSignature) -> str:
        """Resolve the signature against this domain's registry."""
        return ArchetypeResolver(self.get_archetype_registry()).resolve(signature).archetype

    def calculate_similarity(self, a: TemporalSignature, b: TemporalSignature) -> float:
        return calculate_signature_similarity(a, b)

    async def analyze_tactically(self, state: StateT) -> TacticalInsight | None:
        """Calculation-based insight; None for domains without an engine."""
        return None
