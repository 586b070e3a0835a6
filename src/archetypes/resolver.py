# src/archetypes/resolver.py - v1
"""Registry-driven archetype classification of a signature.

ArchetypeResolver scores each definition on four factors (keyword,
intensity, flow and quadrant alignment) and returns the best candidate
with up to three alternatives. classify_universal_archetype is the
registry-free fallback used when a domain ships no catalog.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from enpensent.archetypes.models import (
    ArchetypeCandidate,
    ArchetypeDefinition,
    ArchetypeMatchResult,
    ArchetypeRegistry,
)
from enpensent.core.models import TemporalSignature

logger = logging.getLogger(__name__)

KEYWORD_WEIGHT = 0.3
INTENSITY_WEIGHT = 0.25
FLOW_WEIGHT = 0.25
QUADRANT_WEIGHT = 0.2

_FLOW_KEYWORDS = frozenset({
    "ascending", "descending", "stable", "volatile", "chaotic",
    "accelerating", "declining", "steady",
})
_BALANCE_KEYWORDS = frozenset({"balanced", "stable", "even", "distributed"})


@dataclass(frozen=True)
class MatchCriteria:
    """Thresholds steering signature term extraction and balance detection."""

    high_intensity: float = 0.8
    moderate_intensity: float = 0.5
    momentum_threshold: float = 0.5
    balance_variance: float = 0.1


class ArchetypeResolver:
    """Resolve a signature to the best-fitting archetype of a registry."""

    def __init__(
        self, registry: ArchetypeRegistry, criteria: MatchCriteria | None = None,
    ) -> None:
        self._registry = registry
        self._criteria = criteria or MatchCriteria()

    @property
    def registry(self) -> ArchetypeRegistry:
        return self._registry

    def resolve(self, signature: TemporalSignature) -> ArchetypeMatchResult:
        """Score every archetype and return the best with alternatives."""
        candidates = [
            ArchetypeCandidate(archetype=definition.id, confidence=self._score(signature, definition))
            for definition in self._registry.archetypes.values()
        ]
        candidates.sort(key=lambda c: c.confidence, reverse=True)

        if not candidates:
            return ArchetypeMatchResult(
                archetype="unknown",
                confidence=0.0,
                match_reasons=["No matching archetype definition found"],
            )

        best = candidates[0]
        logger.debug(
            "Resolved %s -> %s (%.3f)", signature.fingerprint, best.archetype, best.confidence,
        )
        return ArchetypeMatchResult(
            archetype=best.archetype,
            confidence=best.confidence,
            match_reasons=self._reasons(signature, best.archetype),
            alternatives=candidates[1:4],
        )

    def matches(self, signature: TemporalSignature, archetype_id: str) -> bool:
        """True if the signature resolves to archetype_id with confidence > 0.5."""
        result = self.resolve(signature)
        return result.archetype == archetype_id and result.confidence > 0.5

    # --- Scoring factors ---

    def _score(self, signature: TemporalSignature, definition: ArchetypeDefinition) -> float:
        score = 0.0
        total = 0.0
        if definition.keywords:
            score += self._keyword_alignment(signature, definition.keywords) * KEYWORD_WEIGHT
            total += KEYWORD_WEIGHT
        score += self._intensity_alignment(signature, definition) * INTENSITY_WEIGHT
        score += self._flow_alignment(signature, definition) * FLOW_WEIGHT
        score += self._quadrant_alignment(signature, definition) * QUADRANT_WEIGHT
        total += INTENSITY_WEIGHT + FLOW_WEIGHT + QUADRANT_WEIGHT
        return score / total

    def signature_terms(self, signature: TemporalSignature) -> list[str]:
        """Searchable descriptive terms derived from a signature."""
        c = self._criteria
        terms = [
            signature.archetype.lower(),
            signature.flow_direction,
            signature.dominant_force,
            signature.temporal_flow.trend,
        ]
        if signature.intensity > c.high_intensity:
            terms += ["high", "intense", "aggressive"]
        elif signature.intensity > c.moderate_intensity:
            terms += ["moderate", "active"]
        else:
            terms += ["low", "passive", "quiet"]

        momentum = signature.temporal_flow.momentum
        if momentum > c.momentum_threshold:
            terms += ["accelerating", "growing"]
        elif momentum < -c.momentum_threshold:
            terms += ["declining", "slowing"]
        else:
            terms += ["stable", "steady"]
        return terms

    def _keyword_alignment(self, signature: TemporalSignature, keywords: list[str]) -> float:
        terms = self.signature_terms(signature)
        hits = 0
        for keyword in keywords:
            kw = keyword.lower()
            if any(kw in term or term in kw for term in terms):
                hits += 1
        return hits / len(keywords)

    @staticmethod
    def _intensity_alignment(signature: TemporalSignature, definition: ArchetypeDefinition) -> float:
        # High base-rate archetypes run at controlled intensity
        expected = 0.6 if definition.success_rate > 0.6 else 0.4
        return 1.0 - min(abs(signature.intensity - expected), 1.0)

    @staticmethod
    def _flow_alignment(signature: TemporalSignature, definition: ArchetypeDefinition) -> float:
        flow_terms = [k.lower() for k in definition.keywords if k.lower() in _FLOW_KEYWORDS]
        if not flow_terms:
            return 0.5
        return 1.0 if signature.temporal_flow.trend in flow_terms else 0.3

    def _quadrant_alignment(self, signature: TemporalSignature, definition: ArchetypeDefinition) -> float:
        values = signature.quadrant_profile.axes()
        mean = sum(values) / 4
        variance = sum((v - mean) ** 2 for v in values) / 4
        balanced = variance < self._criteria.balance_variance
        prefers_balance = any(k.lower() in _BALANCE_KEYWORDS for k in definition.keywords)
        if prefers_balance:
            return 1.0 if balanced else 0.4
        return 0.4 if balanced else 1.0

    def _reasons(self, signature: TemporalSignature, archetype_id: str) -> list[str]:
        definition = self._registry.get(archetype_id)
        if definition is None:
            return ["No matching archetype definition found"]

        reasons = [f'Pattern matches "{definition.name}" archetype']
        trend = signature.temporal_flow.trend
        if trend == "accelerating":
            reasons.append("Momentum is building in current trajectory")
        elif trend == "declining":
            reasons.append("Activity shows declining trend")
        if signature.intensity > 0.7:
            reasons.append("High intensity activity detected")
        if definition.success_rate > 0.6:
            reasons.append(f"Historical success rate: {round(definition.success_rate * 100)}%")
        return reasons


def classify_universal_archetype(signature: TemporalSignature) -> str:
    """Classify a signature from its metrics alone, without a registry."""
    flow = signature.temporal_flow
    intensity = signature.intensity

    if intensity > 0.7 and flow.trend == "accelerating":
        return "aggressive_expansion"
    if intensity < 0.3 and flow.trend == "stable":
        return "maintenance_mode"
    if flow.trend == "volatile" and len(signature.critical_moments) > 3:
        return "chaotic_evolution"
    if flow.trend == "declining" and flow.momentum < -0.3:
        return "controlled_decline"

    q1, q2, q3, q4 = signature.quadrant_profile.axes()
    if max(q1, q2, q3, q4) - min(q1, q2, q3, q4) > 0.5:
        return "concentrated_activity"
    if abs(q1 - q2) < 0.1 and abs(q3 - q4) < 0.1:
        return "balanced_approach"
    return "standard_evolution"
