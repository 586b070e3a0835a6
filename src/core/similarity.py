# src/core/similarity.py - v1
"""Signature similarity engine.

Pure functions over immutable signatures. Every score is in [0, 1] and
symmetric in its two arguments. Inputs are expected in the canonical
[0, 1] range; rescaling happens at the adapter boundary
(see signature/builder.py).
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING

import numpy as np
from pydantic import BaseModel, ConfigDict, Field

from enpensent.core.models import QuadrantProfile, TemporalFlow, TemporalSignature

if TYPE_CHECKING:
    from enpensent.archetypes.relatedness import ArchetypeRelatedness

logger = logging.getLogger(__name__)

PHASE_WEIGHT = 0.6
TREND_WEIGHT = 0.2
MOMENTUM_WEIGHT = 0.2

# Unordered pairs; equal directions always score 1.0.
_FLOW_AFFINITY: dict[frozenset[str], float] = {
    frozenset({"forward", "backward"}): 0.0,
    frozenset({"forward", "lateral"}): 0.5,
    frozenset({"backward", "lateral"}): 0.5,
    frozenset({"chaotic", "forward"}): 0.25,
    frozenset({"chaotic", "backward"}): 0.25,
    frozenset({"chaotic", "lateral"}): 0.25,
}


class SimilarityWeights(BaseModel):
    """Component weights for signature similarity (need not sum to 1)."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    archetype: float = Field(default=0.3, ge=0.0)
    quadrant: float = Field(default=0.25, ge=0.0)
    temporal: float = Field(default=0.25, ge=0.0)
    intensity: float = Field(default=0.1, ge=0.0)
    flow_direction: float = Field(default=0.1, ge=0.0)

    @property
    def total(self) -> float:
        return (
            self.archetype + self.quadrant + self.temporal
            + self.intensity + self.flow_direction
        )


DEFAULT_WEIGHTS = SimilarityWeights()


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def _coerce_weights(
    weights: SimilarityWeights | Mapping[str, float] | None,
) -> SimilarityWeights:
    if weights is None:
        return DEFAULT_WEIGHTS
    if isinstance(weights, SimilarityWeights):
        return weights
    return SimilarityWeights.model_validate(dict(weights))


# === COMPONENT SCORES ===


def quadrant_similarity(a: QuadrantProfile, b: QuadrantProfile) -> float:
    """Score two quadrant profiles by mean absolute difference.

    Axes are q1..q4, plus ``center`` when both profiles carry it.
    Two all-zero profiles are identical and score 1.0.
    """
    va = list(a.axes())
    vb = list(b.axes())
    if a.center is not None and b.center is not None:
        va.append(a.center)
        vb.append(b.center)

    diff = float(np.abs(np.asarray(va) - np.asarray(vb)).sum())
    return _clamp(1.0 - diff / len(va))


def _sign(value: float) -> int:
    if value > 0:
        return 1
    if value < 0:
        return -1
    return 0


def _momentum_similarity(ma: float, mb: float) -> float:
    closeness = 1.0 - abs(ma - mb) / 2.0
    sa, sb = _sign(ma), _sign(mb)
    if sa == sb:
        agreement = 1.0
    elif sa == 0 or sb == 0:
        agreement = 0.5
    else:
        agreement = 0.0
    return 0.5 * closeness + 0.5 * agreement


def temporal_flow_similarity(a: TemporalFlow, b: TemporalFlow) -> float:
    """Score two temporal flows on phase shape, trend and momentum."""
    phase_diff = np.abs(np.asarray(a.phases()) - np.asarray(b.phases()))
    phase = 1.0 - float(phase_diff.mean())
    trend = 1.0 if a.trend == b.trend else 0.0
    momentum = _momentum_similarity(a.momentum, b.momentum)

    return _clamp(
        PHASE_WEIGHT * phase + TREND_WEIGHT * trend + MOMENTUM_WEIGHT * momentum
    )


def flow_direction_affinity(a: str, b: str) -> float:
    """Return the affinity between two flow directions (symmetric table)."""
    if a == b:
        return 1.0
    return _FLOW_AFFINITY.get(frozenset({a, b}), 0.0)


# === SIGNATURE SIMILARITY ===


def calculate_signature_similarity(
    a: TemporalSignature,
    b: TemporalSignature,
    weights: SimilarityWeights | Mapping[str, float] | None = None,
    relatedness: ArchetypeRelatedness | None = None,
) -> float:
    """Weighted blend of the five component scores.

    Args:
        a: First signature.
        b: Second signature.
        weights: Component weights, or a partial mapping such as
            ``{"archetype": 0.8, "quadrant": 0.1, "temporal": 0.1}``
            (missing keys take their defaults).
        relatedness: Archetype relatedness strategy. Defaults to exact match.

    Returns:
        Similarity in [0, 1]; 0.0 when the total weight is zero.
    """
    w = _coerce_weights(weights)
    total = w.total
    if total <= 0:
        return 0.0

    if relatedness is None:
        archetype_score = 1.0 if a.archetype == b.archetype else 0.0
    else:
        archetype_score = _clamp(relatedness.score(a.archetype, b.archetype))

    components = (
        (w.archetype, archetype_score),
        (w.quadrant, quadrant_similarity(a.quadrant_profile, b.quadrant_profile)),
        (w.temporal, temporal_flow_similarity(a.temporal_flow, b.temporal_flow)),
        (w.intensity, 1.0 - abs(a.intensity - b.intensity)),
        (w.flow_direction, flow_direction_affinity(a.flow_direction, b.flow_direction)),
    )
    score = sum(weight * value for weight, value in components) / total
    return _clamp(score)


def signature_similarity_matrix(
    signatures: Sequence[TemporalSignature],
    weights: SimilarityWeights | Mapping[str, float] | None = None,
    relatedness: ArchetypeRelatedness | None = None,
) -> np.ndarray:
    """Compute the pairwise similarity matrix of a signature set.

    Returns:
        Symmetric array of shape (n, n). The diagonal is the self-similarity
        (1.0 unless every weight is zero).
    """
    n = len(signatures)
    matrix = np.zeros((n, n), dtype=np.float64)
    w = _coerce_weights(weights)
    for i in range(n):
        for j in range(i, n):
            score = calculate_signature_similarity(
                signatures[i], signatures[j], w, relatedness,
            )
            matrix[i, j] = score
            matrix[j, i] = score
    logger.debug("Computed %dx%d signature similarity matrix", n, n)
    return matrix


class SimilarityCache:
    """Memoizes signature similarity by unordered fingerprint pair.

    Valid for a single weights/relatedness configuration only; create a
    new cache when either changes.
    """

    def __init__(
        self,
        weights: SimilarityWeights | Mapping[str, float] | None = None,
        relatedness: ArchetypeRelatedness | None = None,
        max_entries: int = 10_000,
    ) -> None:
        self._weights = _coerce_weights(weights)
        self._relatedness = relatedness
        self._max_entries = max_entries
        self._scores: dict[frozenset[str], float] = {}
        self.hits = 0
        self.misses = 0

    def similarity(self, a: TemporalSignature, b: TemporalSignature) -> float:
        key = frozenset({a.fingerprint, b.fingerprint})
        cached = self._scores.get(key)
        if cached is not None:
            self.hits += 1
            return cached

        self.misses += 1
        score = calculate_signature_similarity(a, b, self._weights, self._relatedness)
        if len(self._scores) >= self._max_entries:
            # Drop the oldest entry (dicts keep insertion order)
            self._scores.pop(next(iter(self._scores)))
        self._scores[key] = score
        return score

    def clear(self) -> None:
        self._scores.clear()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._scores)
