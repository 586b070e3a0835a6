# src/matching/matcher.py - v1
"""Pattern matching over a historical pool and outcome aggregation.

find_similar_patterns ranks pool entries against a target signature;
the remaining functions summarize a match set (outcome vote, diversity,
confidence). All functions are pure and never raise on empty input.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable, Mapping, Sequence
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from enpensent.core.models import (
    OutcomeLikelihood,
    PatternCandidate,
    PatternMatch,
    PersistedPattern,
    TemporalSignature,
)
from enpensent.core.similarity import SimilarityWeights, calculate_signature_similarity

if TYPE_CHECKING:
    from enpensent.archetypes.relatedness import ArchetypeRelatedness

logger = logging.getLogger(__name__)

DEFAULT_MIN_SAMPLE_SIZE = 5
SIMILARITY_CONFIDENCE_WEIGHT = 0.6
CONSENSUS_CONFIDENCE_WEIGHT = 0.4


class MatchOptions(BaseModel):
    """Filters and limits for find_similar_patterns.

    ``archetype_filter`` / ``outcome_filter`` are allow-lists; None or an
    empty list disables the filter. ``limit <= 0`` yields no matches.
    """

    model_config = ConfigDict(frozen=True)

    min_similarity: float = Field(default=0.0, ge=0.0, le=1.0)
    limit: int | None = None
    archetype_filter: list[str] | None = None
    outcome_filter: list[str] | None = None


class MatchSummary(BaseModel):
    """Aggregate view of a match set."""

    sample_size: int
    outcome_probabilities: dict[str, float] = Field(default_factory=dict)
    most_likely: OutcomeLikelihood | None = None
    diversity: float = 0.0
    confidence: float = 0.0
    average_similarity: float = 0.0


PoolEntry = PatternCandidate | PersistedPattern


# === MATCHING ===


def find_similar_patterns(
    target: TemporalSignature,
    pool: Iterable[PoolEntry],
    options: MatchOptions | None = None,
    *,
    weights: SimilarityWeights | Mapping[str, float] | None = None,
    relatedness: ArchetypeRelatedness | None = None,
) -> list[PatternMatch]:
    """Rank pool entries by similarity to the target.

    Entries are filtered by archetype and outcome, scored, kept when
    scoring at least ``min_similarity``, sorted by descending similarity
    (ties keep pool order) and truncated to ``limit``.
    """
    opts = options or MatchOptions()
    if opts.limit is not None and opts.limit <= 0:
        return []

    archetypes = set(opts.archetype_filter) if opts.archetype_filter else None
    outcomes = set(opts.outcome_filter) if opts.outcome_filter else None

    matches: list[PatternMatch] = []
    scanned = 0
    for entry in pool:
        scanned += 1
        signature = entry.signature
        if archetypes is not None and signature.archetype not in archetypes:
            continue
        if outcomes is not None and entry.outcome not in outcomes:
            continue

        similarity = calculate_signature_similarity(target, signature, weights, relatedness)
        if similarity < opts.min_similarity:
            continue

        matches.append(PatternMatch(
            pattern_id=entry.id,
            similarity=similarity,
            signature=signature,
            outcome=entry.outcome,
            source_metadata=entry.metadata,
        ))

    # sort() is stable: equal scores keep pool order
    matches.sort(key=lambda m: m.similarity, reverse=True)
    if opts.limit is not None:
        matches = matches[: opts.limit]

    logger.debug(
        "Matched %d/%d patterns for %s (min_similarity=%.2f)",
        len(matches), scanned, target.fingerprint, opts.min_similarity,
    )
    return matches


# === AGGREGATION ===


def calculate_outcome_probabilities(matches: Sequence[PatternMatch]) -> dict[str, float]:
    """Similarity-weighted outcome vote.

    Returns outcomes in first-seen order with probabilities summing to 1.
    When every similarity is zero the vote falls back to raw counts.
    """
    if not matches:
        return {}

    weighted: dict[str, float] = {}
    for match in matches:
        weighted[match.outcome] = weighted.get(match.outcome, 0.0) + match.similarity

    total = sum(weighted.values())
    if total <= 0:
        counts = Counter(match.outcome for match in matches)
        return {outcome: counts[outcome] / len(matches) for outcome in weighted}
    return {outcome: weight / total for outcome, weight in weighted.items()}


def get_most_likely_outcome(matches: Sequence[PatternMatch]) -> OutcomeLikelihood | None:
    """Highest-probability outcome; ties go to the first outcome seen."""
    probabilities = calculate_outcome_probabilities(matches)
    best: OutcomeLikelihood | None = None
    for outcome, probability in probabilities.items():
        if best is None or probability > best.probability:
            best = OutcomeLikelihood(outcome=outcome, probability=probability)
    return best


def calculate_pattern_diversity(matches: Sequence[PatternMatch]) -> float:
    """Normalized Herfindahl diversity over (archetype, outcome) pairs.

    0.0 for a homogeneous set (or fewer than two matches), 1.0 when every
    pair is distinct.
    """
    n = len(matches)
    if n <= 1:
        return 0.0

    counts = Counter((m.signature.archetype, m.outcome) for m in matches)
    concentration = sum((c / n) ** 2 for c in counts.values())
    diversity = (1.0 - concentration) / (1.0 - 1.0 / n)
    return max(0.0, min(1.0, diversity))


def calculate_match_confidence(
    matches: Sequence[PatternMatch],
    min_sample_size: int = DEFAULT_MIN_SAMPLE_SIZE,
) -> float:
    """Confidence in a match set from sample size, similarity and consensus.

    ``min(1, n / min_sample_size) * (0.6 * mean_similarity + 0.4 * (1 - diversity))``
    """
    n = len(matches)
    if n == 0:
        return 0.0

    sample_factor = min(1.0, n / max(1, min_sample_size))
    mean_similarity = sum(m.similarity for m in matches) / n
    consensus = 1.0 - calculate_pattern_diversity(matches)
    confidence = sample_factor * (
        SIMILARITY_CONFIDENCE_WEIGHT * mean_similarity
        + CONSENSUS_CONFIDENCE_WEIGHT * consensus
    )
    return max(0.0, min(1.0, confidence))


def summarize_matches(
    matches: Sequence[PatternMatch],
    min_sample_size: int = DEFAULT_MIN_SAMPLE_SIZE,
) -> MatchSummary:
    """Bundle the aggregation functions into one summary."""
    n = len(matches)
    return MatchSummary(
        sample_size=n,
        outcome_probabilities=calculate_outcome_probabilities(matches),
        most_likely=get_most_likely_outcome(matches),
        diversity=calculate_pattern_diversity(matches),
        confidence=calculate_match_confidence(matches, min_sample_size),
        average_similarity=sum(m.similarity for m in matches) / n if n else 0.0,
    )
