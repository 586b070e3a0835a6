# src/api/facade.py - v1
"""Public API facade: single entry point for pattern-based prediction.

Usage:
    from enpensent.api.facade import predict
    result = await predict(request, store)

The store is the only I/O boundary. A failing store degrades to an
empty pool; everything after the fetch is pure core computation.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from enpensent.api.models import PredictionRequest, PredictionResult
from enpensent.archetypes.models import ArchetypeRegistry, RegistryError
from enpensent.archetypes.registry import get_builtin_registry
from enpensent.archetypes.relatedness import create_relatedness
from enpensent.config.settings import Settings
from enpensent.core.models import PersistedPattern, TemporalSignature
from enpensent.fusion.hybrid import generate_hybrid_prediction
from enpensent.logging.context import clear_context, set_request_context
from enpensent.matching.matcher import MatchOptions, find_similar_patterns, summarize_matches

if TYPE_CHECKING:
    from enpensent.fusion.models import TacticalInsight
    from enpensent.storage.base_pattern_store import BasePatternStore

logger = logging.getLogger(__name__)


async def predict(
    request: PredictionRequest,
    store: BasePatternStore,
    settings: Settings | None = None,
    tactical: TacticalInsight | None = None,
    registry: ArchetypeRegistry | None = None,
) -> PredictionResult:
    """Match a signature against the stored pool and build a hybrid prediction.

    Steps:
      1. Resolve settings, registry and match options
      2. Fetch the domain's pattern pool (degrades to empty on failure)
      3. Rank matches and summarize them
      4. Fuse tactical and strategic insight into a HybridPrediction

    Args:
        request: Signature, domain and sequence position.
        store: Pattern pool provider.
        settings: Global settings. Loaded from .env if None.
        tactical: Optional calculation-based insight from the domain adapter.
        registry: Archetype registry. Defaults to the built-in one for the domain.

    Returns:
        PredictionResult with matches, summary and prediction.
    """
    settings = settings or Settings()
    request_id = request.request_id or _generate_request_id()
    set_request_context(domain=request.domain, request_id=request_id)
    try:
        if registry is None:
            registry = _resolve_registry(request.domain)
        options = request.options or MatchOptions(
            min_similarity=settings.min_similarity, limit=settings.match_limit,
        )

        logger.info(
            "Starting prediction: request_id=%s, domain=%s, signature=%s",
            request_id, request.domain, request.signature.fingerprint,
        )

        pool: list[PersistedPattern] = []
        degraded = False
        try:
            pool = await store.fetch_pattern_pool(
                request.domain,
                archetypes=options.archetype_filter,
                outcomes=options.outcome_filter,
                limit=settings.store_fetch_limit,
            )
        except Exception:
            logger.exception("Pattern pool fetch failed for %s (non-fatal)", request.domain)
            degraded = True

        matches = find_similar_patterns(
            request.signature,
            pool,
            options,
            weights=settings.similarity_weights(),
            relatedness=create_relatedness(settings.relatedness, registry),
        )
        summary = summarize_matches(matches, settings.min_sample_size)
        prediction = generate_hybrid_prediction(
            request.signature,
            matches,
            domain=request.domain,
            current_state=request.current_state,
            current_position=request.current_position,
            total_expected_length=request.total_expected_length,
            tactical=tactical,
            registry=registry,
            prediction_config=settings.prediction_config(),
            fusion_config=settings.fusion_config(),
        )

        logger.info(
            "Prediction complete: request_id=%s, pool=%d, matches=%d, outcome=%s, confidence=%.3f",
            request_id, len(pool), len(matches),
            prediction.trajectory.predicted_outcome, prediction.overall_confidence,
        )
        return PredictionResult(
            request_id=request_id,
            domain=request.domain,
            pool_size=len(pool),
            pool_degraded=degraded,
            matches=matches,
            summary=summary,
            prediction=prediction,
        )
    finally:
        clear_context()


async def record_pattern(
    store: BasePatternStore,
    domain: str,
    signature: TemporalSignature,
    outcome: str,
    metadata: dict[str, Any] | None = None,
    created_by: str | None = None,
) -> PersistedPattern:
    """Persist a signature with its realized outcome into the pool.

    Raises:
        PatternStoreError: If the store cannot write the pattern.
    """
    pattern = PersistedPattern(
        id=str(uuid.uuid4()),
        domain=domain,
        fingerprint=signature.fingerprint,
        archetype=signature.archetype,
        outcome=outcome,
        signature=signature,
        metadata=metadata or {},
        created_at=datetime.now(timezone.utc),
        created_by=created_by,
    )
    await store.persist_pattern(pattern)
    logger.info("Recorded pattern %s (%s/%s -> %s)", pattern.id, domain, pattern.archetype, outcome)
    return pattern


def _resolve_registry(domain: str) -> ArchetypeRegistry | None:
    try:
        return get_builtin_registry(domain)
    except RegistryError:
        logger.debug("No built-in registry for domain %s", domain)
        return None


def _generate_request_id() -> str:
    return datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S") + "_" + uuid.uuid4().hex[:8]
