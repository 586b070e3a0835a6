# src/storage/stats.py - v1
"""Aggregate statistics over a pattern pool."""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence

import numpy as np

from enpensent.core.models import PatternStats, PersistedPattern


def compute_pattern_stats(
    patterns: Sequence[PersistedPattern], domain: str,
) -> PatternStats:
    """Count a domain's patterns by archetype and outcome.

    Patterns from other domains are ignored.
    """
    scoped = [p for p in patterns if p.domain == domain]
    if not scoped:
        return PatternStats(domain=domain)

    intensities = np.fromiter((p.signature.intensity for p in scoped), dtype=np.float64)
    created = [p.created_at for p in scoped]
    return PatternStats(
        domain=domain,
        total_patterns=len(scoped),
        by_archetype=dict(Counter(p.archetype for p in scoped).most_common()),
        by_outcome=dict(Counter(p.outcome for p in scoped).most_common()),
        average_intensity=float(intensities.mean()),
        oldest_pattern=min(created),
        newest_pattern=max(created),
    )
