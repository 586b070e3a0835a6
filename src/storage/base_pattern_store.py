# src/storage/base_pattern_store.py - v1
"""Abstract pattern store interface (the pattern pool provider).

The core never performs I/O; the facade fetches a pool through a store
and hands it to the pure matcher.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

from enpensent.core.models import PersistedPattern


class PatternStoreError(Exception):
    """Raised when a pattern store cannot read or write its backend."""


class BasePatternStore(ABC):
    """Unified interface for pattern storage backends."""

    @abstractmethod
    async def fetch_pattern_pool(
        self,
        domain: str,
        archetypes: list[str] | None = None,
        outcomes: list[str] | None = None,
        limit: int | None = None,
    ) -> list[PersistedPattern]:
        """Return a domain's patterns, newest first, optionally filtered."""

    @abstractmethod
    async def persist_pattern(self, pattern: PersistedPattern) -> None:
        """Store a pattern, replacing any pattern with the same id."""

    @abstractmethod
    async def get(self, pattern_id: str) -> PersistedPattern | None:
        """Retrieve a pattern by id."""

    @abstractmethod
    async def delete(self, pattern_id: str) -> None:
        """Remove a pattern (no-op when absent)."""

    @abstractmethod
    async def list_patterns(self, domain: str | None = None) -> list[PersistedPattern]:
        """List stored patterns, optionally for one domain."""


def select_patterns(
    patterns: Iterable[PersistedPattern],
    domain: str,
    archetypes: list[str] | None = None,
    outcomes: list[str] | None = None,
    limit: int | None = None,
) -> list[PersistedPattern]:
    """Apply pool filters and newest-first ordering to in-memory patterns."""
    selected = [
        p for p in patterns
        if p.domain == domain
        and (not archetypes or p.archetype in archetypes)
        and (not outcomes or p.outcome in outcomes)
    ]
    selected.sort(key=lambda p: p.created_at, reverse=True)
    if limit is not None:
        selected = selected[: max(0, limit)]
    return selected
