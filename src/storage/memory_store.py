# src/storage/memory_store.py - v1
"""In-process pattern store (STORE_BACKEND=memory), used by tests and the CLI."""

from __future__ import annotations

from collections.abc import Iterable

from enpensent.core.models import PersistedPattern
from enpensent.storage.base_pattern_store import BasePatternStore, select_patterns


class MemoryPatternStore(BasePatternStore):
    """Dict-backed store; contents are lost with the process."""

    def __init__(self, patterns: Iterable[PersistedPattern] | None = None) -> None:
        self._patterns: dict[str, PersistedPattern] = {}
        for pattern in patterns or []:
            self._patterns[pattern.id] = pattern

    async def fetch_pattern_pool(
        self,
        domain: str,
        archetypes: list[str] | None = None,
        outcomes: list[str] | None = None,
        limit: int | None = None,
    ) -> list[PersistedPattern]:
        return select_patterns(self._patterns.values(), domain, archetypes, outcomes, limit)

    async def persist_pattern(self, pattern: PersistedPattern) -> None:
        self._patterns[pattern.id] = pattern

    async def get(self, pattern_id: str) -> PersistedPattern | None:
        return self._patterns.get(pattern_id)

    async def delete(self, pattern_id: str) -> None:
        self._patterns.pop(pattern_id, None)

    async def list_patterns(self, domain: str | None = None) -> list[PersistedPattern]:
        return [p for p in self._patterns.values() if domain is None or p.domain == domain]

    def __len__(self) -> int:
        return len(self._patterns)
