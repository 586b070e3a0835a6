# src/storage/json_store.py - v1
"""JSON file-based pattern store (default STORE_BACKEND=json).

Stores one JSON file per pattern under STORE_ROOT/<domain>/<id>.json.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import ValidationError

from enpensent.core.models import PersistedPattern
from enpensent.storage.base_pattern_store import (
    BasePatternStore,
    PatternStoreError,
    select_patterns,
)

logger = logging.getLogger(__name__)


class JsonPatternStore(BasePatternStore):
    """File-based pattern store using JSON files."""

    def __init__(self, store_root: Path | str) -> None:
        self._root = Path(store_root).expanduser()
        try:
            self._root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PatternStoreError(f"Cannot create store root {self._root}: {e}") from e

    @property
    def root(self) -> Path:
        return self._root

    async def fetch_pattern_pool(
        self,
        domain: str,
        archetypes: list[str] | None = None,
        outcomes: list[str] | None = None,
        limit: int | None = None,
    ) -> list[PersistedPattern]:
        """Load a domain's patterns, newest first."""
        patterns = await self.list_patterns(domain)
        return select_patterns(patterns, domain, archetypes, outcomes, limit)

    async def persist_pattern(self, pattern: PersistedPattern) -> None:
        """Write a pattern, replacing an existing file with the same id."""
        existing = self._find(pattern.id)
        path = self._pattern_path(pattern.domain, pattern.id)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(pattern.model_dump_json(indent=2), encoding="utf-8")
            if existing is not None and existing != path:
                existing.unlink()
        except OSError as e:
            raise PatternStoreError(f"Failed to write pattern {pattern.id}: {e}") from e

    async def get(self, pattern_id: str) -> PersistedPattern | None:
        """Retrieve a pattern by id."""
        path = self._find(pattern_id)
        if path is None:
            return None
        return self._load(path)

    async def delete(self, pattern_id: str) -> None:
        """Remove a pattern file."""
        path = self._find(pattern_id)
        if path is not None:
            try:
                path.unlink()
            except OSError as e:
                raise PatternStoreError(f"Failed to delete pattern {pattern_id}: {e}") from e

    async def list_patterns(self, domain: str | None = None) -> list[PersistedPattern]:
        """List stored patterns; unreadable files are skipped."""
        if not self._root.is_dir():
            return []
        pattern_glob = f"{_safe_name(domain)}/*.json" if domain else "*/*.json"
        patterns: list[PersistedPattern] = []
        for path in sorted(self._root.glob(pattern_glob)):
            pattern = self._load(path)
            if pattern is not None:
                patterns.append(pattern)
        return patterns

    def _load(self, path: Path) -> PersistedPattern | None:
        try:
            return PersistedPattern.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            logger.warning("Failed to read pattern file %s: %s", path, e)
            return None

    def _find(self, pattern_id: str) -> Path | None:
        matches = list(self._root.glob(f"*/{_safe_name(pattern_id)}.json"))
        return matches[0] if matches else None

    def _pattern_path(self, domain: str, pattern_id: str) -> Path:
        """Return file path for a pattern."""
        return self._root / _safe_name(domain) / f"{_safe_name(pattern_id)}.json"


def _safe_name(key: str) -> str:
    return key.replace("/", "_").replace("\\", "_")
