# src/storage/sqlite_store.py - v1
"""SQLite-based pattern store (STORE_BACKEND=sqlite).

Uses stdlib sqlite3. Domain, archetype and outcome are indexed columns;
the full pattern is kept as JSON.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from pydantic import ValidationError

from enpensent.core.models import PersistedPattern
from enpensent.storage.base_pattern_store import (
    BasePatternStore,
    PatternStoreError,
    select_patterns,
)

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS patterns (
    id TEXT PRIMARY KEY,
    domain TEXT NOT NULL,
    archetype TEXT NOT NULL,
    outcome TEXT NOT NULL,
    fingerprint TEXT NOT NULL,
    created_at TEXT NOT NULL,
    data TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_patterns_domain ON patterns(domain);
CREATE INDEX IF NOT EXISTS idx_patterns_archetype ON patterns(domain, archetype);
"""


class SqlitePatternStore(BasePatternStore):
    """SQLite-backed pattern store for larger pools."""

    def __init__(self, db_path: Path | str) -> None:
        self._db_path = Path(db_path).expanduser()
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(str(self._db_path))
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.executescript(_SCHEMA)
        except (OSError, sqlite3.Error) as e:
            raise PatternStoreError(f"Cannot open pattern database {self._db_path}: {e}") from e

    async def fetch_pattern_pool(
        self,
        domain: str,
        archetypes: list[str] | None = None,
        outcomes: list[str] | None = None,
        limit: int | None = None,
    ) -> list[PersistedPattern]:
        """Load a domain's patterns, newest first."""
        query = "SELECT data FROM patterns WHERE domain = ?"
        params: list[str] = [domain]
        if archetypes:
            query += f" AND archetype IN ({','.join('?' * len(archetypes))})"
            params.extend(archetypes)
        if outcomes:
            query += f" AND outcome IN ({','.join('?' * len(outcomes))})"
            params.extend(outcomes)
        rows = self._execute(query, params).fetchall()
        return select_patterns(self._decode(rows), domain, archetypes, outcomes, limit)

    async def persist_pattern(self, pattern: PersistedPattern) -> None:
        """Store a pattern (upsert)."""
        self._execute(
            """INSERT OR REPLACE INTO patterns
               (id, domain, archetype, outcome, fingerprint, created_at, data)
               VALUES (?, ?, ?, ?, ?, ?, ?)""",
            [
                pattern.id,
                pattern.domain,
                pattern.archetype,
                pattern.outcome,
                pattern.fingerprint,
                pattern.created_at.isoformat(),
                pattern.model_dump_json(),
            ],
        )
        self._conn.commit()

    async def get(self, pattern_id: str) -> PersistedPattern | None:
        rows = self._execute("SELECT data FROM patterns WHERE id = ?", [pattern_id]).fetchall()
        decoded = self._decode(rows)
        return decoded[0] if decoded else None

    async def delete(self, pattern_id: str) -> None:
        self._execute("DELETE FROM patterns WHERE id = ?", [pattern_id])
        self._conn.commit()

    async def list_patterns(self, domain: str | None = None) -> list[PersistedPattern]:
        if domain is None:
            rows = self._execute("SELECT data FROM patterns", []).fetchall()
        else:
            rows = self._execute("SELECT data FROM patterns WHERE domain = ?", [domain]).fetchall()
        return self._decode(rows)

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    def _execute(self, query: str, params: list[str]) -> sqlite3.Cursor:
        try:
            return self._conn.execute(query, params)
        except sqlite3.Error as e:
            raise PatternStoreError(f"Pattern database error: {e}") from e

    @staticmethod
    def _decode(rows: list[tuple[str]]) -> list[PersistedPattern]:
        patterns: list[PersistedPattern] = []
        for (data,) in rows:
            try:
                patterns.append(PersistedPattern.model_validate_json(data))
            except ValidationError as e:
                logger.warning("Skipping undecodable pattern row: %s", e)
        return patterns
