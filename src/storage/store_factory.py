# src/storage/store_factory.py - v1
"""Factory for pattern store instantiation."""

from __future__ import annotations

from enpensent.config.settings import Settings
from enpensent.storage.base_pattern_store import BasePatternStore


def create_pattern_store(settings: Settings | None = None) -> BasePatternStore:
    """Instantiate the configured pattern store backend.

    Args:
        settings: Application settings. Defaults to an in-memory store.

    Returns:
        Configured BasePatternStore implementation.
    """
    backend = "memory" if settings is None else settings.store_backend

    if backend == "memory":
        from enpensent.storage.memory_store import MemoryPatternStore
        return MemoryPatternStore()

    if backend == "json":
        from enpensent.storage.json_store import JsonPatternStore
        return JsonPatternStore(store_root=settings.store_root)

    if backend == "sqlite":
        from enpensent.storage.sqlite_store import SqlitePatternStore
        return SqlitePatternStore(db_path=settings.store_root / "enpensent_patterns.db")

    raise ValueError(f"Unsupported store backend: {backend!r}")
