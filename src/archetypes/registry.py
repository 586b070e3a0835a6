# src/archetypes/registry.py - v1
"""Archetype registry construction and loading.

Registries are built once (from the built-in catalogs or a JSON file)
and treated as read-only afterwards.
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from enpensent.archetypes.builtin import BUILTIN_CATALOGS
from enpensent.archetypes.models import (
    ArchetypeDefinition,
    ArchetypeRegistry,
    RegistryError,
)

logger = logging.getLogger(__name__)

BUILTIN_VERSION = "1.0.0"


def build_registry(
    domain: str,
    catalog: dict[str, dict[str, Any]],
    version: str = BUILTIN_VERSION,
) -> ArchetypeRegistry:
    """Build a registry from a ``{id: definition-fields}`` catalog.

    Args:
        domain: Domain name (e.g. "code", "chess").
        catalog: Mapping of archetype id to definition fields (id optional).
        version: Registry version string.

    Returns:
        Validated ArchetypeRegistry.

    Raises:
        RegistryError: If a definition fails validation.
    """
    archetypes: dict[str, ArchetypeDefinition] = {}
    for archetype_id, fields in catalog.items():
        try:
            archetypes[archetype_id] = ArchetypeDefinition(
                **{"id": archetype_id, **fields}
            )
        except ValidationError as e:
            raise RegistryError(
                f"Invalid archetype {archetype_id!r} in domain {domain!r}: {e}"
            ) from e

    _warn_dangling_relations(domain, archetypes)
    return ArchetypeRegistry(domain=domain, version=version, archetypes=archetypes)


@lru_cache(maxsize=None)
def get_builtin_registry(domain: str) -> ArchetypeRegistry:
    """Return the built-in registry for a domain.

    Raises:
        RegistryError: If no built-in catalog exists for the domain.
    """
    catalog = BUILTIN_CATALOGS.get(domain)
    if catalog is None:
        available = ", ".join(sorted(BUILTIN_CATALOGS))
        raise RegistryError(
            f"No built-in archetype registry for domain {domain!r} (available: {available})"
        )
    return build_registry(domain, catalog)


def load_registry(path: Path | str) -> ArchetypeRegistry:
    """Load a registry from JSON.

    Expected shape: ``{"domain": ..., "version": ..., "archetypes": {id: {...}}}``.

    Raises:
        RegistryError: If the file is missing, unreadable or malformed.
    """
    file_path = Path(path).expanduser()
    try:
        data = json.loads(file_path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise RegistryError(f"Registry file not found: {file_path}") from e
    except json.JSONDecodeError as e:
        raise RegistryError(f"Registry file is not valid JSON: {file_path}: {e}") from e

    if not isinstance(data, dict) or "domain" not in data:
        raise RegistryError(f"Registry file {file_path} is missing 'domain'")

    catalog = data.get("archetypes", {})
    if not isinstance(catalog, dict):
        raise RegistryError(f"'archetypes' must be an object in {file_path}")

    registry = build_registry(
        data["domain"], catalog, version=str(data.get("version", BUILTIN_VERSION)),
    )
    logger.debug(
        "Loaded registry %s v%s (%d archetypes) from %s",
        registry.domain, registry.version, len(registry), file_path,
    )
    return registry


def _warn_dangling_relations(
    domain: str, archetypes: dict[str, ArchetypeDefinition],
) -> None:
    """Log related_archetypes entries that point outside the registry."""
    for definition in archetypes.values():
        for related in definition.related_archetypes:
            if related not in archetypes:
                logger.warning(
                    "Archetype %s in domain %s references unknown related archetype %s",
                    definition.id, domain, related,
                )
