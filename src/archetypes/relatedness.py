# src/archetypes/relatedness.py - v1
"""Archetype relatedness strategies consumed by the similarity engine.

ExactArchetypeMatch is the default. RegistryRelatedness reads the
``related_archetypes`` links of a registry as an undirected networkx graph
and scores connected archetypes by hop distance.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import networkx as nx

from enpensent.archetypes.models import ArchetypeRegistry

logger = logging.getLogger(__name__)


class ArchetypeRelatedness(ABC):
    """Scores how related two archetype ids are, in [0, 1]."""

    @abstractmethod
    def score(self, a: str, b: str) -> float:
        """Return relatedness of a and b. Must be symmetric; 1.0 when a == b."""


class ExactArchetypeMatch(ArchetypeRelatedness):
    """1.0 on equal ids, 0.0 otherwise."""

    def score(self, a: str, b: str) -> float:
        return 1.0 if a == b else 0.0


class RegistryRelatedness(ArchetypeRelatedness):
    """Graph-distance relatedness over a registry's related_archetypes links.

    Score for distinct ids:
    - connected: ``related_score * decay ** (hops - 1)`` (0.7 for direct links)
    - not connected: keyword Jaccard * 0.6 + success-rate closeness * 0.4,
      scaled to ``related_score * decay ** max_hops`` so an unlinked pair
      never outranks a linked one
    - either id unregistered: 0.0
    """

    def __init__(
        self,
        registry: ArchetypeRegistry,
        related_score: float = 0.7,
        decay: float = 0.5,
        max_hops: int = 3,
    ) -> None:
        self._registry = registry
        self._related_score = related_score
        self._decay = decay
        self._max_hops = max_hops
        self._graph = self._build_graph(registry)
        self._scores: dict[frozenset[str], float] = {}

    @property
    def graph(self) -> nx.Graph:
        return self._graph

    def score(self, a: str, b: str) -> float:
        if a == b:
            return 1.0
        key = frozenset({a, b})
        cached = self._scores.get(key)
        if cached is None:
            cached = self._compute(a, b)
            self._scores[key] = cached
        return cached

    def _compute(self, a: str, b: str) -> float:
        def_a = self._registry.get(a)
        def_b = self._registry.get(b)
        if def_a is None or def_b is None:
            return 0.0

        try:
            hops = nx.shortest_path_length(self._graph, a, b)
        except nx.NetworkXNoPath:
            hops = None

        if hops is not None and hops <= self._max_hops:
            return self._related_score * self._decay ** (hops - 1)

        keywords_a = set(def_a.keywords)
        keywords_b = set(def_b.keywords)
        union = keywords_a | keywords_b
        jaccard = len(keywords_a & keywords_b) / len(union) if union else 0.0
        success = 1.0 - abs(def_a.success_rate - def_b.success_rate)
        blend = max(0.0, min(1.0, jaccard * 0.6 + success * 0.4))
        return blend * self._unlinked_ceiling

    @property
    def _unlinked_ceiling(self) -> float:
        """One decay step below the farthest linked score."""
        return self._related_score * self._decay ** self._max_hops

    @staticmethod
    def _build_graph(registry: ArchetypeRegistry) -> nx.Graph:
        graph = nx.Graph()
        graph.add_nodes_from(registry.ids())
        for definition in registry.archetypes.values():
            for related in definition.related_archetypes:
                if related in registry:
                    graph.add_edge(definition.id, related)
        logger.debug(
            "Relatedness graph for %s: %d nodes, %d edges",
            registry.domain, graph.number_of_nodes(), graph.number_of_edges(),
        )
        return graph


def create_relatedness(
    strategy: str, registry: ArchetypeRegistry | None = None,
) -> ArchetypeRelatedness:
    """Instantiate a relatedness strategy by name ("exact" or "registry").

    Falls back to exact matching when "registry" is requested without a registry.
    """
    if strategy == "exact":
        return ExactArchetypeMatch()
    if strategy == "registry":
        if registry is None:
            logger.warning("Registry relatedness requested without a registry, using exact match")
            return ExactArchetypeMatch()
        return RegistryRelatedness(registry)
    raise ValueError(f"Unsupported relatedness strategy: {strategy!r}")
