# src/rag/graph_store/base_graph_store.py - v1
"""Abstract concept graph store interface.

Concepts are nodes keyed by normalized text. Relations are typed, directed
edges merged on (source, target, type): writing the same triple twice
updates weight and properties instead of creating a duplicate.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from conceptgraph.core.models import Concept, Relation, RelationRecord, RelationType, Scalar


class GraphStoreError(RuntimeError):
    """Raised when a graph store operation fails."""


class ConceptNotFoundError(GraphStoreError):
    """Raised when a relation endpoint does not exist as a concept node."""

    def __init__(self, *texts: str):
        self.texts = texts
        super().__init__(f"Concept(s) not found: {', '.join(repr(t) for t in texts)}")


class BaseGraphStore(ABC):
    """Unified interface for concept graph backends."""

    # --- Concepts ---

    @abstractmethod
    async def save_concept(
        self,
        text: str,
        embedding: list[float],
        metadata: dict[str, Scalar] | None = None,
    ) -> Concept:
        """Upsert a concept (merge by text) and return the stored record."""

    @abstractmethod
    async def get_concept(self, text: str) -> Concept | None:
        """Retrieve a concept by text, or None."""

    # --- Relations ---

    @abstractmethod
    async def create_relation(
        self,
        source: str,
        target: str,
        relation_type: RelationType,
        weight: float = 0.5,
        properties: dict[str, Scalar] | None = None,
    ) -> Relation:
        """Upsert an edge (merge by source+type+target).

        Raises:
            ConceptNotFoundError: If either endpoint is missing.
        """

    @abstractmethod
    async def get_concept_relations(self, concept_text: str) -> list[RelationRecord]:
        """All edges touching a concept, by descending weight."""

    # --- Query ---

    @abstractmethod
    async def get_concept_network(self, limit: int = 100) -> list[dict[str, Any]]:
        """Rows describing up to ``limit`` concepts and their incident edges.

        Each row has ``concept`` plus ``source``, ``target``,
        ``relation_type``, ``weight`` and ``description``; the edge keys
        are None for concepts without relations.
        """

    @abstractmethod
    async def compute_similarity(self, text1: str, text2: str) -> float:
        """Cosine similarity of two stored embeddings (0.0 if either is absent)."""

    @abstractmethod
    async def node_count(self) -> int:
        """Return total number of concept nodes."""

    @abstractmethod
    async def edge_count(self) -> int:
        """Return total number of relation edges."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (neo4j, memory)."""

    async def close(self) -> None:
        """Release backend resources."""


def public_properties(props: dict[str, Any]) -> dict[str, Any]:
    """Node properties safe to expose: everything but the embedding."""
    return {k: v for k, v in props.items() if k != "embedding"}
