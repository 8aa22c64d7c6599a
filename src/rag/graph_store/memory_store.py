# src/rag/graph_store/memory_store.py - v1
"""In-process graph store backed by a networkx MultiDiGraph.

Edge keys are relation types, so (source, target, type) is the natural
merge key. Intended for development and tests; state lives only as long
as the process.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

import networkx as nx

from conceptgraph.core.models import (
    Concept,
    Relation,
    RelationRecord,
    RelationType,
    Scalar,
    clamp_unit,
)
from conceptgraph.core.similarity import classify_relation_strength, cosine_similarity
from conceptgraph.rag.graph_store.base_graph_store import (
    BaseGraphStore,
    ConceptNotFoundError,
    public_properties,
)

logger = logging.getLogger(__name__)

_EDGE_CORE_KEYS = {"weight", "description", "created_at", "updated_at"}


def _now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryGraphStore(BaseGraphStore):
    """Graph store kept in a networkx MultiDiGraph."""

    def __init__(self) -> None:
        self._graph = nx.MultiDiGraph()

    @property
    def graph(self) -> nx.MultiDiGraph:
        return self._graph

    # --- Concepts ---

    async def save_concept(
        self,
        text: str,
        embedding: list[float],
        metadata: dict[str, Scalar] | None = None,
    ) -> Concept:
        now = _now()
        if self._graph.has_node(text):
            attrs = self._graph.nodes[text]
            attrs["embedding"] = list(embedding)
            attrs["updated_at"] = now
            attrs["metadata"].update(metadata or {})
        else:
            self._graph.add_node(
                text,
                embedding=list(embedding),
                created_at=now,
                updated_at=now,
                metadata=dict(metadata or {}),
            )
        return self._concept(text)

    async def get_concept(self, text: str) -> Concept | None:
        if not self._graph.has_node(text):
            return None
        return self._concept(text)

    def _concept(self, text: str) -> Concept:
        attrs = self._graph.nodes[text]
        return Concept(
            text=text,
            embedding=attrs["embedding"],
            created_at=attrs["created_at"],
            updated_at=attrs["updated_at"],
            metadata=dict(attrs["metadata"]),
        )

    # --- Relations ---

    async def create_relation(
        self,
        source: str,
        target: str,
        relation_type: RelationType,
        weight: float = 0.5,
        properties: dict[str, Scalar] | None = None,
    ) -> Relation:
        missing = [t for t in (source, target) if not self._graph.has_node(t)]
        if missing:
            raise ConceptNotFoundError(*missing)

        now = _now()
        props = dict(properties or {})
        if self._graph.has_edge(source, target, key=relation_type):
            attrs = self._graph.edges[source, target, relation_type]
        else:
            self._graph.add_edge(source, target, key=relation_type, created_at=now)
            attrs = self._graph.edges[source, target, relation_type]
        attrs.update(props)
        attrs["weight"] = clamp_unit(weight)
        attrs["updated_at"] = now
        return self._relation(source, target, relation_type, attrs)

    def _relation(
        self, source: str, target: str, relation_type: str, attrs: dict[str, Any]
    ) -> Relation:
        return Relation(
            source_text=source,
            target_text=target,
            type=relation_type,  # type: ignore[arg-type]
            weight=attrs.get("weight", 0.5),
            description=attrs.get("description", ""),
            created_at=attrs.get("created_at"),
            updated_at=attrs.get("updated_at"),
            properties={k: v for k, v in attrs.items() if k not in _EDGE_CORE_KEYS},
        )

    async def get_concept_relations(self, concept_text: str) -> list[RelationRecord]:
        if not self._graph.has_node(concept_text):
            return []

        records: list[RelationRecord] = []
        edges = list(self._graph.out_edges(concept_text, keys=True, data=True))
        edges += [
            e for e in self._graph.in_edges(concept_text, keys=True, data=True)
            if e[0] != e[1]
        ]
        for source, target, rel_type, attrs in edges:
            related = target if source == concept_text else source
            weight = attrs.get("weight")
            records.append(RelationRecord(
                source_text=source,
                target_text=target,
                relation_type=rel_type,
                weight=weight,
                description=attrs.get("description") or "",
                strength_class=classify_relation_strength(weight or 0.0),
                relation=self._relation(source, target, rel_type, attrs).model_dump(
                    by_alias=True, mode="json"
                ),
                related_node=public_properties(
                    self._concept(related).model_dump(by_alias=True, mode="json")
                ),
            ))

        records.sort(key=lambda r: r.weight if r.weight is not None else -1.0, reverse=True)
        return records

    # --- Query ---

    async def get_concept_network(self, limit: int = 100) -> list[dict[str, Any]]:
        rows: list[dict[str, Any]] = []
        for concept in list(self._graph.nodes)[:limit]:
            incident = list(self._graph.out_edges(concept, keys=True, data=True))
            incident += list(self._graph.in_edges(concept, keys=True, data=True))
            if not incident:
                rows.append({
                    "concept": concept, "source": None, "target": None,
                    "relation_type": None, "weight": None, "description": None,
                })
                continue
            for source, target, rel_type, attrs in incident:
                rows.append({
                    "concept": concept,
                    "source": source,
                    "target": target,
                    "relation_type": rel_type,
                    "weight": attrs.get("weight"),
                    "description": attrs.get("description"),
                })
        return rows

    async def compute_similarity(self, text1: str, text2: str) -> float:
        if not (self._graph.has_node(text1) and self._graph.has_node(text2)):
            return 0.0
        return cosine_similarity(
            self._graph.nodes[text1].get("embedding"),
            self._graph.nodes[text2].get("embedding"),
        )

    async def node_count(self) -> int:
        return self._graph.number_of_nodes()

    async def edge_count(self) -> int:
        return self._graph.number_of_edges()

    @property
    def provider_name(self) -> str:
        return "memory"
