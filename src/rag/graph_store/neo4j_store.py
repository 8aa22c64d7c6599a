# src/rag/graph_store/neo4j_store.py - v1
"""Neo4j concept graph store.

Layout: ``(:Concept {text, embedding, createdAt, updatedAt, ...metadata})``
with a uniqueness constraint on ``text``; edges are
``[:<RELATION_TYPE> {weight, description, createdAt, updatedAt, ...}]``.
Similarity is computed client-side from the stored embeddings so the
store does not depend on the Graph Data Science plugin.
Requires: pip install neo4j.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from conceptgraph.core.models import (
    Concept,
    Relation,
    RelationRecord,
    RelationType,
    Scalar,
    clamp_unit,
)
from conceptgraph.core.similarity import classify_relation_strength, cosine_similarity
from conceptgraph.graph.taxonomy import VALID_RELATION_TYPES
from conceptgraph.rag.graph_store.base_graph_store import (
    BaseGraphStore,
    ConceptNotFoundError,
    GraphStoreError,
    public_properties,
)

logger = logging.getLogger(__name__)

_CONSTRAINT_QUERY = (
    "CREATE CONSTRAINT concept_text_unique IF NOT EXISTS "
    "FOR (c:Concept) REQUIRE c.text IS UNIQUE"
)

_SAVE_CONCEPT_QUERY = """
MERGE (c:Concept {text: $text})
ON CREATE SET c.createdAt = datetime()
SET c += $metadata, c.embedding = $embedding, c.updatedAt = datetime()
RETURN properties(c) AS props
"""

_GET_CONCEPT_QUERY = "MATCH (c:Concept {text: $text}) RETURN properties(c) AS props"

# Relation type is interpolated after validation against the closed taxonomy.
_CREATE_RELATION_QUERY = """
MATCH (a:Concept {{text: $source}})
MATCH (b:Concept {{text: $target}})
MERGE (a)-[r:{rel_type}]->(b)
ON CREATE SET r.createdAt = datetime()
SET r += $properties, r.weight = $weight, r.updatedAt = datetime()
RETURN properties(r) AS props
"""

_EXISTING_CONCEPTS_QUERY = (
    "UNWIND $texts AS t MATCH (c:Concept {text: t}) RETURN c.text AS text"
)

_CONCEPT_RELATIONS_QUERY = """
MATCH (c:Concept {text: $text})-[r]-(related:Concept)
RETURN startNode(r).text AS source,
       endNode(r).text AS target,
       type(r) AS relation_type,
       r.weight AS weight,
       r.description AS description,
       properties(r) AS relation,
       properties(related) AS related_node
ORDER BY r.weight DESC
"""

_NETWORK_QUERY = """
MATCH (c:Concept)
WITH c ORDER BY c.text LIMIT $limit
OPTIONAL MATCH (c)-[r]-(:Concept)
RETURN c.text AS concept,
       startNode(r).text AS source,
       endNode(r).text AS target,
       type(r) AS relation_type,
       r.weight AS weight,
       r.description AS description
"""

_EMBEDDINGS_QUERY = """
MATCH (c1:Concept {text: $text1}), (c2:Concept {text: $text2})
RETURN c1.embedding AS embedding1, c2.embedding AS embedding2
"""

_CONCEPT_KEYS = {"text", "embedding", "createdAt", "updatedAt"}
_RELATION_KEYS = {"weight", "description", "createdAt", "updatedAt"}


def _to_native(value: Any) -> Any:
    """Convert neo4j temporal values to Python datetimes."""
    if hasattr(value, "to_native"):
        return value.to_native()
    return value


def _native_props(props: dict[str, Any]) -> dict[str, Any]:
    return {k: _to_native(v) for k, v in props.items()}


class Neo4jStore(BaseGraphStore):
    """Concept graph backed by Neo4j."""

    def __init__(
        self,
        uri: str = "bolt://localhost:7687",
        user: str = "",
        password: str = "",
        database: str = "neo4j",
    ) -> None:
        try:
            from neo4j import GraphDatabase
        except ImportError as e:
            raise ImportError(
                "neo4j package required: pip install neo4j"
            ) from e

        auth = (user, password) if user else None
        self._driver = GraphDatabase.driver(uri, auth=auth)
        self._database = database
        self._schema_ready = False

    def _run(self, query: str, **params: Any) -> list[dict]:
        """Execute a Cypher query and return results as list of dicts."""
        try:
            with self._driver.session(database=self._database) as session:
                result = session.run(query, **params)
                return [record.data() for record in result]
        except Exception as exc:
            logger.exception("Neo4j query failed")
            raise GraphStoreError(f"Neo4j query failed: {exc}") from exc

    async def _query(self, query: str, **params: Any) -> list[dict]:
        """Run a query on a worker thread so the event loop stays free."""
        return await asyncio.to_thread(self._run, query, **params)

    async def ensure_schema(self) -> None:
        """Create the concept text uniqueness constraint once per store."""
        if self._schema_ready:
            return
        await self._query(_CONSTRAINT_QUERY)
        self._schema_ready = True
        logger.debug("Neo4j concept constraint ensured")

    # --- Concepts ---

    async def save_concept(
        self,
        text: str,
        embedding: list[float],
        metadata: dict[str, Scalar] | None = None,
    ) -> Concept:
        await self.ensure_schema()
        metadata = {k: v for k, v in (metadata or {}).items() if k not in _CONCEPT_KEYS}
        results = await self._query(
            _SAVE_CONCEPT_QUERY, text=text, embedding=list(embedding), metadata=metadata,
        )
        if not results:
            raise GraphStoreError(f"Concept {text!r} was not saved")
        return _concept_from_props(results[0]["props"])

    async def get_concept(self, text: str) -> Concept | None:
        results = await self._query(_GET_CONCEPT_QUERY, text=text)
        return _concept_from_props(results[0]["props"]) if results else None

    # --- Relations ---

    async def create_relation(
        self,
        source: str,
        target: str,
        relation_type: RelationType,
        weight: float = 0.5,
        properties: dict[str, Scalar] | None = None,
    ) -> Relation:
        if relation_type not in VALID_RELATION_TYPES:
            raise GraphStoreError(f"Refusing unknown relation type: {relation_type!r}")

        props = {k: v for k, v in (properties or {}).items() if k not in ("createdAt", "updatedAt")}
        results = await self._query(
            _CREATE_RELATION_QUERY.format(rel_type=relation_type),
            source=source, target=target, weight=clamp_unit(weight), properties=props,
        )
        if not results:
            existing = await self._query(_EXISTING_CONCEPTS_QUERY, texts=[source, target])
            found = {r["text"] for r in existing}
            raise ConceptNotFoundError(*[t for t in (source, target) if t not in found])

        rel = _native_props(results[0]["props"])
        return Relation(
            source_text=source,
            target_text=target,
            type=relation_type,
            weight=rel.get("weight", weight),
            description=rel.get("description", ""),
            created_at=rel.get("createdAt"),
            updated_at=rel.get("updatedAt"),
            properties={k: v for k, v in rel.items() if k not in _RELATION_KEYS},
        )

    async def get_concept_relations(self, concept_text: str) -> list[RelationRecord]:
        records = []
        for row in await self._query(_CONCEPT_RELATIONS_QUERY, text=concept_text):
            weight = row.get("weight")
            records.append(RelationRecord(
                source_text=row["source"],
                target_text=row["target"],
                relation_type=row["relation_type"],
                weight=weight,
                description=row.get("description") or "",
                strength_class=classify_relation_strength(weight or 0.0),
                relation=_jsonable(row.get("relation") or {}),
                related_node=_jsonable(public_properties(row.get("related_node") or {})),
            ))
        return records

    # --- Query ---

    async def get_concept_network(self, limit: int = 100) -> list[dict[str, Any]]:
        return await self._query(_NETWORK_QUERY, limit=limit)

    async def compute_similarity(self, text1: str, text2: str) -> float:
        results = await self._query(_EMBEDDINGS_QUERY, text1=text1, text2=text2)
        if not results:
            return 0.0
        return cosine_similarity(results[0].get("embedding1"), results[0].get("embedding2"))

    async def node_count(self) -> int:
        results = await self._query("MATCH (c:Concept) RETURN count(c) AS cnt")
        return results[0]["cnt"] if results else 0

    async def edge_count(self) -> int:
        results = await self._query("MATCH (:Concept)-[r]->(:Concept) RETURN count(r) AS cnt")
        return results[0]["cnt"] if results else 0

    @property
    def provider_name(self) -> str:
        return "neo4j"

    async def close(self) -> None:
        """Close the driver connection."""
        await asyncio.to_thread(self._driver.close)


def _concept_from_props(props: dict[str, Any]) -> Concept:
    props = _native_props(props)
    return Concept(
        text=props["text"],
        embedding=props.get("embedding") or [],
        created_at=props.get("createdAt"),
        updated_at=props.get("updatedAt"),
        metadata={k: v for k, v in props.items() if k not in _CONCEPT_KEYS},
    )


def _jsonable(props: dict[str, Any]) -> dict[str, Any]:
    """Property bag with temporal values rendered as ISO strings."""
    out = {}
    for k, v in _native_props(props).items():
        out[k] = v.isoformat() if hasattr(v, "isoformat") else v
    return out
