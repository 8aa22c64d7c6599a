# src/pipeline/orchestrator.py - v1
"""Graph construction orchestrator.

Drives the concept graph pipeline for one request:
  Step 1: Embed every term, one provider call at a time, throttled
  Step 2: Upsert each term as a Concept node
  Step 3: For every pair above the similarity threshold, ask the LLM how the
          two concepts relate and persist the edge if the acceptance policy
          passes
  Step 4: Return the node/link payload for the presentation layer

Also serves the read side: network view, per-concept relations and the
side-by-side comparison of two concepts.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

from conceptgraph.core.models import (
    Concept,
    ConceptComparison,
    ConceptNetwork,
    GraphLink,
    GraphNode,
    GraphPayload,
    NetworkLink,
    NetworkNode,
    RelationRecord,
)
from conceptgraph.core.similarity import (
    classify_relation_strength,
    cosine_similarity,
    pairwise_similarities,
)
from conceptgraph.core.text import normalize_concept_text
from conceptgraph.graph.relation_normalizer import accept_relation, validate_relation_type
from conceptgraph.logging.context import set_operation_context
from conceptgraph.rag.embeddings.base_embedder import EmbeddingError
from conceptgraph.rag.embeddings.throttled import embed_sequentially
from conceptgraph.rag.graph_store.base_graph_store import GraphStoreError

if TYPE_CHECKING:
    from conceptgraph.config.settings import Settings
    from conceptgraph.llm.relation_analyzer import RelationAnalyzer
    from conceptgraph.rag.embeddings.base_embedder import BaseEmbedder
    from conceptgraph.rag.graph_store.base_graph_store import BaseGraphStore

logger = logging.getLogger(__name__)

_MATRIX_TOLERANCE = 1e-9


class InvalidTermsError(ValueError):
    """Raised when request input (terms, concept names) is missing or blank."""

    def __init__(self, message: str, details: str = ""):
        self.details = details
        super().__init__(message)


class GraphOrchestrator:
    """Builds and queries the concept graph.

    Args:
        embedder: Embedding provider.
        analyzer: LLM relation analyzer.
        graph_store: Concept graph persistence.
        settings: Application settings (throttle delay, acceptance policy).
    """

    def __init__(
        self,
        embedder: BaseEmbedder,
        analyzer: RelationAnalyzer,
        graph_store: BaseGraphStore,
        settings: Settings,
    ) -> None:
        self._embedder = embedder
        self._analyzer = analyzer
        self._graph_store = graph_store
        self._settings = settings

    @property
    def graph_store(self) -> BaseGraphStore:
        return self._graph_store

    async def close(self) -> None:
        await self._graph_store.close()

    # ------------------------------------------------------------------
    # Graph construction
    # ------------------------------------------------------------------

    async def create_graph(
        self,
        terms: list[str] | None,
        similarity_threshold: float | None = None,
        include_relations: bool = True,
    ) -> GraphPayload:
        """Embed, persist and relate a list of concept terms.

        Args:
            terms: Concept terms; duplicates after normalization are merged.
            similarity_threshold: Minimum cosine similarity before a pair is
                sent to the LLM. Defaults to ``settings.similarity_threshold``.
            include_relations: Skip step 3 entirely when False.

        Raises:
            InvalidTermsError: If terms is empty or holds a blank entry.
            EmbeddingError: If the embedding provider fails.
            GraphStoreError: If persistence fails. Writes already committed
                are kept.
        """
        texts = _validate_terms(terms)
        threshold = (
            self._settings.similarity_threshold
            if similarity_threshold is None else similarity_threshold
        )
        set_operation_context("create_graph")
        start_time = time.monotonic()
        logger.info(
            "Creating graph: %d terms, threshold=%.2f, relations=%s",
            len(texts), threshold, include_relations,
        )

        # Step 1: embeddings
        embedded = await embed_sequentially(
            self._embedder, texts, delay_s=self._settings.embedding_request_delay_s,
        )

        # Step 2: concept upserts
        concepts: list[Concept] = []
        for text, embedding in embedded:
            concepts.append(await self._graph_store.save_concept(text, embedding))
        logger.debug("Persisted %d concepts", len(concepts))

        # Step 3: pairwise relations
        links: list[GraphLink] = []
        if include_relations and len(concepts) > 1:
            links = await self._build_relations(embedded, threshold)

        elapsed = time.monotonic() - start_time
        logger.info(
            "Graph created: %d concepts, %d relations in %.1fs",
            len(concepts), len(links), elapsed,
        )
        return GraphPayload(
            concepts=len(concepts),
            relations=len(links),
            threshold=threshold,
            nodes=[GraphNode(id=c.text) for c in concepts],
            links=links,
        )

    async def _build_relations(
        self, embedded: list[tuple[str, list[float]]], threshold: float,
    ) -> list[GraphLink]:
        policy = self._settings.relation_acceptance_policy
        min_similarity = self._settings.relation_min_similarity
        similarities = pairwise_similarities([emb for _, emb in embedded])

        links: list[GraphLink] = []
        for i in range(len(embedded)):
            for j in range(i + 1, len(embedded)):
                source, target = embedded[i][0], embedded[j][0]
                similarity = float(similarities[i, j])
                if similarity >= threshold - _MATRIX_TOLERANCE:
                    # Batch rounding can differ from the per-pair score near
                    # the threshold; the gate and the link use the per-pair value.
                    similarity = cosine_similarity(embedded[i][1], embedded[j][1])
                if similarity < threshold:
                    logger.debug(
                        "Skipping %r / %r: similarity %.3f below %.2f",
                        source, target, similarity, threshold,
                    )
                    continue

                judgment = await self._analyzer.analyze_relation(source, target)
                relation_type = validate_relation_type(judgment.relation)
                if not accept_relation(
                    policy, relation_type, similarity, judgment.strength, min_similarity,
                ):
                    logger.info(
                        "Relation rejected (%s): %r -[%s %.2f]-> %r, similarity %.3f",
                        policy, source, relation_type, judgment.strength, target, similarity,
                    )
                    continue

                await self._graph_store.create_relation(
                    source,
                    target,
                    relation_type,
                    weight=judgment.strength,
                    properties={"description": judgment.description},
                )
                links.append(GraphLink(
                    source=source,
                    target=target,
                    value=judgment.strength or similarity,
                    relation=relation_type,
                    description=judgment.description,
                ))
        return links

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    async def get_concept_network(self, limit: int | None = None) -> ConceptNetwork:
        """Node/edge view over up to ``limit`` stored concepts."""
        limit = self._settings.network_default_limit if limit is None else limit
        if limit < 1:
            raise InvalidTermsError("Invalid limit", f"limit must be >= 1, got {limit}")
        set_operation_context("get_concept_network")

        rows = await self._graph_store.get_concept_network(limit)
        nodes: dict[str, NetworkNode] = {}
        links: dict[tuple[str, str, str], NetworkLink] = {}
        for row in rows:
            for text in (row.get("concept"), row.get("source"), row.get("target")):
                if text and text not in nodes:
                    nodes[text] = NetworkNode(id=text)
            if not row.get("source") or not row.get("target"):
                continue
            key = (row["source"], row["target"], row["relation_type"])
            if key in links:
                continue
            value = row.get("weight") or 0.5
            links[key] = NetworkLink(
                source=row["source"],
                target=row["target"],
                value=value,
                type=row["relation_type"],
                description=row.get("description") or "",
                strength_class=classify_relation_strength(value),
            )

        logger.debug("Network: %d nodes, %d links", len(nodes), len(links))
        return ConceptNetwork(nodes=list(nodes.values()), links=list(links.values()))

    async def get_concept_relations(self, concept_text: str | None) -> list[RelationRecord]:
        """All edges touching a concept, strongest first."""
        text = normalize_concept_text(concept_text or "")
        if not text:
            raise InvalidTermsError("Concept is required", "concept text must not be blank")
        set_operation_context("get_concept_relations")
        return await self._graph_store.get_concept_relations(text)

    async def compare_concepts(
        self, concept1: str | None, concept2: str | None,
    ) -> ConceptComparison:
        """Compare two concepts by embedding, stored similarity and LLM judgment.

        Embedding or persistence failures are logged and degrade the
        similarity scores to 0 instead of failing the comparison.
        """
        text1 = normalize_concept_text(concept1 or "")
        text2 = normalize_concept_text(concept2 or "")
        if not text1 or not text2:
            raise InvalidTermsError(
                "Two concepts are required", "both concept1 and concept2 must be non-blank",
            )
        set_operation_context("compare_concepts")

        embedding1 = await self._embed_and_save(text1)
        embedding2 = await self._embed_and_save(text2)

        direct_similarity = cosine_similarity(embedding1, embedding2)
        db_similarity = await self._graph_store.compute_similarity(text1, text2)
        judgment = await self._analyzer.analyze_relation(text1, text2)

        logger.info(
            "Compared %r / %r: cosine=%.3f, db=%.3f, relation=%s",
            text1, text2, direct_similarity, db_similarity, judgment.relation,
        )
        return ConceptComparison(
            concept1=text1,
            concept2=text2,
            cosine_similarity=direct_similarity,
            db_similarity=db_similarity,
            relation=validate_relation_type(judgment.relation),
            relation_strength=judgment.strength,
            description=judgment.description,
            relation_class=classify_relation_strength(judgment.strength),
        )

    async def _embed_and_save(self, text: str) -> list[float] | None:
        try:
            embedded = await embed_sequentially(self._embedder, [text], delay_s=0)
        except EmbeddingError as exc:
            logger.warning("Comparison embedding failed for %r: %s", text, exc)
            return None

        embedding = embedded[0][1]
        try:
            await self._graph_store.save_concept(text, embedding)
        except GraphStoreError as exc:
            logger.warning("Comparison could not persist %r: %s", text, exc)
        return embedding

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    async def stats(self) -> dict[str, Any]:
        """Store size and provider names for health reporting."""
        return {
            "graph_store": self._graph_store.provider_name,
            "concepts": await self._graph_store.node_count(),
            "relations": await self._graph_store.edge_count(),
            "embedder": self._embedder.provider_name,
        }


def _validate_terms(terms: list[str] | None) -> list[str]:
    """Normalize terms, rejecting empty input, and drop repeated entries."""
    if not terms or not isinstance(terms, list):
        raise InvalidTermsError("Terms are required", "terms must be a non-empty list of strings")

    texts: list[str] = []
    seen: set[str] = set()
    for index, term in enumerate(terms):
        if not isinstance(term, str):
            raise InvalidTermsError(
                "Invalid term", f"term at position {index} is not a string",
            )
        text = normalize_concept_text(term)
        if not text:
            raise InvalidTermsError("Invalid term", f"term at position {index} is blank")
        if text not in seen:
            seen.add(text)
            texts.append(text)
    return texts
