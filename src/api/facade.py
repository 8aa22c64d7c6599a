# src/api/facade.py - v1
"""Public API facade: wire collaborators from settings.

Usage:
    from conceptgraph.api.facade import build_graph
    payload = await build_graph(["memory", "network", "graph"])
"""

from __future__ import annotations

import logging

from conceptgraph.config.settings import Settings
from conceptgraph.core.models import GraphPayload
from conceptgraph.llm.client_factory import create_llm_client_from_settings
from conceptgraph.llm.relation_analyzer import RelationAnalyzer
from conceptgraph.pipeline.orchestrator import GraphOrchestrator
from conceptgraph.rag.embeddings.embedder_factory import create_embedder
from conceptgraph.rag.graph_store.graph_store_factory import create_graph_store

logger = logging.getLogger(__name__)


def create_orchestrator(settings: Settings | None = None) -> GraphOrchestrator:
    """Build a GraphOrchestrator with the configured providers and store.

    Args:
        settings: Global settings. Loaded from .env if None.
    """
    settings = settings or Settings()
    analyzer = RelationAnalyzer(
        create_llm_client_from_settings(settings),
        max_tokens=settings.llm_max_tokens,
        temperature=settings.llm_temperature,
    )
    orchestrator = GraphOrchestrator(
        embedder=create_embedder(settings),
        analyzer=analyzer,
        graph_store=create_graph_store(settings),
        settings=settings,
    )
    logger.info(
        "Orchestrator ready: llm=%s/%s, embeddings=%s, store=%s",
        settings.llm_provider, settings.llm_model,
        settings.embedding_provider, settings.graph_db_type,
    )
    return orchestrator


async def build_graph(
    terms: list[str],
    settings: Settings | None = None,
    similarity_threshold: float | None = None,
    include_relations: bool = True,
) -> GraphPayload:
    """One-shot graph construction; the store connection is closed afterwards."""
    orchestrator = create_orchestrator(settings)
    try:
        return await orchestrator.create_graph(
            terms,
            similarity_threshold=similarity_threshold,
            include_relations=include_relations,
        )
    finally:
        await orchestrator.close()
