# tests/conftest.py - v1
"""Shared test fixtures for all unit and integration tests.

Provides a deterministic embedder, a scripted LLM client, the in-memory
graph store and settings that never read a .env file. No network access.
"""

from __future__ import annotations

import hashlib
import json
import math
from unittest.mock import AsyncMock

import pytest

from conceptgraph.config.settings import Settings
from conceptgraph.core.models import RelationJudgment
from conceptgraph.llm.base_client import BaseLLMClient
from conceptgraph.llm.models import LLMResponse, Message
from conceptgraph.llm.relation_analyzer import RelationAnalyzer
from conceptgraph.pipeline.orchestrator import GraphOrchestrator
from conceptgraph.rag.embeddings.base_embedder import BaseEmbedder
from conceptgraph.rag.graph_store.memory_store import InMemoryGraphStore


class MockEmbedder(BaseEmbedder):
    """Deterministic embedder: fixed vectors by text, else a hash-derived one."""

    def __init__(self, vectors: dict[str, list[float]] | None = None, dims: int = 8):
        self._vectors = vectors or {}
        self._dims = dims
        self.calls: list[str] = []

    async def embed_texts(self, texts: list[str]) -> list[list[float]]:
        return [await self.embed_query(t) for t in texts]

    async def embed_query(self, query: str) -> list[float]:
        self.calls.append(query)
        if query in self._vectors:
            return list(self._vectors[query])
        digest = hashlib.sha256(query.encode("utf-8")).digest()
        raw = [digest[i] / 255.0 - 0.5 for i in range(self._dims)]
        norm = math.sqrt(sum(x * x for x in raw)) or 1.0
        return [x / norm for x in raw]

    @property
    def dimensions(self) -> int:
        return self._dims

    @property
    def provider_name(self) -> str:
        return "mock"

    @property
    def model_name(self) -> str:
        return "mock-embed"


class ScriptedLLMClient(BaseLLMClient):
    """LLM client returning a fixed JSON answer and recording prompts."""

    def __init__(self, answer: dict | str | None = None):
        if answer is None:
            answer = {"relation": "RELATED_TO", "strength": 0.5, "description": "related"}
        self._content = answer if isinstance(answer, str) else json.dumps(answer)
        self.prompts: list[str] = []

    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int = 300,
        temperature: float = 0.2,
        json_mode: bool = False,
    ) -> LLMResponse:
        self.prompts.append(messages[-1].content)
        return LLMResponse(
            content=self._content,
            input_tokens=10,
            output_tokens=20,
            model="scripted",
            provider="scripted",
            latency_ms=1,
        )

    @property
    def provider_name(self) -> str:
        return "scripted"

    @property
    def model_name(self) -> str:
        return "scripted"


# === FIXTURES: Settings ===


@pytest.fixture
def settings() -> Settings:
    """Settings for tests: memory store, no throttle delay, no .env."""
    return Settings(
        _env_file=None,
        graph_db_type="memory",
        embedding_request_delay_s=0.0,
        log_format="text",
    )


# === FIXTURES: Collaborators ===


@pytest.fixture
def mock_embedder() -> MockEmbedder:
    return MockEmbedder()


@pytest.fixture
def memory_store() -> InMemoryGraphStore:
    return InMemoryGraphStore()


@pytest.fixture
def mock_analyzer() -> AsyncMock:
    """RelationAnalyzer double answering SIMILAR_TO with strength 0.9."""
    analyzer = AsyncMock(spec=RelationAnalyzer)
    analyzer.analyze_relation.return_value = RelationJudgment(
        relation="SIMILAR_TO", strength=0.9, description="closely related",
    )
    return analyzer


@pytest.fixture
def orchestrator(mock_embedder, mock_analyzer, memory_store, settings) -> GraphOrchestrator:
    return GraphOrchestrator(
        embedder=mock_embedder,
        analyzer=mock_analyzer,
        graph_store=memory_store,
        settings=settings,
    )


@pytest.fixture
def scripted_llm() -> type[ScriptedLLMClient]:
    """Factory for LLM clients that always give the same answer."""
    return ScriptedLLMClient


@pytest.fixture
def make_embedder() -> type[MockEmbedder]:
    """Factory for deterministic embedders with pinned vectors."""
    return MockEmbedder
