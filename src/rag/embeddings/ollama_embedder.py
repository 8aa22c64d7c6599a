# src/rag/embeddings/ollama_embedder.py - v1
"""Ollama embedding adapter (local inference).

Models: nomic-embed-text, mxbai-embed-large, etc.
"""

from __future__ import annotations

import logging

from conceptgraph.rag.embeddings.base_embedder import BaseEmbedder

logger = logging.getLogger(__name__)


class OllamaEmbedder(BaseEmbedder):
    """Local embeddings via the ollama SDK."""

    def __init__(
        self,
        model: str = "nomic-embed-text",
        base_url: str = "http://localhost:11434",
        dimensions: int = 768,
    ) -> None:
        self._model_name = model
        self._base_url = base_url.rstrip("/")
        self._dimensions = dimensions

    def _client(self):
        try:
            import ollama
        except ImportError as e:
            raise ImportError("ollama package required: pip install ollama") from e
        return ollama.AsyncClient(host=self._base_url)

    async def embed_texts(self, texts: list[str]) -> list[list[float]]:
        """Embed several texts in one request."""
        resp = await self._client().embed(model=self._model_name, input=texts)
        return [list(e) for e in resp["embeddings"]]

    async def embed_query(self, query: str) -> list[float]:
        """Embed a single text."""
        resp = await self._client().embed(model=self._model_name, input=query)
        embeddings = resp["embeddings"]
        if not embeddings:
            raise RuntimeError(f"Ollama returned no embeddings for model {self._model_name}")
        return list(embeddings[0])

    @property
    def dimensions(self) -> int:
        return self._dimensions

    @property
    def provider_name(self) -> str:
        return "ollama"

    @property
    def model_name(self) -> str:
        return self._model_name
