# src/rag/embeddings/throttled.py - v1
"""Rate-limited sequential embedding.

Issues one provider call per text with a fixed pause in between so a
burst of terms stays under the provider's rate limit. The delay is a
tunable constant, not adaptive backoff, and there is no retry.
"""

from __future__ import annotations

import asyncio
import logging

from conceptgraph.rag.embeddings.base_embedder import BaseEmbedder, EmbeddingError

logger = logging.getLogger(__name__)


async def embed_sequentially(
    embedder: BaseEmbedder,
    texts: list[str],
    delay_s: float = 0.2,
) -> list[tuple[str, list[float]]]:
    """Embed texts one at a time, in order.

    Returns:
        (text, embedding) pairs in input order.

    Raises:
        EmbeddingError: On the first provider failure; later texts are
            not attempted.
    """
    results: list[tuple[str, list[float]]] = []
    for index, text in enumerate(texts):
        try:
            embedding = await embedder.embed_query(text)
        except Exception as exc:
            logger.error("Embedding failed for %r via %s: %s", text, embedder.provider_name, exc)
            raise EmbeddingError(text, exc) from exc
        results.append((text, embedding))

        if delay_s > 0 and index < len(texts) - 1:
            await asyncio.sleep(delay_s)

    logger.debug("Embedded %d texts with %s", len(results), embedder.model_name)
    return results
