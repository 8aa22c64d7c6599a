# src/recommendations/recommender.py - v1
"""Rank catalog items against the concepts currently on screen."""

from __future__ import annotations

import hashlib
import logging

from conceptgraph.recommendations.catalog import ContentCatalog
from conceptgraph.recommendations.models import CONTENT_TYPES, CatalogItem, ContentRecommendation

logger = logging.getLogger(__name__)


class ContentRecommender:
    """Concept-overlap recommender over a ContentCatalog."""

    def __init__(self, catalog: ContentCatalog | None = None) -> None:
        self._catalog = catalog if catalog is not None else ContentCatalog()

    def recommend(
        self,
        concepts: list[str],
        content_type: str | None = None,
        limit: int = 10,
    ) -> list[ContentRecommendation]:
        """Items sharing at least one concept, most relevant first.

        Relevance is the share of requested concepts the item covers.
        Ties keep catalog order.

        Raises:
            ValueError: If content_type is not a known type or limit < 1.
        """
        if content_type is not None and content_type not in CONTENT_TYPES:
            raise ValueError(
                f"Unknown content type {content_type!r}. "
                f"Available: {', '.join(CONTENT_TYPES)}"
            )
        if limit < 1:
            raise ValueError(f"limit must be >= 1, got {limit}")

        requested = _normalize_requested(concepts)
        if not requested:
            return []

        results: list[ContentRecommendation] = []
        for item in self._catalog.items:
            if content_type and item.type != content_type:
                continue
            matched = sum(1 for c in requested if c in item.concepts)
            if not matched:
                continue
            results.append(_to_recommendation(item, min(1.0, matched / max(len(requested), 1))))

        results.sort(key=lambda r: r.relevance, reverse=True)
        logger.debug("Recommendations for %s: %d matches", requested, len(results))
        return results[:limit]


def recommendation_id(url: str) -> str:
    """Stable short id for a catalog url."""
    return hashlib.sha1(url.encode("utf-8")).hexdigest()[:12]


def _normalize_requested(concepts: list[str]) -> list[str]:
    seen: list[str] = []
    for concept in concepts:
        key = concept.strip().lower() if isinstance(concept, str) else ""
        if key and key not in seen:
            seen.append(key)
    return seen


def _to_recommendation(item: CatalogItem, relevance: float) -> ContentRecommendation:
    return ContentRecommendation(
        id=recommendation_id(item.url),
        title=item.title,
        type=item.type,
        author=item.author,
        url=item.url,
        description=item.description,
        relevance=round(relevance, 4),
    )
