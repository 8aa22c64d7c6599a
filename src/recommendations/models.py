# src/recommendations/models.py - v1
"""Content recommendation models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from conceptgraph.core.models import WireModel

ContentType = Literal["article", "book", "video", "course", "tool", "podcast"]

CONTENT_TYPES: tuple[str, ...] = ("article", "book", "video", "course", "tool", "podcast")


class CatalogItem(BaseModel):
    """Learning resource tagged with the concepts it covers."""

    title: str
    type: ContentType
    author: str = ""
    url: str
    description: str = ""
    concepts: list[str] = Field(default_factory=list)

    @field_validator("concepts")
    @classmethod
    def _lower_concepts(cls, v: list[str]) -> list[str]:
        return [c.strip().lower() for c in v if c and c.strip()]


class ContentRecommendation(WireModel):
    """Catalog item ranked against a set of requested concepts."""

    id: str
    title: str
    type: ContentType
    author: str = ""
    url: str
    description: str = ""
    relevance: float = 0.0
