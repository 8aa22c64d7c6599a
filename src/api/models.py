# src/api/models.py - v1
"""HTTP request/response bodies (camelCase on the wire)."""

from __future__ import annotations

from pydantic import Field

from conceptgraph.core.models import RelationRecord, WireModel
from conceptgraph.recommendations.models import ContentRecommendation


class CreateGraphRequest(WireModel):
    """Body of POST /graph. Term validation happens in the orchestrator."""

    terms: list[str] | None = None
    similarity_threshold: float | None = Field(default=None, ge=0.0, le=1.0)
    include_relations: bool = True


class CompareRequest(WireModel):
    """Body of POST /concepts/compare."""

    concept1: str | None = None
    concept2: str | None = None


class RelationsResponse(WireModel):
    concept: str
    relations: list[RelationRecord] = Field(default_factory=list)
    relations_count: int = 0


class RecommendationsResponse(WireModel):
    concepts: list[str] = Field(default_factory=list)
    recommendations: list[ContentRecommendation] = Field(default_factory=list)
    count: int = 0


class HealthResponse(WireModel):
    status: str = "healthy"
    service: str = "conceptgraph"
    version: str
    graph_store: str


class ErrorResponse(WireModel):
    error: str
    details: str | None = None
