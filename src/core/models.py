# src/core/models.py - v1
"""Shared Pydantic domain models used across modules.

No module redefines these types; all imports come from core.models.
Models that travel over HTTP serialize with camelCase aliases
(``model_dump(by_alias=True)``) while Python code uses snake_case.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

RelationType = Literal[
    "CONTAINS",
    "IS_PART_OF",
    "IS_A",
    "DEPENDS_ON",
    "SIMILAR_TO",
    "OPPOSITE_OF",
    "RELATED_TO",
]

StrengthClass = Literal["weak", "moderate", "strong", "very-strong"]

# Values allowed in open metadata / property bags.
Scalar = Union[str, int, float, bool]


def clamp_unit(value: float) -> float:
    """Clamp a score into [0, 1]."""
    return max(0.0, min(1.0, float(value)))


class WireModel(BaseModel):
    """Base for models exchanged over the HTTP API (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# === GRAPH ENTITIES ===


class Concept(WireModel):
    """Concept node, keyed by its normalized text."""

    text: str
    embedding: list[float] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None
    metadata: dict[str, Scalar] = Field(default_factory=dict)


class Relation(WireModel):
    """Directed, typed, weighted edge between two concepts.

    Merge key in every store is (source_text, target_text, type).
    """

    source_text: str
    target_text: str
    type: RelationType = "RELATED_TO"
    weight: float = 0.5
    description: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None
    properties: dict[str, Scalar] = Field(default_factory=dict)

    @field_validator("weight")
    @classmethod
    def _clamp_weight(cls, v: float) -> float:
        return clamp_unit(v)

    @property
    def strength_class(self) -> StrengthClass:
        from conceptgraph.core.similarity import classify_relation_strength

        return classify_relation_strength(self.weight)


class RelationJudgment(BaseModel):
    """Structured LLM verdict on how two concepts relate."""

    relation: RelationType = "RELATED_TO"
    strength: float = 0.0
    description: str = ""

    @field_validator("strength")
    @classmethod
    def _clamp_strength(cls, v: float) -> float:
        return clamp_unit(v)


class RelationTaxonomyEntry(BaseModel):
    """Canonical relation type with its accepted surface forms."""

    canonical_relation: RelationType
    original_forms: list[str] = Field(default_factory=list)
    labels: dict[str, str] = Field(default_factory=dict)
    is_directional: bool = True


# === GRAPH VIEWS ===


class GraphNode(WireModel):
    """Node as exposed to the presentation layer."""

    id: str


class NetworkNode(GraphNode):
    """Node of the stored concept network (group reserved for clustering)."""

    group: int = 1


class GraphLink(WireModel):
    """Link created by a graph-construction request."""

    source: str
    target: str
    value: float
    relation: RelationType
    description: str = ""


class NetworkLink(WireModel):
    """Link read back from the stored concept network."""

    source: str
    target: str
    value: float = 0.5
    type: str
    description: str = ""
    strength_class: StrengthClass = "moderate"


class GraphPayload(WireModel):
    """Result of a graph-construction request."""

    success: bool = True
    concepts: int
    relations: int
    threshold: float
    nodes: list[GraphNode] = Field(default_factory=list)
    links: list[GraphLink] = Field(default_factory=list)


class ConceptNetwork(WireModel):
    """Node/edge view over the persisted graph."""

    nodes: list[NetworkNode] = Field(default_factory=list)
    links: list[NetworkLink] = Field(default_factory=list)


class RelationRecord(WireModel):
    """One edge touching a concept, seen from that concept."""

    source_text: str
    target_text: str
    relation_type: str
    weight: float | None = None
    description: str = ""
    strength_class: StrengthClass = "weak"
    relation: dict[str, Any] = Field(default_factory=dict)
    related_node: dict[str, Any] = Field(default_factory=dict)


class ConceptComparison(WireModel):
    """Side-by-side comparison of two concepts."""

    concept1: str
    concept2: str
    cosine_similarity: float
    db_similarity: float
    relation: RelationType
    relation_strength: float
    description: str
    relation_class: StrengthClass
