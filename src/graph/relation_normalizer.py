# src/graph/relation_normalizer.py - v1
"""Relation label normalization and edge acceptance policies.

Maps free-form relation labels onto the closed taxonomy (unknown labels
fall back to RELATED_TO) and decides, from cosine similarity and LLM
strength, whether an edge should be materialized.
"""

from __future__ import annotations

import logging
from typing import Literal

from conceptgraph.core.models import RelationType
from conceptgraph.graph.taxonomy import DEFAULT_RELATION, find_canonical, get_taxonomy_dict

logger = logging.getLogger(__name__)

MIN_RELATION_STRENGTH = 0.2

AcceptancePolicy = Literal["lenient", "typed"]


def validate_relation_type(relation_type: object) -> RelationType:
    """Canonicalize any label into the taxonomy. Never raises.

    Exact canonical names match case-insensitively; localized synonyms
    are looked up next; everything else (including None) is RELATED_TO.
    """
    if not isinstance(relation_type, str) or not relation_type.strip():
        return DEFAULT_RELATION

    canonical = find_canonical(relation_type)
    if canonical is None:
        logger.debug("Unknown relation label %r mapped to %s", relation_type, DEFAULT_RELATION)
        return DEFAULT_RELATION
    return canonical


def get_relation_type_label(relation_type: object, language: str = "tr") -> str:
    """Display label of a relation in the given language ("tr" or "en")."""
    entry = get_taxonomy_dict()[validate_relation_type(relation_type)]
    return entry.labels.get(language) or entry.labels["en"]


def should_create_relation(
    similarity: float,
    relation_strength: float,
    threshold: float = 0.25,
) -> bool:
    """Lenient acceptance: similarity above threshold and non-trivial strength."""
    if similarity < threshold:
        return False
    if relation_strength < MIN_RELATION_STRENGTH:
        return False
    return True


def should_create_relation_with_type(
    relation_type: str,
    relation_strength: float,
    similarity: float,
) -> bool:
    """Stricter acceptance that demands more evidence for generic relations.

    RELATED_TO needs similarity >= 0.4 and strength >= 0.4; every other
    canonical type needs similarity >= 0.25 and strength >= 0.3.
    """
    if relation_type == "RELATED_TO":
        if similarity < 0.4 or relation_strength < 0.4:
            return False
        if relation_strength <= MIN_RELATION_STRENGTH:
            return False
        return True

    return similarity >= 0.25 and relation_strength >= 0.3


def accept_relation(
    policy: AcceptancePolicy,
    relation_type: RelationType,
    similarity: float,
    relation_strength: float,
    min_similarity: float = 0.25,
) -> bool:
    """Dispatch to the configured acceptance policy."""
    if policy == "typed":
        return should_create_relation_with_type(relation_type, relation_strength, similarity)
    return should_create_relation(similarity, relation_strength, min_similarity)
