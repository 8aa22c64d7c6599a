# src/core/similarity.py - v1
"""Vector similarity utilities.

Scalar helpers (cosine, euclidean, score blending, strength buckets) never
raise on malformed vectors: they return a neutral value instead, so callers
holding a possibly-missing embedding degrade gracefully.

``cosine_similarity_matrix`` is the numpy batch variant used to precompute
all pairwise similarities of a request in one pass.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from numbers import Real
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from conceptgraph.core.models import StrengthClass

logger = logging.getLogger(__name__)

# Upper bounds (exclusive) of the strength buckets, in ascending order.
STRENGTH_BUCKETS: tuple[tuple[float, StrengthClass], ...] = (
    (0.3, "weak"),
    (0.6, "moderate"),
    (0.85, "strong"),
)


def _comparable(a: Sequence[float] | None, b: Sequence[float] | None) -> bool:
    if a is None or b is None:
        return False
    return len(a) > 0 and len(a) == len(b)


def cosine_similarity(a: Sequence[float] | None, b: Sequence[float] | None) -> float:
    """Cosine of the angle between two vectors.

    Returns 0.0 when either vector is missing or empty, when the lengths
    differ, or when either magnitude is exactly zero.
    """
    if not _comparable(a, b):
        return 0.0

    dot = sum(x * y for x, y in zip(a, b))  # type: ignore[arg-type]
    mag_a = math.sqrt(sum(x * x for x in a))  # type: ignore[union-attr]
    mag_b = math.sqrt(sum(y * y for y in b))  # type: ignore[union-attr]
    if mag_a == 0 or mag_b == 0:
        return 0.0
    return dot / (mag_a * mag_b)


def euclidean_distance(a: Sequence[float] | None, b: Sequence[float] | None) -> float:
    """L2 distance; ``math.inf`` when the vectors are not comparable."""
    if not _comparable(a, b):
        return math.inf
    return math.sqrt(sum((x - y) ** 2 for x, y in zip(a, b)))  # type: ignore[arg-type]


def distance_to_similarity(distance: float) -> float:
    """Map a non-negative distance onto (0, 1]: 0 -> 1, inf -> 0.

    Negative or NaN distances are not valid and map to 0.
    """
    if math.isnan(distance) or math.isinf(distance) or distance < 0:
        return 0.0
    return 1.0 / (1.0 + distance)


def _is_number(value: object) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def combine_similarity_scores(
    scores: Mapping[str, float] | None,
    weights: Mapping[str, float] | None = None,
) -> float:
    """Weighted blend of several similarity scores.

    Args:
        scores: Method name -> score.
        weights: Method name -> weight. Defaults to equal weights over
            the methods present in ``scores``. Weights are normalized to
            sum to 1 before blending.

    Returns:
        Weighted sum; pairs whose score or weight is not numeric are skipped.
        0.0 for empty / non-mapping input or a non-positive total weight.
    """
    if not isinstance(scores, Mapping) or not scores:
        return 0.0

    if weights is None:
        equal = 1.0 / len(scores)
        weights = {method: equal for method in scores}

    total = sum(w for w in weights.values() if _is_number(w))
    if total <= 0:
        return 0.0

    combined = 0.0
    for method, score in scores.items():
        weight = weights.get(method)
        if _is_number(score) and _is_number(weight):
            combined += score * (weight / total)  # type: ignore[operator]
    return combined


def classify_relation_strength(strength: float) -> StrengthClass:
    """Bucket a [0, 1] strength: weak < 0.3 <= moderate < 0.6 <= strong < 0.85."""
    for upper, label in STRENGTH_BUCKETS:
        if strength < upper:
            return label
    return "very-strong"


def cosine_similarity_matrix(embeddings: np.ndarray) -> np.ndarray:
    """Compute pairwise cosine similarity matrix.

    Args:
        embeddings: 2D array of shape (n_samples, n_features).

    Returns:
        Similarity matrix of shape (n_samples, n_samples). Rows for
        zero-norm vectors are all zero, matching ``cosine_similarity``.

    Raises:
        ValueError: If embeddings is not a 2D array.
    """
    if embeddings.ndim != 2:
        raise ValueError(f"Expected 2D array, got {embeddings.ndim}D")
    if embeddings.shape[0] == 0:
        return np.empty((0, 0), dtype=np.float64)

    matrix = embeddings.astype(np.float64, copy=False)
    norms = np.linalg.norm(matrix, axis=1, keepdims=True)
    safe_norms = np.where(norms == 0, 1.0, norms)
    normalized = np.where(norms == 0, 0.0, matrix / safe_norms)
    return normalized @ normalized.T


def pairwise_similarities(vectors: Sequence[Sequence[float] | None]) -> np.ndarray:
    """Pairwise cosine matrix for a list of possibly-inconsistent vectors.

    Uses the numpy batch path when all vectors are present and share a
    length; otherwise falls back to ``cosine_similarity`` per pair so the
    zero-on-mismatch guard still applies.
    """
    n = len(vectors)
    lengths = {len(v) if v is not None else 0 for v in vectors}
    if n and len(lengths) == 1 and 0 not in lengths:
        return cosine_similarity_matrix(np.asarray(vectors, dtype=np.float64))

    logger.debug("Inconsistent embedding lengths %s, using per-pair similarity", lengths)
    result = np.zeros((n, n), dtype=np.float64)
    for i in range(n):
        for j in range(i, n):
            result[i, j] = result[j, i] = cosine_similarity(vectors[i], vectors[j])
    return result
