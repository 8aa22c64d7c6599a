# src/core/text.py - v1
"""Concept text normalization and free-form term list parsing."""

from __future__ import annotations

import re

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_concept_text(text: str) -> str:
    """Return the identity form of a concept: trimmed, inner whitespace collapsed.

    Case is preserved; "Graph" and "graph" are distinct concepts.
    """
    return _WHITESPACE_RE.sub(" ", text).strip()


def parse_terms_input(text: str | None, separator: str = ",") -> list[str]:
    """Split a separated string into normalized, non-empty terms.

    >>> parse_terms_input("memory, network,, graph ")
    ['memory', 'network', 'graph']
    """
    if not text:
        return []
    terms = (normalize_concept_text(part) for part in text.split(separator))
    return [t for t in terms if t]
