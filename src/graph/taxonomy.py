# src/graph/taxonomy.py - v1
"""Closed relation taxonomy.

Seven canonical relation types. Each entry lists the surface forms the LLM
(or a user) may produce for it, including Turkish synonyms with and without
diacritics, plus display labels per language.
"""

from __future__ import annotations

from conceptgraph.core.models import RelationTaxonomyEntry, RelationType

DEFAULT_RELATION: RelationType = "RELATED_TO"

RELATION_TAXONOMY: list[RelationTaxonomyEntry] = [
    RelationTaxonomyEntry(canonical_relation="CONTAINS", original_forms=["includes", "içerir", "icerir", "kapsar"], labels={"en": "Contains", "tr": "İçerir"}),
    RelationTaxonomyEntry(canonical_relation="IS_PART_OF", original_forms=["part of", "part_of", "belongs to", "parçasıdır", "parcasidir"], labels={"en": "Is part of", "tr": "Parçasıdır"}),
    RelationTaxonomyEntry(canonical_relation="IS_A", original_forms=["type of", "kind of", "subclass of", "türüdür", "turudur"], labels={"en": "Is a", "tr": "Türüdür"}),
    RelationTaxonomyEntry(canonical_relation="DEPENDS_ON", original_forms=["requires", "relies on", "bağlıdır", "baglidir"], labels={"en": "Depends on", "tr": "Bağlıdır"}),
    RelationTaxonomyEntry(canonical_relation="SIMILAR_TO", original_forms=["similar", "resembles", "benzerdir"], labels={"en": "Similar to", "tr": "Benzerdir"}, is_directional=False),
    RelationTaxonomyEntry(canonical_relation="OPPOSITE_OF", original_forms=["opposite", "contrasts with", "zıttıdır", "zittidir"], labels={"en": "Opposite of", "tr": "Zıttıdır"}, is_directional=False),
    RelationTaxonomyEntry(canonical_relation="RELATED_TO", original_forms=["related", "associated with", "ilişkilidir", "iliskilidir"], labels={"en": "Related to", "tr": "İlişkilidir"}, is_directional=False),
]

VALID_RELATION_TYPES: tuple[RelationType, ...] = tuple(
    e.canonical_relation for e in RELATION_TAXONOMY
)

# Turkish letters (both cases) folded to ASCII; U+0307 is the combining dot
# produced by lower-casing a dotted capital I.
_FOLD_TABLE = str.maketrans({
    "İ": "I", "ı": "I", "Ç": "C", "ç": "C", "Ğ": "G", "ğ": "G",
    "Ö": "O", "ö": "O", "Ş": "S", "ş": "S", "Ü": "U", "ü": "U", "\u0307": None,
})


def fold_relation_label(raw_relation: str) -> str:
    """Canonical lookup key: upper-case ASCII, spaces and hyphens as '_'."""
    folded = raw_relation.translate(_FOLD_TABLE).upper().strip()
    return "_".join(folded.replace("-", " ").split())


def _build_lookup() -> dict[str, RelationType]:
    lookup: dict[str, RelationType] = {}
    for entry in RELATION_TAXONOMY:
        lookup[entry.canonical_relation] = entry.canonical_relation
        for form in entry.original_forms:
            lookup[fold_relation_label(form)] = entry.canonical_relation
    return lookup


_LOOKUP: dict[str, RelationType] = _build_lookup()


def find_canonical(raw_relation: str) -> RelationType | None:
    """Find the canonical relation for a raw form. Returns None if no match."""
    return _LOOKUP.get(fold_relation_label(raw_relation))


def get_taxonomy_dict() -> dict[str, RelationTaxonomyEntry]:
    """Return taxonomy indexed by canonical relation name."""
    return {e.canonical_relation: e for e in RELATION_TAXONOMY}
