# src/recommendations/catalog.py - v1
"""Recommendation catalog: built-in items plus optional JSON file.

The JSON file holds a list of objects with ``title``, ``type``,
``author``, ``url``, ``description`` and ``concepts``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from conceptgraph.recommendations.models import CatalogItem

logger = logging.getLogger(__name__)

DEFAULT_CATALOG: list[dict] = [
    {
        "title": "Bilgi Haritalaması ve Anlambilimsel Ağlar",
        "type": "article",
        "author": "Dr. Ayşe Yılmaz",
        "url": "https://example.com/articles/semantic-networks",
        "description": "Bilgi haritalaması ve anlambilimsel ağların öğrenme üzerindeki etkileri.",
        "concepts": ["bilgi", "ağ", "öğrenme", "zihin"],
    },
    {
        "title": "Düşünme Sanatı: Zihin Haritaları",
        "type": "book",
        "author": "Tony Buzan",
        "url": "https://example.com/books/mind-mapping",
        "description": "Zihin haritaları yöntemiyle düşünce süreçlerini geliştirmeye dair klasik kitap.",
        "concepts": ["zihin", "harita", "düşünme", "bellek"],
    },
    {
        "title": "Bilişsel Ağlar ve Yapay Zeka",
        "type": "video",
        "author": "Prof. Mehmet Demir",
        "url": "https://example.com/videos/cognitive-networks-ai",
        "description": "Bilişsel ağların yapay zeka teknolojilerindeki uygulamaları.",
        "concepts": ["ağ", "yapay zeka", "bilişsel", "teknoloji"],
    },
    {
        "title": "Bilgi Görselleştirme Teknikleri",
        "type": "article",
        "author": "Zeynep Kaya",
        "url": "https://example.com/articles/data-visualization",
        "description": "Karmaşık bilgilerin görselleştirme yöntemleriyle anlaşılır hale getirilmesi.",
        "concepts": ["grafik", "görselleştirme", "bilgi", "veri"],
    },
    {
        "title": "Anlamsal Ağların Eğitimde Kullanımı",
        "type": "course",
        "author": "Eğitim Teknolojileri Akademisi",
        "url": "https://example.com/courses/semantic-networks-education",
        "description": "Anlamsal ağların öğretim süreçlerinde kullanımına dair online kurs.",
        "concepts": ["ağ", "eğitim", "öğrenme", "anlamsal"],
    },
    {
        "title": "Hafıza Teknikleri ve Bilgi Sarayları",
        "type": "book",
        "author": "Joshua Foer",
        "url": "https://example.com/books/memory-techniques",
        "description": "Antik hafıza teknikleri ve bilgi sarayları yöntemiyle hafızayı geliştirmek.",
        "concepts": ["bellek", "saray", "hafıza", "zihin"],
    },
    {
        "title": "Graph Databases",
        "type": "book",
        "author": "Ian Robinson, Jim Webber, Emil Eifrem",
        "url": "https://example.com/books/graph-databases",
        "description": "Modeling connected data with labeled property graphs.",
        "concepts": ["graph", "network", "database", "knowledge graph"],
    },
    {
        "title": "How Memory Works",
        "type": "podcast",
        "author": "Cognition Weekly",
        "url": "https://example.com/podcasts/how-memory-works",
        "description": "Episode on encoding, consolidation and recall.",
        "concepts": ["memory", "learning", "mind", "bellek"],
    },
    {
        "title": "Concept Mapping Toolkit",
        "type": "tool",
        "author": "Open Learning Lab",
        "url": "https://example.com/tools/concept-mapping",
        "description": "Interactive editor for building and sharing concept maps.",
        "concepts": ["concept map", "graph", "learning", "harita"],
    },
]


class CatalogLoadError(ValueError):
    """Raised when a catalog file cannot be read or validated."""


class ContentCatalog:
    """In-memory list of recommendable items."""

    def __init__(self, items: list[CatalogItem] | None = None) -> None:
        self._items = list(items) if items is not None else _default_items()

    @property
    def items(self) -> list[CatalogItem]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    @classmethod
    def from_file(cls, path: Path) -> ContentCatalog:
        """Load a catalog from a JSON file.

        Raises:
            CatalogLoadError: If the file is unreadable or malformed.
        """
        try:
            raw = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise CatalogLoadError(f"Cannot read catalog {path}: {exc}") from exc
        if not isinstance(raw, list):
            raise CatalogLoadError(f"Catalog {path} must contain a JSON list")
        try:
            items = [CatalogItem.model_validate(entry) for entry in raw]
        except ValidationError as exc:
            raise CatalogLoadError(f"Invalid catalog entry in {path}: {exc}") from exc
        logger.info("Loaded %d catalog items from %s", len(items), path)
        return cls(items)

    @classmethod
    def from_settings(cls, path: Path | None) -> ContentCatalog:
        """Catalog from ``recommendations_catalog_path``, or the built-in one."""
        if path is None:
            return cls()
        return cls.from_file(path)


def _default_items() -> list[CatalogItem]:
    return [CatalogItem.model_validate(entry) for entry in DEFAULT_CATALOG]
