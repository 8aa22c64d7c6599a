# tests/unit/recommendations/test_unit_recommendations.py - v1
"""Tests for recommendations/catalog.py and recommendations/recommender.py."""

from __future__ import annotations

import json

import pytest

from conceptgraph.recommendations.catalog import CatalogLoadError, ContentCatalog
from conceptgraph.recommendations.models import CatalogItem
from conceptgraph.recommendations.recommender import ContentRecommender, recommendation_id


def _item(title: str, concepts: list[str], type_: str = "article") -> CatalogItem:
    return CatalogItem(
        title=title, type=type_, url=f"https://example.com/{title}", concepts=concepts,
    )


@pytest.fixture
def recommender() -> ContentRecommender:
    return ContentRecommender(ContentCatalog([
        _item("one", ["memory"]),
        _item("both", ["memory", "graph"], "book"),
        _item("other", ["cooking"]),
        _item("also-one", ["graph"], "video"),
    ]))


class TestRecommend:
    def test_relevance_and_order(self, recommender):
        results = recommender.recommend(["Memory", " graph "])
        assert [r.title for r in results] == ["both", "one", "also-one"]
        assert results[0].relevance == 1.0
        assert results[1].relevance == 0.5

    def test_type_filter(self, recommender):
        results = recommender.recommend(["memory", "graph"], content_type="book")
        assert [r.title for r in results] == ["both"]

    def test_limit(self, recommender):
        assert len(recommender.recommend(["memory", "graph"], limit=1)) == 1

    def test_no_match(self, recommender):
        assert recommender.recommend(["astronomy"]) == []

    def test_empty_request(self, recommender):
        assert recommender.recommend([]) == []
        assert recommender.recommend(["  "]) == []

    def test_duplicate_requested_concepts(self, recommender):
        results = recommender.recommend(["memory", "MEMORY"])
        assert results[0].relevance == 1.0

    def test_unknown_type(self, recommender):
        with pytest.raises(ValueError, match="Unknown content type"):
            recommender.recommend(["memory"], content_type="movie")

    def test_invalid_limit(self, recommender):
        with pytest.raises(ValueError):
            recommender.recommend(["memory"], limit=0)

    def test_deterministic_ids(self, recommender):
        first = recommender.recommend(["memory"])
        second = recommender.recommend(["memory"])
        assert [r.id for r in first] == [r.id for r in second]
        assert first[0].id == recommendation_id(first[0].url)

    def test_default_catalog(self):
        results = ContentRecommender().recommend(["zihin"])
        assert results
        assert {r.type for r in results} <= {"article", "book", "video", "course", "tool", "podcast"}

    def test_wire_format(self, recommender):
        data = recommender.recommend(["memory"])[0].model_dump(by_alias=True)
        assert set(data) == {"id", "title", "type", "author", "url", "description", "relevance"}


class TestCatalog:
    def test_default_not_empty(self):
        assert len(ContentCatalog()) > 0

    def test_concepts_lowercased(self):
        assert _item("x", [" Memory ", ""]).concepts == ["memory"]

    def test_from_file(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps([
            {"title": "T", "type": "podcast", "url": "https://x.test/t", "concepts": ["graph"]},
        ]), encoding="utf-8")
        catalog = ContentCatalog.from_file(path)
        assert len(catalog) == 1
        assert catalog.items[0].type == "podcast"

    def test_from_settings_none_uses_default(self):
        assert len(ContentCatalog.from_settings(None)) == len(ContentCatalog())

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(CatalogLoadError):
            ContentCatalog.from_file(path)

    def test_not_a_list(self, tmp_path):
        path = tmp_path / "obj.json"
        path.write_text("{}", encoding="utf-8")
        with pytest.raises(CatalogLoadError, match="list"):
            ContentCatalog.from_file(path)

    def test_invalid_entry(self, tmp_path):
        path = tmp_path / "entry.json"
        path.write_text(json.dumps([{"title": "T", "type": "movie", "url": "u"}]), encoding="utf-8")
        with pytest.raises(CatalogLoadError):
            ContentCatalog.from_file(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(CatalogLoadError):
            ContentCatalog.from_file(tmp_path / "absent.json")
