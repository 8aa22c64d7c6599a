# tests/unit/api/test_unit_app.py - v1
"""Tests for api/app.py - HTTP routes, status mapping and camelCase bodies."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from conceptgraph.api.app import create_app
from conceptgraph.pipeline.orchestrator import GraphOrchestrator
from conceptgraph.rag.graph_store.memory_store import InMemoryGraphStore
from conceptgraph.version import __version__

VECTORS = {"memory": [1.0, 1.0], "network": [1.0, 1.0], "graph": [-1.0, 0.0]}


@pytest.fixture
def api_orchestrator(make_embedder, mock_analyzer, settings) -> GraphOrchestrator:
    return GraphOrchestrator(make_embedder(VECTORS), mock_analyzer, InMemoryGraphStore(), settings)


@pytest.fixture
def client(settings, api_orchestrator):
    app = create_app(settings, orchestrator=api_orchestrator)
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


@pytest.fixture
def failing_client(settings):
    """Client whose embedding provider always fails."""
    embedder = MagicMock()
    embedder.provider_name = "mock"
    embedder.embed_query = AsyncMock(side_effect=RuntimeError("quota exceeded"))
    orch = GraphOrchestrator(embedder, AsyncMock(), InMemoryGraphStore(), settings)
    with TestClient(create_app(settings, orchestrator=orch), raise_server_exceptions=False) as c:
        yield c


class TestCreateGraphRoute:
    def test_success(self, client):
        resp = client.post("/api/graph", json={"terms": ["memory", "network", "graph"]})
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["concepts"] == 3
        assert body["relations"] == 1
        assert body["threshold"] == 0.7
        assert body["links"] == [{
            "source": "memory", "target": "network", "value": 0.9,
            "relation": "SIMILAR_TO", "description": "closely related",
        }]

    def test_camel_case_options(self, client, mock_analyzer):
        resp = client.post(
            "/api/graph",
            json={"terms": ["memory", "network"], "similarityThreshold": 0.2, "includeRelations": False},
        )
        assert resp.status_code == 200
        assert resp.json()["threshold"] == 0.2
        mock_analyzer.analyze_relation.assert_not_awaited()

    @pytest.mark.parametrize("body", [{}, {"terms": []}, {"terms": ["  "]}])
    def test_missing_terms(self, client, body):
        resp = client.post("/api/graph", json=body)
        assert resp.status_code == 400
        assert set(resp.json()) == {"error", "details"}

    def test_body_validation(self, client):
        resp = client.post("/api/graph", json={"terms": ["a"], "similarityThreshold": 2})
        assert resp.status_code == 400
        assert "similarityThreshold" in resp.json()["details"]

    def test_pipeline_failure(self, failing_client):
        resp = failing_client.post("/api/graph", json={"terms": ["memory"]})
        assert resp.status_code == 500
        assert resp.json()["error"] == "Internal server error"
        assert "quota exceeded" in resp.json()["details"]

    def test_pipeline_failure_keeps_request_id(self, failing_client):
        tagged = failing_client.post(
            "/api/graph", json={"terms": ["memory"]}, headers={"X-Request-ID": "req-500"},
        )
        generated = failing_client.post("/api/graph", json={"terms": ["memory"]})
        assert tagged.status_code == 500
        assert tagged.headers["X-Request-ID"] == "req-500"
        assert generated.headers.get("X-Request-ID")


class TestReadRoutes:
    def test_network(self, client):
        client.post("/api/graph", json={"terms": ["memory", "network"]})
        resp = client.get("/api/graph", params={"limit": 10})
        assert resp.status_code == 200
        body = resp.json()
        assert {n["id"] for n in body["nodes"]} == {"memory", "network"}
        assert body["nodes"][0]["group"] == 1
        assert body["links"][0]["strengthClass"] == "very-strong"
        assert body["links"][0]["type"] == "SIMILAR_TO"

    def test_network_bad_limit(self, client):
        assert client.get("/api/graph", params={"limit": 0}).status_code == 400

    def test_relations(self, client):
        client.post("/api/graph", json={"terms": ["memory", "network"]})
        resp = client.get("/api/concepts/memory/relations")
        assert resp.status_code == 200
        body = resp.json()
        assert body["concept"] == "memory"
        assert body["relationsCount"] == 1
        record = body["relations"][0]
        assert record["relationType"] == "SIMILAR_TO"
        assert record["strengthClass"] == "very-strong"
        assert "embedding" not in record["relatedNode"]

    def test_relations_unknown_concept(self, client):
        resp = client.get("/api/concepts/ghost/relations")
        assert resp.status_code == 200
        assert resp.json()["relationsCount"] == 0

    def test_compare(self, client):
        resp = client.post("/api/concepts/compare", json={"concept1": "memory", "concept2": "network"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["cosineSimilarity"] == pytest.approx(1.0)
        assert body["dbSimilarity"] == pytest.approx(1.0)
        assert body["relation"] == "SIMILAR_TO"
        assert body["relationClass"] == "very-strong"

    def test_compare_missing_concept(self, client):
        resp = client.post("/api/concepts/compare", json={"concept1": "memory"})
        assert resp.status_code == 400
        assert resp.json()["error"] == "Two concepts are required"


class TestRecommendationsRoute:
    def test_recommendations(self, client):
        resp = client.get("/api/recommendations", params={"concepts": "zihin, bellek", "type": "book"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["concepts"] == ["zihin", "bellek"]
        assert body["count"] == len(body["recommendations"]) > 0
        assert all(r["type"] == "book" for r in body["recommendations"])

    def test_no_concepts(self, client):
        resp = client.get("/api/recommendations")
        assert resp.status_code == 200
        assert resp.json()["count"] == 0

    def test_unknown_type(self, client):
        resp = client.get("/api/recommendations", params={"concepts": "zihin", "type": "movie"})
        assert resp.status_code == 400


class TestServiceRoutes:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {
            "status": "healthy", "service": "conceptgraph",
            "version": __version__, "graphStore": "memory",
        }

    def test_not_found(self, client):
        resp = client.get("/api/unknown")
        assert resp.status_code == 404
        assert resp.json() == {"error": "Not found"}

    def test_request_id_echoed(self, client):
        resp = client.get("/health", headers={"X-Request-ID": "abc"})
        assert resp.headers["X-Request-ID"] == "abc"

    def test_request_id_generated(self, client):
        assert client.get("/health").headers.get("X-Request-ID")

    def test_custom_prefix(self, settings, api_orchestrator):
        custom = settings.model_copy(update={"api_prefix": "/v1"})
        with TestClient(create_app(custom, orchestrator=api_orchestrator)) as c:
            assert c.get("/v1/graph").status_code == 200
            assert c.get("/api/graph").status_code == 404

    def test_lifespan_builds_orchestrator(self, settings):
        with TestClient(create_app(settings)) as c:
            assert c.get("/health").json()["graphStore"] == "memory"

    def test_error_schema_documented(self, client):
        schema = client.get("/openapi.json").json()
        responses = schema["paths"]["/api/graph"]["post"]["responses"]
        ref = responses["400"]["content"]["application/json"]["schema"]["$ref"]
        assert ref.endswith("/ErrorResponse")
        assert "500" in responses
