# tests/integration/api/test_int_api.py - v1
"""HTTP round trip over a real orchestrator and the in-memory store."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from conceptgraph.api.app import create_app
from conceptgraph.llm.relation_analyzer import RelationAnalyzer
from conceptgraph.pipeline.orchestrator import GraphOrchestrator
from conceptgraph.rag.graph_store.memory_store import InMemoryGraphStore

VECTORS = {
    "memory": [0.9, 0.1, 0.0],
    "recall": [0.8, 0.2, 0.0],
    "graph": [0.0, 0.0, 1.0],
}
ANSWER = {"relation": "part of", "strength": 0.75, "description": "recall is part of memory"}


@pytest.fixture
def client(make_embedder, scripted_llm, settings):
    orch = GraphOrchestrator(
        embedder=make_embedder(VECTORS),
        analyzer=RelationAnalyzer(scripted_llm(ANSWER)),
        graph_store=InMemoryGraphStore(),
        settings=settings,
    )
    with TestClient(create_app(settings, orchestrator=orch)) as c:
        yield c


def test_http_round(client):
    created = client.post("/api/graph", json={"terms": ["memory", "recall", "graph"]})
    assert created.status_code == 200
    assert created.json()["relations"] == 1
    assert created.json()["links"][0]["relation"] == "IS_PART_OF"

    network = client.get("/api/graph").json()
    assert len(network["nodes"]) == 3
    assert network["links"][0]["type"] == "IS_PART_OF"
    assert network["links"][0]["strengthClass"] == "strong"

    relations = client.get("/api/concepts/memory/relations").json()
    assert relations["relationsCount"] == 1
    assert relations["relations"][0]["targetText"] == "recall"

    compared = client.post(
        "/api/concepts/compare", json={"concept1": "memory", "concept2": "graph"},
    ).json()
    assert compared["cosineSimilarity"] == pytest.approx(0.0)
    assert compared["dbSimilarity"] == pytest.approx(0.0)

    assert client.get("/health").json()["status"] == "healthy"


def test_rejected_terms_leave_store_untouched(client):
    assert client.post("/api/graph", json={"terms": ["memory", ""]}).status_code == 400
    assert client.get("/api/graph").json() == {"nodes": [], "links": []}
