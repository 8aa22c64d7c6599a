# tests/unit/config/test_unit_settings.py - v1
"""Tests for config/settings.py - typed Settings and validation rules."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from conceptgraph.config.settings import ConfigurationError, Settings, load_settings


class TestSettingsDefaults:
    def test_default_llm(self):
        s = Settings(_env_file=None)
        assert s.llm_provider == "openai"
        assert s.llm_model == "gpt-4o"
        assert s.llm_max_tokens == 300

    def test_default_embeddings(self):
        s = Settings(_env_file=None)
        assert s.embedding_model == "text-embedding-3-small"
        assert s.embedding_dimensions == 1536
        assert s.embedding_request_delay_s == 0.2

    def test_default_pipeline(self):
        s = Settings(_env_file=None)
        assert s.similarity_threshold == 0.7
        assert s.relation_min_similarity == 0.25
        assert s.relation_acceptance_policy == "lenient"

    def test_default_api(self):
        s = Settings(_env_file=None)
        assert s.api_prefix == "/api"
        assert s.api_port == 5000
        assert s.graph_db_type == "neo4j"


class TestSettingsValidation:
    def test_threshold_out_of_range(self):
        with pytest.raises(ConfigurationError, match="SIMILARITY_THRESHOLD"):
            Settings(_env_file=None, similarity_threshold=1.5)

    def test_min_similarity_out_of_range(self):
        with pytest.raises(ConfigurationError, match="RELATION_MIN_SIMILARITY"):
            Settings(_env_file=None, relation_min_similarity=-0.1)

    def test_neo4j_requires_uri(self):
        with pytest.raises(ConfigurationError, match="GRAPH_DB_URI"):
            Settings(_env_file=None, graph_db_type="neo4j", graph_db_uri="")

    def test_memory_store_without_uri(self):
        s = Settings(_env_file=None, graph_db_type="memory", graph_db_uri="")
        assert s.graph_db_type == "memory"

    def test_api_prefix_slash(self):
        with pytest.raises(ConfigurationError, match="API_PREFIX"):
            Settings(_env_file=None, api_prefix="api")

    def test_errors_collected(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Settings(_env_file=None, similarity_threshold=2, api_prefix="x")
        assert "SIMILARITY_THRESHOLD" in str(exc_info.value)
        assert "API_PREFIX" in str(exc_info.value)

    def test_negative_delay(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, embedding_request_delay_s=-1)

    def test_zero_limit(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, network_default_limit=0)

    def test_unknown_store_type(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, graph_db_type="arangodb")

    def test_unknown_policy(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, relation_acceptance_policy="strict")


class TestHelpers:
    def test_cors_origins_list(self):
        s = Settings(_env_file=None, cors_origins="http://a.test, http://b.test,")
        assert s.cors_origins_list == ["http://a.test", "http://b.test"]

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("SIMILARITY_THRESHOLD", "0.5")
        monkeypatch.setenv("GRAPH_DB_TYPE", "memory")
        s = Settings(_env_file=None)
        assert s.similarity_threshold == 0.5
        assert s.graph_db_type == "memory"

    def test_load_settings_overrides(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        s = load_settings(llm_model="gpt-4o-mini", api_port=8080)
        assert s.llm_model == "gpt-4o-mini"
        assert s.api_port == 8080
