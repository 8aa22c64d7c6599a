# src/config/settings.py - v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for all deployment-specific settings: provider
credentials, graph store connection, pipeline thresholds, HTTP and logging.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === LLM (relation analysis) ===
    llm_provider: Literal["openai", "ollama"] = "openai"
    llm_model: str = "gpt-4o"
    llm_temperature: float = 0.2
    llm_max_tokens: int = 300

    # Provider credentials / endpoints
    openai_api_key: str = ""
    ollama_base_url: str = "http://localhost:11434"

    # === EMBEDDINGS ===
    embedding_provider: Literal["openai", "ollama"] = "openai"
    embedding_model: str = "text-embedding-3-small"
    embedding_dimensions: int = 1536
    embedding_ollama_model: str = "nomic-embed-text"
    embedding_request_delay_s: float = 0.2

    # === Graph database ===
    graph_db_type: Literal["neo4j", "memory"] = "neo4j"
    graph_db_uri: str = "bolt://localhost:7687"
    graph_db_database: str = "neo4j"
    graph_db_user: str = "neo4j"
    graph_db_password: str = ""
    network_default_limit: int = 100

    # === Graph construction ===
    similarity_threshold: float = 0.7
    relation_min_similarity: float = 0.25
    relation_acceptance_policy: Literal["lenient", "typed"] = "lenient"

    # === Recommendations ===
    recommendations_catalog_path: Path | None = None

    # === HTTP API ===
    api_prefix: str = "/api"
    api_host: str = "0.0.0.0"
    api_port: int = 5000
    cors_origins: str = "*"

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("embedding_request_delay_s")
    @classmethod
    def validate_request_delay(cls, v: float) -> float:  # noqa: N805
        if v < 0:
            raise ValueError("embedding_request_delay_s must be >= 0")
        return v

    @field_validator("network_default_limit")
    @classmethod
    def validate_network_limit(cls, v: int) -> int:  # noqa: N805
        if v < 1:
            raise ValueError("network_default_limit must be >= 1")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        for name in ("similarity_threshold", "relation_min_similarity"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                errors.append(f"{name.upper()} must be within [0, 1], got {value}")

        if self.graph_db_type == "neo4j" and not self.graph_db_uri:
            errors.append("GRAPH_DB_TYPE is neo4j but GRAPH_DB_URI is empty")

        if self.api_prefix and not self.api_prefix.startswith("/"):
            errors.append("API_PREFIX must start with '/'")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or CLI flags).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
