# tests/unit/llm/test_unit_llm_clients.py - v1
"""Tests for LLM adapters and the client factory."""

from __future__ import annotations

import sys
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from conceptgraph.config.settings import Settings
from conceptgraph.llm.adapters.ollama_adapter import OllamaAdapter
from conceptgraph.llm.adapters.openai_adapter import OpenAIAdapter
from conceptgraph.llm.client_factory import (
    UnsupportedProviderError,
    create_llm_client,
    create_llm_client_from_settings,
    register_provider,
)
from conceptgraph.llm.models import Message


def _openai_response(content: str) -> SimpleNamespace:
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=SimpleNamespace(prompt_tokens=12, completion_tokens=7),
    )


class TestOpenAIAdapter:
    @pytest.mark.asyncio
    async def test_complete_json_mode(self):
        adapter = OpenAIAdapter(model="gpt-4o", api_key="sk-test")
        client = MagicMock()
        client.chat.completions.create = AsyncMock(return_value=_openai_response('{"a": 1}'))
        adapter._OpenAIAdapter__client = client

        resp = await adapter.complete(
            [Message(role="user", content="hi")], system="sys", json_mode=True,
        )
        assert resp.content == '{"a": 1}'
        assert resp.input_tokens == 12
        assert resp.output_tokens == 7
        assert resp.provider == "openai"

        kwargs = client.chat.completions.create.await_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["messages"][0] == {"role": "system", "content": "sys"}
        assert kwargs["max_tokens"] == 300
        assert kwargs["temperature"] == 0.2

    @pytest.mark.asyncio
    async def test_plain_mode_has_no_response_format(self):
        adapter = OpenAIAdapter()
        client = MagicMock()
        client.chat.completions.create = AsyncMock(return_value=_openai_response("text"))
        adapter._OpenAIAdapter__client = client
        await adapter.complete([Message(role="user", content="hi")])
        assert "response_format" not in client.chat.completions.create.await_args.kwargs

    def test_import_error(self):
        mod = sys.modules.get("openai")
        sys.modules["openai"] = None  # type: ignore[assignment]
        try:
            with pytest.raises(ImportError, match="openai"):
                _ = OpenAIAdapter()._client
        finally:
            if mod is not None:
                sys.modules["openai"] = mod
            else:
                sys.modules.pop("openai", None)


class TestOllamaAdapter:
    @pytest.mark.asyncio
    async def test_complete_json_format(self):
        client = MagicMock()
        client.chat = AsyncMock(return_value={
            "message": {"content": '{"relation": "IS_A"}'},
            "prompt_eval_count": 5,
            "eval_count": 3,
        })
        with patch("ollama.AsyncClient", return_value=client):
            resp = await OllamaAdapter(model="llama3").complete(
                [Message(role="user", content="hi")], json_mode=True, max_tokens=50,
            )
        assert resp.content == '{"relation": "IS_A"}'
        assert resp.provider == "ollama"
        kwargs = client.chat.await_args.kwargs
        assert kwargs["format"] == "json"
        assert kwargs["options"]["num_predict"] == 50


class TestClientFactory:
    def test_openai(self):
        client = create_llm_client("openai", "gpt-4o-mini")
        assert client.provider_name == "openai"
        assert client.model_name == "gpt-4o-mini"

    def test_ollama_from_settings(self):
        s = Settings(_env_file=None, llm_provider="ollama", llm_model="llama3.1")
        client = create_llm_client_from_settings(s)
        assert client.provider_name == "ollama"
        assert client.model_name == "llama3.1"

    def test_settings_api_key(self):
        s = Settings(_env_file=None, openai_api_key="sk-abc")
        client = create_llm_client("openai", "gpt-4o", s)
        assert client._api_key == "sk-abc"

    def test_unsupported(self):
        with pytest.raises(UnsupportedProviderError, match="anthropic"):
            create_llm_client("anthropic", "claude")

    def test_register(self):
        register_provider("local", "conceptgraph.llm.adapters.ollama_adapter.OllamaAdapter")
        assert create_llm_client("local", "phi3").provider_name == "ollama"
