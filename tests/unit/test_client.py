"""Tests for the schema-constrained LLM client."""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest

from protocol_assist.core.config import LLMConfig
from protocol_assist.exceptions import (
    ConfigurationError,
    LLMClientError,
    NonRetryableError,
    RetryableError,
    SchemaViolation,
)
from protocol_assist.hooks.usage_tracker import reset_usage
from protocol_assist.inference.protocols import InferenceResult
from protocol_assist.pipeline.payloads import CHUNK_ANALYSIS_SCHEMA, ChunkAnalysis
from protocol_assist.providers.client import LLMClient
from tests.fakes.fake_inference import FakeInferenceBackend
from tests.fakes.fake_payloads import chunk_analysis, suggestion

TOOL = CHUNK_ANALYSIS_SCHEMA.name


async def _request(client: LLMClient) -> ChunkAnalysis:
    return await client.request_structured(
        system_prompt="analyze",
        payload={"section": "Section 1", "content": "text"},
        schema=CHUNK_ANALYSIS_SCHEMA,
    )


class TestRequestStructured:
    @pytest.mark.asyncio
    async def test_returns_validated_payload(self, client: LLMClient, backend: FakeInferenceBackend) -> None:
        backend.script(TOOL, chunk_analysis(suggestions=[suggestion("Clarify dosing", impact="high")]))

        result = await _request(client)

        assert isinstance(result, ChunkAnalysis)
        assert result.section_suggestions[0].message == "Clarify dosing"
        assert result.section_metrics.complexity == 0.5

    @pytest.mark.asyncio
    async def test_declares_one_forced_tool(self, client: LLMClient, backend: FakeInferenceBackend) -> None:
        backend.script(TOOL, chunk_analysis())
        await _request(client)

        call = backend.calls[0]
        assert call["model"] == "test-model"
        assert [t["function"]["name"] for t in call["params"]["tools"]] == [TOOL]
        assert call["params"]["tool_choice"] == {"type": "function", "function": {"name": TOOL}}
        assert call["params"]["api_key"] == "test-key"
        assert "api_base" not in call["params"]

    @pytest.mark.asyncio
    async def test_messages_are_system_then_json_user(self, client: LLMClient, backend: FakeInferenceBackend) -> None:
        backend.script(TOOL, chunk_analysis())
        await _request(client)

        messages = backend.calls[0]["messages"]
        assert [m["role"] for m in messages] == ["system", "user"]
        assert messages[0]["content"] == "analyze"
        assert json.loads(messages[1]["content"]) == {"section": "Section 1", "content": "text"}

    @pytest.mark.asyncio
    async def test_base_url_forwarded(self, backend: FakeInferenceBackend) -> None:
        backend.script(TOOL, chunk_analysis())
        client = LLMClient(LLMConfig(api_key="k", base_url="http://localhost:4000"), backend)
        await _request(client)
        assert backend.calls[0]["params"]["api_base"] == "http://localhost:4000"

    @pytest.mark.asyncio
    async def test_records_usage(self, client: LLMClient, backend: FakeInferenceBackend) -> None:
        usage = reset_usage()
        backend.script(TOOL, chunk_analysis())
        await _request(client)
        assert usage.call_count == 1
        assert usage.prompt_tokens == 100
        assert usage.total_tokens == 120


class TestSchemaViolation:
    @pytest.mark.asyncio
    async def test_no_tool_call(self, client: LLMClient, backend: FakeInferenceBackend) -> None:
        backend.script(TOOL, InferenceResult(content="Here is my analysis in prose."))
        with pytest.raises(SchemaViolation) as exc_info:
            await _request(client)
        assert exc_info.value.schema_name == TOOL

    @pytest.mark.asyncio
    async def test_invalid_json(self, client: LLMClient, backend: FakeInferenceBackend) -> None:
        backend.script(TOOL, InferenceResult(content="", tool_arguments='{"sectionMetrics": '))
        with pytest.raises(SchemaViolation, match="not valid JSON") as exc_info:
            await _request(client)
        assert exc_info.value.raw_arguments == '{"sectionMetrics": '

    @pytest.mark.asyncio
    async def test_shape_mismatch(self, client: LLMClient, backend: FakeInferenceBackend) -> None:
        backend.script(TOOL, {"sectionSuggestions": [{"type": "warning", "impact": "high"}]})
        with pytest.raises(SchemaViolation, match="do not match"):
            await _request(client)

    @pytest.mark.asyncio
    async def test_non_finite_metric(self, client: LLMClient, backend: FakeInferenceBackend) -> None:
        raw = '{"sectionMetrics": {"complexity": NaN, "completeness": 0.5, "efficiency": Infinity}}'
        backend.script(TOOL, InferenceResult(content="", tool_arguments=raw))
        with pytest.raises(SchemaViolation, match="do not match") as exc_info:
            await _request(client)
        assert exc_info.value.raw_arguments == raw


class TestConfiguration:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("key", ["", "  ", "no-key", "changeme"])
    async def test_missing_key_makes_no_call(self, key: str, backend: FakeInferenceBackend) -> None:
        client = LLMClient(LLMConfig(api_key=key), backend)
        with pytest.raises(ConfigurationError, match="API key"):
            await _request(client)
        assert backend.calls == []

    def test_is_configured(self, backend: FakeInferenceBackend) -> None:
        assert not LLMClient(LLMConfig(api_key=""), backend).is_configured
        assert LLMClient(LLMConfig(api_key="sk-live"), backend).is_configured

    def test_config_is_copied(self, backend: FakeInferenceBackend) -> None:
        config = LLMConfig(api_key="sk-one", model="m1")
        client = LLMClient(config, backend)
        config.model = "m2"
        assert client.model == "m1"

    @pytest.mark.asyncio
    async def test_with_api_key_returns_new_client(self, backend: FakeInferenceBackend) -> None:
        backend.script(TOOL, chunk_analysis())
        original = LLMClient(LLMConfig(api_key=""), backend)

        updated = original.with_api_key("sk-new")
        await _request(updated)

        assert updated is not original
        assert not original.is_configured
        assert backend.calls[0]["params"]["api_key"] == "sk-new"


class TestProviderErrors:
    @pytest.mark.asyncio
    async def test_generic_error_is_retryable(self, client: LLMClient, backend: FakeInferenceBackend) -> None:
        backend.script(TOOL, RuntimeError("503 upstream"))
        with pytest.raises(RetryableError, match="503 upstream"):
            await _request(client)

    @pytest.mark.asyncio
    async def test_non_retryable_classification(self, client: LLMClient, backend: FakeInferenceBackend) -> None:
        backend.script(TOOL, RuntimeError("invalid api key"))
        with patch.object(LLMClient, "_is_retryable", return_value=False):
            with pytest.raises(NonRetryableError):
                await _request(client)

    @pytest.mark.asyncio
    async def test_client_errors_pass_through(self, client: LLMClient, backend: FakeInferenceBackend) -> None:
        error = LLMClientError("already wrapped")
        backend.script(TOOL, error)
        with pytest.raises(LLMClientError) as exc_info:
            await _request(client)
        assert exc_info.value is error

    @pytest.mark.asyncio
    async def test_no_retry(self, client: LLMClient, backend: FakeInferenceBackend) -> None:
        backend.script(TOOL, RuntimeError("boom"), chunk_analysis())
        with pytest.raises(RetryableError):
            await _request(client)
        assert len(backend.calls) == 1


class TestComplete:
    @pytest.mark.asyncio
    async def test_free_text(self, client: LLMClient, backend: FakeInferenceBackend) -> None:
        history = [{"role": "user", "content": "hi"}, {"role": "assistant", "content": "hello"}]
        reply = await client.complete("What is a CRF?", system_prompt="be brief", chat_history=history)

        assert reply == "fake response"
        messages = backend.calls[0]["messages"]
        assert [m["role"] for m in messages] == ["system", "user", "assistant", "user"]
        assert messages[-1]["content"] == "What is a CRF?"
        assert "tools" not in backend.calls[0]["params"]
