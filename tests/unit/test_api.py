"""Tests for the HTTP API."""

from __future__ import annotations

from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from protocol_assist.api.app import create_app
from protocol_assist.core.config import AppSettings, GenerationConfig, LLMConfig
from protocol_assist.inference.protocols import InferenceResult
from protocol_assist.pipeline.payloads import (
    CHUNK_ANALYSIS_SCHEMA,
    CROSS_VALIDATION_SCHEMA,
    CRF_SUGGESTION_SCHEMA,
    ENHANCED_PROTOCOL_SCHEMA,
)
from tests.fakes.fake_inference import FakeInferenceBackend
from tests.fakes.fake_payloads import chunk_analysis, cross_validation, enhanced_protocol, suggestion, visit


@pytest.fixture
def http(settings: AppSettings, backend: FakeInferenceBackend) -> Iterator[TestClient]:
    with TestClient(create_app(settings, backend)) as test_client:
        yield test_client


class TestHealth:
    def test_health(self, http: TestClient) -> None:
        assert http.get("/health").json() == {"status": "ok"}

    def test_ready(self, http: TestClient) -> None:
        assert http.get("/ready").json() == {"status": "ready", "model": "test-model"}

    def test_ready_without_key(self, backend: FakeInferenceBackend) -> None:
        with TestClient(create_app(AppSettings(llm=LLMConfig(api_key="")), backend)) as test_client:
            assert test_client.get("/ready").json()["status"] == "unconfigured"


class TestProtocolRoutes:
    def test_analyze(self, http: TestClient, backend: FakeInferenceBackend) -> None:
        backend.script(
            CHUNK_ANALYSIS_SCHEMA.name,
            chunk_analysis(suggestions=[suggestion("Clarify dosing", impact="high")], schedule=[visit("Day 1", "0", "ECG")]),
        )

        response = http.post(
            "/api/protocol/analyze",
            json={"content": "Participants receive drug X daily.", "studyDetails": {"phase": "II"}},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["suggestions"][0]["message"] == "Clarify dosing"
        assert body["suggestions"][0]["autoFixAvailable"] is False
        assert body["studySchedule"]["procedures"] == ["ECG"]
        assert set(body["metrics"]) == {"complexity", "completeness", "efficiency"}

    def test_analyze_rejects_empty_content(self, http: TestClient) -> None:
        assert http.post("/api/protocol/analyze", json={"content": ""}).status_code == 422

    def test_missing_key_is_503(self, backend: FakeInferenceBackend) -> None:
        with TestClient(create_app(AppSettings(llm=LLMConfig(api_key="")), backend)) as test_client:
            response = test_client.post("/api/protocol/analyze", json={"content": "Some protocol."})
        assert response.status_code == 503
        assert response.json()["type"] == "configuration_error"
        assert backend.calls == []

    def test_chunk_failure_is_502(self, http: TestClient, backend: FakeInferenceBackend) -> None:
        backend.script(CHUNK_ANALYSIS_SCHEMA.name, InferenceResult(content="no tool call"))
        response = http.post("/api/protocol/analyze", json={"content": "Some protocol."})
        assert response.status_code == 502
        body = response.json()
        assert body["type"] == "batch_failure"
        assert body["failed_chunks"] == [0]

    def test_documents(self, http: TestClient, backend: FakeInferenceBackend) -> None:
        backend.script(ENHANCED_PROTOCOL_SCHEMA.name, enhanced_protocol())
        backend.script(CROSS_VALIDATION_SCHEMA.name, cross_validation(True))

        response = http.post(
            "/api/protocol/documents",
            json={
                "content": "Original protocol.",
                "selectedSuggestionIds": [],
                "includeSchedule": False,
                "analysisResults": {"chunkCount": 1},
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["protocol"].startswith("Version: 2.0")
        assert body["validation"]["isValid"] is True

    def test_strict_validation_is_422(self, settings: AppSettings, backend: FakeInferenceBackend) -> None:
        settings = AppSettings(llm=settings.llm, generation=GenerationConfig(strict_validation=True))
        backend.script(ENHANCED_PROTOCOL_SCHEMA.name, enhanced_protocol())
        backend.script(CROSS_VALIDATION_SCHEMA.name, cross_validation(False, [{"description": "Mismatch"}]))

        with TestClient(create_app(settings, backend)) as test_client:
            response = test_client.post(
                "/api/protocol/documents",
                json={"content": "Original.", "includeSchedule": False, "analysisResults": {}},
            )

        assert response.status_code == 422
        assert response.json()["validation"]["issues"][0]["description"] == "Mismatch"


class TestAssistantRoutes:
    def test_chat(self, http: TestClient) -> None:
        response = http.post(
            "/api/assistant/chat",
            json={"content": "What is a CRF?", "history": [{"role": "user", "content": "hi"}]},
        )
        assert response.status_code == 200
        assert response.json() == {"reply": "fake response"}

    def test_crfs(self, http: TestClient, backend: FakeInferenceBackend) -> None:
        backend.script(CRF_SUGGESTION_SCHEMA.name, {"forms": [{"name": "Demographics", "sections": []}]})
        response = http.post("/api/assistant/crfs", json={"analysisResults": {}})
        assert response.status_code == 200
        assert response.json()["forms"][0]["name"] == "Demographics"
