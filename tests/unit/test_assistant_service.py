"""Tests for the clinical-research assistant."""

from __future__ import annotations

import pytest

from protocol_assist.models import AnalysisResult, StudyDetails, StudySchedule, ScheduleVisit, Suggestion
from protocol_assist.pipeline.payloads import CRF_SUGGESTION_SCHEMA
from protocol_assist.prompts import get_prompt
from protocol_assist.providers.client import LLMClient
from protocol_assist.services.assistant_service import AssistantService
from tests.fakes.fake_inference import FakeInferenceBackend


class TestChat:
    @pytest.mark.asyncio
    async def test_reply_with_history(self, client: LLMClient, backend: FakeInferenceBackend) -> None:
        history = [{"role": "user", "content": "What is EDC?"}, {"role": "assistant", "content": "Electronic data capture."}]

        reply = await AssistantService(client).send_chat_message("And a CRF?", history)

        assert reply == "fake response"
        messages = backend.calls[0]["messages"]
        assert messages[0]["content"] == get_prompt("assistant", "CHAT_SYSTEM_PROMPT")
        assert messages[1:3] == history
        assert messages[-1] == {"role": "user", "content": "And a CRF?"}

    @pytest.mark.asyncio
    async def test_empty_reply_falls_back(self, llm_config) -> None:
        backend = FakeInferenceBackend(default_content="  ")
        reply = await AssistantService(LLMClient(llm_config, backend)).send_chat_message("hello")
        assert reply == get_prompt("assistant", "CHAT_FALLBACK_REPLY")


class TestSuggestCRFs:
    @pytest.mark.asyncio
    async def test_returns_forms(self, client: LLMClient, backend: FakeInferenceBackend) -> None:
        backend.script(
            CRF_SUGGESTION_SCHEMA.name,
            {
                "forms": [
                    {
                        "id": "crf-ae",
                        "name": "Adverse Events",
                        "standardsCompliance": ["CDASH"],
                        "sections": [
                            {
                                "title": "Event",
                                "fields": [
                                    {"label": "AE term", "type": "text", "required": True, "codingStandard": "MedDRA"},
                                ],
                            }
                        ],
                    }
                ]
            },
        )
        analysis = AnalysisResult(
            suggestions=[Suggestion(id="s1", message="Add AE monitoring", category="safety")],
            study_schedule=StudySchedule(visits=[ScheduleVisit(name="Screening", window="-14d")]),
        )

        forms = await AssistantService(client).suggest_crfs(analysis, StudyDetails(phase="III"))

        assert [f.name for f in forms] == ["Adverse Events"]
        assert forms[0].sections[0].fields[0].coding_standard == "MedDRA"
        payload = backend.calls[0]["payload"]
        assert payload["studyInfo"] == {"phase": "III"}
        assert payload["schedule"]["visits"][0]["name"] == "Screening"
        assert payload["suggestions"][0]["category"] == "safety"
