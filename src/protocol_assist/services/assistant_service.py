"""Clinical-research assistant: free-form chat and CRF suggestions."""

from __future__ import annotations

import logging
from typing import Any

from protocol_assist.models import AnalysisResult, CRFSuggestion, StudyDetails
from protocol_assist.pipeline.payloads import CRF_SUGGESTION_SCHEMA
from protocol_assist.prompts import get_prompt
from protocol_assist.providers.client import LLMClient

log = logging.getLogger(__name__)


class AssistantService:
    def __init__(self, client: LLMClient) -> None:
        self._client = client

    async def send_chat_message(self, content: str, history: list[dict[str, Any]] | None = None) -> str:
        """Answer *content* given the prior conversation *history* (OpenAI message dicts)."""
        reply = await self._client.complete(
            content,
            system_prompt=get_prompt("assistant", "CHAT_SYSTEM_PROMPT"),
            chat_history=history or [],
        )
        if not reply.strip():
            log.warning("Assistant returned an empty reply")
            return get_prompt("assistant", "CHAT_FALLBACK_REPLY")
        return reply

    async def suggest_crfs(
        self,
        analysis: AnalysisResult,
        study_details: StudyDetails | None = None,
    ) -> list[CRFSuggestion]:
        """Suggest the Case Report Forms a study needs, based on its analysis."""
        payload = {
            "studyInfo": (study_details or StudyDetails()).to_context(),
            "schedule": analysis.study_schedule.model_dump(by_alias=True),
            "suggestions": [
                {"message": s.message, "recommendation": s.recommendation, "category": s.category}
                for s in analysis.suggestions
            ],
        }
        result = await self._client.request_structured(
            system_prompt=get_prompt("assistant", "CRF_SUGGESTION_SYSTEM_PROMPT"),
            payload=payload,
            schema=CRF_SUGGESTION_SCHEMA,
        )
        log.info("Suggested %d CRF(s)", len(result.forms))
        return result.forms
