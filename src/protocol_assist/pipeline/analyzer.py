"""Chunk analyzer: one schema-constrained LLM call per protocol chunk."""

from __future__ import annotations

import logging
from typing import Any

from protocol_assist.models import ProtocolChunk
from protocol_assist.pipeline.payloads import CHUNK_ANALYSIS_SCHEMA, ChunkAnalysis
from protocol_assist.prompts import get_prompt
from protocol_assist.providers.client import LLMClient

log = logging.getLogger(__name__)


class ChunkAnalyzer:
    """Analyzes single chunks. Holds no per-call state, so calls may run concurrently."""

    def __init__(self, client: LLMClient) -> None:
        self._client = client

    async def analyze(self, chunk: ProtocolChunk, study_context: dict[str, Any]) -> ChunkAnalysis:
        """Return metrics, suggestions and schedule elements for *chunk*.

        Raises:
            SchemaViolation: The model did not return a valid analysis.
            LLMClientError: The provider call failed.
        """
        payload = {
            "section": chunk.name,
            "studyContext": study_context,
            "content": chunk.text,
        }
        analysis = await self._client.request_structured(
            system_prompt=get_prompt("analysis", "CHUNK_ANALYSIS_SYSTEM_PROMPT"),
            payload=payload,
            schema=CHUNK_ANALYSIS_SCHEMA,
        )
        log.debug(
            "%s analysed: %d suggestion(s), %d schedule element(s)",
            chunk.name,
            len(analysis.section_suggestions),
            len(analysis.schedule_elements),
        )
        return analysis
