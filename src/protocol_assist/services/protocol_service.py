"""Protocol analysis facade: the single entry point for UI collaborators.

Usage::

    client = LLMClient(settings.llm)
    service = ProtocolAnalysisService(client, settings)
    analysis = await service.analyze_protocol(text, {"phase": "II"})
    documents = await service.generate_final_documents(
        text, [analysis.suggestions[0].id], True, analysis
    )
"""

from __future__ import annotations

import logging
from typing import Any

from protocol_assist.core.config import AppSettings
from protocol_assist.hooks.run_tracker import end_run, start_run, track_stage
from protocol_assist.hooks.usage_tracker import get_current_usage
from protocol_assist.models import AnalysisResult, FinalDocuments, StudyDetails
from protocol_assist.pipeline.aggregator import ResultAggregator
from protocol_assist.pipeline.analyzer import ChunkAnalyzer
from protocol_assist.pipeline.batching import BatchScheduler, ChunkFailure, collect_analyses
from protocol_assist.pipeline.chunker import ProtocolChunker
from protocol_assist.pipeline.generator import DocumentGenerator
from protocol_assist.pipeline.metrics import MetricFallbackPolicy, create_fallback_policy
from protocol_assist.providers.client import LLMClient
from protocol_assist.providers.tokenizer import TokenCounter

log = logging.getLogger(__name__)


class ProtocolAnalysisService:
    """Chunk → batched analysis → aggregation, and final document generation.

    Owns no UI state. The client is passed in so callers control credentials
    and tests can inject a fake backend.
    """

    def __init__(
        self,
        client: LLMClient,
        settings: AppSettings | None = None,
        *,
        fallback_policy: MetricFallbackPolicy | None = None,
    ) -> None:
        self._client = client
        self._settings = settings or AppSettings()
        analysis_cfg = self._settings.analysis

        counter = None
        if analysis_cfg.chunk_unit == "tokens":
            counter = TokenCounter.from_config(self._settings.tokenizer)

        self._chunker = ProtocolChunker(analysis_cfg.chunk_size, counter)
        self._scheduler = BatchScheduler(ChunkAnalyzer(client), batch_size=analysis_cfg.batch_size)
        self._aggregator = ResultAggregator(
            fallback_policy or create_fallback_policy(analysis_cfg),
            similarity_threshold=analysis_cfg.similarity_threshold,
        )
        self._generator = DocumentGenerator(
            client, strict_validation=self._settings.generation.strict_validation
        )

    async def analyze_protocol(
        self,
        content: str,
        study_details: StudyDetails | dict[str, Any] | None = None,
    ) -> AnalysisResult:
        """Analyze a protocol document.

        Raises:
            ConfigurationError: No API key; raised before any request.
            BatchFailure: Any chunk analysis failed; no partial result.
        """
        self._client.ensure_configured()
        details = _coerce_study_details(study_details)

        # Bind the usage summary here so concurrent chunk calls share it
        usage = get_current_usage()
        start_run(operation="analyze_protocol")
        status = "failed"
        try:
            with track_stage("chunking") as stage:
                chunks = self._chunker.chunk(content)
                stage.success_count = len(chunks)
            log.info("Analyzing protocol: %d chars in %d chunk(s)", len(content), len(chunks))

            with track_stage("chunk_analysis") as stage:
                outcomes = await self._scheduler.run(chunks, details.to_context())
                stage.failure_count = sum(1 for o in outcomes if isinstance(o, ChunkFailure))
                stage.success_count = len(outcomes) - stage.failure_count
            analyses = collect_analyses(outcomes, len(chunks))

            with track_stage("aggregation"):
                result = self._aggregator.aggregate(chunks, analyses)
            log.info("Protocol analysis used %d LLM call(s), %d token(s)", usage.call_count, usage.total_tokens)
            status = "completed"
            return result
        finally:
            end_run(status)

    async def generate_final_documents(
        self,
        content: str,
        selected_suggestion_ids: list[str],
        include_schedule: bool,
        analysis_results: AnalysisResult,
    ) -> FinalDocuments:
        """Generate the revised protocol and (optionally) optimized schedule.

        Raises:
            ConfigurationError: No API key; raised before any request.
            ValidationInconsistency: Cross-validation failed and strict
                validation is enabled.
        """
        self._client.ensure_configured()

        start_run(operation="generate_final_documents")
        status = "failed"
        try:
            documents = await self._generator.generate(
                content, selected_suggestion_ids, include_schedule, analysis_results
            )
            status = "completed"
            return documents
        finally:
            end_run(status)


def _coerce_study_details(value: StudyDetails | dict[str, Any] | None) -> StudyDetails:
    if value is None:
        return StudyDetails()
    if isinstance(value, StudyDetails):
        return value
    return StudyDetails.model_validate(value)


async def analyze_protocol(
    client: LLMClient,
    content: str,
    study_details: StudyDetails | dict[str, Any] | None = None,
    *,
    settings: AppSettings | None = None,
) -> AnalysisResult:
    """Functional form of :meth:`ProtocolAnalysisService.analyze_protocol`."""
    return await ProtocolAnalysisService(client, settings).analyze_protocol(content, study_details)


async def generate_final_documents(
    client: LLMClient,
    content: str,
    selected_suggestion_ids: list[str],
    include_schedule: bool,
    analysis_results: AnalysisResult,
    *,
    settings: AppSettings | None = None,
) -> FinalDocuments:
    """Functional form of :meth:`ProtocolAnalysisService.generate_final_documents`."""
    return await ProtocolAnalysisService(client, settings).generate_final_documents(
        content, selected_suggestion_ids, include_schedule, analysis_results
    )
