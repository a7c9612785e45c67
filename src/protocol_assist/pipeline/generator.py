"""Final document generation: enhance protocol → optimize schedule → cross-validate.

The stages run strictly in sequence because each consumes the previous
stage's output. A failed cross-validation is always reported on the result;
with ``strict_validation`` it raises instead.
"""

from __future__ import annotations

import logging

from protocol_assist.exceptions import ValidationInconsistency
from protocol_assist.hooks.run_tracker import track_stage
from protocol_assist.models import (
    AnalysisResult,
    FinalDocuments,
    OptimizationNote,
    Procedure,
    ScheduleVisit,
    StudySchedule,
    Suggestion,
    ValidationReport,
)
from protocol_assist.pipeline.formatting import format_protocol
from protocol_assist.pipeline.payloads import (
    CROSS_VALIDATION_SCHEMA,
    ENHANCED_PROTOCOL_SCHEMA,
    OPTIMIZED_SCHEDULE_SCHEMA,
    EnhancedProtocol,
    OptimizedSchedule,
)
from protocol_assist.pipeline.schedule import collapse_duplicate_visits, flatten_procedures
from protocol_assist.prompts import get_prompt
from protocol_assist.providers.client import LLMClient

log = logging.getLogger(__name__)


class DocumentGenerator:
    """Generates the final protocol text and schedule from an analysis."""

    def __init__(self, client: LLMClient, *, strict_validation: bool = False) -> None:
        self._client = client
        self._strict = strict_validation

    async def generate(
        self,
        content: str,
        selected_suggestion_ids: list[str],
        include_schedule: bool,
        analysis: AnalysisResult,
    ) -> FinalDocuments:
        selected = analysis.suggestions_by_id(selected_suggestion_ids)
        missing = set(selected_suggestion_ids) - {s.id for s in selected}
        if missing:
            log.warning("Ignoring %d unknown suggestion id(s): %s", len(missing), sorted(missing))

        with track_stage("enhance_protocol"):
            protocol = await self._enhance_protocol(content, selected_suggestion_ids, selected, analysis)

        schedule = analysis.study_schedule.model_copy(deep=True)
        notes: list[OptimizationNote] = []
        if include_schedule:
            with track_stage("optimize_schedule"):
                schedule, notes = await self._optimize_schedule(protocol, schedule, selected)

        with track_stage("cross_validate"):
            report = await self._cross_validate(protocol, schedule)

        if not report.is_valid:
            if self._strict:
                raise ValidationInconsistency(report)
            log.warning(
                "Cross-validation found %d issue(s); returning documents with the report attached",
                len(report.issues),
            )

        return FinalDocuments(
            protocol=format_protocol(protocol).strip(),
            schedule=schedule,
            optimization_notes=notes,
            validation=report,
        )

    # ── Stage A ──────────────────────────────────────────────────────

    async def _enhance_protocol(
        self,
        content: str,
        selected_ids: list[str],
        selected: list[Suggestion],
        analysis: AnalysisResult,
    ) -> EnhancedProtocol:
        payload = {
            "originalContent": content,
            "selectedSuggestionIds": selected_ids,
            "selectedSuggestions": [s.model_dump(by_alias=True) for s in selected],
            "analysisResults": analysis.model_dump(by_alias=True),
        }
        protocol = await self._client.request_structured(
            system_prompt=get_prompt("generation", "ENHANCE_PROTOCOL_SYSTEM_PROMPT"),
            payload=payload,
            schema=ENHANCED_PROTOCOL_SCHEMA,
        )
        log.info("Enhanced protocol generated with %d section(s)", len(protocol.sections))
        return protocol

    # ── Stage B ──────────────────────────────────────────────────────

    async def _optimize_schedule(
        self,
        protocol: EnhancedProtocol,
        schedule: StudySchedule,
        selected: list[Suggestion],
    ) -> tuple[StudySchedule, list[OptimizationNote]]:
        payload = {
            "protocolSections": [s.model_dump(by_alias=True) for s in protocol.sections],
            "originalSchedule": schedule.model_dump(by_alias=True),
            "selectedSuggestions": [s.model_dump(by_alias=True) for s in selected],
        }
        optimized = await self._client.request_structured(
            system_prompt=get_prompt("generation", "OPTIMIZE_SCHEDULE_SYSTEM_PROMPT"),
            payload=payload,
            schema=OPTIMIZED_SCHEDULE_SCHEMA,
        )
        new_schedule = _to_study_schedule(optimized)
        log.info(
            "Schedule optimized: %d visit(s), %d note(s)",
            len(new_schedule.visits), len(optimized.optimization_notes),
        )
        return new_schedule, list(optimized.optimization_notes)

    # ── Stage C ──────────────────────────────────────────────────────

    async def _cross_validate(
        self,
        protocol: EnhancedProtocol,
        schedule: StudySchedule,
    ) -> ValidationReport:
        payload = {
            "protocolSections": [s.model_dump(by_alias=True) for s in protocol.sections],
            "schedule": schedule.model_dump(by_alias=True),
        }
        validation = await self._client.request_structured(
            system_prompt=get_prompt("generation", "VALIDATE_DOCUMENTS_SYSTEM_PROMPT"),
            payload=payload,
            schema=CROSS_VALIDATION_SCHEMA,
        )
        return ValidationReport(
            is_valid=validation.is_valid,
            issues=validation.issues,
            protocol_updates=validation.protocol_updates,
            schedule_updates=validation.schedule_updates,
        )


def _to_study_schedule(optimized: OptimizedSchedule) -> StudySchedule:
    """Replace the schedule with the model's visits; visit-level procedures are authoritative."""
    visits = [
        ScheduleVisit(
            name=v.name.strip(),
            window=v.window,
            rationale=v.rationale,
            procedures=[
                Procedure(name=p.name.strip(), required=p.required, notes=p.notes, rationale=p.rationale)
                for p in v.procedures
                if p.name.strip()
            ],
        )
        for v in optimized.visits
        if v.name.strip()
    ]
    visits = collapse_duplicate_visits(visits)
    return StudySchedule(visits=visits, procedures=flatten_procedures(visits))
