"""Folds per-chunk analyses into one AnalysisResult.

For each chunk, in order:

1. **Metrics**: missing values come from the fallback policy, each value is
   clamped to [0, 1], kept as that section's metrics and added to the overall
   score as ``value / total_chunks`` (plain mean, not length-weighted).
2. **Suggestions**: a candidate whose message *or* recommendation word-set
   Jaccard similarity against any accepted suggestion exceeds the threshold
   is dropped; survivors get a fresh id, their section, a keyword category
   and the auto-fix flag.
3. **Schedule**: elements are merged into visits keyed by name.

Accepted suggestions are finally sorted by impact (high, medium, low), stably.
"""

from __future__ import annotations

import logging
import uuid
from typing import Callable, Optional

from protocol_assist.models import (
    IMPACT_RANK,
    METRIC_NAMES,
    AnalysisResult,
    Impact,
    ProtocolChunk,
    SectionMetrics,
    Suggestion,
)
from protocol_assist.pipeline.metrics import FixedFallback, MetricFallbackPolicy, clamp_unit
from protocol_assist.pipeline.payloads import ChunkAnalysis, RawSectionMetrics, RawSuggestion
from protocol_assist.pipeline.schedule import ScheduleMerger
from protocol_assist.pipeline.suggestions import can_auto_fix, categorize, is_near_duplicate

log = logging.getLogger(__name__)

_KNOWN_IMPACTS = frozenset(i.value for i in Impact)


def _new_id() -> str:
    return str(uuid.uuid4())


class ResultAggregator:
    """Builds an :class:`AnalysisResult` from ordered chunk analyses.

    Args:
        fallback_policy: Supplies values for metrics a chunk left out.
        similarity_threshold: Jaccard similarity above which a suggestion
            counts as a duplicate.
        id_factory: Produces suggestion ids; must never repeat.
    """

    def __init__(
        self,
        fallback_policy: MetricFallbackPolicy | None = None,
        *,
        similarity_threshold: float = 0.7,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        self._fallback = fallback_policy or FixedFallback()
        self._threshold = similarity_threshold
        self._new_id = id_factory

    def aggregate(
        self,
        chunks: list[ProtocolChunk],
        analyses: list[ChunkAnalysis],
    ) -> AnalysisResult:
        if len(chunks) != len(analyses):
            raise ValueError(
                f"Got {len(analyses)} analyses for {len(chunks)} chunks"
            )

        total = len(chunks)
        totals = dict.fromkeys(METRIC_NAMES, 0.0)
        last_seen: dict[str, Optional[float]] = dict.fromkeys(METRIC_NAMES)
        section_metrics: dict[str, SectionMetrics] = {}
        accepted: list[Suggestion] = []
        merger = ScheduleMerger()
        dropped = 0

        for chunk, analysis in zip(chunks, analyses):
            metrics = self._resolve_metrics(analysis.section_metrics, last_seen)
            section_metrics[chunk.name] = metrics
            for name in METRIC_NAMES:
                totals[name] += getattr(metrics, name) / total

            for raw in analysis.section_suggestions:
                if self._is_duplicate(raw, accepted):
                    dropped += 1
                    continue
                accepted.append(self._build_suggestion(raw, chunk.name))

            merger.add(analysis.schedule_elements)

        accepted.sort(key=lambda s: IMPACT_RANK[s.impact])
        schedule = merger.build()

        log.info(
            "Aggregated %d chunk(s): %d suggestion(s) kept, %d duplicate(s) dropped, %d visit(s)",
            total, len(accepted), dropped, len(schedule.visits),
        )

        return AnalysisResult(
            metrics=SectionMetrics(**{k: clamp_unit(v) for k, v in totals.items()}),
            suggestions=accepted,
            study_schedule=schedule,
            section_metrics=section_metrics,
            chunk_count=total,
        )

    # ── Steps ────────────────────────────────────────────────────────

    def _resolve_metrics(
        self,
        raw: RawSectionMetrics,
        last_seen: dict[str, Optional[float]],
    ) -> SectionMetrics:
        values: dict[str, float] = {}
        for name in METRIC_NAMES:
            reported = getattr(raw, name)
            if reported is None:
                value = self._fallback.fill(name, last_seen[name])
                log.debug("Metric %s missing, using fallback %.2f", name, value)
            else:
                value = reported
                last_seen[name] = clamp_unit(reported)
            values[name] = clamp_unit(value)
        return SectionMetrics(**values)

    def _is_duplicate(self, raw: RawSuggestion, accepted: list[Suggestion]) -> bool:
        return any(
            is_near_duplicate(
                raw.message,
                raw.recommendation,
                existing.message,
                existing.recommendation,
                self._threshold,
            )
            for existing in accepted
        )

    def _build_suggestion(self, raw: RawSuggestion, section: str) -> Suggestion:
        suggestion_type = raw.type.strip().lower()
        impact = raw.impact.strip().lower()
        if impact not in _KNOWN_IMPACTS:
            impact = Impact.LOW.value
        return Suggestion(
            id=self._new_id(),
            type=suggestion_type,
            message=raw.message,
            impact=impact,
            recommendation=raw.recommendation,
            auto_fix_available=can_auto_fix(suggestion_type),
            section=section,
            category=categorize(raw.message, raw.recommendation),
        )
