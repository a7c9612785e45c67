"""Pydantic data models for protocol-assist.

Models serialise with camelCase aliases (``model_dump(by_alias=True)``) so
JSON handed back to the console keeps its established wire shape, while
Python code uses snake_case attributes.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model accepting both snake_case names and camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Enums ────────────────────────────────────────────────────────────


class SuggestionType(str, Enum):
    """Suggestion types the analysis prompt asks for.

    ``Suggestion.type`` keeps whatever the model returned (lower-cased), so
    values outside this enum (``formatting``, ``terminology``...) survive and
    drive ``autoFixAvailable``.
    """

    IMPROVEMENT = "improvement"
    WARNING = "warning"
    VALIDATION = "validation"


class Impact(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


IMPACT_RANK: dict[str, int] = {Impact.HIGH.value: 0, Impact.MEDIUM.value: 1, Impact.LOW.value: 2}


# ── Study context ────────────────────────────────────────────────────


class StudyDetails(CamelModel):
    """Study context forwarded to every chunk analysis.

    All fields are optional; unknown keys supplied by the caller are kept
    and serialised along with the known ones.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    title: Optional[str] = None
    phase: Optional[str] = None
    sponsor: Optional[str] = None
    indication: Optional[str] = None
    study_type: Optional[str] = None
    population: Optional[str] = None
    estimated_duration: Optional[str] = None
    sample_size: Optional[int] = None

    def to_context(self) -> dict[str, Any]:
        """Serialisable context with unset fields dropped."""
        return self.model_dump(by_alias=True, exclude_none=True)


# ── Chunking ─────────────────────────────────────────────────────────


class ProtocolChunk(BaseModel):
    """A contiguous, sentence-aligned slice of the source protocol."""

    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=0)
    text: str
    start: int = Field(ge=0)
    end: int = Field(ge=0)

    @property
    def name(self) -> str:
        """Section name used to attribute metrics and suggestions."""
        return f"Section {self.index + 1}"


# ── Analysis result ──────────────────────────────────────────────────


class SectionMetrics(CamelModel):
    """Bounded quality scores for one section (or the whole protocol)."""

    complexity: float = Field(default=0.0, ge=0.0, le=1.0)
    completeness: float = Field(default=0.0, ge=0.0, le=1.0)
    efficiency: float = Field(default=0.0, ge=0.0, le=1.0)


METRIC_NAMES: tuple[str, ...] = ("complexity", "completeness", "efficiency")


class Suggestion(CamelModel):
    """A deduplicated, categorised recommendation about the protocol."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, use_enum_values=True, validate_default=True
    )

    id: str
    type: str = SuggestionType.IMPROVEMENT.value
    message: str
    impact: Impact = Impact.MEDIUM
    recommendation: str = ""
    auto_fix_available: bool = False
    section: str = ""
    category: str = "general"


class Procedure(CamelModel):
    """A named assessment performed at a visit."""

    name: str
    required: bool = True
    notes: Optional[str] = None
    rationale: Optional[str] = None


class ScheduleVisit(CamelModel):
    """A named study timepoint with its window and procedures."""

    name: str
    window: str = ""
    procedures: list[Procedure] = Field(default_factory=list)
    rationale: Optional[str] = None


class StudySchedule(CamelModel):
    """Visits plus the flattened, sorted set of procedure names."""

    visits: list[ScheduleVisit] = Field(default_factory=list)
    procedures: list[str] = Field(default_factory=list)


class AnalysisResult(CamelModel):
    """Aggregate analysis of a whole protocol document."""

    metrics: SectionMetrics = Field(default_factory=SectionMetrics)
    suggestions: list[Suggestion] = Field(default_factory=list)
    study_schedule: StudySchedule = Field(default_factory=StudySchedule)
    section_metrics: dict[str, SectionMetrics] = Field(default_factory=dict)
    chunk_count: int = 0

    def suggestions_by_id(self, ids: list[str]) -> list[Suggestion]:
        """Return the suggestions whose id is in *ids*, in result order."""
        wanted = set(ids)
        return [s for s in self.suggestions if s.id in wanted]


# ── Final documents ──────────────────────────────────────────────────


class OptimizationNote(CamelModel):
    """A note explaining one schedule optimization."""

    category: str = ""
    note: str
    impact: str = ""


class ValidationIssue(CamelModel):
    """An inconsistency found while cross-validating protocol and schedule."""

    type: str = ""
    description: str
    recommendation: str = ""
    severity: str = ""


class ValidationReport(CamelModel):
    """Outcome of the cross-validation stage."""

    is_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)
    protocol_updates: list[str] = Field(default_factory=list)
    schedule_updates: list[str] = Field(default_factory=list)


class FinalDocuments(CamelModel):
    """Generated protocol text and (possibly optimised) schedule."""

    protocol: str
    schedule: StudySchedule
    optimization_notes: list[OptimizationNote] = Field(default_factory=list)
    validation: Optional[ValidationReport] = None


# ── CRF suggestions ──────────────────────────────────────────────────


class CRFField(CamelModel):
    id: str = ""
    type: str = "text"
    label: str
    required: bool = False
    coding_standard: Optional[str] = None
    validation: list[str] = Field(default_factory=list)


class CRFSection(CamelModel):
    id: str = ""
    title: str
    description: str = ""
    fields: list[CRFField] = Field(default_factory=list)


class CRFSuggestion(CamelModel):
    """A suggested Case Report Form derived from the protocol analysis."""

    id: str = ""
    name: str
    description: str = ""
    template_id: Optional[str] = None
    standards_compliance: list[str] = Field(default_factory=list)
    sections: list[CRFSection] = Field(default_factory=list)


# ── Run analytics ────────────────────────────────────────────────────


class StageMetrics(BaseModel):
    """Timing and counters for one pipeline stage."""

    stage: str
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    duration_ms: float = 0.0
    success_count: int = 0
    failure_count: int = 0


class RunAnalytics(BaseModel):
    """Per-run analytics collected by ``hooks.run_tracker``."""

    run_id: str
    operation: str = ""
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    ended_at: Optional[datetime] = None
    total_duration_ms: float = 0.0
    status: str = "running"
    stages: list[StageMetrics] = Field(default_factory=list)

    def finalize(self, status: str = "completed") -> None:
        self.ended_at = datetime.now(timezone.utc)
        self.total_duration_ms = (self.ended_at - self.started_at).total_seconds() * 1000
        self.status = status
