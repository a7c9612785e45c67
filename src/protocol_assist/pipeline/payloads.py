"""Typed structured-output payloads and the schemas declared for them.

Each LLM call site has its own response model. Tool-call arguments are
validated into these models by :class:`~protocol_assist.providers.client.LLMClient`
so nothing downstream handles loosely-typed dicts.
"""

from __future__ import annotations

from typing import Optional

from pydantic import ConfigDict, Field, field_validator

from protocol_assist.models import (
    CamelModel,
    CRFSuggestion,
    OptimizationNote,
    ValidationIssue,
)
from protocol_assist.providers.client import OutputSchema

# ── Chunk analysis ───────────────────────────────────────────────────


class RawSectionMetrics(CamelModel):
    """Metrics as reported by the model; any of them may be missing."""

    model_config = ConfigDict(allow_inf_nan=False)

    complexity: Optional[float] = None
    completeness: Optional[float] = None
    efficiency: Optional[float] = None


class RawSuggestion(CamelModel):
    type: str = "improvement"
    message: str
    impact: str = "medium"
    recommendation: str = ""


class ScheduleElement(CamelModel):
    visit_name: str
    window: str = ""
    procedures: list[str] = Field(default_factory=list)

    @field_validator("window", mode="before")
    @classmethod
    def _window_as_text(cls, value: object) -> object:
        # Models sometimes answer a bare day offset (7) instead of "+7d"
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(int(value))
        return value


class ChunkAnalysis(CamelModel):
    """Per-chunk analysis output."""

    section_metrics: RawSectionMetrics = Field(default_factory=RawSectionMetrics)
    section_suggestions: list[RawSuggestion] = Field(default_factory=list)
    schedule_elements: list[ScheduleElement] = Field(default_factory=list)


_METRIC_PROPERTY = {"type": "number", "minimum": 0, "maximum": 1}

CHUNK_ANALYSIS_SCHEMA: OutputSchema[ChunkAnalysis] = OutputSchema(
    name="analyze_protocol_section",
    description="Analyzes a section of clinical trial protocol",
    parameters={
        "type": "object",
        "properties": {
            "sectionMetrics": {
                "type": "object",
                "properties": {
                    "complexity": _METRIC_PROPERTY,
                    "completeness": _METRIC_PROPERTY,
                    "efficiency": _METRIC_PROPERTY,
                },
            },
            "sectionSuggestions": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "type": {"type": "string", "enum": ["improvement", "warning", "validation"]},
                        "message": {"type": "string"},
                        "impact": {"type": "string", "enum": ["high", "medium", "low"]},
                        "recommendation": {"type": "string"},
                    },
                    "required": ["type", "message", "impact", "recommendation"],
                },
            },
            "scheduleElements": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "visitName": {"type": "string"},
                        "window": {"type": "string"},
                        "procedures": {"type": "array", "items": {"type": "string"}},
                    },
                    "required": ["visitName", "window", "procedures"],
                },
            },
        },
        "required": ["sectionMetrics", "sectionSuggestions", "scheduleElements"],
    },
    model=ChunkAnalysis,
)


# ── Stage A: enhanced protocol ───────────────────────────────────────


class ProtocolMetadata(CamelModel):
    version: str = "1.0"
    last_updated: str = ""
    key_changes: list[str] = Field(default_factory=list)


class ProtocolSubsection(CamelModel):
    title: str
    content: str = ""


class ProtocolSectionDraft(CamelModel):
    title: str
    content: str = ""
    subsections: list[ProtocolSubsection] = Field(default_factory=list)


class EnhancedProtocol(CamelModel):
    metadata: ProtocolMetadata = Field(default_factory=ProtocolMetadata)
    sections: list[ProtocolSectionDraft]


_TITLED_CONTENT = {
    "title": {"type": "string"},
    "content": {"type": "string"},
}

ENHANCED_PROTOCOL_SCHEMA: OutputSchema[EnhancedProtocol] = OutputSchema(
    name="generate_enhanced_protocol",
    description="Generates the revised protocol as ordered, numbered sections",
    parameters={
        "type": "object",
        "properties": {
            "metadata": {
                "type": "object",
                "properties": {
                    "version": {"type": "string"},
                    "lastUpdated": {"type": "string"},
                    "keyChanges": {"type": "array", "items": {"type": "string"}},
                },
                "required": ["version", "keyChanges"],
            },
            "sections": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        **_TITLED_CONTENT,
                        "subsections": {
                            "type": "array",
                            "items": {
                                "type": "object",
                                "properties": _TITLED_CONTENT,
                                "required": ["title", "content"],
                            },
                        },
                    },
                    "required": ["title", "content"],
                },
            },
        },
        "required": ["metadata", "sections"],
    },
    model=EnhancedProtocol,
)


# ── Stage B: optimized schedule ──────────────────────────────────────


class OptimizedProcedure(CamelModel):
    name: str
    required: bool = True
    notes: Optional[str] = None
    rationale: Optional[str] = None


class OptimizedVisit(CamelModel):
    name: str
    window: str = ""
    rationale: str
    procedures: list[OptimizedProcedure] = Field(default_factory=list)


class OptimizedSchedule(CamelModel):
    visits: list[OptimizedVisit]
    optimization_notes: list[OptimizationNote] = Field(default_factory=list)


OPTIMIZED_SCHEDULE_SCHEMA: OutputSchema[OptimizedSchedule] = OutputSchema(
    name="generate_optimized_schedule",
    description="Generates an optimized study schedule",
    parameters={
        "type": "object",
        "properties": {
            "visits": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "name": {"type": "string"},
                        "window": {"type": "string"},
                        "rationale": {"type": "string"},
                        "procedures": {
                            "type": "array",
                            "items": {
                                "type": "object",
                                "properties": {
                                    "name": {"type": "string"},
                                    "required": {"type": "boolean"},
                                    "notes": {"type": "string"},
                                    "rationale": {"type": "string"},
                                },
                                "required": ["name", "required"],
                            },
                        },
                    },
                    "required": ["name", "window", "rationale", "procedures"],
                },
            },
            "optimizationNotes": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "category": {"type": "string"},
                        "note": {"type": "string"},
                        "impact": {"type": "string"},
                    },
                    "required": ["category", "note", "impact"],
                },
            },
        },
        "required": ["visits", "optimizationNotes"],
    },
    model=OptimizedSchedule,
)


# ── Stage C: cross-validation ────────────────────────────────────────


class CrossValidation(CamelModel):
    is_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)
    protocol_updates: list[str] = Field(default_factory=list)
    schedule_updates: list[str] = Field(default_factory=list)


CROSS_VALIDATION_SCHEMA: OutputSchema[CrossValidation] = OutputSchema(
    name="validate_protocol_documents",
    description="Cross-validates the revised protocol against the study schedule",
    parameters={
        "type": "object",
        "properties": {
            "isValid": {"type": "boolean"},
            "issues": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "type": {"type": "string"},
                        "description": {"type": "string"},
                        "recommendation": {"type": "string"},
                        "severity": {"type": "string", "enum": ["high", "medium", "low"]},
                    },
                    "required": ["type", "description", "recommendation", "severity"],
                },
            },
            "protocolUpdates": {"type": "array", "items": {"type": "string"}},
            "scheduleUpdates": {"type": "array", "items": {"type": "string"}},
        },
        "required": ["isValid", "issues", "protocolUpdates", "scheduleUpdates"],
    },
    model=CrossValidation,
)


# ── Assistant: CRF suggestions ───────────────────────────────────────


class CRFSuggestionList(CamelModel):
    forms: list[CRFSuggestion] = Field(default_factory=list)


CRF_SUGGESTION_SCHEMA: OutputSchema[CRFSuggestionList] = OutputSchema(
    name="suggest_crfs",
    description="Generate detailed CRF suggestions with templates and standards",
    parameters={
        "type": "object",
        "properties": {
            "forms": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "id": {"type": "string"},
                        "name": {"type": "string"},
                        "description": {"type": "string"},
                        "templateId": {"type": "string"},
                        "standardsCompliance": {"type": "array", "items": {"type": "string"}},
                        "sections": {
                            "type": "array",
                            "items": {
                                "type": "object",
                                "properties": {
                                    "id": {"type": "string"},
                                    "title": {"type": "string"},
                                    "description": {"type": "string"},
                                    "fields": {
                                        "type": "array",
                                        "items": {
                                            "type": "object",
                                            "properties": {
                                                "id": {"type": "string"},
                                                "type": {"type": "string"},
                                                "label": {"type": "string"},
                                                "required": {"type": "boolean"},
                                                "codingStandard": {"type": "string"},
                                                "validation": {"type": "array", "items": {"type": "string"}},
                                            },
                                            "required": ["label", "type", "required"],
                                        },
                                    },
                                },
                                "required": ["title", "fields"],
                            },
                        },
                    },
                    "required": ["name", "sections"],
                },
            },
        },
        "required": ["forms"],
    },
    model=CRFSuggestionList,
)
