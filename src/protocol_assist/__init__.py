"""protocol-assist: LLM-driven clinical-trial protocol analysis and document generation.

Public API::

    from protocol_assist import (
        AppSettings, LLMClient,
        ProtocolAnalysisService, AssistantService,
        AnalysisResult, FinalDocuments, StudyDetails, Suggestion,
    )
"""

from __future__ import annotations

from protocol_assist.core.config import AppSettings
from protocol_assist.exceptions import (
    BatchFailure,
    ConfigurationError,
    LLMClientError,
    ProtocolAssistError,
    SchemaViolation,
    ValidationInconsistency,
)
from protocol_assist.models import (
    AnalysisResult,
    FinalDocuments,
    SectionMetrics,
    StudyDetails,
    StudySchedule,
    Suggestion,
    ValidationReport,
)
from protocol_assist.providers.client import LLMClient
from protocol_assist.services import (
    AssistantService,
    ProtocolAnalysisService,
    analyze_protocol,
    generate_final_documents,
)

__all__ = [
    "AppSettings",
    "LLMClient",
    "ProtocolAnalysisService",
    "AssistantService",
    "analyze_protocol",
    "generate_final_documents",
    "AnalysisResult",
    "FinalDocuments",
    "SectionMetrics",
    "StudyDetails",
    "StudySchedule",
    "Suggestion",
    "ValidationReport",
    "ProtocolAssistError",
    "ConfigurationError",
    "LLMClientError",
    "SchemaViolation",
    "BatchFailure",
    "ValidationInconsistency",
]
