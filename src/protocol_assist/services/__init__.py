"""Service layer: pipeline facade and assistant."""

from __future__ import annotations

from protocol_assist.services.assistant_service import AssistantService
from protocol_assist.services.protocol_service import (
    ProtocolAnalysisService,
    analyze_protocol,
    generate_final_documents,
)

__all__ = [
    "AssistantService",
    "ProtocolAnalysisService",
    "analyze_protocol",
    "generate_final_documents",
]
