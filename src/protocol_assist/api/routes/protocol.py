"""Protocol analysis and final document generation endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request
from pydantic import Field

from protocol_assist.models import AnalysisResult, CamelModel, FinalDocuments, StudyDetails
from protocol_assist.services.protocol_service import ProtocolAnalysisService

router = APIRouter(prefix="/protocol", tags=["protocol"])


class AnalyzeRequest(CamelModel):
    """Request to analyze a protocol document."""

    content: str = Field(min_length=1)
    study_details: StudyDetails = Field(default_factory=StudyDetails)


class GenerateDocumentsRequest(CamelModel):
    """Request to generate the final protocol and schedule."""

    content: str = Field(min_length=1)
    selected_suggestion_ids: list[str] = Field(default_factory=list)
    include_schedule: bool = True
    analysis_results: AnalysisResult


def _service(req: Request) -> ProtocolAnalysisService:
    return ProtocolAnalysisService(req.app.state.client, req.app.state.settings)


@router.post("/analyze")
async def analyze(request: AnalyzeRequest, req: Request) -> dict[str, Any]:
    """Chunk, analyze and aggregate a protocol document."""
    result = await _service(req).analyze_protocol(request.content, request.study_details)
    return result.model_dump(by_alias=True)


@router.post("/documents")
async def generate_documents(request: GenerateDocumentsRequest, req: Request) -> dict[str, Any]:
    """Generate the revised protocol text and (optionally) an optimized schedule."""
    documents: FinalDocuments = await _service(req).generate_final_documents(
        request.content,
        request.selected_suggestion_ids,
        request.include_schedule,
        request.analysis_results,
    )
    return documents.model_dump(by_alias=True)
