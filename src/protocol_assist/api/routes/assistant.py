"""Clinical-research assistant endpoints."""

from __future__ import annotations

from typing import Any, Literal

from fastapi import APIRouter, Request
from pydantic import Field

from protocol_assist.models import AnalysisResult, CamelModel, StudyDetails
from protocol_assist.services.assistant_service import AssistantService

router = APIRouter(prefix="/assistant", tags=["assistant"])


class ChatMessage(CamelModel):
    role: Literal["user", "assistant"]
    content: str


class ChatRequest(CamelModel):
    content: str = Field(min_length=1)
    history: list[ChatMessage] = Field(default_factory=list)


class ChatResponse(CamelModel):
    reply: str


class CRFRequest(CamelModel):
    analysis_results: AnalysisResult
    study_details: StudyDetails = Field(default_factory=StudyDetails)


@router.post("/chat", response_model=ChatResponse)
async def chat(request: ChatRequest, req: Request) -> ChatResponse:
    """Send one message to the assistant, with the prior conversation."""
    service = AssistantService(req.app.state.client)
    reply = await service.send_chat_message(
        request.content, [m.model_dump() for m in request.history]
    )
    return ChatResponse(reply=reply)


@router.post("/crfs")
async def suggest_crfs(request: CRFRequest, req: Request) -> dict[str, Any]:
    """Suggest Case Report Forms for an analyzed protocol."""
    service = AssistantService(req.app.state.client)
    forms = await service.suggest_crfs(request.analysis_results, request.study_details)
    return {"forms": [f.model_dump(by_alias=True) for f in forms]}
