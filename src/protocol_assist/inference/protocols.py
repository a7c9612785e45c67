"""Inference backend protocol: the network seam every LLM call goes through."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, runtime_checkable


@dataclass
class InferenceResult:
    """Result from a single inference call.

    ``tool_arguments`` holds the raw JSON string of the first tool (function)
    call in the response, or ``None`` when the model made no tool call.
    """

    content: str
    finish_reason: str = "finished"
    usage: dict[str, int] = field(default_factory=dict)
    tool_arguments: Optional[str] = None


@runtime_checkable
class IInferenceBackend(Protocol):
    """Protocol for pluggable inference backends.

    Tests substitute a scripted backend; production uses
    :class:`~protocol_assist.inference.realtime.RealTimeBackend`.
    """

    async def infer(
        self,
        messages: list[dict[str, Any]],
        model: str,
        **params: Any,
    ) -> InferenceResult:
        """Run a single inference call.

        Args:
            messages: Chat messages in OpenAI format.
            model: Model identifier (supports LiteLLM prefixes).
            **params: Additional parameters (temperature, tools, tool_choice...).

        Returns:
            InferenceResult with content, tool-call arguments and usage.
        """
        ...
