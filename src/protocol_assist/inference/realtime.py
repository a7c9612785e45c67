"""Real-time inference backend — wraps litellm.acompletion()."""

from __future__ import annotations

import logging
from typing import Any, Optional

from protocol_assist.inference.protocols import InferenceResult

log = logging.getLogger(__name__)


class RealTimeBackend:
    """Real-time inference via ``litellm.acompletion()``.

    Holds no mutable state, so one instance can serve any number of
    concurrent calls.
    """

    async def infer(
        self,
        messages: list[dict[str, Any]],
        model: str,
        **params: Any,
    ) -> InferenceResult:
        """Single inference call via litellm.acompletion()."""
        from litellm import acompletion

        response = await acompletion(model=model, messages=messages, **params)
        choice = response.choices[0]
        content = choice.message.content or ""
        mapped_reason = "max_output_reached" if choice.finish_reason == "length" else "finished"

        usage: dict[str, int] = {}
        if getattr(response, "usage", None):
            usage = {
                "prompt_tokens": getattr(response.usage, "prompt_tokens", 0) or 0,
                "completion_tokens": getattr(response.usage, "completion_tokens", 0) or 0,
                "total_tokens": getattr(response.usage, "total_tokens", 0) or 0,
            }

        return InferenceResult(
            content=content,
            finish_reason=mapped_reason,
            usage=usage,
            tool_arguments=_first_tool_arguments(choice.message),
        )


def _first_tool_arguments(message: Any) -> Optional[str]:
    """Return the arguments of the first tool call (or legacy function call)."""
    tool_calls = getattr(message, "tool_calls", None) or []
    for call in tool_calls:
        function = getattr(call, "function", None)
        arguments = getattr(function, "arguments", None)
        if arguments:
            return arguments

    function_call = getattr(message, "function_call", None)
    if function_call is not None and getattr(function_call, "arguments", None):
        return function_call.arguments
    return None
