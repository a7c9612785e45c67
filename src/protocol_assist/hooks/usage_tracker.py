"""Token usage tracking: accumulates LLM usage per request context."""

from __future__ import annotations

from contextvars import ContextVar
from dataclasses import dataclass


@dataclass
class UsageSummary:
    """Accumulated token usage for a single request."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    call_count: int = 0

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens

    def record(self, usage: dict[str, int]) -> None:
        self.prompt_tokens += usage.get("prompt_tokens", 0)
        self.completion_tokens += usage.get("completion_tokens", 0)
        self.call_count += 1


_usage: ContextVar[UsageSummary] = ContextVar("protocol_usage")


def get_current_usage() -> UsageSummary:
    """Get the token usage for the current request context."""
    try:
        return _usage.get()
    except LookupError:
        summary = UsageSummary()
        _usage.set(summary)
        return summary


def reset_usage() -> UsageSummary:
    """Reset and return a fresh usage tracker for the current context."""
    summary = UsageSummary()
    _usage.set(summary)
    return summary
