"""Exception hierarchy for protocol-assist."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from protocol_assist.models import ValidationReport
    from protocol_assist.pipeline.batching import ChunkFailure


class ProtocolAssistError(Exception):
    """Base exception for all protocol-assist errors."""


class ConfigurationError(ProtocolAssistError):
    """Missing or invalid configuration (e.g. no API key). Raised before any network call."""


class LLMClientError(ProtocolAssistError):
    """Raised when an LLM provider call fails."""


class RetryableError(LLMClientError):
    """Rate limits, timeouts, 5xx; the caller may retry."""


class NonRetryableError(LLMClientError):
    """Auth errors, bad requests, 4xx (non-429); retrying will not help."""


class SchemaViolation(ProtocolAssistError):
    """The model response did not carry a payload matching the declared schema."""

    def __init__(self, message: str, schema_name: str = "", raw_arguments: str = "") -> None:
        super().__init__(message)
        self.schema_name = schema_name
        self.raw_arguments = raw_arguments


class BatchFailure(ProtocolAssistError):
    """One or more chunk analyses failed; no partial result is returned."""

    def __init__(self, failures: list[ChunkFailure], total_chunks: int) -> None:
        indexes = ", ".join(str(f.chunk.index) for f in failures)
        super().__init__(
            f"Protocol analysis failed for {len(failures)} of {total_chunks} chunk(s) "
            f"(chunk index {indexes}): {failures[0].error}"
        )
        self.failures = failures
        self.total_chunks = total_chunks


class ValidationInconsistency(ProtocolAssistError):
    """Cross-validation reported the generated protocol and schedule as inconsistent."""

    def __init__(self, report: ValidationReport) -> None:
        super().__init__(
            f"Generated documents failed cross-validation with {len(report.issues)} issue(s)"
        )
        self.report = report


class TokenizerError(ProtocolAssistError):
    """Raised when token counting encounters an error."""


__all__ = [
    "ProtocolAssistError",
    "ConfigurationError",
    "LLMClientError",
    "RetryableError",
    "NonRetryableError",
    "SchemaViolation",
    "BatchFailure",
    "ValidationInconsistency",
    "TokenizerError",
]
