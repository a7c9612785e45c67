"""Startup validation: fail-fast on critical misconfigurations."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from protocol_assist.exceptions import ConfigurationError

if TYPE_CHECKING:
    from protocol_assist.core.config import AppSettings, LLMConfig

log = logging.getLogger(__name__)

# Values left behind by templates and examples rather than real credentials
_PLACEHOLDER_KEYS = frozenset({"", "no-key", "changeme", "your-api-key"})


def validate_settings(settings: AppSettings) -> None:
    """Validate application settings. Raises ConfigurationError on fatal misconfig."""
    check_api_key(settings.llm)
    _check_chunking(settings)


def check_api_key(config: LLMConfig) -> None:
    """Reject a missing or placeholder API key before any request is attempted."""
    if config.api_key.strip() in _PLACEHOLDER_KEYS:
        raise ConfigurationError(
            "LLM API key not configured. Set PROTOCOL_LLM_API_KEY or pass an API key explicitly."
        )


def _check_chunking(settings: AppSettings) -> None:
    """Warn when the chunk budget is too small to hold ordinary sentences."""
    if settings.analysis.chunk_unit == "chars" and settings.analysis.chunk_size < 200:
        log.warning(
            "PROTOCOL_ANALYSIS_CHUNK_SIZE=%d characters is very small; most sentences "
            "will become oversized single-sentence chunks.",
            settings.analysis.chunk_size,
        )
