"""Core configuration and startup checks."""

from __future__ import annotations

from protocol_assist.core.config import (
    AnalysisConfig,
    APIConfig,
    AppSettings,
    GenerationConfig,
    LLMConfig,
    ObservabilityConfig,
    TokenizerConfig,
)
from protocol_assist.core.startup_checks import check_api_key, validate_settings

__all__ = [
    "APIConfig",
    "AnalysisConfig",
    "AppSettings",
    "GenerationConfig",
    "LLMConfig",
    "ObservabilityConfig",
    "TokenizerConfig",
    "check_api_key",
    "validate_settings",
]
