"""Nested pydantic-settings configuration for the application.

Each sub-config reads its own ``PROTOCOL_<GROUP>_*`` environment variables::

    export PROTOCOL_LLM_API_KEY=sk-...
    export PROTOCOL_LLM_MODEL=gpt-4o
    export PROTOCOL_ANALYSIS_BATCH_SIZE=3
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class LLMConfig(BaseSettings):
    """LLM backend configuration.

    Env vars use ``PROTOCOL_LLM_`` prefix. ``model`` accepts LiteLLM
    provider prefixes (``openai/``, ``anthropic/``, ``azure/``...).
    """

    model_config = {"env_prefix": "PROTOCOL_LLM_"}

    model: str = "gpt-4o"
    api_key: str = ""
    base_url: str = ""
    temperature: float = 0.2
    timeout: float = 120.0


class AnalysisConfig(BaseSettings):
    """Protocol analysis pipeline configuration.

    Env vars use ``PROTOCOL_ANALYSIS_`` prefix.
    """

    model_config = {"env_prefix": "PROTOCOL_ANALYSIS_"}

    chunk_size: int = Field(default=4000, gt=0)
    chunk_unit: Literal["chars", "tokens"] = "chars"
    batch_size: int = Field(default=3, ge=1)
    similarity_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    metric_fallback: Literal["fixed", "random", "carry_forward"] = "fixed"
    fallback_seed: int | None = None


class GenerationConfig(BaseSettings):
    """Final document generation configuration.

    Env vars use ``PROTOCOL_GENERATION_`` prefix. When ``strict_validation``
    is enabled a failed cross-validation raises instead of being reported.
    """

    model_config = {"env_prefix": "PROTOCOL_GENERATION_"}

    strict_validation: bool = False


class TokenizerConfig(BaseSettings):
    """Tokenizer configuration (used when ``analysis.chunk_unit`` is ``tokens``).

    Env vars use ``PROTOCOL_TOKENIZER_`` prefix.
    """

    model_config = {"env_prefix": "PROTOCOL_TOKENIZER_"}

    method: Literal["approximate", "tiktoken"] = "approximate"
    model: str = "gpt-4o"
    char_to_token_ratio: int = 4
    fallback_encoding: str = "cl100k_base"


class ObservabilityConfig(BaseSettings):
    """Observability configuration.

    Env vars use ``PROTOCOL_OBSERVABILITY_`` prefix.
    """

    model_config = {"env_prefix": "PROTOCOL_OBSERVABILITY_"}

    service_name: str = "protocol-assist"
    log_level: str = "INFO"


class APIConfig(BaseSettings):
    """HTTP API metadata.

    Env vars use ``PROTOCOL_API_`` prefix.
    """

    model_config = {"env_prefix": "PROTOCOL_API_"}

    title: str = "Protocol Assist"
    description: str = "Protocol analysis and document generation for clinical-trial EDC"


class AppSettings(BaseSettings):
    """Top-level application settings aggregating all sub-configs."""

    llm: LLMConfig = LLMConfig()
    analysis: AnalysisConfig = AnalysisConfig()
    generation: GenerationConfig = GenerationConfig()
    tokenizer: TokenizerConfig = TokenizerConfig()
    observability: ObservabilityConfig = ObservabilityConfig()
