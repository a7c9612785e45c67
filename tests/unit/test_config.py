"""Tests for settings and startup validation."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from protocol_assist.core.config import AnalysisConfig, AppSettings, GenerationConfig, LLMConfig
from protocol_assist.core.startup_checks import check_api_key, validate_settings
from protocol_assist.exceptions import ConfigurationError


class TestEnvironment:
    def test_llm_env_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PROTOCOL_LLM_MODEL", "anthropic/claude-3-5-sonnet")
        monkeypatch.setenv("PROTOCOL_LLM_API_KEY", "sk-env")
        config = LLMConfig()
        assert config.model == "anthropic/claude-3-5-sonnet"
        assert config.api_key == "sk-env"

    def test_analysis_env_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PROTOCOL_ANALYSIS_BATCH_SIZE", "5")
        monkeypatch.setenv("PROTOCOL_ANALYSIS_METRIC_FALLBACK", "carry_forward")
        config = AnalysisConfig()
        assert config.batch_size == 5
        assert config.metric_fallback == "carry_forward"

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for var in ("PROTOCOL_ANALYSIS_CHUNK_SIZE", "PROTOCOL_ANALYSIS_BATCH_SIZE", "PROTOCOL_GENERATION_STRICT_VALIDATION"):
            monkeypatch.delenv(var, raising=False)
        analysis = AnalysisConfig()
        assert analysis.chunk_size == 4000
        assert analysis.batch_size == 3
        assert analysis.similarity_threshold == 0.7
        assert analysis.metric_fallback == "fixed"
        assert GenerationConfig().strict_validation is False

    def test_rejects_invalid_batch_size(self) -> None:
        with pytest.raises(ValueError):
            AnalysisConfig(batch_size=0)


class TestApiKeyCheck:
    @pytest.mark.parametrize("key", ["", "no-key", "changeme", "your-api-key", "   "])
    def test_rejects_placeholder(self, key: str) -> None:
        with pytest.raises(ConfigurationError, match="PROTOCOL_LLM_API_KEY"):
            check_api_key(LLMConfig(api_key=key))

    def test_accepts_real_key(self) -> None:
        check_api_key(LLMConfig(api_key="sk-real-key-here"))  # Should not raise


class TestValidateSettings:
    def test_rejects_missing_key(self) -> None:
        with pytest.raises(ConfigurationError):
            validate_settings(AppSettings(llm=LLMConfig(api_key="")))

    def test_warns_tiny_character_chunks(self) -> None:
        settings = AppSettings(llm=LLMConfig(api_key="sk"), analysis=AnalysisConfig(chunk_size=50))
        with patch("protocol_assist.core.startup_checks.log") as mock_log:
            validate_settings(settings)
            mock_log.warning.assert_called_once()

    def test_token_chunks_not_warned(self) -> None:
        settings = AppSettings(llm=LLMConfig(api_key="sk"), analysis=AnalysisConfig(chunk_size=50, chunk_unit="tokens"))
        with patch("protocol_assist.core.startup_checks.log") as mock_log:
            validate_settings(settings)
            mock_log.warning.assert_not_called()
