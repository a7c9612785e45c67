"""Shared fixtures for protocol-assist tests."""

from __future__ import annotations

import pytest

from protocol_assist.core.config import AnalysisConfig, AppSettings, LLMConfig
from protocol_assist.hooks.usage_tracker import reset_usage
from protocol_assist.prompts import reset as reset_prompts
from protocol_assist.providers.client import LLMClient
from tests.fakes.fake_inference import FakeInferenceBackend


@pytest.fixture(autouse=True)
def _isolate_state() -> None:  # type: ignore[misc]
    """Fresh prompt registry and usage tracker for every test."""
    reset_prompts()
    reset_usage()
    yield  # type: ignore[misc]
    reset_prompts()


@pytest.fixture
def llm_config() -> LLMConfig:
    return LLMConfig(model="test-model", api_key="test-key", base_url="", temperature=0.0)


@pytest.fixture
def settings(llm_config: LLMConfig) -> AppSettings:
    """Default test settings (fixed metric fallback, small chunks, no real LLM)."""
    return AppSettings(
        llm=llm_config,
        analysis=AnalysisConfig(chunk_size=120, batch_size=3, metric_fallback="fixed"),
    )


@pytest.fixture
def backend() -> FakeInferenceBackend:
    return FakeInferenceBackend()


@pytest.fixture
def client(llm_config: LLMConfig, backend: FakeInferenceBackend) -> LLMClient:
    return LLMClient(llm_config, backend)


@pytest.fixture
def sample_protocol() -> str:
    """Short synthetic protocol spanning several 120-character chunks."""
    return (
        "This is a randomized, double-blind Phase II study of drug X in adults with asthma. "
        "Participants attend a screening visit within 14 days before randomization. "
        "Informed consent and eligibility are confirmed at screening. "
        "Vital signs are recorded at every visit. "
        "The week 4 visit occurs 28 days after randomization with a window of three days. "
        "Adverse events and concomitant medications are reviewed at each visit."
    )

