"""LLM provider access: structured request client and token counting."""

from __future__ import annotations

from protocol_assist.providers.client import LLMClient, OutputSchema
from protocol_assist.providers.tokenizer import TokenCounter

__all__ = ["LLMClient", "OutputSchema", "TokenCounter"]
