"""Prompt management: registry and template modules."""

from __future__ import annotations

from protocol_assist.prompts.registry import get_prompt, override_prompt, reset

__all__ = ["get_prompt", "override_prompt", "reset"]
