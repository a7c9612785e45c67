"""Prompt registry: resolves prompt templates stored in template modules.

Usage::

    prompt = get_prompt("analysis", "CHUNK_ANALYSIS_SYSTEM_PROMPT")

Each module under ``protocol_assist.prompts.templates`` stores its prompts in
a ``_PROMPT_DATA`` dict mapping constant names to template strings.
"""

from __future__ import annotations

import importlib
import logging
from typing import Any

logger = logging.getLogger(__name__)

_TEMPLATE_PACKAGE = "protocol_assist.prompts.templates"

_modules: dict[str, Any] = {}
_overrides: dict[tuple[str, str], str] = {}


def get_prompt(category: str, name: str) -> str:
    """Look up a prompt template by category and name.

    Raises:
        KeyError: If the prompt is not found.
    """
    override = _overrides.get((category, name))
    if override is not None:
        return override

    if category not in _modules:
        module_path = f"{_TEMPLATE_PACKAGE}.{category}"
        try:
            _modules[category] = importlib.import_module(module_path)
        except ModuleNotFoundError as exc:
            raise KeyError(f"Prompt module not found: {module_path}") from exc

    data: dict[str, str] | None = getattr(_modules[category], "_PROMPT_DATA", None)
    if data is not None and name in data:
        return data[name]

    raise KeyError(f"Prompt {name!r} not found in {category}")


def override_prompt(category: str, name: str, template: str) -> None:
    """Replace a prompt for the rest of the process (deployment-specific wording)."""
    get_prompt(category, name)  # fail fast on unknown names
    logger.info("Overriding prompt %s/%s", category, name)
    _overrides[(category, name)] = template


def reset() -> None:
    """Drop overrides and cached modules (for testing)."""
    _modules.clear()
    _overrides.clear()
