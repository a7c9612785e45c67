"""Async LLM client issuing schema-constrained (tool-call) requests.

Every structured request declares exactly one function tool and forces the
model to call it; the call's JSON arguments are parsed and validated into a
pydantic model before they leave this module. Calls go through an
:class:`~protocol_assist.inference.protocols.IInferenceBackend`, which is
LiteLLM in production and a scripted fake in tests.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from protocol_assist.core.config import LLMConfig
from protocol_assist.core.startup_checks import check_api_key
from protocol_assist.exceptions import (
    ConfigurationError,
    LLMClientError,
    NonRetryableError,
    RetryableError,
    SchemaViolation,
)
from protocol_assist.hooks.usage_tracker import get_current_usage
from protocol_assist.inference.protocols import IInferenceBackend, InferenceResult

log = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


@dataclass(frozen=True)
class OutputSchema(Generic[T]):
    """A named output contract: JSON-Schema parameters plus the model to parse into."""

    name: str
    description: str
    parameters: dict[str, Any]
    model: type[T]

    def as_tool(self) -> dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }

    def tool_choice(self) -> dict[str, Any]:
        return {"type": "function", "function": {"name": self.name}}


class LLMClient:
    """Async LLM client bound to one immutable configuration.

    The configuration is copied on construction; use :meth:`with_api_key`
    to obtain a client for a new credential instead of mutating this one.
    No call is ever retried here.
    """

    def __init__(
        self,
        config: LLMConfig,
        backend: IInferenceBackend | None = None,
    ) -> None:
        self._config = config.model_copy()
        if backend is None:
            from protocol_assist.inference.realtime import RealTimeBackend

            backend = RealTimeBackend()
        self._backend = backend

    @property
    def model(self) -> str:
        return self._config.model

    @property
    def is_configured(self) -> bool:
        try:
            check_api_key(self._config)
        except ConfigurationError:
            return False
        return True

    def ensure_configured(self) -> None:
        """Raise ConfigurationError if no usable API key is configured."""
        check_api_key(self._config)

    def with_api_key(self, api_key: str) -> LLMClient:
        """Return a new client using *api_key*, sharing the same backend."""
        return LLMClient(self._config.model_copy(update={"api_key": api_key}), self._backend)

    @staticmethod
    def _is_retryable(exc: Exception) -> bool:
        """Classify whether an LLM API error is worth retrying by the caller.

        Non-retryable: AuthenticationError, BadRequestError, NotFoundError (4xx non-429).
        Retryable (default): everything else including rate limits, timeouts, 5xx.
        """
        from litellm.exceptions import AuthenticationError, BadRequestError, NotFoundError

        return not isinstance(exc, (AuthenticationError, BadRequestError, NotFoundError))

    async def request_structured(
        self,
        *,
        system_prompt: str,
        payload: str | dict[str, Any] | list[Any],
        schema: OutputSchema[T],
    ) -> T:
        """Issue one schema-constrained call and return the validated payload.

        Args:
            system_prompt: System instruction for the model.
            payload: User message; dicts and lists are serialised as JSON.
            schema: Output contract the model must satisfy via a tool call.

        Raises:
            ConfigurationError: No API key configured (no call is made).
            SchemaViolation: Tool-call arguments missing, not JSON, or invalid.
            LLMClientError: The provider call itself failed.
        """
        result = await self._infer(
            system_prompt,
            payload,
            tools=[schema.as_tool()],
            tool_choice=schema.tool_choice(),
        )
        return self._parse_tool_arguments(result, schema)

    async def complete(
        self,
        prompt: str,
        *,
        system_prompt: str | None = None,
        chat_history: list[dict[str, Any]] | None = None,
    ) -> str:
        """Free-text completion, returns the content string."""
        result = await self._infer(system_prompt, prompt, chat_history=chat_history)
        return result.content

    # ── Internals ────────────────────────────────────────────────────

    async def _infer(
        self,
        system_prompt: str | None,
        payload: str | dict[str, Any] | list[Any],
        *,
        chat_history: list[dict[str, Any]] | None = None,
        **extra: Any,
    ) -> InferenceResult:
        self.ensure_configured()

        messages: list[dict[str, Any]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        if chat_history:
            messages.extend(chat_history)
        user_content = payload if isinstance(payload, str) else json.dumps(payload, default=str)
        messages.append({"role": "user", "content": user_content})

        params: dict[str, Any] = {
            "temperature": self._config.temperature,
            "timeout": self._config.timeout,
            "api_key": self._config.api_key,
            **extra,
        }
        if self._config.base_url:
            params["api_base"] = self._config.base_url

        try:
            result = await self._backend.infer(messages, self._config.model, **params)
        except LLMClientError:
            raise
        except Exception as e:
            if self._is_retryable(e):
                raise RetryableError(f"LLM request failed: {e}") from e
            raise NonRetryableError(f"Non-retryable LLM error: {e}") from e

        get_current_usage().record(result.usage)
        return result

    @staticmethod
    def _parse_tool_arguments(result: InferenceResult, schema: OutputSchema[T]) -> T:
        raw = result.tool_arguments
        if not raw:
            raise SchemaViolation(
                f"Model response carried no '{schema.name}' call arguments",
                schema_name=schema.name,
            )

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            log.error(
                "Tool-call arguments are not valid JSON",
                extra={"schema": schema.name, "arguments_preview": raw[:200]},
            )
            raise SchemaViolation(
                f"'{schema.name}' call arguments are not valid JSON: {e}",
                schema_name=schema.name,
                raw_arguments=raw,
            ) from e

        try:
            return schema.model.model_validate(data)
        except ValidationError as e:
            raise SchemaViolation(
                f"'{schema.name}' call arguments do not match the declared schema: "
                f"{e.error_count()} error(s)",
                schema_name=schema.name,
                raw_arguments=raw,
            ) from e
