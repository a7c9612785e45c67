"""FastAPI application with lifespan management."""

from __future__ import annotations

import importlib.metadata
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from protocol_assist.api.middleware.error_handler import register_error_handlers
from protocol_assist.api.routes import assistant, health, protocol
from protocol_assist.core.config import APIConfig, AppSettings
from protocol_assist.core.startup_checks import validate_settings
from protocol_assist.exceptions import ConfigurationError
from protocol_assist.hooks import setup_logging
from protocol_assist.inference.protocols import IInferenceBackend
from protocol_assist.providers.client import LLMClient

log = logging.getLogger(__name__)


def _get_version() -> str:
    """Read package version from installed metadata, with dev fallback."""
    try:
        return importlib.metadata.version("protocol-assist")
    except importlib.metadata.PackageNotFoundError:
        return "0.0.0-dev"


def create_app(
    settings: AppSettings | None = None,
    backend: IInferenceBackend | None = None,
) -> FastAPI:
    """Build the application.

    Args:
        settings: Settings to serve with; read from the environment at
            startup when omitted.
        backend: Inference backend for the shared LLM client (LiteLLM when
            omitted).
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application startup/shutdown lifecycle."""
        app_settings = settings or AppSettings()
        setup_logging(app_settings.observability)
        try:
            validate_settings(app_settings)
        except ConfigurationError as e:
            # Serve anyway: /health stays up and pipeline routes answer 503
            log.warning("Starting without a usable LLM configuration: %s", e)

        app.state.settings = app_settings
        app.state.client = LLMClient(app_settings.llm, backend)
        yield

    api_config = APIConfig()
    app = FastAPI(
        title=api_config.title,
        description=api_config.description,
        version=_get_version(),
        lifespan=lifespan,
    )

    register_error_handlers(app)
    app.include_router(health.router)
    app.include_router(protocol.router, prefix="/api")
    app.include_router(assistant.router, prefix="/api")
    return app


app = create_app()
