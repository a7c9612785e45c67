"""Global exception handlers mapping domain exceptions to HTTP responses."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from protocol_assist.exceptions import (
    BatchFailure,
    ConfigurationError,
    LLMClientError,
    ProtocolAssistError,
    SchemaViolation,
    ValidationInconsistency,
)


def register_error_handlers(app: FastAPI) -> None:
    """Register exception-to-HTTP-status mappings."""

    @app.exception_handler(ConfigurationError)
    async def handle_configuration_error(request: Request, exc: ConfigurationError) -> JSONResponse:
        return JSONResponse(status_code=503, content={"error": str(exc), "type": "configuration_error"})

    @app.exception_handler(SchemaViolation)
    async def handle_schema_violation(request: Request, exc: SchemaViolation) -> JSONResponse:
        return JSONResponse(
            status_code=502,
            content={"error": str(exc), "type": "schema_violation", "schema": exc.schema_name},
        )

    @app.exception_handler(BatchFailure)
    async def handle_batch_failure(request: Request, exc: BatchFailure) -> JSONResponse:
        return JSONResponse(
            status_code=502,
            content={
                "error": str(exc),
                "type": "batch_failure",
                "failed_chunks": [f.chunk.index for f in exc.failures],
                "total_chunks": exc.total_chunks,
            },
        )

    @app.exception_handler(LLMClientError)
    async def handle_llm_error(request: Request, exc: LLMClientError) -> JSONResponse:
        return JSONResponse(status_code=502, content={"error": str(exc), "type": "llm_error"})

    @app.exception_handler(ValidationInconsistency)
    async def handle_validation_inconsistency(
        request: Request, exc: ValidationInconsistency
    ) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={
                "error": str(exc),
                "type": "validation_inconsistency",
                "validation": exc.report.model_dump(by_alias=True),
            },
        )

    @app.exception_handler(ProtocolAssistError)
    async def handle_generic_error(request: Request, exc: ProtocolAssistError) -> JSONResponse:
        return JSONResponse(status_code=500, content={"error": str(exc), "type": "protocol_assist_error"})
