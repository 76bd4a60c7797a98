"""
Exception handlers mapping the error taxonomy to JSON responses.

Body shape:
    {"error": ..., "message": ..., "timestamp": ..., "path": ..., "method": ..., "details": ...}
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy.exc import OperationalError

from quizzer.core.errors import QuizzerError, UnavailableError


def error_body(request: Request, error: str, message: str | None = None, details: Any = None) -> dict[str, Any]:
    body: dict[str, Any] = {
        "error": error,
        "message": message or error,
        "timestamp": datetime.now(UTC).isoformat(),
        "path": request.url.path,
        "method": request.method,
    }
    if details is not None:
        body["details"] = jsonable_encoder(details)
    return body


async def handle_quizzer_error(request: Request, exc: QuizzerError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(request, exc.public_message, exc.message, exc.details),
    )


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")),
            "message": err.get("msg"),
            "value": err.get("input"),
        }
        for err in exc.errors()
    ]
    logger.info(f"{request.method} {request.url.path} -> 400: validation failed")
    return JSONResponse(status_code=400, content=error_body(request, "Validation failed", details=details))


async def handle_database_unavailable(request: Request, exc: OperationalError) -> JSONResponse:
    logger.error(f"Database unavailable: {exc}")
    return JSONResponse(
        status_code=UnavailableError.status_code,
        content=error_body(request, UnavailableError.public_message, "Database connection failed"),
    )


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content=error_body(request, "Internal server error"))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(QuizzerError, handle_quizzer_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(OperationalError, handle_database_unavailable)
    app.add_exception_handler(Exception, handle_unexpected)
