# This file defines the API error types and the exception handlers that render them.
# Every failure leaves the service as `{error_code, message, details, request_id, timestamp}`.
# Input validation errors and domain conflict/not-found errors are separate subclasses of APIError.
# Unexpected failures are logged and answered with a generic 500 body.

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

LOGGER = logging.getLogger("servicemap.api")


class APIError(Exception):
    """Domain error type with structured API details."""

    def __init__(
        self,
        *,
        status_code: int,
        error_code: str,
        message: str,
        details: Any | None = None,
    ) -> None:
        self.status_code = status_code
        self.error_code = error_code
        self.message = message
        self.details = details
        super().__init__(message)


class InputValidationError(APIError):
    """Caller supplied a missing or out-of-range value."""

    def __init__(self, message: str, *, details: Any | None = None) -> None:
        super().__init__(status_code=400, error_code="INVALID_INPUT", message=message, details=details)


class NotFoundError(APIError):
    def __init__(self, message: str, *, details: Any | None = None) -> None:
        super().__init__(status_code=404, error_code="NOT_FOUND", message=message, details=details)


class ConflictError(APIError):
    def __init__(self, message: str, *, details: Any | None = None) -> None:
        super().__init__(status_code=409, error_code="CONFLICT", message=message, details=details)


class AuthenticationError(APIError):
    def __init__(self, message: str) -> None:
        super().__init__(status_code=401, error_code="UNAUTHORIZED", message=message)


class ForbiddenError(APIError):
    def __init__(self, message: str) -> None:
        super().__init__(status_code=403, error_code="FORBIDDEN", message=message)


def _request_id(request: Request) -> str:
    return str(getattr(request.state, "request_id", "unknown"))


def _error_body(
    *, request: Request, error_code: str, message: str, details: Any | None = None
) -> dict[str, Any]:
    return {
        "error_code": error_code,
        "message": message,
        "details": details,
        "request_id": _request_id(request),
        "timestamp": datetime.now(tz=UTC).isoformat(),
    }


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(
                request=request,
                error_code=exc.error_code,
                message=exc.message,
                details=exc.details,
            ),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content=_error_body(
                request=request,
                error_code="VALIDATION_ERROR",
                message="Invalid request parameters.",
                details=jsonable_errors(exc),
            ),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(
                request=request,
                error_code="HTTP_ERROR",
                message=str(exc.detail),
            ),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        LOGGER.exception(
            "Unhandled error request_id=%s path=%s", _request_id(request), request.url.path, exc_info=exc
        )
        return JSONResponse(
            status_code=500,
            content=_error_body(
                request=request,
                error_code="INTERNAL_SERVER_ERROR",
                message="The server encountered an unexpected error.",
            ),
        )


def jsonable_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    # pydantic error contexts can hold exception objects
    return [
        {"loc": list(error.get("loc", ())), "msg": str(error.get("msg", "")), "type": str(error.get("type", ""))}
        for error in exc.errors()
    ]
