"""
Application error taxonomy and the JSON handlers that render it.

Every handled failure leaves the service as {"detail": <message>, "code": <code>}.
Provider error text and tracebacks go to the server log only.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from postgrest.exceptions import APIError
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from underwraps.config.settings import settings

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"
RATE_LIMITED = "rate_limited"


class AppError(Exception):
    status_code = 500
    code = "internal"
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, code: Optional[str] = None):
        self.message = message or self.default_message
        if code:
            self.code = code
        super().__init__(self.message)


class InvalidInput(AppError):
    status_code = 400
    code = "invalid_input"
    default_message = "Invalid input"


class Unauthorized(AppError):
    status_code = 401
    code = "unauthorized"
    default_message = "Unauthorized"


class Forbidden(AppError):
    status_code = 403
    code = "forbidden"
    default_message = "Forbidden"


class NotFound(AppError):
    status_code = 404
    code = "not_found"
    default_message = "Not found"


class Conflict(AppError):
    status_code = 409
    code = "conflict"
    default_message = "Conflict"


class Internal(AppError):
    pass


def is_unique_violation(exc: Exception) -> bool:
    """True when a PostgREST error is a Postgres unique-constraint violation."""
    return isinstance(exc, APIError) and str(getattr(exc, "code", "")) == UNIQUE_VIOLATION


def _body(message: str, code: str) -> dict:
    return {"detail": message, "code": code}


def register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
        logger.log(
            level,
            "%s %s -> %s (%s): %s",
            request.method,
            request.url.path,
            exc.status_code,
            exc.code,
            exc.message,
        )
        message = exc.message
        if exc.status_code >= 500 and settings.is_production:
            message = Internal.default_message
        return JSONResponse(status_code=exc.status_code, content=_body(message, exc.code))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = "Invalid request"
        if errors:
            first = errors[0]
            field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
            message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
        logger.warning("%s %s -> 400: %s", request.method, request.url.path, message)
        return JSONResponse(status_code=400, content=_body(message, InvalidInput.code))

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
        logger.warning("%s %s -> 429: %s", request.method, request.url.path, exc.detail)
        response = JSONResponse(
            status_code=429,
            content=_body(f"Rate limit exceeded: {exc.detail}", RATE_LIMITED),
        )
        # Retry-After / X-RateLimit-* when the limiter has headers enabled
        return request.app.state.limiter._inject_headers(response, request.state.view_rate_limit)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        message = exc.detail if isinstance(exc.detail, str) else "HTTP error"
        return JSONResponse(
            status_code=exc.status_code,
            content=_body(message, "http_error"),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        if settings.is_production:
            return JSONResponse(status_code=500, content=_body(Internal.default_message, Internal.code))
        return JSONResponse(status_code=500, content=_body(str(exc), Internal.code))
