"""
Mapping of application errors to HTTP responses.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.domain.exceptions import (
    AuthenticationError,
    CoinNotFoundError,
    CoinSightError,
    InvalidIndexError,
    InvalidInputError,
    LocalRateLimitedError,
    StorageError,
    UpstreamMalformedError,
    UpstreamRateLimitedError,
    UpstreamTimeoutError,
    UserNotFoundError,
)
from src.infrastructure.logging import get_logger

logger = get_logger(__name__)

STATUS_BY_ERROR: dict[type[CoinSightError], int] = {
    LocalRateLimitedError: 429,
    UpstreamRateLimitedError: 429,
    UpstreamTimeoutError: 408,
    UpstreamMalformedError: 500,
    CoinNotFoundError: 404,
    InvalidIndexError: 400,
    InvalidInputError: 400,
    UserNotFoundError: 404,
    AuthenticationError: 401,
    StorageError: 500,
}


def status_for(error: CoinSightError) -> int:
    """HTTP status for an application error (500 when unmapped)."""
    for error_type in type(error).__mro__:
        if error_type in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[error_type]
    return 500


def error_response(error: CoinSightError, status_code: int | None = None) -> JSONResponse:
    """Render an application error, adding Retry-After for rate limits."""
    headers = {}
    retry_after = getattr(error, "retry_after", None)
    if retry_after is not None:
        headers["Retry-After"] = str(retry_after)
    return JSONResponse(
        status_code=status_code or status_for(error),
        content=error.to_dict(),
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install handlers so every error body carries message and error code."""

    @app.exception_handler(CoinSightError)
    async def handle_app_error(request: Request, exc: CoinSightError) -> JSONResponse:
        status_code = status_for(exc)
        log = logger.warning if status_code < 500 else logger.error
        log("Request failed", path=request.url.path, error=exc.code, status=status_code)
        return error_response(exc, status_code)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={
                "message": "Invalid request",
                "error": InvalidInputError.code,
                "details": [
                    {"loc": list(err.get("loc", [])), "msg": err.get("msg")}
                    for err in exc.errors()
                ],
            },
        )
