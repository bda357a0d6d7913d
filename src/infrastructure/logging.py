"""
Structured logging configuration using structlog.

Every log line carries the request context bound by the API middleware
(request id, path, user id). Credentials never reach the output: values of
sensitive keys are masked before rendering.
"""

import logging
import sys
from typing import Any

import structlog

SENSITIVE_KEYS = frozenset({
    "authorization",
    "token",
    "jwt_secret",
    "api_key",
    "coingecko_api_key",
    "x-cg-demo-api-key",
    "aws_secret_access_key",
})

REDACTED = "***"

# Chatty third-party loggers kept at WARNING
QUIET_LOGGERS = ("httpx", "httpcore", "botocore", "boto3", "urllib3")


def redact_secrets(_logger: Any, _method: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Mask credential values, including inside nested header/param dicts."""
    for key, value in list(event_dict.items()):
        if key.lower() in SENSITIVE_KEYS and value:
            event_dict[key] = REDACTED
        elif isinstance(value, dict):
            event_dict[key] = {
                k: REDACTED if str(k).lower() in SENSITIVE_KEYS and v else v
                for k, v in value.items()
            }
    return event_dict


def _renderer(json_format: bool) -> list[Any]:
    if json_format:
        return [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return [
        structlog.dev.ConsoleRenderer(
            colors=sys.stdout.isatty(),
            exception_formatter=structlog.dev.rich_traceback,
        ),
    ]


def setup_logging(log_level: str = "INFO", json_format: bool = False) -> None:
    """
    Configure structured logging for the CLI and the API server.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        json_format: If True, output logs as JSON (for deployed servers)
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    # uvicorn and the AWS/HTTP libraries log through stdlib
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            redact_secrets,
            *_renderer(json_format),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def start_request_context(**values: Any) -> None:
    """Reset the context at the start of a request and bind its identifiers."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(**values)


def bind_request_context(**values: Any) -> None:
    """Add values (user id) to the current request's context."""
    structlog.contextvars.bind_contextvars(**values)


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Get a logger instance for a module.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog BoundLogger.
    """
    return structlog.get_logger(name)
