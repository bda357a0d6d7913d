"""
Domain exceptions - Uniform error taxonomy for market data and holdings.

Every error carries a machine-usable ``code`` and a human-readable
``message``; ``to_dict()`` renders the body returned to API consumers.
"""

from typing import Any, Optional


class CoinSightError(Exception):
    """Base class for all application errors."""

    code = "internal_error"

    def __init__(self, message: str, **details: Any):
        self.message = message
        self.details = {k: v for k, v in details.items() if v is not None}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to response body."""
        return {"message": self.message, "error": self.code, **self.details}


# Market data errors

class LocalRateLimitedError(CoinSightError):
    """Our own rate limiter refused the outbound call."""

    code = "local_rate_limited"

    def __init__(self, retry_after: int):
        self.retry_after = retry_after
        super().__init__(
            "Rate limit exceeded. Please wait before making more requests.",
            retryAfter=retry_after,
        )


class UpstreamRateLimitedError(CoinSightError):
    """The price provider answered 429."""

    code = "upstream_rate_limited"

    def __init__(self, retry_after: int):
        self.retry_after = retry_after
        super().__init__(
            "Rate limit exceeded. Please try again later.",
            retryAfter=retry_after,
        )


class UpstreamTimeoutError(CoinSightError):
    """The price provider did not answer within the request timeout."""

    code = "upstream_timeout"

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout
        super().__init__("Request timeout. Please try again.", timeout=timeout)


class UpstreamMalformedError(CoinSightError):
    """The price provider answered with an unexpected payload shape."""

    code = "upstream_malformed"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__("Invalid data from price provider", reason=reason)


class UpstreamError(CoinSightError):
    """Any other upstream failure (unexpected status, connection failure)."""

    code = "upstream_error"

    def __init__(self, status: Optional[int], body: str = ""):
        self.status = status
        self.body = body
        super().__init__(
            "Failed to fetch market data",
            status=status,
            body=body[:500] if body else None,
        )


class CoinNotFoundError(CoinSightError):
    """The price provider has no coin with the requested id."""

    code = "coin_not_found"

    def __init__(self, requested_id: str, suggested_id: str):
        self.requested_id = requested_id
        self.suggested_id = suggested_id
        super().__init__(
            f"Cryptocurrency '{requested_id}' not found. Please check the coin ID.",
            requestedId=requested_id,
            suggestedId=suggested_id,
            suggestion=f"Did you mean '{suggested_id}'?",
        )


# Holdings errors

class InvalidIndexError(CoinSightError):
    """Portfolio index outside 0 <= index < length."""

    code = "invalid_index"

    def __init__(self, index: int, length: int):
        self.index = index
        self.length = length
        super().__init__("Invalid index", index=index, length=length)


class InvalidInputError(CoinSightError):
    """Missing, non-numeric or non-positive input value."""

    code = "invalid_input"

    def __init__(self, field: str, value: Any = None, reason: str = "must be a positive number"):
        self.field = field
        self.value = value
        super().__init__(f"'{field}' {reason}", field=field)


class UserNotFoundError(CoinSightError):
    """No stored record for the authenticated user."""

    code = "user_not_found"

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__("User not found", userId=user_id)


class StorageError(CoinSightError):
    """Stored user data could not be read or written."""

    code = "storage_error"

    def __init__(self, reason: str):
        super().__init__(f"User store unavailable: {reason}")


class AuthenticationError(CoinSightError):
    """Missing or invalid bearer token."""

    code = "authentication_required"

    def __init__(self, reason: str = "Please authenticate"):
        super().__init__(reason)


RATE_LIMIT_ERRORS = (LocalRateLimitedError, UpstreamRateLimitedError)
