"""
CoinGecko API HTTP client.

API Documentation: https://www.coingecko.com/en/api/documentation
Free tier: ~30 calls/minute, no API key required for basic endpoints.
"""

from typing import Any, Optional

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from src.domain.exceptions import (
    UpstreamError,
    UpstreamMalformedError,
    UpstreamRateLimitedError,
    UpstreamTimeoutError,
)
from src.infrastructure.config import Settings
from src.infrastructure.logging import get_logger
from src.infrastructure.rate_limiter import SlidingWindowRateLimiter

logger = get_logger(__name__)

# Failures where no response arrived; safe to resend
RETRYABLE_TRANSPORT_ERRORS = (httpx.ConnectError, httpx.RemoteProtocolError)


class CoinGeckoClient:
    """
    HTTP client for the CoinGecko API.

    Handles rate limiting, timeouts and mapping of upstream failures into
    the application error taxonomy.
    """

    def __init__(
        self,
        settings: Settings,
        rate_limiter: SlidingWindowRateLimiter,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize CoinGecko client.

        Args:
            settings: Application settings with API configuration.
            rate_limiter: Shared limiter admitting every outbound attempt.
            transport: Optional httpx transport (tests use httpx.MockTransport).
        """
        self.settings = settings
        self.base_url = settings.coingecko_base_url.rstrip("/")
        self.rate_limiter = rate_limiter
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get the HTTP client, ensuring it's initialized."""
        if self._client is None or self._client.is_closed:
            headers = {
                "Accept": "application/json",
                "User-Agent": self.settings.coingecko_user_agent,
            }
            if self.settings.coingecko_api_key:
                headers["x-cg-demo-api-key"] = self.settings.coingecko_api_key
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=headers,
                timeout=httpx.Timeout(self.settings.request_timeout_seconds),
                limits=httpx.Limits(max_keepalive_connections=5, max_connections=10),
                transport=self._transport,
            )
        return self._client

    async def get(
        self,
        path: str,
        params: Optional[dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """
        Make a rate-limited GET request.

        Each attempt, including transport-level retries, is admitted by the
        rate limiter first; a local rejection raises before any network I/O.

        Args:
            path: API endpoint path (e.g., "/coins/markets")
            params: Query parameters
            timeout: Override for the request timeout in seconds

        Returns:
            Parsed JSON response body.

        Raises:
            LocalRateLimitedError: Local limiter rejected the call.
            UpstreamRateLimitedError: Provider returned 429.
            UpstreamTimeoutError: Request exceeded the timeout.
            UpstreamMalformedError: Body was not valid JSON.
            UpstreamError: Any other status or connection failure.
        """
        request_timeout = timeout or self.settings.request_timeout_seconds
        filtered_params = {k: v for k, v in (params or {}).items() if v is not None}

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(max(1, self.settings.transport_retry_attempts)),
                wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
                retry=retry_if_exception_type(RETRYABLE_TRANSPORT_ERRORS),
                reraise=True,
            ):
                with attempt:
                    await self.rate_limiter.acquire()
                    logger.debug("GET request", path=path, params=filtered_params)
                    response = await self.client.get(
                        path,
                        params=filtered_params,
                        timeout=request_timeout,
                    )
        except httpx.TimeoutException as e:
            logger.warning("CoinGecko request timed out", path=path, timeout=request_timeout)
            raise UpstreamTimeoutError(request_timeout) from e
        except RETRYABLE_TRANSPORT_ERRORS as e:
            logger.error("CoinGecko unreachable", path=path, error=str(e))
            raise UpstreamError(None, str(e)) from e
        except httpx.HTTPError as e:
            logger.error("CoinGecko request failed", path=path, error=str(e))
            raise UpstreamError(None, str(e)) from e

        return self._handle_response(response)

    def _retry_after(self, response: httpx.Response) -> int:
        """Read the retry-after hint in seconds, falling back to the default."""
        header = response.headers.get("retry-after")
        try:
            return max(1, int(float(header)))
        except (TypeError, ValueError):
            return self.settings.default_retry_after_seconds

    def _handle_response(self, response: httpx.Response) -> Any:
        """
        Handle API response and raise errors if needed.

        Args:
            response: HTTP response object

        Returns:
            Parsed response data.
        """
        status = response.status_code

        if status == 429:
            retry_after = self._retry_after(response)
            logger.warning("CoinGecko rate limit exceeded", retry_after=retry_after)
            raise UpstreamRateLimitedError(retry_after)

        if status >= 400:
            logger.warning("CoinGecko API error", status=status, path=response.request.url.path)
            raise UpstreamError(status, response.text)

        try:
            return response.json()
        except ValueError as e:
            # JSONDecodeError and UnicodeDecodeError are both ValueErrors
            logger.error("Failed to parse response", status=status, path=response.request.url.path)
            raise UpstreamMalformedError(f"response is not JSON: {e}") from e

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
        self._client = None
