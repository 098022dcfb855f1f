"""
Shared HTTP client infrastructure for provider integrations.

Provides RateLimiter and BaseApiClient with per-request deadlines,
retries and typed error conversion. Every provider client owns one
BaseApiClient and therefore one RateLimiter; nothing here is global.

Usage:
    http = BaseApiClient(
        provider="sleeper",
        base_url="https://api.sleeper.app/v1",
        min_interval_ms=1000,
    )
    league = await http.get_json("/league/123")
    await http.close()
"""

import asyncio
import json
import logging
import time
from typing import Any, Callable, Optional

import httpx

from .cancellation import CancellationToken, current_cancellation_token
from .errors import AuthenticationError, ExternalAPIError, RateLimitError

logger = logging.getLogger(__name__)

RETRY_AFTER_CAP = 30


# ---------------------------------------------------------------------------
# Rate limiter
# ---------------------------------------------------------------------------

class RateLimiter:
    """
    Minimum-interval rate limiter for one client instance.

    One timestamp per instance, not per endpoint. Waiters are served in
    call order (asyncio.Lock is FIFO). The dispatch time is recorded on
    every acquire, whether or not the request that follows succeeds.
    """

    def __init__(
        self,
        min_interval_ms: float = 1000,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.delay = max(0.0, min_interval_ms / 1000.0)
        self._clock = clock or time.monotonic
        self._last_request: Optional[float] = None
        self._lock = asyncio.Lock()
        self.request_count = 0
        self.last_request_at: Optional[float] = None

    async def acquire(self, cancel_token: Optional[CancellationToken] = None) -> None:
        """Wait until this client may dispatch its next request."""
        token = cancel_token or current_cancellation_token.get()
        async with self._lock:
            if token is not None:
                token.raise_if_cancelled()
            if self._last_request is not None:
                elapsed = self._clock() - self._last_request
                if elapsed < self.delay:
                    if token is not None:
                        await token.sleep(self.delay - elapsed)
                    else:
                        await asyncio.sleep(self.delay - elapsed)
            self._last_request = self._clock()
            self.last_request_at = time.time()
            self.request_count += 1

    # Alias
    await_turn = acquire


# ---------------------------------------------------------------------------
# Base client
# ---------------------------------------------------------------------------

class BaseApiClient:
    """
    Async HTTP client with rate limiting, deadlines and retries.

    Use as an async context manager, or rely on lazy initialisation and
    call close() when done:

        async with BaseApiClient(provider="cbs", base_url=...) as http:
            data = await http.get_json("/leagues/1")
    """

    def __init__(
        self,
        *,
        provider: str,
        base_url: str,
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
        min_interval_ms: float = 1000,
        timeout: float = 15.0,
        max_retries: int = 2,
        rate_limiter: Optional[RateLimiter] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.provider = provider
        self._base_url = base_url.rstrip("/")
        self._default_headers = headers or {}
        self._default_params = params or {}
        self.rate_limiter = rate_limiter or RateLimiter(min_interval_ms)
        self._timeout = timeout
        self._max_retries = max(1, max_retries)
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    # -- Lifecycle -----------------------------------------------------------

    async def __aenter__(self) -> "BaseApiClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @property
    def client(self) -> httpx.AsyncClient:
        """Return the HTTP client, lazily creating it if needed."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                headers=self._default_headers,
                timeout=httpx.Timeout(self._timeout),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    # -- HTTP methods --------------------------------------------------------

    async def get_json(
        self,
        path: str,
        params: dict[str, Any] | list[tuple[str, Any]] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Make a GET request and decode the JSON body."""
        return await self._request("GET", path, params=params, headers=headers)

    async def _sleep(self, seconds: float) -> None:
        token = current_cancellation_token.get()
        if token is not None:
            await token.sleep(seconds)
        else:
            await asyncio.sleep(seconds)

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | list[tuple[str, Any]] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """
        Make an HTTP request with rate limiting, a hard deadline and retries.

        Raises:
            AuthenticationError: On HTTP 401 (never retried)
            RateLimitError: If the API returns 429 and retries are exhausted
            ExternalAPIError: On any other failure after retries
        """
        if isinstance(params, list):
            merged_params: Any = list(self._default_params.items()) + params
        else:
            merged_params = {**self._default_params, **(params or {})}
        request_headers = {**self._default_headers, **(headers or {})}
        last_error: Exception | None = None

        for attempt in range(self._max_retries):
            try:
                await self.rate_limiter.acquire()
                response = await asyncio.wait_for(
                    self.client.request(
                        method=method,
                        url=path,
                        params=merged_params,
                        headers=request_headers,
                    ),
                    timeout=self._timeout,
                )

                if response.status_code == 401:
                    raise AuthenticationError(
                        f"{self.provider} access token expired or invalid",
                        provider=self.provider,
                    )

                # Handle API rate limiting
                if response.status_code == 429:
                    retry_after = _parse_retry_after(response.headers.get("retry-after"))
                    if attempt < self._max_retries - 1:
                        wait = min(retry_after, RETRY_AFTER_CAP)
                        logger.warning(
                            f"{self.provider} rate limited, waiting {wait}s (attempt {attempt + 1})"
                        )
                        await self._sleep(wait)
                        continue
                    raise RateLimitError(
                        f"{self.provider} rate limit exceeded. Try again in {retry_after} seconds.",
                        provider=self.provider,
                        retry_after=retry_after,
                    )

                response.raise_for_status()
                return _decode_json(response, self.provider)

            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                last_error = ExternalAPIError(
                    f"{self.provider} API error: HTTP {status}: {e.response.text[:200]}",
                    provider=self.provider,
                    status_code=status,
                )
                # Client errors (except 429) are not retryable
                if 400 <= status < 500:
                    raise last_error from e
                if attempt < self._max_retries - 1:
                    wait = 2 ** attempt
                    logger.warning(f"{self.provider} request failed, retrying in {wait}s: {e}")
                    await self._sleep(wait)

            except (httpx.RequestError, asyncio.TimeoutError) as e:
                last_error = ExternalAPIError(
                    f"{self.provider} request failed: {e!r}",
                    provider=self.provider,
                )
                if attempt < self._max_retries - 1:
                    wait = 2 ** attempt
                    logger.warning(f"{self.provider} request error, retrying in {wait}s: {e!r}")
                    await self._sleep(wait)

        raise last_error or ExternalAPIError(
            f"{self.provider} request failed after retries", provider=self.provider
        )


def _parse_retry_after(value: str | None) -> int:
    try:
        return int(value) if value is not None else 60
    except ValueError:
        return 60


def _decode_json(response: httpx.Response, provider: str) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ExternalAPIError(
            f"Invalid JSON from {provider}: {response.url}",
            provider=provider,
            status_code=response.status_code,
        ) from e
