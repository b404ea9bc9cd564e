"""Base classes and exception hierarchy for provider clients.

A provider client performs exactly one logical request per ``fetch_raw``
call and returns the provider-shaped JSON body. Caching, rate limiting and
fallback belong to the orchestrator, not here.

Live clients share an ``httpx.AsyncClient`` with a bounded timeout and
retry transient failures (network errors, 5xx, 429) with tenacity
exponential backoff before surfacing a ``TransportError``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from reference_lookup.schemas import ProviderKind

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Exception hierarchy
# ---------------------------------------------------------------------------


class ProviderError(Exception):
    """Base exception for all provider client failures."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ) -> None:
        """Initialize provider error.

        Args:
            message: Error message.
            status_code: HTTP status code if applicable.
            response_body: Truncated response body if applicable.
        """
        self.message = message
        self.status_code = status_code
        self.response_body = response_body
        super().__init__(self.message)


class TransportError(ProviderError):
    """Connection failure, timeout, or non-2xx HTTP status."""


class ParseError(ProviderError):
    """Response body is not JSON or not the expected shape."""


class _TransientError(Exception):
    """Internal: raised on 5xx / 429 to trigger tenacity retry."""

    def __init__(self, status_code: int, body: str) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"Transient error {status_code}: {body[:100]}")


# ---------------------------------------------------------------------------
# Client interface
# ---------------------------------------------------------------------------


class ProviderClient(ABC):
    """Common "fetch raw" capability shared by every provider variant.

    ``is_live`` is False for providers with no wired endpoint; their
    ``fetch_raw`` returns None so the orchestrator defers to the fallback
    knowledge base.
    """

    kind: ProviderKind
    is_live: bool = True

    @abstractmethod
    async def fetch_raw(self, query: str) -> Any | None:
        """Return the provider's raw response body for ``query``.

        Raises:
            TransportError: On connection failure or non-2xx status.
            ParseError: On a malformed response body.
        """
        ...

    async def aclose(self) -> None:
        """Release any resources held by the client."""
        return None


class HttpProviderClient(ProviderClient):
    """Provider client backed by a JSON-over-HTTP GET endpoint.

    Subclasses implement ``_params`` (query string for a request) and
    ``_check_shape`` (top-level body validation).

    Args:
        base_url: Endpoint URL queried with GET.
        timeout: HTTP timeout in seconds.
        max_attempts: Attempts per call for transient failures.
        http_client: Preconfigured client; one is created when omitted.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        max_attempts: int = 3,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url
        self._max_attempts = max(1, max_attempts)
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    async def fetch_raw(self, query: str) -> Any:
        params = self._params(query)
        try:
            response = await self._get_with_retry(params)
        except _TransientError as exc:
            raise TransportError(
                message=f"{self.kind.value} provider unavailable: {exc}",
                status_code=exc.status_code,
                response_body=exc.body[:500],
            ) from exc
        except httpx.RequestError as exc:
            raise TransportError(
                message=f"{self.kind.value} provider request failed: {exc!r}"
            ) from exc

        if not response.is_success:
            body = response.text[:500]
            raise TransportError(
                message=(
                    f"{self.kind.value} provider returned {response.status_code}"
                ),
                status_code=response.status_code,
                response_body=body,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise ParseError(
                message=f"{self.kind.value} provider returned invalid JSON",
                status_code=response.status_code,
                response_body=response.text[:500],
            ) from exc
        return self._check_shape(data)

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http:
            await self._http.aclose()

    async def _get_with_retry(self, params: dict[str, str]) -> httpx.Response:
        """GET ``base_url`` retrying network errors, 5xx, and 429."""
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type((httpx.RequestError, _TransientError)),
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_exponential(multiplier=0.5, min=0.5, max=2),
            reraise=True,
        ):
            with attempt:
                response = await self._http.get(self.base_url, params=params)
                if response.status_code >= 500 or response.status_code == 429:
                    logger.debug(
                        "%s provider transient status %s (attempt %d)",
                        self.kind.value,
                        response.status_code,
                        attempt.retry_state.attempt_number,
                    )
                    raise _TransientError(response.status_code, response.text)
                return response
        raise AssertionError("unreachable: tenacity reraises on exhaustion")

    @abstractmethod
    def _params(self, query: str) -> dict[str, str]:
        """Build the query string for one request."""
        ...

    @abstractmethod
    def _check_shape(self, data: Any) -> Any:
        """Validate the decoded body, raising ParseError when malformed."""
        ...
