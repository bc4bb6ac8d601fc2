"""HTTP data source adapter implementation for single-attempt fetches."""

from __future__ import annotations

from typing import Any, Final

import httpx

from .errors import TransientFetchError
from .interfaces import DataSourcePort


class HttpDataSourceAdapter(DataSourcePort):
    """Adapter issuing one HTTP GET per call and decoding the response body."""

    _USER_AGENT: Final[str] = "oracle-relay/1.0 (Python/httpx)"

    def __init__(
        self,
        request_timeout_seconds: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize HTTP data source adapter.

        Args:
            request_timeout_seconds: HTTP request timeout in seconds.
            http_client: Optional pre-built client, mainly for tests.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when timeout is not positive.
        """

        if request_timeout_seconds <= 0:
            raise ValueError("request_timeout_seconds must be > 0")

        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=request_timeout_seconds,
            headers={"User-Agent": self._USER_AGENT, "Accept": "application/json, text/plain;q=0.9"},
            follow_redirects=True,
        )

    async def aclose(self) -> None:
        """Close the HTTP client when this adapter created it."""

        if self._owns_client:
            await self._client.aclose()

    async def source_fetch(self, source_uri: str) -> Any:
        """Execute one HTTP GET and return the decoded payload.

        JSON responses are decoded to Python objects; any other content type is
        returned as text.

        Args:
            source_uri: Remote source URI.

        Returns:
            Any: Decoded response payload.

        Raises:
            ValueError: Raised when source URI is blank.
            TransientFetchError: Raised for transport failures, timeouts, non-2xx statuses
                and undecodable JSON bodies.
        """

        normalized_source_uri = source_uri.strip()
        if not normalized_source_uri:
            raise ValueError("source_uri must not be blank")

        try:
            response = await self._client.get(normalized_source_uri)
        except httpx.TimeoutException as error:
            raise TransientFetchError(f"request to {normalized_source_uri} timed out") from error
        except httpx.HTTPError as error:
            raise TransientFetchError(f"request to {normalized_source_uri} failed: {error}") from error

        if not response.is_success:
            raise TransientFetchError(
                f"{normalized_source_uri} returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        return self._source_decode_body(response)

    def _source_decode_body(self, response: httpx.Response) -> Any:
        """Decode response body according to its content type.

        Args:
            response: Successful HTTP response.

        Returns:
            Any: JSON-decoded object or response text.

        Raises:
            TransientFetchError: Raised when a JSON body cannot be decoded.
        """

        content_type = response.headers.get("content-type", "")
        if "json" not in content_type.lower():
            return response.text

        try:
            return response.json()
        except ValueError as error:
            raise TransientFetchError(
                f"{response.request.url} returned an invalid JSON body",
                status_code=response.status_code,
            ) from error
