"""Data fetcher with bounded linear-backoff retry and pluggable caching."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable

import structlog

from oracle_relay.adapters import DataSourcePort, FetchExhaustedError
from oracle_relay.cache import CacheStorePort, NullCacheStore
from oracle_relay.domain import FetchOptions, FetchRequest

logger = structlog.get_logger(__name__)


class DataFetcher:
    """Fetch remote payloads, absorbing every failure into a `None` result.

    Attempt `k` (k >= 2) is preceded by a wait of `retry_delay_ms * (k - 1)`
    milliseconds, so `max_retries = n` yields at most `n + 1` attempts.
    """

    def __init__(
        self,
        data_source: DataSourcePort,
        cache_store: CacheStorePort | None = None,
        sleep_provider: Callable[[float], Awaitable[None]] | None = None,
    ):
        """Initialize fetcher dependencies.

        Args:
            data_source: Adapter performing one request per call.
            cache_store: Optional cache store, defaults to an always-miss store.
            sleep_provider: Optional async sleep callable, defaults to `asyncio.sleep`.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when data_source is None.
        """

        if data_source is None:
            raise ValueError("data_source must not be None")

        self._data_source = data_source
        self._cache_store = cache_store or NullCacheStore()
        self._sleep = sleep_provider or asyncio.sleep

    async def fetch_request(self, request: FetchRequest) -> Any | None:
        """Fetch payload described by an immutable fetch request."""

        return await self.fetch(source_uri=request.source_uri, options=request.options)

    async def fetch(self, source_uri: str, options: FetchOptions | None = None) -> Any | None:
        """Fetch payload from source, consulting and filling the cache when enabled.

        Args:
            source_uri: Remote source URI, also used as cache key.
            options: Retry and caching options, defaults to `FetchOptions()`.

        Returns:
            Any | None: Payload on success, None when attempts are exhausted or an
                unexpected fault occurs.

        Raises:
            asyncio.CancelledError: Propagated when the calling task is cancelled.
        """

        fetch_options = options or FetchOptions()
        normalized_source_uri = (source_uri or "").strip()
        if not normalized_source_uri:
            logger.error("fetch rejected blank source uri")
            return None

        try:
            if fetch_options.use_cache:
                cached_payload = await self._fetch_lookup_cache(normalized_source_uri)
                if cached_payload is not None:
                    logger.info("cache hit", source_uri=normalized_source_uri)
                    return cached_payload

            payload = await self._fetch_with_retries(normalized_source_uri, fetch_options)

            if fetch_options.use_cache:
                await self._fetch_store_cache(normalized_source_uri, payload)
            return payload
        except FetchExhaustedError as error:
            logger.error(
                "fetch exhausted retries",
                source_uri=normalized_source_uri,
                attempts=error.attempts,
            )
            return None
        except Exception:  # noqa: BLE001 - every fetch failure converges to None
            logger.exception("unexpected fetch failure", source_uri=normalized_source_uri)
            return None

    async def _fetch_with_retries(self, source_uri: str, options: FetchOptions) -> Any:
        total_attempts = options.max_retries + 1
        for attempt_number in range(1, total_attempts + 1):
            if attempt_number > 1:
                wait_seconds = options.retry_delay_ms * (attempt_number - 1) / 1000.0
                if wait_seconds > 0:
                    await self._sleep(wait_seconds)

            try:
                return await self._data_source.source_fetch(source_uri)
            except Exception as error:  # noqa: BLE001 - any attempt failure is retried
                logger.warning(
                    "fetch attempt failed",
                    source_uri=source_uri,
                    attempt=attempt_number,
                    max_attempts=total_attempts,
                    error_type=type(error).__name__,
                    error=str(error),
                )

        raise FetchExhaustedError(
            f"failed to fetch {source_uri} after {total_attempts} attempts",
            attempts=total_attempts,
        )

    async def _fetch_lookup_cache(self, source_uri: str) -> Any | None:
        try:
            return await asyncio.to_thread(self._cache_store.cache_get, source_uri)
        except Exception as error:  # noqa: BLE001 - a broken cache behaves as a miss
            logger.warning("cache lookup failed", source_uri=source_uri, error=str(error))
            return None

    async def _fetch_store_cache(self, source_uri: str, payload: Any) -> None:
        try:
            await asyncio.to_thread(self._cache_store.cache_set, source_uri, payload)
        except Exception as error:  # noqa: BLE001 - the fetched payload is still returned
            logger.warning("cache write failed", source_uri=source_uri, error=str(error))
            return
        logger.info("cache write", source_uri=source_uri)
