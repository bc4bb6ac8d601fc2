"""Database-backed cache store for fetched payloads."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import DateTime, Engine, bindparam, text
from sqlalchemy.exc import SQLAlchemyError

from oracle_relay.cache import CacheStorePort

from .schema import DB_METADATA


class SQLAlchemyCacheStore(CacheStorePort):
    """SQLAlchemy implementation of the cache store with upsert-by-key writes."""

    def __init__(self, engine: Engine):
        """Initialize cache store.

        Args:
            engine: SQLAlchemy engine used for all cache operations.

        Returns:
            None: Initializer does not return values.

        Raises:
            ValueError: Raised when engine is invalid.
        """

        if engine is None:
            raise ValueError("engine must not be None")

        self._engine = engine

    def db_cache_create_schema(self) -> None:
        """Create cache tables when missing, for local and test databases.

        Returns:
            None: Creates tables as side effect.

        Raises:
            RuntimeError: Raised when schema creation fails.
        """

        try:
            DB_METADATA.create_all(self._engine)
        except SQLAlchemyError as error:
            raise RuntimeError("cache schema creation failed") from error

    def cache_get(self, key: str) -> Any | None:
        """Return cached JSON payload for key.

        Args:
            key: Cache key.

        Returns:
            Any | None: Decoded payload, or None on a miss.

        Raises:
            RuntimeError: Raised when the lookup fails.
        """

        try:
            with self._engine.connect() as connection:
                row = connection.execute(
                    text("SELECT payload_json FROM fetch_cache_entry WHERE cache_key = :cache_key"),
                    {"cache_key": key},
                ).mappings().fetchone()
        except SQLAlchemyError as error:
            raise RuntimeError("cache lookup failed") from error

        if row is None:
            return None
        return json.loads(row["payload_json"])

    def cache_set(self, key: str, value: Any) -> None:
        """Upsert JSON payload for key; concurrent writers resolve last-write-wins.

        Args:
            key: Cache key.
            value: JSON-serializable payload.

        Returns:
            None: Persists payload as side effect.

        Raises:
            ValueError: Raised when value is not JSON-serializable.
            RuntimeError: Raised when the write fails.
        """

        try:
            payload_json = json.dumps(value, sort_keys=True)
        except (TypeError, ValueError) as error:
            raise ValueError("cache value must be JSON-serializable") from error

        try:
            with self._engine.begin() as connection:
                connection.execute(
                    text(
                        "INSERT INTO fetch_cache_entry (cache_key, payload_json, updated_at_utc) "
                        "VALUES (:cache_key, :payload_json, :updated_at_utc) "
                        "ON CONFLICT (cache_key) DO UPDATE SET "
                        "payload_json = excluded.payload_json, updated_at_utc = excluded.updated_at_utc"
                    ).bindparams(bindparam("updated_at_utc", type_=DateTime(timezone=True))),
                    {
                        "cache_key": key,
                        "payload_json": payload_json,
                        "updated_at_utc": datetime.now(timezone.utc),
                    },
                )
        except SQLAlchemyError as error:
            raise RuntimeError("cache write failed") from error
