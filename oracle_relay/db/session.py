"""Engine construction for the SQL fetch cache.

Only the `database` cache backend and migration tooling open an engine.
"""

from sqlalchemy import Engine, create_engine

SQLITE_BUSY_TIMEOUT_SECONDS = 30


def db_create_engine(database_url: str) -> Engine:
    """Open an engine for cached fetch payloads.

    SQLite engines accept connections from any thread and wait on locked
    writes instead of failing, since cache calls arrive from
    `asyncio.to_thread` workers.

    Args:
        database_url: SQLAlchemy URL of the cache database.

    Returns:
        Engine: Engine shared by the cache store and its health check.

    Raises:
        ValueError: Raised when the database URL is blank.
    """

    normalized_database_url = database_url.strip()
    if not normalized_database_url:
        raise ValueError("database_url must not be blank")

    if normalized_database_url.startswith("sqlite"):
        return create_engine(
            normalized_database_url,
            connect_args={"check_same_thread": False, "timeout": SQLITE_BUSY_TIMEOUT_SECONDS},
        )
    return create_engine(normalized_database_url, pool_pre_ping=True)
