"""Cache database reachability reported by the health endpoint."""

from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError

from oracle_relay.domain import HealthStatus

from .interfaces import DatabaseHealthPort


class SQLAlchemyDatabaseHealthService(DatabaseHealthPort):
    """Reports whether the SQL cache database accepts connections."""

    def __init__(self, engine: Engine):
        """Bind the health check to the cache store engine.

        Args:
            engine: Engine opened for the `database` cache backend.

        Raises:
            ValueError: Raised when engine is None.
        """

        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine

    def db_connection_label(self) -> str:
        return self._engine.url.render_as_string(hide_password=True)

    def db_check_health(self) -> HealthStatus:
        """Run `SELECT 1` against the cache database.

        Returns:
            HealthStatus: `ok` when the cache database answered.

        Raises:
            ConnectionError: Raised when the cache database is unreachable.
        """

        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            return HealthStatus(status="ok", detail="database connectivity verified")
        except SQLAlchemyError as error:
            raise ConnectionError("database connectivity check failed") from error


class NoDatabaseHealthService(DatabaseHealthPort):
    """Health service used when no cache database is configured."""

    def db_connection_label(self) -> str:
        return "none"

    def db_check_health(self) -> HealthStatus:
        return HealthStatus(status="disabled", detail="cache backend does not use a database")
