"""Database layer package for all SQL and persistence boundaries."""

from .cache_store import SQLAlchemyCacheStore
from .health import NoDatabaseHealthService, SQLAlchemyDatabaseHealthService
from .interfaces import DatabaseHealthPort
from .schema import DB_METADATA, fetch_cache_entry_table
from .session import db_create_engine

__all__ = [
	"DB_METADATA",
	"DatabaseHealthPort",
	"NoDatabaseHealthService",
	"SQLAlchemyCacheStore",
	"SQLAlchemyDatabaseHealthService",
	"db_create_engine",
	"fetch_cache_entry_table",
]
