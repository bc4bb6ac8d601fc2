"""SQLAlchemy table metadata for cache persistence."""

from sqlalchemy import Column, DateTime, Index, MetaData, Table, Text

DB_METADATA = MetaData()

fetch_cache_entry_table = Table(
    "fetch_cache_entry",
    DB_METADATA,
    Column("cache_key", Text(), primary_key=True),
    Column("payload_json", Text(), nullable=False),
    Column("updated_at_utc", DateTime(timezone=True), nullable=False),
    Index("ix_fetch_cache_entry_updated_at_utc", "updated_at_utc"),
)
