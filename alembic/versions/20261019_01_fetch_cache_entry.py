"""Fetch cache entry table

Revision ID: 20261019_01
Revises:
Create Date: 2026-10-19
"""
# pylint: disable=no-member,invalid-name,wrong-import-order

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20261019_01"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""

    op.create_table(
        "fetch_cache_entry",
        sa.Column("cache_key", sa.Text(), primary_key=True),
        sa.Column("payload_json", sa.Text(), nullable=False),
        sa.Column("updated_at_utc", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_fetch_cache_entry_updated_at_utc", "fetch_cache_entry", ["updated_at_utc"])


def downgrade() -> None:
    """Downgrade schema."""

    op.drop_index("ix_fetch_cache_entry_updated_at_utc", table_name="fetch_cache_entry")
    op.drop_table("fetch_cache_entry")
