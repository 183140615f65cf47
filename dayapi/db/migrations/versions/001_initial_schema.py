"""
Initial schema: create the DayData table and its two indexes.

The composite primary key ("TimeStamp", "Serial") is the conflict target
for ingestion upserts. Secondary indexes on "TimeStamp" and "Power" back
the today-window and max-power read queries.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create DayData with its primary key and indexes."""
    op.create_table(
        "DayData",
        sa.Column("TimeStamp", sa.BigInteger(), nullable=False, autoincrement=False),
        sa.Column("Serial", sa.Text(), nullable=False),
        sa.Column("Power", sa.Double(), nullable=False),
        sa.Column("TotalYield", sa.Double(), nullable=False),
        sa.Column("LastChangedAt", sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint("TimeStamp", "Serial"),
        if_not_exists=True,
    )
    op.create_index(
        "idx_DayData_TimeStamp", "DayData", ["TimeStamp"], if_not_exists=True
    )
    op.create_index("idx_DayData_Power", "DayData", ["Power"], if_not_exists=True)


def downgrade() -> None:
    """Drop DayData and its indexes."""
    op.drop_index("idx_DayData_Power", table_name="DayData")
    op.drop_index("idx_DayData_TimeStamp", table_name="DayData")
    op.drop_table("DayData")
