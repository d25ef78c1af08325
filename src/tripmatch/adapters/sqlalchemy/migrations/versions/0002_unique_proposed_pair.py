"""Allow one proposed correlation per pair and algorithm version.

Revision ID: 0002_unique_proposed_pair
Revises: 0001_initial_schema
Create Date: 2026-10-19 10:30:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

from tripmatch.adapters.sqlalchemy.mappings import PROPOSED_POSTGRESQL, PROPOSED_SQLITE

revision = "0002_unique_proposed_pair"
down_revision = "0001_initial_schema"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_index(
        "uq_correlation_proposed_pair",
        "correlation",
        ["trip_id", "payment_key", "algorithm_version"],
        unique=True,
        sqlite_where=sa.text(PROPOSED_SQLITE),
        postgresql_where=sa.text(PROPOSED_POSTGRESQL),
    )


def downgrade() -> None:
    op.drop_index("uq_correlation_proposed_pair", table_name="correlation")
