"""Initial schema: alias catalog, correlations and audit log.

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-18 09:00:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

from tripmatch.adapters.sqlalchemy.mappings import (
    QualityFlagSetType,
    SignalScoreListType,
    StringTupleType,
    UTCDateTime,
)
from tripmatch.domain.model import AuditAction, EntityKind, QualityTier

revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "alias_entry",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("entity_kind", sa.Enum(EntityKind, native_enum=False), nullable=False),
        sa.Column("canonical_id", sa.String(), nullable=False),
        sa.Column("alias_text", sa.String(), nullable=False),
        sa.Column("alias_kind", sa.String(), nullable=True),
        sa.Column("confidence_boost", sa.Integer(), nullable=False),
        sa.Column("exact_match_required", sa.Boolean(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_alias_entry")),
        sa.UniqueConstraint(
            "entity_kind",
            "canonical_id",
            "alias_text",
            name=op.f("uq_alias_entry_alias_entry_entity_kind"),
        ),
    )
    op.create_index(
        "ix_alias_entry_kind_alias_text", "alias_entry", ["entity_kind", "alias_text"]
    )

    op.create_table(
        "correlation",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("trip_id", sa.String(), nullable=False),
        sa.Column("payment_key", sa.String(), nullable=False),
        sa.Column("algorithm_version", sa.String(), nullable=False),
        sa.Column("signal_scores", SignalScoreListType(), nullable=False),
        sa.Column("confidence_score", sa.Integer(), nullable=False),
        sa.Column("quality_tier", sa.Enum(QualityTier, native_enum=False), nullable=False),
        sa.Column("quality_flags", QualityFlagSetType(), nullable=False),
        sa.Column("business_identifier_match", sa.Boolean(), nullable=False),
        sa.Column("location_reference_match", sa.Boolean(), nullable=False),
        sa.Column("within_service_area", sa.Boolean(), nullable=False),
        sa.Column("terminal_distance_km", sa.Float(), nullable=True),
        sa.Column("date_difference_days", sa.Integer(), nullable=True),
        sa.Column("requires_manual_review", sa.Boolean(), nullable=False),
        sa.Column("customer_name", sa.String(), nullable=True),
        sa.Column("terminal_name", sa.String(), nullable=True),
        sa.Column("carrier", sa.String(), nullable=True),
        sa.Column("verified_by_user", sa.Boolean(), nullable=False),
        sa.Column("is_active_match", sa.Boolean(), nullable=False),
        sa.Column("reviewed_by", sa.String(), nullable=True),
        sa.Column("reviewed_at", UTCDateTime(), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.Column("updated_at", UTCDateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_correlation")),
    )
    op.create_index(
        "ix_correlation_pair", "correlation", ["trip_id", "payment_key", "algorithm_version"]
    )
    op.create_index("ix_correlation_created_at", "correlation", ["created_at"])

    op.create_table(
        "audit_entry",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("correlation_id", sa.Uuid(), nullable=False),
        sa.Column("trip_id", sa.String(), nullable=False),
        sa.Column("payment_key", sa.String(), nullable=False),
        sa.Column("action", sa.Enum(AuditAction, native_enum=False), nullable=False),
        sa.Column("changed_fields", StringTupleType(), nullable=False),
        sa.Column("old_values", sa.JSON(), nullable=True),
        sa.Column("new_values", sa.JSON(), nullable=True),
        sa.Column("old_confidence", sa.Integer(), nullable=True),
        sa.Column("new_confidence", sa.Integer(), nullable=True),
        sa.Column("confidence_delta", sa.Integer(), nullable=True),
        sa.Column("actor_id", sa.String(), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("algorithm_version", sa.String(), nullable=True),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_audit_entry")),
    )
    op.create_index("ix_audit_entry_correlation", "audit_entry", ["correlation_id", "id"])


def downgrade() -> None:
    op.drop_index("ix_audit_entry_correlation", table_name="audit_entry")
    op.drop_table("audit_entry")
    op.drop_index("ix_correlation_created_at", table_name="correlation")
    op.drop_index("ix_correlation_pair", table_name="correlation")
    op.drop_table("correlation")
    op.drop_index("ix_alias_entry_kind_alias_text", table_name="alias_entry")
    op.drop_table("alias_entry")
