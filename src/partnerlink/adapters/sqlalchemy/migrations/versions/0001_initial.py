"""Partner registry and external mappings.

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "partner",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("brand_name", sa.String(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_partner"),
    )
    op.create_index("ix_partner_brand_name", "partner", ["brand_name"])

    op.create_table(
        "external_mapping",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("entity_type", sa.String(length=16), nullable=False),
        sa.Column("entity_id", sa.Uuid(), nullable=False),
        sa.Column("source", sa.String(length=32), nullable=False),
        sa.Column("external_id", sa.String(), nullable=False),
        sa.Column("metadata", sa.JSON(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=True,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=True,
            server_default=sa.func.now(),
        ),
        sa.ForeignKeyConstraint(
            ["entity_id"],
            ["partner.id"],
            name="fk_external_mapping_entity_id_partner",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_external_mapping"),
        sa.UniqueConstraint(
            "source",
            "external_id",
            name="uq_external_mapping_source_external_id",
        ),
    )
    op.create_index(
        "ix_external_mapping_entity_source",
        "external_mapping",
        ["entity_id", "source"],
    )


def downgrade() -> None:
    op.drop_index("ix_external_mapping_entity_source", table_name="external_mapping")
    op.drop_table("external_mapping")
    op.drop_index("ix_partner_brand_name", table_name="partner")
    op.drop_table("partner")
