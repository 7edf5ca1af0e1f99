"""Initial schema: politicians, parties, mandates, affairs, links and audit rows.

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

ENUM_LENGTH = 32


def _created_at() -> sa.Column[object]:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.text("(CURRENT_TIMESTAMP)"),
    )


def upgrade() -> None:
    op.create_table(
        "politician",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("full_name", sa.String(), nullable=False),
        sa.Column("first_name", sa.String(), nullable=True),
        sa.Column("last_name", sa.String(), nullable=True),
        sa.Column("birth_date", sa.Date(), nullable=True),
        sa.Column("death_date", sa.Date(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_politician"),
    )
    op.create_table(
        "party",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("short_name", sa.String(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_party"),
    )
    op.create_table(
        "mandate",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("politician_id", sa.Uuid(), nullable=False),
        sa.Column("mandate_type", sa.String(length=ENUM_LENGTH), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("is_current", sa.Boolean(), nullable=False),
        sa.Column("institution", sa.String(), nullable=True),
        sa.Column("constituency", sa.String(), nullable=True),
        sa.Column("department_code", sa.String(length=3), nullable=True),
        sa.Column("source", sa.String(length=ENUM_LENGTH), nullable=True),
        sa.Column("external_id", sa.String(), nullable=True),
        sa.Column("needs_review", sa.Boolean(), nullable=False),
        _created_at(),
        sa.ForeignKeyConstraint(
            ["politician_id"],
            ["politician.id"],
            name="fk_mandate_politician_id_politician",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_mandate"),
    )
    op.create_index(
        "ix_mandate_politician_type", "mandate", ["politician_id", "mandate_type"]
    )
    op.create_table(
        "affair",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("politician_id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("category", sa.String(length=ENUM_LENGTH), nullable=False),
        sa.Column("fact_date", sa.Date(), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("verdict_date", sa.Date(), nullable=True),
        sa.Column("ecli", sa.String(), nullable=True),
        sa.Column("pourvoi_number", sa.String(), nullable=True),
        sa.Column("case_numbers", sa.String(), nullable=False),
        _created_at(),
        sa.ForeignKeyConstraint(
            ["politician_id"],
            ["politician.id"],
            name="fk_affair_politician_id_politician",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_affair"),
    )
    op.create_index("ix_affair_politician", "affair", ["politician_id"])

    for table, columns in (
        (
            "affair_source",
            [
                sa.Column("url", sa.String(), nullable=False),
                sa.Column("title", sa.String(), nullable=True),
                sa.Column("publisher", sa.String(), nullable=True),
                sa.Column("published_at", sa.Date(), nullable=True),
            ],
        ),
        (
            "affair_event",
            [
                sa.Column("occurred_on", sa.Date(), nullable=False),
                sa.Column("description", sa.String(), nullable=False),
            ],
        ),
        (
            "affair_press_link",
            [
                sa.Column("article_id", sa.String(), nullable=False),
                sa.Column("url", sa.String(), nullable=True),
            ],
        ),
    ):
        op.create_table(
            table,
            sa.Column("id", sa.Uuid(), nullable=False),
            sa.Column("affair_id", sa.Uuid(), nullable=False),
            *columns,
            sa.ForeignKeyConstraint(
                ["affair_id"],
                ["affair.id"],
                name=f"fk_{table}_affair_id_affair",
                ondelete="CASCADE",
            ),
            sa.PrimaryKeyConstraint("id", name=f"pk_{table}"),
        )

    op.create_table(
        "dismissed_duplicate",
        sa.Column("first_id", sa.Uuid(), nullable=False),
        sa.Column("second_id", sa.Uuid(), nullable=False),
        _created_at(),
        sa.Column("created_by", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint("first_id", "second_id", name="pk_dismissed_duplicate"),
    )
    op.create_table(
        "entity_merge",
        sa.Column("entity_type", sa.String(length=ENUM_LENGTH), nullable=False),
        sa.Column("source_id", sa.Uuid(), nullable=False),
        sa.Column("target_id", sa.Uuid(), nullable=False),
        sa.Column("reason", sa.String(length=ENUM_LENGTH), nullable=False),
        _created_at(),
        sa.Column("created_by", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint(
            "entity_type", "source_id", "target_id", name="pk_entity_merge"
        ),
    )
    op.create_table(
        "external_link",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("source", sa.String(length=ENUM_LENGTH), nullable=False),
        sa.Column("external_id", sa.String(), nullable=False),
        sa.Column("owner_type", sa.String(length=ENUM_LENGTH), nullable=False),
        sa.Column("owner_id", sa.Uuid(), nullable=False),
        sa.Column("confidence", sa.Float(), nullable=False),
        sa.Column("matched_by", sa.String(length=ENUM_LENGTH), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_external_link"),
        sa.UniqueConstraint(
            "source", "external_id", "owner_type", name="uq_external_link_identity"
        ),
        sa.UniqueConstraint(
            "owner_type", "owner_id", "source", name="uq_external_link_owner_source"
        ),
    )
    op.create_index("ix_external_link_owner", "external_link", ["owner_type", "owner_id"])


def downgrade() -> None:
    op.drop_index("ix_external_link_owner", table_name="external_link")
    op.drop_table("external_link")
    op.drop_table("entity_merge")
    op.drop_table("dismissed_duplicate")
    for table in ("affair_press_link", "affair_event", "affair_source"):
        op.drop_table(table)
    op.drop_index("ix_affair_politician", table_name="affair")
    op.drop_table("affair")
    op.drop_index("ix_mandate_politician_type", table_name="mandate")
    op.drop_table("mandate")
    op.drop_table("party")
    op.drop_table("politician")
