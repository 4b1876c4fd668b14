"""initial CV term schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "cv_term",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("accession", sa.String(length=64), nullable=True),
        sa.Column("short_label", sa.String(), nullable=False),
        sa.Column("kind", sa.String(length=64), nullable=False),
        sa.Column("full_name", sa.Text(), nullable=True),
        sa.Column("obsolete", sa.Boolean(), nullable=False),
        sa.Column("remapped_to", sa.String(length=64), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_cv_term"),
        sa.UniqueConstraint("kind", "short_label", name="uq_cv_term_cv_term_kind"),
    )
    op.create_index("ix_cv_term_accession", "cv_term", ["accession"])

    op.create_table(
        "cv_xref",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("term_id", sa.Uuid(), nullable=False),
        sa.Column("database", sa.String(), nullable=False),
        sa.Column("primary_id", sa.String(), nullable=False),
        sa.Column("qualifier", sa.String(), nullable=True),
        sa.ForeignKeyConstraint(
            ["term_id"],
            ["cv_term.id"],
            name="fk_cv_xref_cv_xref_term_id_cv_term",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_cv_xref"),
    )
    op.create_index("ix_cv_xref_primary_id", "cv_xref", ["primary_id"])

    op.create_table(
        "cv_alias",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("term_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("alias_type", sa.String(), nullable=True),
        sa.ForeignKeyConstraint(
            ["term_id"],
            ["cv_term.id"],
            name="fk_cv_alias_cv_alias_term_id_cv_term",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_cv_alias"),
    )

    op.create_table(
        "cv_annotation",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("term_id", sa.Uuid(), nullable=False),
        sa.Column("topic", sa.String(), nullable=False),
        sa.Column("text", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(
            ["term_id"],
            ["cv_term.id"],
            name="fk_cv_annotation_cv_annotation_term_id_cv_term",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_cv_annotation"),
    )

    op.create_table(
        "cv_term_parent",
        sa.Column("child_id", sa.Uuid(), nullable=False),
        sa.Column("parent_id", sa.Uuid(), nullable=False),
        sa.ForeignKeyConstraint(
            ["child_id"],
            ["cv_term.id"],
            name="fk_cv_term_parent_cv_term_parent_child_id_cv_term",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["parent_id"],
            ["cv_term.id"],
            name="fk_cv_term_parent_cv_term_parent_parent_id_cv_term",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("child_id", "parent_id", name="pk_cv_term_parent"),
    )
    op.create_index("ix_cv_term_parent_parent", "cv_term_parent", ["parent_id"])

    op.create_table(
        "term_usage",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("reference_kind", sa.String(length=64), nullable=False),
        sa.Column("owner_id", sa.Uuid(), nullable=False),
        sa.Column("term_id", sa.Uuid(), nullable=False),
        sa.ForeignKeyConstraint(
            ["term_id"],
            ["cv_term.id"],
            name="fk_term_usage_term_usage_term_id_cv_term",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_term_usage"),
    )
    op.create_index("ix_term_usage_term", "term_usage", ["term_id", "reference_kind"])

    op.create_table(
        "term_merge",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("kind", sa.String(length=64), nullable=False),
        sa.Column("source_id", sa.Uuid(), nullable=False),
        sa.Column("source_accession", sa.String(length=64), nullable=True),
        sa.Column("target_id", sa.Uuid(), nullable=False),
        sa.Column("target_accession", sa.String(length=64), nullable=True),
        sa.Column("affected_count", sa.Integer(), nullable=False),
        sa.Column("reason", sa.String(length=32), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_term_merge"),
    )


def downgrade() -> None:
    op.drop_table("term_merge")
    op.drop_index("ix_term_usage_term", table_name="term_usage")
    op.drop_table("term_usage")
    op.drop_index("ix_cv_term_parent_parent", table_name="cv_term_parent")
    op.drop_table("cv_term_parent")
    op.drop_table("cv_annotation")
    op.drop_table("cv_alias")
    op.drop_index("ix_cv_xref_primary_id", table_name="cv_xref")
    op.drop_table("cv_xref")
    op.drop_index("ix_cv_term_accession", table_name="cv_term")
    op.drop_table("cv_term")
