"""SQLAlchemy mapping metadata for the CV domain model."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from functools import cache

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)
from sqlalchemy.orm import configure_mappers, relationship

from cvsync.domain.model import (
    Alias,
    Annotation,
    CrossReference,
    MergeReason,
    ReferenceKind,
    Term,
    TermKind,
    TermMerge,
)

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Term aggregate ----------------------------------------------------------------

term_table = Table(
    "cv_term",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("accession", String(64), nullable=True),
    Column("short_label", String, nullable=False),
    Column("kind", Enum(TermKind, native_enum=False, length=64), nullable=False),
    Column("full_name", Text, nullable=True),
    Column("obsolete", Boolean, nullable=False, default=False),
    Column("remapped_to", String(64), nullable=True),
    UniqueConstraint("kind", "short_label"),
    Index("ix_cv_term_accession", "accession"),
)

xref_table = Table(
    "cv_xref",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "term_id", UUIDColumnType, ForeignKey("cv_term.id", ondelete="CASCADE"), nullable=False
    ),
    Column("database", String, nullable=False),
    Column("primary_id", String, nullable=False),
    Column("qualifier", String, nullable=True),
    Index("ix_cv_xref_primary_id", "primary_id"),
)

alias_table = Table(
    "cv_alias",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "term_id", UUIDColumnType, ForeignKey("cv_term.id", ondelete="CASCADE"), nullable=False
    ),
    Column("name", String, nullable=False),
    Column("alias_type", String, nullable=True),
)

annotation_table = Table(
    "cv_annotation",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "term_id", UUIDColumnType, ForeignKey("cv_term.id", ondelete="CASCADE"), nullable=False
    ),
    Column("topic", String, nullable=False),
    Column("text", Text, nullable=True),
)

term_parent_table = Table(
    "cv_term_parent",
    mapper_registry.metadata,
    Column(
        "child_id", UUIDColumnType, ForeignKey("cv_term.id", ondelete="CASCADE"), primary_key=True
    ),
    Column(
        "parent_id", UUIDColumnType, ForeignKey("cv_term.id", ondelete="CASCADE"), primary_key=True
    ),
    Index("ix_cv_term_parent_parent", "parent_id"),
)

# References held by the rest of the database --------------------------------

term_usage_table = Table(
    "term_usage",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("reference_kind", Enum(ReferenceKind, native_enum=False, length=64), nullable=False),
    Column("owner_id", UUIDColumnType, nullable=False),
    Column("term_id", UUIDColumnType, ForeignKey("cv_term.id"), nullable=False),
    Index("ix_term_usage_term", "term_id", "reference_kind"),
)

term_merge_table = Table(
    "term_merge",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("kind", Enum(TermKind, native_enum=False, length=64), nullable=False),
    Column("source_id", UUIDColumnType, nullable=False),
    Column("source_accession", String(64), nullable=True),
    Column("target_id", UUIDColumnType, nullable=False),
    Column("target_accession", String(64), nullable=True),
    Column("affected_count", Integer, nullable=False, default=0),
    Column("reason", Enum(MergeReason, native_enum=False, length=32), nullable=False),
    Column("created_at", UTCDateTime(), nullable=False),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(CrossReference, xref_table)
    mapper_registry.map_imperatively(Alias, alias_table)
    mapper_registry.map_imperatively(Annotation, annotation_table)

    mapper_registry.map_imperatively(
        Term,
        term_table,
        properties={
            "_xrefs": relationship(CrossReference, cascade="all, delete-orphan"),
            "_aliases": relationship(Alias, cascade="all, delete-orphan"),
            "_annotations": relationship(Annotation, cascade="all, delete-orphan"),
            "_parents": relationship(
                Term,
                secondary=term_parent_table,
                primaryjoin=term_table.c.id == term_parent_table.c.child_id,
                secondaryjoin=term_table.c.id == term_parent_table.c.parent_id,
            ),
        },
    )

    mapper_registry.map_imperatively(TermMerge, term_merge_table)

    configure_mappers()
    return mapper_registry

