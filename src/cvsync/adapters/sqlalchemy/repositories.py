"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import func, or_, select, update

from cvsync.adapters.sqlalchemy.mappings import (
    term_parent_table,
    term_table,
    term_usage_table,
    xref_table,
)
from cvsync.domain.model import Qualifier, Term
from cvsync.domain.ports import DuplicateGroup

if TYPE_CHECKING:
    from sqlalchemy.engine import CursorResult
    from sqlalchemy.orm import Session

    from cvsync.domain.model import ReferenceKind, TermKind, TermMerge


class SqlAlchemyTermRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Term) -> None:
        self.session.add(entity)

    def remove(self, term: Term) -> None:
        self.session.delete(term)

    def get(self, term_id: uuid.UUID) -> Term | None:
        return self.session.get(Term, term_id)

    def get_by_identifier(self, accession: str) -> Term | None:
        wanted = accession.upper()
        stmt = (
            select(Term)
            .where(func.upper(term_table.c.accession) == wanted)
            .order_by(term_table.c.id)
            .limit(1)
        )
        term = self.session.execute(stmt).scalar_one_or_none()
        if term is not None:
            return term

        owner_stmt = (
            select(xref_table.c.term_id)
            .where(func.upper(xref_table.c.primary_id) == wanted)
            .where(xref_table.c.qualifier == Qualifier.IDENTITY)
            .order_by(xref_table.c.term_id)
            .limit(1)
        )
        term_id = self.session.execute(owner_stmt).scalar_one_or_none()
        if not isinstance(term_id, uuid.UUID):
            return None
        return self.session.get(Term, term_id)

    def get_by_short_label(self, short_label: str, *, kind: TermKind) -> Term | None:
        stmt = (
            select(Term)
            .where(term_table.c.kind == kind)
            .where(func.lower(term_table.c.short_label) == short_label.lower())
            .limit(1)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def short_labels_like(self, prefix: str, *, kind: TermKind) -> list[str]:
        """Short labels of ``kind`` that extend ``prefix`` with a ``-`` suffix."""

        label = func.lower(term_table.c.short_label)
        stmt = (
            select(term_table.c.short_label)
            .where(term_table.c.kind == kind)
            .where(label.startswith(f"{prefix.lower()}-", autoescape=True))
        )
        return list(self.session.execute(stmt).scalars())

    def children_of(self, term: Term) -> list[Term]:
        stmt = (
            select(Term)
            .join(term_parent_table, term_parent_table.c.child_id == term_table.c.id)
            .where(term_parent_table.c.parent_id == term.id)
            .order_by(term_table.c.accession, term_table.c.id)
        )
        return list(self.session.execute(stmt).scalars())

    def term_ids_for_ontology(self, *, database: str, prefix: str) -> list[uuid.UUID]:
        """Terms with an identity in ``database`` or an accession starting with ``prefix``."""

        identity_owners = (
            select(xref_table.c.term_id)
            .where(func.lower(xref_table.c.database) == database.lower())
            .where(xref_table.c.qualifier == Qualifier.IDENTITY)
        )
        stmt = (
            select(term_table.c.id)
            .where(
                or_(
                    term_table.c.id.in_(identity_owners),
                    func.upper(term_table.c.accession).startswith(
                        prefix.upper(), autoescape=True
                    ),
                )
            )
            .order_by(term_table.c.accession, term_table.c.id)
        )
        return list(self.session.execute(stmt).scalars())

    def find_duplicates(self, *, prefix: str) -> list[DuplicateGroup]:
        accession = func.upper(term_table.c.accession)
        groups_stmt = (
            select(accession)
            .where(accession.startswith(prefix.upper(), autoescape=True))
            .group_by(accession)
            .having(func.count(term_table.c.id) > 1)
            .order_by(accession)
        )
        groups: list[DuplicateGroup] = []
        for shared in self.session.execute(groups_stmt).scalars():
            ids_stmt = (
                select(term_table.c.id).where(accession == shared).order_by(term_table.c.id)
            )
            term_ids = tuple(self.session.execute(ids_stmt).scalars())
            groups.append(DuplicateGroup(accession=shared, term_ids=term_ids))
        return groups

    def repoint_references(self, kind: ReferenceKind, source: Term, target: Term) -> int:
        stmt = (
            update(term_usage_table)
            .where(term_usage_table.c.term_id == source.id)
            .where(term_usage_table.c.reference_kind == kind)
            .values(term_id=target.id)
        )
        result = cast("CursorResult[Any]", self.session.execute(stmt))
        return result.rowcount

    def count_references(self, term: Term) -> int:
        stmt = (
            select(func.count())
            .select_from(term_usage_table)
            .where(term_usage_table.c.term_id == term.id)
        )
        return self.session.execute(stmt).scalar_one()

    def record_merge(self, merge: TermMerge) -> None:
        self.session.add(merge)


if TYPE_CHECKING:
    from cvsync.domain.ports import TermRepository

    _session_stub = cast("Session", object())
    _term_repo_check: TermRepository = SqlAlchemyTermRepository(_session_stub)
