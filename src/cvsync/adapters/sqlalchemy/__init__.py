"""SQLAlchemy adapter package for cvsync."""

from __future__ import annotations

from .mappings import mapper_registry, start_mappers, term_usage_table
from .repositories import SqlAlchemyTermRepository
from .unit_of_work import SqlAlchemyCvUnitOfWork, shutdown, startup

__all__ = [
    "SqlAlchemyCvUnitOfWork",
    "SqlAlchemyTermRepository",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
    "term_usage_table",
]
