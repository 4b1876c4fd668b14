"""Ports (interfaces) the reconciliation core depends on."""

from __future__ import annotations

from cvsync.domain.ports.ontology import OntologySource
from cvsync.domain.ports.persistence import (
    DuplicateGroup,
    StoreUnavailableError,
    TermRepository,
)
from cvsync.domain.ports.unit_of_work import (
    CvRepositories,
    CvUnitOfWork,
    CvUnitOfWorkFactory,
)

__all__ = [
    "CvRepositories",
    "CvUnitOfWork",
    "CvUnitOfWorkFactory",
    "DuplicateGroup",
    "OntologySource",
    "StoreUnavailableError",
    "TermRepository",
]
