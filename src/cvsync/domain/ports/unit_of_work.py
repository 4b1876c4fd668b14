"""Transaction boundary the reconciliation stages run in."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from cvsync.domain.ports.persistence import TermRepository


@dataclass(slots=True)
class CvRepositories:
    """Repositories reachable from inside a unit of work."""

    terms: TermRepository


@runtime_checkable
class CvUnitOfWork(Protocol):
    """One transaction over the term store.

    Entering opens it; ``commit()`` makes the changes durable. Leaving the
    block with an exception discards everything since the last commit.
    """

    @property
    def repositories(self) -> CvRepositories: ...

    def __enter__(self) -> CvUnitOfWork: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


type CvUnitOfWorkFactory = Callable[[], CvUnitOfWork]
