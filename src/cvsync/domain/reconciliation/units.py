"""Failure-isolated units of work.

Each term (or missing parent, or imported term) is processed inside its own
unit of work. Domain errors and unexpected exceptions are turned into
``UpdateError`` events and the run continues; only an unreachable store
propagates. A failed unit leaves no trace: its transaction is rolled back,
its buffered events are dropped and the run state it touched is restored.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from cvsync.domain.ports import StoreUnavailableError

from .errors import CvUpdateError, UpdateErrorKind
from .events import EventBuffer, UpdateError

if TYPE_CHECKING:
    from uuid import UUID

    from cvsync.domain.ports import CvUnitOfWorkFactory, TermRepository

    from .context import RunState
    from .events import EventSink

log = getLogger(__name__)

type UnitWork[T] = Callable[[TermRepository, EventBuffer], T]


@dataclass(slots=True)
class UnitRunner:
    unit_of_work_factory: CvUnitOfWorkFactory
    events: EventSink

    def run[T](
        self,
        work: UnitWork[T],
        *,
        accession: str | None = None,
        term_id: UUID | None = None,
        state: RunState | None = None,
    ) -> T | None:
        """Run ``work`` in a fresh unit of work and commit it.

        Events emitted by ``work`` reach the listeners only after the commit.
        Returns None when the unit failed, after putting ``state`` back to
        what it was before ``work`` started.
        """

        checkpoint = state.checkpoint() if state is not None else None
        buffer = EventBuffer()
        try:
            with self.unit_of_work_factory() as uow:
                result = work(uow.repositories.terms, buffer)
                uow.commit()
        except StoreUnavailableError:
            raise
        except CvUpdateError as exc:
            self._discard(buffer, state, checkpoint)
            log.warning("%s: %s", exc.kind, exc.message)
            self.events.emit(exc.to_event(accession=accession, term_id=term_id))
            return None
        except Exception as exc:  # noqa: BLE001
            self._discard(buffer, state, checkpoint)
            log.exception("Unexpected failure while processing %s", accession or term_id)
            self.events.emit(
                UpdateError(
                    kind=UpdateErrorKind.FATAL,
                    message=f"{type(exc).__name__}: {exc}",
                    accession=accession,
                    term_id=term_id,
                )
            )
            return None
        buffer.flush(self.events)
        return result

    @staticmethod
    def _discard(
        buffer: EventBuffer,
        state: RunState | None,
        checkpoint: RunState | None,
    ) -> None:
        buffer.discard()
        if state is not None and checkpoint is not None:
            state.restore(checkpoint)
