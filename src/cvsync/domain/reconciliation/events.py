"""Events emitted during a reconciliation run and their dispatch.

Stages never talk to listeners directly. They emit into an ``EventSink``;
the orchestrator buffers the events of one unit of work and publishes them
only once that unit has committed.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from uuid import UUID

    from cvsync.domain.model import Alias, Annotation, CrossReference, TermKind

    from .errors import UpdateErrorKind

log = getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class TermUpdated:
    accession: str | None
    term_id: UUID
    short_label: str
    updated_label: bool = False
    updated_full_name: bool = False
    updated_identifier: bool = False
    updated_status: bool = False
    created_xrefs: tuple[CrossReference, ...] = ()
    updated_xrefs: tuple[CrossReference, ...] = ()
    deleted_xrefs: tuple[CrossReference, ...] = ()
    created_aliases: tuple[Alias, ...] = ()
    updated_aliases: tuple[Alias, ...] = ()
    deleted_aliases: tuple[Alias, ...] = ()
    created_annotations: tuple[Annotation, ...] = ()
    updated_annotations: tuple[Annotation, ...] = ()
    deleted_annotations: tuple[Annotation, ...] = ()
    created_parents: tuple[str, ...] = ()
    deleted_parents: tuple[str, ...] = ()

    @property
    def created(self) -> int:
        return (
            len(self.created_xrefs)
            + len(self.created_aliases)
            + len(self.created_annotations)
            + len(self.created_parents)
        )

    @property
    def updated(self) -> int:
        flags = (
            self.updated_label,
            self.updated_full_name,
            self.updated_identifier,
            self.updated_status,
        )
        return (
            sum(flags)
            + len(self.updated_xrefs)
            + len(self.updated_aliases)
            + len(self.updated_annotations)
        )

    @property
    def deleted(self) -> int:
        return (
            len(self.deleted_xrefs)
            + len(self.deleted_aliases)
            + len(self.deleted_annotations)
            + len(self.deleted_parents)
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class TermCreated:
    accession: str
    term_id: UUID
    short_label: str
    kind: TermKind


@dataclass(frozen=True, slots=True, kw_only=True)
class UpdateError:
    kind: UpdateErrorKind
    message: str
    accession: str | None = None
    term_id: UUID | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class ObsoleteRemapped:
    from_accession: str | None
    to_accession: str
    term_id: UUID
    affected_count: int = 0
    merged: bool = False
    target_id: UUID | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class ObsoleteImpossibleToRemap:
    accession: str
    term_id: UUID
    candidate_terms: tuple[str, ...] = ()
    message: str | None = None


type CvUpdateEvent = (
    TermUpdated | TermCreated | UpdateError | ObsoleteRemapped | ObsoleteImpossibleToRemap
)
type EventListener = Callable[[CvUpdateEvent], None]


class EventSink(Protocol):
    def emit(self, event: CvUpdateEvent) -> None: ...


@dataclass(slots=True)
class EventDispatcher:
    """Fan events out to every subscribed listener, in subscription order."""

    listeners: list[EventListener] = field(default_factory=list["EventListener"])

    def subscribe(self, listener: EventListener) -> None:
        self.listeners.append(listener)

    def unsubscribe(self, listener: EventListener) -> None:
        self.listeners.remove(listener)

    def emit(self, event: CvUpdateEvent) -> None:
        for listener in self.listeners:
            listener(event)


@dataclass(slots=True)
class EventBuffer:
    """Holds the events of one unit of work until it commits."""

    events: list[CvUpdateEvent] = field(default_factory=list["CvUpdateEvent"])

    def emit(self, event: CvUpdateEvent) -> None:
        self.events.append(event)

    def flush(self, sink: EventSink) -> None:
        pending, self.events = self.events, []
        for event in pending:
            sink.emit(event)

    def discard(self) -> int:
        dropped = len(self.events)
        if dropped:
            log.debug("Discarding %d events of a failed unit", dropped)
        self.events = []
        return dropped
