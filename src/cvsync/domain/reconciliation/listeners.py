"""Event listeners shipped with the engine."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .events import (
    ObsoleteImpossibleToRemap,
    ObsoleteRemapped,
    TermCreated,
    TermUpdated,
    UpdateError,
)

if TYPE_CHECKING:
    from .errors import UpdateErrorKind
    from .events import CvUpdateEvent


@dataclass(slots=True)
class RunReport:
    """Counts of a reconciliation run plus every term needing manual attention."""

    updated_terms: int = 0
    created_terms: int = 0
    created: int = 0
    updated: int = 0
    deleted: int = 0
    remapped: int = 0
    merged: int = 0
    repointed_references: int = 0
    impossible_to_remap: list[ObsoleteImpossibleToRemap] = field(
        default_factory=list["ObsoleteImpossibleToRemap"]
    )
    errors: list[UpdateError] = field(default_factory=list["UpdateError"])

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def errors_of(self, kind: UpdateErrorKind) -> list[UpdateError]:
        return [error for error in self.errors if error.kind == kind]


@dataclass(slots=True)
class ReportCollector:
    report: RunReport = field(default_factory=RunReport)

    def __call__(self, event: CvUpdateEvent) -> None:
        report = self.report
        match event:
            case TermUpdated():
                report.updated_terms += 1
                report.created += event.created
                report.updated += event.updated
                report.deleted += event.deleted
            case TermCreated():
                report.created_terms += 1
            case ObsoleteRemapped(merged=True):
                report.merged += 1
                report.repointed_references += event.affected_count
            case ObsoleteRemapped():
                report.remapped += 1
            case ObsoleteImpossibleToRemap():
                report.impossible_to_remap.append(event)
            case UpdateError():
                report.errors.append(event)


@dataclass(slots=True)
class LoggingListener:
    """Write one log line per event."""

    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("cvsync.events"))

    def __call__(self, event: CvUpdateEvent) -> None:
        log = self.logger
        match event:
            case TermUpdated():
                log.info(
                    "Updated %s (%s): created=%d updated=%d deleted=%d",
                    event.accession,
                    event.short_label,
                    event.created,
                    event.updated,
                    event.deleted,
                )
            case TermCreated():
                log.info("Created %s (%s)", event.accession, event.short_label)
            case ObsoleteRemapped(merged=True):
                log.info(
                    "Merged obsolete %s into %s, %d references repointed",
                    event.from_accession,
                    event.to_accession,
                    event.affected_count,
                )
            case ObsoleteRemapped():
                log.info("Remapped obsolete %s to %s", event.from_accession, event.to_accession)
            case ObsoleteImpossibleToRemap():
                log.warning(
                    "Obsolete %s cannot be remapped (candidates: %s)",
                    event.accession,
                    ", ".join(event.candidate_terms) or "none",
                )
            case UpdateError():
                subject = event.accession or event.term_id
                log.error("[%s] %s: %s", event.kind, subject, event.message)
