"""Ontology reconciliation engine.

Compares ontology term snapshots with locally stored terms and applies the
resulting create/update/delete decisions through the ``TermRepository`` port.
"""

from __future__ import annotations

from cvsync.domain.reconciliation.context import RunState, TermChanges, UpdateContext
from cvsync.domain.reconciliation.diff import MergeJoin, diff_sorted, merge_join
from cvsync.domain.reconciliation.errors import CvUpdateError, UpdateErrorKind
from cvsync.domain.reconciliation.events import (
    CvUpdateEvent,
    EventBuffer,
    EventDispatcher,
    EventListener,
    EventSink,
    ObsoleteImpossibleToRemap,
    ObsoleteRemapped,
    TermCreated,
    TermUpdated,
    UpdateError,
)
from cvsync.domain.reconciliation.importer import ImportStep, TermImporter
from cvsync.domain.reconciliation.kinds import KindResolver
from cvsync.domain.reconciliation.listeners import LoggingListener, ReportCollector, RunReport
from cvsync.domain.reconciliation.merge import MergeRegistry, RepointFunction, repoint_columns
from cvsync.domain.reconciliation.missing_parents import MissingParentResolver
from cvsync.domain.reconciliation.orchestrator import (
    DEFAULT_EXCLUDED_ROOTS,
    ReconciliationOrchestrator,
)
from cvsync.domain.reconciliation.remapper import ObsoleteRemapper, RemapOutcome
from cvsync.domain.reconciliation.sources import DEFAULT_NAMESPACE_DATABASES, OntologyRegistry
from cvsync.domain.reconciliation.units import UnitRunner
from cvsync.domain.reconciliation.updater import TermUpdater

__all__ = [
    "DEFAULT_EXCLUDED_ROOTS",
    "DEFAULT_NAMESPACE_DATABASES",
    "CvUpdateError",
    "CvUpdateEvent",
    "EventBuffer",
    "EventDispatcher",
    "EventListener",
    "EventSink",
    "ImportStep",
    "KindResolver",
    "LoggingListener",
    "MergeJoin",
    "MergeRegistry",
    "MissingParentResolver",
    "ObsoleteImpossibleToRemap",
    "ObsoleteRemapped",
    "ObsoleteRemapper",
    "OntologyRegistry",
    "ReconciliationOrchestrator",
    "RemapOutcome",
    "ReportCollector",
    "RepointFunction",
    "RunReport",
    "RunState",
    "TermChanges",
    "TermCreated",
    "TermImporter",
    "TermUpdated",
    "TermUpdater",
    "UnitRunner",
    "UpdateContext",
    "UpdateError",
    "UpdateErrorKind",
    "diff_sorted",
    "merge_join",
    "repoint_columns",
]
