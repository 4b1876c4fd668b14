"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from cvsync.adapters.ols import build_ols_sources
from cvsync.adapters.sqlalchemy.unit_of_work import SqlAlchemyCvUnitOfWork, is_started, startup
from cvsync.config import get_ols_config, get_sync_config
from cvsync.domain.reconciliation import (
    LoggingListener,
    OntologyRegistry,
    ReconciliationOrchestrator,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from cvsync.config import OlsConfig, SyncConfig
    from cvsync.domain.ports import CvUnitOfWorkFactory
    from cvsync.domain.reconciliation import RunReport


log = getLogger(__name__)


def build_ols_registry(
    ontology_ids: Sequence[str],
    *,
    ols_config: OlsConfig | None = None,
    sync_config: SyncConfig | None = None,
) -> OntologyRegistry:
    """Registry with one OLS-backed source per ontology id."""

    effective_sync = sync_config or get_sync_config()
    sources = build_ols_sources(ols_config or get_ols_config(), ontology_ids)
    return OntologyRegistry(sources, namespace_databases=effective_sync.namespace_databases)


def _build_orchestrator(
    sources: OntologyRegistry,
    unit_of_work_factory: CvUnitOfWorkFactory | None,
    sync_config: SyncConfig,
) -> ReconciliationOrchestrator:
    if unit_of_work_factory is None and not is_started():
        startup()
    return ReconciliationOrchestrator(
        sources,
        unit_of_work_factory or SqlAlchemyCvUnitOfWork,
        excluded_roots=sync_config.excluded_roots,
        listeners=[LoggingListener()],
    )


def reconcile_ontologies(
    ontology_ids: Sequence[str] | None = None,
    *,
    import_missing: bool | None = None,
    sources: OntologyRegistry | None = None,
    unit_of_work_factory: CvUnitOfWorkFactory | None = None,
    sync_config: SyncConfig | None = None,
) -> RunReport:
    """Reconcile the local term store against the configured ontologies."""

    config = sync_config or get_sync_config()
    selected = tuple(ontology_ids) if ontology_ids else config.ontologies
    effective_import = config.import_missing if import_missing is None else import_missing
    registry = sources or build_ols_registry(selected, sync_config=config)
    orchestrator = _build_orchestrator(registry, unit_of_work_factory, config)

    log.info(
        "Starting reconciliation: ontologies=%s, import_missing=%s",
        ", ".join(selected),
        effective_import,
    )
    report = orchestrator.run(selected, import_missing=effective_import)
    log.info(
        f"Finished reconciliation: updated={report.updated_terms}, "
        f"created={report.created_terms}, remapped={report.remapped}, "
        f"merged={report.merged}, errors={len(report.errors)}"
    )
    return report


def import_term(
    accession: str,
    *,
    ontology_id: str | None = None,
    include_children: bool = False,
    sources: OntologyRegistry | None = None,
    unit_of_work_factory: CvUnitOfWorkFactory | None = None,
    sync_config: SyncConfig | None = None,
) -> RunReport:
    """Create one ontology term locally, optionally with its missing descendants."""

    config = sync_config or get_sync_config()
    selected = (ontology_id,) if ontology_id is not None else config.ontologies
    registry = sources or build_ols_registry(selected, sync_config=config)
    orchestrator = _build_orchestrator(registry, unit_of_work_factory, config)

    log.info("Importing %s (children=%s)", accession, include_children)
    report = orchestrator.import_term(
        accession,
        ontology_id=ontology_id,
        include_children=include_children,
    )
    log.info(f"Finished import: created={report.created_terms}, errors={len(report.errors)}")
    return report
