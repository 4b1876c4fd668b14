"""Defaults for reconciliation runs."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Final

from cvsync.domain.reconciliation import DEFAULT_EXCLUDED_ROOTS, DEFAULT_NAMESPACE_DATABASES

from .env import env_flag, env_list

DEFAULT_ONTOLOGIES: Final[tuple[str, ...]] = ("MI", "MOD")


@dataclass(frozen=True, slots=True)
class SyncConfig:
    ontologies: tuple[str, ...] = DEFAULT_ONTOLOGIES
    import_missing: bool = False
    excluded_roots: frozenset[str] = DEFAULT_EXCLUDED_ROOTS
    namespace_databases: Mapping[str, str] = field(
        default_factory=lambda: dict(DEFAULT_NAMESPACE_DATABASES)
    )


def get_sync_config() -> SyncConfig:
    ontologies = env_list("CVSYNC_ONTOLOGIES") or DEFAULT_ONTOLOGIES
    excluded_roots = env_list("CVSYNC_EXCLUDED_ROOTS")
    return SyncConfig(
        ontologies=tuple(ontology.upper() for ontology in ontologies),
        import_missing=env_flag("CVSYNC_IMPORT_MISSING"),
        excluded_roots=(
            frozenset(root.upper() for root in excluded_roots)
            if excluded_roots is not None
            else DEFAULT_EXCLUDED_ROOTS
        ),
    )
