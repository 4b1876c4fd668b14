"""Mapping of ontology branches to term kinds."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

from cvsync.domain.model import TermKind

if TYPE_CHECKING:
    from cvsync.domain.model import TermSnapshot
    from cvsync.domain.ports import OntologySource

DEFAULT_KINDS_BY_ACCESSION: Final[Mapping[str, TermKind]] = {
    "MI:0001": TermKind.INTERACTION_DETECTION_METHOD,
    "MI:0002": TermKind.PARTICIPANT_IDENTIFICATION_METHOD,
    "MI:0003": TermKind.FEATURE_DETECTION_METHOD,
    "MI:0116": TermKind.FEATURE_TYPE,
    "MI:0190": TermKind.INTERACTION_TYPE,
    "MI:0300": TermKind.ALIAS_TYPE,
    "MI:0313": TermKind.INTERACTOR_TYPE,
    "MI:0333": TermKind.FUZZY_TYPE,
    "MI:0346": TermKind.EXPERIMENTAL_PREPARATION,
    "MI:0353": TermKind.QUALIFIER,
    "MI:0444": TermKind.DATABASE,
    "MI:0495": TermKind.EXPERIMENTAL_ROLE,
    "MI:0500": TermKind.BIOLOGICAL_ROLE,
    "MI:0590": TermKind.TOPIC,
    "MI:0640": TermKind.PARAMETER_TYPE,
    "MI:0647": TermKind.PARAMETER_UNIT,
    "MI:1064": TermKind.CONFIDENCE_TYPE,
    "MOD:00000": TermKind.FEATURE_TYPE,
}

DEFAULT_KINDS_BY_NAMESPACE: Final[Mapping[str, TermKind]] = {
    "ECO": TermKind.EVIDENCE_TYPE,
}


@dataclass(frozen=True, slots=True)
class KindResolver:
    """Derive the kinds a snapshot may have from its ancestor closure."""

    kinds_by_accession: Mapping[str, TermKind] = field(
        default_factory=lambda: dict(DEFAULT_KINDS_BY_ACCESSION)
    )
    kinds_by_namespace: Mapping[str, TermKind] = field(
        default_factory=lambda: dict(DEFAULT_KINDS_BY_NAMESPACE)
    )

    def kinds_for(self, snapshot: TermSnapshot, source: OntologySource) -> frozenset[TermKind]:
        closure = {snapshot.accession.upper()}
        closure.update(parent.accession.upper() for parent in source.get_all_parents(snapshot))
        kinds = {self.kinds_by_accession[a] for a in closure if a in self.kinds_by_accession}
        if not kinds and snapshot.namespace in self.kinds_by_namespace:
            kinds.add(self.kinds_by_namespace[snapshot.namespace])
        return frozenset(kinds)
