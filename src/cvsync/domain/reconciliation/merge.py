"""Registry of repoint rules used when a duplicate term is merged away.

Each term kind maps to a repoint function that moves every foreign reference
from the duplicate to the surviving term and returns the number of rows
moved. Making a kind mergeable is a matter of registering a rule.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

from cvsync.domain.model import ReferenceKind, TermKind

if TYPE_CHECKING:
    from cvsync.domain.model import Term
    from cvsync.domain.ports import TermRepository

type RepointFunction = Callable[[TermRepository, Term, Term], int]

DEFAULT_REPOINT_RULES: Final[Mapping[TermKind, tuple[ReferenceKind, ...]]] = {
    TermKind.INTERACTION_DETECTION_METHOD: (ReferenceKind.EXPERIMENT_DETECTION_METHOD,),
    TermKind.PARTICIPANT_IDENTIFICATION_METHOD: (
        ReferenceKind.EXPERIMENT_IDENTIFICATION_METHOD,
        ReferenceKind.PARTICIPANT_IDENTIFICATION_METHOD,
    ),
    TermKind.FEATURE_DETECTION_METHOD: (ReferenceKind.FEATURE_DETECTION_METHOD,),
    TermKind.FEATURE_TYPE: (ReferenceKind.FEATURE_TYPE,),
    TermKind.INTERACTION_TYPE: (ReferenceKind.INTERACTION_TYPE,),
    TermKind.INTERACTOR_TYPE: (ReferenceKind.INTERACTOR_TYPE,),
    TermKind.EXPERIMENTAL_PREPARATION: (ReferenceKind.PARTICIPANT_EXPERIMENTAL_PREPARATION,),
    TermKind.EXPERIMENTAL_ROLE: (ReferenceKind.PARTICIPANT_EXPERIMENTAL_ROLE,),
    TermKind.BIOLOGICAL_ROLE: (ReferenceKind.PARTICIPANT_BIOLOGICAL_ROLE,),
    TermKind.DATABASE: (ReferenceKind.XREF_DATABASE,),
    TermKind.QUALIFIER: (ReferenceKind.XREF_QUALIFIER,),
    TermKind.ALIAS_TYPE: (ReferenceKind.ALIAS_TYPE,),
    TermKind.TOPIC: (ReferenceKind.ANNOTATION_TOPIC,),
    TermKind.FUZZY_TYPE: (ReferenceKind.RANGE_START_STATUS, ReferenceKind.RANGE_END_STATUS),
    TermKind.PARAMETER_TYPE: (ReferenceKind.PARAMETER_TYPE,),
    TermKind.PARAMETER_UNIT: (ReferenceKind.PARAMETER_UNIT,),
    TermKind.CONFIDENCE_TYPE: (ReferenceKind.CONFIDENCE_TYPE,),
    TermKind.CELL_TYPE: (ReferenceKind.BIOSOURCE_CELL_TYPE,),
    TermKind.TISSUE: (ReferenceKind.BIOSOURCE_TISSUE,),
    TermKind.LIFECYCLE_EVENT: (ReferenceKind.LIFECYCLE_EVENT,),
    TermKind.LIFECYCLE_STATUS: (ReferenceKind.LIFECYCLE_STATUS,),
    TermKind.EVIDENCE_TYPE: (ReferenceKind.EVIDENCE_TYPE,),
}


def repoint_columns(*kinds: ReferenceKind) -> RepointFunction:
    """Build a repoint function covering the given reference columns."""

    def repoint(store: TermRepository, source: Term, target: Term) -> int:
        return sum(store.repoint_references(kind, source, target) for kind in kinds)

    return repoint


@dataclass(slots=True)
class MergeRegistry:
    rules: dict[TermKind, RepointFunction] = field(default_factory=dict[TermKind, RepointFunction])

    @classmethod
    def default(cls) -> MergeRegistry:
        registry = cls()
        for kind, columns in DEFAULT_REPOINT_RULES.items():
            registry.register(kind, repoint_columns(*columns))
        return registry

    def register(self, kind: TermKind, repoint: RepointFunction) -> None:
        self.rules[kind] = repoint

    def rule_for(self, kind: TermKind) -> RepointFunction | None:
        return self.rules.get(kind)
