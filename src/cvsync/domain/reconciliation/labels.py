"""Short-label helpers.

Short labels are unique per term kind. When the ontology label is taken by
another term, a numeric suffix is appended (``label-2``, ``label-3``...).
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cvsync.domain.model import Term, TermKind
    from cvsync.domain.ports import TermRepository


def label_in_sync(current: str, ontology_label: str) -> bool:
    """Whether ``current`` is ``ontology_label`` itself or a suffixed variant of it."""

    if current.casefold() == ontology_label.casefold():
        return True
    pattern = rf"{re.escape(ontology_label)}-\d+"
    return re.fullmatch(pattern, current, flags=re.IGNORECASE) is not None


def unique_short_label(
    store: TermRepository,
    label: str,
    *,
    kind: TermKind,
    owner: Term | None = None,
) -> str:
    holder = store.get_by_short_label(label, kind=kind)
    if holder is None or holder is owner:
        return label

    taken = {existing.casefold() for existing in store.short_labels_like(label, kind=kind)}
    suffix = 2
    while f"{label}-{suffix}".casefold() in taken:
        suffix += 1
    return f"{label}-{suffix}"
