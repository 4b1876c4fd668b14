"""Audit records for merge decisions."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from .entity import Entity
from .enums import MergeReason

if TYPE_CHECKING:
    from uuid import UUID

    from .enums import TermKind


@dataclass(eq=False, kw_only=True)
class TermMerge(Entity):
    """Audit record for folding a duplicate term into its surviving counterpart.

    The duplicate is gone once the merge commits, so its identifiers are kept
    here by value rather than by reference.
    """

    kind: TermKind
    source_id: UUID
    source_accession: str | None
    target_id: UUID
    target_accession: str | None
    affected_count: int
    reason: MergeReason = MergeReason.OBSOLETE_REMAP
    created_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))
