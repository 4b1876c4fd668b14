"""Alias synchronization: a merge-join on the alias name.

A name present on both sides with a different alias type is retyped in
place rather than deleted and recreated.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from cvsync.domain.model import Alias

from .diff import merge_join
from .keys import alias_key, alias_name_key

if TYPE_CHECKING:
    from .context import UpdateContext


class AliasSync:
    def __call__(self, context: UpdateContext) -> None:
        term = context.term
        changes = context.changes
        # Ordered by (name, type) so equal names pair up deterministically.
        join = merge_join(
            sorted(term.aliases, key=alias_key),
            sorted(context.snapshot.aliases, key=alias_key),
            local_key=alias_name_key,
            remote_key=alias_name_key,
        )
        for alias, remote in join.matched:
            if alias.alias_type != remote.alias_type:
                alias.alias_type = remote.alias_type
                changes.updated_aliases.append(alias)
        for alias in join.local_only:
            term.remove_alias(alias)
            changes.deleted_aliases.append(alias)
        for remote in join.remote_only:
            alias = Alias(name=remote.name, alias_type=remote.alias_type)
            term.add_alias(alias)
            changes.created_aliases.append(alias)
