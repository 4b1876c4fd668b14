"""Sorted merge-join diff.

Both inputs must be sorted by their key; the join then partitions them in
one linear pass:

- equal keys on both sides -> ``matched`` (advance both cursors)
- key only on the local side -> ``local_only`` (advance local cursor)
- key only on the remote side -> ``remote_only`` (advance remote cursor)

Duplicate keys pair up one-to-one; surplus local duplicates end up in
``local_only`` and surplus remote duplicates in ``remote_only``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence


class SupportsLessThan(Protocol):
    def __lt__(self, other: Any, /) -> bool: ...


@dataclass(frozen=True, slots=True)
class MergeJoin[L, R]:
    matched: tuple[tuple[L, R], ...] = ()
    local_only: tuple[L, ...] = ()
    remote_only: tuple[R, ...] = ()


def merge_join[L, R, K: SupportsLessThan](
    local: Sequence[L],
    remote: Sequence[R],
    *,
    local_key: Callable[[L], K],
    remote_key: Callable[[R], K],
) -> MergeJoin[L, R]:
    """Partition two key-sorted sequences into matched / local-only / remote-only."""

    matched: list[tuple[L, R]] = []
    local_only: list[L] = []
    remote_only: list[R] = []

    i = j = 0
    while i < len(local) and j < len(remote):
        left = local_key(local[i])
        right = remote_key(remote[j])
        if left < right:
            local_only.append(local[i])
            i += 1
        elif right < left:
            remote_only.append(remote[j])
            j += 1
        else:
            matched.append((local[i], remote[j]))
            i += 1
            j += 1

    local_only.extend(local[i:])
    remote_only.extend(remote[j:])
    return MergeJoin(
        matched=tuple(matched),
        local_only=tuple(local_only),
        remote_only=tuple(remote_only),
    )


def diff_sorted[L, R, K: SupportsLessThan](
    local: Sequence[L],
    remote: Sequence[R],
    *,
    local_key: Callable[[L], K],
    remote_key: Callable[[R], K],
) -> MergeJoin[L, R]:
    """Sort both sides by their key, then merge-join them."""

    return merge_join(
        sorted(local, key=local_key),
        sorted(remote, key=remote_key),
        local_key=local_key,
        remote_key=remote_key,
    )
