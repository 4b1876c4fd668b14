"""Accession helpers (pure)."""

from __future__ import annotations


def namespace_of(accession: str) -> str | None:
    """Return the namespace prefix of ``accession`` (``MI`` for ``MI:0018``)."""

    prefix, separator, local_id = accession.partition(":")
    if not separator or not prefix or not local_id:
        return None
    return prefix.upper()


def same_accession(left: str | None, right: str | None) -> bool:
    if left is None or right is None:
        return False
    return left.casefold() == right.casefold()
