"""Total ordering keys per attribute kind.

Keys are tuples of strings; optional values sort last.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from cvsync.domain.model import Term

type SortKey = tuple[str, ...]


class XrefLike(Protocol):
    @property
    def database(self) -> str: ...

    @property
    def qualifier(self) -> str | None: ...

    @property
    def primary_id(self) -> str: ...


class AliasLike(Protocol):
    @property
    def name(self) -> str: ...

    @property
    def alias_type(self) -> str | None: ...


class AnnotationLike(Protocol):
    @property
    def topic(self) -> str: ...

    @property
    def text(self) -> str | None: ...


def _nulls_last(value: str | None) -> tuple[str, str]:
    # "1" > "0": missing values sort after present ones
    return ("1", "") if value is None else ("0", value)


def xref_key(xref: XrefLike) -> SortKey:
    return (
        xref.database.casefold(),
        *_nulls_last(xref.qualifier),
        xref.primary_id.casefold(),
    )


def alias_key(alias: AliasLike) -> SortKey:
    return (alias.name, *_nulls_last(alias.alias_type))


def alias_name_key(alias: AliasLike) -> SortKey:
    return (alias.name,)


def annotation_key(annotation: AnnotationLike) -> SortKey:
    return (annotation.topic, *_nulls_last(annotation.text))


def accession_key(accession: str) -> SortKey:
    return (accession.upper(),)


def parent_entry_key(entry: tuple[str, Term]) -> SortKey:
    return accession_key(entry[0])
