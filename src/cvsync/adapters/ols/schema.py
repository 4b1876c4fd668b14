"""OLS (Ontology Lookup Service) response schemas.

Only the fields the translator reads are modelled; anything else is kept as
an extra and reported once per model.
"""

from __future__ import annotations

import logging
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field

log = logging.getLogger(__name__)

type OboId = str  # Format: PREFIX:digits, e.g. MI:0018
type Iri = str


class OlsBaseModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)
    _logged_extra_keys: ClassVar[set[str]] = set()
    # OLS attaches many bookkeeping fields nobody here needs to hear about.
    _quiet_extra_keys: ClassVar[frozenset[str]] = frozenset()

    def model_post_init(self, _context: object, /) -> None:
        extras = self.__pydantic_extra__
        if not extras:
            return
        new_keys = set(extras).difference(self._logged_extra_keys, self._quiet_extra_keys)
        if not new_keys:
            return
        self._logged_extra_keys.update(new_keys)
        log.debug(
            "OLS %s: unmodeled keys: %s",
            type(self).__name__,
            ", ".join(sorted(new_keys)),
        )


class OlsXref(OlsBaseModel):
    database: str | None = None
    id: str | None = None
    description: str | None = None
    url: str | None = None


class OlsDefinitionCitation(OlsBaseModel):
    definition: str | None = None
    obo_xrefs: list[OlsXref] = Field(default_factory=list[OlsXref], alias="oboXrefs")


class OlsSynonym(OlsBaseModel):
    name: str
    scope: str | None = None
    type: str | None = None
    xrefs: list[OlsXref] = Field(default_factory=list[OlsXref])


class OlsTerm(OlsBaseModel):
    _quiet_extra_keys: ClassVar[frozenset[str]] = frozenset(
        {
            "_links",
            "lang",
            "ontology_prefix",
            "ontology_iri",
            "is_defining_ontology",
            "is_preferred_root",
            "has_children",
            "in_subset",
            "obo_namespace",
        }
    )

    iri: Iri
    label: str
    obo_id: OboId | None = None
    short_form: str | None = None
    ontology_name: str | None = None
    description: list[str] | None = None
    synonyms: list[str] | None = None
    annotation: dict[str, list[object]] = Field(default_factory=dict[str, "list[object]"])
    is_obsolete: bool = False
    is_root: bool = False
    term_replaced_by: str | None = None
    obo_definition_citation: list[OlsDefinitionCitation] | None = None
    obo_xref: list[OlsXref] | None = None
    obo_synonym: list[OlsSynonym] | None = None


class OlsPageInfo(OlsBaseModel):
    size: int = 0
    total_elements: int = Field(default=0, alias="totalElements")
    total_pages: int = Field(default=0, alias="totalPages")
    number: int = 0


class OlsEmbeddedTerms(OlsBaseModel):
    terms: list[OlsTerm] = Field(default_factory=list[OlsTerm])


class OlsTermPage(OlsBaseModel):
    _quiet_extra_keys: ClassVar[frozenset[str]] = frozenset({"_links"})

    embedded: OlsEmbeddedTerms | None = Field(default=None, alias="_embedded")
    page: OlsPageInfo | None = None

    @property
    def terms(self) -> list[OlsTerm]:
        return self.embedded.terms if self.embedded is not None else []

    @property
    def has_next(self) -> bool:
        if self.page is None:
            return False
        return self.page.number + 1 < self.page.total_pages
