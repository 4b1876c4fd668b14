from __future__ import annotations

import pytest

from cvsync.adapters.ols import TranslationError, translate_term
from cvsync.adapters.ols.schema import OlsTerm
from cvsync.adapters.ols.translator import accession_from_iri
from cvsync.config.ols import OlsOntologyConfig  # noqa: TC001
from cvsync.domain.model import (
    AliasSnapshot,
    AliasType,
    AnnotationSnapshot,
    Qualifier,
    Topic,
    XrefSnapshot,
)
from tests.support.ols_payloads import ols_term


def _term(payload: dict[str, object]) -> OlsTerm:
    return OlsTerm.model_validate(payload)


def test_live_term_is_translated(mi_ontology: OlsOntologyConfig) -> None:
    payload = ols_term(
        "MI:0407",
        "direct interaction",
        obo_definition_citation=[
            {
                "definition": "Interaction between molecules in direct contact.",
                "oboXrefs": [{"database": "PMID", "id": "14755292"}],
            }
        ],
        obo_xref=[
            {"database": "search-url", "id": '"https://example.org/search?q=${ac}"'},
            {"database": "url", "id": "https://example.org/MI_0407"},
            {"database": "GO", "id": "GO:0005515"},
        ],
        obo_synonym=[
            {"name": "direct", "type": "http://purl.obolibrary.org/obo/mi#PSI-MI-short"},
            {"name": "direct binding", "type": "PSI-MI-alternate"},
            {"name": "contact"},
        ],
        annotation={"comment": ["Checked by curators.", "  "]},
    )

    snapshot = translate_term(_term(payload), mi_ontology, parent_accessions=["mi:0915"])

    assert snapshot.accession == "MI:0407"
    assert snapshot.short_label == "direct"
    assert snapshot.full_name == "direct interaction"
    assert snapshot.definition == "Interaction between molecules in direct contact."
    assert snapshot.url == "https://example.org/MI_0407"
    assert snapshot.parent_accessions == {"MI:0915"}
    assert snapshot.comments == ("Checked by curators.",)
    assert not snapshot.obsolete
    assert snapshot.aliases == (
        AliasSnapshot(name="direct binding", alias_type=AliasType.ALTERNATE_LABEL),
        AliasSnapshot(name="contact", alias_type=AliasType.GO_SYNONYM),
    )
    assert snapshot.xrefs == (
        XrefSnapshot(
            database="pubmed", primary_id="14755292", qualifier=Qualifier.PRIMARY_REFERENCE
        ),
        XrefSnapshot(database="go", primary_id="GO:0005515", qualifier=Qualifier.SEE_ALSO),
    )
    assert snapshot.annotations == (
        AnnotationSnapshot(topic=Topic.SEARCH_URL, text="https://example.org/search?q=${ac}"),
    )


def test_obsolete_term_carries_message_and_replacement(mi_ontology: OlsOntologyConfig) -> None:
    payload = ols_term(
        "MI:0101",
        "sequence tag identification",
        is_obsolete=True,
        description=["OBSOLETE: redundant with MI:0102."],
        term_replaced_by="http://purl.obolibrary.org/obo/MI_0102",
        annotation={"consider": ["MI:0218", "http://purl.obolibrary.org/obo/MI_0219"]},
    )

    snapshot = translate_term(_term(payload), mi_ontology)

    assert snapshot.obsolete
    assert snapshot.definition == "OBSOLETE: redundant with MI:0102."
    assert snapshot.obsolete_message == "redundant with MI:0102."
    assert snapshot.remapped_to == "MI:0102"
    assert snapshot.consider == ("MI:0218", "MI:0219")
    assert snapshot.short_label == "sequence tag identification"


def test_term_without_accession_is_rejected(mi_ontology: OlsOntologyConfig) -> None:
    payload = {"iri": "http://example.org/thing", "label": "thing"}

    with pytest.raises(TranslationError):
        translate_term(_term(payload), mi_ontology)


def test_short_label_synonym_is_ontology_specific() -> None:
    ontology = OlsOntologyConfig(
        ontology_id="MOD",
        ols_name="mod",
        database="psi-mod",
        accession_pattern=r"MOD:\d{5}",
        short_label_synonym="PSI-MOD-label",
    )
    payload = ols_term(
        "MOD:00001",
        "alkylated residue",
        obo_synonym=[
            {"name": "Alkyl", "type": "PSI-MOD-label"},
            {"name": "direct", "type": "PSI-MI-short"},
        ],
    )

    snapshot = translate_term(_term(payload), ontology)

    assert snapshot.short_label == "Alkyl"
    assert [alias.name for alias in snapshot.aliases] == ["direct"]


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("MI:0018", "MI:0018"),
        ("http://purl.obolibrary.org/obo/MI_0018", "MI:0018"),
        ("http://purl.obolibrary.org/obo/mod_00001", "MOD:00001"),
        ("http://example.org/thing", None),
    ],
)
def test_accession_from_iri(value: str, expected: str | None) -> None:
    assert accession_from_iri(value) == expected
