from __future__ import annotations

from cvsync.domain.model import (
    OBSOLETE_TERM_MESSAGE,
    Annotation,
    AnnotationSnapshot,
    TermKind,
    Topic,
)
from cvsync.domain.reconciliation.annotations import AnnotationSync, UsedInClassSync
from tests.support.cv_terms import make_term, mi_snapshot, mi_source, update_context


def _texts(term_annotations: tuple[Annotation, ...], topic: str) -> list[str | None]:
    return sorted(
        (annotation.text for annotation in term_annotations if annotation.topic == topic),
        key=lambda text: text or "",
    )


def test_definition_is_created_then_updated_in_place() -> None:
    term = make_term("MI:0407", "direct interaction")
    context = update_context(
        term, mi_snapshot("MI:0407", "direct interaction", definition="Binding.")
    )

    AnnotationSync()(context)

    assert _texts(term.annotations, Topic.DEFINITION) == ["Binding."]
    created = context.changes.created_annotations[0]

    context = update_context(
        term, mi_snapshot("MI:0407", "direct interaction", definition="Direct binding.")
    )
    AnnotationSync()(context)

    assert context.changes.updated_annotations == [created]
    assert created.text == "Direct binding."


def test_duplicate_singletons_collapse_to_matching_one() -> None:
    term = make_term("MI:0407", "direct interaction")
    wrong = Annotation(topic=Topic.URL, text="http://old.example")
    right = Annotation(topic=Topic.URL, text="http://new.example")
    term.add_annotation(wrong)
    term.add_annotation(right)
    context = update_context(
        term, mi_snapshot("MI:0407", "direct interaction", url="http://new.example")
    )

    AnnotationSync()(context)

    assert context.changes.deleted_annotations == [wrong]
    assert context.changes.updated_annotations == []
    assert _texts(term.annotations, Topic.URL) == ["http://new.example"]


def test_missing_definition_keeps_one_local_value() -> None:
    term = make_term("MI:0407", "direct interaction")
    term.add_annotation(Annotation(topic=Topic.DEFINITION, text="Curated."))
    context = update_context(term, mi_snapshot("MI:0407", "direct interaction"))

    AnnotationSync()(context)

    assert _texts(term.annotations, Topic.DEFINITION) == ["Curated."]
    assert not context.changes.deleted_annotations


def test_obsolete_term_gets_obsolete_and_hidden_flags() -> None:
    term = make_term("MI:0407", "direct interaction")
    snapshot = mi_snapshot(
        "MI:0407",
        "direct interaction",
        obsolete=True,
        obsolete_message="use MI:0915",
    )
    context = update_context(term, snapshot)

    AnnotationSync()(context)

    assert _texts(term.annotations, Topic.OBSOLETE) == ["use MI:0915"]
    assert _texts(term.annotations, Topic.HIDDEN) == [OBSOLETE_TERM_MESSAGE]
    assert term.hidden


def test_revived_term_loses_generated_flags_only() -> None:
    term = make_term("MI:0407", "direct interaction")
    term.add_annotation(Annotation(topic=Topic.OBSOLETE, text=OBSOLETE_TERM_MESSAGE))
    term.add_annotation(Annotation(topic=Topic.HIDDEN, text=OBSOLETE_TERM_MESSAGE))
    curated = Annotation(topic=Topic.HIDDEN, text="hidden by curator")
    term.add_annotation(curated)
    context = update_context(term, mi_snapshot("MI:0407", "direct interaction"))

    AnnotationSync()(context)

    assert _texts(term.annotations, Topic.OBSOLETE) == []
    assert [a for a in term.annotations if a.topic == Topic.HIDDEN] == [curated]


def test_comments_reuse_unmatched_local_slots() -> None:
    term = make_term("MI:0407", "direct interaction")
    kept = Annotation(topic=Topic.COMMENT, text="same")
    reused = Annotation(topic=Topic.COMMENT, text="old")
    term.add_annotation(kept)
    term.add_annotation(reused)
    snapshot = mi_snapshot("MI:0407", "direct interaction", comments=("same", "new a", "new b"))
    context = update_context(term, snapshot)

    AnnotationSync()(context)

    assert reused.text == "new a"
    assert context.changes.updated_annotations == [reused]
    assert [a.text for a in context.changes.created_annotations] == ["new b"]
    assert _texts(term.annotations, Topic.COMMENT) == ["new a", "new b", "same"]


def test_surplus_comments_are_deleted() -> None:
    term = make_term("MI:0407", "direct interaction")
    surplus = Annotation(topic=Topic.COMMENT, text="gone")
    term.add_annotation(surplus)
    context = update_context(term, mi_snapshot("MI:0407", "direct interaction"))

    AnnotationSync()(context)

    assert context.changes.deleted_annotations == [surplus]


def test_other_topics_are_added_but_curated_ones_kept() -> None:
    term = make_term("MI:0407", "direct interaction")
    curated = Annotation(topic="curation-note", text="checked")
    term.add_annotation(curated)
    snapshot = mi_snapshot(
        "MI:0407",
        "direct interaction",
        annotations=(AnnotationSnapshot(topic="resulting-sequence", text="ACGT"),),
    )
    context = update_context(term, snapshot)

    AnnotationSync()(context)

    assert curated in term.annotations
    assert [(a.topic, a.text) for a in context.changes.created_annotations] == [
        ("resulting-sequence", "ACGT")
    ]


def test_search_url_comes_from_snapshot_annotations() -> None:
    term = make_term("MI:0407", "direct interaction")
    snapshot = mi_snapshot(
        "MI:0407",
        "direct interaction",
        annotations=(AnnotationSnapshot(topic=Topic.SEARCH_URL, text="http://x/${ac}"),),
    )
    context = update_context(term, snapshot)

    AnnotationSync()(context)

    assert _texts(term.annotations, Topic.SEARCH_URL) == ["http://x/${ac}"]


def test_second_pass_is_a_no_op() -> None:
    term = make_term("MI:0407", "direct interaction")
    snapshot = mi_snapshot(
        "MI:0407",
        "direct interaction",
        definition="Binding.",
        url="http://example.org",
        comments=("a", "b"),
        annotations=(AnnotationSnapshot(topic="resulting-sequence", text="ACGT"),),
    )
    AnnotationSync()(update_context(term, snapshot))

    context = update_context(term, snapshot)
    AnnotationSync()(context)

    assert not context.changes.has_changes


def test_used_in_class_is_derived_from_ancestors() -> None:
    topic = mi_snapshot("MI:1045", "curation content", "MI:0664")
    term = make_term("MI:1045", "curation content", kind=TermKind.TOPIC)
    term.add_annotation(Annotation(topic=Topic.USED_IN_CLASS, text="publication"))
    context = update_context(term, topic, source=mi_source(topic))

    UsedInClassSync()(context)

    assert _texts(term.annotations, Topic.USED_IN_CLASS) == ["interaction,publication"]
    assert len(context.changes.updated_annotations) == 1


def test_used_in_class_ignores_other_kinds() -> None:
    snapshot = mi_snapshot("MI:1045", "curation content", "MI:0664")
    term = make_term("MI:1045", "curation content", kind=TermKind.INTERACTION_TYPE)
    context = update_context(term, snapshot, source=mi_source(snapshot))

    UsedInClassSync()(context)

    assert not context.changes.has_changes
