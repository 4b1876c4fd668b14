"""Annotation synchronization.

Responsibilities of this stage:
- keep singleton topics (definition, url, obsolete, ...) at one value, updated in place
- treat comments as a pool, reusing unmatched local comments before creating new ones
- create ontology annotations of other topics; curator-added ones are left alone
- flag obsolete terms with an ``obsolete`` and a ``hidden`` annotation
- derive ``used-in-class`` for topic terms from their ancestor closure
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Mapping
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Final

from cvsync.domain.model import OBSOLETE_TERM_MESSAGE, Annotation, TermKind, Topic

from .diff import diff_sorted
from .keys import annotation_key

if TYPE_CHECKING:
    from cvsync.domain.model import TermSnapshot

    from .context import UpdateContext

log = getLogger(__name__)

SINGLETON_TOPICS: Final[tuple[Topic, ...]] = (
    Topic.DEFINITION,
    Topic.URL,
    Topic.SEARCH_URL,
    Topic.VALIDATION_REGEXP,
    Topic.OBSOLETE,
)
# maintained by dedicated rules, never by the generic join
_RULE_TOPICS: Final[frozenset[str]] = frozenset(
    {*SINGLETON_TOPICS, Topic.COMMENT, Topic.HIDDEN, Topic.USED_IN_CLASS}
)

# attribute-name branches of PSI-MI and the entity kinds they annotate
DEFAULT_USED_IN_CLASS: Final[Mapping[str, tuple[str, ...]]] = {
    "MI:0664": ("interaction",),
    "MI:0665": ("experiment",),
    "MI:0666": ("participant",),
    "MI:0667": ("controlled-vocabulary",),
    "MI:0668": ("feature",),
    "MI:0669": ("organism",),
}


def _remote_texts(snapshot: TermSnapshot, topic: str) -> list[str]:
    return [
        annotation.text
        for annotation in snapshot.annotations
        if annotation.topic == topic and annotation.text is not None
    ]


class AnnotationSync:
    def __call__(self, context: UpdateContext) -> None:
        by_topic: dict[str, list[Annotation]] = defaultdict(list)
        for annotation in context.term.annotations:
            by_topic[annotation.topic].append(annotation)

        for topic in SINGLETON_TOPICS:
            self._sync_singleton(context, topic, by_topic.get(topic, []))
        self._sync_comments(context, by_topic.get(Topic.COMMENT, []))
        self._sync_other_topics(context)
        self._sync_hidden(context, by_topic.get(Topic.HIDDEN, []))

    def _expected_value(self, context: UpdateContext, topic: Topic) -> str | None:
        snapshot = context.snapshot
        if topic is Topic.OBSOLETE:
            if not context.obsolete:
                return None
            return snapshot.obsolete_message or OBSOLETE_TERM_MESSAGE
        direct = {Topic.DEFINITION: snapshot.definition, Topic.URL: snapshot.url}.get(topic)
        if direct:
            return direct
        texts = _remote_texts(snapshot, topic)
        return texts[0] if texts else None

    def _sync_singleton(
        self,
        context: UpdateContext,
        topic: Topic,
        local: list[Annotation],
    ) -> None:
        expected = self._expected_value(context, topic)
        term = context.term
        changes = context.changes

        if expected is None:
            # only the obsolete flag is owned by the ontology when it has no value
            stale = local if topic is Topic.OBSOLETE else local[1:]
            for annotation in stale:
                term.remove_annotation(annotation)
                changes.deleted_annotations.append(annotation)
            return

        if not local:
            annotation = Annotation(topic=topic, text=expected)
            term.add_annotation(annotation)
            changes.created_annotations.append(annotation)
            return

        ordered = sorted(local, key=lambda a: (a.text != expected, annotation_key(a)))
        kept, extras = ordered[0], ordered[1:]
        if kept.text != expected:
            kept.text = expected
            changes.updated_annotations.append(kept)
        for annotation in extras:
            term.remove_annotation(annotation)
            changes.deleted_annotations.append(annotation)

    def _sync_comments(self, context: UpdateContext, local: list[Annotation]) -> None:
        term = context.term
        changes = context.changes
        snapshot = context.snapshot
        pool = sorted([*snapshot.comments, *_remote_texts(snapshot, Topic.COMMENT)])

        unmatched: list[Annotation] = []
        for annotation in sorted(local, key=annotation_key):
            if annotation.text in pool:
                pool.remove(annotation.text)
            else:
                unmatched.append(annotation)

        # reuse free comment slots before creating new ones
        for annotation in unmatched:
            if pool:
                annotation.text = pool.pop(0)
                changes.updated_annotations.append(annotation)
            else:
                term.remove_annotation(annotation)
                changes.deleted_annotations.append(annotation)

        for text in pool:
            annotation = Annotation(topic=Topic.COMMENT, text=text)
            term.add_annotation(annotation)
            changes.created_annotations.append(annotation)

    def _sync_other_topics(self, context: UpdateContext) -> None:
        local = [a for a in context.term.annotations if a.topic not in _RULE_TOPICS]
        remote = [a for a in context.snapshot.annotations if a.topic not in _RULE_TOPICS]
        join = diff_sorted(local, remote, local_key=annotation_key, remote_key=annotation_key)
        for snapshot in join.remote_only:
            annotation = Annotation(topic=snapshot.topic, text=snapshot.text)
            context.term.add_annotation(annotation)
            context.changes.created_annotations.append(annotation)

    def _sync_hidden(self, context: UpdateContext, local: list[Annotation]) -> None:
        term = context.term
        if context.obsolete:
            if local:
                return
            annotation = Annotation(topic=Topic.HIDDEN, text=OBSOLETE_TERM_MESSAGE)
            term.add_annotation(annotation)
            context.changes.created_annotations.append(annotation)
            return
        # a term that came back from obsolescence loses the generated flag only
        for annotation in local:
            if annotation.text == OBSOLETE_TERM_MESSAGE:
                term.remove_annotation(annotation)
                context.changes.deleted_annotations.append(annotation)


@dataclass(slots=True)
class UsedInClassSync:
    """Keep the ``used-in-class`` annotation of topic terms up to date.

    The usages found in the ancestor closure are merged with those already
    listed, so manually added usages survive.
    """

    usages_by_ancestor: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: dict(DEFAULT_USED_IN_CLASS)
    )

    def __call__(self, context: UpdateContext) -> None:
        term = context.term
        if term.kind is not TermKind.TOPIC:
            return

        ancestors = context.source.get_all_parents(context.snapshot)
        closure = {context.snapshot.accession, *(parent.accession for parent in ancestors)}
        usages = {
            usage for accession in closure for usage in self.usages_by_ancestor.get(accession, ())
        }

        existing = sorted(term.annotations_for(Topic.USED_IN_CLASS), key=annotation_key)
        for annotation in existing:
            usages.update(_split_usages(annotation.text))
        if not usages:
            return

        text = ",".join(sorted(usages))
        if not existing:
            annotation = Annotation(topic=Topic.USED_IN_CLASS, text=text)
            term.add_annotation(annotation)
            context.changes.created_annotations.append(annotation)
            return

        kept, extras = existing[0], existing[1:]
        if kept.text != text:
            log.debug("Updating used-in-class of %s to %s", context.identifier, text)
            kept.text = text
            context.changes.updated_annotations.append(kept)
        for annotation in extras:
            term.remove_annotation(annotation)
            context.changes.deleted_annotations.append(annotation)


def _split_usages(text: str | None) -> set[str]:
    if not text:
        return set()
    return {part.strip() for part in text.split(",") if part.strip()}
