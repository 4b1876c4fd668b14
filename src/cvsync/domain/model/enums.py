"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class TermKind(StrEnum):
    """CV class a term belongs to, derived from its top-level ontology branch."""

    INTERACTION_DETECTION_METHOD = "interaction-detection-method"
    PARTICIPANT_IDENTIFICATION_METHOD = "participant-identification-method"
    FEATURE_DETECTION_METHOD = "feature-detection-method"
    FEATURE_TYPE = "feature-type"
    INTERACTION_TYPE = "interaction-type"
    INTERACTOR_TYPE = "interactor-type"
    EXPERIMENTAL_PREPARATION = "experimental-preparation"
    EXPERIMENTAL_ROLE = "experimental-role"
    BIOLOGICAL_ROLE = "biological-role"
    DATABASE = "database"
    QUALIFIER = "qualifier"
    ALIAS_TYPE = "alias-type"
    TOPIC = "topic"
    FUZZY_TYPE = "fuzzy-type"
    PARAMETER_TYPE = "parameter-type"
    PARAMETER_UNIT = "parameter-unit"
    CONFIDENCE_TYPE = "confidence-type"
    CELL_TYPE = "cell-type"
    TISSUE = "tissue"
    LIFECYCLE_EVENT = "lifecycle-event"
    LIFECYCLE_STATUS = "lifecycle-status"
    EVIDENCE_TYPE = "evidence-type"


class ReferenceKind(StrEnum):
    """Columns outside the CV subsystem that hold a foreign key to a term."""

    INTERACTION_TYPE = "interaction.interaction_type"
    INTERACTOR_TYPE = "interactor.interactor_type"
    EXPERIMENT_DETECTION_METHOD = "experiment.detection_method"
    EXPERIMENT_IDENTIFICATION_METHOD = "experiment.identification_method"
    PARTICIPANT_IDENTIFICATION_METHOD = "participant.identification_method"
    PARTICIPANT_EXPERIMENTAL_ROLE = "participant.experimental_role"
    PARTICIPANT_BIOLOGICAL_ROLE = "participant.biological_role"
    PARTICIPANT_EXPERIMENTAL_PREPARATION = "participant.experimental_preparation"
    FEATURE_TYPE = "feature.feature_type"
    FEATURE_DETECTION_METHOD = "feature.detection_method"
    RANGE_START_STATUS = "range.start_status"
    RANGE_END_STATUS = "range.end_status"
    XREF_DATABASE = "xref.database"
    XREF_QUALIFIER = "xref.qualifier"
    ALIAS_TYPE = "alias.alias_type"
    ANNOTATION_TOPIC = "annotation.topic"
    PARAMETER_TYPE = "parameter.parameter_type"
    PARAMETER_UNIT = "parameter.parameter_unit"
    CONFIDENCE_TYPE = "confidence.confidence_type"
    BIOSOURCE_CELL_TYPE = "biosource.cell_type"
    BIOSOURCE_TISSUE = "biosource.tissue"
    LIFECYCLE_EVENT = "lifecycle_event.event"
    LIFECYCLE_STATUS = "publication.status"
    EVIDENCE_TYPE = "evidence.evidence_type"


class Qualifier(StrEnum):
    IDENTITY = "identity"
    SECONDARY_AC = "secondary-ac"
    PRIMARY_REFERENCE = "primary-reference"
    SEE_ALSO = "see-also"


class Topic(StrEnum):
    DEFINITION = "definition"
    URL = "url"
    SEARCH_URL = "search-url"
    VALIDATION_REGEXP = "id-validation-regexp"
    OBSOLETE = "obsolete"
    HIDDEN = "hidden"
    COMMENT = "comment"
    USED_IN_CLASS = "used-in-class"


class AliasType(StrEnum):
    ALTERNATE_LABEL = "psi-mi alternate label"
    GO_SYNONYM = "go synonym"


class MergeReason(StrEnum):
    OBSOLETE_REMAP = "obsolete_remap"
