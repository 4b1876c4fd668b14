from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from cvsync.app import import_term, reconcile_ontologies
from cvsync.config import (
    ConfigurationError,
    configure_logging,
    get_sync_config,
    resolve_log_level,
)
from cvsync.domain.model import namespace_of

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from cvsync.config import SyncConfig
    from cvsync.domain.reconciliation import RunReport

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile local CV terms with ontologies")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug output",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    update = subparsers.add_parser("update", help="Update every local term of the ontologies")
    update.add_argument(
        "--ontology",
        dest="ontologies",
        action="append",
        metavar="ID",
        help="Ontology id to reconcile (repeatable, defaults to config)",
    )
    update.add_argument(
        "--import-missing",
        action="store_true",
        default=None,
        help="Also create ontology terms that have no local counterpart",
    )

    importer = subparsers.add_parser("import", help="Create one ontology term locally")
    importer.add_argument("accession", help="Accession of the term, e.g. MI:0018")
    importer.add_argument(
        "--ontology",
        metavar="ID",
        help="Ontology the accession belongs to (derived from the accession by default)",
    )
    importer.add_argument(
        "--children",
        action="store_true",
        help="Also import the missing descendants of the term",
    )

    return parser.parse_args(list(argv))


def _validate(args: argparse.Namespace, config: SyncConfig) -> None:
    if args.command == "update":
        requested = args.ontologies or ()
        unknown = sorted({ontology.upper() for ontology in requested} - set(config.ontologies))
        if unknown:
            raise ValueError(
                f"Unknown ontology: {', '.join(unknown)} "
                f"(configured: {', '.join(config.ontologies)})"
            )
    elif args.command == "import" and namespace_of(args.accession) is None:
        raise ValueError(f"Invalid accession: {args.accession}")


def _log_report(report: RunReport) -> None:
    for candidate in report.impossible_to_remap:
        log.warning(
            "Needs curation: %s is obsolete without replacement (consider: %s)",
            candidate.accession,
            ", ".join(candidate.candidate_terms) or "-",
        )
    if report.has_errors:
        log.warning("%d terms could not be processed; see the errors above", len(report.errors))


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args: argparse.Namespace
    try:
        parsed_args = _parse_args(args_list)
        configure_logging(level=resolve_log_level(verbose=parsed_args.verbose))
        sync_config = get_sync_config()
        _validate(parsed_args, sync_config)
    except (ValueError, ConfigurationError):
        configure_logging()
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "update":
            report = reconcile_ontologies(
                parsed_args.ontologies,
                import_missing=parsed_args.import_missing,
                sync_config=sync_config,
            )
        elif parsed_args.command == "import":
            report = import_term(
                parsed_args.accession,
                ontology_id=parsed_args.ontology,
                include_children=parsed_args.children,
                sync_config=sync_config,
            )
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
        _log_report(report)

    except Exception:
        log.exception("Fatal error during sync")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
