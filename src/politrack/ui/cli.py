from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING
from uuid import UUID

from dotenv import load_dotenv

from politrack.app import (
    detect_affair_duplicates,
    dismiss_affair_duplicate,
    init_database,
    link_registry_records,
    merge_affair_duplicates,
    reconcile_mandates,
    sync_roster,
    sync_wikidata,
)
from politrack.config import ConfigurationError, configure_logging
from politrack.domain.model import DataSource, DuplicateConfidence, MandateType

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


class StopRequest:
    """Cooperative stop flag polled by the job runner between records."""

    def __init__(self) -> None:
        self.requested = False

    def __call__(self) -> bool:
        return self.requested


STOP = StopRequest()


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile politicians, mandates and affairs")
    subparsers = parser.add_subparsers(dest="command", required=True)

    link = subparsers.add_parser("link", help="Link registry roster records to politicians")
    link.add_argument(
        "--source",
        required=True,
        choices=[str(source) for source in DataSource],
        help="Provider the input file comes from",
    )
    link.add_argument("--input", required=True, type=Path, help="JSON-lines roster file")
    link.add_argument(
        "--create-missing",
        action="store_true",
        help="Create a politician for records that match nobody",
    )
    link.add_argument("--limit", type=int, help="Process at most N records")
    link.add_argument("--resume", action="store_true", help="Continue from the last checkpoint")
    link.add_argument("--dry-run", action="store_true", help="Report without writing")

    wikidata = subparsers.add_parser(
        "wikidata",
        help="Find Wikidata ids by name, then copy registry ids through them",
    )
    wikidata.add_argument("--limit", type=int, help="Search at most N politicians")
    wikidata.add_argument("--resume", action="store_true", help="Continue from the last checkpoint")
    wikidata.add_argument("--dry-run", action="store_true", help="Report without writing")

    mandates = subparsers.add_parser("mandates", help="Close conflicting or stale mandates")
    mandates.add_argument("--apply", action="store_true", help="Write the closures")
    mandates.add_argument("--as-of", type=str, help="Reference date (YYYY-MM-DD, default today)")

    roster = subparsers.add_parser("roster", help="Import a current roster of office holders")
    roster.add_argument(
        "--type",
        required=True,
        choices=[str(mandate_type) for mandate_type in MandateType],
        help="Mandate type the roster lists",
    )
    roster.add_argument("--input", required=True, type=Path, help="JSON-lines roster file")
    roster.add_argument(
        "--term-start",
        required=True,
        type=str,
        help="First day of the current term (YYYY-MM-DD)",
    )
    roster.add_argument("--as-of", type=str, help="Reference date (YYYY-MM-DD, default today)")
    roster.add_argument("--apply", action="store_true", help="Write mandates and closures")

    affairs = subparsers.add_parser("affairs", help="Duplicate affair management")
    affairs_sub = affairs.add_subparsers(dest="affairs_command", required=True)
    confidences = [str(confidence) for confidence in DuplicateConfidence]

    detect = affairs_sub.add_parser("detect", help="List candidate duplicate pairs")
    detect.add_argument(
        "--min-confidence",
        choices=confidences,
        default=str(DuplicateConfidence.POSSIBLE),
    )

    merge = affairs_sub.add_parser("merge", help="Merge duplicate pairs")
    merge.add_argument(
        "--min-confidence",
        choices=confidences,
        default=str(DuplicateConfidence.CERTAIN),
    )
    merge.add_argument("--apply", action="store_true", help="Write the merges")
    merge.add_argument("--operator", type=str, help="Recorded as the author of the merges")

    dismiss = affairs_sub.add_parser("dismiss", help="Mark two affairs as distinct")
    dismiss.add_argument("first", type=str, help="Affair id")
    dismiss.add_argument("second", type=str, help="Affair id")
    dismiss.add_argument("--operator", type=str, help="Recorded as the author of the decision")

    subparsers.add_parser("init-db", help="Create or migrate the record store")

    return parser.parse_args(list(argv))


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value.strip())
    except ValueError as exc:
        raise ValueError(f"Invalid date: {value}") from exc


def _parse_uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError as exc:
        raise ValueError(f"Invalid UUID: {value}") from exc


def _validate(args: argparse.Namespace) -> None:
    if getattr(args, "limit", None) is not None and args.limit < 1:
        raise ValueError("--limit must be a positive integer")
    if getattr(args, "as_of", None):
        args.as_of = _parse_date(args.as_of)
    if args.command == "roster":
        args.term_start = _parse_date(args.term_start)
    if args.command == "affairs" and args.affairs_command == "dismiss":
        args.first = _parse_uuid(args.first)
        args.second = _parse_uuid(args.second)
        if args.first == args.second:
            raise ValueError("Cannot dismiss an affair against itself")


def _run(args: argparse.Namespace) -> None:
    if args.command == "link":
        link_registry_records(
            source=DataSource(args.source),
            input_path=args.input,
            create_missing=args.create_missing,
            limit=args.limit,
            resume=args.resume,
            dry_run=args.dry_run,
            should_stop=STOP,
        )
    elif args.command == "wikidata":
        sync_wikidata(
            limit=args.limit,
            resume=args.resume,
            dry_run=args.dry_run,
            should_stop=STOP,
        )
    elif args.command == "mandates":
        reconciliation = reconcile_mandates(as_of=args.as_of or None, apply=args.apply)
        log.info("Mandate reconciliation: %s", reconciliation.counts())
    elif args.command == "roster":
        result = sync_roster(
            mandate_type=MandateType(args.type),
            input_path=args.input,
            term_start=args.term_start,
            as_of=args.as_of or None,
            apply=args.apply,
        )
        log.info(
            "Roster import: %d recorded, %d already known, %d unlinked; "
            "%d stale seats closed, %d flagged",
            result.imported.recorded,
            result.imported.already_known,
            result.imported.unlinked,
            len(result.stale.closures),
            len(result.stale.flagged),
        )
    elif args.command == "affairs" and args.affairs_command == "detect":
        pairs = detect_affair_duplicates(min_confidence=DuplicateConfidence(args.min_confidence))
        log.info("%d candidate duplicate pairs", len(pairs))
    elif args.command == "affairs" and args.affairs_command == "merge":
        report = merge_affair_duplicates(
            min_confidence=DuplicateConfidence(args.min_confidence),
            apply=args.apply,
            created_by=args.operator,
        )
        if report.dry_run and report.plans:
            log.info("Dry run: pass --apply to merge %d pairs", len(report.plans))
    elif args.command == "affairs" and args.affairs_command == "dismiss":
        if not dismiss_affair_duplicate(args.first, args.second, created_by=args.operator):
            log.info("Pair already dismissed")
    elif args.command == "init-db":
        log.info("Record store ready at %s", init_database())
    else:
        raise ValueError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        _validate(parsed_args)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        _run(parsed_args)
    except ConfigurationError:
        log.exception("Configuration error")
        sys.exit(1)
    except ValueError:
        log.exception("Invalid input")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """First Ctrl+C stops after the current record; a second one exits immediately."""
    if STOP.requested:
        log.info("Closed by user (Ctrl+C)")
        sys.exit(1)
    log.info("Stop requested (Ctrl+C); finishing the current record")
    STOP.requested = True


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
