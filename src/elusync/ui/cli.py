from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from elusync.app import (
    repair_current_organizations,
    reset_sync,
    sync_deputies,
    sync_government,
    sync_hatvp,
    sync_judilibre,
    sync_mayors,
    sync_meps,
    sync_senate_votes,
    sync_senators,
    sync_status,
    sync_wikidata_convictions,
)
from elusync.common.logging import configure_logging
from elusync.config import ERROR_SAMPLE_SIZE

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from types import FrameType

    from elusync.domain.data_integration import SyncResult

log = logging.getLogger(__name__)

SNAPSHOT_COMMANDS: dict[str, str] = {
    "deputies": "Sync sitting deputies from the Assemblée nationale",
    "senators": "Sync sitting senators from the Sénat",
    "mayors": "Sync mayors from the Répertoire national des élus",
    "government": "Sync current government members",
    "meps": "Sync French members of the European Parliament",
    "hatvp": "Attach HATVP declarations to known people",
    "convictions": "Import final convictions from Wikidata",
}


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be non-negative: {value}")
    return number


def _add_common(parser: argparse.ArgumentParser, *, limit: bool = True) -> None:
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Reconcile and count without writing anything",
    )
    parser.add_argument("--verbose", action="store_true", help="Log at DEBUG level")
    if limit:
        parser.add_argument(
            "--limit",
            type=_non_negative_int,
            help="Only process the first N records",
        )
        parser.add_argument(
            "--min-interval-hours",
            type=float,
            help="Skip the source if its last run is more recent than this",
        )


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Synchronise French public officials")
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text in SNAPSHOT_COMMANDS.items():
        _add_common(subparsers.add_parser(name, help=help_text))

    votes = subparsers.add_parser("senate-votes", help="Import Sénat roll-call votes")
    _add_common(votes)
    votes.add_argument(
        "--session",
        type=int,
        help="Session start year, e.g. 2024 for 2024-2025 (defaults to config)",
    )
    votes.add_argument(
        "--force",
        action="store_true",
        help="Revisit roll calls already behind the cursor",
    )

    judilibre = subparsers.add_parser(
        "judilibre", help="Attach Cour de cassation convictions to known people"
    )
    _add_common(judilibre)
    judilibre.add_argument(
        "--person",
        dest="person_slug",
        help="Only search the person with this slug (ignores --min-interval-hours)",
    )

    repair = subparsers.add_parser(
        "repair-affiliations",
        help="Realign current organizations with open affiliations",
    )
    _add_common(repair, limit=False)

    status = subparsers.add_parser("status", help="List sync metadata")
    status.add_argument("--verbose", action="store_true", help="Log at DEBUG level")

    reset = subparsers.add_parser("reset", help="Forget the sync metadata of one key")
    reset.add_argument("key", help="Metadata key, e.g. senat or votes-senat:2024")
    reset.add_argument("--verbose", action="store_true", help="Log at DEBUG level")

    args = parser.parse_args(list(argv))
    if getattr(args, "min_interval_hours", None) is not None and args.min_interval_hours < 0:
        raise ValueError("Minimum interval hours must be non-negative")
    return args


def _report(result: SyncResult) -> None:
    log.info(
        "%s%s summary: %s",
        result.source,
        " (dry run)" if result.dry_run else "",
        result.as_summary() | {"errors": len(result.errors)},
    )
    log.info("%s counters: %s", result.source, result.counters())
    for error in result.errors[:ERROR_SAMPLE_SIZE]:
        log.warning("  %s", error)
    hidden = len(result.errors) - ERROR_SAMPLE_SIZE
    if hidden > 0:
        log.warning("  ... and %s more errors", hidden)


def _snapshot_sync(command: str) -> Callable[..., SyncResult]:
    match command:
        case "deputies":
            return sync_deputies
        case "senators":
            return sync_senators
        case "mayors":
            return sync_mayors
        case "government":
            return sync_government
        case "meps":
            return sync_meps
        case "hatvp":
            return sync_hatvp
        case "convictions":
            return sync_wikidata_convictions
        case _:
            raise ValueError(f"Unsupported command: {command}")


def _run_command(args: argparse.Namespace) -> SyncResult | None:
    if args.command in SNAPSHOT_COMMANDS:
        return _snapshot_sync(args.command)(
            dry_run=args.dry_run,
            limit=args.limit,
            min_interval_hours=args.min_interval_hours,
        )
    if args.command == "senate-votes":
        return sync_senate_votes(
            session=args.session,
            dry_run=args.dry_run,
            force=args.force,
            limit=args.limit,
            min_interval_hours=args.min_interval_hours,
        )
    if args.command == "judilibre":
        return sync_judilibre(
            dry_run=args.dry_run,
            limit=args.limit,
            person_slug=args.person_slug,
            min_interval_hours=args.min_interval_hours,
        )
    if args.command == "repair-affiliations":
        return repair_current_organizations(dry_run=args.dry_run)
    if args.command == "status":
        entries = sync_status()
        if not entries:
            log.info("No sync has completed yet")
        for entry in entries:
            log.info(
                "%s: last=%s items=%s cursor=%s duration=%s",
                entry.key,
                entry.last_sync_at.isoformat() if entry.last_sync_at else "never",
                entry.item_count,
                entry.cursor or "-",
                f"{entry.last_duration_s:.1f}s" if entry.last_duration_s is not None else "-",
            )
        return None
    if args.command == "reset":
        if reset_sync(args.key):
            log.info("Reset %s", args.key)
        else:
            log.warning("No sync metadata for %s", args.key)
        return None
    raise ValueError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
    except ValueError:
        configure_logging()
        log.exception("CLI validation error")
        sys.exit(2)

    configure_logging(verbose=parsed_args.verbose)

    try:
        result = _run_command(parsed_args)
    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        sys.exit(1)

    if result is None:
        return
    _report(result)
    if not result.success:
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
