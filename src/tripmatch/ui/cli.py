from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING, Any
from uuid import UUID

from dotenv import load_dotenv

from tripmatch.app import (
    add_alias,
    audit_trail,
    delete_correlation,
    evaluate_files,
    import_alias_file,
    list_aliases,
    quality_report,
    reject_correlation,
    remove_alias,
    resolve_name,
    seed_aliases,
    verify_correlation,
)
from tripmatch.config import configure_logging
from tripmatch.domain.audit import snapshot
from tripmatch.domain.model import EntityKind

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from tripmatch.domain.model import AliasEntry

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Correlate vehicle trips with fuel payments")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    aliases = subparsers.add_parser("aliases", help="Alias catalog curation")
    alias_sub = aliases.add_subparsers(dest="alias_command", required=True)
    alias_sub.add_parser("seed", help="Load the built-in reference aliases")
    alias_import = alias_sub.add_parser("import", help="Import aliases from a JSON file")
    alias_import.add_argument("file", type=Path, help="JSON list of aliases")
    alias_add = alias_sub.add_parser("add", help="Add one alias")
    alias_add.add_argument("--kind", type=EntityKind, choices=list(EntityKind), required=True)
    alias_add.add_argument("--canonical-id", type=str, required=True)
    alias_add.add_argument("--alias", type=str, required=True, help="Alias text")
    alias_add.add_argument("--alias-kind", type=str, help="Informational tag, e.g. full_name")
    alias_add.add_argument(
        "--boost",
        type=int,
        help="Confidence boost (defaults to the configured value for the kind)",
    )
    alias_add.add_argument(
        "--exact-only",
        action="store_true",
        help="Only match this alias exactly, never fuzzily",
    )
    alias_add.add_argument("--notes", type=str)
    alias_remove = alias_sub.add_parser("remove", help="Remove an alias by id")
    alias_remove.add_argument("alias_id", type=str)
    alias_list = alias_sub.add_parser("list", help="List catalog aliases")
    alias_list.add_argument("--kind", type=EntityKind, choices=list(EntityKind))

    resolve = subparsers.add_parser("resolve", help="Resolve a name to its canonical identity")
    resolve.add_argument("--kind", type=EntityKind, choices=list(EntityKind), required=True)
    resolve.add_argument("text", type=str)

    evaluate = subparsers.add_parser("evaluate", help="Evaluate a trip against payments")
    evaluate.add_argument("--trip", type=Path, required=True, help="Trip JSON file")
    evaluate.add_argument("--payments", type=Path, required=True, help="Payments JSON file")
    evaluate.add_argument("--actor", type=str, help="Actor recorded in the audit log")
    evaluate.add_argument(
        "--min-confidence",
        type=int,
        help="Skip candidates scoring below this confidence",
    )

    verify = subparsers.add_parser("verify", help="Confirm a proposed correlation")
    verify.add_argument("correlation_id", type=str)
    verify.add_argument("--actor", type=str, required=True)

    reject = subparsers.add_parser("reject", help="Reject a proposed correlation")
    reject.add_argument("correlation_id", type=str)
    reject.add_argument("--actor", type=str, required=True)
    reject.add_argument("--reason", type=str)

    delete = subparsers.add_parser("delete", help="Hard-delete a correlation (admin)")
    delete.add_argument("correlation_id", type=str)
    delete.add_argument("--actor", type=str, required=True)
    delete.add_argument("--reason", type=str)

    audit = subparsers.add_parser("audit", help="Show the audit trail of a correlation")
    audit.add_argument("correlation_id", type=str)
    audit.add_argument("--after", type=int, help="Only entries after this entry id")
    audit.add_argument("--limit", type=int, help="Maximum number of entries")

    report = subparsers.add_parser("report", help="Print quality reports")
    report.add_argument("--days", type=int, help="Restrict to the last N days")

    return parser.parse_args(list(argv))


def _parse_uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError as exc:
        raise ValueError(f"Invalid UUID: {value}") from exc


def _validate(args: argparse.Namespace) -> None:
    if getattr(args, "min_confidence", None) is not None and not 0 <= args.min_confidence <= 100:
        raise ValueError("--min-confidence must be within [0, 100]")
    if getattr(args, "days", None) is not None and args.days < 0:
        raise ValueError("--days must be non-negative")
    if getattr(args, "limit", None) is not None and args.limit <= 0:
        raise ValueError("--limit must be positive")
    for name in ("correlation_id", "alias_id"):
        value = getattr(args, name, None)
        if value is not None:
            setattr(args, name, _parse_uuid(value))


def _emit(payload: Any) -> None:
    sys.stdout.write(json.dumps(payload, indent=2, default=str, ensure_ascii=False))
    sys.stdout.write("\n")


def _alias_dict(entry: AliasEntry) -> dict[str, Any]:
    return {
        "id": entry.id,
        "kind": entry.entity_kind,
        "canonical_id": entry.canonical_id,
        "alias_text": entry.alias_text,
        "alias_kind": entry.alias_kind,
        "confidence_boost": entry.confidence_boost,
        "exact_match_required": entry.exact_match_required,
    }


def _run_aliases(args: argparse.Namespace) -> None:
    if args.alias_command == "seed":
        _emit(asdict(seed_aliases()))
    elif args.alias_command == "import":
        _emit(asdict(import_alias_file(args.file)))
    elif args.alias_command == "add":
        entry = add_alias(
            args.kind,
            args.canonical_id,
            args.alias,
            alias_kind=args.alias_kind,
            confidence_boost=args.boost,
            exact_match_required=args.exact_only,
            notes=args.notes,
        )
        _emit(_alias_dict(entry))
    elif args.alias_command == "remove":
        _emit(_alias_dict(remove_alias(args.alias_id)))
    elif args.alias_command == "list":
        _emit([_alias_dict(entry) for entry in list_aliases(args.kind)])
    else:
        raise ValueError(f"Unsupported aliases command: {args.alias_command}")


def _run(args: argparse.Namespace) -> None:
    command = args.command
    if command == "aliases":
        _run_aliases(args)
    elif command == "resolve":
        result = resolve_name(args.text, args.kind)
        _emit({**asdict(result), "canonical_value": result.canonical_value})
    elif command == "evaluate":
        correlations = evaluate_files(
            args.trip,
            args.payments,
            actor_id=args.actor,
            min_confidence=args.min_confidence,
        )
        _emit([snapshot(item) for item in correlations])
    elif command == "verify":
        _emit(snapshot(verify_correlation(args.correlation_id, args.actor)))
    elif command == "reject":
        _emit(snapshot(reject_correlation(args.correlation_id, args.actor, args.reason)))
    elif command == "delete":
        _emit(asdict(delete_correlation(args.correlation_id, args.actor, reason=args.reason)))
    elif command == "audit":
        entries = audit_trail(args.correlation_id, after=args.after, limit=args.limit)
        _emit([asdict(entry) for entry in entries])
    elif command == "report":
        _emit(asdict(quality_report(days=args.days)))
    else:
        raise ValueError(f"Unsupported command: {command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        _validate(parsed_args)
    except ValueError:
        configure_logging()
        log.exception("CLI validation error")
        sys.exit(2)

    configure_logging(level=logging.DEBUG if parsed_args.verbose else None)
    try:
        _run(parsed_args)
    except Exception:
        log.exception("Command %s failed", parsed_args.command)
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
