# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from datetime import datetime
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from siptrack.app import build_engine
from siptrack.config import configure_logging
from siptrack.domain.status import friendly_label

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from siptrack.domain.engine import ProposalEngine
    from siptrack.domain.model import ProposalRecord

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Track Sui Improvement Proposals")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log per-document detail",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="List all reconciled proposals")
    show_parser = subparsers.add_parser("show", help="Show one proposal")
    show_parser.add_argument("id", help="Proposal id, e.g. 12, SIP-012 or sip-generic-foo")

    for sub in (list_parser, show_parser):
        sub.add_argument(
            "--refresh",
            action="store_true",
            help="Ignore the cached result and fetch again",
        )
        sub.add_argument(
            "--json",
            action="store_true",
            help="Print JSON instead of text",
        )

    return parser.parse_args(list(argv))


def record_to_dict(record: ProposalRecord) -> dict[str, object]:
    data = asdict(record)
    data["source_kind"] = record.source_kind.name.lower()
    data["sources"] = sorted(kind.name.lower() for kind in record.sources)
    data["status_label"] = friendly_label(record.status)
    return data


def _json_default(value: object) -> object:
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Cannot serialise {type(value).__name__}")


def _dump(payload: object) -> str:
    return json.dumps(payload, default=_json_default, indent=2, ensure_ascii=False)


def format_row(record: ProposalRecord) -> str:
    return f"{record.id:<24} {friendly_label(record.status):<14} {record.title}"


def format_detail(record: ProposalRecord) -> str:
    structured = record.structured_summary
    lines = [
        f"{record.id}: {record.title}",
        f"Status:   {record.status} ({friendly_label(record.status)})",
        f"Source:   {record.source_kind.name.lower()}",
        f"Link:     {record.origin_url}",
        f"Created:  {record.created_at.date().isoformat()}",
    ]
    if record.updated_at is not None:
        lines.append(f"Updated:  {record.updated_at.date().isoformat()}")
    if record.merged_at is not None:
        lines.append(f"Merged:   {record.merged_at.date().isoformat()}")
    if record.author:
        lines.append(f"Author:   {record.author}")
    lines.extend(
        [
            "",
            record.summary,
            "",
            f"What it is:      {structured.what_it_is}",
            f"What it changes: {structured.what_it_changes}",
            f"Why it matters:  {structured.why_it_matters}",
        ]
    )
    return "\n".join(lines)


def run(args: argparse.Namespace, engine: ProposalEngine) -> int:
    if args.command == "list":
        records = engine.list_all(force_refresh=args.refresh)
        if args.json:
            print(_dump([record_to_dict(record) for record in records]))
        else:
            for record in records:
                print(format_row(record))
        return 0

    if args.command == "show":
        record = engine.get_by_id(args.id, force_refresh=args.refresh)
        if record is None:
            log.error("No proposal found for %r", args.id)
            return 1
        print(_dump(record_to_dict(record)) if args.json else format_detail(record))
        return 0

    raise ValueError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        exit_code = run(parsed_args, build_engine())
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)
    sys.exit(exit_code)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def cli() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    cli()
