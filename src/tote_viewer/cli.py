from __future__ import annotations

import argparse
import asyncio
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from .config import load_config
from .exceptions import ConfigError
from .export import export_tote_csv
from .history_store import RecentBarcodes
from .logging import configure_logging
from .models import ErrorState, ToteContents
from .orchestrator import ScanOutcome, ScanOutcomeKind
from .session import ToteSession
from .ui_errors import to_user_facing_error
from .view import SORT_FIELDS, ToteView, total_quantity

ITEM_COLUMNS = [("sku", "SKU"), ("name", "Name"), ("quantity", "Qty")]
HISTORY_COLUMNS = [("scanned_at", "Scanned at"), ("tote_id", "Tote"), ("item_count", "Items"), ("result", "Result")]
SORT_USAGE = f"Usage: s <{'|'.join(SORT_FIELDS)}>"

HELP_TEXT = (
    "Commands: <barcode> scan | r retry | f refresh | h history | c clear history | "
    "s <name|sku|quantity> sort | / <text> filter | e [dir] export | q quit"
)


def print_table(title: str, rows: list[dict[str, Any]], columns: list[tuple[str, str]]) -> None:
    print(f"\n{title}")
    if not rows:
        print("(no items)")
        return

    widths = []
    for key, header in columns:
        max_cell = max(len(str(row.get(key, ""))) for row in rows)
        widths.append(max(len(header), max_cell))

    print(" | ".join(header.ljust(widths[idx]) for idx, (_, header) in enumerate(columns)))
    print("-+-".join("-" * width for width in widths))
    for row in rows:
        print(" | ".join(str(row.get(key, "")).ljust(widths[idx]) for idx, (key, _) in enumerate(columns)))


def render_tote(contents: ToteContents | None, view: ToteView) -> None:
    if contents is None:
        print("No tote loaded.")
        return
    rows = view.rows(contents.items)
    print_table(
        f"Tote {contents.tote_id} (updated {contents.updated_at.isoformat()})",
        [item.model_dump() for item in rows],
        ITEM_COLUMNS,
    )
    print(f"Total quantity: {total_quantity(rows)} | sort: {view.sort.field} {view.sort.direction}")


def render_outcome(outcome: ScanOutcome) -> None:
    if outcome.kind in {ScanOutcomeKind.REJECTED, ScanOutcomeKind.RATE_LIMITED}:
        print(f"[{outcome.kind.value.upper()}] {outcome.message}")


def render_error(error: ErrorState) -> None:
    facing = to_user_facing_error(error)
    if facing is None:
        return
    action = "press r to retry" if facing.can_retry else "not retryable"
    print(f"[ERROR] {facing.message} (code={facing.details}, {action})")


async def run_scan(session: ToteSession, tote_id: str, export_dir: str | None) -> int:
    outcome = await session.station.submit(tote_id)
    render_outcome(outcome)
    if outcome.kind is ScanOutcomeKind.FAILURE:
        render_error(session.store.state.error)
        return 1
    if not outcome.ok:
        return 2
    render_tote(outcome.contents, ToteView())
    if export_dir and outcome.contents is not None:
        print(f"Exported to {export_tote_csv(outcome.contents, export_dir)}")
    return 0


async def run_console(session: ToteSession, default_tote_id: str | None) -> int:
    view = ToteView()
    unsubscribe = session.store.subscribe("error", render_error, emit_current=False)
    print(HELP_TEXT)
    try:
        if default_tote_id:
            await session.retriever.scan(default_tote_id)
            render_tote(session.store.state.current_tote, view)
        while True:
            line = (await asyncio.to_thread(input, "tote> ")).strip()
            command, _, argument = line.partition(" ")
            if not line:
                continue
            if command == "q":
                return 0
            if command in {"r", "f"}:
                action = session.retriever.retry if command == "r" else session.retriever.refresh
                if await action() is None:
                    print("Nothing scanned yet.")
                render_tote(session.store.state.current_tote, view)
            elif command == "h":
                history = [
                    {
                        "scanned_at": entry.scanned_at.strftime("%H:%M:%S"),
                        "tote_id": entry.tote_id,
                        "item_count": entry.item_count,
                        "result": "ok" if entry.success else entry.error_message,
                    }
                    for entry in session.store.state.scan_history
                ]
                print_table("Scan history", history, HISTORY_COLUMNS)
            elif command == "c":
                session.station.clear_history()
                print("History cleared.")
            elif command == "s" and argument in SORT_FIELDS:
                view = ToteView(sort=view.sort.toggle(argument), filter_text=view.filter_text)
                render_tote(session.store.state.current_tote, view)
            elif command == "s":
                print(SORT_USAGE)
            elif command == "/":
                view = ToteView(sort=view.sort, filter_text=argument)
                render_tote(session.store.state.current_tote, view)
            elif command == "e":
                current = session.store.state.current_tote
                if current is None:
                    print("No tote loaded.")
                else:
                    print(f"Exported to {export_tote_csv(current, argument or 'exports')}")
            else:
                outcome = await session.station.submit(line)
                render_outcome(outcome)
                if outcome.ok:
                    view = ToteView(sort=view.sort)
                    render_tote(outcome.contents, view)
    except (EOFError, KeyboardInterrupt):
        return 0
    finally:
        unsubscribe()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tote-viewer", description="Scan a tote and view its contents.")
    parser.add_argument("--env-file", default=None, help="Optional .env file with TOTE_* settings.")
    parser.add_argument("--verbose", action="store_true", help="Log retries and cache activity.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan = subparsers.add_parser("scan", help="Scan one tote id and print its items.")
    scan.add_argument("tote_id")
    scan.add_argument("--export", dest="export_dir", default=None, help="Write the items to CSV in this directory.")

    console = subparsers.add_parser("console", help="Interactive scan console.")
    console.add_argument("--no-default", action="store_true", help="Do not load the default tote on start.")
    return parser


async def _run(args: argparse.Namespace) -> int:
    config = load_config(args.env_file)
    session = ToteSession(config=config, recent=RecentBarcodes(Path(config.recent_barcodes_path)))
    try:
        if args.command == "scan":
            return await run_scan(session, args.tote_id, args.export_dir)
        return await run_console(session, None if args.no_default else config.default_tote_id)
    finally:
        await session.aclose()


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(logging.INFO if args.verbose else logging.WARNING)
    try:
        return asyncio.run(_run(args))
    except ConfigError as exc:
        print(f"Configuration error: {exc}")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
