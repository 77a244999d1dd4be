#!/usr/bin/env python3
"""CLI utilities for inspecting and exporting the derived service board."""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

# Support running as a standalone script from repo root.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from serviceboard.board import ALL_WORKFLOWS, BoardEngine
from serviceboard.config import BoardConfigError, load_board_config, parse_settings
from serviceboard.logger import set_level
from serviceboard.sources import SourceError, create_source


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Service board CLI")
    parser.add_argument("--config", default=None, help="Path to board.yaml")
    parser.add_argument("--source", default=None, help="Source name (overrides config)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    def _view_args(sub: argparse.ArgumentParser) -> None:
        sub.add_argument("--workflow", default=ALL_WORKFLOWS, help="ALL or a workflow id")
        sub.add_argument(
            "--order",
            action="append",
            dest="orders",
            default=[],
            help="Restrict to an order id (repeatable)",
        )

    columns_parser = subparsers.add_parser("columns", help="Print columns with item counts")
    _view_args(columns_parser)

    items_parser = subparsers.add_parser("items", help="Print the ordered items of one column")
    _view_args(items_parser)
    items_parser.add_argument("--column", required=True)

    subparsers.add_parser("counts", help="Print item counts per workflow")

    unclassified_parser = subparsers.add_parser(
        "unclassified",
        help="Print items that land in no column",
    )
    _view_args(unclassified_parser)

    export_parser = subparsers.add_parser("export", help="Write board JSON")
    _view_args(export_parser)
    export_parser.add_argument("--out", default=None, help="Output file (default: config export_path)")

    watch_parser = subparsers.add_parser(
        "watch",
        help="Poll the source and re-export the board on every change",
    )
    _view_args(watch_parser)
    watch_parser.add_argument("--interval", type=float, default=5.0)
    watch_parser.add_argument("--out", default=None)

    return parser


def _poll(source) -> list[str]:
    if hasattr(source, "poll"):
        return source.poll()
    if hasattr(source, "reload"):
        return source.reload()
    return []


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = _parser().parse_args(argv)

    try:
        config = load_board_config(args.config)
        settings = parse_settings(config)
        set_level(settings.log_level)

        source = create_source(args.source or settings.default_source, config)
        if hasattr(source, "poll"):
            source.poll()
        engine = BoardEngine.from_settings(settings, source)
        engine.start()

        if args.command == "columns":
            for column in engine.get_columns(args.workflow, args.orders):
                items = engine.get_items_for_column(column.id, args.workflow, args.orders)
                print(f"column:{column.id}:{column.title}:{len(items)}")
            return 0

        if args.command == "items":
            for item in engine.get_items_for_column(args.column, args.workflow, args.orders):
                print(f"item:{item.id}:{item.order_id}:{item.status}:{item.name}")
            return 0

        if args.command == "counts":
            print(f"count:{ALL_WORKFLOWS}:{engine.count_items(ALL_WORKFLOWS)}")
            for workflow_id in engine.snapshot.index.workflows:
                print(f"count:{workflow_id}:{engine.count_items(workflow_id)}")
            return 0

        if args.command == "unclassified":
            for item in engine.unclassified_items(args.workflow, args.orders):
                print(f"unclassified:{item.id}:{item.workflow_id or ''}:{item.status}")
            return 0

        if args.command == "export":
            target = engine.write_board_data(args.out, args.workflow, args.orders)
            print(f"export:{target}")
            return 0

        if args.command == "watch":
            engine.on_board_changed(
                lambda _snapshot: print(
                    f"export:{engine.write_board_data(args.out, args.workflow, args.orders)}",
                    flush=True,
                )
            )
            engine.write_board_data(args.out, args.workflow, args.orders)
            try:
                while True:
                    time.sleep(args.interval)
                    try:
                        _poll(source)
                    except SourceError as err:
                        print(f"error:{err}", file=sys.stderr)
            except KeyboardInterrupt:
                engine.stop()
                return 0
    except (BoardConfigError, SourceError) as err:
        print(f"invalid:{err}", file=sys.stderr)
        return 2
    except Exception as err:
        print(f"error:{err}", file=sys.stderr)
        return 1

    return 1


if __name__ == "__main__":
    raise SystemExit(main())
