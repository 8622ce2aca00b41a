#!/usr/bin/env python3
"""FocusFlow CLI - direct control over time blocks.

Commands:
- init-db
- add / update / delete
- quick (bare HH:MM, next occurrence, one hour)
- list / range / overlaps / conflicts
- stats
- export (CSV)
"""

import argparse
import logging
import sys
from datetime import datetime

from focusflow import config
from focusflow.errors import TimeBlockError
from focusflow.models import TimeBlock
from focusflow.observability import bind_call, configure_logging
from focusflow.store import BlockStore
from focusflow.time_truth import BlockManager, QuickAdd, summarize

logger = logging.getLogger(__name__)


def print_header(text: str):
    """Print a section header."""
    print(f"\n{'═' * 50}")
    print(f"  {text}")
    print(f"{'═' * 50}")


def print_table(headers: list, rows: list, widths: list = None):
    """Print a simple table."""
    if not widths:
        widths = [max(len(str(row[i])) for row in [headers] + rows) for i in range(len(headers))]

    header_str = " │ ".join(str(h).ljust(w) for h, w in zip(headers, widths))
    print(header_str)
    print("─" * len(header_str))

    for row in rows:
        print(" │ ".join(str(c)[:w].ljust(w) for c, w in zip(row, widths)))


def _fmt(dt: datetime) -> str:
    return dt.strftime("%Y-%m-%d %H:%M %Z")


def print_blocks(blocks: list[TimeBlock]):
    if not blocks:
        print("No time blocks.")
        return
    rows = [
        [b.id, b.title[:35], _fmt(b.start_time), _fmt(b.end_time), f"{b.duration_hours:.2f}"]
        for b in blocks
    ]
    print_table(["ID", "Title", "Start", "End", "Hours"], rows)


def _instant(text: str) -> datetime:
    try:
        return datetime.fromisoformat(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"not an ISO-8601 datetime: {text!r}") from e


# ==================== Commands ====================


def cmd_init_db(manager: BlockManager, args) -> None:
    print(f"OK: initialized {manager.store.db_path}")


def cmd_add(manager: BlockManager, args) -> None:
    clashes = manager.find_overlapping(args.owner, args.start, args.end)
    block = manager.create(args.owner, args.title, args.description, args.start, args.end)
    print(f"Created {block.id}")
    for other in clashes:
        print(f"  warning: overlaps {other.id} ({other.title})")


def cmd_update(manager: BlockManager, args) -> None:
    block = manager.update(
        args.id, args.owner, args.title, args.description, args.start, args.end
    )
    print(f"Updated {block.id}")


def cmd_delete(manager: BlockManager, args) -> None:
    manager.delete(args.id, args.owner)
    print(f"Deleted {args.id}")


def cmd_quick(manager: BlockManager, args) -> None:
    block = QuickAdd(manager).add(args.owner, args.title, args.at)
    print(f"Created {block.id}: {_fmt(block.start_time)} - {_fmt(block.end_time)}")


def cmd_list(manager: BlockManager, args) -> None:
    print_header(f"TIME BLOCKS ({args.owner})")
    print_blocks(manager.find_by_owner(args.owner))


def cmd_range(manager: BlockManager, args) -> None:
    blocks = manager.find_by_owner_and_range(args.owner, args.start, args.end)
    print_header(f"TIME BLOCKS {args.start:%Y-%m-%d %H:%M} → {args.end:%Y-%m-%d %H:%M}")
    print_blocks(blocks)
    totals = summarize(blocks)
    print(f"\n{totals.count} blocks, {totals.total_hours:.2f} hours")


def cmd_overlaps(manager: BlockManager, args) -> None:
    print_header("OVERLAPPING BLOCKS")
    print_blocks(manager.find_overlapping(args.owner, args.start, args.end, args.exclude))


def cmd_conflicts(manager: BlockManager, args) -> None:
    print_header("CONFLICTS")
    conflicts = manager.get_conflicts(args.owner)
    if not conflicts:
        print("No conflicts.")
        return
    rows = [
        [c.block_a_id, c.block_b_id, _fmt(c.overlap_start), _fmt(c.overlap_end)]
        for c in conflicts
    ]
    print_table(["Block A", "Block B", "From", "To"], rows)


def cmd_stats(manager: BlockManager, args) -> None:
    stats = manager.stats(args.owner)
    print_header("STATISTICS")
    print(f"  Blocks:        {stats.count}")
    print(f"  Total hours:   {stats.total_hours:.2f}")
    average = f"{stats.average_hours:.2f}" if stats.average_hours is not None else "-"
    print(f"  Average hours: {average}")


def cmd_export(manager: BlockManager, args) -> None:
    if args.out:
        with open(args.out, "w", newline="", encoding="utf-8") as f:
            count = manager.export_csv(args.owner, f)
        print(f"Exported {count} blocks to {args.out}")
    else:
        manager.export_csv(args.owner, sys.stdout)


COMMANDS = {
    "init-db": cmd_init_db,
    "add": cmd_add,
    "update": cmd_update,
    "delete": cmd_delete,
    "quick": cmd_quick,
    "list": cmd_list,
    "range": cmd_range,
    "overlaps": cmd_overlaps,
    "conflicts": cmd_conflicts,
    "stats": cmd_stats,
    "export": cmd_export,
}


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="focusflow", description="Manage personal time blocks")
    p.add_argument("--db", default=None, help="Database path (default: FOCUSFLOW_DB or ~/.focusflow)")
    p.add_argument("--log-level", default=config.LOG_LEVEL)
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("init-db")

    def owned(name: str, **kwargs) -> argparse.ArgumentParser:
        sp = sub.add_parser(name, **kwargs)
        sp.add_argument("--owner", required=True, help="Owner identifier")
        return sp

    for name in ("add", "update"):
        sp = owned(name)
        if name == "update":
            sp.add_argument("--id", required=True)
        sp.add_argument("--title", required=True)
        sp.add_argument("--description", default=None)
        sp.add_argument("--start", required=True, type=_instant)
        sp.add_argument("--end", required=True, type=_instant)

    owned("delete").add_argument("--id", required=True)

    q = owned("quick", help="Add a one-hour block at the next HH:MM")
    q.add_argument("--title", required=True)
    q.add_argument("--at", required=True, help="Wall-clock time HH:MM")

    owned("list")
    owned("conflicts")
    owned("stats")

    for name in ("range", "overlaps"):
        sp = owned(name)
        sp.add_argument("--start", required=True, type=_instant)
        sp.add_argument("--end", required=True, type=_instant)
        if name == "overlaps":
            sp.add_argument("--exclude", default=None, help="Block id to ignore")

    owned("export").add_argument("--out", default=None, help="File path (default: stdout)")
    return p


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level, config.LOG_JSON)

    store = BlockStore(args.db)
    try:
        with bind_call(owner_id=getattr(args, "owner", None)):
            COMMANDS[args.cmd](BlockManager(store), args)
    except TimeBlockError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        store.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
