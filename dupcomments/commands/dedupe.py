"""CLI command for moving duplicate comments to the trash."""
from __future__ import annotations

import argparse
from argparse import _SubParsersAction
from typing import Optional, Sequence

from ..dedupe import DuplicateFinder, clamp_batch_size, find_duplicate_groups, run_until_complete
from ..errors import StorageError
from ..util import snippet
from .common import add_common_arguments, load_app_config, open_store, resolve_statuses


def _configure_parser(parser: argparse.ArgumentParser) -> None:
    add_common_arguments(parser)
    parser.add_argument("--status", action="append", help="Comment status to check: 1/approved, 0/pending, spam, trash (can repeat)")
    parser.add_argument("--batch-size", type=int, help="Duplicate groups per batch (clamped to 1-100)")
    parser.add_argument("--max-batches", type=int, help="Stop after this many batches even if duplicates remain")
    parser.add_argument("--dry-run", action="store_true", help="Preview duplicate groups without moving anything to the trash")
    parser.add_argument("--no-confirm", action="store_true", help="Skip confirmation prompt")


def add_parser(subparsers: _SubParsersAction[argparse.ArgumentParser]) -> argparse.ArgumentParser:
    parser = subparsers.add_parser(
        "dedupe",
        help="Move duplicate comments to the trash",
        description="Find identical comments on the same post and move all but the newest copy to the trash, in batches.",
    )
    _configure_parser(parser)
    parser.set_defaults(handler=run_from_args)
    return parser


def build_parser(prog: Optional[str] = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=prog or "dupcomments dedupe", description="Move duplicate comments to the trash")
    _configure_parser(parser)
    return parser


def run_from_args(args: argparse.Namespace) -> int:
    cfg = load_app_config(args)
    statuses = resolve_statuses(args.status, cfg.dedupe.statuses)
    batch_size = clamp_batch_size(args.batch_size if args.batch_size is not None else cfg.dedupe.batch_size)
    max_batches = args.max_batches if args.max_batches is not None else cfg.dedupe.max_batches

    with open_store(cfg) as store:
        counts = store.count_by_status()
        print("=" * 70)
        print("DUPLICATE COMMENT REMOVAL")
        print("=" * 70)
        print(f"Database:     {cfg.db.path}")
        print(f"Statuses:     {', '.join(statuses)}")
        print(f"Batch size:   {batch_size}")
        print(
            "Comments:     "
            + " | ".join(f"{status}={count:,}" for status, count in counts.items())
        )

        try:
            preview = find_duplicate_groups(store, statuses, 5)
        except StorageError as e:
            print(f"[ERROR] Database error: {e}")
            return 1

        if not preview:
            print("\nNo duplicate comments found. Nothing to do.")
            return 0

        print("\nExamples:")
        for group in preview:
            print(f"  • Post {group.post_id}: {group.duplicate_count} copies of \"{snippet(group.content)}\"")

        if args.dry_run:
            print("\nDry run requested; no comments were moved to the trash.")
            return 0

        print("\nImportant: back up your database. Older copies of each duplicate will be moved to the trash.")
        if not args.no_confirm:
            proceed = input("Proceed with moving duplicates to the trash? [y/N]: ").strip().lower() == "y"
            if not proceed:
                print("Cancelled. No changes made.")
                return 0

        print("\nProcessing...")
        finder = DuplicateFinder(store)
        summary = run_until_complete(
            finder,
            statuses,
            batch_size,
            log_cb=print,
            max_batches=max_batches,
        )

    print("\n" + "=" * 70)
    print("DUPLICATE COMMENT REMOVAL (RESULT)")
    print("=" * 70)
    print(f"Batches run:             {summary.batches:>10,}")
    print(f"Comments processed:      {summary.processed:>10,}")
    print(f"Moved to trash:          {summary.trashed:>10,}")
    if summary.error:
        print(f"\nError: {summary.error}")
        return 1
    if summary.completed:
        print("\nSuccess! No duplicates remain for the selected statuses.")
    elif summary.stalled:
        print("\nStopped: the last batch moved nothing to the trash. Remaining groups are already trashed copies.")
    else:
        print("\nStopped before completion; run again to continue.")
    return 0


def run_cli(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    return run_from_args(args)


__all__ = ["add_parser", "build_parser", "run_cli", "run_from_args"]
