"""CLI command for listing duplicate comment groups without changing anything."""
from __future__ import annotations

import argparse
from argparse import _SubParsersAction
from typing import Optional, Sequence

from ..dedupe import find_duplicate_groups
from ..errors import StorageError
from ..util import snippet
from .common import add_common_arguments, load_app_config, open_store, resolve_statuses


def _configure_parser(parser: argparse.ArgumentParser) -> None:
    add_common_arguments(parser)
    parser.add_argument("--status", action="append", help="Comment status to check: 1/approved, 0/pending, spam, trash (can repeat)")
    parser.add_argument("--limit", type=int, default=100, help="Limit number of duplicate groups in report")


def add_parser(subparsers: _SubParsersAction[argparse.ArgumentParser]) -> argparse.ArgumentParser:
    parser = subparsers.add_parser(
        "report",
        help="List duplicate comment groups",
        description="Show groups of identical comments on the same post without moving anything to the trash.",
    )
    _configure_parser(parser)
    parser.set_defaults(handler=run_from_args)
    return parser


def build_parser(prog: Optional[str] = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=prog or "dupcomments report", description="List duplicate comment groups")
    _configure_parser(parser)
    return parser


def run_from_args(args: argparse.Namespace) -> int:
    cfg = load_app_config(args)
    statuses = resolve_statuses(args.status, cfg.dedupe.statuses)
    limit = max(1, args.limit)

    with open_store(cfg) as store:
        try:
            groups = find_duplicate_groups(store, statuses, limit)
        except StorageError as e:
            print(f"[ERROR] Database error: {e}")
            return 1

    print("\n" + "=" * 70)
    print(f"DUPLICATE COMMENT GROUPS (statuses: {', '.join(statuses)}, limit {limit})")
    print("=" * 70)
    if not groups:
        print("No duplicate comments found.")
        return 0

    total_removable = 0
    for i, group in enumerate(groups, 1):
        total_removable += group.duplicate_count - 1
        print(f"\n#{i} - post {group.post_id}: {group.duplicate_count} copies")
        print(f"    \"{snippet(group.content)}\"")
    print("\n" + "-" * 70)
    print(f"Groups listed:           {len(groups):>10,}")
    print(f"Removable duplicates:    {total_removable:>10,}")
    if len(groups) >= limit:
        print(f"(showing first {limit} groups; more may exist)")
    return 0


def run_cli(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    return run_from_args(args)


__all__ = ["add_parser", "build_parser", "run_cli", "run_from_args"]
