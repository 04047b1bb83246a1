"""CLI command that runs a single batch request and prints the JSON response."""
from __future__ import annotations

import argparse
import json
import sys
from argparse import _SubParsersAction
from typing import Any, Optional, Sequence

from loguru import logger

from ..errors import INVALID_REQUEST_MESSAGE
from ..handler import error_response, handle_batch_request
from .common import add_common_arguments, load_app_config, open_store


def _configure_parser(parser: argparse.ArgumentParser) -> None:
    add_common_arguments(parser)
    parser.add_argument("--request", help='JSON request, e.g. \'{"statuses": ["1"], "batch_size": 100}\' (default: read stdin)')


def add_parser(subparsers: _SubParsersAction[argparse.ArgumentParser]) -> argparse.ArgumentParser:
    parser = subparsers.add_parser(
        "batch",
        help="Process one batch from a JSON request",
        description="Read a JSON batch request, process one batch of duplicate groups, and print the JSON response. Repeat until \"completed\" is true.",
    )
    _configure_parser(parser)
    parser.set_defaults(handler=run_from_args)
    return parser


def build_parser(prog: Optional[str] = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=prog or "dupcomments batch", description="Process one batch from a JSON request")
    _configure_parser(parser)
    return parser


def run_from_args(args: argparse.Namespace) -> int:
    cfg = load_app_config(args)
    legacy = cfg.response.legacy_deleted_field
    raw = args.request if args.request is not None else sys.stdin.read()

    payload: Any
    try:
        payload = json.loads(raw) if raw.strip() else {}
    except json.JSONDecodeError as e:
        logger.warning(f"Batch request is not valid JSON: {e}")
        response = error_response(INVALID_REQUEST_MESSAGE, legacy)
    else:
        with open_store(cfg) as store:
            response = handle_batch_request(store, payload, legacy_fields=legacy)

    print(json.dumps(response))
    return 1 if response["error"] else 0


def run_cli(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    return run_from_args(args)


__all__ = ["add_parser", "build_parser", "run_cli", "run_from_args"]
