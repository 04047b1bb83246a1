"""Helpers shared by the CLI commands."""
from __future__ import annotations

import argparse
from pathlib import Path
from typing import Iterable, List, Optional

from ..config import AppConfig, load_config
from ..log import setup_logging
from ..models import parse_status
from ..store import CommentStore

DEFAULT_CONFIG = "config/dupcomments.yaml"


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", default=DEFAULT_CONFIG, help="Path to config file")
    parser.add_argument("--db", help="Comment database path (overrides db.path from config)")
    parser.add_argument("--log-level", help="Log level (DEBUG, INFO, WARNING, ERROR)")
    parser.add_argument("--log-file", help="Also write logs to this file")


def load_app_config(args: argparse.Namespace) -> AppConfig:
    path = Path(args.config)
    if path.exists():
        cfg = load_config(path)
    elif args.config != DEFAULT_CONFIG:
        raise SystemExit(f"Config file not found: {path}")
    else:
        cfg = AppConfig()
    if getattr(args, "db", None):
        cfg.db.path = args.db
    log_level = getattr(args, "log_level", None)
    if log_level:
        cfg.logging.level = log_level
    log_file = getattr(args, "log_file", None)
    if log_file:
        cfg.logging.file = log_file
    setup_logging(
        level=cfg.logging.level,
        log_file=Path(cfg.logging.file) if cfg.logging.file else None,
        rotation=cfg.logging.rotation,
        retention=cfg.logging.retention,
    )
    return cfg


def open_store(cfg: AppConfig) -> CommentStore:
    return CommentStore.open(
        Path(cfg.db.path),
        journal_mode=cfg.db.journal_mode,
        synchronous=cfg.db.synchronous,
        busy_timeout_ms=cfg.db.busy_timeout_ms,
    )


def resolve_statuses(values: Optional[Iterable[str]], fallback: Iterable[str]) -> List[str]:
    out: List[str] = []
    for value in values or fallback:
        try:
            status = parse_status(value)
        except ValueError as e:
            raise SystemExit(str(e))
        if status not in out:
            out.append(status)
    if not out:
        raise SystemExit("No comment statuses selected.")
    return out
