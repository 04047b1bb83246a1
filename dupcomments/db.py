from __future__ import annotations
import sqlite3
from pathlib import Path

from .util import content_digest

JOURNAL_MODES = ("DELETE", "TRUNCATE", "PERSIST", "MEMORY", "WAL", "OFF")
SYNCHRONOUS_MODES = ("OFF", "NORMAL", "FULL", "EXTRA")

DDL = r"""
CREATE TABLE IF NOT EXISTS comments (
  comment_ID INTEGER PRIMARY KEY AUTOINCREMENT,
  comment_post_ID INTEGER NOT NULL DEFAULT 0,
  comment_author TEXT NOT NULL DEFAULT '',
  comment_date_gmt TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now')),
  comment_content TEXT NOT NULL,
  comment_approved TEXT NOT NULL DEFAULT '1'
    CHECK (comment_approved IN ('1', '0', 'spam', 'trash'))
);
CREATE TABLE IF NOT EXISTS commentmeta (
  meta_id INTEGER PRIMARY KEY,
  comment_id INTEGER NOT NULL REFERENCES comments(comment_ID),
  meta_key TEXT NOT NULL,
  meta_value TEXT
);
CREATE INDEX IF NOT EXISTS idx_comments_approved_post ON comments(comment_approved, comment_post_ID);
CREATE INDEX IF NOT EXISTS idx_comments_post ON comments(comment_post_ID);
CREATE INDEX IF NOT EXISTS idx_commentmeta_comment ON commentmeta(comment_id, meta_key);
"""

def connect(
    db_path: Path,
    journal_mode: str = "WAL",
    synchronous: str = "NORMAL",
    busy_timeout_ms: int = 5000,
) -> sqlite3.Connection:
    journal_mode = journal_mode.upper()
    synchronous = synchronous.upper()
    if journal_mode not in JOURNAL_MODES:
        raise ValueError(f"unsupported journal_mode: {journal_mode!r}")
    if synchronous not in SYNCHRONOUS_MODES:
        raise ValueError(f"unsupported synchronous mode: {synchronous!r}")
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    con = sqlite3.connect(str(db_path))
    con.execute("PRAGMA foreign_keys=ON;")
    con.execute(f"PRAGMA journal_mode={journal_mode};")
    con.execute(f"PRAGMA synchronous={synchronous};")
    con.execute(f"PRAGMA busy_timeout={int(busy_timeout_ms)};")
    # Grouping key for the duplicate query; SQLite has no MD5()
    con.create_function("content_digest", 1, content_digest, deterministic=True)
    return con

def migrate(con: sqlite3.Connection) -> None:
    con.executescript(DDL)
    con.commit()
