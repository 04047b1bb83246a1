"""SQLite-backed comment store used by the duplicate finder."""
from __future__ import annotations
import sqlite3
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from loguru import logger

from .db import connect, migrate
from .errors import StorageError
from .models import CommentStatus

TRASH_META_STATUS = "_wp_trash_meta_status"
TRASH_META_TIME = "_wp_trash_meta_time"


def _placeholders(values: Sequence[Any]) -> str:
    return ",".join("?" for _ in values)


class CommentStore:
    def __init__(self, con: sqlite3.Connection) -> None:
        self.con = con

    @classmethod
    def open(
        cls,
        db_path: Path,
        journal_mode: str = "WAL",
        synchronous: str = "NORMAL",
        busy_timeout_ms: int = 5000,
    ) -> "CommentStore":
        con = connect(Path(db_path), journal_mode, synchronous, busy_timeout_ms)
        migrate(con)
        return cls(con)

    def close(self) -> None:
        self.con.close()

    def __enter__(self) -> "CommentStore":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def _fetchall(self, sql: str, params: Sequence[Any]) -> List[Tuple[Any, ...]]:
        try:
            cur = self.con.execute(sql, tuple(params))
            return cur.fetchall()
        except sqlite3.Error as e:
            raise StorageError(str(e)) from e

    def query_groups(self, status_in: Sequence[str], limit: int) -> List[Tuple[int, str, int]]:
        """Return up to ``limit`` (post id, content, count) rows with count > 1.

        Grouping is per post and per content digest, so identical content on
        different posts never lands in the same group.
        """
        sql = f"""
            SELECT
                comment_post_ID,
                MIN(comment_content) AS comment_content,
                COUNT(*) AS duplicate_count
            FROM comments
            WHERE comment_approved IN ({_placeholders(status_in)})
            GROUP BY comment_post_ID, content_digest(comment_content)
            HAVING COUNT(*) > 1
            LIMIT ?
        """
        return self._fetchall(sql, [*status_in, int(limit)])

    def query_member_ids(self, post_id: int, content: str, status_in: Sequence[str]) -> List[int]:
        """Ids of comments on ``post_id`` whose content equals ``content`` exactly, newest first."""
        sql = f"""
            SELECT comment_ID
            FROM comments
            WHERE comment_post_ID = ?
              AND comment_content = ?
              AND comment_approved IN ({_placeholders(status_in)})
            ORDER BY comment_ID DESC
        """
        rows = self._fetchall(sql, [int(post_id), content, *status_in])
        return [int(r[0]) for r in rows]

    def get_status(self, comment_id: int) -> Optional[str]:
        rows = self._fetchall(
            "SELECT comment_approved FROM comments WHERE comment_ID = ?", [int(comment_id)]
        )
        return rows[0][0] if rows else None

    def set_status_retired(self, comment_id: int) -> bool:
        """Move one comment to the trash, remembering its previous status.

        Returns False if the comment is gone, already in the trash, or the
        update fails. Never raises.
        """
        trash = CommentStatus.TRASH.value
        try:
            with self.con:
                row = self.con.execute(
                    "SELECT comment_approved FROM comments WHERE comment_ID = ?", (int(comment_id),)
                ).fetchone()
                if row is None or row[0] == trash:
                    return False
                cur = self.con.execute(
                    "UPDATE comments SET comment_approved = ? WHERE comment_ID = ? AND comment_approved <> ?",
                    (trash, int(comment_id), trash),
                )
                if cur.rowcount != 1:
                    return False
                self.con.executemany(
                    "INSERT INTO commentmeta (comment_id, meta_key, meta_value) VALUES (?, ?, ?)",
                    [
                        (int(comment_id), TRASH_META_STATUS, row[0]),
                        (int(comment_id), TRASH_META_TIME, str(int(time.time()))),
                    ],
                )
            return True
        except sqlite3.Error as e:
            logger.error(f"Failed to move comment {comment_id} to trash: {e}")
            return False

    def get_meta(self, comment_id: int, meta_key: str) -> Optional[str]:
        rows = self._fetchall(
            "SELECT meta_value FROM commentmeta WHERE comment_id = ? AND meta_key = ? ORDER BY meta_id DESC LIMIT 1",
            [int(comment_id), meta_key],
        )
        return rows[0][0] if rows else None

    def add_comment(
        self,
        post_id: int,
        content: str,
        status: str = CommentStatus.APPROVED.value,
        author: str = "",
        comment_id: Optional[int] = None,
        date_gmt: Optional[str] = None,
    ) -> int:
        cols = ["comment_post_ID", "comment_content", "comment_approved", "comment_author"]
        vals: List[Any] = [int(post_id), content, status, author]
        if comment_id is not None:
            cols.append("comment_ID")
            vals.append(int(comment_id))
        if date_gmt is not None:
            cols.append("comment_date_gmt")
            vals.append(date_gmt)
        try:
            with self.con:
                cur = self.con.execute(
                    f"INSERT INTO comments ({', '.join(cols)}) VALUES ({_placeholders(vals)})",
                    vals,
                )
        except sqlite3.Error as e:
            raise StorageError(str(e)) from e
        return int(cur.lastrowid)

    def count_by_status(self) -> Dict[str, int]:
        counts = {s.value: 0 for s in CommentStatus}
        for status, n in self._fetchall(
            "SELECT comment_approved, COUNT(*) FROM comments GROUP BY comment_approved", []
        ):
            counts[status] = int(n)
        return counts
