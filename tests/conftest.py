"""Pytest fixtures for dupcomments tests."""

from pathlib import Path
from typing import Generator, List

import pytest
from loguru import logger

from dupcomments.store import CommentStore


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "comments.db"


@pytest.fixture
def store(db_path: Path) -> Generator[CommentStore, None, None]:
    """A migrated, empty comment store on a temporary SQLite file."""
    s = CommentStore.open(db_path)
    yield s
    s.close()


@pytest.fixture
def log_records() -> Generator[List[dict], None, None]:
    """Capture loguru records emitted during the test."""
    records: List[dict] = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    try:
        logger.remove(handler_id)
    except ValueError:
        pass


def seed_group(store: CommentStore, post_id: int, content: str, count: int, status: str = "1") -> List[int]:
    """Insert ``count`` identical comments and return their ids (oldest first)."""
    return [store.add_comment(post_id, content, status) for _ in range(count)]
