# dupcomments/dedupe.py
"""
Duplicate comment detection and removal in bounded batches.

A duplicate group is two or more comments on the same post with identical
content. Within each group the newest comment (highest id) is kept and the
others are moved to the trash. Grouping uses a content digest; the members of
every group are re-fetched by exact content before anything is trashed, so a
digest collision can never trash a comment with different text.

Each call to ``DuplicateFinder.process`` handles at most ``batch_size`` groups.
Trashed comments stop matching the grouping query (unless "trash" itself is
in the filter), so calling again with the same statuses converges until the
result reports ``completed``.
"""
from __future__ import annotations
from collections.abc import Iterable as IterableABC
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional

from loguru import logger

from .errors import INVALID_STATUSES_MESSAGE, NO_VALID_STATUSES_MESSAGE, STORAGE_ERROR_MESSAGE, StorageError
from .models import BatchResult, CommentStatus, DuplicateGroup, filter_statuses
from .store import CommentStore

MIN_BATCH_SIZE = 1
MAX_BATCH_SIZE = 100
DEFAULT_BATCH_SIZE = 100

# Callback type aliases (kept local for loose coupling)
ProgressCallback = Callable[[str, int, int, str], None]
LogCallback = Callable[[str], None]


def clamp_batch_size(batch_size: Any) -> int:
    """Clamp to [MIN_BATCH_SIZE, MAX_BATCH_SIZE]; non-numeric input counts as the minimum."""
    try:
        size = int(batch_size)
    except (TypeError, ValueError):
        size = MIN_BATCH_SIZE
    if size > MAX_BATCH_SIZE:
        size = MAX_BATCH_SIZE
    if size < MIN_BATCH_SIZE:
        size = MIN_BATCH_SIZE
    return size


def find_duplicate_groups(store: CommentStore, statuses: List[str], limit: int) -> List[DuplicateGroup]:
    """Return up to ``limit`` duplicate groups among comments with the given statuses.

    No order across groups is guaranteed. Raises StorageError if the query fails.
    """
    rows = store.query_groups(statuses, limit)
    return [DuplicateGroup.from_row(row) for row in rows]


class DuplicateFinder:
    """Batch processor for duplicate comments.

    ``processed_count`` and ``deleted_count`` accumulate over every batch run
    on this instance until ``reset_counts`` is called.
    """

    def __init__(self, store: CommentStore) -> None:
        self.store = store
        self.processed_count = 0
        self.deleted_count = 0

    @property
    def trashed_count(self) -> int:
        return self.deleted_count

    def reset_counts(self) -> None:
        self.processed_count = 0
        self.deleted_count = 0

    def process(self, statuses: Iterable[Any], batch_size: Any = DEFAULT_BATCH_SIZE) -> BatchResult:
        """Find up to ``batch_size`` duplicate groups and trash all but the newest of each.

        Never raises for bad input or storage failures; those come back as a
        completed result with ``error`` set.
        """
        if isinstance(statuses, (str, bytes)) or not isinstance(statuses, IterableABC) or not statuses:
            return BatchResult.failure(INVALID_STATUSES_MESSAGE)

        filtered = filter_statuses(statuses)
        if not filtered:
            return BatchResult.failure(NO_VALID_STATUSES_MESSAGE)

        size = clamp_batch_size(batch_size)

        try:
            groups = find_duplicate_groups(self.store, filtered, size)
        except StorageError as e:
            logger.error(f"Database error while finding duplicate comments: {e}")
            return BatchResult.failure(STORAGE_ERROR_MESSAGE)

        batch_processed = 0
        batch_trashed = 0
        for group in groups:
            try:
                trashed_in_group = self.retire_group(group, filtered)
            except StorageError as e:
                logger.error(
                    f"Database error while loading duplicates of post {group.post_id}: {e}"
                )
                return BatchResult(
                    processed=batch_processed,
                    trashed=batch_trashed,
                    completed=True,
                    error=STORAGE_ERROR_MESSAGE,
                )
            batch_trashed += trashed_in_group
            batch_processed += group.duplicate_count

        # Fewer groups than requested means nothing is left under these filters
        completed = len(groups) < size
        logger.debug(
            f"Batch done: groups={len(groups)} processed={batch_processed} "
            f"trashed={batch_trashed} completed={completed}"
        )
        return BatchResult(
            processed=batch_processed,
            trashed=batch_trashed,
            completed=completed,
            error=None,
        )

    def retire_group(self, group: DuplicateGroup, statuses: List[str]) -> int:
        """Trash every member of ``group`` except the newest; return how many were trashed.

        Members are re-read by exact content. Fewer than two matches (siblings
        trashed by someone else meanwhile, or a digest collision) is not an
        error and returns 0. A failure on one comment does not stop the rest.
        """
        comment_ids = self.store.query_member_ids(group.post_id, group.content, statuses)
        if len(comment_ids) < 2:
            return 0

        keeper, *duplicates = comment_ids
        logger.debug(f"Post {group.post_id}: keeping comment {keeper}, {len(duplicates)} duplicate(s)")

        trashed_count = 0
        for comment_id in duplicates:
            try:
                status = self.store.get_status(comment_id)
            except StorageError as e:
                logger.warning(f"Could not read status of comment {comment_id}: {e}")
                continue
            if status == CommentStatus.TRASH.value:
                continue
            if self.store.set_status_retired(comment_id):
                trashed_count += 1
                self.deleted_count += 1
            else:
                logger.debug(f"Comment {comment_id} was not moved to trash")

        self.processed_count += group.duplicate_count
        return trashed_count


@dataclass
class SweepSummary:
    batches: int = 0
    processed: int = 0
    trashed: int = 0
    completed: bool = False
    stalled: bool = False
    error: Optional[str] = None

    def as_dict(self) -> dict:
        return {
            "batches": self.batches,
            "processed": self.processed,
            "trashed": self.trashed,
            "completed": self.completed,
            "stalled": self.stalled,
            "error": self.error,
        }


def run_until_complete(
    finder: DuplicateFinder,
    statuses: Iterable[Any],
    batch_size: Any = DEFAULT_BATCH_SIZE,
    progress_cb: Optional[ProgressCallback] = None,
    log_cb: Optional[LogCallback] = None,
    max_batches: Optional[int] = None,
) -> SweepSummary:
    """Call ``finder.process`` with the same statuses until it reports completion.

    Stops early on an error, after ``max_batches`` calls, or when a full batch
    trashes nothing: the next call would return the same groups again.
    """

    def emit_progress(stage: str, current: int, total: int, message: str) -> None:
        if not progress_cb:
            return
        try:
            progress_cb(stage, current, total, message)
        except Exception as e:
            logger.debug(f"progress callback failed: {e}")

    def emit_log(message: str) -> None:
        logger.debug(message)
        if not log_cb:
            return
        try:
            log_cb(message)
        except Exception as e:
            logger.debug(f"log callback failed: {e}")

    if isinstance(statuses, IterableABC) and not isinstance(statuses, (str, bytes)):
        statuses = list(statuses)
    summary = SweepSummary()
    emit_progress("start", 0, 0, "Looking for duplicate comments...")

    while True:
        result = finder.process(statuses, batch_size)
        summary.batches += 1
        summary.processed += result.processed
        summary.trashed += result.trashed

        if result.error:
            summary.error = result.error
            emit_log(f"[ERROR] Batch {summary.batches}: {result.error}")
            emit_progress("error", summary.processed, summary.trashed, result.error)
            break

        emit_log(
            f"[BATCH {summary.batches}] processed={result.processed:,} trashed={result.trashed:,}"
            f" | total processed={summary.processed:,} trashed={summary.trashed:,}"
        )
        emit_progress(
            "batch",
            summary.processed,
            summary.trashed,
            f"Processed {summary.processed:,} comments, trashed {summary.trashed:,}",
        )

        if result.completed:
            summary.completed = True
            break
        if result.trashed == 0:
            summary.stalled = True
            emit_log("[WARN] Batch trashed nothing; stopping to avoid repeating the same groups")
            break
        if max_batches is not None and summary.batches >= max_batches:
            emit_log(f"[STOP] Reached batch limit ({max_batches})")
            break

    if summary.completed:
        emit_progress("done", summary.processed, summary.trashed, "Duplicate removal complete")
    return summary
