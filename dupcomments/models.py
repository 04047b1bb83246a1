from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence


class CommentStatus(str, Enum):
    APPROVED = "1"
    PENDING = "0"
    SPAM = "spam"
    TRASH = "trash"


ALLOWED_STATUSES: Sequence[str] = tuple(s.value for s in CommentStatus)

_STATUS_NAMES: Dict[str, str] = {
    "approved": CommentStatus.APPROVED.value,
    "approve": CommentStatus.APPROVED.value,
    "pending": CommentStatus.PENDING.value,
    "unapproved": CommentStatus.PENDING.value,
    "hold": CommentStatus.PENDING.value,
    "spam": CommentStatus.SPAM.value,
    "trash": CommentStatus.TRASH.value,
}


def parse_status(name: str) -> str:
    """Map a wire value or a human name ("approved", "pending", ...) to a status value."""
    key = str(name).strip().lower()
    if key in ALLOWED_STATUSES:
        return key
    try:
        return _STATUS_NAMES[key]
    except KeyError:
        raise ValueError(f"unknown comment status: {name!r}") from None


def filter_statuses(values: Iterable[Any]) -> List[str]:
    """Keep only allowed status values, in input order, without repeats."""
    out: List[str] = []
    for value in values:
        if isinstance(value, CommentStatus):
            key = value.value
        elif isinstance(value, bool) or not isinstance(value, (str, int)):
            continue
        else:
            key = str(value).strip()
        if key in ALLOWED_STATUSES and key not in out:
            out.append(key)
    return out


@dataclass(frozen=True)
class DuplicateGroup:
    post_id: int
    content: str
    duplicate_count: int

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> "DuplicateGroup":
        post_id, content, count = row
        return cls(post_id=int(post_id), content=content, duplicate_count=int(count))


@dataclass(frozen=True)
class BatchResult:
    processed: int = 0
    trashed: int = 0
    completed: bool = False
    error: Optional[str] = None

    @property
    def deleted(self) -> int:
        return self.trashed

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, message: str) -> "BatchResult":
        return cls(processed=0, trashed=0, completed=True, error=message)

    def as_dict(self, legacy_fields: bool = False) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "processed": self.processed,
            "trashed": self.trashed,
            "completed": self.completed,
            "error": self.error,
        }
        if legacy_fields:
            data["deleted"] = self.trashed
        return data
