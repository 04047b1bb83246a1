"""Tests for status handling and result values."""

import pytest

from dupcomments.models import BatchResult, CommentStatus, filter_statuses, parse_status


def test_filter_statuses_keeps_order_and_drops_unknown():
    assert filter_statuses(["spam", "x", "1", "spam", 0, True, None]) == ["spam", "1", "0"]


@pytest.mark.parametrize(
    "name, value",
    [("approved", "1"), ("1", "1"), ("Pending", "0"), ("hold", "0"), ("spam", "spam"), ("trash", "trash")],
)
def test_parse_status(name, value):
    assert parse_status(name) == value


def test_parse_status_unknown():
    with pytest.raises(ValueError):
        parse_status("deleted")


def test_failure_result():
    result = BatchResult.failure("boom")
    assert (result.processed, result.trashed, result.completed, result.error) == (0, 0, True, "boom")
    assert not result.ok


def test_legacy_deleted_alias():
    result = BatchResult(processed=3, trashed=2, completed=True)
    assert result.deleted == 2
    assert result.as_dict() == {"processed": 3, "trashed": 2, "completed": True, "error": None}
    assert result.as_dict(legacy_fields=True)["deleted"] == 2


def test_status_values():
    assert [s.value for s in CommentStatus] == ["1", "0", "spam", "trash"]
