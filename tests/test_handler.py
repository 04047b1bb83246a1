"""Tests for the batch request handler."""

import pytest

import dupcomments.handler as handler_module
from dupcomments.errors import (
    INVALID_REQUEST_MESSAGE,
    INVALID_STATUSES_MESSAGE,
    NO_STATUSES_SELECTED_MESSAGE,
    STORAGE_ERROR_MESSAGE,
    UNEXPECTED_ERROR_MESSAGE,
)
from dupcomments.handler import BatchRequest, format_batch_message, handle_batch_request
from dupcomments.models import CommentStatus

from .conftest import seed_group


@pytest.fixture
def seeded(store):
    seed_group(store, 1, "Great post!", 3)
    store.add_comment(2, "Great post!")
    return store


class TestSuccess:

    def test_response_fields(self, seeded):
        response = handle_batch_request(seeded, {"statuses": ["1"], "batch_size": 10})

        assert response == {
            "processed": 3,
            "trashed": 2,
            "deleted": 2,
            "completed": True,
            "error": None,
            "message": "Processed 3 comments, moved 2 duplicates to the trash.",
        }

    def test_without_legacy_field(self, seeded):
        response = handle_batch_request(seeded, {"statuses": ["1"]}, legacy_fields=False)

        assert "deleted" not in response
        assert response["trashed"] == 2

    def test_integer_statuses_are_accepted(self, seeded):
        response = handle_batch_request(seeded, {"statuses": [1], "batch_size": 10})

        assert response["error"] is None
        assert response["trashed"] == 2

    def test_repeat_until_completed(self, store):
        for post_id in range(1, 4):
            seed_group(store, post_id, "dup", 2)
        total = 0
        for _ in range(10):
            response = handle_batch_request(store, {"statuses": ["1"], "batch_size": 2})
            total += response["trashed"]
            if response["completed"]:
                break

        assert response["completed"] is True
        assert total == 3


class TestRejected:

    @pytest.mark.parametrize("payload", [{}, {"statuses": []}, {"statuses": None}, None])
    def test_no_statuses(self, store, payload):
        response = handle_batch_request(store, payload)

        assert response["error"] == NO_STATUSES_SELECTED_MESSAGE
        assert (response["processed"], response["trashed"], response["completed"]) == (0, 0, True)

    def test_only_unknown_statuses(self, store):
        response = handle_batch_request(store, {"statuses": ["approved", "deleted"]})

        assert response["error"] == INVALID_STATUSES_MESSAGE

    @pytest.mark.parametrize(
        "payload",
        [["1"], {"statuses": {"a": 1}}],
    )
    def test_malformed_request(self, store, payload):
        response = handle_batch_request(store, payload)

        assert response["error"] == INVALID_REQUEST_MESSAGE
        assert response["message"] is None


class TestFailures:

    def test_storage_error_is_generic(self, store):
        store.con.execute("DROP TABLE commentmeta")
        store.con.execute("DROP TABLE comments")

        response = handle_batch_request(store, {"statuses": ["1"]})

        assert response["error"] == STORAGE_ERROR_MESSAGE
        assert response["completed"] is True
        assert "no such table" not in str(response)

    def test_unexpected_exception_is_caught(self, seeded, monkeypatch, log_records):
        def explode(self, statuses, batch_size=100):
            raise RuntimeError("secret internal detail")

        monkeypatch.setattr(handler_module.DuplicateFinder, "process", explode)

        response = handle_batch_request(seeded, {"statuses": ["1"]})

        assert response["error"] == UNEXPECTED_ERROR_MESSAGE
        assert "secret" not in str(response)
        assert any(r["exception"] is not None for r in log_records)


class TestRequestModel:

    @pytest.mark.parametrize(
        "value, expected",
        [(None, 100), ("lots", 1), (500, 100), (0, 1), (-4, 1), ("20", 20)],
    )
    def test_batch_size_is_clamped(self, value, expected):
        assert BatchRequest.model_validate({"statuses": ["1"], "batch_size": value}).batch_size == expected

    def test_enum_statuses(self):
        request = BatchRequest.model_validate({"statuses": [CommentStatus.SPAM, CommentStatus.APPROVED]})
        assert request.statuses == ["spam", "1"]

    def test_scalar_status_becomes_list(self):
        assert BatchRequest.model_validate({"statuses": "spam"}).statuses == ["spam"]

    def test_default_batch_size(self):
        assert BatchRequest().batch_size == 100


@pytest.mark.parametrize(
    "processed, trashed, expected",
    [
        (1, 1, "Processed 1 comment, moved 1 duplicate to the trash."),
        (2, 0, "Processed 2 comments, moved 0 duplicates to the trash."),
    ],
)
def test_format_batch_message(processed, trashed, expected):
    assert format_batch_message(processed, trashed) == expected


def test_non_numeric_batch_size_processes_one_group(store):
    seed_group(store, 1, "a", 2)
    seed_group(store, 2, "b", 2)

    response = handle_batch_request(store, {"statuses": ["1"], "batch_size": "lots"})

    assert response["error"] is None
    assert response["trashed"] == 1
    assert response["completed"] is False
