"""Tests for the SQLite comment store."""

import pytest

from dupcomments.db import connect
from dupcomments.errors import StorageError
from dupcomments.store import TRASH_META_STATUS, TRASH_META_TIME, CommentStore
from dupcomments.util import content_digest

from .conftest import seed_group


class TestSchema:

    def test_open_is_idempotent(self, db_path):
        CommentStore.open(db_path).close()
        with CommentStore.open(db_path) as s:
            assert s.count_by_status() == {"1": 0, "0": 0, "spam": 0, "trash": 0}

    def test_content_digest_function_registered(self, store):
        row = store.con.execute("SELECT content_digest(?)", ("Nice post",)).fetchone()
        assert row[0] == content_digest("Nice post")

    @pytest.mark.parametrize("kwargs", [{"journal_mode": "WAL; DROP TABLE comments"}, {"synchronous": "sometimes"}])
    def test_connect_rejects_unknown_pragmas(self, db_path, kwargs):
        with pytest.raises(ValueError):
            connect(db_path, **kwargs)

    def test_connect_accepts_lowercase_modes(self, db_path):
        con = connect(db_path, journal_mode="wal", synchronous="full")
        assert con.execute("PRAGMA journal_mode").fetchone()[0] == "wal"
        con.close()

    def test_unknown_status_rejected(self, store):
        with pytest.raises(StorageError):
            store.add_comment(1, "hello", status="approved")


class TestQueryGroups:

    def test_groups_by_post_and_content(self, store):
        seed_group(store, 1, "same", 3)
        seed_group(store, 2, "same", 1)
        seed_group(store, 1, "other", 1)

        rows = store.query_groups(["1"], 10)

        assert rows == [(1, "same", 3)]

    def test_only_counts_filtered_statuses(self, store):
        store.add_comment(1, "same", "1")
        store.add_comment(1, "same", "spam")

        assert store.query_groups(["1"], 10) == []
        assert store.query_groups(["1", "spam"], 10) == [(1, "same", 2)]

    def test_limit(self, store):
        for post_id in range(1, 6):
            seed_group(store, post_id, "dup", 2)

        assert len(store.query_groups(["1"], 3)) == 3

    def test_content_comparison_is_case_sensitive(self, store):
        store.add_comment(1, "Hello")
        store.add_comment(1, "hello")
        store.add_comment(1, "hello ")

        assert store.query_groups(["1"], 10) == []


class TestMembers:

    def test_member_ids_newest_first(self, store):
        ids = seed_group(store, 4, "text", 3)
        store.add_comment(4, "text", "spam")

        assert store.query_member_ids(4, "text", ["1"]) == sorted(ids, reverse=True)

    def test_member_ids_exact_content(self, store):
        store.add_comment(4, "text")
        store.add_comment(4, "Text")

        assert len(store.query_member_ids(4, "text", ["1"])) == 1

    def test_get_status_missing_comment(self, store):
        assert store.get_status(999) is None


class TestTrash:

    def test_set_status_retired_records_previous_status(self, store):
        cid = store.add_comment(1, "x", "0")

        assert store.set_status_retired(cid) is True
        assert store.get_status(cid) == "trash"
        assert store.get_meta(cid, TRASH_META_STATUS) == "0"
        assert store.get_meta(cid, TRASH_META_TIME).isdigit()

    def test_already_trashed_returns_false(self, store):
        cid = store.add_comment(1, "x")
        assert store.set_status_retired(cid) is True
        assert store.set_status_retired(cid) is False

    def test_missing_comment_returns_false(self, store):
        assert store.set_status_retired(12345) is False

    def test_count_by_status(self, store):
        seed_group(store, 1, "a", 2)
        store.add_comment(1, "b", "spam")
        assert store.count_by_status() == {"1": 2, "0": 0, "spam": 1, "trash": 0}
