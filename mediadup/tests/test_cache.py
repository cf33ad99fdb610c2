#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Tests for the persistent hash cache.
"""

import pickle
import sqlite3
import threading
from unittest.mock import patch

import pytest

from mediadup.database import CacheStore, init_db_if_needed


class TestCacheFixture:
    @pytest.fixture
    def store(self, tmp_path):
        db_path = tmp_path / "nested" / "cache.db"
        assert init_db_if_needed(db_path)
        store = CacheStore(db_path, retry_base_delay=0.001)
        yield store
        store.close()


class TestInit(TestCacheFixture):
    def test_creates_parent_and_schema(self, tmp_path):
        db_path = tmp_path / "a" / "b" / "cache.db"
        assert init_db_if_needed(db_path)
        with sqlite3.connect(str(db_path)) as conn:
            cols = [r[1] for r in conn.execute("PRAGMA table_info(filehash)")]
        assert cols == ["path", "mtime", "size", "hash", "updated_at"]

    def test_idempotent(self, tmp_path):
        db_path = tmp_path / "cache.db"
        assert init_db_if_needed(db_path)
        store = CacheStore(db_path)
        store.put("/x.png", 1, 2, "abc")
        store.close()
        assert init_db_if_needed(db_path)
        with CacheStore(db_path) as store:
            assert store.get("/x.png", 1, 2) == "abc"

    def test_unusable_location_is_not_fatal(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        assert init_db_if_needed(blocker / "cache.db") is False


class TestLookup(TestCacheFixture):
    def test_hit_on_exact_identity(self, store):
        assert store.put("/p/a.png", 100, 10, "h1")
        assert store.get("/p/a.png", 100, 10) == "h1"

    def test_mtime_or_size_mismatch_is_miss(self, store):
        store.put("/p/a.png", 100, 10, "h1")
        assert store.get("/p/a.png", 101, 10) is None
        assert store.get("/p/a.png", 100, 11) is None
        assert store.get("/p/other.png", 100, 10) is None

    def test_one_row_per_path(self, store):
        store.put("/p/a.png", 100, 10, "h1")
        store.put("/p/a.png", 200, 20, "h2")
        assert store.get("/p/a.png", 100, 10) is None
        assert store.get("/p/a.png", 200, 20) == "h2"
        rows = store.get_connection().execute("SELECT COUNT(*) FROM filehash").fetchone()[0]
        assert rows == 1

    def test_lookup_error_is_a_miss(self, tmp_path):
        store = CacheStore(tmp_path / "never-initialized.db")
        try:
            assert store.get("/p/a.png", 1, 1) is None
        finally:
            store.close()


class TestWrites(TestCacheFixture):
    def test_write_failure_returns_false(self, tmp_path):
        store = CacheStore(tmp_path / "never-initialized.db")
        try:
            assert store.put("/p/a.png", 1, 1, "h") is False
        finally:
            store.close()

    def test_retries_when_locked(self, store):
        real_connection = store.get_connection()
        attempts = {"n": 0}

        class FlakyConnection:
            def __enter__(self):
                return real_connection.__enter__()

            def __exit__(self, *exc):
                return real_connection.__exit__(*exc)

            def execute(self, *args):
                attempts["n"] += 1
                if attempts["n"] < 3:
                    raise sqlite3.OperationalError("database is locked")
                return real_connection.execute(*args)

        with patch.object(store, "get_connection", return_value=FlakyConnection()):
            assert store.put("/p/a.png", 1, 1, "h") is True
        assert attempts["n"] == 3
        assert store.get("/p/a.png", 1, 1) == "h"

    def test_gives_up_after_retry_budget(self, store):
        store.write_retries = 2

        class LockedConnection:
            calls = 0

            def __enter__(self):
                return self

            def __exit__(self, *exc):
                return False

            def execute(self, *args):
                LockedConnection.calls += 1
                raise sqlite3.OperationalError("database is locked")

        with patch.object(store, "get_connection", return_value=LockedConnection()):
            assert store.put("/p/a.png", 1, 1, "h") is False
        assert LockedConnection.calls == 3

    def test_concurrent_writers(self, store):
        def writer(n):
            for i in range(20):
                assert store.put(f"/p/{n}-{i}.png", i, i, f"h{n}-{i}")

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert store.get("/p/3-19.png", 19, 19) == "h3-19"
        count = store.get_connection().execute("SELECT COUNT(*) FROM filehash").fetchone()[0]
        assert count == 80


def test_store_survives_pickling(tmp_path):
    db_path = tmp_path / "cache.db"
    init_db_if_needed(db_path)
    store = CacheStore(db_path)
    store.put("/p/a.png", 1, 1, "h")
    clone = pickle.loads(pickle.dumps(store))
    try:
        assert clone.db_path == db_path
        assert clone.get("/p/a.png", 1, 1) == "h"
    finally:
        clone.close()
        store.close()
