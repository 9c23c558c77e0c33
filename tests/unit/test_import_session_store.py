"""
Unit tests for the in-memory import session store.

Run: pytest tests/unit/test_import_session_store.py -v
"""

from datetime import datetime, timedelta
import threading

from services.import_session_store import ImportSessionStore


class TestImportSessionStore:

    def test_store_and_retrieve(self):
        store = ImportSessionStore()
        session_id = store.new_id()

        store.store(session_id, {"phase": "map"})

        assert store.retrieve(session_id) == {"phase": "map"}
        assert len(store) == 1

    def test_new_ids_are_unique(self):
        store = ImportSessionStore()

        assert store.new_id() != store.new_id()

    def test_unknown_id_returns_none(self):
        assert ImportSessionStore().retrieve("missing") is None

    def test_expired_entry_returns_none(self):
        store = ImportSessionStore(ttl_minutes=30)
        store.store("abc", "data")
        store._cache["abc"] = (datetime.now() - timedelta(seconds=1), "data")

        assert store.retrieve("abc") is None
        assert len(store) == 0

    def test_retrieve_extends_expiry(self):
        store = ImportSessionStore(ttl_minutes=30)
        store.store("abc", "data")
        store._cache["abc"] = (datetime.now() + timedelta(seconds=5), "data")

        store.retrieve("abc")

        expires_at, _ = store._cache["abc"]
        assert expires_at > datetime.now() + timedelta(minutes=29)

    def test_store_cleans_up_expired_entries(self):
        store = ImportSessionStore()
        store._cache["old"] = (datetime.now() - timedelta(minutes=1), "stale")

        store.store("new", "fresh")

        assert "old" not in store._cache
        assert len(store) == 1

    def test_delete(self):
        store = ImportSessionStore()
        store.store("abc", "data")

        store.delete("abc")
        store.delete("abc")

        assert store.retrieve("abc") is None

    def test_concurrent_retrieve_of_expired_entry(self):
        store = ImportSessionStore()
        store.store("abc", "data")
        store._cache["abc"] = (datetime.now() - timedelta(seconds=1), "data")
        start = threading.Barrier(8)
        results, errors = [], []

        def read():
            start.wait(timeout=5)
            try:
                results.append(store.retrieve("abc"))
            except KeyError as e:
                errors.append(e)

        threads = [threading.Thread(target=read) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=5)

        assert errors == []
        assert results == [None] * 8
        assert len(store) == 0
