"""
Unit tests for the document stores.

Run: pytest tests/unit/test_persistence.py -v
"""

from types import SimpleNamespace

import pytest
from sqlalchemy.orm import Session

from config import Settings
from src.tutor.exceptions import CorruptDocumentError
from src.tutor.persistence import (
    Base,
    InMemoryDocumentStore,
    JsonFileDocumentStore,
    SqlDocumentStore,
    TutorDocumentRow,
    build_store,
)

DOCUMENT = {"profile": {"total_attempts": 2, "correct_answers": 1}, "attempts": []}


class TestInMemoryStore:

    def test_empty(self):
        assert InMemoryDocumentStore().load() is None

    def test_copies_are_isolated(self):
        store = InMemoryDocumentStore()
        document = {"profile": {"total_attempts": 1}}
        store.save(document)

        document["profile"]["total_attempts"] = 99
        loaded = store.load()
        loaded["profile"]["total_attempts"] = 42

        assert store.load()["profile"]["total_attempts"] == 1
        assert store.save_count == 1


class TestJsonFileStore:

    def test_missing_file_loads_none(self, tmp_path):
        assert JsonFileDocumentStore(tmp_path / "state.json").load() is None

    def test_round_trip(self, tmp_path):
        store = JsonFileDocumentStore(tmp_path / "nested" / "state.json")
        store.save(DOCUMENT)

        assert store.load() == DOCUMENT
        assert not (tmp_path / "nested" / "state.json.tmp").exists()

    def test_unicode_kept(self, tmp_path):
        path = tmp_path / "state.json"
        JsonFileDocumentStore(path).save({"answer": "sem soluções"})
        assert "sem soluções" in path.read_text(encoding="utf-8")

    def test_invalid_json_raises(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("{broken", encoding="utf-8")

        with pytest.raises(CorruptDocumentError) as exc:
            JsonFileDocumentStore(path).load()
        assert exc.value.source == str(path)

    def test_unreadable_path_raises(self, tmp_path):
        path = tmp_path / "state.json"
        path.mkdir()

        with pytest.raises(CorruptDocumentError) as exc:
            JsonFileDocumentStore(path).load()
        assert isinstance(exc.value.__cause__, OSError)

    def test_non_object_raises(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("[1, 2, 3]", encoding="utf-8")

        with pytest.raises(CorruptDocumentError):
            JsonFileDocumentStore(path).load()


class TestSqlStore:

    @pytest.fixture
    def db_url(self, tmp_path):
        return f"sqlite:///{tmp_path / 'tutor.db'}"

    def test_missing_row_loads_none(self, db_url):
        assert SqlDocumentStore(db_url).load() is None

    def test_round_trip_and_overwrite(self, db_url):
        store = SqlDocumentStore(db_url)
        store.save(DOCUMENT)
        store.save({**DOCUMENT, "attempts": [{"user_answer": "1, 2"}]})

        assert store.load()["attempts"] == [{"user_answer": "1, 2"}]

    def test_keys_are_separate(self, db_url):
        SqlDocumentStore(db_url, key="alice").save(DOCUMENT)
        assert SqlDocumentStore(db_url, key="bob").load() is None
        assert SqlDocumentStore(db_url, key="alice").load() == DOCUMENT

    def test_corrupt_body_raises(self, db_url):
        store = SqlDocumentStore(db_url)
        with Session(store.engine) as session:
            session.add(TutorDocumentRow(key="student", body="not json"))
            session.commit()

        with pytest.raises(CorruptDocumentError):
            store.load()

    def test_missing_table_raises(self, db_url):
        store = SqlDocumentStore(db_url)
        Base.metadata.drop_all(bind=store.engine)

        with pytest.raises(CorruptDocumentError):
            store.load()


class TestBuildStore:

    def test_json_backend(self, tmp_path):
        store = build_store(Settings(data_dir=tmp_path / "data"))

        assert isinstance(store, JsonFileDocumentStore)
        assert store.path == tmp_path / "data" / "state.json"

    def test_sql_backend(self, tmp_path):
        store = build_store(Settings(data_dir=tmp_path, storage_backend="sql"))

        assert isinstance(store, SqlDocumentStore)
        store.save(DOCUMENT)
        assert (tmp_path / "tutor.db").exists()

    def test_unknown_backend(self, tmp_path):
        settings = SimpleNamespace(storage_backend="mongo", data_dir=tmp_path)
        with pytest.raises(ValueError):
            build_store(settings)
