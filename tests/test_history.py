"""Tests for the JSON-file design history."""

import json
import logging
from pathlib import Path

import pytest

from schema_forger.history.models import HistoryItem
from schema_forger.history.store import HistoryStore
from schema_forger.schema.models import Schema


@pytest.fixture
def store(tmp_path: Path) -> HistoryStore:
    return HistoryStore(tmp_path / "history.json")


class TestHistoryItem:
    def test_create_stamps_id_and_time(self, blog_schema: Schema) -> None:
        item = HistoryItem.create(name="Blog", schema=blog_schema)

        assert item.id
        assert item.timestamp.endswith("+00:00")
        assert item.db_type == "postgresql"

    def test_explicit_id(self, blog_schema: Schema) -> None:
        assert HistoryItem.create(name="Blog", schema=blog_schema, item_id="abc").id == "abc"

    def test_document_aliases(self, blog_schema: Schema) -> None:
        item = HistoryItem.create(name="Blog", schema=blog_schema, db_type="sqlite")

        data = item.model_dump(mode="json", by_alias=True)

        assert data["dbType"] == "sqlite"
        assert data["schema"]["tables"][0]["name"] == "users"


class TestHistoryStore:
    def test_missing_file_is_empty(self, store: HistoryStore) -> None:
        assert store.load() == []

    def test_newest_first(self, store: HistoryStore, blog_schema: Schema) -> None:
        store.save(HistoryItem.create(name="first", schema=blog_schema))
        store.save(HistoryItem.create(name="second", schema=blog_schema))

        assert [i.name for i in store.load()] == ["second", "first"]

    def test_save_replaces_in_place(self, store: HistoryStore, blog_schema: Schema) -> None:
        store.save(HistoryItem.create(name="a", schema=blog_schema, item_id="1"))
        store.save(HistoryItem.create(name="b", schema=blog_schema, item_id="2"))

        items = store.save(HistoryItem.create(name="a2", schema=blog_schema, item_id="1"))

        assert [(i.id, i.name) for i in items] == [("2", "b"), ("1", "a2")]

    def test_get(self, store: HistoryStore, blog_schema: Schema) -> None:
        store.save(HistoryItem.create(name="Blog", schema=blog_schema, item_id="x"))

        assert store.get("x").design == blog_schema
        assert store.get("missing") is None

    def test_delete(self, store: HistoryStore, blog_schema: Schema) -> None:
        store.save(HistoryItem.create(name="a", schema=blog_schema, item_id="1"))
        store.save(HistoryItem.create(name="b", schema=blog_schema, item_id="2"))

        remaining = store.delete("1")

        assert [i.id for i in remaining] == ["2"]
        assert [i.id for i in store.load()] == ["2"]

    def test_file_format(self, store: HistoryStore, blog_schema: Schema) -> None:
        store.save(HistoryItem.create(name="Blog", schema=blog_schema, item_id="1"))

        data = json.loads(store.path.read_text())

        assert data[0]["id"] == "1"
        assert "schema" in data[0]
        assert data[0]["schema"]["tables"][1]["columns"][1]["foreignKeyTable"] == "users"

    def test_creates_parent_directory(self, tmp_path: Path, blog_schema: Schema) -> None:
        store = HistoryStore(tmp_path / "nested" / "dir" / "history.json")

        store.save(HistoryItem.create(name="Blog", schema=blog_schema))

        assert store.path.exists()

    def test_corrupt_file_is_empty(
        self, store: HistoryStore, caplog: pytest.LogCaptureFixture
    ) -> None:
        store.path.write_text("{not json")

        with caplog.at_level(logging.ERROR, logger="schema_forger.history.store"):
            assert store.load() == []

        assert "Failed to load history" in caplog.text

    def test_undecodable_file_is_empty(
        self, store: HistoryStore, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Bytes that are not UTF-8 are logged, not raised."""
        store.path.write_bytes(b"\xff\xfe[garbage")

        with caplog.at_level(logging.ERROR, logger="schema_forger.history.store"):
            assert store.load() == []
            assert store.get("1") is None

        assert "Failed to load history" in caplog.text

    def test_save_over_undecodable_file(self, store: HistoryStore, blog_schema: Schema) -> None:
        store.path.write_bytes(b"\xff\xfe[garbage")

        items = store.save(HistoryItem.create(name="Blog", schema=blog_schema, item_id="1"))

        assert [i.id for i in items] == ["1"]
        assert [i.id for i in store.load()] == ["1"]

    def test_invalid_items_are_empty(self, store: HistoryStore) -> None:
        store.path.write_text(json.dumps([{"id": "1"}]))
        assert store.load() == []
