"""Tests for the memory and SQL content stores."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from entryport.domain.fields import Field, ValidationScenario
from entryport.domain.values import Asset, ElementRef
from entryport.infrastructure.codec import FieldValueError
from entryport.infrastructure.database.engine import init_database
from entryport.infrastructure.memory import MemoryContentStore
from entryport.infrastructure.sql_store import SqlContentStore
from entryport.infrastructure.store import BaseContentStore

SCHEMA = [
    Field(handle="summary", name="Summary", required=True),
    Field(handle="price", name="Price", type="number"),
    Field(handle="related", type="entries"),
    Field(handle="cta", type="link"),
]


def _seed(store: BaseContentStore) -> None:
    store.add_asset(Asset(id=30, url="https://cdn/h.jpg", title="Hero"))
    store.add_record(5, title="Five", uri="news/five", slug="five")
    store.add_record(5, title="Cinq", uri="fr/news/cinq", slug="cinq", site_id=2)
    store.add_record(
        123,
        title="Page",
        slug="page",
        uri="pages/page",
        schema=SCHEMA,
        values={
            "summary": "Short",
            "price": 10,
            "related": [5],
            "cta": {"type": "entry", "value": 5},
        },
    )


@pytest.fixture(params=["memory", "sql"])
def any_store(request: pytest.FixtureRequest) -> Iterator[BaseContentStore]:
    if request.param == "memory":
        store: BaseContentStore = MemoryContentStore(base_url="https://site.test")
    else:
        store = SqlContentStore(init_database(":memory:"), base_url="https://site.test")
    _seed(store)
    try:
        yield store
    finally:
        store.close()


class TestLookup:
    def test_find_record(self, any_store: BaseContentStore) -> None:
        record = any_store.find_record(123)
        assert record is not None
        assert record.title == "Page"
        assert record.values["price"] == 10
        assert record.values["related"] == [ElementRef(id=5, title="Five")]
        assert record.values["cta"].url == "https://site.test/news/five"

    def test_first_site_wins_without_site_id(self, any_store: BaseContentStore) -> None:
        assert any_store.find_record(5).title == "Five"  # type: ignore[union-attr]
        assert any_store.find_record(5, 2).title == "Cinq"  # type: ignore[union-attr]
        assert any_store.find_record(5, 3) is None
        assert any_store.find_record(999) is None

    def test_find_by_path(self, any_store: BaseContentStore) -> None:
        assert any_store.find_record_by_path("page").id == 123  # type: ignore[union-attr]
        assert any_store.find_record_by_path("/pages/page/").id == 123  # type: ignore[union-attr]
        assert any_store.find_record_by_path("cinq", 2).title == "Cinq"  # type: ignore[union-attr]
        assert any_store.find_record_by_path("missing") is None

    def test_resolve_assets(self, any_store: BaseContentStore) -> None:
        assert any_store.resolve_assets([30, 31]) == [
            Asset(id=30, url="https://cdn/h.jpg", title="Hero"),
            Asset(id=31),
        ]


class TestDrafts:
    def test_draft_is_an_isolated_copy(self, any_store: BaseContentStore) -> None:
        record = any_store.find_record(123)
        assert record is not None
        draft = any_store.create_draft(record, acting_user_id=7)
        any_store.set_field_value(draft, "summary", "Changed")
        assert draft.is_draft
        assert draft.canonical_id == 123
        assert draft.creator_id == 7
        assert record.values["summary"] == "Short"

    def test_bulk_set_is_all_or_nothing(self, any_store: BaseContentStore) -> None:
        draft = any_store.create_draft(any_store.find_record(123))  # type: ignore[arg-type]
        with pytest.raises(FieldValueError):
            any_store.set_field_values(draft, {"summary": "New", "related": ["x"]})
        assert draft.values["summary"] == "Short"

    def test_unknown_handle(self, any_store: BaseContentStore) -> None:
        draft = any_store.create_draft(any_store.find_record(123))  # type: ignore[arg-type]
        with pytest.raises(FieldValueError):
            any_store.set_field_value(draft, "nope", 1)

    def test_persist_assigns_draft_id(self, any_store: BaseContentStore) -> None:
        draft = any_store.create_draft(any_store.find_record(123))  # type: ignore[arg-type]
        any_store.set_field_values(draft, {"price": "12.5"})
        outcome = any_store.persist(draft)
        assert outcome.ok
        assert draft.draft_id == 1
        assert any_store.get_edit_url(draft) == (
            "https://site.test/admin/entries/123?draftId=1&site=1"
        )

    def test_persist_rejects_invalid_values(self, any_store: BaseContentStore) -> None:
        draft = any_store.create_draft(any_store.find_record(123))  # type: ignore[arg-type]
        any_store.set_field_values(draft, {"price": "abc", "summary": ""})
        outcome = any_store.persist(draft)
        assert not outcome.ok
        assert outcome.errors == {
            "summary": ["Summary cannot be blank."],
            "price": ["Price must be a number."],
        }
        assert draft.draft_id is None

    def test_essentials_skips_required_checks(self, any_store: BaseContentStore) -> None:
        draft = any_store.create_draft(any_store.find_record(123))  # type: ignore[arg-type]
        draft.scenario = ValidationScenario.ESSENTIALS
        any_store.set_field_value(draft, "summary", "")
        assert any_store.persist(draft).ok

    def test_title_length(self, any_store: BaseContentStore) -> None:
        draft = any_store.create_draft(any_store.find_record(123))  # type: ignore[arg-type]
        draft.title = "x" * 256
        assert "title" in any_store.persist(draft).errors

    def test_edit_url_before_persist(self, any_store: BaseContentStore) -> None:
        draft = any_store.create_draft(any_store.find_record(123))  # type: ignore[arg-type]
        assert any_store.get_edit_url(draft) == "https://site.test/admin/entries/123?site=1"


class TestNativeValues:
    def test_native_serialized_values(self, any_store: BaseContentStore) -> None:
        native = any_store.get_native_serialized_values(any_store.find_record(123))  # type: ignore[arg-type]
        assert native == {
            "summary": "Short",
            "price": 10,
            "related": [5],
            "cta": {"type": "entry", "value": 5},
        }

    def test_non_json_values_are_left_out(self) -> None:
        store = MemoryContentStore()
        record = store.add_record(1, schema=[Field(handle="blob")], values={"blob": object()})
        assert "blob" not in store.get_native_serialized_values(record)


class TestSqlStore:
    def test_saved_drafts_are_listed(self) -> None:
        store = SqlContentStore(init_database(":memory:"))
        _seed(store)
        draft = store.create_draft(store.find_record(123), acting_user_id=3)  # type: ignore[arg-type]
        store.set_field_value(draft, "summary", "Draft summary")
        assert store.persist(draft).ok

        rows = store.list_drafts(123)
        assert len(rows) == 1
        assert rows[0]["creator_id"] == 3
        assert rows[0]["field_values"]["summary"] == "Draft summary"
        assert store.list_drafts(5) == []
        # The canonical record is untouched.
        assert store.find_record(123).values["summary"] == "Short"  # type: ignore[union-attr]

    def test_database_file_is_created(self, tmp_path: Path) -> None:
        db_path = tmp_path / "nested" / "entryport.db"
        engine = init_database(db_path)
        try:
            assert db_path.exists()
        finally:
            engine.dispose()
