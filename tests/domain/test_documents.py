"""Tests for export documents, import metadata, and import results."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from entryport.domain.documents import (
    NO_CHANGES_MESSAGE,
    ExportDocument,
    ExportMetadata,
    ImportMetadata,
    ImportResult,
)
from entryport.domain.records import PersistOutcome, Record


class TestExportDocument:
    def test_fields_merge_flat(self) -> None:
        doc = ExportDocument(
            metadata=ExportMetadata(id=123, site_id=1),
            title="Page Title",
            fields={"body": "<p>x</p>"},
        )
        assert doc.to_wire() == {
            "metadata": {"id": 123, "siteId": 1},
            "title": "Page Title",
            "body": "<p>x</p>",
        }


class TestImportMetadata:
    def test_alias_and_extra_keys(self) -> None:
        meta = ImportMetadata.model_validate({"id": 5, "siteId": 2, "foo": "bar"})
        assert meta.id == 5
        assert meta.site_id == 2

    def test_numeric_string_id(self) -> None:
        assert ImportMetadata.model_validate({"id": "42"}).id == 42

    @pytest.mark.parametrize("bad", [0, -1, "abc", True, None])
    def test_invalid_ids(self, bad: object) -> None:
        with pytest.raises(ValidationError):
            ImportMetadata.model_validate({"id": bad})

    def test_site_defaults_to_none(self) -> None:
        assert ImportMetadata.model_validate({"id": 1}).site_id is None


class TestImportResult:
    def test_unchanged(self) -> None:
        wire = ImportResult.unchanged(123).to_wire()
        assert wire == {"success": True, "entryId": 123, "message": NO_CHANGES_MESSAGE}

    def test_draft_created(self) -> None:
        wire = ImportResult.draft_created(123, 9, ["title", "body"], "http://x/edit").to_wire()
        assert wire["draftId"] == 9
        assert wire["updatedFields"] == ["title", "body"]
        assert wire["cpEditUrl"] == "http://x/edit"
        assert wire["message"] == "Draft created successfully with 2 updated field(s)"

    def test_draft_created_without_fields(self) -> None:
        wire = ImportResult.draft_created(123, 9, []).to_wire()
        assert wire["message"] == NO_CHANGES_MESSAGE
        assert "updatedFields" not in wire

    def test_rejected(self) -> None:
        wire = ImportResult.rejected(123, {"price": ["bad"]}, "Failed").to_wire()
        assert wire["success"] is False
        assert wire["errors"] == {"price": ["bad"]}
        assert "draftId" not in wire


class TestRecord:
    def test_draft_flag(self) -> None:
        assert not Record(id=1).is_draft
        assert Record(id=2, canonical_id=1).is_draft

    def test_first_error(self) -> None:
        outcome = PersistOutcome(ok=False, errors={"a": [], "b": ["second"]})
        assert outcome.first_error == "second"
        assert PersistOutcome(ok=True).first_error is None
