"""Wire documents: the export document, import metadata, and import result.

Field values are merged flat alongside ``metadata`` and ``title``::

    [{"metadata": {"id": 123, "siteId": 1}, "title": "Page Title", "body": "..."}]
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

NO_CHANGES_MESSAGE = "No changes detected"


class ExportMetadata(BaseModel):
    """``metadata`` block identifying the exported record."""

    model_config = {"frozen": True, "populate_by_name": True}

    id: int
    site_id: int = Field(alias="siteId")


class ExportDocument(BaseModel):
    """One exported record."""

    model_config = {"frozen": True}

    metadata: ExportMetadata
    title: str = ""
    fields: dict[str, Any] = Field(default_factory=dict)

    def to_wire(self) -> dict[str, Any]:
        return {
            "metadata": self.metadata.model_dump(by_alias=True),
            "title": self.title,
            **self.fields,
        }


class ImportMetadata(BaseModel):
    """``metadata`` block of an incoming document (untrusted)."""

    model_config = {"frozen": True, "populate_by_name": True, "extra": "ignore"}

    id: int = Field(gt=0)
    site_id: int | None = Field(default=None, alias="siteId", gt=0)

    @field_validator("id", mode="before")
    @classmethod
    def _reject_bool(cls, value: Any) -> Any:
        if isinstance(value, bool):
            msg = "id must be an integer"
            raise ValueError(msg)
        return value


class ImportResult(BaseModel):
    """Outcome of one import call, serialized with :meth:`to_wire`."""

    model_config = {"frozen": True}

    success: bool
    entry_id: int
    message: str
    draft_id: int | None = None
    updated_fields: list[str] = Field(default_factory=list)
    cp_edit_url: str | None = None
    errors: dict[str, list[str]] = Field(default_factory=dict)

    @classmethod
    def unchanged(cls, entry_id: int) -> ImportResult:
        return cls(success=True, entry_id=entry_id, message=NO_CHANGES_MESSAGE)

    @classmethod
    def draft_created(
        cls,
        entry_id: int,
        draft_id: int | None,
        updated_fields: list[str],
        cp_edit_url: str | None = None,
    ) -> ImportResult:
        count = len(updated_fields)
        message = (
            f"Draft created successfully with {count} updated field(s)"
            if count
            else NO_CHANGES_MESSAGE
        )
        return cls(
            success=True,
            entry_id=entry_id,
            draft_id=draft_id,
            updated_fields=updated_fields,
            cp_edit_url=cp_edit_url,
            message=message,
        )

    @classmethod
    def rejected(cls, entry_id: int, errors: dict[str, list[str]], message: str) -> ImportResult:
        return cls(success=False, entry_id=entry_id, errors=errors, message=message)

    def to_wire(self) -> dict[str, Any]:
        """Wire shape: optional keys appear only when set or non-empty."""
        wire: dict[str, Any] = {"success": self.success, "entryId": self.entry_id}
        if self.draft_id is not None:
            wire["draftId"] = self.draft_id
        if self.updated_fields:
            wire["updatedFields"] = list(self.updated_fields)
        if self.cp_edit_url is not None:
            wire["cpEditUrl"] = self.cp_edit_url
        if self.errors:
            wire["errors"] = dict(self.errors)
        wire["message"] = self.message
        return wire
