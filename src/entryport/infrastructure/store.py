"""BaseContentStore — shared record-mutation and persistence semantics.

Concrete stores supply lookup, element resolution, and draft storage;
this base owns value normalization, bulk/single writes, and validation so
every store behaves the same from the services' point of view.
"""

from __future__ import annotations

import copy
import dataclasses
import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Any

from entryport.domain.fields import Field
from entryport.domain.records import PersistOutcome, Record
from entryport.domain.values import Asset, ElementRef
from entryport.infrastructure.codec import (
    FieldValueError,
    normalize_value,
    serialize_value,
    validate_value,
)

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 255


class BaseContentStore(ABC):
    """Record storage collaborator used by the export and import services."""

    def __init__(self, *, base_url: str = "http://localhost") -> None:
        self.base_url = base_url.rstrip("/")

    # ------------------------------------------------------------------
    # Lookup (subclass responsibility)
    # ------------------------------------------------------------------

    @abstractmethod
    def find_record(self, record_id: int, site_id: int | None = None) -> Record | None: ...

    @abstractmethod
    def find_record_by_path(
        self, path_or_slug: str, site_id: int | None = None
    ) -> Record | None: ...

    @abstractmethod
    def resolve_elements(self, ids: Sequence[int]) -> list[ElementRef]: ...

    @abstractmethod
    def resolve_assets(self, ids: Sequence[int]) -> list[Asset]: ...

    @abstractmethod
    def add_asset(self, asset: Asset) -> Asset: ...

    @abstractmethod
    def add_record(
        self,
        record_id: int,
        *,
        schema: Sequence[Field] = (),
        values: Mapping[str, Any] | None = None,
        title: str = "",
        site_id: int = 1,
        slug: str | None = None,
        uri: str | None = None,
    ) -> Record:
        """Create or replace a record from storage-shaped *values*."""

    @abstractmethod
    def _save_draft(self, draft: Record) -> int:
        """Store a validated draft and return its draft id."""

    def resolve_element_url(self, link_type: str, element_id: int) -> str | None:
        if link_type == "asset":
            assets = self.resolve_assets([element_id])
            return assets[0].url if assets else None
        record = self.find_record(element_id)
        if record is None or record.uri is None:
            return None
        return f"{self.base_url}/{record.uri.strip('/')}"

    def close(self) -> None:
        """Release resources; a no-op for in-process stores."""

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_field_schema(self, record: Record) -> Sequence[Field]:
        return record.schema

    def get_field_value(self, record: Record, handle: str) -> Any:
        return record.values.get(handle)

    def get_native_serialized_values(self, record: Record) -> dict[str, Any]:
        """Native JSON form per handle; values with no JSON form are left out."""
        serialized: dict[str, Any] = {}
        for field in record.schema:
            value = serialize_value(field, record.values.get(field.handle))
            if _is_json_compatible(value):
                serialized[field.handle] = value
        return serialized

    # ------------------------------------------------------------------
    # Drafts and writes
    # ------------------------------------------------------------------

    def create_draft(self, record: Record, acting_user_id: int | None = None) -> Record:
        """Return an unsaved, mutable copy of *record*."""
        return dataclasses.replace(
            record,
            values=copy.deepcopy(record.values),
            draft_id=None,
            canonical_id=record.canonical_id or record.id,
            creator_id=acting_user_id,
        )

    def set_field_values(self, draft: Record, values: Mapping[str, Any]) -> None:
        """Set several fields at once; nothing is assigned if any value is invalid."""
        normalized = {
            handle: normalize_value(self._require_field(draft, handle), raw, self)
            for handle, raw in values.items()
        }
        draft.values.update(normalized)

    def set_field_value(self, draft: Record, handle: str, value: Any) -> None:
        draft.values[handle] = normalize_value(self._require_field(draft, handle), value, self)

    def persist(self, draft: Record) -> PersistOutcome:
        """Validate *draft* and store it; the draft stays unsaved on failure."""
        errors = self.validate(draft)
        if errors:
            logger.debug("Draft of record %s failed validation: %s", draft.id, errors)
            return PersistOutcome(ok=False, errors=errors)
        draft.draft_id = self._save_draft(draft)
        logger.debug("Saved draft %s of record %s", draft.draft_id, draft.id)
        return PersistOutcome(ok=True)

    def validate(self, record: Record) -> dict[str, list[str]]:
        errors: dict[str, list[str]] = {}
        if len(record.title) > MAX_TITLE_LENGTH:
            errors["title"] = [f"Title should contain at most {MAX_TITLE_LENGTH} characters."]
        for field in record.schema:
            errors.update(
                validate_value(field, record.values.get(field.handle), scenario=record.scenario)
            )
        return errors

    def get_edit_url(self, draft: Record) -> str:
        url = f"{self.base_url}/admin/entries/{draft.canonical_id or draft.id}"
        params = [f"site={draft.site_id}"]
        if draft.draft_id is not None:
            params.insert(0, f"draftId={draft.draft_id}")
        return f"{url}?{'&'.join(params)}"

    @staticmethod
    def _require_field(record: Record, handle: str) -> Field:
        field = record.get_field(handle)
        if field is None:
            msg = f"Record {record.id} has no field {handle!r}"
            raise FieldValueError(msg)
        return field


def _is_json_compatible(value: Any) -> bool:
    if value is None or isinstance(value, str | bool | int | float):
        return True
    if isinstance(value, list | tuple):
        return all(_is_json_compatible(v) for v in value)
    if isinstance(value, dict):
        return all(isinstance(k, str) and _is_json_compatible(v) for k, v in value.items())
    return False
