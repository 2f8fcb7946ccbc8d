"""Collaborator contract consumed by the services.

``ContentStore`` is everything the export and import services need from
the host: record lookup, schema introspection, value access, drafts, and
persistence. Any object with these methods qualifies; the bundled stores
in :mod:`entryport.infrastructure` are two implementations.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from entryport.domain.fields import Field
    from entryport.domain.records import PersistOutcome, Record


class ContentStore(Protocol):
    def find_record(self, record_id: int, site_id: int | None = None) -> Record | None: ...

    def find_record_by_path(
        self, path_or_slug: str, site_id: int | None = None
    ) -> Record | None: ...

    def get_field_schema(self, record: Record) -> Sequence[Field]: ...

    def get_field_value(self, record: Record, handle: str) -> Any: ...

    def get_native_serialized_values(self, record: Record) -> dict[str, Any]: ...

    def create_draft(self, record: Record, acting_user_id: int | None = None) -> Record: ...

    def set_field_values(self, draft: Record, values: Mapping[str, Any]) -> None:
        """Bulk write; implementations may raise if any value is rejected."""
        ...

    def set_field_value(self, draft: Record, handle: str, value: Any) -> None: ...

    def persist(self, draft: Record) -> PersistOutcome: ...

    def get_edit_url(self, draft: Record) -> str: ...

    def close(self) -> None: ...
