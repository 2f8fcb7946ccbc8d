"""RelationHandler — entry, category, tag, and user references."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from entryport.domain.fields import FieldKind
from entryport.domain.values import ElementRef
from entryport.handlers.base import (
    FieldHandler,
    ImportContext,
    extract_ids,
    id_sets_equal,
    is_numeric,
    to_number,
)

if TYPE_CHECKING:
    from entryport.domain.fields import Field


class RelationHandler(FieldHandler):
    """Relations travel as plain id lists; order is not significant."""

    name = "relation"
    priority = 50
    placeholder_type = "entries"

    def can_handle(self, field: Field) -> bool:
        return field.kind is FieldKind.RELATION

    def export_value(self, field: Field, value: Any) -> Any:
        if value is None or isinstance(value, str | bytes) or not isinstance(value, Iterable):
            return []
        return [item.id for item in value if isinstance(item, ElementRef)]

    def import_value(self, field: Field, value: Any, context: ImportContext | None = None) -> Any:
        if not isinstance(value, list | tuple):
            return []
        return [int(to_number(item) or 0) for item in value if is_numeric(item)]

    def has_changed(self, field: Field, old_value: Any, new_value: Any) -> bool:
        return not id_sets_equal(extract_ids(old_value), extract_ids(new_value))
