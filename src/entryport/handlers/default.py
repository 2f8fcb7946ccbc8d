"""DefaultHandler — catch-all for scalar families.

Registered last and sorted last; ``can_handle`` accepts every field so the
registry always resolves.
"""

from __future__ import annotations

import dataclasses
import enum
import logging
from collections.abc import Mapping
from datetime import UTC, date, datetime, time
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from entryport.domain.fields import DATE_TYPES, NUMBER_TYPES, TOGGLE_TYPES
from entryport.handlers.base import (
    OMIT,
    FieldHandler,
    ImportContext,
    coerce_bool,
    is_numeric,
    to_number,
)

if TYPE_CHECKING:
    from entryport.domain.fields import Field

logger = logging.getLogger(__name__)


class DefaultHandler(FieldHandler):
    name = "default"
    priority = -100
    placeholder_type = "plain_text"

    def can_handle(self, field: Field) -> bool:
        return True

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def export_value(self, field: Field, value: Any) -> Any:
        exported = _to_wire(value)
        if exported is OMIT:
            logger.warning(
                "Cannot serialize value of type %s for field %s",
                type(value).__name__,
                field.handle,
            )
        return exported

    # ------------------------------------------------------------------
    # Import
    # ------------------------------------------------------------------

    def import_value(self, field: Field, value: Any, context: ImportContext | None = None) -> Any:
        if value is None:
            return None

        if field.type in DATE_TYPES and isinstance(value, str):
            parsed = parse_datetime(value, time_only=field.type == "time")
            if parsed is None:
                logger.warning("Failed to parse date for field %s: %r", field.handle, value)
            return parsed

        if field.type in TOGGLE_TYPES:
            return bool(coerce_bool(value))

        if field.type in NUMBER_TYPES:
            if value == "":
                return None
            number = to_number(value)
            if number is None:
                logger.warning("Invalid number for field %s: %r", field.handle, value)
            return number

        return value

    # ------------------------------------------------------------------
    # Change detection
    # ------------------------------------------------------------------

    def has_changed(self, field: Field, old_value: Any, new_value: Any) -> bool:
        if field.type in DATE_TYPES:
            return _timestamp(old_value) != _timestamp(new_value)
        if field.type in NUMBER_TYPES:
            return _as_float(old_value) != _as_float(new_value)
        if field.type in TOGGLE_TYPES:
            return bool(coerce_bool(old_value)) != bool(coerce_bool(new_value))
        return super().has_changed(field, old_value, new_value)


# ── Helpers ──────────────────────────────────────────────────────────


def _to_wire(value: Any) -> Any:
    """Convert a live scalar to a JSON-compatible value, or ``OMIT``."""
    if value is None or isinstance(value, bool | int | float | str):
        return value
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, datetime | date | time):
        return value.isoformat()
    if isinstance(value, enum.Enum):
        return _to_wire(value.value)
    if isinstance(value, Mapping):
        converted = {str(k): _to_wire(v) for k, v in value.items()}
        return OMIT if any(v is OMIT for v in converted.values()) else converted
    if isinstance(value, list | tuple):
        items = [_to_wire(v) for v in value]
        return OMIT if any(v is OMIT for v in items) else items
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return _to_wire(dataclasses.asdict(value))
    if type(value).__str__ is not object.__str__:
        return str(value)
    return OMIT


def parse_datetime(value: str, *, time_only: bool = False) -> datetime | time | None:
    text = value.strip()
    if not text:
        return None
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass
    if time_only:
        try:
            return time.fromisoformat(text)
        except ValueError:
            return None
    return None


def _timestamp(value: Any) -> int | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        moment = datetime.combine(value, time.min)
    elif isinstance(value, time):
        moment = datetime.combine(date(1970, 1, 1), value)
    elif isinstance(value, str):
        parsed = parse_datetime(value, time_only=True)
        if parsed is None:
            return None
        if isinstance(parsed, time):
            parsed = datetime.combine(date(1970, 1, 1), parsed)
        moment = parsed
    elif is_numeric(value):
        return int(to_number(value) or 0)
    else:
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return int(moment.timestamp())


def _as_float(value: Any) -> float | None:
    number = to_number(value)
    return None if number is None else float(number)
