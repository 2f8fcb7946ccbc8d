"""FieldHandler — the capability contract every field transformer implements.

A handler is a stateless strategy for one field family:

* ``can_handle(field)`` — side-effect-free type test.
* ``export_value(field, value)`` — live value to wire format, or :data:`OMIT`.
* ``import_value(field, wire, context)`` — wire format to a storable value.
* ``has_changed(field, old_exported, new_wire)`` — whether an update is needed.
* ``priority`` — higher wins; the registry tries handlers high to low.
* ``use_native_serialization()`` — ``priority < 50`` by default; tells the
  orchestrators a host-provided serializer may stand in for export/import.
"""

from __future__ import annotations

import dataclasses
import enum
import math
import re
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from typing import TYPE_CHECKING, Any, ClassVar, Final

from pydantic import BaseModel

from entryport.domain.values import ElementRef

if TYPE_CHECKING:
    from entryport.domain.fields import Field
    from entryport.domain.records import Record

# Priority at or above which a handler is "specialized".
SPECIALIZED_PRIORITY: Final = 50


class _Omit(enum.Enum):
    OMIT = "OMIT"

    def __repr__(self) -> str:
        return "OMIT"

    def __bool__(self) -> bool:
        return False


OMIT: Final = _Omit.OMIT
"""Returned by ``export_value`` to exclude a field from the document entirely."""


@dataclass(frozen=True)
class ImportContext:
    """Ambient information for ``import_value``."""

    draft: Record | None = None
    field_handle: str | None = None


class FieldHandler(ABC):
    """Base class for field handlers.

    Subclasses set ``name`` (stable identity used in hint envelopes),
    ``priority``, and ``placeholder_type`` (the field type used to build a
    placeholder :class:`Field` when a hinted nested value is imported without
    its schema).
    """

    name: ClassVar[str] = ""
    priority: ClassVar[int] = 0
    placeholder_type: ClassVar[str | None] = None

    @abstractmethod
    def can_handle(self, field: Field) -> bool: ...

    @abstractmethod
    def export_value(self, field: Field, value: Any) -> Any: ...

    @abstractmethod
    def import_value(self, field: Field, value: Any, context: ImportContext | None = None) -> Any:
        ...

    def has_changed(self, field: Field, old_value: Any, new_value: Any) -> bool:
        return normalize_for_comparison(old_value) != normalize_for_comparison(new_value)

    def use_native_serialization(self) -> bool:
        return self.priority < SPECIALIZED_PRIORITY

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r} priority={self.priority}>"


# ── Shared helpers ───────────────────────────────────────────────────

_NUMERIC_RE = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")


def is_numeric(value: Any) -> bool:
    """True for ints, finite floats, Decimals, and numeric strings (not bools)."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int | Decimal):
        return True
    if isinstance(value, float):
        return math.isfinite(value)
    if isinstance(value, str):
        return bool(_NUMERIC_RE.match(value))
    return False


def to_number(value: Any) -> int | float | None:
    """Coerce a numeric value; strings with a fraction or exponent become floats."""
    if not is_numeric(value):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value
    text = str(value).strip()
    if any(ch in text for ch in ".eE"):
        return float(text)
    return int(text)


_TRUE_STRINGS = frozenset({"1", "true", "on", "yes"})
_FALSE_STRINGS = frozenset({"0", "false", "off", "no", ""})


def coerce_bool(value: Any) -> bool | None:
    """Lenient boolean parsing; ``None`` when *value* is not boolean-like."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, int | float):
        if value in (0, 1):
            return bool(value)
        return None
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    return None


def is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, list | tuple | dict):
        return len(value) == 0
    return False


def extract_ids(value: Any) -> list[int]:
    """Collect element ids from numbers, elements, and ``{id}`` objects."""
    if is_empty(value):
        return []
    if isinstance(value, Mapping):
        items: Iterable[Any] = [value]
    elif isinstance(value, ElementRef) or isinstance(value, str):
        items = [value]
    elif isinstance(value, Iterable):
        items = value
    else:
        items = [value]

    ids: list[int] = []
    for item in items:
        if isinstance(item, ElementRef):
            ids.append(item.id)
        elif isinstance(item, Mapping):
            candidate = item.get("id")
            if is_numeric(candidate):
                ids.append(int(to_number(candidate) or 0))
        elif is_numeric(item):
            ids.append(int(to_number(item) or 0))
    return ids


def id_sets_equal(left: Iterable[int], right: Iterable[int]) -> bool:
    return sorted(left) == sorted(right)


def normalize_for_comparison(value: Any) -> Any:
    """Deep-normalize a value so semantically equal values compare equal.

    Strings are trimmed, sequences and mappings are normalized element-wise,
    and objects are reduced to their serialized form.
    """
    if value is None or value is OMIT:
        return None
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, bool | int | float):
        return value
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, enum.Enum):
        return normalize_for_comparison(value.value)
    if isinstance(value, datetime | date | time):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {str(k): normalize_for_comparison(v) for k, v in value.items()}
    if isinstance(value, list | tuple):
        return [normalize_for_comparison(v) for v in value]
    if isinstance(value, BaseModel):
        return normalize_for_comparison(value.model_dump(mode="json"))
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return normalize_for_comparison(dataclasses.asdict(value))
    if hasattr(value, "to_dict"):
        return normalize_for_comparison(value.to_dict())
    if type(value).__str__ is not object.__str__:
        return str(value).strip()
    if hasattr(value, "__dict__"):
        return normalize_for_comparison(vars(value))
    return value
