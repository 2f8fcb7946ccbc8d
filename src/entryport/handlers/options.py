"""OptionsHandler — dropdowns, radio buttons, checkboxes, multi-selects."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from entryport.domain.fields import FieldKind
from entryport.domain.values import MultiOptionValue, OptionValue
from entryport.handlers.base import FieldHandler, ImportContext

if TYPE_CHECKING:
    from entryport.domain.fields import Field


class OptionsHandler(FieldHandler):
    """Single options export as ``{value, label}``, multi options as a list of them."""

    name = "options"
    priority = 50
    placeholder_type = "dropdown"

    def can_handle(self, field: Field) -> bool:
        return field.kind is FieldKind.OPTIONS

    def export_value(self, field: Field, value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, MultiOptionValue):
            return [_option_dict(opt) for opt in value]
        if isinstance(value, OptionValue):
            return _option_dict(value)
        if isinstance(value, str):
            return {"value": value, "label": field.option_label(value) or value}
        if isinstance(value, list | tuple):
            # Already exported, or raw selected values.
            return [
                {"value": item.get("value"), "label": item.get("label")}
                if isinstance(item, Mapping)
                else {"value": item, "label": field.option_label(str(item)) or item}
                for item in value
            ]
        if isinstance(value, Mapping):
            return {"value": value.get("value"), "label": value.get("label")}
        return None

    def import_value(self, field: Field, value: Any, context: ImportContext | None = None) -> Any:
        if value is None:
            return None
        if field.is_multi_option or _looks_multi(value):
            if not isinstance(value, list | tuple):
                return [] if value == "" else [_single_value(value)]
            return [_single_value(item) for item in value]
        return _single_value(value)

    def has_changed(self, field: Field, old_value: Any, new_value: Any) -> bool:
        if field.is_multi_option or _looks_multi(old_value) or _looks_multi(new_value):
            return sorted(_multi_values(old_value)) != sorted(_multi_values(new_value))
        return _single_string(old_value) != _single_string(new_value)


def _option_dict(option: OptionValue) -> dict[str, Any]:
    return {"value": option.value, "label": option.label}


def _looks_multi(value: Any) -> bool:
    return (
        isinstance(value, list | tuple)
        and len(value) > 0
        and isinstance(value[0], Mapping)
        and "value" in value[0]
    )


def _single_value(value: Any) -> Any:
    if isinstance(value, OptionValue):
        return value.value
    if isinstance(value, Mapping):
        extracted = value.get("value")
        return extracted if extracted is not None else value.get("label")
    return value


def _single_string(value: Any) -> str | None:
    extracted = _single_value(value)
    if extracted is None or extracted == "":
        return None
    return str(extracted)


def _multi_values(value: Any) -> list[str]:
    if value is None:
        return []
    items: list[Any]
    if isinstance(value, MultiOptionValue):
        items = list(value.options)
    elif isinstance(value, list | tuple):
        items = list(value)
    else:
        items = [value]
    result: list[str] = []
    for item in items:
        extracted = _single_string(item)
        if extracted is not None:
            result.append(extracted)
    return result
