"""Field schema types and family classification.

A :class:`Field` is one named slot of a record's schema. ``type`` is the
concrete discriminant the host reports (``dropdown``, ``matrix``,
``verbb.hyper.link``, ...) and ``kind`` is the family it belongs to. When
``kind`` is not given it is derived from ``type``: the built-in table first,
then known third-party signatures, else :attr:`FieldKind.SCALAR`.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field as PydanticField, model_validator


class FieldKind(StrEnum):
    """Field families, one per handler strategy."""

    SCALAR = "scalar"
    OPTIONS = "options"
    RELATION = "relation"
    ASSET = "asset"
    LINK = "link"
    BLOCKS = "blocks"
    SEO = "seo"


class ValidationScenario(StrEnum):
    """How strictly a record is validated on persist."""

    DEFAULT = "default"
    ESSENTIALS = "essentials"


BUILTIN_FIELD_KINDS: dict[str, FieldKind] = {
    # scalar
    "plain_text": FieldKind.SCALAR,
    "rich_text": FieldKind.SCALAR,
    "email": FieldKind.SCALAR,
    "url": FieldKind.SCALAR,
    "color": FieldKind.SCALAR,
    "number": FieldKind.SCALAR,
    "lightswitch": FieldKind.SCALAR,
    "date": FieldKind.SCALAR,
    "time": FieldKind.SCALAR,
    "table": FieldKind.SCALAR,
    # options
    "dropdown": FieldKind.OPTIONS,
    "radio_buttons": FieldKind.OPTIONS,
    "button_group": FieldKind.OPTIONS,
    "checkboxes": FieldKind.OPTIONS,
    "multi_select": FieldKind.OPTIONS,
    # relations
    "entries": FieldKind.RELATION,
    "categories": FieldKind.RELATION,
    "tags": FieldKind.RELATION,
    "users": FieldKind.RELATION,
    # the rest
    "assets": FieldKind.ASSET,
    "link": FieldKind.LINK,
    "matrix": FieldKind.BLOCKS,
    "seo_settings": FieldKind.SEO,
}

# Substrings identifying third-party field types, checked in order.
THIRD_PARTY_SIGNATURES: tuple[tuple[str, FieldKind], ...] = (
    ("seomatic", FieldKind.SEO),
    ("hyper", FieldKind.LINK),
    ("linkfield", FieldKind.LINK),
    ("matrix", FieldKind.BLOCKS),
    ("neo", FieldKind.BLOCKS),
    ("assets", FieldKind.ASSET),
)

MULTI_OPTION_TYPES = frozenset({"checkboxes", "multi_select"})
NUMBER_TYPES = frozenset({"number"})
TOGGLE_TYPES = frozenset({"lightswitch"})
DATE_TYPES = frozenset({"date", "time"})

# Built-in record properties that never appear as custom field handles.
RESERVED_HANDLES = frozenset({"metadata", "title"})


def type_matches(field_type: str, *signatures: str) -> bool:
    """Case-insensitive substring test of *field_type* against *signatures*."""
    lowered = field_type.lower()
    return any(sig in lowered for sig in signatures)


def infer_kind(field_type: str) -> FieldKind:
    """Resolve the family of a concrete field type."""
    kind = BUILTIN_FIELD_KINDS.get(field_type)
    if kind is not None:
        return kind
    for signature, sig_kind in THIRD_PARTY_SIGNATURES:
        if type_matches(field_type, signature):
            return sig_kind
    return FieldKind.SCALAR


class OptionDef(BaseModel):
    """One allowed choice of an options field."""

    model_config = {"frozen": True}

    value: str
    label: str = ""

    @model_validator(mode="before")
    @classmethod
    def _default_label(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"value": data, "label": data}
        if isinstance(data, dict) and not data.get("label"):
            data = {**data, "label": data.get("value", "")}
        return data


class BlockType(BaseModel):
    """A block type of a block-group field, with its own nested schema."""

    model_config = {"frozen": True}

    handle: str
    name: str = ""
    fields: tuple[Field, ...] = ()

    def get_field(self, handle: str) -> Field | None:
        for field in self.fields:
            if field.handle == handle:
                return field
        return None


class Field(BaseModel):
    """One named, typed slot in a record's schema."""

    model_config = {"frozen": True}

    handle: str = PydanticField(min_length=1)
    type: str = "plain_text"
    kind: FieldKind = FieldKind.SCALAR
    name: str = ""
    required: bool = False
    multiple: bool = False
    options: tuple[OptionDef, ...] = ()
    block_types: tuple[BlockType, ...] = ()

    @model_validator(mode="before")
    @classmethod
    def _resolve_kind(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("kind") is None:
            data = {**data, "kind": infer_kind(str(data.get("type", "plain_text")))}
        return data

    @property
    def type_key(self) -> tuple[str, FieldKind]:
        """Concrete type discriminant used as the handler cache key."""
        return (self.type, self.kind)

    @property
    def is_multi_option(self) -> bool:
        return self.kind is FieldKind.OPTIONS and (
            self.type in MULTI_OPTION_TYPES or self.multiple
        )

    def get_block_type(self, handle: str) -> BlockType | None:
        for block_type in self.block_types:
            if block_type.handle == handle:
                return block_type
        return None

    def option_label(self, value: str) -> str | None:
        for option in self.options:
            if option.value == value:
                return option.label
        return None


BlockType.model_rebuild()
