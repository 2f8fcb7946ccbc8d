"""Host-side value codec: storage/wire shapes <-> live values.

``normalize_value`` turns whatever the store holds or an import produced
into the live value type of the field's family. ``serialize_value`` turns
a live value into the host's native JSON form (also what the store
persists). ``validate_value`` reports persist-time errors.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Protocol

from entryport.domain.fields import (
    DATE_TYPES,
    NUMBER_TYPES,
    TOGGLE_TYPES,
    Field,
    FieldKind,
    ValidationScenario,
)
from entryport.domain.values import (
    Asset,
    Block,
    ElementRef,
    LinkLike,
    LinkValue,
    MultiOptionValue,
    OptionValue,
    SeoBundle,
)

logger = logging.getLogger(__name__)

ELEMENT_LINK_TYPES = frozenset({"entry", "asset", "category"})
BLOCK_PROPERTIES = frozenset({"type", "title", "enabled", "collapsed", "fields", "id"})


class FieldValueError(ValueError):
    """A value cannot be normalized for its field."""


class ElementResolver(Protocol):
    """Looks up referenced elements while normalizing relation-like values."""

    def resolve_elements(self, ids: Sequence[int]) -> list[ElementRef]: ...

    def resolve_assets(self, ids: Sequence[int]) -> list[Asset]: ...

    def resolve_element_url(self, link_type: str, element_id: int) -> str | None: ...


# ── normalize ────────────────────────────────────────────────────────


def normalize_value(field: Field, raw: Any, resolver: ElementResolver) -> Any:
    """Convert a storage or import-shaped value into the field's live value."""
    match field.kind:
        case FieldKind.OPTIONS:
            return _normalize_options(field, raw)
        case FieldKind.RELATION:
            return resolver.resolve_elements(_ids(field, raw))
        case FieldKind.ASSET:
            return resolver.resolve_assets(_ids(field, raw))
        case FieldKind.LINK:
            return _normalize_links(field, raw, resolver)
        case FieldKind.SEO:
            return _normalize_seo(field, raw)
        case FieldKind.BLOCKS:
            return _normalize_blocks(field, raw, resolver)
        case _:
            return _normalize_scalar(field, raw)


def _normalize_scalar(field: Field, raw: Any) -> Any:
    if field.type in TOGGLE_TYPES:
        if isinstance(raw, str):
            return raw.strip().lower() in ("1", "true", "on", "yes")
        return bool(raw)
    if raw is None or raw == "":
        return None
    if field.type in NUMBER_TYPES:
        if isinstance(raw, bool):
            return raw
        if isinstance(raw, int | float | Decimal):
            return raw
        if isinstance(raw, str):
            text = raw.strip()
            try:
                return float(text) if any(ch in text for ch in ".eE") else int(text)
            except ValueError:
                return raw
        return raw
    if field.type in DATE_TYPES:
        if isinstance(raw, datetime | time):
            return raw
        if isinstance(raw, date):
            return datetime.combine(raw, time.min)
        if isinstance(raw, str):
            try:
                return datetime.fromisoformat(raw.strip())
            except ValueError:
                pass
            if field.type == "time":
                try:
                    return time.fromisoformat(raw.strip())
                except ValueError:
                    pass
        return raw
    return raw


def _normalize_options(field: Field, raw: Any) -> Any:
    if field.is_multi_option:
        if isinstance(raw, MultiOptionValue):
            return raw
        if raw is None or raw == "":
            return MultiOptionValue()
        items = raw if isinstance(raw, list | tuple) else [raw]
        return MultiOptionValue(tuple(_option(field, item) for item in items))
    if raw is None or raw == "":
        return None
    if isinstance(raw, list | tuple):
        if not raw:
            return None
        raw = raw[0]
    return _option(field, raw)


def _option(field: Field, item: Any) -> OptionValue:
    if isinstance(item, OptionValue):
        return item
    if isinstance(item, Mapping):
        item = item.get("value") if item.get("value") is not None else item.get("label")
    value = None if item is None else str(item)
    label = field.option_label(value) if value is not None else None
    return OptionValue(value=value, label=label if label is not None else value)


def _ids(field: Field, raw: Any) -> list[int]:
    if raw is None or raw == "":
        return []
    items = raw if isinstance(raw, list | tuple) else [raw]
    ids: list[int] = []
    for item in items:
        if isinstance(item, ElementRef):
            ids.append(item.id)
            continue
        if isinstance(item, Mapping):
            item = item.get("id")
        try:
            ids.append(int(item))
        except (TypeError, ValueError) as exc:
            msg = f"Invalid element reference {item!r} for field {field.handle}"
            raise FieldValueError(msg) from exc
    return ids


def _normalize_links(field: Field, raw: Any, resolver: ElementResolver) -> Any:
    if not raw:
        return None
    if isinstance(raw, LinkLike):
        return raw
    if isinstance(raw, Mapping):
        return _link(field, raw, resolver)
    if isinstance(raw, list | tuple):
        links = [_link(field, item, resolver) for item in raw]
        return links or None
    msg = f"Invalid link value for field {field.handle}: {raw!r}"
    raise FieldValueError(msg)


def _link(field: Field, raw: Any, resolver: ElementResolver) -> LinkLike:
    if isinstance(raw, LinkLike):
        return raw
    if not isinstance(raw, Mapping):
        msg = f"Invalid link value for field {field.handle}: {raw!r}"
        raise FieldValueError(msg)
    link_type = str(raw.get("type") or "url")
    element_id: int | None = None
    url = raw.get("url")
    if link_type in ELEMENT_LINK_TYPES:
        candidate = raw.get("value", raw.get("element"))
        if candidate not in (None, ""):
            try:
                element_id = int(candidate)
            except (TypeError, ValueError) as exc:
                msg = f"Invalid {link_type} id {candidate!r} for field {field.handle}"
                raise FieldValueError(msg) from exc
            url = resolver.resolve_element_url(link_type, element_id)
    elif raw.get("value") not in (None, ""):
        url = raw["value"]
    return LinkValue(
        type=link_type,
        url=url,
        label=raw.get("label"),
        target=raw.get("target"),
        aria_label=raw.get("ariaLabel"),
        element_id=element_id,
    )


def _normalize_seo(field: Field, raw: Any) -> SeoBundle:
    if isinstance(raw, SeoBundle):
        return raw
    if raw is None or raw == "":
        return SeoBundle()
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as exc:
            msg = f"Invalid SEO metadata for field {field.handle}"
            raise FieldValueError(msg) from exc
    if not isinstance(raw, Mapping):
        msg = f"Invalid SEO metadata for field {field.handle}: {raw!r}"
        raise FieldValueError(msg)
    if "metaGlobalVars" in raw or "metaSiteVars" in raw:
        return SeoBundle(
            meta_global_vars=dict(raw.get("metaGlobalVars") or {}),
            meta_site_vars=dict(raw.get("metaSiteVars") or {}),
        )
    return SeoBundle(meta_global_vars=dict(raw))


def _normalize_blocks(field: Field, raw: Any, resolver: ElementResolver) -> list[Block]:
    if not raw:
        return []
    items = list(raw.values()) if isinstance(raw, Mapping) else raw
    if not isinstance(items, list | tuple):
        msg = f"Invalid block data for field {field.handle}"
        raise FieldValueError(msg)

    blocks: list[Block] = []
    for item in items:
        if isinstance(item, Block):
            blocks.append(item)
            continue
        if not isinstance(item, Mapping):
            msg = f"Invalid block in field {field.handle}: {item!r}"
            raise FieldValueError(msg)
        block_type = field.get_block_type(str(item.get("type", "")))
        if block_type is None:
            msg = f"Unknown block type {item.get('type')!r} for field {field.handle}"
            raise FieldValueError(msg)
        nested_raw = item.get("fields")
        if not isinstance(nested_raw, Mapping):
            nested_raw = {k: v for k, v in item.items() if k not in BLOCK_PROPERTIES}
        values = {
            nested.handle: normalize_value(nested, nested_raw[nested.handle], resolver)
            for nested in block_type.fields
            if nested.handle in nested_raw
        }
        blocks.append(
            Block(
                type=block_type.handle,
                fields=block_type.fields,
                values=values,
                title=item.get("title"),
                enabled=bool(item.get("enabled", True)),
                collapsed=bool(item.get("collapsed", False)),
            )
        )
    return blocks


# ── serialize ────────────────────────────────────────────────────────


def serialize_value(field: Field, value: Any) -> Any:
    """Convert a live value into the host's native JSON form."""
    match field.kind:
        case FieldKind.OPTIONS:
            if isinstance(value, MultiOptionValue):
                return value.values
            if isinstance(value, OptionValue):
                return value.value
            return value
        case FieldKind.RELATION | FieldKind.ASSET:
            return [item.id for item in value or () if isinstance(item, ElementRef)]
        case FieldKind.LINK:
            if value is None:
                return None
            if isinstance(value, list | tuple):
                return [_serialize_link(link) for link in value]
            return _serialize_link(value)
        case FieldKind.SEO:
            bundle = value if isinstance(value, SeoBundle) else SeoBundle()
            return {
                "metaGlobalVars": dict(bundle.meta_global_vars),
                "metaSiteVars": dict(bundle.meta_site_vars),
            }
        case FieldKind.BLOCKS:
            return [_serialize_block(block) for block in value or ()]
        case _:
            return _serialize_scalar(value)


def _serialize_scalar(value: Any) -> Any:
    if isinstance(value, datetime | date | time):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, list):
        return [_serialize_scalar(v) for v in value]
    if isinstance(value, dict):
        return {k: _serialize_scalar(v) for k, v in value.items()}
    return value


def _serialize_link(link: LinkLike) -> dict[str, Any]:
    data: dict[str, Any] = {"type": link.type}
    if link.element_id is not None:
        data["value"] = link.element_id
    elif link.url is not None:
        data["value"] = link.url
    for key, item in (
        ("label", link.label),
        ("target", link.target),
        ("ariaLabel", link.aria_label),
    ):
        if item is not None:
            data[key] = item
    return data


def _serialize_block(block: Block) -> dict[str, Any]:
    return {
        "type": block.type,
        "title": block.title,
        "enabled": block.enabled,
        "collapsed": block.collapsed,
        "fields": {
            nested.handle: serialize_value(nested, block.values.get(nested.handle))
            for nested in block.fields
            if nested.handle in block.values
        },
    }


# ── validate ─────────────────────────────────────────────────────────


def validate_value(
    field: Field,
    value: Any,
    *,
    scenario: ValidationScenario,
    path: str | None = None,
) -> dict[str, list[str]]:
    """Return ``{path: [messages]}`` for every problem with *value*."""
    path = path or field.handle
    errors: dict[str, list[str]] = {}

    def add(message: str) -> None:
        errors.setdefault(path, []).append(message)

    if (
        scenario is not ValidationScenario.ESSENTIALS
        and field.required
        and _is_blank(value)
    ):
        add(f"{field.name or field.handle} cannot be blank.")

    if field.kind is FieldKind.OPTIONS and field.options:
        allowed = {opt.value for opt in field.options}
        selected: list[str | None]
        if isinstance(value, MultiOptionValue):
            selected = value.values
        elif isinstance(value, OptionValue):
            selected = [value.value]
        else:
            selected = []
        for choice in selected:
            if choice is not None and choice not in allowed:
                add(f"{choice!r} is not a valid option.")
    elif field.type in NUMBER_TYPES and value is not None:
        if isinstance(value, bool) or not isinstance(value, int | float | Decimal):
            add(f"{field.name or field.handle} must be a number.")
    elif field.type in DATE_TYPES and value is not None:
        if not isinstance(value, datetime | time):
            add(f"{field.name or field.handle} must be a valid date.")
    elif field.kind is FieldKind.BLOCKS:
        for index, block in enumerate(value or ()):
            for nested in block.fields:
                errors.update(
                    validate_value(
                        nested,
                        block.values.get(nested.handle),
                        scenario=scenario,
                        path=f"{path}[{index}].{nested.handle}",
                    )
                )
    return errors


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, list | tuple | dict | MultiOptionValue):
        return len(value) == 0
    return False
