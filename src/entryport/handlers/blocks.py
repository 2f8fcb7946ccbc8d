"""BlockGroupHandler — repeatable nested blocks, recursively.

Export inlines each block's fields next to its ``type``/``title``/
``enabled``/``collapsed`` keys. Nested values produced by any handler other
than the default one are wrapped in a hint envelope::

    {"__handler": "asset", "__value": {"id": 7, "url": "...", ...}}

so import can route the value back through the same handler without the
block schema. Unhinted values fall back to shape heuristics, which are
best-effort: an options object and a link object carrying ``value`` and
``label`` look the same.

Import produces the slot map the host replaces atomically::

    {"slot1": {"type": "text", "enabled": True, "collapsed": False,
               "title": "Intro", "fields": {"body": "..."}}}
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from entryport.domain.fields import Field, FieldKind, type_matches
from entryport.domain.values import Block
from entryport.handlers.base import (
    OMIT,
    FieldHandler,
    ImportContext,
    normalize_for_comparison,
)
from entryport.handlers.default import DefaultHandler

if TYPE_CHECKING:
    from entryport.handlers.registry import HandlerRegistry

logger = logging.getLogger(__name__)

HINT_HANDLER_KEY = "__handler"
HINT_VALUE_KEY = "__value"
BLOCK_PROPERTIES = frozenset({"type", "title", "enabled", "collapsed"})
SLOT_PREFIX = "slot"

_LINK_SHAPE_KEYS = ("type", "url", "text", "label", "element", "elementType")


def is_hint(value: Any) -> bool:
    return isinstance(value, Mapping) and HINT_HANDLER_KEY in value and HINT_VALUE_KEY in value


def wrap_hint(handler_name: str, value: Any) -> dict[str, Any]:
    return {HINT_HANDLER_KEY: handler_name, HINT_VALUE_KEY: value}


class BlockGroupHandler(FieldHandler):
    """Delegates nested fields to the handlers the registry resolves for them.

    The registry is injected at construction; the handler registered in it
    is the same instance that recursion sees.
    """

    name = "blocks"
    priority = 50
    placeholder_type = "matrix"

    def __init__(self, registry: HandlerRegistry) -> None:
        self._registry = registry

    def can_handle(self, field: Field) -> bool:
        return field.kind is FieldKind.BLOCKS or type_matches(field.type, "matrix", "neo")

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def export_value(self, field: Field, value: Any) -> Any:
        if not isinstance(value, list | tuple):
            return []
        return [self._export_block(block) for block in value if isinstance(block, Block)]

    def _export_block(self, block: Block) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": block.type or "unknown",
            "title": block.title,
            "enabled": block.enabled,
            "collapsed": block.collapsed,
        }
        for nested in block.fields:
            if nested.handle in BLOCK_PROPERTIES:
                logger.warning(
                    "Skipping block field %s: handle collides with a block property",
                    nested.handle,
                )
                continue
            try:
                exported = self._export_nested(nested, block.get_field_value(nested.handle))
            except Exception:
                logger.warning(
                    "Failed to export block field %s in block %s",
                    nested.handle,
                    block.type,
                    exc_info=True,
                )
                continue
            if exported is not OMIT:
                data[nested.handle] = exported
        return data

    def _export_nested(self, field: Field, value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, list | tuple) and not value:
            return []

        handler = self._registry.get_handler(field)
        exported = handler.export_value(field, value)
        if exported is OMIT or exported is None:
            return exported
        if handler is self or not isinstance(handler, DefaultHandler):
            return wrap_hint(handler.name, exported)
        return exported

    # ------------------------------------------------------------------
    # Import
    # ------------------------------------------------------------------

    def import_value(self, field: Field, value: Any, context: ImportContext | None = None) -> Any:
        if isinstance(value, Mapping):
            blocks: list[Any] = list(value.values())
        elif isinstance(value, list | tuple):
            blocks = list(value)
        else:
            return {}

        slots: dict[str, Any] = {}
        counter = 0
        for block in blocks:
            if not isinstance(block, Mapping) or not block.get("type"):
                logger.warning("Skipping block without a type in field %s", field.handle)
                continue
            counter += 1
            slot: dict[str, Any] = {
                "type": block["type"],
                "enabled": block.get("enabled", True),
                "collapsed": block.get("collapsed", False),
                "fields": {},
            }
            if block.get("title") is not None:
                slot["title"] = block["title"]
            for key, raw in block.items():
                if key in BLOCK_PROPERTIES:
                    continue
                try:
                    slot["fields"][key] = self._import_nested(key, raw)
                except Exception:
                    logger.warning(
                        "Failed to import block field %s in block %s",
                        key,
                        block["type"],
                        exc_info=True,
                    )
            slots[f"{SLOT_PREFIX}{counter}"] = slot
        return slots

    def _import_nested(self, handle: str, value: Any) -> Any:
        if value is None:
            return None
        if is_hint(value):
            handler_name = str(value[HINT_HANDLER_KEY])
            inner = value[HINT_VALUE_KEY]
            if handler_name == self.name:
                return self.import_value(self._placeholder(handle, self), inner)
            handler = self._registry.find_by_name(handler_name)
            if handler is not None and handler.placeholder_type is not None:
                return handler.import_value(
                    self._placeholder(handle, handler),
                    inner,
                    ImportContext(field_handle=handle),
                )
            logger.warning(
                "Handler %r for block field %s is unavailable; guessing from shape",
                handler_name,
                handle,
            )
            value = inner
        return self._import_by_shape(handle, value)

    @staticmethod
    def _placeholder(handle: str, handler: FieldHandler) -> Field:
        return Field(handle=handle, type=handler.placeholder_type or "plain_text")

    def _import_by_shape(self, handle: str, value: Any) -> Any:
        """Best-effort routing of an unhinted nested value."""
        if isinstance(value, Mapping):
            if "value" in value and "label" in value:
                return self._delegate("options", handle, value, fallback=value.get("value"))
            if "id" in value:
                return self._delegate("asset", handle, value, fallback=[value["id"]])
            if any(key in value for key in _LINK_SHAPE_KEYS):
                return self._delegate("link", handle, value, fallback=value)
            return value

        if isinstance(value, list) and value and isinstance(value[0], Mapping):
            if _looks_like_blocks(value):
                return self.import_value(self._placeholder(handle, self), value)
            first = value[0]
            is_link = any(key in first for key in ("type", "url", "element"))
            if "value" in first and "label" in first and not is_link:
                fallback = [item.get("value") for item in value if isinstance(item, Mapping)]
                return self._delegate("options", handle, value, fallback=fallback)
            if any(key in first for key in _LINK_SHAPE_KEYS):
                return self._delegate("link", handle, value, fallback=value)
            if "id" in first:
                fallback = [item.get("id") for item in value if isinstance(item, Mapping)]
                return self._delegate("asset", handle, value, fallback=fallback)
        return value

    def _delegate(self, handler_name: str, handle: str, value: Any, *, fallback: Any) -> Any:
        handler = self._registry.find_by_name(handler_name)
        if handler is None or handler.placeholder_type is None:
            return fallback
        return handler.import_value(
            self._placeholder(handle, handler), value, ImportContext(field_handle=handle)
        )

    # ------------------------------------------------------------------
    # Change detection
    # ------------------------------------------------------------------

    def has_changed(self, field: Field, old_value: Any, new_value: Any) -> bool:
        old_blocks = _comparable_blocks(old_value)
        new_blocks = _comparable_blocks(new_value)
        if len(old_blocks) != len(new_blocks):
            return True
        for old, new in zip(old_blocks, new_blocks, strict=True):
            if old.get("type") != new.get("type"):
                return True
            if old.get("enabled", True) != new.get("enabled", True):
                return True
            if normalize_for_comparison(old.get("title")) != normalize_for_comparison(
                new.get("title")
            ):
                return True
            old_fields = _block_fields(old)
            new_fields = _block_fields(new)
            if old_fields.keys() != new_fields.keys():
                return True
            for key, old_field in old_fields.items():
                if normalize_for_comparison(old_field) != normalize_for_comparison(new_fields[key]):
                    return True
        return False


def _looks_like_blocks(items: list[Any]) -> bool:
    """Every item has a block ``type`` and none has a link or option target."""
    return all(
        isinstance(item, Mapping)
        and "type" in item
        and not any(key in item for key in ("url", "element", "value"))
        for item in items
    )


def _comparable_blocks(value: Any) -> list[Mapping[str, Any]]:
    if not value:
        return []
    items = list(value.values()) if isinstance(value, Mapping) else value
    if not isinstance(items, list | tuple):
        return []
    return [block for block in items if isinstance(block, Mapping) and "type" in block]


def _block_fields(block: Mapping[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in block.items() if k not in BLOCK_PROPERTIES}
