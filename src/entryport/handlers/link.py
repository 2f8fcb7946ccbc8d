"""LinkHandler — built-in link fields and third-party link plugins.

Exported link shape::

    {"type": "entry", "url": "https://...", "label": "Read more",
     "target": "_blank", "ariaLabel": null, "element": 42}

On import, typed links (entry/asset/category) carry the element id in
``value``; every other type carries the URL.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from entryport.domain.fields import FieldKind, type_matches
from entryport.domain.values import LinkLike
from entryport.handlers.base import FieldHandler, ImportContext, is_numeric, to_number

if TYPE_CHECKING:
    from entryport.domain.fields import Field

ELEMENT_LINK_TYPES = frozenset({"entry", "asset", "category"})
LINK_KEYS = ("type", "url", "label", "element")


class LinkHandler(FieldHandler):
    name = "link"
    priority = 50
    placeholder_type = "link"

    def can_handle(self, field: Field) -> bool:
        return field.kind is FieldKind.LINK or type_matches(field.type, "hyper", "linkfield")

    def export_value(self, field: Field, value: Any) -> Any:
        if not value:
            return None
        if isinstance(value, LinkLike | Mapping):
            return _export_single(value)
        if isinstance(value, Iterable) and not isinstance(value, str | bytes):
            links = [link for link in (_export_single(v) for v in value) if link is not None]
            return links or None
        return None

    def import_value(self, field: Field, value: Any, context: ImportContext | None = None) -> Any:
        if not value or not isinstance(value, Mapping | list | tuple):
            return None
        if isinstance(value, Mapping):
            return _import_single(value)
        return [_import_single(link) for link in value if isinstance(link, Mapping)]

    def has_changed(self, field: Field, old_value: Any, new_value: Any) -> bool:
        old_links = _as_link_list(self.export_value(field, old_value))
        new_links = _as_link_list(new_value if isinstance(new_value, Mapping | list) else None)
        if len(old_links) != len(new_links):
            return True
        return any(
            _comparable(old) != _comparable(new)
            for old, new in zip(old_links, new_links, strict=True)
        )


def _export_single(link: Any) -> dict[str, Any] | None:
    if isinstance(link, LinkLike):
        exported: dict[str, Any] = {
            "type": link.type or "url",
            "url": link.url,
            "label": link.label,
            "target": link.target,
            "ariaLabel": link.aria_label,
        }
        if link.element_id is not None:
            exported["element"] = link.element_id
        return exported
    if isinstance(link, Mapping) and any(key in link for key in LINK_KEYS):
        # Already in wire shape; keep re-export idempotent.
        exported = {
            "type": link.get("type") or "url",
            "url": link.get("url"),
            "label": link.get("label"),
            "target": link.get("target"),
            "ariaLabel": link.get("ariaLabel"),
        }
        if link.get("element") is not None:
            exported["element"] = link["element"]
        return exported
    return None


def _import_single(link: Mapping[str, Any]) -> dict[str, Any]:
    link_type = link.get("type") or "url"
    result: dict[str, Any] = {"type": link_type}
    if link_type in ELEMENT_LINK_TYPES and link.get("element") is not None:
        result["value"] = link["element"]
    elif link.get("url") is not None:
        result["value"] = link["url"]
    for source, target in (("label", "label"), ("target", "target"), ("ariaLabel", "ariaLabel")):
        if link.get(source) not in (None, ""):
            result[target] = link[source]
    return result


def _as_link_list(value: Any) -> list[Mapping[str, Any]]:
    if not value:
        return []
    if isinstance(value, list):
        return [link for link in value if isinstance(link, Mapping)]
    if isinstance(value, Mapping) and any(key in value for key in LINK_KEYS):
        return [value]
    return []


def _comparable(link: Mapping[str, Any]) -> tuple[Any, ...]:
    element = link.get("element")
    if is_numeric(element):
        element = int(to_number(element) or 0)
    return (
        link.get("type") or "url",
        link.get("url") or "",
        link.get("label") or "",
        element,
        link.get("target") or None,
    )
