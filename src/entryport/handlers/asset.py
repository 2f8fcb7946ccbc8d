"""AssetHandler — file and media references."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from entryport.domain.fields import FieldKind, type_matches
from entryport.domain.values import Asset
from entryport.handlers.base import (
    FieldHandler,
    ImportContext,
    extract_ids,
    id_sets_equal,
)

if TYPE_CHECKING:
    from entryport.domain.fields import Field


class AssetHandler(FieldHandler):
    """One asset exports as a flat object, several as a list, none as null."""

    name = "asset"
    priority = 50
    placeholder_type = "assets"

    def can_handle(self, field: Field) -> bool:
        return field.kind is FieldKind.ASSET or type_matches(field.type, "assets")

    def export_value(self, field: Field, value: Any) -> Any:
        if value is None or isinstance(value, str | bytes | Mapping):
            return None
        if isinstance(value, Asset):
            value = [value]
        if not isinstance(value, Iterable):
            return None
        exported = [_asset_dict(asset) for asset in value if isinstance(asset, Asset)]
        if not exported:
            return None
        if len(exported) == 1:
            return exported[0]
        return exported

    def import_value(self, field: Field, value: Any, context: ImportContext | None = None) -> Any:
        return extract_ids(value)

    def has_changed(self, field: Field, old_value: Any, new_value: Any) -> bool:
        return not id_sets_equal(extract_ids(old_value), extract_ids(new_value))


def _asset_dict(asset: Asset) -> dict[str, Any]:
    return {"id": asset.id, "url": asset.url, "title": asset.title, "alt": asset.alt}
