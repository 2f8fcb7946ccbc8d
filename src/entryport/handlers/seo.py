"""SeoHandler — metadata bundles of the SEO integration.

Registered only when the integration is enabled. Export always yields the
full key set; empty strings and unrendered template fallbacks (``{{ ... }}``)
become null. Import wraps the flat map back into ``metaGlobalVars``.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from entryport.domain.fields import FieldKind, type_matches
from entryport.domain.values import SeoBundle
from entryport.handlers.base import FieldHandler, ImportContext, normalize_for_comparison

if TYPE_CHECKING:
    from entryport.domain.fields import Field

SEO_KEYS: tuple[str, ...] = (
    "seoTitle",
    "seoDescription",
    "seoKeywords",
    "seoImage",
    "seoImageDescription",
    "ogTitle",
    "ogDescription",
    "ogImage",
    "ogImageDescription",
    "twitterTitle",
    "twitterDescription",
    "twitterImage",
    "twitterImageDescription",
    "canonicalUrl",
    "robots",
)

COMPARED_KEYS: tuple[str, ...] = (
    "seoTitle",
    "seoDescription",
    "seoKeywords",
    "seoImage",
    "canonicalUrl",
    "robots",
    "ogTitle",
    "ogDescription",
    "ogImage",
    "twitterTitle",
    "twitterDescription",
    "twitterImage",
)

GLOBAL_VARS_KEY = "metaGlobalVars"
SITE_VARS_KEY = "metaSiteVars"

_TEMPLATE_RE = re.compile(r"^\{\{.*\}\}$", re.DOTALL)


class SeoHandler(FieldHandler):
    name = "seo"
    priority = 50
    placeholder_type = "seo_settings"

    def can_handle(self, field: Field) -> bool:
        return field.kind is FieldKind.SEO or type_matches(
            field.type, "seomatic", "seo_settings", "seosettings"
        )

    def export_value(self, field: Field, value: Any) -> Any:
        merged: dict[str, Any] = {}
        if isinstance(value, SeoBundle):
            merged.update(value.meta_global_vars)
            merged.update(value.meta_site_vars)
        elif isinstance(value, Mapping):
            if GLOBAL_VARS_KEY in value or SITE_VARS_KEY in value:
                merged.update(value.get(GLOBAL_VARS_KEY) or {})
                merged.update(value.get(SITE_VARS_KEY) or {})
            else:
                merged.update(value)
        return {key: normalize_seo_value(merged.get(key)) for key in SEO_KEYS}

    def import_value(self, field: Field, value: Any, context: ImportContext | None = None) -> Any:
        if value is None or value == "":
            return None
        if isinstance(value, str):
            try:
                decoded = json.loads(value)
            except json.JSONDecodeError:
                return value
            value = decoded
        if not isinstance(value, Mapping):
            return value
        normalized = {key: "" if item is None else item for key, item in value.items()}
        return {GLOBAL_VARS_KEY: normalized}

    def has_changed(self, field: Field, old_value: Any, new_value: Any) -> bool:
        old = self.export_value(field, old_value)
        new = (
            {key: normalize_seo_value(item) for key, item in new_value.items()}
            if isinstance(new_value, Mapping)
            else {}
        )
        old_empty = not any(v is not None for v in old.values())
        new_empty = not any(v is not None for v in new.values())
        if old_empty and new_empty:
            return False
        if old_empty != new_empty:
            return True
        for key in COMPARED_KEYS:
            if normalize_for_comparison(old.get(key)) != normalize_for_comparison(new.get(key)):
                return True
        return normalize_for_comparison(old) != normalize_for_comparison(new)


def normalize_seo_value(value: Any) -> Any:
    """Map empty strings and template fallbacks to ``None``."""
    if value is None:
        return None
    if isinstance(value, str):
        stripped = value.strip()
        if stripped == "" or _TEMPLATE_RE.match(stripped):
            return None
    return value
