"""Pluggy hook specifications for entryport.

One setup-time hook lets plugins contribute field handlers; two
notification hooks observe completed exports and imports.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pluggy

if TYPE_CHECKING:
    from entryport.handlers.base import FieldHandler

hookspec = pluggy.HookspecMarker("entryport")
hookimpl = pluggy.HookimplMarker("entryport")


class EntryportHookSpec:
    """Hook specifications for the entryport plugin system."""

    @hookspec
    def register_field_handlers(self) -> list[FieldHandler] | None:
        """Return handlers to register after the built-ins and before the default."""

    @hookspec
    def post_export(
        self,
        record_id: int,
        site_id: int,
        fields: list[str],
    ) -> None:
        """Called after a record was exported."""

    @hookspec
    def post_import(
        self,
        record_id: int,
        draft_id: int | None,
        updated_fields: list[str],
        payload: dict[str, Any],
    ) -> None:
        """Called after an import created a draft."""
