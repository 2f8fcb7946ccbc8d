"""BaseService — shared foundation of the export and import services.

Every service receives a :class:`~entryport.workspace.Workspace` at
construction time and reaches the store, registry, settings, and plugins
through it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from entryport.domain.fields import Field
    from entryport.domain.records import Record
    from entryport.handlers.registry import HandlerRegistry
    from entryport.services.contracts import ContentStore
    from entryport.workspace import Workspace

logger = logging.getLogger(__name__)


class BaseService:
    """Base for service-layer classes.

    Usage::

        class ExportService(BaseService):
            def export_by_id(self, record_id: int) -> ServiceResult:
                record = self._store.find_record(record_id)
                ...
    """

    def __init__(self, workspace: Workspace) -> None:
        self._workspace = workspace

    @property
    def _store(self) -> ContentStore:
        return self._workspace.store

    @property
    def _registry(self) -> HandlerRegistry:
        return self._workspace.registry

    def _dispatch_event(
        self,
        hook_name: str,
        payload: dict[str, Any],
        warnings: list[str],
    ) -> None:
        """Call a plugin notification hook. No-op without a plugin manager.

        INVARIANT: Plugin failures are warnings, never errors.
        """
        plugins = self._workspace.plugins
        if plugins is None:
            return
        try:
            getattr(plugins.hook, hook_name)(**payload)
        except Exception:
            logger.warning("Plugin hook %s failed", hook_name, exc_info=True)
            warnings.append(f"Plugin hook {hook_name} failed")

    def _native_values(self, record: Record) -> dict[str, Any]:
        """Native serialized values of *record*; empty when the setting is off."""
        if not self._workspace.settings.export.native_serialization:
            return {}
        return self._store.get_native_serialized_values(record)

    def _exported_value(self, record: Record, field: Field, native_values: dict[str, Any]) -> Any:
        """The exported form of one field.

        Export writes this value and import compares against it, so an
        unmodified document never registers a change.
        """
        handler = self._registry.get_handler(field)
        if handler.use_native_serialization() and field.handle in native_values:
            return native_values[field.handle]
        return handler.export_value(field, self._store.get_field_value(record, field.handle))
