"""Workspace — the single dependency handed to every service.

Bundles the content store, the handler registry, the plugin manager, and
the settings. :meth:`Workspace.open` builds the SQL-backed workspace the CLI
uses; tests construct one directly around a memory store.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from entryport.config.settings import EntryportSettings
from entryport.handlers import HandlerRegistry, build_registry

if TYPE_CHECKING:
    from entryport.handlers.base import FieldHandler
    from entryport.plugins.manager import PluginManager
    from entryport.services.contracts import ContentStore

logger = logging.getLogger(__name__)


@dataclass
class Workspace:
    store: ContentStore
    registry: HandlerRegistry
    settings: EntryportSettings = field(default_factory=EntryportSettings)
    plugins: PluginManager | None = None

    @classmethod
    def open(cls, settings: EntryportSettings) -> Workspace:
        """Initialize the database, load plugins, and build the registry."""
        from entryport.infrastructure.database.engine import init_database
        from entryport.infrastructure.sql_store import SqlContentStore
        from entryport.plugins.manager import PluginManager

        engine = init_database(settings.database_path)
        store = SqlContentStore(engine, base_url=settings.store.base_url)

        plugins: PluginManager | None = None
        extra_handlers: list[FieldHandler] = []
        if settings.plugins.enabled:
            plugins = PluginManager()
            names = plugins.discover_and_load(disabled=settings.plugins.disabled)
            logger.debug("Loaded plugins: %s", names)
            extra_handlers = plugins.collect_field_handlers()

        registry = build_registry(
            seo_enabled=settings.integrations.seo,
            extra_handlers=extra_handlers,
        )
        return cls(store=store, registry=registry, settings=settings, plugins=plugins)

    def close(self) -> None:
        self.store.close()
