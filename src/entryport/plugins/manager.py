"""Plugin discovery and loading.

Plugins are pip-installed packages exposing an ``entryport.plugins`` entry
point. They can contribute field handlers and observe exports and imports.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

import pluggy

from entryport.plugins.hookspecs import EntryportHookSpec

if TYPE_CHECKING:
    from entryport.handlers.base import FieldHandler

PROJECT_NAME = "entryport"
ENTRY_POINT_GROUP = "entryport.plugins"

logger = logging.getLogger(__name__)


class PluginManager:
    """Manages plugin discovery, handler collection, and hook dispatch."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(EntryportHookSpec)
        self._loaded = False

    def discover_and_load(self, *, disabled: Iterable[str] = ()) -> list[str]:
        """Load entry-point plugins, skipping names listed in *disabled*.

        Returns the names of all registered plugins.
        """
        for name in disabled:
            self._pm.set_blocked(name)
        self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        self._normalize_plugin_instances()
        self._loaded = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        """Register a plugin instance directly."""
        resolved_name = name or plugin.__class__.__name__
        self._pm.register(plugin, name=resolved_name)
        logger.debug("Registered plugin: %s", resolved_name)

    def unregister(self, plugin: object) -> None:
        self._pm.unregister(plugin)

    @property
    def is_loaded(self) -> bool:
        """Whether discover_and_load() has been called."""
        return self._loaded

    @property
    def hook(self) -> pluggy.HookRelay:
        return self._pm.hook

    def get_plugins(self) -> list[object]:
        return list(self._pm.get_plugins())

    def list_plugin_names(self) -> list[str]:
        return [self._pm.get_name(p) or p.__class__.__name__ for p in self._pm.get_plugins()]

    def collect_field_handlers(self) -> list[FieldHandler]:
        """Gather handlers from every plugin's ``register_field_handlers`` hook.

        A plugin that raises or returns something other than handlers is
        skipped with a warning; it never prevents startup.
        """
        from entryport.handlers.base import FieldHandler

        handlers: list[FieldHandler] = []
        for plugin in self._pm.get_plugins():
            plugin_name = self._pm.get_name(plugin) or plugin.__class__.__name__
            hook = getattr(plugin, "register_field_handlers", None)
            if hook is None:
                continue
            try:
                contributed = hook()
            except Exception:
                logger.warning(
                    "Failed to collect field handlers from plugin %s",
                    plugin_name,
                    exc_info=True,
                )
                continue
            if contributed is None:
                continue
            if not isinstance(contributed, list | tuple):
                logger.warning("Plugin %s returned non-list field handlers", plugin_name)
                continue
            for handler in contributed:
                if isinstance(handler, FieldHandler) and handler.name:
                    handlers.append(handler)
                else:
                    logger.warning(
                        "Skipping invalid field handler %r from plugin %s",
                        handler,
                        plugin_name,
                    )
        return handlers

    def _normalize_plugin_instances(self) -> None:
        """Replace plugin classes registered by entry points with instances.

        Hook dispatch against a class leaves ``self`` unbound.
        """
        for plugin in list(self._pm.get_plugins()):
            if not inspect.isclass(plugin) or not self._has_hook_impls(plugin):
                continue

            plugin_name = self._pm.get_name(plugin) or plugin.__name__
            self._pm.unregister(plugin)
            try:
                instance = plugin()
            except Exception:
                logger.warning(
                    "Failed to instantiate entry-point plugin %s",
                    plugin_name,
                    exc_info=True,
                )
                continue
            self._pm.register(instance, name=plugin_name)
            logger.debug("Instantiated entry-point plugin: %s", plugin_name)

    @staticmethod
    def _has_hook_impls(cls: type) -> bool:
        """Whether *cls* has methods decorated with ``@hookimpl``.

        ``HookimplMarker("entryport")`` sets an ``entryport_impl`` attribute.
        """
        for name in dir(cls):
            if name.startswith("_"):
                continue
            method = getattr(cls, name, None)
            if callable(method) and getattr(method, "entryport_impl", None):
                return True
        return False
