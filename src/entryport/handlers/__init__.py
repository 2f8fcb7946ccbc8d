"""Field handlers and the registry that dispatches to them.

:func:`build_registry` wires the startup order: specialized handlers, then
the SEO handler when its integration is enabled, then plugin handlers, and
the catch-all :class:`DefaultHandler` last.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from entryport.handlers.asset import AssetHandler
from entryport.handlers.base import OMIT, FieldHandler, ImportContext
from entryport.handlers.blocks import BlockGroupHandler
from entryport.handlers.default import DefaultHandler
from entryport.handlers.link import LinkHandler
from entryport.handlers.options import OptionsHandler
from entryport.handlers.registry import HandlerRegistry, NoHandlerFoundError
from entryport.handlers.relation import RelationHandler
from entryport.handlers.seo import SeoHandler

logger = logging.getLogger(__name__)

__all__ = [
    "OMIT",
    "AssetHandler",
    "BlockGroupHandler",
    "DefaultHandler",
    "FieldHandler",
    "HandlerRegistry",
    "ImportContext",
    "LinkHandler",
    "NoHandlerFoundError",
    "OptionsHandler",
    "RelationHandler",
    "SeoHandler",
    "build_registry",
]


def build_registry(
    *,
    seo_enabled: bool = False,
    extra_handlers: Iterable[FieldHandler] = (),
) -> HandlerRegistry:
    """Create a registry holding the built-in handlers in startup order."""
    registry = HandlerRegistry()
    registry.register_multiple(
        [
            BlockGroupHandler(registry),
            AssetHandler(),
            RelationHandler(),
            LinkHandler(),
            OptionsHandler(),
        ]
    )
    if seo_enabled:
        registry.register(SeoHandler())
        logger.debug("SEO integration enabled; registered SEO handler")
    for handler in extra_handlers:
        registry.register(handler)
    registry.register(DefaultHandler())
    return registry
