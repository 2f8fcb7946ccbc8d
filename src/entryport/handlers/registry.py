"""HandlerRegistry — priority-ordered handler lookup with a per-type cache.

INVARIANT: handlers are tried from highest to lowest priority, ties keep
registration order, and the first ``can_handle`` match wins. The sorted view
and the type cache are rebuilt after every registration.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING

from entryport.handlers.base import FieldHandler

if TYPE_CHECKING:
    from entryport.domain.fields import Field, FieldKind

logger = logging.getLogger(__name__)


class NoHandlerFoundError(LookupError):
    """No registered handler accepts a field."""

    def __init__(self, field: Field) -> None:
        self.field = field
        super().__init__(f"No handler found for field type: {field.type} (handle: {field.handle})")


class HandlerRegistry:
    """Holds the process-wide handler set.

    Registration normally happens once at startup; lookups happen while
    serving requests. A lock guards the handler list, the sorted view, and
    the cache so late registration stays safe.
    """

    def __init__(self) -> None:
        self._handlers: list[FieldHandler] = []
        self._sorted: tuple[FieldHandler, ...] | None = None
        self._cache: dict[tuple[str, FieldKind], FieldHandler] = {}
        self._lock = threading.RLock()

    def register(self, handler: FieldHandler) -> HandlerRegistry:
        """Append *handler* and invalidate the sorted view and cache."""
        if not isinstance(handler, FieldHandler):
            msg = f"Handler must extend FieldHandler, got {type(handler).__name__}"
            raise TypeError(msg)
        if not handler.name:
            msg = f"Handler {type(handler).__name__} must declare a name"
            raise ValueError(msg)
        with self._lock:
            self._handlers.append(handler)
            self._sorted = None
            self._cache.clear()
        logger.debug("Registered field handler %s (priority %d)", handler.name, handler.priority)
        return self

    def register_multiple(self, handlers: Iterable[FieldHandler]) -> HandlerRegistry:
        """Register each handler in order; stops at the first invalid one."""
        for handler in handlers:
            self.register(handler)
        return self

    def get_handler(self, field: Field) -> FieldHandler:
        """Return the highest-priority handler accepting *field*.

        Raises:
            NoHandlerFoundError: No handler accepts the field. Unreachable while
                a catch-all handler is registered.
        """
        key = field.type_key
        with self._lock:
            cached = self._cache.get(key)
            if cached is not None:
                return cached
            for handler in self._sorted_handlers():
                if handler.can_handle(field):
                    self._cache[key] = handler
                    return handler
        raise NoHandlerFoundError(field)

    def get_handlers(self) -> tuple[FieldHandler, ...]:
        """Handlers in lookup order (descending priority)."""
        with self._lock:
            return self._sorted_handlers()

    def find_by_name(self, name: str) -> FieldHandler | None:
        """Locate a handler by its stable ``name``."""
        for handler in self.get_handlers():
            if handler.name == name:
                return handler
        return None

    def __len__(self) -> int:
        return len(self._handlers)

    def __iter__(self) -> Iterator[FieldHandler]:
        return iter(self.get_handlers())

    def _sorted_handlers(self) -> tuple[FieldHandler, ...]:
        if self._sorted is None:
            # sorted() is stable: equal priorities keep registration order.
            self._sorted = tuple(sorted(self._handlers, key=lambda h: -h.priority))
        return self._sorted
