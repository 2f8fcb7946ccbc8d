"""Tests for HandlerRegistry ordering, caching, and validation."""

from __future__ import annotations

from typing import Any

import pytest

from entryport.domain.fields import Field, FieldKind
from entryport.handlers import (
    AssetHandler,
    BlockGroupHandler,
    DefaultHandler,
    HandlerRegistry,
    LinkHandler,
    NoHandlerFoundError,
    OptionsHandler,
    RelationHandler,
    SeoHandler,
    build_registry,
)
from entryport.handlers.base import FieldHandler, ImportContext


class _CountingHandler(FieldHandler):
    name = "counting"
    priority = 10

    def __init__(self, accepts: str = "widget") -> None:
        self.accepts = accepts
        self.calls = 0

    def can_handle(self, field: Field) -> bool:
        self.calls += 1
        return field.type == self.accepts

    def export_value(self, field: Field, value: Any) -> Any:
        return value

    def import_value(self, field: Field, value: Any, context: ImportContext | None = None) -> Any:
        return value


class _Named(_CountingHandler):
    def __init__(self, name: str, priority: int) -> None:
        super().__init__()
        self.name = name  # type: ignore[misc]
        self.priority = priority  # type: ignore[misc]


class TestBuildRegistry:
    def test_lookup_order(self) -> None:
        registry = build_registry(seo_enabled=True)
        names = [h.name for h in registry.get_handlers()]
        assert names == ["blocks", "asset", "relation", "link", "options", "seo", "default"]

    def test_seo_disabled(self) -> None:
        registry = build_registry()
        assert registry.find_by_name("seo") is None
        seo_field = Field(handle="seo", type="seo_settings")
        assert isinstance(registry.get_handler(seo_field), DefaultHandler)

    def test_extra_handlers_sit_before_default(self) -> None:
        extra = _CountingHandler()
        registry = build_registry(extra_handlers=[extra])
        assert registry.get_handlers()[-2] is extra
        assert registry.get_handler(Field(handle="w", type="widget")) is extra

    @pytest.mark.parametrize(
        ("field_type", "handler_cls"),
        [
            ("matrix", BlockGroupHandler),
            ("assets", AssetHandler),
            ("entries", RelationHandler),
            ("link", LinkHandler),
            ("verbb.hyper.HyperField", LinkHandler),
            ("dropdown", OptionsHandler),
            ("nystudio107.seomatic.SeoSettings", SeoHandler),
            ("plain_text", DefaultHandler),
            ("number", DefaultHandler),
        ],
    )
    def test_resolution(self, field_type: str, handler_cls: type) -> None:
        registry = build_registry(seo_enabled=True)
        assert isinstance(registry.get_handler(Field(handle="f", type=field_type)), handler_cls)

    def test_blocks_handler_holds_the_registry(self) -> None:
        registry = build_registry()
        blocks = registry.find_by_name("blocks")
        assert isinstance(blocks, BlockGroupHandler)
        assert blocks._registry is registry


class TestHandlerRegistry:
    def test_rejects_non_handlers(self) -> None:
        with pytest.raises(TypeError):
            HandlerRegistry().register(object())  # type: ignore[arg-type]

    def test_rejects_unnamed_handlers(self) -> None:
        handler = _CountingHandler()
        handler.name = ""  # type: ignore[misc]
        with pytest.raises(ValueError):
            HandlerRegistry().register(handler)

    def test_no_handler_found(self) -> None:
        registry = HandlerRegistry().register(_CountingHandler())
        with pytest.raises(NoHandlerFoundError, match="No handler found for field type: text"):
            registry.get_handler(Field(handle="body", type="text"))

    def test_ties_keep_registration_order(self) -> None:
        first = _Named("first", 5)
        second = _Named("second", 5)
        higher = _Named("higher", 9)
        registry = HandlerRegistry().register_multiple([first, second, higher])
        assert [h.name for h in registry] == ["higher", "first", "second"]
        assert registry.get_handler(Field(handle="w", type="widget")) is higher

    def test_lookup_is_cached_per_type(self) -> None:
        handler = _CountingHandler()
        registry = HandlerRegistry().register(handler)
        field = Field(handle="a", type="widget")
        registry.get_handler(field)
        registry.get_handler(Field(handle="b", type="widget"))
        assert handler.calls == 1

    def test_cache_key_includes_kind(self) -> None:
        registry = build_registry()
        plain = Field(handle="a", type="custom")
        related = Field(handle="b", type="custom", kind=FieldKind.RELATION)
        assert isinstance(registry.get_handler(plain), DefaultHandler)
        assert isinstance(registry.get_handler(related), RelationHandler)

    def test_registration_invalidates_cache(self) -> None:
        registry = build_registry()
        field = Field(handle="w", type="widget")
        assert isinstance(registry.get_handler(field), DefaultHandler)
        late = _CountingHandler()
        registry.register(late)
        assert registry.get_handler(field) is late

    def test_len_and_find_by_name(self) -> None:
        registry = build_registry()
        assert len(registry) == 6
        assert isinstance(registry.find_by_name("relation"), RelationHandler)
        assert registry.find_by_name("nope") is None


class TestNativeSerialization:
    def test_only_low_priority_handlers_are_native(self) -> None:
        registry = build_registry(seo_enabled=True)
        native = {h.name for h in registry if h.use_native_serialization()}
        assert native == {"default"}
        assert _CountingHandler().use_native_serialization()
