"""Tests for value normalization, native serialization, and validation."""

from __future__ import annotations

from datetime import datetime

import pytest

from entryport.domain.fields import Field, ValidationScenario
from entryport.domain.values import Asset, Block, LinkValue, MultiOptionValue, OptionValue, SeoBundle
from entryport.infrastructure.codec import (
    FieldValueError,
    normalize_value,
    serialize_value,
    validate_value,
)
from entryport.infrastructure.memory import MemoryContentStore

CONTENT = Field.model_validate(
    {
        "handle": "content",
        "type": "matrix",
        "block_types": [
            {
                "handle": "text",
                "fields": [
                    {"handle": "body", "type": "rich_text", "required": True},
                    {"handle": "count", "type": "number"},
                ],
            }
        ],
    }
)


@pytest.fixture
def resolver() -> MemoryContentStore:
    store = MemoryContentStore(base_url="https://site.test/")
    store.add_asset(Asset(id=30, url="https://cdn/h.jpg"))
    store.add_record(5, title="Five", uri="news/five")
    return store


class TestNormalize:
    def test_scalars(self, resolver: MemoryContentStore) -> None:
        assert normalize_value(Field(handle="n", type="number"), "12", resolver) == 12
        assert normalize_value(Field(handle="n", type="number"), "", resolver) is None
        assert normalize_value(Field(handle="f", type="lightswitch"), "on", resolver) is True
        assert normalize_value(Field(handle="d", type="date"), "2024-01-02", resolver) == datetime(
            2024, 1, 2
        )

    def test_options(self, resolver: MemoryContentStore) -> None:
        single = Field.model_validate(
            {"handle": "c", "type": "dropdown", "options": [{"value": "n", "label": "News"}]}
        )
        assert normalize_value(single, "n", resolver) == OptionValue("n", "News")
        assert normalize_value(single, ["n"], resolver) == OptionValue("n", "News")
        multi = Field(handle="t", type="checkboxes")
        value = normalize_value(multi, ["a", "b"], resolver)
        assert isinstance(value, MultiOptionValue)
        assert value.values == ["a", "b"]
        assert len(normalize_value(multi, None, resolver)) == 0

    def test_relations_and_assets(self, resolver: MemoryContentStore) -> None:
        related = normalize_value(Field(handle="r", type="entries"), [5, "9"], resolver)
        assert [(ref.id, ref.title) for ref in related] == [(5, "Five"), (9, None)]
        assets = normalize_value(Field(handle="a", type="assets"), [{"id": 30}], resolver)
        assert assets[0].url == "https://cdn/h.jpg"

    def test_invalid_relation_id(self, resolver: MemoryContentStore) -> None:
        with pytest.raises(FieldValueError):
            normalize_value(Field(handle="r", type="entries"), ["abc"], resolver)

    def test_element_link_resolves_url(self, resolver: MemoryContentStore) -> None:
        link = normalize_value(
            Field(handle="l", type="link"), {"type": "entry", "value": 5, "label": "Go"}, resolver
        )
        assert link == LinkValue(
            type="entry", url="https://site.test/news/five", label="Go", element_id=5
        )

    def test_url_link(self, resolver: MemoryContentStore) -> None:
        link = normalize_value(Field(handle="l", type="link"), {"value": "https://a"}, resolver)
        assert link.type == "url"
        assert link.url == "https://a"

    def test_invalid_link(self, resolver: MemoryContentStore) -> None:
        with pytest.raises(FieldValueError):
            normalize_value(Field(handle="l", type="link"), "https://a", resolver)
        with pytest.raises(FieldValueError):
            normalize_value(Field(handle="l", type="link"), {"type": "entry", "value": "x"}, resolver)

    def test_seo(self, resolver: MemoryContentStore) -> None:
        field = Field(handle="s", type="seo_settings")
        bundle = normalize_value(field, '{"metaGlobalVars": {"seoTitle": "T"}}', resolver)
        assert bundle == SeoBundle(meta_global_vars={"seoTitle": "T"})
        assert normalize_value(field, {"seoTitle": "T"}, resolver).meta_global_vars == {"seoTitle": "T"}
        with pytest.raises(FieldValueError):
            normalize_value(field, "{broken", resolver)

    def test_blocks_accept_slot_maps_and_lists(self, resolver: MemoryContentStore) -> None:
        slots = {"slot1": {"type": "text", "title": "T", "fields": {"body": "x", "count": "3"}}}
        blocks = normalize_value(CONTENT, slots, resolver)
        assert len(blocks) == 1
        assert blocks[0].title == "T"
        assert blocks[0].values == {"body": "x", "count": 3}

        inline = normalize_value(CONTENT, [{"type": "text", "body": "y", "enabled": False}], resolver)
        assert inline[0].values == {"body": "y"}
        assert inline[0].enabled is False

    def test_unknown_block_type(self, resolver: MemoryContentStore) -> None:
        with pytest.raises(FieldValueError, match="Unknown block type"):
            normalize_value(CONTENT, [{"type": "gallery"}], resolver)


class TestSerialize:
    def test_families(self) -> None:
        assert serialize_value(Field(handle="d", type="date"), datetime(2024, 1, 2)) == (
            "2024-01-02T00:00:00"
        )
        assert serialize_value(Field(handle="c", type="dropdown"), OptionValue("n")) == "n"
        assert serialize_value(Field(handle="a", type="assets"), [Asset(id=3)]) == [3]
        assert serialize_value(Field(handle="l", type="link"), LinkValue(url="https://a")) == {
            "type": "url",
            "value": "https://a",
        }
        assert serialize_value(Field(handle="s", type="seo_settings"), None) == {
            "metaGlobalVars": {},
            "metaSiteVars": {},
        }

    def test_blocks(self) -> None:
        block_type = CONTENT.block_types[0]
        block = Block(type="text", fields=block_type.fields, values={"body": "x"})
        assert serialize_value(CONTENT, [block]) == [
            {"type": "text", "title": None, "enabled": True, "collapsed": False, "fields": {"body": "x"}}
        ]


class TestValidate:
    def test_required(self) -> None:
        field = Field(handle="summary", name="Summary", required=True)
        errors = validate_value(field, "", scenario=ValidationScenario.DEFAULT)
        assert errors == {"summary": ["Summary cannot be blank."]}
        assert validate_value(field, "", scenario=ValidationScenario.ESSENTIALS) == {}

    def test_option_membership(self) -> None:
        field = Field.model_validate({"handle": "c", "type": "dropdown", "options": ["a"]})
        assert validate_value(field, OptionValue("b"), scenario=ValidationScenario.DEFAULT) == {
            "c": ["'b' is not a valid option."]
        }

    def test_number_and_date(self) -> None:
        number = Field(handle="price", name="Price", type="number")
        assert validate_value(number, "abc", scenario=ValidationScenario.ESSENTIALS) == {
            "price": ["Price must be a number."]
        }
        date_field = Field(handle="d", type="date")
        assert validate_value(date_field, "soon", scenario=ValidationScenario.DEFAULT)

    def test_nested_block_paths(self) -> None:
        block_type = CONTENT.block_types[0]
        blocks = [
            Block(type="text", fields=block_type.fields, values={"body": "ok"}),
            Block(type="text", fields=block_type.fields, values={"body": "", "count": "x"}),
        ]
        errors = validate_value(CONTENT, blocks, scenario=ValidationScenario.DEFAULT)
        assert set(errors) == {"content[1].body", "content[1].count"}
