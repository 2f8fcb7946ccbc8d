"""Tests for field schema types and kind inference."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from entryport.domain.fields import (
    Field,
    FieldKind,
    OptionDef,
    infer_kind,
    type_matches,
)


class TestInferKind:
    @pytest.mark.parametrize(
        ("field_type", "kind"),
        [
            ("plain_text", FieldKind.SCALAR),
            ("dropdown", FieldKind.OPTIONS),
            ("checkboxes", FieldKind.OPTIONS),
            ("entries", FieldKind.RELATION),
            ("assets", FieldKind.ASSET),
            ("link", FieldKind.LINK),
            ("matrix", FieldKind.BLOCKS),
            ("seo_settings", FieldKind.SEO),
        ],
    )
    def test_builtin_types(self, field_type: str, kind: FieldKind) -> None:
        assert infer_kind(field_type) is kind

    @pytest.mark.parametrize(
        ("field_type", "kind"),
        [
            ("nystudio107.seomatic.SeoSettings", FieldKind.SEO),
            ("verbb.hyper.HyperField", FieldKind.LINK),
            ("typedlinkfield.LinkField", FieldKind.LINK),
            ("benf.neo.Field", FieldKind.BLOCKS),
            ("SuperMatrix", FieldKind.BLOCKS),
        ],
    )
    def test_third_party_signatures(self, field_type: str, kind: FieldKind) -> None:
        assert infer_kind(field_type) is kind

    def test_unknown_type_is_scalar(self) -> None:
        assert infer_kind("color_swatches") is FieldKind.SCALAR

    def test_type_matches_is_case_insensitive(self) -> None:
        assert type_matches("Verbb.Hyper.Field", "hyper")
        assert not type_matches("plain_text", "hyper", "linkfield")


class TestField:
    def test_kind_inferred_from_type(self) -> None:
        field = Field(handle="related", type="entries")
        assert field.kind is FieldKind.RELATION
        assert field.type_key == ("entries", FieldKind.RELATION)

    def test_explicit_kind_wins(self) -> None:
        field = Field(handle="x", type="custom_picker", kind=FieldKind.RELATION)
        assert field.kind is FieldKind.RELATION

    def test_empty_handle_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Field(handle="", type="plain_text")

    def test_frozen(self) -> None:
        field = Field(handle="body")
        with pytest.raises(ValidationError):
            field.handle = "other"  # type: ignore[misc]

    def test_multi_option(self) -> None:
        assert Field(handle="t", type="checkboxes").is_multi_option
        assert Field(handle="t", type="dropdown", multiple=True).is_multi_option
        assert not Field(handle="t", type="dropdown").is_multi_option
        assert not Field(handle="t", type="plain_text", multiple=True).is_multi_option

    def test_option_label(self) -> None:
        field = Field.model_validate(
            {"handle": "c", "type": "dropdown", "options": ["plain", {"value": "n", "label": "News"}]}
        )
        assert field.option_label("n") == "News"
        assert field.option_label("plain") == "plain"
        assert field.option_label("missing") is None

    def test_block_types_nest_fields(self) -> None:
        field = Field.model_validate(
            {
                "handle": "content",
                "type": "matrix",
                "block_types": [{"handle": "text", "fields": [{"handle": "body"}]}],
            }
        )
        block_type = field.get_block_type("text")
        assert block_type is not None
        assert block_type.get_field("body") is not None
        assert field.get_block_type("missing") is None


class TestOptionDef:
    def test_label_defaults_to_value(self) -> None:
        assert OptionDef(value="news").label == "news"

    def test_from_string(self) -> None:
        option = OptionDef.model_validate("events")
        assert option.value == "events"
        assert option.label == "events"
