"""Unit tests for the Schema module."""

import pytest
from pydantic import ValidationError

from formengine.errors import UnknownKindError
from formengine.schema import (
    DEFAULT_STYLE,
    KIND_REGISTRY,
    ElementKind,
    FormDefinition,
    FormElement,
    KindCategory,
    ValueType,
    WidthPreset,
    create_default,
    declared_width,
    export_json_schema,
    get_capabilities,
    get_kind_meta,
    get_kinds_by_category,
    resolve_kind,
    resolve_style,
)


class TestKindRegistry:
    """Tests for KIND_REGISTRY completeness."""

    @pytest.mark.unit
    def test_all_kinds_registered(self):
        """Every ElementKind has metadata in registry."""
        for kind in ElementKind:
            assert kind in KIND_REGISTRY, f"Missing metadata for {kind}"

    @pytest.mark.unit
    def test_all_entries_have_descriptions(self):
        for kind, meta in KIND_REGISTRY.items():
            assert meta.description, f"{kind} missing description"
            assert meta.kind is kind

    @pytest.mark.unit
    def test_inputs_category(self):
        inputs = get_kinds_by_category(KindCategory.INPUT)
        assert ElementKind.TEXT in inputs
        assert ElementKind.SELECT in inputs
        assert ElementKind.HEADING not in inputs

    @pytest.mark.unit
    def test_choice_kinds_have_default_options(self):
        for kind in (ElementKind.RADIO, ElementKind.SELECT):
            assert get_kind_meta(kind).default_options
            assert get_capabilities(kind).value_type is ValueType.CHOICE

    @pytest.mark.unit
    def test_layout_kinds_accept_no_input(self):
        for kind in get_kinds_by_category(KindCategory.LAYOUT):
            assert not get_capabilities(kind).accepts_input

    @pytest.mark.unit
    def test_meta_to_dict(self):
        data = get_kind_meta(ElementKind.NUMBER).to_dict()
        assert data["type"] == "number"
        assert data["category"] == "input"
        assert data["numericConstraints"] is True
        assert data["acceptsInput"] is True


class TestResolveKind:
    """Tests for kind resolution."""

    @pytest.mark.unit
    def test_wire_name(self):
        assert resolve_kind("alert-dialog") is ElementKind.ALERT_DIALOG

    @pytest.mark.unit
    def test_case_insensitive(self):
        assert resolve_kind(" TextArea ") is ElementKind.TEXTAREA

    @pytest.mark.unit
    def test_alias(self):
        assert resolve_kind("dropdown") is ElementKind.SELECT
        assert resolve_kind("radio-button") is ElementKind.RADIO

    @pytest.mark.unit
    def test_member_passes_through(self):
        assert resolve_kind(ElementKind.CARD) is ElementKind.CARD

    @pytest.mark.unit
    def test_unknown_kind_raises(self):
        with pytest.raises(UnknownKindError) as exc_info:
            resolve_kind("hologram")
        assert exc_info.value.kind == "hologram"

    @pytest.mark.unit
    def test_non_string_raises(self):
        with pytest.raises(UnknownKindError):
            resolve_kind(42)


class TestCreateDefault:
    """Tests for create_default."""

    @pytest.mark.unit
    def test_every_kind_can_be_created(self):
        for kind in ElementKind:
            element = create_default(kind)
            assert element.kind is kind
            assert element.id

    @pytest.mark.unit
    def test_default_content_from_table(self):
        assert create_default("heading").content == "Heading"
        assert create_default("paragraph").content == "This is a paragraph of text."

    @pytest.mark.unit
    def test_style_fully_populated(self):
        element = create_default(ElementKind.TEXT)
        style = element.style.model_dump(by_alias=True)
        assert set(style) == set(DEFAULT_STYLE)
        assert all(value is not None for value in style.values())

    @pytest.mark.unit
    def test_kind_style_overrides(self):
        element = create_default(ElementKind.HEADING)
        assert element.style.font_size == "1.5rem"
        assert element.style.font_weight == "bold"

    @pytest.mark.unit
    def test_fresh_ids(self):
        assert create_default("text").id != create_default("text").id

    @pytest.mark.unit
    def test_default_value_matches_value_type(self):
        assert create_default("checkbox").default_value is False
        assert create_default("text").default_value == ""

    @pytest.mark.unit
    def test_textarea_rows(self):
        assert create_default("textarea").rows == 3

    @pytest.mark.unit
    def test_overrides_applied(self):
        element = create_default("text", required=True, content="Email")
        assert element.required is True
        assert element.content == "Email"

    @pytest.mark.unit
    def test_unknown_kind_never_degrades_to_placeholder(self):
        with pytest.raises(UnknownKindError):
            create_default("placeholder")


class TestResolveStyle:
    """Tests for style fallback resolution."""

    @pytest.mark.unit
    def test_cleared_attribute_falls_back(self):
        element = FormElement(kind="text")
        style = resolve_style(element)
        assert style == DEFAULT_STYLE

    @pytest.mark.unit
    def test_cleared_attribute_uses_kind_default(self):
        element = FormElement(kind="heading")
        assert resolve_style(element)["fontSize"] == "1.5rem"

    @pytest.mark.unit
    def test_set_attribute_wins(self):
        element = FormElement(kind="text", style={"fontSize": "2rem"})
        assert resolve_style(element)["fontSize"] == "2rem"


class TestDeclaredWidth:
    """Tests for width setting resolution."""

    @pytest.mark.unit
    def test_default_is_style_width(self):
        assert declared_width(create_default("text")) == "100%"

    @pytest.mark.unit
    def test_preset(self):
        element = create_default("text", width=WidthPreset.SMALL)
        assert declared_width(element) == "50%"

    @pytest.mark.unit
    def test_custom_with_unit(self):
        element = create_default(
            "text", width="custom", custom_width="240", custom_width_unit="px"
        )
        assert declared_width(element) == "240px"

    @pytest.mark.unit
    def test_custom_without_value_uses_style(self):
        element = create_default("text", width="custom", style={"width": "60%"})
        assert declared_width(element) == "60%"


class TestFormDefinition:
    """Tests for the FormDefinition aggregate."""

    @pytest.mark.unit
    def test_duplicate_ids_rejected(self):
        element = create_default("text")
        with pytest.raises(ValidationError):
            FormDefinition(elements=(element, element))

    @pytest.mark.unit
    def test_json_round_trip_is_lossless(self):
        definition = FormDefinition.create(name="Signup", description="New users")
        definition = definition.with_elements(
            [
                create_default("text", required=True, max_length=20),
                create_default("number", min=0, max=10, step=0.5),
                create_default("checkbox", default_value=True),
                create_default("select", custom_validation="value != 'Option 2'"),
            ]
        )
        restored = FormDefinition.from_json(definition.to_json())
        assert restored == definition

    @pytest.mark.unit
    def test_json_uses_camel_case_wire_names(self):
        definition = FormDefinition().with_elements([create_default("text")])
        data = definition.to_dict()
        element = data["elements"][0]
        assert element["type"] == "text"
        assert "helpText" in element
        assert "hideMobile" in element["position"]
        assert "createdAt" in data

    @pytest.mark.unit
    def test_from_dict_unknown_kind_raises(self):
        with pytest.raises(UnknownKindError):
            FormDefinition.from_dict({"elements": [{"id": "a", "type": "widget-x"}]})

    @pytest.mark.unit
    def test_lookup_helpers(self):
        first, second = create_default("text"), create_default("number")
        definition = FormDefinition().with_elements([first, second])
        assert definition.ids == [first.id, second.id]
        assert definition.index_of(second.id) == 1
        assert definition.get(first.id) == first
        assert definition.get("missing") is None

    @pytest.mark.unit
    def test_models_are_frozen(self):
        element = create_default("text")
        with pytest.raises(ValidationError):
            element.content = "changed"

    @pytest.mark.unit
    def test_json_schema_export(self):
        schema = export_json_schema()
        assert schema["title"] == "FormDefinition"
        assert "elements" in schema["properties"]
