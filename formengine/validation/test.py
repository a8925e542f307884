"""Unit tests for the validation engine."""

import pytest

from formengine.errors import (
    DefinitionConfigError,
    ElementNotFoundError,
    InvalidExpressionError,
)
from formengine.schema import FormDefinition, create_default

from .lib import (
    ValidationResult,
    check_definition,
    find_definition_issues,
    is_submit_valid,
    validate_definition,
    validate_field,
)
from .rules import equals_rule, expression_rule, less_than_rule, not_equals_rule


def _definition(*elements):
    return FormDefinition().with_elements(list(elements))


def _result(element, value=None, **kwargs):
    values = {} if value is None else {element.id: value}
    return validate_definition(_definition(element), values, **kwargs)[element.id]


class TestRequired:
    """Tests for the required check."""

    @pytest.mark.unit
    def test_empty_default_is_required_failure(self):
        element = create_default("text", required=True)
        result = _result(element)
        assert result == ValidationResult(False, "required", "required")

    @pytest.mark.unit
    def test_whitespace_counts_as_empty(self):
        assert _result(create_default("text", required=True), "   ").message == "required"

    @pytest.mark.unit
    def test_unchecked_checkbox(self):
        element = create_default("checkbox", required=True)
        assert _result(element).message == "required"
        assert _result(element, True).valid

    @pytest.mark.unit
    def test_optional_empty_text_still_checks_length(self):
        element = create_default("text", min_length=3)
        assert _result(element, "").message == "Input must be at least 3 characters"

    @pytest.mark.unit
    def test_optional_empty_text_still_checks_pattern(self):
        element = create_default("text", pattern=r"^\d+$")
        assert _result(element, "").rule == "pattern"

    @pytest.mark.unit
    def test_optional_empty_still_runs_custom_rule(self):
        element = create_default("text", custom_validation="value != ''")
        result = _result(element, "")
        assert result == ValidationResult(False, "Custom validation failed", "custom")

    @pytest.mark.unit
    def test_blank_number_reaches_rule_as_none(self):
        element = create_default("number", min=5, custom_validation="value == None or value > 18")
        assert _result(element, "").valid
        assert _result(element, "  ").valid
        assert _result(element, 12).rule == "custom"

    @pytest.mark.unit
    def test_unguarded_rule_on_blank_number_is_invalid(self):
        element = create_default("number", custom_validation="value > 18")
        assert _result(element, "").message == "Invalid custom validation rule"


class TestStructural:
    """Tests for value type checks."""

    @pytest.mark.unit
    def test_text_must_be_string(self):
        result = _result(create_default("text"), 42)
        assert result.rule == "type"

    @pytest.mark.unit
    def test_number_accepts_numeric_string(self):
        assert _result(create_default("number"), "12.5").valid

    @pytest.mark.unit
    def test_number_rejects_text(self):
        assert _result(create_default("number"), "twelve").rule == "type"

    @pytest.mark.unit
    def test_number_rejects_bool(self):
        assert _result(create_default("number"), True).rule == "type"

    @pytest.mark.unit
    def test_choice_must_be_an_option(self):
        element = create_default("select")
        assert _result(element, "Option 2").valid
        assert _result(element, "Option 9").rule == "type"

    @pytest.mark.unit
    @pytest.mark.parametrize("value", [0, 1, "", [], "true"])
    def test_checkbox_rejects_non_bool(self, value):
        result = _result(create_default("checkbox"), value)
        assert result == ValidationResult(False, "Value must be true or false", "type")

    @pytest.mark.unit
    def test_required_checkbox_type_checked_before_required(self):
        element = create_default("checkbox", required=True)
        assert _result(element, 1).rule == "type"
        assert _result(element, False).rule == "required"

    @pytest.mark.unit
    def test_optional_checkbox_unchecked_is_valid(self):
        assert _result(create_default("checkbox"), False).valid

    @pytest.mark.unit
    def test_type_checked_before_required(self):
        element = create_default("text", required=True)
        assert _result(element, 0).rule == "type"

    @pytest.mark.unit
    def test_date_must_be_iso(self):
        element = create_default("date")
        assert _result(element, "2026-10-18").valid
        assert _result(element, "2026-13-01").rule == "type"


class TestConstraints:
    """Tests for length, range, step and pattern checks."""

    @pytest.mark.unit
    def test_max_length(self):
        element = create_default("text", max_length=20)
        result = _result(element, "x" * 21)
        assert not result.valid
        assert result.message == "Input must be no more than 20 characters"
        assert _result(element, "x" * 20).valid

    @pytest.mark.unit
    def test_min_length(self):
        element = create_default("textarea", min_length=5)
        assert _result(element, "abc").message == "Input must be at least 5 characters"

    @pytest.mark.unit
    def test_range(self):
        element = create_default("number", min=0, max=10)
        assert _result(element, -1).message == "Value must be at least 0"
        assert _result(element, "11").message == "Value must be no more than 10"
        assert _result(element, 10).valid

    @pytest.mark.unit
    def test_step(self):
        element = create_default("number", min=0, step=0.5)
        assert _result(element, 1.5).valid
        assert _result(element, 1.25).rule == "step"

    @pytest.mark.unit
    def test_pattern(self):
        element = create_default("text", pattern=r"^\d+$")
        assert _result(element, "123").valid
        assert _result(element, "12a").message == "Input format is invalid"

    @pytest.mark.unit
    def test_slash_pattern_with_flags(self):
        element = create_default("text", pattern="/^abc$/i")
        assert _result(element, "ABC").valid

    @pytest.mark.unit
    def test_invalid_pattern_fails_without_raising(self):
        element = create_default("text", pattern="(")
        assert _result(element, "anything").rule == "pattern"

    @pytest.mark.unit
    def test_length_checked_before_pattern(self):
        element = create_default("text", max_length=2, pattern=r"^\d+$")
        assert _result(element, "abc").rule == "maxLength"


class TestCustomRule:
    """Tests for custom rule expressions on a field."""

    @pytest.mark.unit
    def test_false_rule(self):
        element = create_default("number", custom_validation="value > 18")
        result = _result(element, 15)
        assert result.message == "Custom validation failed"
        assert result.rule == "custom"
        assert _result(element, "21").valid

    @pytest.mark.unit
    def test_malformed_rule(self):
        element = create_default("text", custom_validation="value >")
        result = _result(element, "x")
        assert not result.valid
        assert result.message == "Invalid custom validation rule"

    @pytest.mark.unit
    def test_runtime_error_is_reported(self):
        element = create_default("text", custom_validation="value > 3")
        assert _result(element, "abc").message == "Invalid custom validation rule"

    @pytest.mark.unit
    def test_sibling_by_label(self):
        password = create_default("text", content="Password")
        confirm = create_default(
            "text", content="Confirm", custom_validation="value == password"
        )
        definition = _definition(password, confirm)
        values = {password.id: "abc", confirm.id: "abd"}
        assert not validate_definition(definition, values)[confirm.id].valid
        values[confirm.id] = "abc"
        assert validate_definition(definition, values)[confirm.id].valid

    @pytest.mark.unit
    def test_pluggable_evaluator(self):
        element = create_default("text", custom_validation="anything at all")
        seen = []

        def evaluator(source, value, fields):
            seen.append((source, value))
            return True

        assert _result(element, "v", evaluator=evaluator).valid
        assert seen == [("anything at all", "v")]

    @pytest.mark.unit
    def test_own_names_not_exposed_as_siblings(self):
        seen = {}

        def evaluator(source, value, fields):
            seen[source] = set(fields)
            return True

        name = create_default("text", id="name", content="Full name", custom_validation="n")
        age = create_default("number", id="years", content="Age", custom_validation="a")
        validate_definition(_definition(name, age), {age.id: 30}, evaluator=evaluator)
        assert seen == {"n": {"years", "age"}, "a": {"name", "full_name"}}

    @pytest.mark.unit
    def test_own_label_is_unknown_name(self):
        age = create_default("number", id="years", content="Age", custom_validation="age > 18")
        assert _result(age, 30).message == "Invalid custom validation rule"

    @pytest.mark.unit
    def test_validate_field_directly(self):
        element = create_default("text", custom_validation="value == other")
        assert validate_field(element, "a", {"other": "a"}).valid


class TestValidateDefinition:
    """Tests for definition-wide validation."""

    @pytest.mark.unit
    def test_only_visible_inputs_mapped(self):
        heading = create_default("heading")
        hidden = create_default("text", required=True, hidden=True)
        field = create_default("text")
        results = validate_definition(_definition(heading, hidden, field))
        assert list(results) == [field.id]

    @pytest.mark.unit
    def test_results_in_list_order(self):
        elements = [create_default("text"), create_default("number"), create_default("date")]
        results = validate_definition(_definition(*elements))
        assert list(results) == [element.id for element in elements]

    @pytest.mark.unit
    def test_single_target(self):
        first, second = create_default("text", required=True), create_default("text")
        results = validate_definition(_definition(first, second), target=first.id)
        assert list(results) == [first.id]

    @pytest.mark.unit
    def test_unknown_target_raises(self):
        with pytest.raises(ElementNotFoundError):
            validate_definition(_definition(create_default("text")), target="missing")

    @pytest.mark.unit
    def test_deterministic(self):
        definition = _definition(
            create_default("text", required=True),
            create_default("number", min=3, custom_validation="value < 10"),
        )
        values = {definition.elements[1].id: 12}
        assert validate_definition(definition, values) == validate_definition(definition, values)

    @pytest.mark.unit
    def test_is_submit_valid(self):
        element = create_default("text", required=True)
        definition = _definition(element)
        assert not is_submit_valid(validate_definition(definition))
        assert is_submit_valid(validate_definition(definition, {element.id: "x"}))


class TestCrossFieldRules:
    """Tests for rules spanning several fields."""

    @pytest.mark.unit
    def test_confirm_password(self):
        password = create_default("text", required=True)
        confirm = create_default("text", required=True)
        definition = _definition(password, confirm)
        rule = equals_rule(confirm.id, password.id)

        results = validate_definition(
            definition, {password.id: "a", confirm.id: "b"}, rules=[rule]
        )
        assert results[confirm.id] == ValidationResult(False, "Values do not match", "equals")
        assert results[password.id].valid

        results = validate_definition(
            definition, {password.id: "a", confirm.id: "a"}, rules=[rule]
        )
        assert is_submit_valid(results)

    @pytest.mark.unit
    def test_skipped_when_dependency_fails(self):
        password = create_default("text", required=True)
        confirm = create_default("text")
        definition = _definition(password, confirm)
        results = validate_definition(
            definition, {confirm.id: "b"}, rules=[equals_rule(confirm.id, password.id)]
        )
        assert results[password.id].message == "required"
        assert results[confirm.id].valid

    @pytest.mark.unit
    def test_single_target_still_reads_dependencies(self):
        start, end = create_default("number"), create_default("number")
        rule = less_than_rule(start.id, end.id)
        results = validate_definition(
            _definition(start, end), {start.id: 5, end.id: 3}, rules=[rule], target=start.id
        )
        assert list(results) == [start.id]
        assert results[start.id].rule == "lessThan"

    @pytest.mark.unit
    def test_not_equals(self):
        old, new = create_default("text"), create_default("text")
        results = validate_definition(
            _definition(old, new),
            {old.id: "same", new.id: "same"},
            rules=[not_equals_rule(new.id, old.id)],
        )
        assert results[new.id].rule == "notEquals"

    @pytest.mark.unit
    def test_expression_rule(self):
        start, end = create_default("number"), create_default("number")
        rule = expression_rule(end.id, "value > start", {"start": start.id})
        definition = _definition(start, end)
        assert not validate_definition(definition, {start.id: 5, end.id: "4"}, rules=[rule])[
            end.id
        ].valid
        assert validate_definition(definition, {start.id: 5, end.id: "6"}, rules=[rule])[
            end.id
        ].valid

    @pytest.mark.unit
    def test_expression_rule_must_compile(self):
        with pytest.raises(InvalidExpressionError):
            expression_rule("a", "value >", {})


class TestCheckDefinition:
    """Tests for save-time configuration checks."""

    @pytest.mark.unit
    def test_consistent_definition_passes(self):
        check_definition(
            _definition(
                create_default("text", min_length=1, max_length=5, pattern="^a"),
                create_default("number", min=0, max=1, step=0.1, custom_validation="value"),
            )
        )

    @pytest.mark.unit
    def test_length_bounds(self):
        element = create_default("text", min_length=5, max_length=5)
        with pytest.raises(DefinitionConfigError) as exc_info:
            check_definition(_definition(element))
        assert exc_info.value.element_id == element.id
        assert exc_info.value.field == "maxLength"

    @pytest.mark.unit
    def test_numeric_bounds(self):
        with pytest.raises(DefinitionConfigError):
            check_definition(_definition(create_default("number", min=10, max=1)))

    @pytest.mark.unit
    def test_step_must_be_positive(self):
        with pytest.raises(DefinitionConfigError):
            check_definition(_definition(create_default("number", step=0)))

    @pytest.mark.unit
    def test_bad_pattern(self):
        with pytest.raises(DefinitionConfigError):
            check_definition(_definition(create_default("text", pattern="[")))

    @pytest.mark.unit
    def test_bad_custom_rule(self):
        with pytest.raises(InvalidExpressionError):
            check_definition(_definition(create_default("text", custom_validation="os.system()")))

    @pytest.mark.unit
    def test_all_issues_collected(self):
        definition = _definition(
            create_default("text", min_length=3, max_length=1, pattern="("),
            create_default("number", step=-1),
        )
        fields = [issue.field for issue in find_definition_issues(definition)]
        assert fields == ["maxLength", "pattern", "step"]
