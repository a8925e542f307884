"""Unit tests for the restricted expression language."""

import pytest

from formengine.errors import INVALID_EXPRESSION_MESSAGE, InvalidExpressionError

from .lib import (
    MAX_EXPRESSION_LENGTH,
    BoolOp,
    Compare,
    FieldRef,
    Literal,
    check,
    compile_expression,
    evaluate,
    field_context,
    is_valid_expression,
    to_identifier,
)


class TestCompileExpression:
    """Tests for parsing rule text into the node tree."""

    @pytest.mark.unit
    def test_comparison_tree(self):
        expression = compile_expression("value > 18")
        assert expression.root == Compare(FieldRef("value"), (">",), (Literal(18),))
        assert expression.names == frozenset({"value"})

    @pytest.mark.unit
    def test_bool_op_tree(self):
        expression = compile_expression("value > 1 and value < 5")
        assert isinstance(expression.root, BoolOp)
        assert expression.root.op == "and"
        assert len(expression.root.operands) == 2

    @pytest.mark.unit
    def test_compiled_rules_are_cached(self):
        assert compile_expression("value != 3") is compile_expression("value != 3")

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "source",
        [
            "value >",
            "__import__('os').system('ls')",
            "value.upper()",
            "value.real",
            "value[0]",
            "lambda: 1",
            "[x for x in value]",
            "2 ** 10",
            "x = 1",
            "f'{value}'",
            "b'raw' == value",
            "",
            "   ",
        ],
    )
    def test_rejected_constructs(self, source):
        """Anything outside the grammar fails at compile time."""
        with pytest.raises(InvalidExpressionError):
            compile_expression(source)

    @pytest.mark.unit
    def test_length_limit(self):
        source = "value == " + "1" * MAX_EXPRESSION_LENGTH
        with pytest.raises(InvalidExpressionError):
            compile_expression(source)

    @pytest.mark.unit
    def test_non_string_rejected(self):
        with pytest.raises(InvalidExpressionError):
            compile_expression(None)

    @pytest.mark.unit
    def test_error_message_is_generic(self):
        with pytest.raises(InvalidExpressionError) as exc_info:
            compile_expression("value >")
        assert str(exc_info.value) == INVALID_EXPRESSION_MESSAGE

    @pytest.mark.unit
    def test_is_valid_expression(self):
        assert is_valid_expression("value in ['a', 'b']")
        assert not is_valid_expression("open('x')")


class TestEvaluate:
    """Tests for evaluation semantics."""

    @pytest.mark.unit
    def test_threshold(self):
        assert check("value > 18", 21) is True
        assert check("value > 18", 15) is False

    @pytest.mark.unit
    def test_chained_comparison(self):
        assert check("1 < value < 10", 5)
        assert not check("1 < value < 10", 10)

    @pytest.mark.unit
    def test_membership(self):
        assert check("value in ['red', 'green']", "red")
        assert check("value not in ('red', 'green')", "blue")

    @pytest.mark.unit
    def test_arithmetic(self):
        assert evaluate("value * 2 + 1", 4) == 9
        assert evaluate("value // 2", 7) == 3
        assert evaluate("value % 2 == 0", 4) is True

    @pytest.mark.unit
    def test_string_concatenation(self):
        assert evaluate("value + '!'", "hi") == "hi!"

    @pytest.mark.unit
    def test_boolean_connectives_short_circuit(self):
        # Right side would fail on an unknown name if it were evaluated.
        assert check("value or missing", "set") is True
        assert check("value and missing", "") is False

    @pytest.mark.unit
    def test_not(self):
        assert check("not value", "") is True

    @pytest.mark.unit
    def test_sibling_fields(self):
        fields = {"password": "s3cret", "confirm_password": "s3cret"}
        assert check("value == password", "s3cret", fields)
        assert not check("value == password", "other", fields)

    @pytest.mark.unit
    def test_value_cannot_be_shadowed(self):
        assert evaluate("value", 1, {"value": 2}) == 1

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("source", "value"),
        [
            ("missing > 1", 1),
            ("value + 1", "a"),
            ("value * 3", "a"),
            ("-value", "a"),
            ("value < 3", "a"),
            ("1 / value", 0),
        ],
    )
    def test_runtime_failures(self, source, value):
        """Runtime errors never escape as raw exceptions."""
        with pytest.raises(InvalidExpressionError):
            evaluate(source, value)

    @pytest.mark.unit
    def test_string_result_cap(self):
        with pytest.raises(InvalidExpressionError):
            evaluate("value + value", "x" * 6000)

    @pytest.mark.unit
    def test_step_budget(self):
        items = ", ".join(str(i) for i in range(100))
        source = f"value in [{items}]"
        assert check(source, 50)
        with pytest.raises(InvalidExpressionError):
            check(source, 50, max_steps=20)

    @pytest.mark.unit
    def test_step_budget_from_environment(self, monkeypatch):
        monkeypatch.setenv("FORMENGINE_EXPRESSION_MAX_STEPS", "2")
        with pytest.raises(InvalidExpressionError):
            check("value > 1 and value < 5", 3)

    @pytest.mark.unit
    def test_expired_deadline(self):
        with pytest.raises(InvalidExpressionError):
            check("value > 1", 3, timeout_ms=-1)


class TestFieldContext:
    """Tests for sibling-field naming."""

    @pytest.mark.unit
    def test_id_and_label_names(self):
        context = field_context(
            [
                ("password", "Password", "a"),
                ("3f2a-11", "Confirm password", "b"),
            ]
        )
        assert context == {"password": "a", "confirm_password": "b"}

    @pytest.mark.unit
    def test_first_label_wins(self):
        context = field_context([("e1", "Age", 30), ("e2", "Age", 40)])
        assert context["age"] == 30
        assert context["e2"] == 40

    @pytest.mark.unit
    def test_value_name_reserved(self):
        assert "value" not in field_context([("x", "Value", 1)])

    @pytest.mark.unit
    def test_to_identifier(self):
        assert to_identifier("  E-mail address ") == "e_mail_address"
        assert to_identifier("2nd choice") == "_2nd_choice"
        assert to_identifier("!!!") is None
