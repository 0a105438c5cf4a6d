# tests/test_expressions.py
"""Tests for locating, evaluating and resolving "expr:" values in the data context."""

import pytest

from manus.core.context import evaluate_all_expressions, evaluate_expression, find_expressions, run_eval
from manus.core.context.values import display_value, get_at_path, join_path, set_at_path, split_path
from manus.exceptions import ContextWriteError, ExpressionError, ExpressionRecursionError


@pytest.fixture
def expression_data():
    return {
        "large": 10000,
        "small": 200,
        "percentage": "expr: 100 * small / large",
        "added_percentage": "expr: percentage + 1",
        "three": "expr: 3",
        "nested": {"value_sum": "expr: large + small"},
    }


class TestFindExpressions:
    def test_paths_and_order(self, expression_data):
        found = find_expressions(expression_data)
        assert found == [
            (["percentage"], "expr: 100 * small / large"),
            (["added_percentage"], "expr: percentage + 1"),
            (["three"], "expr: 3"),
            (["nested", "value_sum"], "expr: large + small"),
        ]

    def test_list_items_keep_the_list_path(self):
        data = {"values": [1, "expr: 2 * 2", {"inner": "expr: 1"}]}
        assert find_expressions(data) == [
            (["values"], "expr: 2 * 2"),
            (["values", "inner"], "expr: 1"),
        ]

    def test_marker_must_start_the_text(self):
        assert find_expressions({"text": "not an expr: 1"}) == []

    def test_leading_whitespace_is_allowed(self):
        assert find_expressions({"a": "  expr: 1"}) == [(["a"], "  expr: 1")]


class TestRunEval:
    def test_arithmetic(self):
        assert run_eval("100 * 3", {}) == 300

    def test_round_function(self):
        assert run_eval("round(1.23, 1)", {}) == 1.2
        assert run_eval("round(1.23)", {}) == 1

    def test_round_rejects_fractional_decimals(self):
        with pytest.raises(ExpressionError, match="must be an integer"):
            run_eval("round(1.23, 1.2)", {})

    def test_misspelled_key_hint(self):
        with pytest.raises(ExpressionError, match="Perhaps a key is misspelled"):
            run_eval("largee + small", {"large": 1, "small": 2})

    def test_invalid_syntax(self):
        with pytest.raises(ExpressionError, match="Error in expression"):
            run_eval("1 +", {})

    def test_numeric_strings_are_numbers(self):
        assert run_eval("a * 2", {"a": "1.5"}) == 3.0

    def test_non_numeric_reference(self):
        with pytest.raises(ExpressionError, match="not a number"):
            run_eval("a + 1", {"a": {"b": 1}})

    def test_division_by_zero(self):
        with pytest.raises(ExpressionError, match="Division by zero"):
            run_eval("1 / 0", {})

    def test_dotted_paths_and_indexes(self):
        data = {"group": {"a": 4}, "items": [1, 2, 3]}
        assert run_eval("group.a + items[2]", data) == 7

    def test_nested_name_resolves_when_unique(self):
        assert run_eval("a + 1", {"group": {"a": 4}}) == 5

    def test_ambiguous_nested_name(self):
        data = {"one": {"a": 1}, "two": {"a": 2}}
        with pytest.raises(ExpressionError, match="ambiguous"):
            run_eval("a", data)

    def test_unknown_function(self):
        with pytest.raises(ExpressionError, match="Unknown function"):
            run_eval("abs(1)", {})

    def test_round_with_too_many_decimals_for_a_float(self):
        with pytest.raises(ExpressionError, match="Arithmetic error"):
            run_eval("round(1.5, " + "9" * 400 + ")", {})

    def test_round_of_integer_too_large_for_a_float(self):
        with pytest.raises(ExpressionError, match="Arithmetic error"):
            run_eval("round(big)", {"big": 10 ** 400})


class TestEvaluateExpression:
    def test_strips_marker(self):
        assert evaluate_expression("expr: 1 + 1", {}) == 2

    def test_referenced_expressions_are_evaluated_first(self, expression_data):
        assert evaluate_expression("expr: added_percentage * 2", expression_data) == 6

    def test_self_reference(self):
        with pytest.raises(ExpressionRecursionError, match="recursion"):
            evaluate_expression("expr: a", {"a": "expr: a"}, 0, frozenset({"a"}))


class TestEvaluateAllExpressions:
    def test_values_are_resolved(self, expression_data):
        resolved = evaluate_all_expressions(expression_data)
        assert resolved["percentage"] == 2
        assert isinstance(resolved["percentage"], int)
        assert resolved["added_percentage"] == 3
        assert resolved["three"] == 3
        assert resolved["nested"]["value_sum"] == 10200

    def test_input_is_not_modified(self, expression_data):
        evaluate_all_expressions(expression_data)
        assert expression_data["percentage"] == "expr: 100 * small / large"

    def test_forward_references(self):
        data = {"b": "expr: a * 2", "a": "expr: 1 + 1"}
        assert evaluate_all_expressions(data) == {"b": 4, "a": 2}

    def test_circular_expressions(self):
        data = {"ex1": "expr: ex2 + 1", "ex2": "expr: ex3", "ex3": "expr: ex1"}
        with pytest.raises(ExpressionRecursionError) as excinfo:
            evaluate_all_expressions(data)
        assert "recursion" in str(excinfo.value)

    def test_error_names_the_failing_key(self):
        with pytest.raises(ExpressionError, match="Error for expression in 'a.b'"):
            evaluate_all_expressions({"a": {"b": "expr: missing + 1"}})

    def test_expression_in_list_replaces_only_its_element(self):
        data = {"values": [1, "expr: 2 * 2", 3]}
        assert evaluate_all_expressions(data) == {"values": [1, 4, 3]}

    def test_context_without_expressions(self):
        data = {"a": 1, "b": ["x"]}
        assert evaluate_all_expressions(data) == data

    def test_rounding_a_huge_value_keeps_it(self):
        resolved = evaluate_all_expressions({"big": 1e307, "rounded": "expr: round(big, 2)"})
        assert resolved["rounded"] == 1e307


class TestValueTree:
    def test_paths_round_trip_through_dotted_text(self):
        assert split_path("a.b.0") == ["a", "b", "0"]
        assert join_path(["a", "b"]) == "a.b"
        assert split_path("") == []

    def test_get_at_path(self):
        tree = {"a": {"b": [10, 20]}}
        assert get_at_path(tree, ["a", "b", "1"]) == 20
        with pytest.raises(KeyError):
            get_at_path(tree, ["a", "c"])

    def test_set_at_path_never_creates_keys(self):
        tree = {"a": {}}
        with pytest.raises(ContextWriteError, match="Key not found"):
            set_at_path(tree, ["a", "b"], 1)

    def test_set_at_path_replaces(self):
        tree = {"a": {"b": "expr: 1"}}
        set_at_path(tree, ["a", "b"], 1)
        assert tree == {"a": {"b": 1}}

    @pytest.mark.parametrize("value,expected", [
        (None, ""),
        ("text", "text"),
        (2.0, "2"),
        (True, "true"),
        ([1, "a"], "[1, a]"),
        ({"a": 1}, "[object]"),
    ])
    def test_display_value(self, value, expected):
        assert display_value(value) == expected
