"""Unit tests for the comparison engine.

Tests each operator and the numeric coercion rule.
"""

import pytest

from formflow.schemas.form import ComparisonOp, FieldType
from formflow.services.comparison import (
    EvaluationError,
    UnknownComparisonError,
    compare,
    is_numeric_field,
    to_number,
)


class TestToNumber:
    """Tests for numeric coercion."""

    def test_numbers_pass_through(self):
        assert to_number(5) == 5.0
        assert to_number(2.5) == 2.5

    def test_numeric_strings_coerce(self):
        assert to_number("3") == 3.0
        assert to_number(" -1.5 ") == -1.5

    def test_non_numeric_values_do_not_coerce(self):
        """Booleans, None, blanks and text are not numbers."""
        assert to_number(True) is None
        assert to_number(None) is None
        assert to_number("") is None
        assert to_number("   ") is None
        assert to_number("abc") is None
        assert to_number(["1"]) is None

    def test_non_finite_values_do_not_coerce(self):
        assert to_number("nan") is None
        assert to_number("inf") is None
        assert to_number(float("inf")) is None

    def test_oversized_integers_do_not_coerce(self):
        assert to_number(10**400) is None
        assert to_number(-(10**400)) is None


class TestEquals:
    """Tests for equals / notEquals."""

    def test_same_type_equality(self):
        assert compare("yes", "equals", "yes") is True
        assert compare("yes", "equals", "no") is False
        assert compare(3, "equals", 3.0) is True
        assert compare(True, "equals", True) is True

    def test_differing_types_are_unequal(self):
        """No implicit coercion outside number fields."""
        assert compare("5", "equals", 5) is False
        assert compare(1, "equals", True) is False
        assert compare(None, "equals", "") is False

    def test_numeric_field_compares_numerically(self):
        assert compare("5", "equals", 5, numeric=True) is True
        assert compare("5.0", "equals", "5", numeric=True) is True
        assert compare("6", "equals", 5, numeric=True) is False

    def test_numeric_field_falls_back_to_strict_equality(self):
        assert compare("n/a", "equals", "n/a", numeric=True) is True
        assert compare("n/a", "equals", 5, numeric=True) is False

    def test_not_equals_negates_equals(self):
        assert compare("yes", "notEquals", "no") is True
        assert compare("yes", "notEquals", "yes") is False
        assert compare("5", "notEquals", 5) is True
        assert compare(None, "notEquals", "x") is True

    def test_accepts_enum_operator(self):
        assert compare("a", ComparisonOp.EQUALS, "a") is True


class TestOrdering:
    """Tests for greaterThan / lessThan."""

    def test_numeric_coercion_of_condition_value(self):
        assert compare(5, "greaterThan", "3") is True
        assert compare("2", "lessThan", 3) is True

    def test_ordering_results(self):
        assert compare(18, "greaterThan", 18) is False
        assert compare(17, "lessThan", 18) is True
        assert compare(19, "lessThan", 18) is False

    def test_fails_closed_when_not_coercible(self):
        assert compare("abc", "greaterThan", 3) is False
        assert compare(None, "lessThan", 3) is False
        assert compare(5, "greaterThan", "many") is False
        assert compare(True, "greaterThan", 0) is False

    def test_oversized_integer_answer_fails_closed(self):
        assert compare(10**400, "greaterThan", 3) is False
        assert compare(10**400, "lessThan", 3) is False
        assert compare(10**400, "equals", 3, numeric=True) is False


class TestIncludes:
    """Tests for includes."""

    def test_substring(self):
        assert compare("apple", "includes", "pp") is True
        assert compare("apple", "includes", "x") is False

    def test_substring_with_number_needle(self):
        assert compare("room 101", "includes", 101) is True
        assert compare("room 101", "includes", 101.0) is True
        assert compare("pi is 3.5", "includes", 3.5) is True

    def test_sequence_membership(self):
        assert compare(["a", "b"], "includes", "b") is True
        assert compare(["a", "b"], "includes", "c") is False
        assert compare(["1", "2"], "includes", 2) is False
        assert compare(["1", "2"], "includes", 2, numeric=True) is True

    def test_absent_answer_is_false(self):
        assert compare(None, "includes", "x") is False

    def test_non_container_is_false(self):
        assert compare(42, "includes", 4) is False


class TestUnknownOperator:
    """Unknown operators are surfaced, never treated as false."""

    def test_unknown_operator_raises(self):
        with pytest.raises(UnknownComparisonError):
            compare(1, "between", 2)

    def test_unknown_operator_is_evaluation_error(self):
        with pytest.raises(EvaluationError):
            compare(1, "greaterOrEqual", 2)


class TestIsNumericField:

    def test_lookup(self):
        types = {"age": FieldType.NUMBER, "name": FieldType.TEXT}
        assert is_numeric_field("age", types) is True
        assert is_numeric_field("name", types) is False
        assert is_numeric_field("missing", types) is False
        assert is_numeric_field("age", None) is False
