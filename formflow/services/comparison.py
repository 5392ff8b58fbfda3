"""Comparison engine for conditions and navigation rules.

A condition compares the respondent's stored answer against a fixed value
from the form document. Answers arrive from different input widgets, so a
number field may report ``"42"`` while the condition holds ``42``.

Coercion rule:
- ``equals`` / ``notEquals`` compare as given (differing types are unequal),
  unless the referenced field is declared ``number``; then both operands are
  compared numerically when both coerce.
- ``greaterThan`` / ``lessThan`` always compare numerically and fail closed
  when either operand does not coerce.
- ``includes`` tests substring or membership and is False for absent answers.
"""

import math
from numbers import Real
from typing import Any, Mapping, Optional, Union

from formflow.schemas.form import ComparisonOp, FieldType
from formflow.logging_config import get_logger

logger = get_logger(__name__)


class EvaluationError(Exception):
    """Raised when a condition or rule cannot be evaluated as configured."""
    pass


class UnknownComparisonError(EvaluationError):
    """Raised for a comparison operator the engine does not implement."""
    pass


def to_number(value: Any) -> Optional[float]:
    """Coerce an answer or condition value to a finite number.

    Booleans, None, empty strings, non-finite values and integers too large
    for a float do not coerce.

    Args:
        value: Value to coerce

    Returns:
        Float value, or None if the value is not numeric

    Example:
        >>> to_number(" 3.5 ")
        3.5
        >>> to_number("abc") is None
        True
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, Real):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None

    if not math.isfinite(number):
        return None
    return number


def is_numeric_field(
    field_id: str,
    field_types: Optional[Mapping[str, FieldType]]
) -> bool:
    """True when the referenced field is declared as a number field."""
    return bool(field_types) and field_types.get(field_id) == FieldType.NUMBER


def _same_kind(left: Any, right: Any) -> bool:
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool)
    if isinstance(left, Real) and isinstance(right, Real):
        return True
    return type(left) is type(right)


def _equals(actual: Any, expected: Any, numeric: bool) -> bool:
    if numeric:
        left, right = to_number(actual), to_number(expected)
        if left is not None and right is not None:
            return left == right
    if not _same_kind(actual, expected):
        return False
    return actual == expected


def _as_text(value: Any) -> str:
    """Render a condition value for substring tests (2.0 -> "2", True -> "true")."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _includes(actual: Any, expected: Any, numeric: bool) -> bool:
    if actual is None:
        return False
    if isinstance(actual, str):
        return _as_text(expected) in actual
    if isinstance(actual, (list, tuple, set, frozenset)):
        return any(_equals(item, expected, numeric) for item in actual)
    return False


def _ordered(actual: Any, expected: Any, greater: bool) -> bool:
    left, right = to_number(actual), to_number(expected)
    if left is None or right is None:
        return False
    return left > right if greater else left < right


def compare(
    actual: Any,
    comparison: Union[ComparisonOp, str],
    expected: Any,
    *,
    numeric: bool = False
) -> bool:
    """Evaluate a single comparison between an answer and a condition value.

    Args:
        actual: Stored answer (None when the respondent has not answered)
        comparison: Comparison operator or its document name
        expected: Condition value from the form document
        numeric: The referenced field is declared ``number``

    Returns:
        Boolean result of the comparison

    Raises:
        UnknownComparisonError: If the operator is not supported

    Example:
        >>> compare(5, "greaterThan", "3")
        True
        >>> compare("apple", ComparisonOp.INCLUDES, "pp")
        True
    """
    try:
        op = ComparisonOp(comparison)
    except (ValueError, TypeError):
        logger.error(f"Unknown comparison operator: {comparison!r}")
        raise UnknownComparisonError(f"Unknown comparison operator: {comparison!r}")

    if op == ComparisonOp.EQUALS:
        return _equals(actual, expected, numeric)
    elif op == ComparisonOp.NOT_EQUALS:
        return not _equals(actual, expected, numeric)
    elif op == ComparisonOp.GREATER_THAN:
        return _ordered(actual, expected, greater=True)
    elif op == ComparisonOp.LESS_THAN:
        return _ordered(actual, expected, greater=False)
    elif op == ComparisonOp.INCLUDES:
        return _includes(actual, expected, numeric)

    # New enum member without an implementation
    raise UnknownComparisonError(f"Comparison operator not implemented: {op.value}")
