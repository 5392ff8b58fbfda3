"""Visibility evaluation for steps and fields.

A visibility condition is compiled into a predicate over the answer map.
Each comparison is evaluated, then the list of results is reduced by the
condition's logical operator:

- AND: all results true (an empty list is visible)
- OR: any result true (an empty list is hidden)
- NOT: negation of the AND reduction, not of each comparison
"""

from typing import Any, Callable, Mapping, Optional

from formflow.schemas.form import (
    Condition,
    FieldElement,
    FieldType,
    FormSchema,
    HeaderElement,
    LogicalOperator,
    QuoteElement,
    Step,
    TextElement,
    VisibilityCondition,
)
from formflow.services.comparison import EvaluationError, compare, is_numeric_field
from formflow.logging_config import get_logger

logger = get_logger(__name__)

Answers = Mapping[str, Any]
Predicate = Callable[[Answers], bool]

_REDUCERS: dict[LogicalOperator, Callable[[list[bool]], bool]] = {
    LogicalOperator.AND: all,
    LogicalOperator.OR: any,
    LogicalOperator.NOT: lambda results: not all(results),
}


def condition_predicate(
    condition: Condition,
    field_types: Optional[Mapping[str, FieldType]] = None
) -> Predicate:
    """Build a predicate for a single comparison.

    A missing answer is passed to the comparison as None.
    """
    numeric = is_numeric_field(condition.field_id, field_types)

    def predicate(answers: Answers) -> bool:
        return compare(
            answers.get(condition.field_id),
            condition.comparison,
            condition.value,
            numeric=numeric,
        )

    return predicate


def build_predicate(
    condition: Optional[VisibilityCondition],
    field_types: Optional[Mapping[str, FieldType]] = None
) -> Predicate:
    """Compile a visibility condition into a predicate over answers.

    Args:
        condition: Visibility condition, or None for "always visible"
        field_types: Field id -> declared type, enables numeric equality

    Returns:
        Function taking an answer map and returning visibility

    Raises:
        EvaluationError: If the logical operator is not supported
    """
    if condition is None:
        return lambda answers: True

    try:
        reducer = _REDUCERS[LogicalOperator(condition.operator)]
    except (ValueError, KeyError):
        logger.error(f"Unknown logical operator: {condition.operator!r}")
        raise EvaluationError(f"Unknown logical operator: {condition.operator!r}")

    parts = [condition_predicate(c, field_types) for c in condition.conditions]

    def predicate(answers: Answers) -> bool:
        # No short-circuit: every comparison runs
        results = [part(answers) for part in parts]
        return reducer(results)

    return predicate


def is_visible(
    condition: Optional[VisibilityCondition],
    answers: Answers,
    field_types: Optional[Mapping[str, FieldType]] = None
) -> bool:
    """Decide whether a step or field is shown for the given answers.

    Args:
        condition: Visibility condition (None means always visible)
        answers: Mapping of field id to the respondent's current value
        field_types: Field id -> declared type, enables numeric equality

    Returns:
        True if visible

    Raises:
        EvaluationError: If the condition uses an unknown operator

    Example:
        >>> cond = VisibilityCondition(operator="OR", conditions=[])
        >>> is_visible(cond, {})
        False
    """
    return build_predicate(condition, field_types)(answers)


def visible_elements(
    step: Step,
    answers: Answers,
    field_types: Optional[Mapping[str, FieldType]] = None
) -> list:
    """Elements of a step that are shown for the given answers.

    Headers, text and quotes carry no condition and are always shown.
    """
    shown = []
    for element in step.elements:
        match element:
            case FieldElement():
                if is_visible(element.visibility_condition, answers, field_types):
                    shown.append(element)
            case HeaderElement() | TextElement() | QuoteElement():
                shown.append(element)
            case _:
                raise EvaluationError(f"Unsupported element type: {type(element).__name__}")
    return shown


def visible_steps(form: FormSchema, answers: Answers) -> list[Step]:
    """Steps of the form whose visibility condition holds, in order."""
    field_types = form.field_types()
    steps = [
        step for step in form.steps
        if is_visible(step.visibility_condition, answers, field_types)
    ]
    logger.debug(
        f"{len(steps)}/{len(form.steps)} steps visible",
        extra={"form_id": form.id},
    )
    return steps
