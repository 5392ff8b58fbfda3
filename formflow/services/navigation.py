"""Navigation resolver for step-to-step branching.

Determines the next step from a step's ordered navigation rules and its
default next step. Rule order is significant: the first matching rule wins.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from formflow.schemas.form import FieldType, Step
from formflow.services.comparison import compare, is_numeric_field
from formflow.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class NoNextStep:
    """Terminal outcome: the step has no successor, so the form is complete.

    This is not an error. Callers must treat it as completion and not retry.

    Attributes:
        step_id: Step that ended the form
    """
    step_id: str


NextStep = Union[str, NoNextStep]


def is_terminal(result: NextStep) -> bool:
    """True when a navigation result means the form is complete."""
    return isinstance(result, NoNextStep)


def resolve_next_step(
    step: Step,
    answers: Mapping[str, Any],
    field_types: Optional[Mapping[str, FieldType]] = None
) -> NextStep:
    """Determine the next step ID based on navigation rules.

    Evaluates rules in authored order. Returns the first matching rule's
    target, else the default next step, else ``NoNextStep``.

    Args:
        step: Current step
        answers: Mapping of field id to the respondent's current value
        field_types: Field id -> declared type, enables numeric equality

    Returns:
        Next step ID, or NoNextStep when the form is complete

    Raises:
        EvaluationError: If a rule uses an unknown comparison operator

    Example:
        >>> resolve_next_step(step, {"age": 25})
        'adult'
    """
    for index, rule in enumerate(step.next_step_condition or []):
        numeric = is_numeric_field(rule.field_id, field_types)
        if compare(answers.get(rule.field_id), rule.comparison, rule.value, numeric=numeric):
            logger.info(
                f"Navigation rule {index} matched: {rule.field_id} "
                f"{rule.comparison.value} {rule.value!r} -> {rule.go_to_step}",
                extra={"step_id": step.id},
            )
            return rule.go_to_step

    if step.default_next_step:
        logger.debug(f"Using default next: {step.default_next_step}", extra={"step_id": step.id})
        return step.default_next_step

    logger.info(f"No next step after {step.id}; form complete", extra={"step_id": step.id})
    return NoNextStep(step_id=step.id)
