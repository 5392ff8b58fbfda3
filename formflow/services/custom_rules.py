"""Custom validation rules evaluated with simpleeval.

A field's ``validation.custom`` holds an expression. The validation evaluator
never runs it directly: it calls a host-supplied ``CustomRuleEvaluator``.
``SimpleEvalRuleEvaluator`` is the default host evaluator and runs the
expression in simpleeval's restricted interpreter, so no arbitrary code
executes.

Names available to an expression:
- ``value``: the answer being validated
- ``answers``: the full answer map
- ``len``, ``str``, ``int``, ``float``, ``lower``, ``upper``
"""

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

from simpleeval import EvalWithCompoundTypes, InvalidExpression

from formflow.services.comparison import EvaluationError
from formflow.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_FAILURE_MESSAGE = "Custom validation failed."


class CustomRuleError(EvaluationError):
    """Raised when a custom rule expression cannot be evaluated."""
    pass


@dataclass(frozen=True)
class CustomRuleResult:
    """Outcome of a custom rule.

    Attributes:
        passed: Whether the value satisfied the rule
        message: Failure message shown to the respondent
    """
    passed: bool
    message: Optional[str] = None


CustomRuleEvaluator = Callable[[str, Any, Mapping[str, Any]], CustomRuleResult]


def _lower(value: Any) -> str:
    return str(value).lower()


def _upper(value: Any) -> str:
    return str(value).upper()


class SimpleEvalRuleEvaluator:
    """Evaluate custom rule expressions safely with simpleeval.

    Example:
        >>> evaluator = SimpleEvalRuleEvaluator()
        >>> evaluator("len(value) >= 3", "abc", {}).passed
        True
    """

    FUNCTIONS = {
        "len": len,
        "str": str,
        "int": int,
        "float": float,
        "lower": _lower,
        "upper": _upper,
    }

    def __init__(self, failure_message: str = DEFAULT_FAILURE_MESSAGE):
        self.failure_message = failure_message

    def __call__(
        self,
        expression: str,
        value: Any,
        answers: Mapping[str, Any]
    ) -> CustomRuleResult:
        """Evaluate an expression against a value and the answer map.

        Args:
            expression: simpleeval expression string
            value: Answer being validated
            answers: Full answer map

        Returns:
            CustomRuleResult (truthy expression result passes)

        Raises:
            CustomRuleError: If the expression is invalid or evaluation fails
        """
        evaluator = EvalWithCompoundTypes(
            names={"value": value, "answers": dict(answers)},
            functions=dict(self.FUNCTIONS),
        )
        try:
            result = evaluator.eval(expression)
        except InvalidExpression as e:
            logger.error(f"Invalid custom rule '{expression}': {e}")
            raise CustomRuleError(f"Invalid custom rule expression: {e}")
        except Exception as e:
            logger.error(f"Error evaluating custom rule '{expression}': {e}")
            raise CustomRuleError(f"Error evaluating custom rule: {e}")

        if not isinstance(result, bool):
            logger.debug(f"Custom rule '{expression}' did not return boolean: {result!r}")

        if result:
            return CustomRuleResult(passed=True)
        return CustomRuleResult(passed=False, message=self.failure_message)
