"""Field validation service.

This module checks a field's current answer against its validation rules.
Every rule is checked with no short circuit and all failures are returned.
Failures are ordinary results, not exceptions.
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Iterable, Mapping, Optional

from formflow.schemas.form import (
    DataSource,
    FieldElement,
    FieldType,
    FormSchema,
    Option,
    Step,
)
from formflow.services.comparison import EvaluationError, to_number
from formflow.services.custom_rules import CustomRuleError, CustomRuleEvaluator
from formflow.services.visibility import is_visible
from formflow.logging_config import get_logger

logger = get_logger(__name__)

_CHOICE_TYPES = {FieldType.SELECT, FieldType.RADIO}


class PatternError(EvaluationError):
    """Raised when a validation pattern is not a valid regular expression."""
    pass


@dataclass(frozen=True)
class ValidationFailure:
    """A single failed validation rule.

    Attributes:
        rule: Rule name as used in the form document (e.g. "minLength")
        message: Human-readable failure reason
    """
    rule: str
    message: str


@lru_cache(maxsize=256)
def _compile(source: str) -> tuple[Optional[re.Pattern], Optional[str]]:
    """Compile once per source; a malformed source is logged on first use only."""
    try:
        return re.compile(source), None
    except re.error as e:
        logger.error(f"Invalid validation pattern {source!r}: {e}")
        return None, str(e)


def compile_pattern(source: str) -> re.Pattern:
    """Compile a validation pattern, caching the result.

    Args:
        source: Regular expression source

    Returns:
        Compiled pattern

    Raises:
        PatternError: If the source is not a valid regular expression
    """
    compiled, error = _compile(source)
    if compiled is None:
        raise PatternError(f"Invalid validation pattern {source!r}: {error}")
    return compiled


def _is_absent(value: Any) -> bool:
    if value is None or value == "":
        return True
    return isinstance(value, (list, tuple, set)) and not value


def is_empty(field: FieldElement, value: Any) -> bool:
    """Whether a value counts as "no answer" for the required rule."""
    if _is_absent(value):
        return True
    if field.field_type == FieldType.CHECKBOX and value is False:
        return True
    return False


class FieldValidator:
    """Service for validating answers against field validation rules."""

    @staticmethod
    def validate(
        field: FieldElement,
        value: Any,
        answers: Optional[Mapping[str, Any]] = None,
        custom_evaluator: Optional[CustomRuleEvaluator] = None
    ) -> list[ValidationFailure]:
        """Validate an answer against the field's rules.

        Rules other than ``required`` only apply when a value is present.

        Args:
            field: Field element with validation rules
            value: Current answer
            answers: Full answer map, passed to custom rules
            custom_evaluator: Host evaluator for ``custom`` expressions

        Returns:
            Ordered list of failures; empty when valid

        Raises:
            PatternError: If the field's pattern is malformed
            EvaluationError: If a custom rule is set but no evaluator given
            CustomRuleError: If the custom evaluator fails

        Example:
            >>> field = FieldElement(id="name", label="Name", field_type="text",
            ...                      validation=Validation(required=True, min_length=3))
            >>> [f.rule for f in FieldValidator.validate(field, "ab")]
            ['minLength']
        """
        failures: list[ValidationFailure] = []
        rules = field.validation

        if rules is not None and rules.required and is_empty(field, value):
            failures.append(ValidationFailure("required", "This field is required."))

        if _is_absent(value):
            return failures

        if rules is not None:
            failures.extend(FieldValidator._check_length(rules, value))
            if field.is_numeric:
                failures.extend(FieldValidator._check_range(rules, value))
            if rules.pattern is not None:
                failures.extend(FieldValidator._check_pattern(rules.pattern, value))

        failures.extend(FieldValidator._check_option(field, value))

        if rules is not None and rules.custom:
            failures.extend(
                FieldValidator._check_custom(field, rules.custom, value, answers or {}, custom_evaluator)
            )

        if failures:
            logger.debug(f"Field {field.id} failed rules: {[f.rule for f in failures]}")
        return failures

    @staticmethod
    def _check_length(rules, value: Any) -> list[ValidationFailure]:
        if not isinstance(value, str):
            return []
        failures = []
        if rules.min_length is not None and len(value) < rules.min_length:
            failures.append(ValidationFailure(
                "minLength", f"Please enter at least {rules.min_length} characters."
            ))
        if rules.max_length is not None and len(value) > rules.max_length:
            failures.append(ValidationFailure(
                "maxLength", f"Please enter no more than {rules.max_length} characters."
            ))
        return failures

    @staticmethod
    def _check_range(rules, value: Any) -> list[ValidationFailure]:
        """Check numeric bounds; a non-numeric value fails each bound set."""
        number = to_number(value)
        failures = []
        if rules.min is not None:
            if number is None:
                failures.append(ValidationFailure("min", "Please enter a number."))
            elif number < rules.min:
                failures.append(ValidationFailure("min", f"Please enter a value of at least {rules.min}."))
        if rules.max is not None:
            if number is None:
                failures.append(ValidationFailure("max", "Please enter a number."))
            elif number > rules.max:
                failures.append(ValidationFailure("max", f"Please enter a value of no more than {rules.max}."))
        return failures

    @staticmethod
    def _check_pattern(pattern: str, value: Any) -> list[ValidationFailure]:
        compiled = compile_pattern(pattern)
        if compiled.search(str(value)):
            return []
        return [ValidationFailure("pattern", "Invalid format. Please try again.")]

    @staticmethod
    def _check_option(field: FieldElement, value: Any) -> list[ValidationFailure]:
        """Choice fields must answer with one of their option values."""
        if field.field_type not in _CHOICE_TYPES or not field.options:
            return []
        allowed = [option.value for option in field.options]
        if value in allowed:
            return []
        labels = ", ".join(option.label for option in field.options)
        return [ValidationFailure("option", f"Please choose one of: {labels}")]

    @staticmethod
    def _check_custom(
        field: FieldElement,
        expression: str,
        value: Any,
        answers: Mapping[str, Any],
        custom_evaluator: Optional[CustomRuleEvaluator]
    ) -> list[ValidationFailure]:
        if custom_evaluator is None:
            logger.error(f"Field {field.id} has a custom rule but no evaluator was supplied")
            raise EvaluationError(f"No custom rule evaluator supplied for field '{field.id}'")

        try:
            result = custom_evaluator(expression, value, answers)
        except CustomRuleError:
            raise
        except Exception as e:
            logger.error(f"Custom rule evaluator failed for field {field.id}: {e}")
            raise CustomRuleError(f"Custom rule evaluation failed for field '{field.id}': {e}")

        if result.passed:
            return []
        return [ValidationFailure("custom", result.message or "Custom validation failed.")]


def validate(
    field: FieldElement,
    value: Any,
    answers: Optional[Mapping[str, Any]] = None,
    custom_evaluator: Optional[CustomRuleEvaluator] = None
) -> list[ValidationFailure]:
    """Validate a field's answer. See ``FieldValidator.validate``."""
    return FieldValidator.validate(field, value, answers, custom_evaluator)


def validate_step(
    step: Step,
    answers: Mapping[str, Any],
    form: Optional[FormSchema] = None,
    custom_evaluator: Optional[CustomRuleEvaluator] = None
) -> dict[str, list[ValidationFailure]]:
    """Validate every visible field of a step.

    Hidden fields are skipped: a respondent cannot answer what they cannot
    see.

    Args:
        step: Step to validate
        answers: Mapping of field id to the respondent's current value
        form: Owning form, used for numeric coercion in visibility checks
        custom_evaluator: Host evaluator for ``custom`` expressions

    Returns:
        Mapping of field id to its failures, only for fields that failed
    """
    field_types = form.field_types() if form is not None else None
    results: dict[str, list[ValidationFailure]] = {}
    for field in step.fields:
        if not is_visible(field.visibility_condition, answers, field_types):
            continue
        failures = validate(field, answers.get(field.id), answers, custom_evaluator)
        if failures:
            results[field.id] = failures
    return results


def resolve_options(data_source: DataSource, records: Iterable[Mapping[str, Any]]) -> list[Option]:
    """Map records fetched from a data source to field options.

    The engine does not fetch the data source; the caller passes the fetched
    records. Records missing the label or value field are skipped.

    Args:
        data_source: Field data source describing the mapping
        records: Records returned by the data source

    Returns:
        Options in record order
    """
    label_field = data_source.mapping.label_field
    value_field = data_source.mapping.value_field
    options = []
    for index, record in enumerate(records):
        if label_field not in record or value_field not in record:
            logger.warning(
                f"Skipping record {index} from {data_source.url}: "
                f"missing '{label_field}' or '{value_field}'"
            )
            continue
        options.append(Option(label=str(record[label_field]), value=str(record[value_field])))
    return options
