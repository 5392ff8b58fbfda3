"""Structural validation of form documents.

``validate_schema`` reports problems as a list of ``SchemaError`` values and
never raises: the editor may hold an invalid form while it is being edited.

``analyze_flow`` inspects the step navigation graph (reachability from the
first step, cycles). Its findings are informational.
"""

import re
from collections import defaultdict, deque
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from formflow.schemas.form import (
    FieldElement,
    FormSchema,
    Step,
    VisibilityCondition,
)
from formflow.logging_config import get_logger

logger = get_logger(__name__)

MIN_COL_SPAN = 1
MAX_COL_SPAN = 12


@dataclass(frozen=True)
class SchemaError:
    """A structural problem in a form document.

    Attributes:
        code: Machine-readable error code (e.g. "dangling_step_reference")
        message: Human-readable description
        path: Location in the document, e.g. "steps[1].defaultNextStep"
    """
    code: str
    message: str
    path: str


@dataclass
class FlowReport:
    """Result of navigation graph analysis.

    Attributes:
        reachable: Step ids reachable from the first step
        unreachable: Step ids that no navigation path reaches
        has_cycles: Whether navigation can loop back to a visited step
    """
    reachable: Set[str] = field(default_factory=set)
    unreachable: Set[str] = field(default_factory=set)
    has_cycles: bool = False


class SchemaValidator:
    """Service for checking form document structure."""

    @staticmethod
    def validate(form: FormSchema) -> List[SchemaError]:
        """Validate form structure.

        Checks:
        1. The form has at least one step
        2. Step ids are unique; element ids are unique within a step
        3. Navigation targets reference existing steps
        4. Condition field ids reference field elements anywhere in the form
        5. Layout numbers are in range (columns >= 1, colSpan 1..12)
        6. Validation patterns compile and bounds are consistent

        Args:
            form: Form to validate

        Returns:
            List of SchemaError (empty when the form is valid)

        Example:
            >>> errors = SchemaValidator.validate(form)
            >>> [e.code for e in errors]
            ['dangling_step_reference']
        """
        errors: List[SchemaError] = []

        if not form.steps:
            errors.append(SchemaError("no_steps", "Form has no steps", "steps"))

        step_ids = [step.id for step in form.steps]
        field_ids = {f.id for f in form.iter_fields()}

        seen_steps: Set[str] = set()
        for step_index, step in enumerate(form.steps):
            step_path = f"steps[{step_index}]"
            if step.id in seen_steps:
                errors.append(SchemaError(
                    "duplicate_step_id", f"Duplicate step id '{step.id}'", f"{step_path}.id"
                ))
            seen_steps.add(step.id)

            errors.extend(SchemaValidator._check_step(step, step_path, set(step_ids), field_ids))

        if errors:
            logger.warning(
                f"Form {form.id} has {len(errors)} schema errors",
                extra={"form_id": form.id},
            )
        return errors

    @staticmethod
    def _check_step(
        step: Step,
        step_path: str,
        step_ids: Set[str],
        field_ids: Set[str]
    ) -> List[SchemaError]:
        errors: List[SchemaError] = []

        if step.layout.columns < 1:
            errors.append(SchemaError(
                "invalid_columns",
                f"Step '{step.id}' must have at least 1 column, got {step.layout.columns}",
                f"{step_path}.layout.columns",
            ))

        if step.default_next_step is not None and step.default_next_step not in step_ids:
            errors.append(SchemaError(
                "dangling_step_reference",
                f"Default next step '{step.default_next_step}' does not exist",
                f"{step_path}.defaultNextStep",
            ))

        for rule_index, rule in enumerate(step.next_step_condition or []):
            rule_path = f"{step_path}.nextStepCondition[{rule_index}]"
            if rule.go_to_step not in step_ids:
                errors.append(SchemaError(
                    "dangling_step_reference",
                    f"Navigation target '{rule.go_to_step}' does not exist",
                    f"{rule_path}.goToStep",
                ))
            if rule.field_id not in field_ids:
                errors.append(SchemaError(
                    "unknown_field_reference",
                    f"Navigation rule references unknown field '{rule.field_id}'",
                    f"{rule_path}.fieldId",
                ))

        errors.extend(SchemaValidator._check_condition(
            step.visibility_condition, f"{step_path}.visibilityCondition", field_ids
        ))

        seen_elements: Set[str] = set()
        for element_index, element in enumerate(step.elements):
            element_path = f"{step_path}.elements[{element_index}]"
            if element.id in seen_elements:
                errors.append(SchemaError(
                    "duplicate_element_id",
                    f"Duplicate element id '{element.id}' in step '{step.id}'",
                    f"{element_path}.id",
                ))
            seen_elements.add(element.id)

            if isinstance(element, FieldElement):
                errors.extend(SchemaValidator._check_field(element, element_path, field_ids))

        return errors

    @staticmethod
    def _check_field(field_el: FieldElement, path: str, field_ids: Set[str]) -> List[SchemaError]:
        errors: List[SchemaError] = []

        if field_el.layout is not None:
            col_span = field_el.layout.col_span
            if not MIN_COL_SPAN <= col_span <= MAX_COL_SPAN:
                errors.append(SchemaError(
                    "col_span_out_of_range",
                    f"colSpan must be between {MIN_COL_SPAN} and {MAX_COL_SPAN}, got {col_span}",
                    f"{path}.layout.colSpan",
                ))

        errors.extend(SchemaValidator._check_condition(
            field_el.visibility_condition, f"{path}.visibilityCondition", field_ids
        ))

        rules = field_el.validation
        if rules is None:
            return errors

        if rules.pattern is not None:
            try:
                re.compile(rules.pattern)
            except re.error as e:
                errors.append(SchemaError(
                    "invalid_pattern", f"Invalid pattern {rules.pattern!r}: {e}", f"{path}.validation.pattern"
                ))

        if rules.min_length is not None and rules.max_length is not None:
            if rules.max_length < rules.min_length:
                errors.append(SchemaError(
                    "inconsistent_bounds", "maxLength must be >= minLength", f"{path}.validation.maxLength"
                ))
        if rules.min is not None and rules.max is not None and rules.max < rules.min:
            errors.append(SchemaError(
                "inconsistent_bounds", "max must be >= min", f"{path}.validation.max"
            ))

        return errors

    @staticmethod
    def _check_condition(
        condition: Optional[VisibilityCondition],
        path: str,
        field_ids: Set[str]
    ) -> List[SchemaError]:
        if condition is None:
            return []
        errors = []
        for index, cond in enumerate(condition.conditions):
            if cond.field_id not in field_ids:
                errors.append(SchemaError(
                    "unknown_field_reference",
                    f"Visibility condition references unknown field '{cond.field_id}'",
                    f"{path}.conditions[{index}].fieldId",
                ))
        return errors

    @staticmethod
    def analyze_flow(form: FormSchema) -> FlowReport:
        """Analyze the navigation graph starting at the first step.

        Args:
            form: Form to analyze

        Returns:
            FlowReport with reachability and cycle information
        """
        if not form.steps:
            return FlowReport()

        first_step = form.steps[0]
        graph = SchemaValidator._build_graph(form)

        reachable = SchemaValidator._get_reachable_steps(graph, first_step.id)
        unreachable = {step.id for step in form.steps} - reachable
        if unreachable:
            logger.warning(
                f"Unreachable steps in form {form.id}: {sorted(unreachable)}",
                extra={"form_id": form.id},
            )

        return FlowReport(
            reachable=reachable,
            unreachable=unreachable,
            has_cycles=SchemaValidator._has_cycles(graph, first_step.id),
        )

    @staticmethod
    def _build_graph(form: FormSchema) -> Dict[str, List[str]]:
        """Build adjacency list representation of form navigation.

        Args:
            form: Form to analyze

        Returns:
            Dictionary mapping step_id -> list of next step IDs
        """
        graph = defaultdict(list)

        for step in form.steps:
            for rule in step.next_step_condition or []:
                graph[step.id].append(rule.go_to_step)
            if step.default_next_step:
                graph[step.id].append(step.default_next_step)

        return graph

    @staticmethod
    def _has_cycles(graph: Dict[str, List[str]], start_id: str) -> bool:
        """Detect cycles in form navigation using DFS.

        Args:
            graph: Adjacency list representation
            start_id: Starting step ID

        Returns:
            True if cycle detected, False otherwise
        """
        visited = set()
        rec_stack = set()

        def dfs(node: str) -> bool:
            visited.add(node)
            rec_stack.add(node)

            for neighbor in graph.get(node, []):
                if neighbor not in visited:
                    if dfs(neighbor):
                        return True
                elif neighbor in rec_stack:
                    # Back edge
                    return True

            rec_stack.remove(node)
            return False

        return dfs(start_id)

    @staticmethod
    def _get_reachable_steps(graph: Dict[str, List[str]], start_id: str) -> Set[str]:
        """Get all steps reachable from start using BFS.

        Args:
            graph: Adjacency list representation
            start_id: Starting step ID

        Returns:
            Set of reachable step IDs
        """
        reachable = {start_id}
        queue = deque([start_id])

        while queue:
            current = queue.popleft()

            for neighbor in graph.get(current, []):
                if neighbor not in reachable:
                    reachable.add(neighbor)
                    queue.append(neighbor)

        return reachable


def validate_schema(form: FormSchema) -> List[SchemaError]:
    """Validate a form document's structure. See ``SchemaValidator.validate``."""
    return SchemaValidator.validate(form)


def analyze_flow(form: FormSchema) -> FlowReport:
    """Analyze a form's navigation graph. See ``SchemaValidator.analyze_flow``."""
    return SchemaValidator.analyze_flow(form)
