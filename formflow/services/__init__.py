"""Evaluation services for form documents.

The evaluator API used by editors and renderers: every function is pure and
synchronous over (form fragment, answers).
"""

from formflow.services.comparison import EvaluationError, UnknownComparisonError, compare
from formflow.services.navigation import NoNextStep, is_terminal, resolve_next_step
from formflow.services.schema_validator import SchemaError, analyze_flow, validate_schema
from formflow.services.validation import PatternError, ValidationFailure, validate
from formflow.services.visibility import is_visible

__all__ = [
    "EvaluationError",
    "UnknownComparisonError",
    "PatternError",
    "compare",
    "is_visible",
    "resolve_next_step",
    "NoNextStep",
    "is_terminal",
    "validate",
    "ValidationFailure",
    "validate_schema",
    "analyze_flow",
    "SchemaError",
]
