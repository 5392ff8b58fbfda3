"""Pydantic schemas for data validation.

This package contains the Pydantic models for form documents and the
request/response bodies of the evaluation API.
"""

from formflow.schemas.form import (
    FieldType,
    ElementType,
    ComparisonOp,
    LogicalOperator,
    HttpMethod,
    Option,
    Validation,
    Condition,
    VisibilityCondition,
    NavigationRule,
    DataSourceMapping,
    DataSource,
    FieldLayout,
    StepLayout,
    FieldElement,
    HeaderElement,
    TextElement,
    QuoteElement,
    Element,
    Step,
    FormSchema,
)

__all__ = [
    "FieldType",
    "ElementType",
    "ComparisonOp",
    "LogicalOperator",
    "HttpMethod",
    "Option",
    "Validation",
    "Condition",
    "VisibilityCondition",
    "NavigationRule",
    "DataSourceMapping",
    "DataSource",
    "FieldLayout",
    "StepLayout",
    "FieldElement",
    "HeaderElement",
    "TextElement",
    "QuoteElement",
    "Element",
    "Step",
    "FormSchema",
]
