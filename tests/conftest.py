"""Pytest configuration and shared fixtures.

This module provides fixtures and configuration used across all tests.
"""

import os

import pytest

# Set environment for tests BEFORE importing app modules
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("CUSTOM_RULES_ENABLED", "true")

from formflow.config import get_settings
from formflow.schemas.form import (
    ComparisonOp,
    Condition,
    FieldElement,
    FieldLayout,
    FieldType,
    FormSchema,
    HeaderElement,
    LogicalOperator,
    NavigationRule,
    Option,
    Step,
    StepLayout,
    Validation,
    VisibilityCondition,
)


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Reload settings for every test so env patches take effect."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def age_step() -> Step:
    """Step whose navigation rules both match for adults.

    Returns:
        Step: "age" step with ordered navigation rules
    """
    return Step(
        id="age",
        title="Your age",
        layout=StepLayout(columns=1),
        elements=[
            FieldElement(id="age", label="Age", field_type=FieldType.NUMBER),
        ],
        next_step_condition=[
            NavigationRule(field_id="age", comparison=ComparisonOp.GREATER_THAN, value=18, go_to_step="adult"),
            NavigationRule(field_id="age", comparison=ComparisonOp.GREATER_THAN, value=0, go_to_step="minor"),
        ],
    )


@pytest.fixture
def sample_form() -> FormSchema:
    """Two-step form with three fields and an OR visibility condition.

    Returns:
        FormSchema: Contact form
    """
    return FormSchema(
        id="contact",
        title="Contact",
        description="Tell us about yourself",
        steps=[
            Step(
                id="about",
                title="About you",
                layout=StepLayout(columns=2),
                elements=[
                    HeaderElement(id="intro", text="Welcome"),
                    FieldElement(
                        id="name",
                        label="Name",
                        field_type=FieldType.TEXT,
                        validation=Validation(required=True, min_length=2),
                        layout=FieldLayout(col_span=6),
                    ),
                    FieldElement(
                        id="role",
                        label="Role",
                        field_type=FieldType.SELECT,
                        options=[
                            Option(label="Student", value="student"),
                            Option(label="Parent", value="parent"),
                            Option(label="Other", value="other"),
                        ],
                    ),
                ],
                next_step_condition=[
                    NavigationRule(
                        field_id="role",
                        comparison=ComparisonOp.EQUALS,
                        value="other",
                        go_to_step="details",
                    ),
                ],
                default_next_step="details",
            ),
            Step(
                id="details",
                title="Details",
                layout=StepLayout(columns=1),
                elements=[
                    FieldElement(
                        id="school",
                        label="School",
                        field_type=FieldType.TEXT,
                        visibility_condition=VisibilityCondition(
                            operator=LogicalOperator.OR,
                            conditions=[
                                Condition(field_id="role", comparison=ComparisonOp.EQUALS, value="student"),
                                Condition(field_id="role", comparison=ComparisonOp.EQUALS, value="parent"),
                            ],
                        ),
                    ),
                ],
            ),
        ],
    )
