"""Request and response bodies for the evaluation API.

Bodies use the same camelCase convention as form documents.
"""

from typing import Any, Optional

from pydantic import Field

from formflow.schemas.form import FormModel, FormSchema


class SchemaValidationRequest(FormModel):
    form: FormSchema


class SchemaErrorOut(FormModel):
    code: str
    message: str
    path: str


class FlowReportOut(FormModel):
    reachable: list[str]
    unreachable: list[str]
    has_cycles: bool


class SchemaValidationResponse(FormModel):
    """Result of structural validation.

    Attributes:
        valid: True when no schema errors were found
        errors: Schema errors in document order
        flow: Navigation graph analysis
    """
    valid: bool
    errors: list[SchemaErrorOut]
    flow: FlowReportOut


class VisibilityRequest(FormModel):
    """Visibility query.

    Attributes:
        form: Form snapshot
        answers: Field id -> current answer
        step_id: Restrict element visibility to one step (all steps if unset)
    """
    form: FormSchema
    answers: dict[str, Any] = Field(default_factory=dict)
    step_id: Optional[str] = None


class VisibilityResponse(FormModel):
    visible_steps: list[str]
    visible_elements: dict[str, list[str]]


class StepRequest(FormModel):
    """Query about one step of a form."""
    form: FormSchema
    step_id: str
    answers: dict[str, Any] = Field(default_factory=dict)


class NextStepResponse(FormModel):
    """Navigation outcome.

    Attributes:
        next_step_id: Target step, None when the form is complete
        complete: True when the step has no successor
    """
    next_step_id: Optional[str] = None
    complete: bool


class ValidationFailureOut(FormModel):
    rule: str
    message: str


class StepValidationResponse(FormModel):
    valid: bool
    failures: dict[str, list[ValidationFailureOut]]
