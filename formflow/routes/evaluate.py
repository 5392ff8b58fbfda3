"""Evaluation endpoints for form renderers and editors.

Each endpoint receives a complete form snapshot plus an answer map and runs
one of the pure evaluators. Configuration errors in the form (unknown
operators, malformed patterns, failing custom rules) are returned as 422.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from formflow.config import get_settings
from formflow.schemas.api import (
    FlowReportOut,
    NextStepResponse,
    SchemaErrorOut,
    SchemaValidationRequest,
    SchemaValidationResponse,
    StepRequest,
    StepValidationResponse,
    ValidationFailureOut,
    VisibilityRequest,
    VisibilityResponse,
)
from formflow.schemas.form import FormSchema, Step
from formflow.services.comparison import EvaluationError
from formflow.services.custom_rules import CustomRuleEvaluator, SimpleEvalRuleEvaluator
from formflow.services.navigation import NoNextStep, resolve_next_step
from formflow.services.schema_validator import analyze_flow, validate_schema
from formflow.services.validation import validate_step
from formflow.services.visibility import visible_elements, visible_steps
from formflow.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter()


def get_custom_evaluator() -> Optional[CustomRuleEvaluator]:
    """Custom rule evaluator for this deployment (None when disabled)."""
    if get_settings().custom_rules_enabled:
        return SimpleEvalRuleEvaluator()
    return None


def _get_step(form: FormSchema, step_id: str) -> Step:
    step = form.get_step(step_id)
    if step is None:
        logger.warning(f"Unknown step {step_id}", extra={"form_id": form.id})
        raise HTTPException(status_code=404, detail=f"Step '{step_id}' not found")
    return step


def _evaluation_failed(form: FormSchema, error: EvaluationError) -> HTTPException:
    logger.error(f"Evaluation error: {error}", extra={"form_id": form.id})
    return HTTPException(status_code=422, detail=str(error))


@router.post("/schema/validate", response_model=SchemaValidationResponse)
async def validate_form_schema(request: SchemaValidationRequest) -> SchemaValidationResponse:
    """Report structural problems and navigation graph analysis for a form.

    Example response:
        {
            "valid": false,
            "errors": [{"code": "dangling_step_reference", ...}],
            "flow": {"reachable": ["s1"], "unreachable": [], "hasCycles": false}
        }
    """
    errors = validate_schema(request.form)
    flow = analyze_flow(request.form)
    return SchemaValidationResponse(
        valid=not errors,
        errors=[SchemaErrorOut(code=e.code, message=e.message, path=e.path) for e in errors],
        flow=FlowReportOut(
            reachable=sorted(flow.reachable),
            unreachable=sorted(flow.unreachable),
            has_cycles=flow.has_cycles,
        ),
    )


@router.post("/evaluate/visibility", response_model=VisibilityResponse)
async def evaluate_visibility(request: VisibilityRequest) -> VisibilityResponse:
    """Visible step ids and, per step, visible element ids."""
    form = request.form
    field_types = form.field_types()
    steps = [_get_step(form, request.step_id)] if request.step_id else form.steps

    try:
        shown_steps = [step.id for step in visible_steps(form, request.answers)]
        elements = {
            step.id: [el.id for el in visible_elements(step, request.answers, field_types)]
            for step in steps
        }
    except EvaluationError as e:
        raise _evaluation_failed(form, e)

    return VisibilityResponse(visible_steps=shown_steps, visible_elements=elements)


@router.post("/evaluate/next-step", response_model=NextStepResponse)
async def evaluate_next_step(request: StepRequest) -> NextStepResponse:
    """Resolve the step that follows ``stepId`` for the given answers."""
    form = request.form
    step = _get_step(form, request.step_id)

    try:
        result = resolve_next_step(step, request.answers, form.field_types())
    except EvaluationError as e:
        raise _evaluation_failed(form, e)

    if isinstance(result, NoNextStep):
        return NextStepResponse(next_step_id=None, complete=True)
    return NextStepResponse(next_step_id=result, complete=False)


@router.post("/evaluate/validate", response_model=StepValidationResponse)
async def evaluate_step_validation(
    request: StepRequest,
    custom_evaluator: Optional[CustomRuleEvaluator] = Depends(get_custom_evaluator)
) -> StepValidationResponse:
    """Validate the visible fields of ``stepId`` against their rules."""
    form = request.form
    step = _get_step(form, request.step_id)

    try:
        results = validate_step(step, request.answers, form, custom_evaluator)
    except EvaluationError as e:
        raise _evaluation_failed(form, e)

    return StepValidationResponse(
        valid=not results,
        failures={
            field_id: [ValidationFailureOut(rule=f.rule, message=f.message) for f in failures]
            for field_id, failures in results.items()
        },
    )
