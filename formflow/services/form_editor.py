"""Copy-on-write editing operations for form documents.

Every function takes a form snapshot and returns a new one; the input is
never modified.
"""

import uuid
from typing import Optional

from formflow.schemas.form import (
    ElementType,
    FieldElement,
    FieldType,
    FormSchema,
    HeaderElement,
    QuoteElement,
    Step,
    StepLayout,
    TextElement,
    Validation,
)
from formflow.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_BLOCK_TEXT = "New Text"
DEFAULT_FIELD_LABEL = "New Field"


class FormEditError(Exception):
    """Raised when an edit cannot be applied to the form."""
    pass


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex}"


def new_form(title: str = "Untitled Form", description: Optional[str] = None) -> FormSchema:
    """Create a form with a single empty step."""
    return FormSchema(
        id=_new_id("form"),
        title=title,
        description=description,
        steps=[Step(id=_new_id("step"), title="Step 1", layout=StepLayout(columns=1))],
    )


def new_element(element_type: ElementType):
    """Create a default element of the given type.

    Fields start as optional text inputs; other blocks start with placeholder
    text.
    """
    element_id = _new_id("element")
    match ElementType(element_type):
        case ElementType.FIELD:
            return FieldElement(
                id=element_id,
                label=DEFAULT_FIELD_LABEL,
                field_type=FieldType.TEXT,
                validation=Validation(required=False),
            )
        case ElementType.HEADER:
            return HeaderElement(id=element_id, text=DEFAULT_BLOCK_TEXT)
        case ElementType.TEXT:
            return TextElement(id=element_id, text=DEFAULT_BLOCK_TEXT)
        case ElementType.QUOTE:
            return QuoteElement(id=element_id, text=DEFAULT_BLOCK_TEXT)


def _step_index(form: FormSchema, index: int) -> int:
    if not 0 <= index < len(form.steps):
        raise FormEditError(f"Step index {index} out of range for form '{form.id}'")
    return index


def _with_step(form: FormSchema, index: int, step: Step) -> FormSchema:
    steps = list(form.steps)
    steps[index] = step
    return form.model_copy(update={"steps": steps})


def add_step(form: FormSchema, title: Optional[str] = None) -> FormSchema:
    """Append an empty one-column step titled "Step N"."""
    step = Step(
        id=_new_id("step"),
        title=title or f"Step {len(form.steps) + 1}",
        description="",
        layout=StepLayout(columns=1),
    )
    logger.debug(f"Adding step {step.id}", extra={"form_id": form.id})
    return form.model_copy(update={"steps": [*form.steps, step]})


def remove_step(form: FormSchema, index: int) -> FormSchema:
    """Remove the step at ``index``.

    Raises:
        FormEditError: If the index is out of range or it is the last step
    """
    _step_index(form, index)
    if len(form.steps) <= 1:
        raise FormEditError("A form must keep at least one step")
    steps = [step for i, step in enumerate(form.steps) if i != index]
    return form.model_copy(update={"steps": steps})


def replace_step(form: FormSchema, step: Step) -> FormSchema:
    """Replace the step with the same id.

    Raises:
        FormEditError: If the form has no step with that id
    """
    for index, existing in enumerate(form.steps):
        if existing.id == step.id:
            return _with_step(form, index, step)
    raise FormEditError(f"Step '{step.id}' not found in form '{form.id}'")


def add_element(form: FormSchema, step_index: int, element) -> FormSchema:
    """Append an element to the step at ``step_index``.

    ``element`` may be an element model or an ``ElementType`` for a default
    element.
    """
    _step_index(form, step_index)
    if isinstance(element, (str, ElementType)):
        element = new_element(element)
    step = form.steps[step_index]
    updated = step.model_copy(update={"elements": [*step.elements, element]})
    return _with_step(form, step_index, updated)


def remove_element(form: FormSchema, step_index: int, element_id: str) -> FormSchema:
    """Remove an element by id from the step at ``step_index``."""
    _step_index(form, step_index)
    step = form.steps[step_index]
    elements = [el for el in step.elements if el.id != element_id]
    if len(elements) == len(step.elements):
        raise FormEditError(f"Element '{element_id}' not found in step '{step.id}'")
    return _with_step(form, step_index, step.model_copy(update={"elements": elements}))


def replace_element(form: FormSchema, step_index: int, element) -> FormSchema:
    """Replace the element with the same id in the step at ``step_index``."""
    _step_index(form, step_index)
    step = form.steps[step_index]
    elements = list(step.elements)
    for index, existing in enumerate(elements):
        if existing.id == element.id:
            elements[index] = element
            return _with_step(form, step_index, step.model_copy(update={"elements": elements}))
    raise FormEditError(f"Element '{element.id}' not found in step '{step.id}'")


def move_element(form: FormSchema, step_index: int, source: int, destination: int) -> FormSchema:
    """Move an element within a step, as a drag-and-drop reorder does."""
    _step_index(form, step_index)
    step = form.steps[step_index]
    elements = list(step.elements)
    if not 0 <= source < len(elements) or not 0 <= destination < len(elements):
        raise FormEditError(
            f"Cannot move element {source} -> {destination} in step '{step.id}' "
            f"with {len(elements)} elements"
        )
    moved = elements.pop(source)
    elements.insert(destination, moved)
    return _with_step(form, step_index, step.model_copy(update={"elements": elements}))
