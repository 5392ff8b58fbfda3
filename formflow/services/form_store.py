"""In-memory application state for the form editor.

``FormState`` is an immutable snapshot of "all forms" plus the "current
form". Every operation on ``FormStore`` replaces the snapshot with a new one,
so an evaluation holding an older form is never affected by later edits.
The store does not persist anything.
"""

from dataclasses import dataclass, replace
from typing import Optional

from formflow.schemas.form import FormSchema
from formflow.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class FormState:
    """Snapshot of editor state.

    Attributes:
        forms: All forms, in insertion order
        current_form: Form currently open in the editor
    """
    forms: tuple[FormSchema, ...] = ()
    current_form: Optional[FormSchema] = None


class FormStore:
    """Holds the editor's current ``FormState`` snapshot."""

    def __init__(self, state: Optional[FormState] = None):
        self._state = state or FormState()

    @property
    def state(self) -> FormState:
        return self._state

    @property
    def forms(self) -> tuple[FormSchema, ...]:
        return self._state.forms

    @property
    def current_form(self) -> Optional[FormSchema]:
        return self._state.current_form

    def get_form(self, form_id: str) -> Optional[FormSchema]:
        for form in self._state.forms:
            if form.id == form_id:
                return form
        return None

    def set_current_form(self, form: FormSchema) -> FormState:
        """Open a form in the editor without adding it to the collection."""
        self._state = replace(self._state, current_form=form)
        return self._state

    def add_form(self, form: FormSchema) -> FormState:
        """Append a form to the collection."""
        self._state = replace(self._state, forms=self._state.forms + (form,))
        logger.info(f"Added form {form.id}", extra={"form_id": form.id})
        return self._state

    def update_form(self, form: FormSchema) -> FormState:
        """Replace the form with the same id (or append it) and make it current.

        Args:
            form: New snapshot of the form

        Returns:
            The new state
        """
        if self.get_form(form.id) is not None:
            forms = tuple(form if f.id == form.id else f for f in self._state.forms)
        else:
            forms = self._state.forms + (form,)

        self._state = FormState(forms=forms, current_form=form)
        logger.debug(f"Updated form {form.id}", extra={"form_id": form.id})
        return self._state

    def delete_form(self, form_id: str) -> FormState:
        """Remove a form; clears the current form if it was the one removed."""
        forms = tuple(f for f in self._state.forms if f.id != form_id)
        current = self._state.current_form
        if current is not None and current.id == form_id:
            current = None

        self._state = FormState(forms=forms, current_form=current)
        logger.info(f"Deleted form {form_id}", extra={"form_id": form_id})
        return self._state

    def load_form(self, form_id: str) -> FormState:
        """Make a stored form the current form.

        An unknown id leaves no form open (current form becomes None).
        """
        form = self.get_form(form_id)
        if form is None:
            logger.warning(f"Unknown form {form_id}; no form is open", extra={"form_id": form_id})

        self._state = replace(self._state, current_form=form)
        return self._state
