"""Unit tests for copy-on-write form editing."""

import pytest

from formflow.schemas.form import (
    ElementType,
    FieldElement,
    FieldType,
    HeaderElement,
    QuoteElement,
)
from formflow.services import form_editor
from formflow.services.form_editor import FormEditError
from formflow.services.schema_validator import validate_schema


class TestNewForm:

    def test_new_form_has_one_step(self):
        form = form_editor.new_form("Signup")
        assert form.title == "Signup"
        assert len(form.steps) == 1
        assert form.id.startswith("form-")
        assert form.steps[0].id.startswith("step-")
        assert validate_schema(form) == []

    def test_default_elements(self):
        field = form_editor.new_element(ElementType.FIELD)
        assert isinstance(field, FieldElement)
        assert field.field_type == FieldType.TEXT
        assert field.validation.required is False
        assert field.id.startswith("element-")

        quote = form_editor.new_element("quote")
        assert isinstance(quote, QuoteElement)
        assert quote.text == form_editor.DEFAULT_BLOCK_TEXT


class TestStepEdits:
    """Tests for step-level edits."""

    def test_add_step(self, sample_form):
        edited = form_editor.add_step(sample_form)
        assert len(edited.steps) == 3
        assert edited.steps[2].title == "Step 3"
        assert edited.steps[2].layout.columns == 1
        assert len(sample_form.steps) == 2

    def test_remove_step(self, sample_form):
        edited = form_editor.remove_step(sample_form, 1)
        assert [s.id for s in edited.steps] == ["about"]
        assert [s.id for s in sample_form.steps] == ["about", "details"]

    def test_cannot_remove_last_step(self, sample_form):
        single = form_editor.remove_step(sample_form, 1)
        with pytest.raises(FormEditError):
            form_editor.remove_step(single, 0)

    def test_bad_step_index(self, sample_form):
        with pytest.raises(FormEditError):
            form_editor.remove_step(sample_form, 5)

    def test_replace_step(self, sample_form):
        details = sample_form.steps[1].model_copy(update={"title": "More"})
        edited = form_editor.replace_step(sample_form, details)
        assert edited.get_step("details").title == "More"
        assert sample_form.get_step("details").title == "Details"

    def test_replace_unknown_step(self, sample_form):
        ghost = sample_form.steps[1].model_copy(update={"id": "ghost"})
        with pytest.raises(FormEditError):
            form_editor.replace_step(sample_form, ghost)


class TestElementEdits:
    """Tests for element-level edits."""

    def test_add_element_by_type(self, sample_form):
        edited = form_editor.add_element(sample_form, 1, ElementType.HEADER)
        assert isinstance(edited.steps[1].elements[-1], HeaderElement)
        assert len(sample_form.steps[1].elements) == 1

    def test_add_element_model(self, sample_form):
        element = HeaderElement(id="title", text="Hi")
        edited = form_editor.add_element(sample_form, 0, element)
        assert edited.steps[0].elements[-1] is element

    def test_remove_element(self, sample_form):
        edited = form_editor.remove_element(sample_form, 0, "intro")
        assert [el.id for el in edited.steps[0].elements] == ["name", "role"]

    def test_remove_unknown_element(self, sample_form):
        with pytest.raises(FormEditError):
            form_editor.remove_element(sample_form, 0, "ghost")

    def test_replace_element(self, sample_form):
        name = sample_form.steps[0].get_element("name").model_copy(update={"label": "Full name"})
        edited = form_editor.replace_element(sample_form, 0, name)
        assert edited.steps[0].get_element("name").label == "Full name"
        assert sample_form.steps[0].get_element("name").label == "Name"

    def test_move_element(self, sample_form):
        edited = form_editor.move_element(sample_form, 0, 0, 2)
        assert [el.id for el in edited.steps[0].elements] == ["name", "role", "intro"]
        assert [el.id for el in sample_form.steps[0].elements] == ["intro", "name", "role"]

    def test_move_out_of_range(self, sample_form):
        with pytest.raises(FormEditError):
            form_editor.move_element(sample_form, 0, 0, 3)
