"""Pydantic schemas for multi-step form documents.

This module defines the structure of a form document: steps, the elements
inside them, validation rules, visibility conditions and navigation rules.
JSON documents use camelCase keys; Python attributes are snake_case.

Numeric layout settings (columns, colSpan) are not range-checked here; a
half-edited form may hold any value. Structural problems are reported by
``formflow.services.schema_validator``.
"""

from enum import Enum
from typing import Annotated, Iterator, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class FieldType(str, Enum):
    """Input widget types a field can collect answers with."""
    TEXT = "text"
    NUMBER = "number"
    EMAIL = "email"
    DATE = "date"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    SELECT = "select"
    TEXTAREA = "textarea"
    FILE = "file"
    IMAGE = "image"
    SIGNATURE = "signature"
    RICHTEXT = "richtext"


class ElementType(str, Enum):
    """Discriminator values for step elements."""
    FIELD = "field"
    HEADER = "header"
    TEXT = "text"
    QUOTE = "quote"


class ComparisonOp(str, Enum):
    """Comparison operators usable in conditions and navigation rules."""
    EQUALS = "equals"
    NOT_EQUALS = "notEquals"
    GREATER_THAN = "greaterThan"
    LESS_THAN = "lessThan"
    INCLUDES = "includes"


class LogicalOperator(str, Enum):
    """How the comparisons of a visibility condition are combined."""
    AND = "AND"
    OR = "OR"
    NOT = "NOT"


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"


# Condition values keep their JSON type (string, number or boolean)
ConditionValue = Union[bool, int, float, str]


class FormModel(BaseModel):
    """Base model for all form document parts.

    Snapshots are frozen: editing always produces a new copy.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class Option(FormModel):
    """A selectable option for radio/select fields.

    Attributes:
        label: Text shown to the respondent
        value: Value stored in the answer map
    """
    label: str
    value: str


class Validation(FormModel):
    """Validation rules for a field. Absent rules impose no constraint.

    Attributes:
        required: Field must have a non-empty answer
        min_length: Minimum string length
        max_length: Maximum string length
        min: Minimum numeric value (number fields only)
        max: Maximum numeric value (number fields only)
        pattern: Regular expression source the answer must match
        custom: Expression handed to a host-supplied rule evaluator
    """
    required: Optional[bool] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    min: Optional[Union[int, float]] = None
    max: Optional[Union[int, float]] = None
    pattern: Optional[str] = None
    custom: Optional[str] = None


class Condition(FormModel):
    """A single comparison between an answer and a fixed value."""
    field_id: str
    comparison: ComparisonOp
    value: ConditionValue


class VisibilityCondition(FormModel):
    """Boolean combination of conditions controlling visibility.

    ``NOT`` negates the AND of all conditions rather than each one.
    """
    operator: LogicalOperator
    conditions: list[Condition] = Field(default_factory=list)


class NavigationRule(FormModel):
    """Jump to ``go_to_step`` when the comparison holds.

    Rules are evaluated in authored order; the first match wins.
    """
    field_id: str
    comparison: ComparisonOp
    value: ConditionValue
    go_to_step: str


class DataSourceMapping(FormModel):
    label_field: str
    value_field: str


class DataSource(FormModel):
    """Remote source for field options.

    The engine never fetches ``url`` itself; a collaborator does and hands the
    records to ``formflow.services.validation.resolve_options``.
    """
    url: str
    method: HttpMethod = HttpMethod.GET
    headers: Optional[dict[str, str]] = None
    mapping: DataSourceMapping


class FieldLayout(FormModel):
    col_span: int


class StepLayout(FormModel):
    columns: int = 1


class FieldElement(FormModel):
    """An element that collects an answer from the respondent."""
    id: str
    type: Literal["field"] = "field"
    label: str
    tooltip: Optional[str] = None
    field_type: FieldType
    validation: Optional[Validation] = None
    visibility_condition: Optional[VisibilityCondition] = None
    data_source: Optional[DataSource] = None
    layout: Optional[FieldLayout] = None
    options: Optional[list[Option]] = None

    @property
    def is_numeric(self) -> bool:
        return self.field_type == FieldType.NUMBER


class HeaderElement(FormModel):
    id: str
    type: Literal["header"] = "header"
    text: str


class TextElement(FormModel):
    id: str
    type: Literal["text"] = "text"
    text: str


class QuoteElement(FormModel):
    id: str
    type: Literal["quote"] = "quote"
    text: str


Element = Annotated[
    Union[FieldElement, HeaderElement, TextElement, QuoteElement],
    Field(discriminator="type"),
]


class Step(FormModel):
    """A single page of the form.

    Attributes:
        id: Step identifier, unique within the form
        title: Step heading
        description: Optional step description
        layout: Grid layout for the step's elements
        elements: Ordered elements rendered on this step
        next_step_condition: Ordered navigation rules (first match wins)
        default_next_step: Step to go to when no rule matches
        visibility_condition: Controls whether the step is shown
    """
    id: str
    title: str
    description: Optional[str] = None
    layout: StepLayout = Field(default_factory=StepLayout)
    elements: list[Element] = Field(default_factory=list)
    next_step_condition: Optional[list[NavigationRule]] = None
    default_next_step: Optional[str] = None
    visibility_condition: Optional[VisibilityCondition] = None

    @property
    def fields(self) -> list[FieldElement]:
        """Field elements of this step in authored order."""
        return [el for el in self.elements if isinstance(el, FieldElement)]

    def get_element(self, element_id: str):
        for element in self.elements:
            if element.id == element_id:
                return element
        return None


class FormSchema(FormModel):
    """Complete form document.

    Root schema for form JSON documents.
    """
    id: str
    title: str
    description: Optional[str] = None
    steps: list[Step] = Field(default_factory=list)

    @property
    def first_step(self) -> Optional[Step]:
        return self.steps[0] if self.steps else None

    def get_step(self, step_id: str) -> Optional[Step]:
        """Get step by ID.

        Args:
            step_id: Step identifier

        Returns:
            Step if found, None otherwise
        """
        for step in self.steps:
            if step.id == step_id:
                return step
        return None

    def iter_fields(self) -> Iterator[FieldElement]:
        """Yield every field element across all steps, in order."""
        for step in self.steps:
            yield from step.fields

    def find_field(self, field_id: str) -> Optional[FieldElement]:
        """Find a field anywhere in the form (lookups are not step-scoped)."""
        for field in self.iter_fields():
            if field.id == field_id:
                return field
        return None

    def field_types(self) -> dict[str, FieldType]:
        """Map of field id to declared field type, used for coercion."""
        return {field.id: field.field_type for field in self.iter_fields()}
