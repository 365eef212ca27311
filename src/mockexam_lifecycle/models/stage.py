"""Stage definition models — the checklist schema behind each lifecycle stage.

Each stage carries an ordered list of field definitions.  Field kinds map to
a specific input widget and a specific "is this filled in?" rule:

  - checkbox: filled when the value is truthy
  - text / textarea / date / datetime / time / number: filled when the
    value is not None and its string form is non-blank

The discriminated ``StageField`` union uses ``type`` as its discriminator so
Pydantic can deserialise YAML dicts directly into the correct variant.
"""

from __future__ import annotations

from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, Field, model_validator

from .enums import MockExamStatus


# --- Base field type ---

class BaseStageField(BaseModel):
    """Attributes shared by every field kind."""

    key: str
    label: str
    required: bool = False
    description: Optional[str] = None
    placeholder: Optional[str] = None

    def is_filled(self, value: Any) -> bool:
        """True if *value* counts as an answer for this field."""
        if value is None:
            return False
        return str(value).strip() != ""

    @property
    def input_type(self) -> str:
        """HTML input type used to render the field."""
        return "text"


# --- Field kinds ---

class CheckboxField(BaseStageField):
    """Yes/no confirmation; required checkboxes must be ticked."""

    type: Literal["checkbox"] = "checkbox"

    def is_filled(self, value: Any) -> bool:
        return bool(value)

    @property
    def input_type(self) -> str:
        return "checkbox"


class TextField(BaseStageField):
    """Single-line free text."""

    type: Literal["text"] = "text"


class TextareaField(BaseStageField):
    """Multi-line free text."""

    type: Literal["textarea"] = "textarea"


class DateField(BaseStageField):
    """Calendar date (ISO ``YYYY-MM-DD``)."""

    type: Literal["date"] = "date"

    @property
    def input_type(self) -> str:
        return "date"


class DateTimeField(BaseStageField):
    """Local date and time."""

    type: Literal["datetime"] = "datetime"

    @property
    def input_type(self) -> str:
        return "datetime-local"


class TimeField(BaseStageField):
    """Time of day."""

    type: Literal["time"] = "time"

    @property
    def input_type(self) -> str:
        return "time"


class NumberField(BaseStageField):
    """Numeric input with optional UI bounds."""

    type: Literal["number"] = "number"
    min_value: Optional[float] = None
    max_value: Optional[float] = None

    @model_validator(mode="after")
    def _chk(self):
        if (
            self.min_value is not None
            and self.max_value is not None
            and self.min_value > self.max_value
        ):
            raise ValueError("min_value must be <= max_value")
        return self

    @property
    def input_type(self) -> str:
        return "number"


StageField = Annotated[
    Union[
        CheckboxField,
        TextField,
        TextareaField,
        DateField,
        DateTimeField,
        TimeField,
        NumberField,
    ],
    Field(discriminator="type"),
]


# --- Stage definition ---

class StageDefinition(BaseModel):
    """One lifecycle stage with its checklist.

    ``notes_field_key`` names the field whose value is sent as the stage's
    free-text notes rather than as part of the requirement bag.  For the
    ``cancelled`` stage that field doubles as the cancellation reason.
    """

    status: MockExamStatus
    label: str
    description: str = ""
    fields: List[StageField] = []
    notes_field_key: Optional[str] = None
    show_instructions_setup: bool = False
    show_question_selection: bool = False
    emphasis: List[str] = []

    @model_validator(mode="after")
    def _chk(self):
        keys = [f.key for f in self.fields]
        if len(keys) != len(set(keys)):
            raise ValueError(f"Duplicate field key in stage '{self.status.value}'")
        if self.notes_field_key is not None and self.notes_field_key not in keys:
            raise ValueError(
                f"notes_field_key '{self.notes_field_key}' is not a field of "
                f"stage '{self.status.value}'"
            )
        return self

    @property
    def required_fields(self) -> List[BaseStageField]:
        """Fields that must be filled before the stage can be submitted."""
        return [f for f in self.fields if f.required]

    def get_field(self, key: str) -> BaseStageField | None:
        for f in self.fields:
            if f.key == key:
                return f
        return None
