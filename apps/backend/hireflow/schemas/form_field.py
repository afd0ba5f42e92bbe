"""Form schema Pydantic models.

Covers field definitions as authored by admins, field records as stored,
the rendering contract handed to clients, and the tagged answer values
stored in an application's form data.
"""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from hireflow.models.job_position import FieldType


class FieldDef(BaseModel):
    """Field definition supplied when a job's form is created.

    ``field_name`` is optional on input: it is always regenerated from the
    label by the schema store.
    """

    field_label: str = Field(..., max_length=255)
    field_type: FieldType = FieldType.TEXT
    field_options: list[str] = Field(default_factory=list)
    is_required: bool = False
    field_order: int | None = Field(None, ge=0)
    field_name: str | None = Field(None, max_length=50)

    @field_validator("field_options", mode="before")
    @classmethod
    def options_default_empty(cls, value):
        # Stored rows keep NULL options for non-select fields
        return [] if value is None else value


class FormFieldResponse(BaseModel):
    """Schema for a stored form field."""

    id: UUID
    job_position_id: UUID
    field_name: str
    field_type: FieldType
    field_label: str
    field_options: list[str] | None = None
    is_required: bool
    field_order: int
    created_at: datetime

    class Config:
        from_attributes = True


class InputSpec(BaseModel):
    """Editable-input description for one field of an application form."""

    field_name: str
    label: str
    field_type: FieldType
    widget: Literal["input", "textarea", "select", "file"]
    input_type: str | None = Field(None, description="Semantic input type for single-line inputs")
    required: bool
    choices: list[str] | None = None
    rows: int | None = Field(None, description="Visual height hint for multi-line inputs")
    uploads: bool = Field(False, description="Answer value is an upload reference, not raw file data")


class FieldAnswer(BaseModel):
    """One tagged answer: the declared field type and the answer value."""

    type: FieldType
    value: str
