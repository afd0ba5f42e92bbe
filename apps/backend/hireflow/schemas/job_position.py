"""Job position Pydantic schemas.

Request and response schemas for job endpoints, including the paginated,
filterable job list.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from hireflow.schemas.form_field import FieldDef, FormFieldResponse


class JobPositionCreate(BaseModel):
    """Schema for creating a job position together with its form fields."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    location: str | None = Field(None, max_length=255)
    employment_type: str | None = Field(None, max_length=100)
    salary_range: str | None = Field(None, max_length=255)
    is_active: bool = True
    fields: list[FieldDef] = Field(
        default_factory=list,
        description="Custom fields appended after the baseline fields",
    )


class JobPositionUpdate(BaseModel):
    """Partial update of job metadata. Form fields are not editable."""

    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, min_length=1)
    location: str | None = Field(None, max_length=255)
    employment_type: str | None = Field(None, max_length=100)
    salary_range: str | None = Field(None, max_length=255)
    is_active: bool | None = None


class JobPositionResponse(BaseModel):
    """Schema for job response without its form fields."""

    id: UUID
    title: str
    description: str
    location: str | None = None
    employment_type: str | None = None
    salary_range: str | None = None
    is_active: bool
    created_by: str | None = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class JobPositionDetailResponse(JobPositionResponse):
    """Job response including the ordered form schema."""

    fields: list[FormFieldResponse] = Field(default_factory=list)


class JobListResponse(BaseModel):
    """Schema for paginated, filtered job list response."""

    total: int
    page: int
    page_size: int
    total_pages: int
    jobs: list[JobPositionResponse]
    locations: list[str] = Field(
        default_factory=list,
        description="Distinct locations in the unfiltered list",
    )
    employment_types: list[str] = Field(
        default_factory=list,
        description="Distinct employment types in the unfiltered list",
    )
