"""Application Pydantic schemas."""

from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, Field

from hireflow.models.application import ApplicationStatus
from hireflow.models.job_position import FieldType
from hireflow.schemas.job_position import JobPositionResponse
from hireflow.schemas.profile import ProfileResponse


class ApplicationSubmit(BaseModel):
    """Schema for submitting an application.

    ``answers`` maps field_name to the raw answer; file answers carry the
    reference returned by the upload endpoint. ``pending_uploads`` lists the
    file fields the client is still uploading.
    """

    answers: dict[str, str | None] = Field(default_factory=dict)
    profile_photo_url: str | None = Field(
        None, description="Data URL from the webcam widget or an uploaded asset URL"
    )
    pending_uploads: list[str] = Field(default_factory=list)


class StatusUpdate(BaseModel):
    status: ApplicationStatus


class ApplicationResponse(BaseModel):
    """Schema for an application record."""

    id: UUID
    job_position_id: UUID
    applicant_id: str
    status: ApplicationStatus
    profile_photo_url: str | None = None
    form_data: dict[str, Any]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ApplicationWithJobResponse(ApplicationResponse):
    """Application with its job position, as listed to the applicant."""

    job_position: JobPositionResponse


class ApplicationWithDetailsResponse(ApplicationWithJobResponse):
    """Application with job and applicant, as listed to admins."""

    applicant: ProfileResponse


class LabeledResponse(BaseModel):
    """One answer rejoined to its field definition for display."""

    field_name: str
    label: str
    field_type: FieldType | None = None
    kind: Literal["text", "file"] = "text"
    value: str
    signed_url: str | None = None
    link_error: str | None = None


class ApplicationDetailResponse(ApplicationWithDetailsResponse):
    """Application with labeled answers for reviewers."""

    status_label: str
    responses: list[LabeledResponse]


class ApplicationListResponse(BaseModel):
    total: int
    page: int
    page_size: int
    total_pages: int
    applications: list[ApplicationWithDetailsResponse]
    locations: list[str] = Field(default_factory=list)
    employment_types: list[str] = Field(default_factory=list)


class MyApplicationListResponse(BaseModel):
    total: int
    page: int
    page_size: int
    total_pages: int
    applications: list[ApplicationWithJobResponse]


class UploadResponse(BaseModel):
    field_name: str
    reference: str
