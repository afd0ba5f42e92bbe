"""Profile Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel

from hireflow.models.profile import UserRole


class ProfileResponse(BaseModel):
    id: str
    email: str
    full_name: str | None = None
    role: UserRole
    profile_photo_url: str | None = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
