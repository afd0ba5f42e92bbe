"""Database models for Hireflow."""

from .application import Application, ApplicationStatus
from .base import Base
from .job_position import FieldType, FormField, JobPosition
from .profile import Profile, UserRole

__all__ = [
    "Base",
    "Profile",
    "UserRole",
    "JobPosition",
    "FormField",
    "FieldType",
    "Application",
    "ApplicationStatus",
]
