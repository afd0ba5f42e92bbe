"""Profile model for authenticated users."""

from enum import Enum
from typing import Optional

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin


class UserRole(str, Enum):
    ADMIN = "admin"
    APPLICANT = "applicant"


class Profile(Base, TimestampMixin):
    """A user known to the identity provider, with a role used for gating.

    The primary key is the identity provider's user id, so profiles are
    looked up directly from the authenticated subject.
    """

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False, index=True)
    full_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    role: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=UserRole.APPLICANT.value,
    )
    profile_photo_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    def __repr__(self) -> str:
        return f"<Profile(id='{self.id}', email='{self.email}', role='{self.role}')>"
