"""Application model: one applicant's response set for one job position."""

from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin
from .job_position import JobPosition
from .profile import Profile


class ApplicationStatus(str, Enum):
    """Review status. Any value may be set from any other value."""

    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    INTERVIEW = "interview"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class Application(Base, TimestampMixin):
    """Submitted application with its answers and review status.

    Attributes:
        form_data: Tagged answer map, ``field_name -> {"type", "value"}``.
            For file fields the value is a storage reference.
        schema_snapshot: Field definitions in effect at submission time,
            used for readback so later schema edits cannot relabel answers.
    """

    __tablename__ = "applications"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4, nullable=False)

    job_position_id: Mapped[UUID] = mapped_column(
        ForeignKey("job_positions.id", ondelete="CASCADE"),
        nullable=False,
    )
    applicant_id: Mapped[str] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=ApplicationStatus.SUBMITTED.value,
    )
    profile_photo_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    form_data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    schema_snapshot: Mapped[Optional[list[dict[str, Any]]]] = mapped_column(JSON, nullable=True)

    # Relationships
    job_position: Mapped[JobPosition] = relationship(
        back_populates="applications",
        lazy="selectin",
    )
    applicant: Mapped[Profile] = relationship(lazy="selectin")

    __table_args__ = (
        UniqueConstraint(
            "job_position_id", "applicant_id", name="uq_applications_job_applicant"
        ),
        Index("idx_applications_status", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<Application(id={self.id}, job_id={self.job_position_id}, "
            f"status={self.status})>"
        )
