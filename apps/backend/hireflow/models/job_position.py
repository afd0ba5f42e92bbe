"""JobPosition and FormField models.

A job position owns an ordered list of form fields that make up its
application form. Field order 0..k-1 is always held by the baseline fields.
"""

from enum import Enum
from typing import TYPE_CHECKING, List, Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, Boolean, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin

if TYPE_CHECKING:
    from .application import Application


class FieldType(str, Enum):
    TEXT = "text"
    EMAIL = "email"
    TEL = "tel"
    NUMBER = "number"
    DATE = "date"
    TEXTAREA = "textarea"
    SELECT = "select"
    FILE = "file"


class JobPosition(Base, TimestampMixin):
    """Postable role with an attached application-form schema."""

    __tablename__ = "job_positions"

    # Primary Key - UUID
    id: Mapped[UUID] = mapped_column(
        primary_key=True,
        default=uuid4,
        nullable=False,
    )

    # Job Information
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    employment_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # Free text, parsed heuristically for range filtering
    salary_range: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_by: Mapped[Optional[str]] = mapped_column(
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # Relationships
    fields: Mapped[List["FormField"]] = relationship(
        back_populates="job_position",
        cascade="all, delete-orphan",
        order_by=lambda: [FormField.field_order, FormField.created_at],
        lazy="selectin",  # Async-friendly eager loading
    )
    applications: Mapped[List["Application"]] = relationship(
        back_populates="job_position",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<JobPosition(title='{self.title}', active={self.is_active})>"


class FormField(Base, TimestampMixin):
    """One schema-defined question on a job's application form."""

    __tablename__ = "form_fields"

    id: Mapped[UUID] = mapped_column(
        primary_key=True,
        default=uuid4,
        nullable=False,
    )

    job_position_id: Mapped[UUID] = mapped_column(
        ForeignKey("job_positions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,  # Index for faster joins
    )

    field_name: Mapped[str] = mapped_column(String(50), nullable=False)
    field_type: Mapped[str] = mapped_column(String(20), nullable=False)
    field_label: Mapped[str] = mapped_column(String(255), nullable=False)
    field_options: Mapped[Optional[list[str]]] = mapped_column(JSON, nullable=True)
    is_required: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    field_order: Mapped[int] = mapped_column(Integer, nullable=False)

    job_position: Mapped["JobPosition"] = relationship(back_populates="fields")

    __table_args__ = (
        UniqueConstraint("job_position_id", "field_name", name="uq_form_fields_job_field_name"),
    )

    def __repr__(self) -> str:
        return (
            f"<FormField(name='{self.field_name}', type='{self.field_type}', "
            f"order={self.field_order})>"
        )
