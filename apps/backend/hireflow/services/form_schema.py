"""Form schema store.

Job positions carry an ordered list of typed form fields. This module
generates machine-safe field names from labels, validates author-supplied
field definitions, prepends the fixed baseline fields and persists the
result, along with the job lifecycle operations that own the schema.
"""

import logging
import re
from collections.abc import Sequence
from typing import Any
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from hireflow.models import Application, FieldType, FormField, JobPosition
from hireflow.schemas.form_field import FieldDef
from hireflow.schemas.job_position import JobPositionCreate, JobPositionUpdate
from hireflow.services.exceptions import (
    DuplicateFieldNameError,
    EmptyLabelError,
    NotFoundError,
    RemoteReadError,
    RemoteWriteError,
    ValidationError,
)

logger = logging.getLogger(__name__)

FIELD_NAME_MAX_LENGTH = 50

# Present on every form at orders 0..3; authors can only append after them.
BASELINE_FIELDS: tuple[FieldDef, ...] = (
    FieldDef(field_name="full_name", field_label="Full Name", field_type=FieldType.TEXT, is_required=True),
    FieldDef(field_name="email", field_label="Email", field_type=FieldType.EMAIL, is_required=True),
    FieldDef(field_name="linkedin", field_label="LinkedIn Profile", field_type=FieldType.TEXT),
    FieldDef(field_name="location", field_label="Location", field_type=FieldType.TEXT),
)

_REQUIRED_JOB_COLUMNS = frozenset({"title", "description", "is_active"})

_NON_WORD = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")


def generate_field_name(label: str) -> str:
    """Derive a machine-safe field name from a human-readable label.

    Examples:
        >>> generate_field_name("Years of Experience")
        'years_of_experience'
        >>> generate_field_name("  Portfolio URL (optional)! ")
        'portfolio_url_optional'
    """
    name = _NON_WORD.sub("", label.lower())
    name = _WHITESPACE.sub("_", name.strip())
    return name[:FIELD_NAME_MAX_LENGTH].strip("_")


def build_schema(fields: Sequence[FieldDef]) -> list[FieldDef]:
    """Validate author fields and return the complete ordered schema.

    Baseline fields come first; the author's fields follow in their requested
    order (ties keep submission order). Orders are renumbered from 0.

    Raises:
        ValidationError: On an empty label, a duplicate generated name, or a
            select field without options
    """
    taken = {field.field_name for field in BASELINE_FIELDS}

    # Unordered fields sort at their submission position
    positioned = sorted(
        enumerate(fields),
        key=lambda item: item[1].field_order if item[1].field_order is not None else item[0],
    )

    custom: list[FieldDef] = []
    for position, field in positioned:
        label = field.field_label.strip()
        if not label:
            raise EmptyLabelError(f"Field {position + 1} needs a label")

        name = generate_field_name(label)
        if not name:
            raise ValidationError(
                f"Field label '{label}' must contain letters or digits"
            )
        if name in taken:
            raise DuplicateFieldNameError(name)
        taken.add(name)

        options: list[str] | None = None
        if field.field_type == FieldType.SELECT:
            options = [option.strip() for option in field.field_options if option.strip()]
            if not options:
                raise ValidationError(f"Dropdown field '{label}' needs at least one option")

        custom.append(
            FieldDef(
                field_name=name,
                field_label=label,
                field_type=field.field_type,
                field_options=options or [],
                is_required=field.is_required,
            )
        )

    return [
        field.model_copy(update={"field_order": order})
        for order, field in enumerate([*BASELINE_FIELDS, *custom])
    ]


def snapshot_schema(fields: Sequence[FormField]) -> list[dict[str, Any]]:
    """Serialize stored fields into the JSON snapshot kept on applications."""
    return [
        {
            "field_name": field.field_name,
            "field_type": field.field_type,
            "field_label": field.field_label,
            "field_options": field.field_options or [],
            "is_required": field.is_required,
            "field_order": field.field_order,
        }
        for field in fields
    ]


async def create_schema(
    db: AsyncSession,
    job_id: UUID,
    fields: Sequence[FieldDef],
) -> list[FormField]:
    """Persist the form schema for a job, replacing any previous one.

    The schema can only be replaced while no application references the job.
    The caller commits.

    Raises:
        ValidationError: Invalid field definitions or the job already has
            applications
    """
    schema = build_schema(fields)

    has_applications = await db.scalar(
        select(Application.id).where(Application.job_position_id == job_id).limit(1)
    )
    if has_applications is not None:
        raise ValidationError("Form fields cannot change once applications exist")

    existing = await db.execute(select(FormField).where(FormField.job_position_id == job_id))
    stale = existing.scalars().all()
    for field in stale:
        await db.delete(field)
    if stale:
        await db.flush()

    records = [
        FormField(
            job_position_id=job_id,
            field_name=field.field_name,
            field_type=field.field_type.value,
            field_label=field.field_label,
            field_options=field.field_options if field.field_type == FieldType.SELECT else None,
            is_required=field.is_required,
            field_order=field.field_order,
        )
        for field in schema
    ]
    db.add_all(records)
    await db.flush()

    logger.info(f"Stored {len(records)} form fields for job {job_id}")
    return records


async def create_job(
    db: AsyncSession,
    creator_id: str,
    job_data: JobPositionCreate,
) -> JobPosition:
    """Create a job position and its form schema in one transaction.

    Raises:
        ValidationError: Invalid field definitions (nothing is written)
        RemoteWriteError: Database rejected the insert
    """
    # Validate before touching the session so a bad schema writes nothing
    build_schema(job_data.fields)

    try:
        job = JobPosition(
            title=job_data.title,
            description=job_data.description,
            location=job_data.location or None,
            employment_type=job_data.employment_type or None,
            salary_range=job_data.salary_range or None,
            is_active=job_data.is_active,
            created_by=creator_id,
        )
        db.add(job)
        await db.flush()

        await create_schema(db, job.id, job_data.fields)
        await db.commit()

    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to create job: {e}")
        raise RemoteWriteError(f"Failed to create job: {str(e)}")

    logger.info(f"Created job {job.id}: {job.title}")
    return await get_job(db, job.id)


async def get_job(db: AsyncSession, job_id: UUID) -> JobPosition:
    """Fetch a job with its fields loaded.

    Raises:
        NotFoundError: Job does not exist
        RemoteReadError: Database fetch failed
    """
    try:
        result = await db.execute(
            select(JobPosition)
            .where(JobPosition.id == job_id)
            .options(selectinload(JobPosition.fields))
            .execution_options(populate_existing=True)
        )
        job = result.scalar_one_or_none()
    except SQLAlchemyError as e:
        logger.error(f"Failed to fetch job {job_id}: {e}")
        raise RemoteReadError(f"Failed to load job: {str(e)}")

    if job is None:
        raise NotFoundError(f"Job {job_id} not found")
    return job


async def get_schema(db: AsyncSession, job_id: UUID) -> list[FormField]:
    """Return a job's fields ordered by field_order, ties by insertion.

    Raises:
        NotFoundError: Job does not exist
    """
    job = await get_job(db, job_id)
    return sorted(job.fields, key=lambda field: (field.field_order, field.created_at))


async def list_jobs(db: AsyncSession, active_only: bool = False) -> list[JobPosition]:
    """List jobs newest first; applicants only ever see active ones."""
    query = select(JobPosition).order_by(JobPosition.created_at.desc())
    if active_only:
        query = query.where(JobPosition.is_active.is_(True))

    try:
        result = await db.execute(query)
    except SQLAlchemyError as e:
        logger.error(f"Failed to list jobs: {e}")
        raise RemoteReadError(f"Failed to load jobs: {str(e)}")
    return list(result.scalars().all())


async def update_job(
    db: AsyncSession,
    job_id: UUID,
    changes: JobPositionUpdate,
) -> JobPosition:
    """Apply a partial update to job metadata, including is_active."""
    job = await get_job(db, job_id)

    for key, value in changes.model_dump(exclude_unset=True).items():
        if value is None and key in _REQUIRED_JOB_COLUMNS:
            continue
        # Blank optional text clears the column
        if isinstance(value, str) and not value.strip() and key not in _REQUIRED_JOB_COLUMNS:
            value = None
        setattr(job, key, value)

    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to update job {job_id}: {e}")
        raise RemoteWriteError(f"Failed to update job: {str(e)}")

    logger.info(f"Updated job {job_id}")
    return job


async def delete_job(db: AsyncSession, job_id: UUID) -> None:
    """Delete a job, cascading to its fields and applications.

    Raises:
        NotFoundError: Job does not exist
        RemoteWriteError: Database rejected the delete
    """
    job = await get_job(db, job_id)

    try:
        # Applications are not loaded with the job; remove them in bulk
        await db.execute(delete(Application).where(Application.job_position_id == job_id))
        await db.delete(job)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to delete job {job_id}: {e}")
        raise RemoteWriteError(f"Failed to delete job: {str(e)}")

    logger.info(f"Deleted job {job_id}")
