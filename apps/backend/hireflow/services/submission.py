"""Application submission service.

Validates an applicant's answers against the job's form schema and persists
them as a tagged answer map together with a snapshot of the schema in
effect at submission time.
"""

import logging
import re
from collections.abc import Iterable, Mapping, Sequence
from uuid import UUID

from dateutil import parser as date_parser
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hireflow.models import Application, ApplicationStatus, FieldType, FormField
from hireflow.schemas.form_field import FieldAnswer
from hireflow.services.exceptions import (
    DuplicateApplicationError,
    MissingRequiredFieldError,
    RemoteReadError,
    RemoteWriteError,
    UploadInProgressError,
    ValidationError,
)
from hireflow.services.form_schema import get_schema, snapshot_schema
from hireflow.services.renderer import FieldLike, FormDraft

logger = logging.getLogger(__name__)

_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_PHONE = re.compile(r"^[0-9+()\-.\s]{3,}$")
_NUMBER = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")

Answer = FieldAnswer | str | None


def _answer_value(answer: Answer) -> str:
    if answer is None:
        return ""
    if isinstance(answer, FieldAnswer):
        return answer.value
    return str(answer)


def check_required_fields(schema: Sequence[FieldLike], responses: Mapping[str, Answer]) -> None:
    """Raise for the first required field (in schema order) left empty."""
    for field in schema:
        if field.is_required and not _answer_value(responses.get(field.field_name)).strip():
            raise MissingRequiredFieldError(field.field_name, field.field_label)


def _check_value(field: FieldLike, value: str) -> None:
    field_type = FieldType(field.field_type)
    label = field.field_label

    if field_type == FieldType.EMAIL and not _EMAIL.match(value):
        raise ValidationError(f"{label} must be a valid email address")

    if field_type == FieldType.TEL and not _PHONE.match(value):
        raise ValidationError(f"{label} must be a valid phone number")

    if field_type == FieldType.NUMBER and not _NUMBER.match(value):
        raise ValidationError(f"{label} must be a number")

    if field_type == FieldType.DATE:
        try:
            date_parser.isoparse(value)
        except ValueError:
            raise ValidationError(f"{label} must be a date (YYYY-MM-DD)")

    if field_type == FieldType.SELECT and value not in (field.field_options or []):
        raise ValidationError(f"{label} must be one of: {', '.join(field.field_options or [])}")


def validate_responses(
    schema: Sequence[FieldLike],
    responses: Mapping[str, Answer],
) -> dict[str, FieldAnswer]:
    """Validate answers against a schema and tag them with field types.

    Blank optional answers are dropped. Entry order is preserved.

    Raises:
        MissingRequiredFieldError: A required field is absent or blank
        ValidationError: Unknown field, type tag mismatch or bad value
    """
    check_required_fields(schema, responses)

    fields = {field.field_name: field for field in schema}
    tagged: dict[str, FieldAnswer] = {}

    for field_name, answer in responses.items():
        field = fields.get(field_name)
        if field is None:
            raise ValidationError(f"Unknown form field: '{field_name}'")

        field_type = FieldType(field.field_type)
        if isinstance(answer, FieldAnswer) and answer.type != field_type:
            raise ValidationError(
                f"{field.field_label} expects a {field_type.value} answer, got {answer.type.value}"
            )

        value = _answer_value(answer).strip()
        if not value:
            continue

        _check_value(field, value)
        tagged[field_name] = FieldAnswer(type=field_type, value=value)

    return tagged


async def find_existing_application(
    db: AsyncSession,
    job_id: UUID,
    applicant_id: str,
) -> Application | None:
    """Return the applicant's application for a job, if any.

    Used before rendering the form so applicants who already applied are
    sent to their applications instead.
    """
    try:
        result = await db.execute(
            select(Application)
            .where(
                Application.job_position_id == job_id,
                Application.applicant_id == applicant_id,
            )
            .order_by(Application.created_at.desc())
            .limit(1)
        )
    except SQLAlchemyError as e:
        logger.error(f"Failed to check existing application for job {job_id}: {e}")
        raise RemoteReadError(f"Failed to check existing application: {str(e)}")
    return result.scalar_one_or_none()


async def submit(
    db: AsyncSession,
    job_id: UUID,
    applicant_id: str,
    responses: Mapping[str, Answer],
    photo_url: str | None = None,
    pending_uploads: Iterable[str] = (),
) -> Application:
    """Validate and persist an application.

    Checks run in order: no upload pending, required fields present,
    answers valid for their field types.

    Args:
        db: Database session
        job_id: Job position being applied to
        applicant_id: Profile id of the applicant
        responses: Answers keyed by field_name (tagged or raw strings)
        photo_url: Optional profile photo data URL or asset URL
        pending_uploads: File fields the client is still uploading

    Returns:
        The created application with status "submitted"

    Raises:
        UploadInProgressError: An upload is still pending
        MissingRequiredFieldError: A required field is missing
        ValidationError: An answer is invalid
        NotFoundError: Job does not exist
        DuplicateApplicationError: The applicant already applied
        RemoteWriteError: Database rejected the insert
    """
    pending = list(dict.fromkeys(pending_uploads))
    if pending:
        raise UploadInProgressError(pending)

    schema: list[FormField] = await get_schema(db, job_id)
    form_data = validate_responses(schema, responses)

    application = Application(
        job_position_id=job_id,
        applicant_id=applicant_id,
        status=ApplicationStatus.SUBMITTED.value,
        profile_photo_url=photo_url or None,
        form_data={name: answer.model_dump(mode="json") for name, answer in form_data.items()},
        schema_snapshot=snapshot_schema(schema),
    )

    try:
        db.add(application)
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        # Only the (job, applicant) uniqueness rule means "already applied"
        if await find_existing_application(db, job_id, applicant_id) is not None:
            logger.warning(f"Duplicate application for job {job_id} by {applicant_id}")
            raise DuplicateApplicationError(job_id, applicant_id)
        logger.error(f"Failed to submit application for job {job_id}: {e}")
        raise RemoteWriteError(f"Failed to submit application: {str(e)}")
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to submit application for job {job_id}: {e}")
        raise RemoteWriteError(f"Failed to submit application: {str(e)}")

    logger.info(f"Application {application.id} submitted for job {job_id} by {applicant_id}")
    return application


async def submit_draft(
    db: AsyncSession,
    job_id: UUID,
    applicant_id: str,
    draft: FormDraft,
    photo_url: str | None = None,
) -> Application:
    """Submit the answers held by a form draft."""
    return await submit(
        db,
        job_id,
        applicant_id,
        draft.to_response_map(),
        photo_url=photo_url,
        pending_uploads=draft.pending_uploads,
    )


async def list_applications(
    db: AsyncSession,
    applicant_id: str | None = None,
) -> list[Application]:
    """List applications newest first, optionally for one applicant.

    Duplicate rows for one (job, applicant) pair cannot exist; the storage
    constraint rejects the second insert.
    """
    query = select(Application).order_by(Application.created_at.desc())
    if applicant_id is not None:
        query = query.where(Application.applicant_id == applicant_id)

    try:
        result = await db.execute(query)
    except SQLAlchemyError as e:
        logger.error(f"Failed to list applications: {e}")
        raise RemoteReadError(f"Failed to load applications: {str(e)}")
    return list(result.scalars().all())
