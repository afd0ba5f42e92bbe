"""Jobs API router.

Endpoints for job positions and their application forms: admin job
management, the filtered job board, form rendering, file uploads and
application submission.
"""

import logging
import re
from pathlib import PurePath
from uuid import UUID, uuid4

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from hireflow.database import get_db
from hireflow.dependencies import (
    get_filter_state,
    get_session_context,
    get_storage_client,
    require_admin,
)
from hireflow.models import FieldType, JobPosition
from hireflow.schemas.application import ApplicationResponse, ApplicationSubmit, UploadResponse
from hireflow.schemas.form_field import FormFieldResponse, InputSpec
from hireflow.schemas.job_position import (
    JobListResponse,
    JobPositionCreate,
    JobPositionDetailResponse,
    JobPositionResponse,
    JobPositionUpdate,
)
from hireflow.services import form_schema
from hireflow.services.auth import SessionContext
from hireflow.services.exceptions import (
    HireflowError,
    NotFoundError,
    UploadInProgressError,
    ValidationError,
)
from hireflow.services.filters import FilterState, apply_all_filters, extract_unique_values
from hireflow.services.pagination import paginate
from hireflow.services.renderer import FormDraft, render_form
from hireflow.services.storage import StorageClient
from hireflow.services.submission import find_existing_application, submit_draft

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/jobs", tags=["jobs"])

_UNSAFE_FILENAME = re.compile(r"[^A-Za-z0-9._-]+")


async def _visible_job(db: AsyncSession, job_id: UUID, session: SessionContext) -> JobPosition:
    """Fetch a job the caller may see; inactive jobs are hidden from applicants."""
    job = await form_schema.get_job(db, job_id)
    if not job.is_active and not session.is_admin:
        raise NotFoundError(f"Job {job_id} not found")
    return job


@router.post(
    "",
    response_model=JobPositionDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a job position with its application form"
)
async def create_job(
    job_data: JobPositionCreate,
    session: SessionContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
) -> JobPositionDetailResponse:
    """Create a job position and its form schema.

    The baseline fields (full name, email, LinkedIn profile, location) are
    always placed first; the submitted fields are appended after them.

    Args:
        job_data: Job metadata and custom field definitions
        session: Admin session
        db: Database session

    Returns:
        Created job with its ordered form fields

    Raises:
        HTTPException 422: Empty label, duplicate field name or select
            field without options
        HTTPException 500: Database error
    """
    try:
        job = await form_schema.create_job(db, session.user_id, job_data)
        return JobPositionDetailResponse.model_validate(job)
    except HireflowError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get(
    "",
    response_model=JobListResponse,
    summary="List jobs with search, filters, sorting and pagination"
)
async def list_jobs(
    filters: FilterState = Depends(get_filter_state),
    session: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db)
) -> JobListResponse:
    """List jobs, filtered and paginated in memory.

    Applicants only see active jobs. ``locations`` and ``employment_types``
    are taken from the unfiltered list to populate filter choices.

    Raises:
        HTTPException 503: Database error
    """
    try:
        jobs = await form_schema.list_jobs(db, active_only=not session.is_admin)
    except HireflowError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))

    items = [JobPositionResponse.model_validate(job) for job in jobs]
    page = paginate(apply_all_filters(items, filters), filters.page)

    return JobListResponse(
        total=page.total,
        page=page.page,
        page_size=page.page_size,
        total_pages=page.total_pages,
        jobs=page.items,
        locations=extract_unique_values(items, "location"),
        employment_types=extract_unique_values(items, "employment_type"),
    )


@router.get(
    "/{job_id}",
    response_model=JobPositionDetailResponse,
    summary="Get a job with its form fields"
)
async def get_job(
    job_id: UUID,
    session: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db)
) -> JobPositionDetailResponse:
    """Get a single job by ID.

    Raises:
        HTTPException 404: Job not found (or inactive, for applicants)
    """
    try:
        job = await _visible_job(db, job_id, session)
        return JobPositionDetailResponse.model_validate(job)
    except HireflowError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.patch(
    "/{job_id}",
    response_model=JobPositionResponse,
    summary="Update job metadata or toggle visibility"
)
async def update_job(
    job_id: UUID,
    changes: JobPositionUpdate,
    session: SessionContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
) -> JobPositionResponse:
    """Update job metadata. Setting ``is_active`` hides or shows the job
    to applicants.

    Raises:
        HTTPException 404: Job not found
        HTTPException 500: Database error
    """
    try:
        job = await form_schema.update_job(db, job_id, changes)
        return JobPositionResponse.model_validate(job)
    except HireflowError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.delete(
    "/{job_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a job"
)
async def delete_job(
    job_id: UUID,
    session: SessionContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
) -> None:
    """Delete a job together with its form fields and applications.

    Raises:
        HTTPException 404: Job not found
        HTTPException 500: Database error
    """
    try:
        await form_schema.delete_job(db, job_id)
    except HireflowError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get(
    "/{job_id}/fields",
    response_model=list[FormFieldResponse],
    summary="Get a job's form schema"
)
async def get_fields(
    job_id: UUID,
    session: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db)
) -> list[FormFieldResponse]:
    try:
        await _visible_job(db, job_id, session)
        fields = await form_schema.get_schema(db, job_id)
        return [FormFieldResponse.model_validate(field) for field in fields]
    except HireflowError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get(
    "/{job_id}/form",
    response_model=list[InputSpec],
    summary="Get the rendered application form"
)
async def get_form(
    job_id: UUID,
    session: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db)
) -> list[InputSpec]:
    """Input contracts for each field, in form order."""
    try:
        await _visible_job(db, job_id, session)
        return render_form(await form_schema.get_schema(db, job_id))
    except HireflowError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get(
    "/{job_id}/application",
    response_model=ApplicationResponse,
    summary="Get the caller's application for a job"
)
async def get_my_application(
    job_id: UUID,
    session: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db)
) -> ApplicationResponse:
    """Check whether the caller already applied.

    Clients call this before rendering the form and redirect to the
    applicant's application list when it returns one.

    Raises:
        HTTPException 404: No application yet
    """
    try:
        application = await find_existing_application(db, job_id, session.user_id)
    except HireflowError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))

    if application is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No application for job {job_id}"
        )
    return ApplicationResponse.model_validate(application)


@router.post(
    "/{job_id}/uploads/{field_name}",
    response_model=UploadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a file answer"
)
async def upload_file(
    job_id: UUID,
    field_name: str,
    file: UploadFile = File(...),
    session: SessionContext = Depends(get_session_context),
    storage: StorageClient = Depends(get_storage_client),
    db: AsyncSession = Depends(get_db)
) -> UploadResponse:
    """Store a file for a file-type field and return its reference.

    The reference is what the client puts in ``answers[field_name]`` when
    submitting.

    Raises:
        HTTPException 404: Job not found
        HTTPException 422: Field missing or not a file field
        HTTPException 502: Object store rejected the upload
    """
    try:
        await _visible_job(db, job_id, session)
        fields = await form_schema.get_schema(db, job_id)
        field = next((f for f in fields if f.field_name == field_name), None)
        if field is None or FieldType(field.field_type) != FieldType.FILE:
            raise ValidationError(f"Field '{field_name}' does not accept uploads")

        filename = _UNSAFE_FILENAME.sub("_", PurePath(file.filename or "upload").name)
        path = f"{session.user_id}/{job_id}/{field_name}/{uuid4().hex}-{filename}"
        content = await file.read()
        reference = await storage.upload(path, content, file.content_type)
    except HireflowError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))

    logger.info(f"{session.user_id} uploaded {field_name} for job {job_id}")
    return UploadResponse(field_name=field_name, reference=reference)


@router.post(
    "/{job_id}/applications",
    response_model=ApplicationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit an application"
)
async def submit_application(
    job_id: UUID,
    request: ApplicationSubmit,
    session: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db)
) -> ApplicationResponse:
    """Validate answers against the job's form and store the application.

    Args:
        job_id: Job UUID
        request: Answers, optional profile photo and pending uploads
        session: Applicant session
        db: Database session

    Returns:
        The created application (status ``submitted``)

    Raises:
        HTTPException 404: Job not found
        HTTPException 409: Upload still pending, or already applied
        HTTPException 422: Missing required field or invalid answer
        HTTPException 500: Database error
    """
    try:
        await _visible_job(db, job_id, session)
        # Pending uploads are reported before any answer is inspected
        if request.pending_uploads:
            raise UploadInProgressError(list(dict.fromkeys(request.pending_uploads)))
        schema = await form_schema.get_schema(db, job_id)
        draft = FormDraft.from_answers(schema, request.answers, request.pending_uploads)
        application = await submit_draft(
            db,
            job_id,
            session.user_id,
            draft,
            photo_url=request.profile_photo_url,
        )
        return ApplicationResponse.model_validate(application)
    except HireflowError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
