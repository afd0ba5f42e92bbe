"""Applications API router.

Admin triage (listing, detail with labeled answers, status changes) and
the applicant's own application list.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from hireflow.database import get_db
from hireflow.dependencies import (
    get_filter_state,
    get_session_context,
    get_storage_client,
    require_admin,
)
from hireflow.schemas.application import (
    ApplicationDetailResponse,
    ApplicationListResponse,
    ApplicationWithDetailsResponse,
    ApplicationWithJobResponse,
    MyApplicationListResponse,
    StatusUpdate,
)
from hireflow.services.auth import SessionContext
from hireflow.services.exceptions import HireflowError
from hireflow.services.filters import FilterState, apply_all_filters, extract_unique_values
from hireflow.services.pagination import paginate
from hireflow.services.readback import label_responses, resolve_file_links
from hireflow.services.status_pipeline import (
    PIPELINE_ORDER,
    get_application,
    set_status,
    status_label,
)
from hireflow.services.storage import StorageClient
from hireflow.services.submission import list_applications

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/applications", tags=["applications"])


@router.get(
    "",
    response_model=ApplicationListResponse,
    summary="List all applications (admin)"
)
async def list_all_applications(
    filters: FilterState = Depends(get_filter_state),
    session: SessionContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
) -> ApplicationListResponse:
    """List every application with its job and applicant.

    Search, location, employment type and salary filters apply to the
    application's job; ``status`` applies to the application itself.

    Raises:
        HTTPException 403: Caller is not an admin
        HTTPException 503: Database error
    """
    try:
        applications = await list_applications(db)
    except HireflowError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))

    items = [ApplicationWithDetailsResponse.model_validate(app) for app in applications]
    page = paginate(apply_all_filters(items, filters), filters.page)

    return ApplicationListResponse(
        total=page.total,
        page=page.page,
        page_size=page.page_size,
        total_pages=page.total_pages,
        applications=page.items,
        locations=extract_unique_values(items, "location"),
        employment_types=extract_unique_values(items, "employment_type"),
    )


@router.get(
    "/mine",
    response_model=MyApplicationListResponse,
    summary="List the caller's applications"
)
async def list_my_applications(
    filters: FilterState = Depends(get_filter_state),
    session: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db)
) -> MyApplicationListResponse:
    try:
        applications = await list_applications(db, applicant_id=session.user_id)
    except HireflowError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))

    items = [ApplicationWithJobResponse.model_validate(app) for app in applications]
    page = paginate(apply_all_filters(items, filters), filters.page)

    return MyApplicationListResponse(
        total=page.total,
        page=page.page,
        page_size=page.page_size,
        total_pages=page.total_pages,
        applications=page.items,
    )


@router.get(
    "/statuses",
    summary="List pipeline statuses with display labels"
)
async def list_statuses() -> list[dict[str, str]]:
    return [{"value": s.value, "label": status_label(s)} for s in PIPELINE_ORDER]


@router.get(
    "/{application_id}",
    response_model=ApplicationDetailResponse,
    summary="Get an application with labeled answers"
)
async def get_application_detail(
    application_id: UUID,
    session: SessionContext = Depends(get_session_context),
    storage: StorageClient = Depends(get_storage_client),
    db: AsyncSession = Depends(get_db)
) -> ApplicationDetailResponse:
    """Get an application with its answers labeled in form order.

    File answers carry a signed link valid for one hour. A link that cannot
    be minted is reported on its entry without failing the request.

    Raises:
        HTTPException 404: Application not found or not visible to caller
    """
    try:
        application = await get_application(db, application_id)
    except HireflowError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))

    if not session.can_view_application(application.applicant_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Application {application_id} not found"
        )

    responses = await resolve_file_links(label_responses(application), storage)
    base = ApplicationWithDetailsResponse.model_validate(application)

    return ApplicationDetailResponse(
        **base.model_dump(),
        status_label=status_label(application.status),
        responses=responses,
    )


@router.patch(
    "/{application_id}/status",
    response_model=ApplicationWithDetailsResponse,
    summary="Set an application's status (admin)"
)
async def update_status(
    application_id: UUID,
    update: StatusUpdate,
    session: SessionContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
) -> ApplicationWithDetailsResponse:
    """Set any status from any status. Last write wins.

    Raises:
        HTTPException 404: Application not found
        HTTPException 500: Database error
    """
    try:
        application = await set_status(db, application_id, update.status)
    except HireflowError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))

    logger.info(f"{session.user_id} set application {application_id} to {update.status.value}")
    return ApplicationWithDetailsResponse.model_validate(application)

