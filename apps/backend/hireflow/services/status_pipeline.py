"""Application status pipeline.

Statuses form a flat enum rather than a state machine: an admin may move an
application from any status to any other, including out of accepted or
rejected. The last write wins and no history is kept.
"""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hireflow.models import Application, ApplicationStatus
from hireflow.services.exceptions import NotFoundError, RemoteReadError, RemoteWriteError

logger = logging.getLogger(__name__)

INITIAL_STATUS = ApplicationStatus.SUBMITTED
PIPELINE_ORDER: tuple[ApplicationStatus, ...] = tuple(ApplicationStatus)


def status_label(status: ApplicationStatus | str) -> str:
    """Human-readable label, e.g. ``under_review`` -> ``Under review``."""
    value = ApplicationStatus(status).value.replace("_", " ")
    return value[:1].upper() + value[1:]


async def get_application(db: AsyncSession, application_id: UUID) -> Application:
    """Fetch an application with its job and applicant loaded.

    Raises:
        NotFoundError: Application does not exist
    """
    try:
        result = await db.execute(
            select(Application)
            .where(Application.id == application_id)
            .execution_options(populate_existing=True)
        )
        application = result.scalar_one_or_none()
    except SQLAlchemyError as e:
        logger.error(f"Failed to fetch application {application_id}: {e}")
        raise RemoteReadError(f"Failed to load application: {str(e)}")

    if application is None:
        raise NotFoundError(f"Application {application_id} not found")
    return application


async def set_status(
    db: AsyncSession,
    application_id: UUID,
    new_status: ApplicationStatus | str,
) -> Application:
    """Set an application's status, whatever its current status.

    Raises:
        ValueError: Unknown status value
        NotFoundError: Application does not exist
        RemoteWriteError: Database rejected the update
    """
    status = ApplicationStatus(new_status)
    application = await get_application(db, application_id)
    previous = application.status

    application.status = status.value
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to update status of application {application_id}: {e}")
        raise RemoteWriteError(f"Failed to update status: {str(e)}")

    logger.info(f"Application {application_id} status {previous} -> {status.value}")
    return application
