"""FastAPI dependencies for the caller's session and external clients."""

from fastapi import Depends, HTTPException, Query, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from hireflow.database import get_db
from hireflow.services.auth import (
    AuthClient,
    AuthenticatedUser,
    SessionContext,
    get_or_create_profile,
)
from hireflow.services.exceptions import HireflowError
from hireflow.services.filters import ALL, FilterState, SortOption
from hireflow.services.storage import StorageClient

bearer_scheme = HTTPBearer(auto_error=False)


def get_auth_client() -> AuthClient:
    return AuthClient()


def get_storage_client() -> StorageClient:
    return StorageClient()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    auth: AuthClient = Depends(get_auth_client),
) -> AuthenticatedUser:
    """Resolve the bearer token to an authenticated user.

    Raises:
        HTTPException 401: Missing, invalid or expired token
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return await auth.get_user(credentials.credentials)
    except HireflowError as e:
        raise HTTPException(
            status_code=e.status_code,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )


async def get_session_context(
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> SessionContext:
    """Build the per-request session context from the caller's profile."""
    try:
        profile = await get_or_create_profile(db, user)
    except HireflowError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return SessionContext(profile=profile)


async def require_admin(
    session: SessionContext = Depends(get_session_context),
) -> SessionContext:
    """Session context for admin-only endpoints.

    Raises:
        HTTPException 403: Caller is not an admin
    """
    try:
        session.require_admin()
    except HireflowError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return session


def get_filter_state(
    search: str = Query("", description="Case-insensitive search on title, description, location"),
    location: str = Query(ALL, description="Exact location, or 'all'"),
    status_filter: str = Query(ALL, alias="status", description="Exact application status, or 'all'"),
    employment_type: list[str] = Query([], description="Selected employment types (repeatable)"),
    salary_min: int | None = Query(None, ge=0, description="Lower salary bound (inclusive)"),
    salary_max: int | None = Query(None, ge=0, description="Upper salary bound (inclusive)"),
    sort: SortOption = Query(SortOption.NEWEST, description="Sort order"),
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
) -> FilterState:
    """Filter criteria from list-endpoint query parameters."""
    return FilterState(
        search_query=search,
        status_filter=status_filter,
        location_filter=location,
        employment_type_filter=tuple(employment_type),
        salary_min=salary_min,
        salary_max=salary_max,
        sort_by=sort,
        page=page,
    )
