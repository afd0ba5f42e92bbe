"""Profiles API router."""

from fastapi import APIRouter, Depends

from hireflow.dependencies import get_session_context
from hireflow.schemas.profile import ProfileResponse
from hireflow.services.auth import SessionContext

router = APIRouter(prefix="/api/v1/profiles", tags=["profiles"])


@router.get("/me", response_model=ProfileResponse)
async def get_me(session: SessionContext = Depends(get_session_context)) -> ProfileResponse:
    """Return the caller's profile, including the role that gates admin views."""
    return ProfileResponse.model_validate(session.profile)
