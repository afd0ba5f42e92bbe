"""Identity boundary.

The external auth provider is the only source of truth for who the caller
is. Roles are not taken from the provider: they are looked up in the
profiles table, and a profile provisioned here always starts as an
applicant.
"""

import logging
from dataclasses import dataclass

import httpx
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hireflow.config import settings
from hireflow.models import Profile, UserRole
from hireflow.services.exceptions import (
    AuthenticationError,
    PermissionDeniedError,
    RemoteReadError,
    RemoteWriteError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthenticatedUser:
    id: str
    email: str
    full_name: str | None = None


@dataclass(frozen=True)
class SessionContext:
    """Per-request view of the caller, threaded explicitly through handlers."""

    profile: Profile

    @property
    def user_id(self) -> str:
        return self.profile.id

    @property
    def is_admin(self) -> bool:
        return self.profile.is_admin

    def require_admin(self) -> None:
        if not self.is_admin:
            raise PermissionDeniedError("Admin access required")

    def can_view_application(self, applicant_id: str) -> bool:
        """Admins see every application; applicants only their own."""
        return self.is_admin or applicant_id == self.user_id


class AuthClient:
    """Resolves access tokens to users via the auth provider's API."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.auth_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.auth_api_key
        self.timeout = settings.http_timeout_seconds
        self._transport = transport

    async def get_user(self, access_token: str) -> AuthenticatedUser:
        """Look up the user behind an access token.

        Raises:
            AuthenticationError: Token rejected or provider unreachable
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(
                    f"{self.base_url}/auth/v1/user",
                    headers={
                        "Authorization": f"Bearer {access_token}",
                        "apikey": self.api_key,
                    },
                )
        except httpx.HTTPError as e:
            logger.error(f"Auth provider unreachable: {e}")
            raise AuthenticationError("Authentication service unavailable")

        if response.status_code != 200:
            raise AuthenticationError("Invalid or expired session")

        try:
            data = response.json()
        except ValueError:
            logger.error("Auth provider returned a non-JSON user payload")
            raise AuthenticationError("Invalid or expired session")

        user_id = data.get("id") if isinstance(data, dict) else None
        if not user_id:
            raise AuthenticationError("Invalid or expired session")

        metadata = data.get("user_metadata") or {}
        return AuthenticatedUser(
            id=str(user_id),
            email=data.get("email") or "",
            full_name=metadata.get("full_name"),
        )


async def get_or_create_profile(db: AsyncSession, user: AuthenticatedUser) -> Profile:
    """Load the caller's profile, provisioning an applicant profile if new."""
    try:
        result = await db.execute(select(Profile).where(Profile.id == user.id))
        profile = result.scalar_one_or_none()
    except SQLAlchemyError as e:
        logger.error(f"Failed to load profile {user.id}: {e}")
        raise RemoteReadError(f"Failed to load profile: {str(e)}")

    if profile is not None:
        return profile

    profile = Profile(
        id=user.id,
        email=user.email,
        full_name=user.full_name,
        role=UserRole.APPLICANT.value,
    )
    try:
        db.add(profile)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to provision profile {user.id}: {e}")
        raise RemoteWriteError(f"Failed to create profile: {str(e)}")

    logger.info(f"Provisioned applicant profile for {user.id}")
    return profile
