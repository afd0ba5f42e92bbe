"""Tests for token resolution, profile provisioning and session context."""

import httpx
import pytest

from hireflow.models import Profile, UserRole
from hireflow.services.auth import (
    AuthClient,
    AuthenticatedUser,
    SessionContext,
    get_or_create_profile,
)
from hireflow.services.exceptions import AuthenticationError, PermissionDeniedError


def auth_client(handler) -> AuthClient:
    return AuthClient(
        base_url="https://auth.test",
        api_key="anon-key",
        transport=httpx.MockTransport(handler),
    )


class TestAuthClient:

    @pytest.mark.asyncio
    async def test_resolves_user(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json={"id": "u-42", "email": "ana@example.com", "user_metadata": {"full_name": "Ana"}},
            )

        user = await auth_client(handler).get_user("token-abc")

        assert user == AuthenticatedUser(id="u-42", email="ana@example.com", full_name="Ana")
        assert seen[0].url.path == "/auth/v1/user"
        assert seen[0].headers["Authorization"] == "Bearer token-abc"
        assert seen[0].headers["apikey"] == "anon-key"

    @pytest.mark.asyncio
    async def test_rejected_token(self):
        client = auth_client(lambda request: httpx.Response(401, json={"msg": "bad jwt"}))
        with pytest.raises(AuthenticationError, match="Invalid or expired"):
            await client.get_user("expired")

    @pytest.mark.asyncio
    async def test_response_without_id(self):
        client = auth_client(lambda request: httpx.Response(200, json={"email": "x@y.z"}))
        with pytest.raises(AuthenticationError):
            await client.get_user("token")

    @pytest.mark.asyncio
    async def test_non_json_user_payload(self):
        client = auth_client(lambda request: httpx.Response(200, text="<html>gateway</html>"))
        with pytest.raises(AuthenticationError, match="Invalid or expired"):
            await client.get_user("token")

    @pytest.mark.asyncio
    async def test_provider_unreachable(self):
        def handler(request):
            raise httpx.ConnectError("connection refused")

        with pytest.raises(AuthenticationError, match="unavailable"):
            await auth_client(handler).get_user("token")


class TestProfiles:

    @pytest.mark.asyncio
    async def test_new_user_provisioned_as_applicant(self, db):
        user = AuthenticatedUser(id="new-user", email="new@example.com", full_name="New")

        profile = await get_or_create_profile(db, user)

        assert profile.role == UserRole.APPLICANT.value
        assert not profile.is_admin
        assert await db.get(Profile, "new-user") is profile

    @pytest.mark.asyncio
    async def test_existing_role_kept(self, db, admin):
        user = AuthenticatedUser(id=admin.id, email=admin.email)

        profile = await get_or_create_profile(db, user)

        assert profile.is_admin


class TestSessionContext:

    def test_admin_sees_everything(self):
        session = SessionContext(Profile(id="a", email="a@x.io", role=UserRole.ADMIN.value))
        session.require_admin()
        assert session.can_view_application("someone-else")

    def test_applicant_sees_own_only(self):
        session = SessionContext(Profile(id="p", email="p@x.io", role=UserRole.APPLICANT.value))
        assert session.user_id == "p"
        assert session.can_view_application("p")
        assert not session.can_view_application("q")
        with pytest.raises(PermissionDeniedError):
            session.require_admin()
