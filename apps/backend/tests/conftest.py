"""Shared fixtures: per-test SQLite database, fake storage API, API client."""

import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("STORAGE_URL", "https://storage.test")
os.environ.setdefault("STORAGE_BUCKET", "application-files")
os.environ.setdefault("STORAGE_SERVICE_KEY", "service-key")
os.environ.setdefault("AUTH_URL", "https://auth.test")
os.environ.setdefault("AUTH_API_KEY", "anon-key")

import json
from urllib.parse import unquote

import httpx
import pytest
from fastapi import HTTPException
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from hireflow.database import get_db
from hireflow.dependencies import get_current_user, get_storage_client
from hireflow.models import Base, Profile, UserRole
from hireflow.schemas.form_field import FieldDef
from hireflow.schemas.job_position import JobPositionCreate
from hireflow.services.auth import AuthenticatedUser
from hireflow.services.storage import StorageClient

STORAGE_URL = "https://storage.test"
BUCKET = "application-files"


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")

    @event.listens_for(engine.sync_engine, "connect")
    def enable_foreign_keys(dbapi_connection, connection_record):
        # SQLite leaves foreign keys unenforced unless asked per connection
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


async def _add_profile(session_factory, profile_id: str, email: str, role: UserRole) -> Profile:
    async with session_factory() as session:
        profile = Profile(id=profile_id, email=email, full_name=email.split("@")[0].title(), role=role.value)
        session.add(profile)
        await session.commit()
        return profile


@pytest.fixture
async def admin(session_factory) -> Profile:
    return await _add_profile(session_factory, "admin-1", "admin@example.com", UserRole.ADMIN)


@pytest.fixture
async def applicant(session_factory) -> Profile:
    return await _add_profile(session_factory, "applicant-1", "ana@example.com", UserRole.APPLICANT)


@pytest.fixture
async def other_applicant(session_factory) -> Profile:
    return await _add_profile(session_factory, "applicant-2", "ben@example.com", UserRole.APPLICANT)


@pytest.fixture
def job_data() -> JobPositionCreate:
    """Job with one custom required field, one dropdown and one file field."""
    return JobPositionCreate(
        title="Senior Frontend Developer",
        description="Build the hiring dashboard",
        location="Remote",
        employment_type="Full-time",
        salary_range="$80,000 - $120,000",
        fields=[
            FieldDef(field_label="Years of Experience", field_type="number", is_required=True),
            FieldDef(field_label="Preferred Stack", field_type="select", field_options=["React", "Vue"]),
            FieldDef(field_label="Resume", field_type="file"),
        ],
    )


class StorageRecorder:
    """In-process stand-in for the storage REST API."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.fail_signing = False

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = unquote(request.url.path)
        sign_prefix = f"/storage/v1/object/sign/{BUCKET}/"
        upload_prefix = f"/storage/v1/object/{BUCKET}/"

        if path.startswith(sign_prefix):
            if self.fail_signing:
                return httpx.Response(400, json={"error": "Object not found"})
            object_path = path[len(sign_prefix):]
            expires_in = json.loads(request.content)["expiresIn"]
            return httpx.Response(
                200,
                json={"signedURL": f"/object/sign/{BUCKET}/{object_path}?token=tok-{expires_in}"},
            )
        if path.startswith(upload_prefix):
            return httpx.Response(200, json={"Key": f"{BUCKET}/{path[len(upload_prefix):]}"})
        return httpx.Response(404, json={"error": "not found"})

    def signed_paths(self) -> list[str]:
        prefix = f"/storage/v1/object/sign/{BUCKET}/"
        return [
            unquote(r.url.path)[len(prefix):]
            for r in self.requests
            if unquote(r.url.path).startswith(prefix)
        ]


@pytest.fixture
def storage_recorder() -> StorageRecorder:
    return StorageRecorder()


@pytest.fixture
def storage(storage_recorder) -> StorageClient:
    return StorageClient(
        base_url=STORAGE_URL,
        bucket=BUCKET,
        service_key="service-key",
        transport=httpx.MockTransport(storage_recorder.handler),
    )


class ApiClient(httpx.AsyncClient):
    """Test client that acts as whichever profile was passed to ``login``."""

    current_user: AuthenticatedUser | None = None

    def login(self, profile: Profile) -> "ApiClient":
        self.current_user = AuthenticatedUser(
            id=profile.id, email=profile.email, full_name=profile.full_name
        )
        return self

    def logout(self) -> None:
        self.current_user = None


@pytest.fixture
async def client(session_factory, storage):
    from main import app

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    api = ApiClient(transport=httpx.ASGITransport(app=app), base_url="http://test")

    async def override_current_user() -> AuthenticatedUser:
        if api.current_user is None:
            raise HTTPException(status_code=401, detail="Not authenticated")
        return api.current_user

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = override_current_user
    app.dependency_overrides[get_storage_client] = lambda: storage

    async with api:
        yield api

    app.dependency_overrides.clear()
