"""Tests for the storage REST client."""

import httpx
import pytest

from hireflow.services.exceptions import StorageError
from hireflow.services.storage import StorageClient

PUBLIC = "https://storage.test/storage/v1/object/public/application-files/"


class TestObjectPaths:

    def test_public_url_stripped_to_object_path(self, storage):
        assert storage.to_object_path(PUBLIC + "u1/job/resume/cv.pdf") == "u1/job/resume/cv.pdf"

    def test_bare_path_kept(self, storage):
        assert storage.to_object_path("/u1/cv.pdf") == "u1/cv.pdf"

    def test_public_url(self, storage):
        assert storage.public_url("u1/cv.pdf") == PUBLIC + "u1/cv.pdf"


class TestUpload:

    @pytest.mark.asyncio
    async def test_upload_returns_public_url(self, storage, storage_recorder):
        url = await storage.upload("u1/job/resume/cv.pdf", b"%PDF-1.4", "application/pdf")

        assert url == PUBLIC + "u1/job/resume/cv.pdf"
        [request] = storage_recorder.requests
        assert request.method == "POST"
        assert request.url.path == "/storage/v1/object/application-files/u1/job/resume/cv.pdf"
        assert request.headers["Authorization"] == "Bearer service-key"
        assert request.headers["Content-Type"] == "application/pdf"
        assert request.content == b"%PDF-1.4"

    @pytest.mark.asyncio
    async def test_upload_failure_raises(self):
        client = StorageClient(
            base_url="https://storage.test",
            bucket="application-files",
            service_key="k",
            transport=httpx.MockTransport(lambda request: httpx.Response(413)),
        )
        with pytest.raises(StorageError, match="File upload failed"):
            await client.upload("u1/big.bin", b"x")


class TestSignedUrls:

    @pytest.mark.asyncio
    async def test_default_expiry_one_hour(self, storage, storage_recorder):
        url = await storage.create_signed_url(PUBLIC + "u1/cv.pdf")
        assert url == "https://storage.test/storage/v1/object/sign/application-files/u1/cv.pdf?token=tok-3600"
        assert storage_recorder.signed_paths() == ["u1/cv.pdf"]

    @pytest.mark.asyncio
    async def test_custom_expiry(self, storage):
        url = await storage.create_signed_url("u1/cv.pdf", expires_in=60)
        assert url.endswith("?token=tok-60")

    @pytest.mark.asyncio
    async def test_rejected_signing_raises(self, storage, storage_recorder):
        storage_recorder.fail_signing = True
        with pytest.raises(StorageError, match="Could not open file"):
            await storage.create_signed_url("u1/missing.pdf")

    @pytest.mark.asyncio
    async def test_missing_signed_url_in_body_raises(self):
        client = StorageClient(
            base_url="https://storage.test",
            bucket="application-files",
            service_key="k",
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json={})),
        )
        with pytest.raises(StorageError, match="no signed URL"):
            await client.create_signed_url("u1/cv.pdf")

    @pytest.mark.asyncio
    async def test_absolute_signed_url_passed_through(self):
        signed = "https://cdn.test/cv.pdf?token=abc"
        client = StorageClient(
            base_url="https://storage.test",
            bucket="application-files",
            service_key="k",
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"signedUrl": signed})),
        )
        assert await client.create_signed_url("u1/cv.pdf") == signed
