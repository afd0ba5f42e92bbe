"""Object storage client for application file uploads.

Talks to a Supabase-compatible storage REST API over httpx. Uploaded files
are referenced either by their public URL or by their bucket-relative path;
both forms are accepted wherever a reference is read back.
"""

import logging
from urllib.parse import quote

import httpx

from hireflow.config import settings
from hireflow.services.exceptions import StorageError

logger = logging.getLogger(__name__)


class StorageClient:
    """Async client for the application-files bucket."""

    def __init__(
        self,
        base_url: str | None = None,
        bucket: str | None = None,
        service_key: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize storage client.

        Args:
            base_url: Storage server URL. Defaults to settings.storage_url
            bucket: Bucket name. Defaults to settings.storage_bucket
            service_key: API key sent as bearer token. Defaults to
                settings.storage_service_key
            transport: Optional httpx transport (used in tests)
        """
        self.base_url = (base_url or settings.storage_url).rstrip("/")
        self.bucket = bucket or settings.storage_bucket
        self.service_key = service_key if service_key is not None else settings.storage_service_key
        self.timeout = settings.http_timeout_seconds
        self._transport = transport

    @property
    def public_prefix(self) -> str:
        return f"{self.base_url}/storage/v1/object/public/{self.bucket}/"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            headers={
                "Authorization": f"Bearer {self.service_key}",
                "apikey": self.service_key,
            },
            timeout=self.timeout,
            transport=self._transport,
        )

    def public_url(self, path: str) -> str:
        return self.public_prefix + path.lstrip("/")

    def to_object_path(self, reference: str) -> str:
        """Normalize a stored reference to a bucket-relative path.

        Examples:
            >>> client.to_object_path(
            ...     "https://x.supabase.co/storage/v1/object/public/application-files/u1/cv.pdf"
            ... )
            'u1/cv.pdf'
            >>> client.to_object_path("u1/cv.pdf")
            'u1/cv.pdf'
        """
        if reference.startswith(self.public_prefix):
            return reference[len(self.public_prefix):]
        return reference.lstrip("/")

    async def upload(
        self,
        path: str,
        content: bytes,
        content_type: str | None = None,
    ) -> str:
        """Upload a file and return its public URL.

        Raises:
            StorageError: On HTTP or transport failure
        """
        object_path = path.lstrip("/")
        url = f"{self.base_url}/storage/v1/object/{self.bucket}/{quote(object_path)}"
        headers = {"Content-Type": content_type or "application/octet-stream"}

        try:
            async with self._client() as client:
                response = await client.post(url, content=content, headers=headers)
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Upload to {self.bucket}/{object_path} failed: {e}")
            raise StorageError(f"File upload failed: {str(e)}")

        logger.info(f"Uploaded file to storage: {self.bucket}/{object_path}")
        return self.public_url(object_path)

    async def create_signed_url(self, reference: str, expires_in: int | None = None) -> str:
        """Mint a time-limited URL for a stored file.

        Args:
            reference: Public URL or bucket-relative path
            expires_in: Lifetime in seconds. Defaults to
                settings.signed_url_expiry_seconds (one hour)

        Returns:
            Absolute signed URL

        Raises:
            StorageError: On HTTP failure or a malformed response
        """
        object_path = self.to_object_path(reference)
        expires_in = expires_in or settings.signed_url_expiry_seconds
        url = f"{self.base_url}/storage/v1/object/sign/{self.bucket}/{quote(object_path)}"

        try:
            async with self._client() as client:
                response = await client.post(url, json={"expiresIn": expires_in})
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Signing {self.bucket}/{object_path} failed: {e}")
            raise StorageError(f"Could not open file: {str(e)}")

        signed_path = data.get("signedURL") or data.get("signedUrl")
        if not signed_path:
            raise StorageError("Could not open file: storage returned no signed URL")

        if signed_path.startswith("http"):
            return signed_path
        return f"{self.base_url}/storage/v1/{signed_path.lstrip('/')}"
