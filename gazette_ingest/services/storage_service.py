"""Attachment storage for section PDFs (Supabase storage REST API)."""

from typing import Optional, Protocol

import httpx

from gazette_ingest.core.config import settings
from gazette_ingest.core.exceptions import AttachmentUploadError
from gazette_ingest.utils.logging import get_logger

LOGGER = get_logger(__name__)


class AttachmentStore(Protocol):
    """Stores bytes and hands back a stable reference to them."""

    async def store(
        self,
        content: bytes,
        filename: str,
        content_type: str,
        *,
        key_prefix: str = "",
    ) -> str:
        ...


class StorageService:
    """Service for storing files in a Supabase storage bucket."""

    def __init__(
        self,
        bucket: Optional[str] = None,
        url: Optional[str] = None,
        service_role_key: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.bucket = bucket or settings.pipeline.attachment_bucket
        self.url = (url if url is not None else settings.storage.url).rstrip("/")
        self.service_role_key = (
            service_role_key if service_role_key is not None else settings.storage.service_role_key
        )
        self.timeout = timeout or settings.http_timeout
        self.base_api_url = f"{self.url}/storage/v1"
        self.headers = {
            "Authorization": f"Bearer {self.service_role_key}",
            "apikey": self.service_role_key,
        }

    async def store(
        self,
        content: bytes,
        filename: str,
        content_type: str,
        *,
        key_prefix: str = "",
    ) -> str:
        """Upload a file and return its storage reference (``<bucket>/<path>``).

        Args:
            content: File bytes
            filename: Object name, e.g. ``Legal Notices.pdf``
            content_type: MIME type sent with the upload
            key_prefix: Optional folder inside the bucket

        Raises:
            AttachmentUploadError: If the upload fails
        """
        path = f"{key_prefix.strip('/')}/{filename}" if key_prefix else filename
        upload_url = f"{self.base_api_url}/object/{self.bucket}/{path}"

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    upload_url,
                    headers={**self.headers, "Content-Type": content_type, "x-upsert": "true"},
                    content=content,
                    timeout=self.timeout,
                )
        except httpx.HTTPError as e:
            LOGGER.error(f"Error uploading file to storage: {str(e)}", exc_info=True)
            raise AttachmentUploadError(f"Storage upload error: {str(e)}", original_error=e) from e

        if response.status_code != 200:
            LOGGER.error(
                f"Failed to upload file to storage: {response.text}",
                extra={"bucket": self.bucket, "path": path, "status_code": response.status_code},
            )
            raise AttachmentUploadError(f"Upload failed: {response.text}")

        reference = f"{self.bucket}/{path}"
        LOGGER.info(f"Stored attachment {reference}", extra={"size": len(content)})
        return reference
