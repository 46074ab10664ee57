import httpx
import pytest
from unittest.mock import MagicMock, patch

from gazette_ingest.core.exceptions import AppError, AttachmentUploadError
from gazette_ingest.services.storage_service import StorageService


@pytest.fixture
def storage_service():
    return StorageService(
        bucket="gazettes",
        url="https://test.supabase.co/",
        service_role_key="service-key",
        timeout=5,
    )


@pytest.mark.asyncio
async def test_store_success(storage_service, sample_pdf_content):
    with patch("httpx.AsyncClient.post") as mock_post:
        mock_post.return_value = MagicMock(status_code=200, text='{"Key": "gazettes/1/2/Trademarks.pdf"}')

        reference = await storage_service.store(
            sample_pdf_content, "Trademarks.pdf", "application/pdf", key_prefix="1/2"
        )

        assert reference == "gazettes/1/2/Trademarks.pdf"
        mock_post.assert_called_once()
        args, kwargs = mock_post.call_args
        assert args[0] == "https://test.supabase.co/storage/v1/object/gazettes/1/2/Trademarks.pdf"
        assert kwargs["content"] == sample_pdf_content
        assert kwargs["headers"]["Content-Type"] == "application/pdf"
        assert kwargs["headers"]["x-upsert"] == "true"
        assert kwargs["headers"]["Authorization"] == "Bearer service-key"


@pytest.mark.asyncio
async def test_store_without_prefix(storage_service):
    with patch("httpx.AsyncClient.post") as mock_post:
        mock_post.return_value = MagicMock(status_code=200, text="{}")

        reference = await storage_service.store(b"data", "Gazette.pdf", "application/pdf")

        assert reference == "gazettes/Gazette.pdf"


@pytest.mark.asyncio
async def test_store_failure(storage_service):
    with patch("httpx.AsyncClient.post") as mock_post:
        mock_post.return_value = MagicMock(status_code=400, text="Bad Request")

        with pytest.raises(AttachmentUploadError, match="Upload failed: Bad Request"):
            await storage_service.store(b"data", "Trademarks.pdf", "application/pdf")


@pytest.mark.asyncio
async def test_store_transport_error(storage_service):
    with patch("httpx.AsyncClient.post") as mock_post:
        mock_post.side_effect = httpx.ConnectError("connection refused")

        with pytest.raises(AttachmentUploadError, match="Storage upload error") as exc_info:
            await storage_service.store(b"data", "Trademarks.pdf", "application/pdf")

        assert isinstance(exc_info.value, AppError)
        assert isinstance(exc_info.value.original_error, httpx.ConnectError)
