"""Enqueues gazette processing jobs and exposes their bookkeeping."""

import os
from typing import Awaitable, Callable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from temporalio.client import Client as TemporalClient

from gazette_ingest.core.exceptions import AppError, DocumentNotFoundError, ValidationError
from gazette_ingest.core.temporal_client import get_temporal_client
from gazette_ingest.database.models import ProcessingJob
from gazette_ingest.repositories.document_repository import DocumentRepository
from gazette_ingest.repositories.processing_job_repository import ProcessingJobRepository
from gazette_ingest.temporal.core.constants import GAZETTE_TASK_QUEUE, WORKFLOW_ID_PREFIX
from gazette_ingest.temporal.workflows.process_gazette import ProcessGazetteWorkflow
from gazette_ingest.utils.logging import get_logger

LOGGER = get_logger(__name__)


class GazetteService:
    """Creates processing jobs and hands them to the Temporal worker pool."""

    def __init__(
        self,
        session: Optional[AsyncSession] = None,
        *,
        document_repo: Optional[DocumentRepository] = None,
        job_repo: Optional[ProcessingJobRepository] = None,
        client_provider: Callable[[], Awaitable[TemporalClient]] = get_temporal_client,
    ):
        self.document_repo = document_repo or DocumentRepository(session)
        self.job_repo = job_repo or ProcessingJobRepository(session)
        self.client_provider = client_provider

    async def enqueue(self, document_id: int, pdf_path: str, user_id: Optional[int] = None) -> ProcessingJob:
        """Create a job for an uploaded gazette and start its workflow.

        The workflow is started and not awaited; the job row tracks its progress.

        Args:
            document_id: Parent gazette document id
            pdf_path: Absolute path of the uploaded PDF on the worker host
            user_id: User notified when processing finishes

        Returns:
            The created ProcessingJob, with its workflow id set

        Raises:
            ValidationError: If the PDF path is not absolute
            DocumentNotFoundError: If the document does not exist
            AppError: If the workflow could not be started
        """
        if not pdf_path or not os.path.isabs(pdf_path):
            raise ValidationError(f"PDF path must be absolute, got {pdf_path!r}")

        document = await self.document_repo.get_by_id(document_id)
        if document is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")
        await self.document_repo.update(document_id, source_pdf_path=pdf_path)

        job = await self.job_repo.create_job(document_id=document_id, pdf_path=pdf_path, user_id=user_id)
        workflow_id = f"{WORKFLOW_ID_PREFIX}-{job.id}"

        try:
            client = await self.client_provider()
            await client.start_workflow(
                ProcessGazetteWorkflow.run,
                {
                    "job_id": job.id,
                    "document_id": document_id,
                    "pdf_path": pdf_path,
                    "user_id": user_id,
                },
                id=workflow_id,
                task_queue=GAZETTE_TASK_QUEUE,
            )
        except Exception as e:
            LOGGER.error(
                f"Failed to start workflow for gazette job {job.id}: {e}",
                exc_info=True,
                extra={"job_id": job.id, "document_id": document_id},
            )
            await self.job_repo.mark_failed(job.id, f"Could not start workflow: {e}")
            raise AppError(f"Could not start processing for document {document_id}", original_error=e) from e

        LOGGER.info(
            f"Enqueued gazette job {job.id} for document {document_id}",
            extra={"job_id": job.id, "workflow_id": workflow_id},
        )
        return await self.job_repo.set_workflow_id(job.id, workflow_id) or job

    async def get_job(self, job_id: int) -> Optional[ProcessingJob]:
        return await self.job_repo.get_by_id(job_id)

    async def list_dead_letter(self, skip: int = 0, limit: int = 50) -> List[ProcessingJob]:
        """Jobs that exhausted their retries and wait for manual inspection."""
        return await self.job_repo.list_dead_lettered(skip=skip, limit=limit)
