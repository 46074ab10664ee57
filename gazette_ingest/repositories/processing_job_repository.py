from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from gazette_ingest.database.models import ProcessingJob
from gazette_ingest.repositories.base_repository import BaseRepository
from gazette_ingest.utils.logging import get_logger

LOGGER = get_logger(__name__)

ERROR_EXCERPT_LENGTH = 2000


class ProcessingJobRepository(BaseRepository[ProcessingJob]):
    """Repository tracking gazette processing jobs through their retries."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, ProcessingJob)

    async def create_job(self, document_id: int, pdf_path: str, user_id: Optional[int]) -> ProcessingJob:
        return await self.create(
            document_id=document_id,
            pdf_path=pdf_path,
            user_id=user_id,
            status="queued",
            attempts=0,
        )

    async def set_workflow_id(self, job_id: int, workflow_id: str) -> Optional[ProcessingJob]:
        return await self.update(job_id, workflow_id=workflow_id)

    async def mark_running(self, job_id: int, attempt: int) -> Optional[ProcessingJob]:
        return await self.update(job_id, status="running", attempts=attempt)

    async def mark_completed(self, job_id: int, final_status: str) -> Optional[ProcessingJob]:
        return await self.update(job_id, status="completed", final_status=final_status, last_error=None)

    async def mark_failed(self, job_id: int, error: str) -> Optional[ProcessingJob]:
        return await self.update(job_id, status="failed", last_error=error[:ERROR_EXCERPT_LENGTH])

    async def mark_dead_lettered(self, job_id: int, error: str) -> Optional[ProcessingJob]:
        LOGGER.warning(
            f"Job {job_id} moved to manual inspection queue",
            extra={"job_id": job_id, "error": error},
        )
        return await self.update(
            job_id,
            status="dead_lettered",
            final_status="error",
            last_error=error[:ERROR_EXCERPT_LENGTH],
        )

    async def list_dead_lettered(self, skip: int = 0, limit: int = 50) -> List[ProcessingJob]:
        return await self.find(skip=skip, limit=limit, newest_first=True, status="dead_lettered")
