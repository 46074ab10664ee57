"""Activities running the gazette ingestion pipeline and its job bookkeeping."""

from typing import Dict, Optional

from temporalio import activity

from gazette_ingest.core.database import async_session_maker
from gazette_ingest.core.exceptions import DocumentNotFoundError
from gazette_ingest.repositories.processing_job_repository import ProcessingJobRepository
from gazette_ingest.services.gazette_pipeline import GazetteIngestionPipeline
from gazette_ingest.services.notification_service import build_announcer, build_notifier
from gazette_ingest.temporal.core.activity_registry import ActivityRegistry


async def _record_job(job_id: int, method: str, *args) -> None:
    # Bookkeeping uses its own session so a rolled back pipeline session never loses it
    async with async_session_maker() as session:
        await getattr(ProcessingJobRepository(session), method)(job_id, *args)


@ActivityRegistry.register("gazette", "process_gazette")
@activity.defn
async def process_gazette(
    job_id: int,
    document_id: int,
    pdf_path: str,
    user_id: Optional[int] = None,
) -> Dict:
    """Run the ingestion pipeline for one gazette upload.

    Any exception raised here fails the attempt and lets Temporal retry it;
    ``DocumentNotFoundError`` is configured as non-retryable by the workflow.
    """
    attempt = activity.info().attempt
    activity.logger.info(
        f"Processing gazette document {document_id} (job {job_id}, attempt {attempt})",
        extra={"job_id": job_id, "document_id": document_id, "pdf_path": pdf_path},
    )
    await _record_job(job_id, "mark_running", attempt)

    try:
        async with async_session_maker() as session:
            pipeline = GazetteIngestionPipeline(
                session,
                notifier=build_notifier(),
                announcer=build_announcer(),
            )
            outcome = await pipeline.run(document_id, pdf_path, user_id)
    except DocumentNotFoundError as e:
        activity.logger.error(f"Gazette job {job_id} has no document: {e.message}")
        await _record_job(job_id, "mark_failed", e.message)
        raise
    except Exception as e:
        activity.logger.error(
            f"Gazette job {job_id} attempt {attempt} failed: {e}",
            exc_info=True,
            extra={"job_id": job_id, "document_id": document_id},
        )
        await _record_job(job_id, "mark_failed", str(e))
        raise

    await _record_job(job_id, "mark_completed", outcome.status.value)
    activity.logger.info(
        f"Gazette job {job_id} completed with status {outcome.status.value}",
        extra={"job_id": job_id, "sections_created": outcome.sections_created},
    )
    return outcome.model_dump(mode="json")


@ActivityRegistry.register("gazette", "dead_letter_gazette_job")
@activity.defn
async def dead_letter_gazette_job(job_id: int, error: str) -> None:
    """Move a job that exhausted its retries to the manual inspection queue."""
    activity.logger.warning(f"Dead-lettering gazette job {job_id}: {error}", extra={"job_id": job_id})
    await _record_job(job_id, "mark_dead_lettered", error)
