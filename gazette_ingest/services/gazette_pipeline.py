"""Gazette ingestion pipeline.

Sequence for one gazette PDF:

1. Slice the PDF into sections (degrades to an empty result on failure).
2. Extract gazette number and date and apply them to the parent document.
3. Set the parent's page range and URL.
4. Materialize section documents, tags and attachments.
5. Notify the user of the overall outcome.

Adapter failures are recorded on the parent's description and reported with
an ``error`` notification; they never abort the job. Only the outer time budget
is fatal (``OuterTimeoutError``), so that the job runner can retry it.
"""

import asyncio
from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from gazette_ingest.core.config import PipelineSettings, settings
from gazette_ingest.core.exceptions import (
    AdapterError,
    AdapterTimeoutError,
    DocumentNotFoundError,
    OuterTimeoutError,
)
from gazette_ingest.database.models import Document, User
from gazette_ingest.repositories.document_repository import DocumentRepository
from gazette_ingest.repositories.user_repository import UserRepository
from gazette_ingest.schemas.extraction import MetadataResult, SliceResult
from gazette_ingest.schemas.pipeline import PipelineOutcome, PipelineState, ProcessStatus
from gazette_ingest.services.constants import GAZETTE_DOCUMENT_NAME
from gazette_ingest.services.extraction.metadata import MetadataAdapter
from gazette_ingest.services.extraction.slicer import SlicerAdapter
from gazette_ingest.services.materializer import DocumentMaterializer
from gazette_ingest.services.notification_service import (
    GazetteAnnouncer,
    Notifier,
    NullAnnouncer,
    NullNotifier,
)
from gazette_ingest.services.tagging_service import TaggingService
from gazette_ingest.utils.logging import get_logger
from gazette_ingest.utils.text import friendly_url

LOGGER = get_logger(__name__)

REASON_EXCERPT_LENGTH = 200


def _truncate(text: str, length: int = REASON_EXCERPT_LENGTH) -> str:
    return text if len(text) <= length else text[: length - 3] + "..."


def _minutes(seconds: float) -> str:
    value = seconds / 60
    return f"{value:g} minute" + ("" if value == 1 else "s")


@dataclass
class _Job:
    """Mutable state of one pipeline run."""
    document: Document
    user: Optional[User]
    pdf_path: str
    state: PipelineState = PipelineState.STARTED
    status: Optional[ProcessStatus] = None
    page_count: int = 0
    sections_created: int = 0
    slicing_failed: bool = False
    metadata_applied: bool = False
    error_notifications: int = 0
    final_notification_sent: bool = False
    errors: List[str] = field(default_factory=list)

    def outcome(self) -> PipelineOutcome:
        return PipelineOutcome(
            document_id=self.document.id,
            status=self.status or ProcessStatus.ERROR,
            state=self.state,
            page_count=self.page_count,
            sections_created=self.sections_created,
            slicing_failed=self.slicing_failed,
            metadata_applied=self.metadata_applied,
            error_notifications=self.error_notifications,
            final_notification_sent=self.final_notification_sent,
            errors=list(self.errors),
            description=self.document.description,
        )


class GazetteIngestionPipeline:
    """Processes one uploaded gazette PDF into a gazette document plus its sections."""

    def __init__(
        self,
        session: Optional[AsyncSession] = None,
        *,
        document_repo: Optional[DocumentRepository] = None,
        user_repo: Optional[UserRepository] = None,
        slicer: Optional[SlicerAdapter] = None,
        metadata_adapter: Optional[MetadataAdapter] = None,
        tagging_service: Optional[TaggingService] = None,
        materializer: Optional[DocumentMaterializer] = None,
        notifier: Optional[Notifier] = None,
        announcer: Optional[GazetteAnnouncer] = None,
        pipeline_settings: Optional[PipelineSettings] = None,
        public_base_url: Optional[str] = None,
    ):
        self.config = pipeline_settings or settings.pipeline
        self.document_repo = document_repo or DocumentRepository(session)
        self.user_repo = user_repo or UserRepository(session)
        self.slicer = slicer or SlicerAdapter.from_settings(self.config)
        self.metadata_adapter = metadata_adapter or MetadataAdapter.from_settings(self.config)
        self.tagging_service = tagging_service or TaggingService(session)
        self.materializer = materializer or DocumentMaterializer(
            session,
            document_repo=self.document_repo,
            tagging_service=self.tagging_service,
            output_root=self.config.output_root,
        )
        self.notifier = notifier or NullNotifier()
        self.announcer = announcer or NullAnnouncer()
        self.public_base_url = (public_base_url or settings.notifications.public_base_url).rstrip("/")

    def edit_link(self, document: Document) -> str:
        return f"{self.public_base_url}/documents/{document.id}/edit"

    def gazette_link(self, document: Document) -> str:
        return f"{self.public_base_url}/admin/gazettes/{document.publication_number}"

    async def run(self, document_id: int, pdf_path: str, user_id: Optional[int] = None) -> PipelineOutcome:
        """Run the whole pipeline for a gazette under the job time budget.

        Args:
            document_id: Parent gazette document id
            pdf_path: Absolute path of the uploaded PDF
            user_id: User to notify, if any

        Returns:
            PipelineOutcome describing what happened

        Raises:
            DocumentNotFoundError: If the parent document does not exist
            OuterTimeoutError: If the job exceeded its time budget
        """
        document = await self.document_repo.get_by_id(document_id)
        if document is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")
        user = await self.user_repo.get_by_id(user_id) if user_id is not None else None

        job = _Job(document=document, user=user, pdf_path=pdf_path)
        LOGGER.info(
            f"Starting gazette processing for document {document_id}",
            extra={"document_id": document_id, "pdf_path": pdf_path},
        )

        try:
            await asyncio.wait_for(self._process(job), timeout=self.config.job_timeout)
        except asyncio.TimeoutError:
            message = f"Error: Document processing timed out after {_minutes(self.config.job_timeout)}"
            LOGGER.error(
                f"Gazette processing timed out after {self.config.job_timeout:g}s for document {document_id}",
                extra={"document_id": document_id, "state": job.state.value},
            )
            try:
                await self.document_repo.update(document.id, description=message)
            except SQLAlchemyError as e:
                # The cancelled step may have left the session unusable
                LOGGER.error(
                    f"Could not record the timeout on document {document_id}: {e}",
                    extra={"document_id": document_id},
                )
            await self._notify(job, self.edit_link(document), ProcessStatus.ERROR)
            raise OuterTimeoutError(message) from None

        LOGGER.info(
            f"Gazette processing finished for document {document_id} with status {job.status.value}",
            extra={"document_id": document_id, "sections_created": job.sections_created},
        )
        return job.outcome()

    async def _process(self, job: _Job) -> None:
        slice_result = await self._slice(job)
        job.state = PipelineState.SLICED

        if await self._apply_metadata(job):
            job.state = PipelineState.METADATA_APPLIED
        elif self.config.metadata_failure_policy == "abort":
            await self._apply_page_range(job, slice_result)
            job.status = ProcessStatus.ERROR
            LOGGER.warning(
                f"Skipping materialization for document {job.document.id}: metadata extraction failed",
                extra={"document_id": job.document.id},
            )
            return

        await self._apply_page_range(job, slice_result)

        if not slice_result.files:
            LOGGER.error(
                f"No files found in slicer output for document {job.document.id}",
                extra={"document_id": job.document.id},
            )
            job.status = ProcessStatus.WARNING
        else:
            materialization = await self.materializer.materialize(job.document, slice_result)
            job.sections_created = materialization.created
            if materialization.errors:
                job.errors.extend(materialization.errors)
                summary = (
                    f"Warning: {len(materialization.errors)} section attachment(s) could not be stored - "
                    + "; ".join(_truncate(error) for error in materialization.errors)
                )
                await self.document_repo.update(job.document.id, description=summary)
            job.status = ProcessStatus.SUCCESS
        job.state = PipelineState.MATERIALIZED

        await self._send_final_notification(job)
        job.state = PipelineState.NOTIFIED

    async def _slice(self, job: _Job) -> SliceResult:
        try:
            slice_result = await self.slicer.slice(
                job.pdf_path, self.config.output_root, job.document.id
            )
        except AdapterError as e:
            if isinstance(e, AdapterTimeoutError):
                message = f"Error: Gazette slicing timed out after {_minutes(e.timeout)}"
            else:
                message = f"Error: Gazette slicing failed - {_truncate(e.reason)}"
            job.slicing_failed = True
            await self._record_failure(job, message)
            return SliceResult.empty()

        LOGGER.info(
            f"Slicer returned {len(slice_result.files)} files and {slice_result.page_count} pages",
            extra={"document_id": job.document.id},
        )
        return slice_result

    async def _apply_metadata(self, job: _Job) -> bool:
        """Extract gazette metadata and apply it to the parent document.

        Returns:
            True if the metadata was applied
        """
        try:
            result: MetadataResult = await self.metadata_adapter.extract(job.pdf_path)
        except AdapterError as e:
            if isinstance(e, AdapterTimeoutError):
                message = f"Error: Gazette metadata extraction timed out after {_minutes(e.timeout)}"
            else:
                message = f"Error: Gazette metadata extraction failed - {_truncate(e.reason)}"
            await self._record_failure(job, message)
            return False

        gazette = result.gazette
        publication_date = gazette.date.isoformat()
        await self.document_repo.update(
            job.document.id,
            name=GAZETTE_DOCUMENT_NAME,
            publication_number=gazette.number,
            publication_date=gazette.date,
            short_description=f"This is gazette number {gazette.number} dated {publication_date}.",
            # Keep an earlier slicing error visible
            description="\n".join(job.errors) if job.errors else "",
            issue_id=gazette.number,
            url=friendly_url(GAZETTE_DOCUMENT_NAME, gazette.number),
        )
        await self.tagging_service.apply_gazette_tags(job.document.id)
        job.metadata_applied = True

        LOGGER.info(
            f"Applied gazette metadata: number={gazette.number}, date={publication_date}",
            extra={"document_id": job.document.id},
        )
        return True

    async def _apply_page_range(self, job: _Job, slice_result: SliceResult) -> None:
        job.page_count = slice_result.page_count
        end_page = slice_result.page_count - 1 if slice_result.page_count > 0 else 0
        if slice_result.page_count == 0:
            LOGGER.warning(
                f"Missing page count for document {job.document.id}, using 0..0",
                extra={"document_id": job.document.id},
            )
        await self.document_repo.update(
            job.document.id,
            start_page=0,
            end_page=end_page,
            url=friendly_url(job.document.name, job.document.publication_number),
        )

    async def _record_failure(self, job: _Job, message: str) -> None:
        """Persist a recoverable failure on the parent and send an error notification."""
        job.errors.append(message)
        LOGGER.error(message, extra={"document_id": job.document.id, "state": job.state.value})
        await self.document_repo.update(job.document.id, description="\n".join(job.errors))
        await self._notify(job, self.edit_link(job.document), ProcessStatus.ERROR)

    async def _send_final_notification(self, job: _Job) -> None:
        if job.error_notifications and not self.config.notify_after_error:
            LOGGER.info(
                f"Final {job.status.value} notification suppressed, an error notification was already sent",
                extra={"document_id": job.document.id},
            )
            return

        link = self.gazette_link(job.document)
        await self._notify(job, link, job.status)
        job.final_notification_sent = True

        if job.status is ProcessStatus.SUCCESS:
            await self.announcer.announce(job.document.publication_number or "", link)

    async def _notify(self, job: _Job, link: str, status: ProcessStatus) -> None:
        if status is ProcessStatus.ERROR:
            job.error_notifications += 1
        try:
            await self.notifier.notify(job.user, link, status)
        except Exception as e:
            LOGGER.error(
                f"Notifier raised while sending {status.value} notification: {e}",
                exc_info=True,
                extra={"document_id": job.document.id},
            )
