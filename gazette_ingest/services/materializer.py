"""Creates section documents, tags and attachments from a slice result."""

import asyncio
from pathlib import Path
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from gazette_ingest.core.config import settings
from gazette_ingest.core.exceptions import AttachmentUploadError
from gazette_ingest.database.models import Document
from gazette_ingest.repositories.document_repository import DocumentRepository, DocumentTypeRepository
from gazette_ingest.schemas.extraction import SectionCategory, SliceEntry, SliceResult
from gazette_ingest.schemas.pipeline import MaterializationOutcome
from gazette_ingest.services.constants import PDF_CONTENT_TYPE, SECTION_DOCUMENT_TYPES
from gazette_ingest.services.storage_service import AttachmentStore, StorageService
from gazette_ingest.services.tagging_service import TaggingService
from gazette_ingest.utils.logging import get_logger
from gazette_ingest.utils.text import clean_text, friendly_url

LOGGER = get_logger(__name__)


def format_publication_date(document: Document) -> str:
    if document.publication_date is None:
        return "unknown date"
    return document.publication_date.isoformat()


def fixed_section_description(section_name: str, parent: Document) -> str:
    return (
        f"This is the {section_name} section of Gazette {parent.publication_number or ''} "
        f"dated {format_publication_date(parent)}."
    )


class DocumentMaterializer:
    """Turns each slicer entry into a published section document.

    Sections are processed in slicer order. A section whose file cannot be read
    or uploaded is still created, tagged and given its URL; the failure is
    collected in the outcome instead of stopping the batch.
    """

    def __init__(
        self,
        session: Optional[AsyncSession] = None,
        *,
        document_repo: Optional[DocumentRepository] = None,
        document_type_repo: Optional[DocumentTypeRepository] = None,
        tagging_service: Optional[TaggingService] = None,
        attachment_store: Optional[AttachmentStore] = None,
        output_root: Optional[str] = None,
    ):
        self.document_repo = document_repo or DocumentRepository(session)
        self.document_type_repo = document_type_repo or DocumentTypeRepository(session)
        self.tagging_service = tagging_service or TaggingService(session)
        self.attachment_store = attachment_store or StorageService()
        self.output_root = Path(output_root or settings.pipeline.output_root)
        self._document_type_ids: dict = {}

    async def materialize(self, parent: Document, slice_result: SliceResult) -> MaterializationOutcome:
        """Create one section document per slice entry.

        Args:
            parent: The gazette the sections were sliced from
            slice_result: Validated slicer output

        Returns:
            MaterializationOutcome with the created count and per-file errors
        """
        outcome = MaterializationOutcome()

        for entry in slice_result.files:
            LOGGER.info(
                f"Creating section '{entry.name}' for gazette {parent.id}",
                extra={"document_id": parent.id, "position": entry.position},
            )
            section = await self._create_section(parent, entry)
            outcome.created += 1
            outcome.section_ids.append(section.id)

            await self.tagging_service.apply_section_tags(section.id, entry)
            await self.tagging_service.detect_institution_tags(section.id, entry.full_text)

            await self.document_repo.update(
                section.id,
                url=friendly_url(entry.category.label, parent.publication_number),
            )

            try:
                reference = await self._upload_attachment(parent, section, entry)
            except AttachmentUploadError as e:
                error = f"{entry.category.label}: {e.message}"
                outcome.errors.append(error)
                LOGGER.warning(
                    f"Attachment failed for section {section.id}: {e.message}",
                    extra={"document_id": parent.id, "section_id": section.id},
                )
                continue

            await self.document_repo.update(section.id, original_file=reference)

        for slicer_error in slice_result.errors:
            LOGGER.warning(
                f"Slicer reported an error for gazette {parent.id}: {slicer_error}",
                extra={"document_id": parent.id},
            )
        if outcome.errors:
            LOGGER.warning(
                f"{len(outcome.errors)} of {outcome.created} section attachments failed for gazette {parent.id}",
                extra={"document_id": parent.id, "errors": outcome.errors},
            )

        LOGGER.info(
            f"Created {outcome.created} section documents for gazette {parent.id}",
            extra={"document_id": parent.id},
        )
        return outcome

    async def _create_section(self, parent: Document, entry: SliceEntry) -> Document:
        category = entry.category
        if category.is_fixed:
            short_description = fixed_section_description(category.fixed_name, parent)
            long_description = ""
        else:
            short_description = clean_text(entry.short_description)
            long_description = clean_text(entry.description)

        return await self.document_repo.create_section(
            name=category.fixed_name,
            issue_id=category.identifier,
            publication_number=parent.publication_number,
            publication_date=parent.publication_date,
            short_description=short_description,
            description=long_description,
            full_text=clean_text(entry.full_text),
            document_type_id=await self._document_type_id(category),
            start_page=entry.start_page,
            end_page=entry.end_page,
            position=entry.position,
        )

    async def _document_type_id(self, category: SectionCategory) -> Optional[int]:
        type_name = SECTION_DOCUMENT_TYPES[category.kind]
        if type_name not in self._document_type_ids:
            document_type = await self.document_type_repo.get_by_name(type_name)
            if document_type is None:
                LOGGER.warning(f"Document type '{type_name}' does not exist")
            self._document_type_ids[type_name] = document_type.id if document_type else None
        return self._document_type_ids[type_name]

    async def _upload_attachment(self, parent: Document, section: Document, entry: SliceEntry) -> str:
        """Read the sliced PDF from disk and hand it to the attachment store.

        Raises:
            AttachmentUploadError: If the file is missing, unreadable or the upload fails
        """
        gazette_dir = (self.output_root / str(parent.id)).resolve()
        source = (gazette_dir / entry.path).resolve()
        if not source.is_relative_to(gazette_dir):
            raise AttachmentUploadError(f"File path {entry.path!r} escapes the gazette output directory")

        try:
            content = await asyncio.to_thread(source.read_bytes)
        except OSError as e:
            raise AttachmentUploadError(f"Could not read {source}: {e}", original_error=e) from e

        filename = f"{entry.category.label}.pdf".replace("/", "-")
        return await self.attachment_store.store(
            content,
            filename,
            PDF_CONTENT_TYPE,
            key_prefix=f"{parent.id}/{section.id}",
        )
