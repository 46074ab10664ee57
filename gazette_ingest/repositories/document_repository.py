from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gazette_ingest.database.models import Document, DocumentType
from gazette_ingest.repositories.base_repository import BaseRepository
from gazette_ingest.utils.logging import get_logger

LOGGER = get_logger(__name__)


class DocumentRepository(BaseRepository[Document]):
    """Repository for gazette and section Document records."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Document)

    async def create_section(
        self,
        *,
        name: Optional[str],
        issue_id: Optional[str],
        publication_number: Optional[str],
        publication_date: Optional[date],
        short_description: Optional[str],
        description: Optional[str],
        full_text: Optional[str],
        document_type_id: Optional[int],
        start_page: int,
        end_page: int,
        position: int,
    ) -> Document:
        """Create a published section document sliced out of a gazette."""
        return await self.create(
            name=name,
            issue_id=issue_id,
            publication_number=publication_number,
            publication_date=publication_date,
            short_description=short_description,
            description=description,
            full_text=full_text,
            document_type_id=document_type_id,
            start_page=start_page,
            end_page=end_page,
            position=position,
            publish=True,
        )


class DocumentTypeRepository(BaseRepository[DocumentType]):
    """Repository for DocumentType lookups."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, DocumentType)

    async def get_by_name(self, name: str) -> Optional[DocumentType]:
        result = await self.session.execute(
            select(DocumentType).where(DocumentType.name == name)
        )
        return result.scalar_one_or_none()
