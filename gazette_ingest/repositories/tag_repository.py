from typing import List, Optional, Tuple, Type, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gazette_ingest.database.models import AlternativeTagName, DocumentTag, IssuerDocumentTag, Tag
from gazette_ingest.repositories.base_repository import BaseRepository
from gazette_ingest.utils.logging import get_logger

LOGGER = get_logger(__name__)


class TagRepository(BaseRepository[Tag]):
    """Repository for Tag lookups."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Tag)

    async def get_by_name(self, name: str) -> Optional[Tag]:
        result = await self.session.execute(select(Tag).where(Tag.name == name))
        return result.scalar_one_or_none()


class _TagAssociationRepository(BaseRepository[Union[DocumentTag, IssuerDocumentTag]]):
    """Shared logic for the (document, tag) association tables."""

    def __init__(self, session: AsyncSession, model: Type):
        super().__init__(session, model)

    async def exists(self, document_id: int, tag_id: int) -> bool:
        result = await self.session.execute(
            select(self.model.id).where(
                self.model.document_id == document_id,
                self.model.tag_id == tag_id,
            )
        )
        return result.first() is not None

    async def ensure(self, document_id: int, tag_id: int) -> bool:
        """Create the association unless it already exists.

        Returns:
            True if a new association was created
        """
        if await self.exists(document_id, tag_id):
            return False
        await self.create(document_id=document_id, tag_id=tag_id)
        return True


class DocumentTagRepository(_TagAssociationRepository):
    """General tag associations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, DocumentTag)


class IssuerDocumentTagRepository(_TagAssociationRepository):
    """Issuer tag associations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, IssuerDocumentTag)


class AlternativeTagNameRepository(BaseRepository[AlternativeTagName]):
    """Read-only access to the alternate tag name lookup table."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, AlternativeTagName)

    async def list_names(self) -> List[Tuple[str, int]]:
        """Return every (alternative_name, tag_id) pair."""
        result = await self.session.execute(
            select(AlternativeTagName.alternative_name, AlternativeTagName.tag_id)
            .order_by(AlternativeTagName.id)
        )
        return [(row.alternative_name, row.tag_id) for row in result.all()]
