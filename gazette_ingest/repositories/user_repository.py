from sqlalchemy.ext.asyncio import AsyncSession

from gazette_ingest.database.models import User
from gazette_ingest.repositories.base_repository import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for notification recipients."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, User)
