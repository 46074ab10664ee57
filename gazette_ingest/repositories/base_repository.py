from typing import Any, Generic, List, Optional, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from gazette_ingest.utils.logging import get_logger

ModelType = TypeVar("ModelType")

LOGGER = get_logger(__name__)


class BaseRepository(Generic[ModelType]):
    """Base repository for the pipeline's tables.

    Every write is committed immediately, so a record created or updated before a
    later failure stays persisted. A failed write is rolled back and re-raised.
    """

    def __init__(self, session: AsyncSession, model: Type[ModelType]):
        self.session = session
        self.model = model
        self.logger = LOGGER

    async def get_by_id(self, id: int) -> Optional[ModelType]:
        try:
            result = await self.session.execute(select(self.model).where(self.model.id == id))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error retrieving {self.model.__name__} by ID {id}: {str(e)}",
                exc_info=True
            )
            raise

    async def find(self, *, skip: int = 0, limit: int = 200, newest_first: bool = False, **filters: Any) -> List[ModelType]:
        """List records whose columns equal the given filter values.

        Args:
            skip: Number of records to skip
            limit: Maximum number of records to return
            newest_first: Order by descending id instead of ascending
            **filters: column_name=value pairs; unknown columns raise AttributeError

        Returns:
            Matching records
        """
        query = select(self.model)
        for column, value in filters.items():
            query = query.where(getattr(self.model, column) == value)
        order = self.model.id.desc() if newest_first else self.model.id
        try:
            result = await self.session.execute(query.order_by(order).offset(skip).limit(limit))
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing {self.model.__name__}: {str(e)}", exc_info=True)
            raise

    async def create(self, **kwargs) -> ModelType:
        instance = self.model(**kwargs)
        self.session.add(instance)
        await self._commit(f"creating {self.model.__name__}")
        return instance

    async def update(self, id: int, **kwargs) -> Optional[ModelType]:
        """Set the given columns on a record.

        Returns:
            The updated record, or None if no record has that id
        """
        instance = await self.get_by_id(id)
        if instance is None:
            return None

        for key, value in kwargs.items():
            if not hasattr(instance, key):
                raise AttributeError(f"{self.model.__name__} has no column '{key}'")
            setattr(instance, key, value)

        await self._commit(f"updating {self.model.__name__} {id}")
        return instance

    async def _commit(self, action: str) -> None:
        try:
            await self.session.flush()
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            self.logger.error(f"Error {action}: {str(e)}", exc_info=True)
            raise
