"""Base CRUD class shared by all model accessors."""

from typing import Any, Generic, Optional, Type, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from pagemeter.models._base import Base

ModelType = TypeVar("ModelType", bound=Base)


class CRUDBase(Generic[ModelType]):
    """Base class for CRUD operations.

    Methods never commit. The caller owns the transaction, usually through
    ``async with session.begin()``.
    """

    def __init__(self, model: Type[ModelType]):
        """Initialize the CRUD object.

        Args:
        ----
            model (Type[ModelType]): The SQLAlchemy model class.

        """
        self.model = model

    async def get(self, db: AsyncSession, id: Any) -> Optional[ModelType]:
        """Get a single object by primary key.

        Args:
        ----
            db (AsyncSession): The database session.
            id (Any): The primary key value.

        Returns:
        -------
            Optional[ModelType]: The object, or None if it does not exist.

        """
        return await db.get(self.model, id)

    async def create(self, db: AsyncSession, *, obj_in: dict[str, Any]) -> ModelType:
        """Add a new object to the session and flush it.

        Flushing populates server-side defaults such as identity columns.
        """
        db_obj = self.model(**obj_in)
        db.add(db_obj)
        await db.flush()
        await db.refresh(db_obj)
        return db_obj

    async def _first(self, db: AsyncSession, query) -> Optional[ModelType]:
        result = await db.execute(query)
        return result.scalars().first()
