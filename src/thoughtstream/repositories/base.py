"""
Base Repository

Generic repository pattern implementation for async SQLAlchemy CRUD operations.
Provides type-safe database access with consistent session handling.
"""

import uuid
from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from thoughtstream.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Generic repository providing common CRUD operations.

    All methods expect an externally managed session (injected via FastAPI
    dependency or opened by a service). Every write commits its own
    transaction.

    Usage:
        class NoteRepository(BaseRepository[Note]):
            def __init__(self):
                super().__init__(Note)
    """

    def __init__(self, model: type[ModelType]):
        self.model = model

    async def get_by_id(self, session: AsyncSession, id: uuid.UUID) -> ModelType | None:
        """Get a record by primary key. Returns None if not found."""
        result = await session.execute(
            select(self.model).where(self.model.id == id)  # type: ignore[attr-defined]
        )
        return result.scalars().first()

    async def update(
        self,
        session: AsyncSession,
        db_obj: ModelType,
        obj_in: Any,
    ) -> ModelType:
        """
        Update a record with partial data.

        Args:
            session: Active database session.
            db_obj: Existing entity to update.
            obj_in: Pydantic schema or dict (only provided fields are updated).
        """
        update_data = (
            obj_in.model_dump(exclude_unset=True)  # Partial update support
            if hasattr(obj_in, "model_dump")
            else obj_in
        )
        for field, value in update_data.items():
            setattr(db_obj, field, value)
        await session.commit()
        await session.refresh(db_obj)
        return db_obj

    async def delete(self, session: AsyncSession, db_obj: ModelType) -> None:
        """Delete a record."""
        await session.delete(db_obj)
        await session.commit()
