"""
Note Repository

Data access layer for Note and Attachment entities.
Extends BaseRepository with the ordered feed query and explicit
note-to-attachment cascade steps.
"""

import logging
import uuid
from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from thoughtstream.models import Attachment, Note
from thoughtstream.models.base import utcnow
from thoughtstream.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class NoteRepository(BaseRepository[Note]):
    """
    Repository for notes and their attachments.

    Inherits get_by_id/update from BaseRepository and adds:
        - create_with_attachments: note plus attachments in one transaction
        - list_recent / list_all: feed ordered by creation time, newest first
        - update_content: edit flow that always bumps updated_at
        - delete: removes attachments, then the note, in one transaction
    """

    def __init__(self) -> None:
        super().__init__(Note)

    async def create_with_attachments(
        self,
        session: AsyncSession,
        note: Note,
        attachments: Sequence[Attachment] = (),
    ) -> Note:
        """
        Persist a note and its attachments atomically.

        Attachment positions are assigned from the sequence order.
        """
        for position, attachment in enumerate(attachments):
            attachment.position = position
        note.attachments = list(attachments)

        session.add(note)
        await session.commit()
        await session.refresh(note)

        logger.info("Saved note %s with %d attachments", note.id, len(attachments))
        return note

    async def list_recent(
        self,
        session: AsyncSession,
        skip: int = 0,
        limit: int = 100,
    ) -> Sequence[Note]:
        """Page through notes, newest first."""
        stmt = (
            select(Note)
            .order_by(Note.created_at.desc(), Note.id)
            .offset(skip)
            .limit(limit)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def list_all(self, session: AsyncSession) -> Sequence[Note]:
        """The whole feed, newest first (search input)."""
        stmt = select(Note).order_by(Note.created_at.desc(), Note.id)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def update_content(
        self,
        session: AsyncSession,
        note: Note,
        content: str,
    ) -> Note:
        """Replace the note text and stamp the edit time."""
        return await self.update(
            session,
            note,
            {"content": content, "updated_at": utcnow()},
        )

    async def delete(self, session: AsyncSession, db_obj: Note) -> None:
        """Delete a note and, explicitly, every attachment it owns."""
        await session.refresh(db_obj, attribute_names=["attachments"])
        for attachment in list(db_obj.attachments):
            await session.delete(attachment)
        await super().delete(session, db_obj)
        logger.info("Deleted note %s", db_obj.id)

    async def get_attachment(
        self,
        session: AsyncSession,
        note_id: uuid.UUID,
        attachment_id: uuid.UUID,
    ) -> Attachment | None:
        """Look up an attachment, scoped to its owning note."""
        stmt = select(Attachment).where(
            Attachment.id == attachment_id,
            Attachment.note_id == note_id,
        )
        result = await session.execute(stmt)
        return result.scalars().first()


# Module-level instance for function-based API
note_repository = NoteRepository()


# ============================================================================
# Function-based API (delegates to repository instance)
# Provides a simpler import pattern: `from repositories import notes as repo`
# ============================================================================


async def get_by_id(session: AsyncSession, note_id: uuid.UUID) -> Note | None:
    """Get a note by ID."""
    return await note_repository.get_by_id(session, note_id)


async def list_recent(
    session: AsyncSession,
    skip: int = 0,
    limit: int = 100,
) -> Sequence[Note]:
    """Get notes newest first with pagination."""
    return await note_repository.list_recent(session, skip, limit)


async def list_all(session: AsyncSession) -> Sequence[Note]:
    """Get every note, newest first."""
    return await note_repository.list_all(session)


async def update_content(session: AsyncSession, note: Note, content: str) -> Note:
    """Edit a note's text."""
    return await note_repository.update_content(session, note, content)


async def delete(session: AsyncSession, note: Note) -> None:
    """Delete a note with its attachments."""
    await note_repository.delete(session, note)


async def get_attachment(
    session: AsyncSession,
    note_id: uuid.UUID,
    attachment_id: uuid.UUID,
) -> Attachment | None:
    """Get one attachment of a note."""
    return await note_repository.get_attachment(session, note_id, attachment_id)
