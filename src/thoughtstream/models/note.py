"""
Note and Attachment Models

A Note owns zero or more Attachments. Deleting a note removes its
attachments (relationship cascade plus ON DELETE CASCADE on the FK).
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime

from sqlalchemy import (
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    LargeBinary,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from thoughtstream.models.base import Base, TimestampMixin, utcnow


class AttachmentKind(enum.StrEnum):
    """Discriminant for attachment content."""

    IMAGE = "image"
    PDF = "pdf"
    LINK = "link"
    AUDIO = "audio"

    @property
    def has_payload(self) -> bool:
        """Links carry a URL; every other kind carries binary data."""
        return self is not AttachmentKind.LINK


class Note(Base, TimestampMixin):
    """
    Note entity.

    Attributes:
        id: UUID primary key (generated Python-side).
        content: Free text typed by the user, may be empty.
        extracted_text: Space-joined text extracted from all attachments,
            kept on the note so search does not need to walk attachments.
        attachments: Owned attachments in capture order.
    """

    __tablename__ = "notes"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    extracted_text: Mapped[str | None] = mapped_column(Text, nullable=True)

    # selectin: attachments are always loaded with the note (no async lazy loads)
    attachments: Mapped[list[Attachment]] = relationship(
        back_populates="note",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="Attachment.position",
    )

    def __repr__(self) -> str:
        preview = (self.content or "")[:20]
        return f"<Note(id={self.id!s:.8}, content='{preview}...')>"


class Attachment(Base):
    """
    Attachment entity.

    Exactly one primary content field is meaningful per kind:
    ``link_url`` for links, ``data`` for images, PDFs and audio.

    Attributes:
        id: UUID primary key.
        note_id: Owning note (CASCADE delete).
        position: Zero-based capture order within the note.
        kind: AttachmentKind discriminant.
        data: Binary payload (None for links).
        filename: Optional display name.
        link_url: Target URL (links only).
        extracted_text: OCR or transcription output, None when nothing
            was extracted.
    """

    __tablename__ = "attachments"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    note_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("notes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    kind: Mapped[AttachmentKind] = mapped_column(
        Enum(
            AttachmentKind,
            native_enum=False,
            length=16,
            values_callable=lambda kinds: [k.value for k in kinds],
        ),
        nullable=False,
    )
    data: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True)
    filename: Mapped[str | None] = mapped_column(String(500), nullable=True)
    link_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    extracted_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    note: Mapped[Note] = relationship(back_populates="attachments")

    def __repr__(self) -> str:
        return f"<Attachment(id={self.id!s:.8}, kind='{self.kind}')>"
