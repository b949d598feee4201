"""Models package - re-exports all models for convenient imports."""

from thoughtstream.models.base import Base, TimestampMixin
from thoughtstream.models.note import Attachment, AttachmentKind, Note

__all__ = [
    "Base",
    "TimestampMixin",
    "Attachment",
    "AttachmentKind",
    "Note",
]
