"""Repositories package."""

from thoughtstream.repositories.base import BaseRepository
from thoughtstream.repositories.notes import NoteRepository, note_repository

__all__ = [
    "BaseRepository",
    "NoteRepository",
    "note_repository",
]
