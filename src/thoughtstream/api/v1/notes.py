"""
Notes API Router

REST endpoints for note capture, editing, deletion and feed search.
Search combines natural-language date filters, a content-type filter
and substring matching over note and attachment text.
"""

import io
import uuid
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Response, status
from PIL import Image, UnidentifiedImageError
from sqlalchemy.ext.asyncio import AsyncSession

from thoughtstream.core.database import get_db
from thoughtstream.models import AttachmentKind, Note
from thoughtstream.repositories import notes as repo
from thoughtstream.schemas.notes import (
    ContentFilterOption,
    DateFilterSchema,
    EmptyState,
    NoteCreate,
    NoteRead,
    NoteUpdate,
    SearchRequest,
    SearchResponse,
    ShareRequest,
)
from thoughtstream.search.filters import ContentFilter, empty_state_message, search_notes
from thoughtstream.services.capture import (
    NoteCaptureService,
    NoteSaveError,
    get_capture_service,
)

router = APIRouter()

FALLBACK_MEDIA_TYPE = "application/octet-stream"


def _image_media_type(data: bytes) -> str:
    try:
        with Image.open(io.BytesIO(data)) as image:
            return Image.MIME.get(image.format or "", FALLBACK_MEDIA_TYPE)
    except (UnidentifiedImageError, OSError):
        return FALLBACK_MEDIA_TYPE


def _audio_media_type(data: bytes) -> str:
    if data[:4] == b"RIFF" and data[8:12] == b"WAVE":
        return "audio/wav"
    if data[:4] == b"FORM" and data[8:12] in (b"AIFF", b"AIFC"):
        return "audio/aiff"
    if data[:4] == b"fLaC":
        return "audio/flac"
    return FALLBACK_MEDIA_TYPE


def media_type_for(kind: AttachmentKind, data: bytes) -> str:
    """Media type of a stored payload, sniffed from its leading bytes."""
    if kind is AttachmentKind.IMAGE:
        return _image_media_type(data)
    if kind is AttachmentKind.AUDIO:
        return _audio_media_type(data)
    if kind is AttachmentKind.PDF:
        return "application/pdf"
    return FALLBACK_MEDIA_TYPE


async def _get_note_or_404(db: AsyncSession, note_id: uuid.UUID) -> Note:
    db_note = await repo.get_by_id(db, note_id)
    if db_note is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Note not found"
        )
    return db_note


async def _capture(
    db: AsyncSession, service: NoteCaptureService, note_in: NoteCreate
) -> Note:
    try:
        return await service.capture(db, note_in)
    except NoteSaveError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e)
        ) from e


@router.post("/", response_model=NoteRead, status_code=status.HTTP_201_CREATED)
async def create_note(
    note: NoteCreate,
    db: AsyncSession = Depends(get_db),
    service: NoteCaptureService = Depends(get_capture_service),
):
    """
    Capture a new note.

    Attachment text (OCR, PDF text, transcription) is extracted before the
    note is saved, so the response already carries the searchable text.
    """
    return await _capture(db, service, note)


@router.post("/share", response_model=NoteRead, status_code=status.HTTP_201_CREATED)
async def share_items(
    shared: ShareRequest,
    db: AsyncSession = Depends(get_db),
    service: NoteCaptureService = Depends(get_capture_service),
):
    """Capture items handed over by a share sheet (text, URLs, images, PDFs)."""
    return await _capture(db, service, shared.to_note_create())


@router.get("/", response_model=list[NoteRead])
async def read_notes(
    skip: int = 0, limit: int = 100, db: AsyncSession = Depends(get_db)
):
    """List notes, newest first."""
    return await repo.list_recent(db, skip, limit)


@router.get("/filters", response_model=list[ContentFilterOption])
async def read_content_filters():
    """Content-type filters available for search."""
    return [ContentFilterOption(value=f, label=f.label) for f in ContentFilter]


@router.post("/search", response_model=SearchResponse)
async def search(search_req: SearchRequest, db: AsyncSession = Depends(get_db)):
    """
    Filter the feed.

    Date expressions in the query ("june 2024", "2023", "sept") are
    reported back in ``detected_filters`` and stripped from the text
    query. Only the filters listed in ``active_filters`` narrow the
    results.
    """
    notes = await repo.list_all(db)
    outcome = search_notes(
        notes,
        search_req.query,
        content_filter=search_req.content_filter,
        active_filters=[f.to_filter() for f in search_req.active_filters],
    )

    empty_state = None
    if not outcome.notes:
        title, message = empty_state_message(
            search_req.query, search_req.content_filter
        )
        empty_state = EmptyState(title=title, message=message)

    return SearchResponse(
        residual_query=outcome.residual,
        detected_filters=[
            DateFilterSchema.model_validate(f) for f in outcome.detected_filters
        ],
        notes=[NoteRead.model_validate(n) for n in outcome.notes],
        empty_state=empty_state,
    )


@router.get("/{note_id}", response_model=NoteRead)
async def read_note(note_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    """Retrieve a single note by ID."""
    return await _get_note_or_404(db, note_id)


@router.patch("/{note_id}", response_model=NoteRead)
async def update_note(
    note_id: uuid.UUID,
    note_in: NoteUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Edit a note's text content."""
    db_note = await _get_note_or_404(db, note_id)
    if note_in.content is None:
        return db_note
    return await repo.update_content(db, db_note, note_in.content)


@router.delete("/{note_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_note(note_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    """Delete a note together with its attachments."""
    db_note = await _get_note_or_404(db, note_id)
    await repo.delete(db, db_note)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{note_id}/attachments/{attachment_id}/data")
async def read_attachment_data(
    note_id: uuid.UUID,
    attachment_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    """Raw attachment payload (images, PDFs, audio)."""
    attachment = await repo.get_attachment(db, note_id, attachment_id)
    if attachment is None or attachment.data is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Attachment data not found"
        )
    headers = {}
    if attachment.filename:
        headers["Content-Disposition"] = (
            f"inline; filename*=UTF-8''{quote(attachment.filename)}"
        )
    return Response(
        content=attachment.data,
        media_type=media_type_for(attachment.kind, attachment.data),
        headers=headers,
    )
