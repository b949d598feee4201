"""
Note Capture Service

Turns a NoteCreate request into a persisted Note:

    1. Build Note + Attachment records from the request.
    2. Extract text from every payload-carrying attachment concurrently.
    3. Write each result back onto its attachment and fold all found
       text into ``Note.extracted_text`` (attachment order).
    4. Persist note and attachments in a single transaction.

Extraction never fails the capture: a collaborator that errors or times
out leaves its attachment without text. Cancelling ``capture`` before
the save discards in-flight extraction and stores nothing.
"""

from __future__ import annotations

import asyncio
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from thoughtstream.core.config import settings
from thoughtstream.models import Attachment, AttachmentKind, Note
from thoughtstream.repositories.notes import NoteRepository, note_repository
from thoughtstream.schemas.notes import AttachmentCreate, NoteCreate
from thoughtstream.services.extraction import (
    AudioTranscriber,
    DocumentTextExtractor,
    ExtractionResult,
    ImageTextExtractor,
    PdfTextExtractor,
    SpeechRecognitionTranscriber,
    TesseractImageExtractor,
    TextExtractor,
)

logger = logging.getLogger(__name__)


class NoteSaveError(Exception):
    """The note could not be written to the store; nothing was saved."""


class NoteCaptureService:
    """
    Extract-then-save workflow for new notes.

    Collaborators are injected so tests can swap in fakes.

    Usage::

        service = NoteCaptureService(
            image_extractor=TesseractImageExtractor(),
            document_extractor=PdfTextExtractor(),
            transcriber=SpeechRecognitionTranscriber(),
        )
        async with AsyncSessionLocal() as session:
            note = await service.capture(session, NoteCreate(content="hi"))

    Args:
        image_extractor: OCR for image attachments.
        document_extractor: Text layer reader for PDF attachments.
        transcriber: Speech-to-text for audio attachments.
        repository: Note persistence.
        extraction_timeout: Seconds before an extraction is abandoned.
    """

    def __init__(
        self,
        image_extractor: ImageTextExtractor,
        document_extractor: DocumentTextExtractor,
        transcriber: AudioTranscriber,
        repository: NoteRepository | None = None,
        extraction_timeout: float | None = None,
    ) -> None:
        self._extractors: dict[AttachmentKind, TextExtractor] = {
            AttachmentKind.IMAGE: image_extractor,
            AttachmentKind.PDF: document_extractor,
            AttachmentKind.AUDIO: transcriber,
        }
        self._repository = repository or note_repository
        self._timeout = (
            extraction_timeout
            if extraction_timeout is not None
            else settings.EXTRACTION_TIMEOUT
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def capture(self, session: AsyncSession, note_in: NoteCreate) -> Note:
        """
        Extract attachment text and persist the note.

        Args:
            session: Active async database session.
            note_in: Validated note request.

        Returns:
            The saved Note with its attachments.

        Raises:
            NoteSaveError: If the database write fails.
        """
        note = Note(content=note_in.content)
        if note_in.created_at is not None:
            note.created_at = note_in.created_at
            note.updated_at = note_in.created_at

        attachments = [self._build_attachment(item) for item in note_in.attachments]

        results = await asyncio.gather(
            *(self._extract(attachment) for attachment in attachments)
        )

        found: list[str] = []
        for attachment, result in zip(attachments, results, strict=True):
            attachment.extracted_text = result.text
            if result.ok:
                found.append(result.text)
        note.extracted_text = " ".join(found)

        try:
            saved = await self._repository.create_with_attachments(
                session, note, attachments
            )
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error("Failed to save note: %s", e)
            raise NoteSaveError("The note could not be saved") from e

        logger.info(
            "Captured note %s (%d attachments, %d with text)",
            saved.id,
            len(attachments),
            len(found),
        )
        return saved

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _build_attachment(item: AttachmentCreate) -> Attachment:
        return Attachment(
            kind=item.kind,
            data=item.data if item.kind.has_payload else None,
            filename=item.filename,
            link_url=item.link_url if item.kind is AttachmentKind.LINK else None,
        )

    async def _extract(self, attachment: Attachment) -> ExtractionResult:
        """Run the matching extractor; any failure yields nothing."""
        extractor = self._extractors.get(attachment.kind)
        if extractor is None or not attachment.data:
            return ExtractionResult.nothing()

        try:
            return await asyncio.wait_for(
                extractor.extract(attachment.data),
                timeout=self._timeout,
            )
        except TimeoutError:
            logger.warning(
                "%s extraction timed out after %.1fs", attachment.kind, self._timeout
            )
        except Exception as e:
            logger.warning("%s extraction failed: %s", attachment.kind, e)
        return ExtractionResult.nothing()


def get_capture_service() -> NoteCaptureService:
    """FastAPI dependency - capture service wired to the default engines."""
    return NoteCaptureService(
        image_extractor=TesseractImageExtractor(),
        document_extractor=PdfTextExtractor(),
        transcriber=_default_transcriber(),
    )


_transcriber: SpeechRecognitionTranscriber | None = None


def _default_transcriber() -> SpeechRecognitionTranscriber:
    # One shared instance so the authorization gate is asked only once
    global _transcriber  # noqa: PLW0603
    if _transcriber is None:
        _transcriber = SpeechRecognitionTranscriber()
    return _transcriber
