"""
Attachment Text Extraction

Derives searchable text from attachment payloads:
    - Images: OCR via Tesseract (pytesseract + Pillow)
    - PDFs: text layer via PyMuPDF (fitz)
    - Audio: transcription via SpeechRecognition

Every extractor returns an ExtractionResult. Finding no text is an
expected outcome and is never raised; engine errors are logged and
reported as ``ExtractionResult.nothing()``. Blocking engine calls are
offloaded to a thread pool via asyncio.to_thread.
"""

from __future__ import annotations

import asyncio
import io
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

import fitz  # PyMuPDF
import pytesseract
import speech_recognition as sr
from PIL import Image, UnidentifiedImageError

from thoughtstream.core.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExtractionResult:
    """
    Outcome of one extraction: either text or nothing.

    Attributes:
        text: Extracted text, None when nothing usable was found.
    """

    text: str | None = None

    @classmethod
    def found(cls, text: str | None) -> ExtractionResult:
        """Wrap engine output; blank output counts as nothing."""
        if text is None or not text.strip():
            return cls.nothing()
        return cls(text=text.strip())

    @classmethod
    def nothing(cls) -> ExtractionResult:
        return cls(text=None)

    @property
    def ok(self) -> bool:
        return self.text is not None


class TextExtractor(Protocol):
    """Anything that turns an attachment payload into text."""

    async def extract(self, data: bytes) -> ExtractionResult: ...


class ImageTextExtractor(TextExtractor, Protocol):
    """OCR over an encoded bitmap (JPEG, PNG, ...)."""


class DocumentTextExtractor(TextExtractor, Protocol):
    """Text layer of a document (PDF)."""


class AudioTranscriber(TextExtractor, Protocol):
    """Speech-to-text over an audio recording."""


class TesseractImageExtractor:
    """
    OCR an image with Tesseract.

    Recognized lines are joined with single spaces.

    Args:
        language: Tesseract language code(s), e.g. "eng" or "eng+fra".
    """

    def __init__(self, language: str | None = None) -> None:
        self.language = language or settings.OCR_LANGUAGE

    def _ocr(self, data: bytes) -> str:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            raw = pytesseract.image_to_string(
                image,
                lang=self.language,
                config="--oem 3 --psm 6",
            )
        lines = (line.strip() for line in raw.splitlines())
        return " ".join(line for line in lines if line)

    async def extract(self, data: bytes) -> ExtractionResult:
        try:
            text = await asyncio.to_thread(self._ocr, data)
        except pytesseract.TesseractNotFoundError:
            logger.warning("Tesseract binary not installed, skipping OCR")
            return ExtractionResult.nothing()
        except pytesseract.TesseractError as e:
            logger.warning("Tesseract failed: %s", e)
            return ExtractionResult.nothing()
        except (UnidentifiedImageError, OSError) as e:
            logger.warning("Could not decode image for OCR: %s", e)
            return ExtractionResult.nothing()

        result = ExtractionResult.found(text)
        logger.debug("OCR produced %d chars", len(result.text or ""))
        return result


class PdfTextExtractor:
    """Extract the text layer of every PDF page, space separated."""

    @staticmethod
    def _read_pages(data: bytes) -> str:
        """
        Concatenate page text.

        This is a *synchronous* helper - always call via
        ``asyncio.to_thread`` to keep the event loop free.
        """
        doc = fitz.open(stream=data, filetype="pdf")
        try:
            pages = [page.get_text() for page in doc]
        finally:
            doc.close()
        return " ".join(pages)

    async def extract(self, data: bytes) -> ExtractionResult:
        try:
            text = await asyncio.to_thread(self._read_pages, data)
        except (RuntimeError, ValueError) as e:
            # fitz.FileDataError subclasses RuntimeError
            logger.warning("Could not read PDF: %s", e)
            return ExtractionResult.nothing()
        return ExtractionResult.found(text)


class SpeechRecognitionTranscriber:
    """
    Transcribe an audio recording (WAV, AIFF or FLAC).

    The first call asks ``authorize`` for permission; the answer is kept
    for the lifetime of the transcriber. Without authorization every call
    returns nothing.

    Args:
        language: BCP-47 language tag passed to the recognizer.
        authorize: Permission gate, defaults to the SPEECH_AUTHORIZED setting.
        recognizer: Injected ``speech_recognition.Recognizer`` (tests).
    """

    def __init__(
        self,
        language: str | None = None,
        authorize: Callable[[], bool] | None = None,
        recognizer: sr.Recognizer | None = None,
    ) -> None:
        self.language = language or settings.SPEECH_LANGUAGE
        self._authorize = authorize or (lambda: settings.SPEECH_AUTHORIZED)
        self._authorized: bool | None = None
        self._recognizer = recognizer or sr.Recognizer()

    @property
    def authorized(self) -> bool:
        if self._authorized is None:
            self._authorized = bool(self._authorize())
            if not self._authorized:
                logger.warning("Speech recognition not authorized")
        return self._authorized

    def _transcribe(self, data: bytes) -> str:
        with sr.AudioFile(io.BytesIO(data)) as source:
            audio = self._recognizer.record(source)
        return self._recognizer.recognize_google(audio, language=self.language)

    async def extract(self, data: bytes) -> ExtractionResult:
        if not self.authorized:
            return ExtractionResult.nothing()

        try:
            text = await asyncio.to_thread(self._transcribe, data)
        except sr.UnknownValueError:
            logger.info("No speech recognized in recording")
            return ExtractionResult.nothing()
        except sr.RequestError as e:
            logger.warning("Speech recognition service error: %s", e)
            return ExtractionResult.nothing()
        except (ValueError, EOFError, OSError) as e:
            # Unsupported container, or FLAC fallback without the flac binary
            logger.warning("Could not decode audio: %s", e)
            return ExtractionResult.nothing()
        return ExtractionResult.found(text)
