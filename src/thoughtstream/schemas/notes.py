"""
Note Schemas

Pydantic models for Note API request/response validation.
Attachment payloads travel base64-encoded inside JSON bodies.
"""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import UUID

from pydantic import (
    BaseModel,
    Base64Bytes,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from thoughtstream.models import AttachmentKind
from thoughtstream.search.dates import DateFilter
from thoughtstream.search.filters import ContentFilter


class AttachmentCreate(BaseModel):
    """
    A single attachment submitted with a new note.

    Links carry ``link_url`` and no payload; every other kind carries
    ``data`` and no ``link_url``.
    """

    kind: AttachmentKind
    data: Base64Bytes | None = Field(
        default=None,
        description="Base64-encoded payload (images, PDFs, audio)",
    )
    filename: str | None = Field(default=None, max_length=500)
    link_url: str | None = Field(default=None, min_length=1)

    @model_validator(mode="after")
    def _check_primary_content(self) -> AttachmentCreate:
        if self.kind is AttachmentKind.LINK:
            if not self.link_url:
                raise ValueError("link attachments require link_url")
            if self.data is not None:
                raise ValueError("link attachments cannot carry data")
        else:
            if not self.data:
                raise ValueError(f"{self.kind} attachments require data")
            if self.link_url is not None:
                raise ValueError(f"{self.kind} attachments cannot carry link_url")
        return self


class NoteCreate(BaseModel):
    """Request schema for POST /notes."""

    content: str = Field(default="", description="Note text, may be empty")
    attachments: list[AttachmentCreate] = Field(default_factory=list)
    created_at: datetime | None = Field(
        default=None,
        description="Override the creation time (imports); defaults to now",
    )

    @field_validator("created_at")
    @classmethod
    def _as_utc(cls, value: datetime | None) -> datetime | None:
        # Stored timestamps are UTC; naive input is taken to be UTC already
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    @model_validator(mode="after")
    def _require_something(self) -> NoteCreate:
        if not self.content and not self.attachments:
            raise ValueError("a note needs content or at least one attachment")
        return self


class NoteUpdate(BaseModel):
    """
    Request schema for PATCH /notes/{id}.

    Only the text content of a note is editable after capture.
    """

    content: str | None = None


class ShareRequest(BaseModel):
    """
    Items handed over by a share sheet.

    Shared text becomes the note content when ``content`` is empty,
    every URL becomes a link attachment.
    """

    content: str = ""
    shared_text: str | None = None
    urls: list[str] = Field(default_factory=list)
    files: list[AttachmentCreate] = Field(default_factory=list)

    @model_validator(mode="after")
    def _only_documents_and_images(self) -> ShareRequest:
        for item in self.files:
            if item.kind not in (AttachmentKind.IMAGE, AttachmentKind.PDF):
                raise ValueError("shared files must be images or PDFs")
        if not (self.content or self.shared_text or self.urls or self.files):
            raise ValueError("nothing to share")
        return self

    def to_note_create(self) -> NoteCreate:
        """Fold the shared items into a regular note."""
        content = self.content or self.shared_text or ""
        attachments = [
            AttachmentCreate(kind=AttachmentKind.LINK, link_url=url)
            for url in self.urls
        ]
        attachments.extend(self.files)
        return NoteCreate(content=content, attachments=attachments)


class AttachmentRead(BaseModel):
    """Attachment metadata (payload is served by its own endpoint)."""

    id: UUID
    kind: AttachmentKind
    position: int
    filename: str | None = None
    link_url: str | None = None
    extracted_text: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)  # Enables ORM model conversion


class NoteRead(BaseModel):
    """Full Note representation including attachments."""

    id: UUID
    content: str
    extracted_text: str | None = None
    created_at: datetime
    updated_at: datetime
    attachments: list[AttachmentRead] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class DateFilterSchema(BaseModel):
    """Wire form of a DateFilter; at least one of year or month is set."""

    label: str = ""
    year: int | None = Field(default=None, ge=1900, le=2100)
    month: int | None = Field(default=None, ge=1, le=12)

    model_config = ConfigDict(from_attributes=True)

    @model_validator(mode="after")
    def _require_component(self) -> DateFilterSchema:
        if self.year is None and self.month is None:
            raise ValueError("a date filter needs a year, a month or both")
        return self

    def to_filter(self) -> DateFilter:
        return DateFilter.for_components(self.year, self.month)


class ContentFilterOption(BaseModel):
    """A content-type chip with its display label."""

    value: ContentFilter
    label: str


class SearchRequest(BaseModel):
    """Request schema for POST /notes/search."""

    query: str = Field(default="", description="Raw search string")
    content_filter: ContentFilter = ContentFilter.ALL
    active_filters: list[DateFilterSchema] = Field(
        default_factory=list,
        description="Detected date filters the user switched on",
    )


class EmptyState(BaseModel):
    """Message to show when nothing matches."""

    title: str
    message: str


class SearchResponse(BaseModel):
    """Filtered feed plus the date expressions found in the query."""

    residual_query: str
    detected_filters: list[DateFilterSchema]
    notes: list[NoteRead]
    empty_state: EmptyState | None = None
