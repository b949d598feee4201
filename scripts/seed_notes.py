#!/usr/bin/env python3
"""
Seed Notes Script

Seeds the database with sample notes spread over several months so that
date searches ("june 2024", "2023", "sept") have something to find.
Notes go through the regular capture service, so attachments get their
text extracted exactly as they would through the API.

Usage:
    $ python scripts/seed_notes.py
    $ python scripts/seed_notes.py --clean  # Delete all notes first
"""

import argparse
import asyncio
import base64
import os
import sys
from datetime import datetime

# Required for direct script execution without package installation
sys.path.append(os.path.join(os.path.dirname(__file__), "../src"))

import fitz

from thoughtstream.core.database import AsyncSessionLocal, dispose_engine, init_db
from thoughtstream.core.logging import setup_logging
from thoughtstream.models import AttachmentKind
from thoughtstream.repositories import notes as repo
from thoughtstream.schemas.notes import AttachmentCreate, NoteCreate
from thoughtstream.services.capture import get_capture_service


def sample_pdf(text: str) -> str:
    """Single-page PDF with a text layer, base64-encoded."""
    doc = fitz.open()
    doc.new_page().insert_text((72, 72), text)
    data = doc.tobytes()
    doc.close()
    return base64.b64encode(data).decode()


def sample_notes() -> list[NoteCreate]:
    return [
        NoteCreate(
            content="Grocery list: milk, eggs, bread, coffee",
            created_at=datetime(2024, 7, 15, 18, 30),
        ),
        NoteCreate(
            content="First day at the new office",
            created_at=datetime(2024, 6, 1, 9, 0),
            attachments=[
                AttachmentCreate(
                    kind=AttachmentKind.LINK, link_url="https://maps.example.com/office"
                )
            ],
        ),
        NoteCreate(
            content="",
            created_at=datetime(2023, 6, 12, 14, 0),
            attachments=[
                AttachmentCreate(
                    kind=AttachmentKind.PDF,
                    data=sample_pdf("Apartment lease agreement, signed June 2023"),
                    filename="lease-agreement.pdf",
                )
            ],
        ),
        NoteCreate(
            content="Reading list for the autumn",
            created_at=datetime(2023, 9, 3, 21, 15),
            attachments=[
                AttachmentCreate(
                    kind=AttachmentKind.LINK,
                    link_url="https://docs.python.org/3/library/asyncio.html",
                ),
                AttachmentCreate(
                    kind=AttachmentKind.LINK,
                    link_url="https://docs.sqlalchemy.org/en/20/orm/extensions/asyncio.html",
                ),
            ],
        ),
    ]


async def main(clean: bool) -> None:
    """
    Insert the sample notes.

    Warning:
        --clean DELETES every existing note. Intended for dev environments only.
    """
    setup_logging()
    await init_db()
    service = get_capture_service()

    async with AsyncSessionLocal() as session:
        if clean:
            existing = await repo.list_all(session)
            for note in existing:
                await repo.delete(session, note)
            print(f"Deleted {len(existing)} notes.")

        notes = sample_notes()
        for note_in in notes:
            await service.capture(session, note_in)
        print(f"Inserted {len(notes)} notes.")

    await dispose_engine()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed ThoughtStream with sample notes")
    parser.add_argument("--clean", action="store_true", help="Delete all notes first")
    args = parser.parse_args()
    asyncio.run(main(args.clean))
