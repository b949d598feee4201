"""
ThoughtStream Frontend

Streamlit-based user interface for ThoughtStream. Shows the note feed
with search, content-type chips and detected date filters, and a sidebar
form for capturing new notes with attachments.

Run locally:
    streamlit run ui/main.py
"""

from __future__ import annotations

import base64
import os
from datetime import datetime
from typing import Any, TypedDict

import httpx
import streamlit as st

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

API_URL = os.getenv("API_URL", "http://localhost:8000")
NOTES_ENDPOINT = f"{API_URL}/api/v1/notes"

# Capture waits for OCR / transcription before the note is saved
CAPTURE_TIMEOUT = 120.0
FEED_TIMEOUT = 15.0

KIND_ICONS = {"image": "🖼️", "pdf": "📄", "link": "🔗", "audio": "🎙️"}


# ---------------------------------------------------------------------------
# Type Definitions
# ---------------------------------------------------------------------------


class DateFilterPayload(TypedDict):
    """Date filter as exchanged with the search endpoint."""

    label: str
    year: int | None
    month: int | None


# ---------------------------------------------------------------------------
# Page Configuration
# ---------------------------------------------------------------------------

st.set_page_config(
    page_title="ThoughtStream",
    page_icon="💭",
    layout="centered",
    initial_sidebar_state="expanded",
)

st.markdown(
    """
    <style>
    .main-title {
        font-size: 2.2rem;
        font-weight: 700;
        color: #1F2937;
        margin-bottom: 0.25rem;
    }
    .subtitle {
        font-size: 1rem;
        color: #6B7280;
        margin-bottom: 1.5rem;
    }
    .note-meta {
        color: #9CA3AF;
        font-size: 0.8rem;
    }
    .extracted {
        color: #4B5563;
        font-size: 0.85rem;
        border-left: 3px solid #A78BFA;
        padding-left: 0.6rem;
        margin-top: 0.25rem;
    }
    </style>
    """,
    unsafe_allow_html=True,
)


# ---------------------------------------------------------------------------
# Session State Initialization
# ---------------------------------------------------------------------------


def init_session_state() -> None:
    """Initialize session state variables."""
    if "content_filter" not in st.session_state:
        st.session_state.content_filter = "all"
    if "active_filters" not in st.session_state:
        st.session_state.active_filters = []  # list[DateFilterPayload]
    if "link_rows" not in st.session_state:
        st.session_state.link_rows = 1


init_session_state()


# ---------------------------------------------------------------------------
# API Client Functions
# ---------------------------------------------------------------------------


def fetch_content_filters() -> list[dict[str, str]]:
    """Content-type chips offered by the API."""
    with httpx.Client(timeout=FEED_TIMEOUT) as client:
        response = client.get(f"{NOTES_ENDPOINT}/filters")
        response.raise_for_status()
        result: list[dict[str, str]] = response.json()
        return result


def search_feed(
    query: str, content_filter: str, active_filters: list[DateFilterPayload]
) -> dict[str, Any]:
    """
    Evaluate the current search state against the feed.

    Returns:
        SearchResponse as dict (notes, detected_filters, empty_state).

    Raises:
        httpx.HTTPError: On network or API errors.
    """
    with httpx.Client(timeout=FEED_TIMEOUT) as client:
        response = client.post(
            f"{NOTES_ENDPOINT}/search",
            json={
                "query": query,
                "content_filter": content_filter,
                "active_filters": active_filters,
            },
        )
        response.raise_for_status()
        result: dict[str, Any] = response.json()
        return result


def create_note(content: str, attachments: list[dict[str, Any]]) -> dict[str, Any]:
    """
    Capture a note; blocks until attachment text has been extracted.

    Raises:
        httpx.HTTPError: On network or API errors.
    """
    with httpx.Client(timeout=CAPTURE_TIMEOUT) as client:
        response = client.post(
            f"{NOTES_ENDPOINT}/",
            json={"content": content, "attachments": attachments},
        )
        response.raise_for_status()
        result: dict[str, Any] = response.json()
        return result


def delete_note(note_id: str) -> None:
    with httpx.Client(timeout=FEED_TIMEOUT) as client:
        response = client.delete(f"{NOTES_ENDPOINT}/{note_id}")
        response.raise_for_status()


def attachment_url(note_id: str, attachment_id: str) -> str:
    return f"{NOTES_ENDPOINT}/{note_id}/attachments/{attachment_id}/data"


def check_api_health() -> bool:
    """Check if the ThoughtStream API is reachable."""
    try:
        with httpx.Client(timeout=5.0) as client:
            response = client.get(f"{API_URL}/health")
            return response.status_code == 200
    except httpx.RequestError:
        return False


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _upload_payload(kind: str, uploaded) -> dict[str, Any]:
    return {
        "kind": kind,
        "data": base64.b64encode(uploaded.getvalue()).decode(),
        "filename": uploaded.name,
    }


def _format_timestamp(raw: str) -> str:
    return datetime.fromisoformat(raw).strftime("%b %d, %Y · %H:%M")


def _same_filter(a: DateFilterPayload, b: DateFilterPayload) -> bool:
    return (a.get("year"), a.get("month")) == (b.get("year"), b.get("month"))


# ---------------------------------------------------------------------------
# UI Components
# ---------------------------------------------------------------------------


def render_sidebar() -> None:
    """Render the capture form."""
    with st.sidebar:
        st.markdown("### ✍️ New Thought")

        if not check_api_health():
            st.error("❌ API Unreachable", icon="🔴")
            st.caption(f"Endpoint: `{API_URL}`")
            return

        content = st.text_area("What's on your mind?", height=140)
        images = st.file_uploader(
            "Images",
            type=["png", "jpg", "jpeg", "heic"],
            accept_multiple_files=True,
        )
        pdfs = st.file_uploader("PDFs", type=["pdf"], accept_multiple_files=True)
        recording = st.file_uploader(
            "Voice memo",
            type=["wav", "aiff", "flac"],
            help="WAV, AIFF or FLAC; transcribed after saving",
        )

        links: list[str] = []
        for row in range(st.session_state.link_rows):
            url = st.text_input("Link", key=f"link_{row}", placeholder="https://")
            if url.strip():
                links.append(url.strip())
        if st.button("➕ Add another link", use_container_width=True):
            st.session_state.link_rows += 1
            st.rerun()

        attachments: list[dict[str, Any]] = []
        attachments.extend(_upload_payload("image", f) for f in images or [])
        attachments.extend(_upload_payload("pdf", f) for f in pdfs or [])
        attachments.extend({"kind": "link", "link_url": url} for url in links)
        if recording is not None:
            attachments.append(_upload_payload("audio", recording))

        can_save = bool(content.strip()) or bool(attachments)
        if st.button(
            "💾 Save", type="primary", use_container_width=True, disabled=not can_save
        ):
            with st.spinner("Extracting text and saving..."):
                try:
                    create_note(content, attachments)
                    st.session_state.link_rows = 1
                    st.success("✅ Saved")
                    st.rerun()
                except httpx.HTTPStatusError as e:
                    if e.response.status_code == 422:
                        st.error(f"❌ Validation Error: {e.response.json().get('detail')}")
                    else:
                        st.error(f"❌ Could not save note ({e.response.status_code})")
                except httpx.RequestError as e:
                    st.error(f"❌ Connection Error: {e}")


def render_filter_chips() -> None:
    """Content-type chips; the selection lives in session state."""
    options = fetch_content_filters()
    labels = {o["value"]: o["label"] for o in options}
    st.session_state.content_filter = st.radio(
        "Show",
        options=list(labels),
        format_func=labels.__getitem__,
        index=list(labels).index(st.session_state.content_filter),
        horizontal=True,
        label_visibility="collapsed",
    )


def render_date_toggles(detected: list[DateFilterPayload]) -> None:
    """One toggle per detected date expression."""
    if not detected:
        st.session_state.active_filters = []
        return

    active: list[DateFilterPayload] = []
    columns = st.columns(len(detected))
    for column, candidate in zip(columns, detected, strict=True):
        was_on = any(_same_filter(candidate, f) for f in st.session_state.active_filters)
        with column:
            if st.toggle(f"📅 {candidate['label']}", value=was_on, key=f"date_{candidate['label']}"):
                active.append(candidate)

    if active != st.session_state.active_filters:
        st.session_state.active_filters = active
        st.rerun()


def render_attachment(note_id: str, attachment: dict[str, Any]) -> None:
    icon = KIND_ICONS.get(attachment["kind"], "📎")
    kind = attachment["kind"]

    if kind == "link":
        st.markdown(f"{icon} [{attachment['link_url']}]({attachment['link_url']})")
    elif kind == "image":
        st.image(attachment_url(note_id, attachment["id"]), use_container_width=True)
    elif kind == "audio":
        st.audio(attachment_url(note_id, attachment["id"]))
    else:
        name = attachment.get("filename") or "document.pdf"
        st.markdown(f"{icon} [{name}]({attachment_url(note_id, attachment['id'])})")

    if attachment.get("extracted_text"):
        st.markdown(
            f'<p class="extracted">{attachment["extracted_text"]}</p>',
            unsafe_allow_html=True,
        )


def render_note_card(note: dict[str, Any]) -> None:
    """One feed entry with its attachments and a delete button."""
    with st.container(border=True):
        header, action = st.columns([6, 1])
        with header:
            st.markdown(
                f'<span class="note-meta">{_format_timestamp(note["created_at"])}</span>',
                unsafe_allow_html=True,
            )
        with action:
            if st.button("🗑️", key=f"delete_{note['id']}", help="Delete note"):
                try:
                    delete_note(note["id"])
                    st.rerun()
                except httpx.HTTPError as e:
                    st.error(f"❌ Could not delete: {e}")

        if note["content"]:
            st.markdown(note["content"])

        for attachment in note["attachments"]:
            render_attachment(note["id"], attachment)


def render_feed() -> None:
    """Render search, filters and the note feed."""
    st.markdown('<p class="main-title">💭 ThoughtStream</p>', unsafe_allow_html=True)
    st.markdown(
        '<p class="subtitle">Capture anything. Find it later.</p>',
        unsafe_allow_html=True,
    )

    if not check_api_health():
        st.error(
            "**Cannot connect to ThoughtStream API**\n\n"
            f"The backend at `{API_URL}` is not responding. Start it with:\n"
            "```bash\nuvicorn thoughtstream.main:app\n```"
        )
        return

    query = st.text_input(
        "Search",
        placeholder="Search thoughts, or try “june 2024”",
        label_visibility="collapsed",
    )

    try:
        render_filter_chips()
        result = search_feed(
            query,
            st.session_state.content_filter,
            st.session_state.active_filters,
        )
    except httpx.HTTPError as e:
        st.error(f"❌ Search failed: {e}")
        return

    render_date_toggles(result["detected_filters"])

    if result["empty_state"]:
        st.info(
            f"**{result['empty_state']['title']}**\n\n{result['empty_state']['message']}"
        )
        return

    for note in result["notes"]:
        render_note_card(note)


# ---------------------------------------------------------------------------
# Main Entry Point
# ---------------------------------------------------------------------------


def main() -> None:
    """Main application entry point."""
    render_sidebar()
    render_feed()


if __name__ == "__main__":
    main()
