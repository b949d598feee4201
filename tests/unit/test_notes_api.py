"""
Notes API Unit Tests

Exercises the /api/v1/notes router through TestClient with an in-memory
database and fake extractors (see conftest.client).
"""

from __future__ import annotations

import base64
import io
import uuid

import pytest
from fastapi.testclient import TestClient
from PIL import Image

NOTES = "/api/v1/notes"


def _b64(raw: bytes) -> str:
    return base64.b64encode(raw).decode()


def _png() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (4, 4), color="white").save(buffer, format="PNG")
    return buffer.getvalue()


def _create(client: TestClient, **payload) -> dict:
    res = client.post(f"{NOTES}/", json=payload)
    assert res.status_code == 201, res.text
    return res.json()


# ---------------------------------------------------------------------------
# Capture
# ---------------------------------------------------------------------------


class TestCreateNote:
    """POST /notes/"""

    def test_text_note(self, client: TestClient) -> None:
        data = _create(client, content="buy milk")

        assert data["content"] == "buy milk"
        assert data["attachments"] == []
        assert data["extracted_text"] == ""
        uuid.UUID(data["id"])

    def test_attachments_are_extracted_before_response(self, client: TestClient) -> None:
        data = _create(
            client,
            content="",
            attachments=[
                {"kind": "image", "data": _b64(b"jpeg")},
                {"kind": "link", "link_url": "https://example.com/post"},
                {"kind": "audio", "data": _b64(b"wav"), "filename": "memo.wav"},
            ],
        )

        attachments = data["attachments"]
        assert [a["kind"] for a in attachments] == ["image", "link", "audio"]
        assert [a["position"] for a in attachments] == [0, 1, 2]
        assert attachments[0]["extracted_text"] == "receipt total 42"
        assert attachments[1]["link_url"] == "https://example.com/post"
        assert attachments[1]["extracted_text"] is None
        assert "data" not in attachments[0]
        assert data["extracted_text"] == "receipt total 42 call the dentist"

    def test_empty_note_is_rejected(self, client: TestClient) -> None:
        res = client.post(f"{NOTES}/", json={"content": ""})

        assert res.status_code == 422

    @pytest.mark.parametrize(
        "attachment",
        [
            {"kind": "link"},
            {"kind": "link", "link_url": "https://a.example", "data": _b64(b"x")},
            {"kind": "pdf"},
            {"kind": "image", "data": _b64(b"x"), "link_url": "https://a.example"},
            {"kind": "video", "data": _b64(b"x")},
        ],
    )
    def test_invalid_attachment_is_rejected(
        self, client: TestClient, attachment: dict
    ) -> None:
        res = client.post(f"{NOTES}/", json={"attachments": [attachment]})

        assert res.status_code == 422


class TestShare:
    """POST /notes/share"""

    def test_text_and_urls(self, client: TestClient) -> None:
        res = client.post(
            f"{NOTES}/share",
            json={"shared_text": "worth reading", "urls": ["https://example.com/a"]},
        )

        assert res.status_code == 201
        data = res.json()
        assert data["content"] == "worth reading"
        assert [a["kind"] for a in data["attachments"]] == ["link"]

    def test_explicit_content_wins_over_shared_text(self, client: TestClient) -> None:
        res = client.post(
            f"{NOTES}/share",
            json={
                "content": "my comment",
                "shared_text": "page title",
                "files": [{"kind": "pdf", "data": _b64(b"%PDF"), "filename": "a.pdf"}],
            },
        )

        data = res.json()
        assert data["content"] == "my comment"
        assert data["attachments"][0]["extracted_text"] == "quarterly report"

    def test_audio_cannot_be_shared(self, client: TestClient) -> None:
        res = client.post(
            f"{NOTES}/share",
            json={"files": [{"kind": "audio", "data": _b64(b"wav")}]},
        )

        assert res.status_code == 422

    def test_nothing_to_share(self, client: TestClient) -> None:
        assert client.post(f"{NOTES}/share", json={}).status_code == 422


# ---------------------------------------------------------------------------
# Read / edit / delete
# ---------------------------------------------------------------------------


class TestNoteLifecycle:
    """GET, PATCH and DELETE on /notes/{id}"""

    def test_list_is_newest_first(self, client: TestClient) -> None:
        _create(client, content="older", created_at="2024-01-01T10:00:00")
        _create(client, content="newer", created_at="2024-03-01T10:00:00")

        res = client.get(f"{NOTES}/")

        assert res.status_code == 200
        assert [n["content"] for n in res.json()] == ["newer", "older"]

    def test_get(self, client: TestClient) -> None:
        note = _create(client, content="hello")

        res = client.get(f"{NOTES}/{note['id']}")

        assert res.status_code == 200
        assert res.json()["content"] == "hello"

    def test_get_missing(self, client: TestClient) -> None:
        res = client.get(f"{NOTES}/{uuid.uuid4()}")

        assert res.status_code == 404
        assert res.json()["detail"] == "Note not found"

    def test_get_malformed_id(self, client: TestClient) -> None:
        assert client.get(f"{NOTES}/not-a-uuid").status_code == 422

    def test_patch_content(self, client: TestClient) -> None:
        note = _create(client, content="draft")

        res = client.patch(f"{NOTES}/{note['id']}", json={"content": "final"})

        assert res.status_code == 200
        assert res.json()["content"] == "final"
        assert client.get(f"{NOTES}/{note['id']}").json()["content"] == "final"

    def test_patch_without_content_is_noop(self, client: TestClient) -> None:
        note = _create(client, content="keep")

        res = client.patch(f"{NOTES}/{note['id']}", json={})

        assert res.json()["content"] == "keep"
        assert res.json()["updated_at"] == note["updated_at"]

    def test_delete(self, client: TestClient) -> None:
        note = _create(
            client,
            content="bye",
            attachments=[{"kind": "image", "data": _b64(b"jpeg")}],
        )

        res = client.delete(f"{NOTES}/{note['id']}")

        assert res.status_code == 204
        assert client.get(f"{NOTES}/{note['id']}").status_code == 404
        assert client.delete(f"{NOTES}/{note['id']}").status_code == 404


class TestAttachmentData:
    """GET /notes/{id}/attachments/{attachment_id}/data"""

    def test_payload_is_served(self, client: TestClient) -> None:
        note = _create(
            client,
            attachments=[
                {"kind": "pdf", "data": _b64(b"%PDF-1.7"), "filename": "q3 report.pdf"}
            ],
        )
        attachment_id = note["attachments"][0]["id"]

        res = client.get(f"{NOTES}/{note['id']}/attachments/{attachment_id}/data")

        assert res.status_code == 200
        assert res.content == b"%PDF-1.7"
        assert res.headers["content-type"] == "application/pdf"
        assert (
            res.headers["content-disposition"]
            == "inline; filename*=UTF-8''q3%20report.pdf"
        )

    @pytest.mark.parametrize(
        ("kind", "payload", "media_type"),
        [
            ("image", _png(), "image/png"),
            ("image", b"not an image", "application/octet-stream"),
            ("audio", b"RIFF\x24\x00\x00\x00WAVEfmt ", "audio/wav"),
            ("audio", b"fLaC\x00\x00\x00\x22", "audio/flac"),
            ("audio", b"FORM\x00\x00\x00\x10AIFF", "audio/aiff"),
            ("audio", b"\x00\x00\x00\x20ftypM4A ", "application/octet-stream"),
        ],
    )
    def test_media_type_follows_payload(
        self, client: TestClient, kind: str, payload: bytes, media_type: str
    ) -> None:
        note = _create(client, attachments=[{"kind": kind, "data": _b64(payload)}])
        attachment_id = note["attachments"][0]["id"]

        res = client.get(f"{NOTES}/{note['id']}/attachments/{attachment_id}/data")

        assert res.status_code == 200
        assert res.headers["content-type"] == media_type
        assert res.content == payload

    def test_link_has_no_payload(self, client: TestClient) -> None:
        note = _create(client, attachments=[{"kind": "link", "link_url": "https://x.io"}])
        attachment_id = note["attachments"][0]["id"]

        res = client.get(f"{NOTES}/{note['id']}/attachments/{attachment_id}/data")

        assert res.status_code == 404

    def test_attachment_of_another_note(self, client: TestClient) -> None:
        owner = _create(client, attachments=[{"kind": "image", "data": _b64(b"a")}])
        other = _create(client, content="other")
        attachment_id = owner["attachments"][0]["id"]

        res = client.get(f"{NOTES}/{other['id']}/attachments/{attachment_id}/data")

        assert res.status_code == 404


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------


class TestSearch:
    """GET /notes/filters and POST /notes/search"""

    @pytest.fixture
    def seeded(self, client: TestClient) -> dict[str, str]:
        ids = {}
        for content, created_at in [
            ("summer plans", "2024-07-15T09:00:00"),
            ("first day", "2024-06-01T09:00:00"),
            ("last year", "2023-06-01T09:00:00"),
        ]:
            ids[content] = _create(client, content=content, created_at=created_at)["id"]
        _create(
            client,
            attachments=[{"kind": "pdf", "data": _b64(b"%PDF"), "filename": "lease.pdf"}],
            created_at="2022-02-02T09:00:00",
        )
        return ids

    def test_content_filters(self, client: TestClient) -> None:
        res = client.get(f"{NOTES}/filters")

        assert res.status_code == 200
        assert res.json()[0] == {"value": "all", "label": "All"}
        assert [f["label"] for f in res.json()] == [
            "All",
            "Notes",
            "Images",
            "PDFs",
            "Links",
            "Audio",
        ]

    def test_detection_reports_filters_without_narrowing(
        self, client: TestClient, seeded: dict[str, str]
    ) -> None:
        res = client.post(f"{NOTES}/search", json={"query": "june 2024"})

        data = res.json()
        assert res.status_code == 200
        assert data["residual_query"] == ""
        assert data["detected_filters"] == [
            {"label": "June 2024", "year": 2024, "month": 6}
        ]
        assert len(data["notes"]) == 4
        assert data["empty_state"] is None

    def test_active_filters_narrow(self, client: TestClient, seeded: dict[str, str]) -> None:
        detected = client.post(f"{NOTES}/search", json={"query": "june"}).json()[
            "detected_filters"
        ]

        res = client.post(
            f"{NOTES}/search", json={"query": "june", "active_filters": detected}
        )

        ids = [n["id"] for n in res.json()["notes"]]
        assert ids == [seeded["first day"], seeded["last year"]]

    def test_residual_text_and_content_filter(
        self, client: TestClient, seeded: dict[str, str]
    ) -> None:
        res = client.post(
            f"{NOTES}/search",
            json={
                "query": "day june",
                "content_filter": "notes",
                "active_filters": [{"year": 2024, "month": 6}],
            },
        )

        data = res.json()
        assert data["residual_query"] == "day"
        assert [n["id"] for n in data["notes"]] == [seeded["first day"]]

    def test_filename_search(self, client: TestClient, seeded: dict[str, str]) -> None:
        res = client.post(
            f"{NOTES}/search", json={"query": "LEASE", "content_filter": "pdfs"}
        )

        notes = res.json()["notes"]
        assert len(notes) == 1
        assert notes[0]["attachments"][0]["filename"] == "lease.pdf"

    def test_empty_state_for_search(self, client: TestClient, seeded: dict[str, str]) -> None:
        res = client.post(f"{NOTES}/search", json={"query": "nothing like this"})

        data = res.json()
        assert data["notes"] == []
        assert data["empty_state"]["title"] == "No results found"

    def test_empty_state_for_filter(self, client: TestClient) -> None:
        res = client.post(f"{NOTES}/search", json={"content_filter": "audio"})

        assert res.json()["empty_state"] == {
            "title": "No audio yet",
            "message": "Add some audio to see them here",
        }

    def test_invalid_active_filter(self, client: TestClient) -> None:
        res = client.post(
            f"{NOTES}/search", json={"active_filters": [{"label": "nothing"}]}
        )

        assert res.status_code == 422
