"""Tests for the sync decision engine."""

from __future__ import annotations

import hashlib
from typing import Any, Dict, List, Optional

import pytest

from bookstack_sync import frontmatter
from bookstack_sync.errors import FormatError, RemoteWriteError
from bookstack_sync.sync.engine import (
    SyncEngine,
    build_payload,
    content_hash,
    plan_sync,
    select_target,
)
from bookstack_sync.sync.models import SyncAction, SyncTarget

HELLO_MD5 = "8b1a9953c4611296a827abf8c47804d7"

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class FakeBookStackClient:
    """Minimal BookStackClient replacement for testing.

    Records every write and answers with a configurable id, or raises a
    configured error.
    """

    def __init__(
        self,
        next_id: int = 9,
        error: Optional[Exception] = None,
        response: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.next_id = next_id
        self.error = error
        self.response = response
        self.calls: List[tuple] = []

    def _answer(self, page_id: int) -> Dict[str, Any]:
        if self.error is not None:
            raise self.error
        if self.response is not None:
            return self.response
        return {"id": page_id, "name": "ignored", "slug": "ignored"}

    def create_page(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append(("POST", "/api/pages", payload))
        return self._answer(self.next_id)

    def update_page(
        self, page_id: int, payload: Dict[str, Any]
    ) -> Dict[str, Any]:
        self.calls.append(("PUT", f"/api/pages/{page_id}", payload))
        return self._answer(page_id)


def _engine(**kwargs: Any) -> tuple[SyncEngine, FakeBookStackClient]:
    client = FakeBookStackClient(**kwargs)
    return SyncEngine(client), client  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# content_hash
# ---------------------------------------------------------------------------


class TestContentHash:
    def test_known_value(self):
        assert content_hash("Hello") == HELLO_MD5

    def test_is_128_bit_hex(self):
        digest = content_hash("anything")
        assert len(digest) == 32
        int(digest, 16)

    def test_utf8_encoding(self):
        body = "Grüße"
        assert content_hash(body) == hashlib.md5(body.encode("utf-8")).hexdigest()

    def test_no_normalisation(self):
        assert content_hash("Hello") != content_hash("Hello\n")
        assert content_hash("a\nb") != content_hash("a\r\nb")

    def test_deterministic(self):
        assert content_hash("x" * 1000) == content_hash("x" * 1000)


# ---------------------------------------------------------------------------
# select_target / build_payload
# ---------------------------------------------------------------------------


class TestSelectTarget:
    def test_chapter_overrides_book(self):
        assert select_target({"book_id": 5, "chapter_id": 7}) == SyncTarget(
            key="chapter_id", value=7
        )

    def test_book_only(self):
        assert select_target({"book_id": 5, "chapter_id": 0}) == SyncTarget(
            key="book_id", value=5
        )

    def test_chapter_only(self):
        assert select_target({"chapter_id": 7}) == SyncTarget(
            key="chapter_id", value=7
        )

    def test_neither(self):
        assert select_target({"book_id": 0, "chapter_id": 0}) is None
        assert select_target({}) is None

    def test_negative_ids_ignored(self):
        assert select_target({"book_id": -1, "chapter_id": -2}) is None


class TestBuildPayload:
    def test_chapter_wins_and_book_omitted(self):
        payload = build_payload(
            "Body", {"page_name": "P", "book_id": 5, "chapter_id": 7}
        )
        assert payload == {"name": "P", "markdown": "Body", "chapter_id": 7}
        assert "book_id" not in payload

    def test_book_only(self):
        payload = build_payload(
            "Body", {"page_name": "P", "book_id": 5, "chapter_id": 0}
        )
        assert payload == {"name": "P", "markdown": "Body", "book_id": 5}

    def test_no_container(self):
        payload = build_payload("Body", {"page_name": "P", "book_id": 0, "chapter_id": 0})
        assert payload == {"name": "P", "markdown": "Body"}

    def test_missing_name_omitted(self):
        assert build_payload("Body", {}) == {"markdown": "Body"}


# ---------------------------------------------------------------------------
# plan_sync
# ---------------------------------------------------------------------------


class TestPlanSync:
    def test_skip_when_checksum_matches(self):
        plan = plan_sync("Hello", {"page_id": 4, "checksum": HELLO_MD5})
        assert plan.action == SyncAction.SKIP
        assert plan.page_id == 4
        assert plan.method is None

    def test_update_for_positive_page_id(self):
        plan = plan_sync("Hello", {"page_id": 42, "page_name": "P"})
        assert plan.action == SyncAction.UPDATE
        assert plan.method == "PUT"
        assert plan.path == "/api/pages/42"

    @pytest.mark.parametrize("meta", [{"page_id": 0}, {}, {"page_id": None}])
    def test_create_without_page_id(self, meta):
        plan = plan_sync("Hello", meta)
        assert plan.action == SyncAction.CREATE
        assert plan.method == "POST"
        assert plan.path == "/api/pages"

    def test_boolean_ids_rejected(self):
        with pytest.raises(FormatError):
            plan_sync("x", {"page_id": True, "chapter_id": True})

    def test_plan_checksum_is_local_fingerprint(self):
        plan = plan_sync("Hello", {"checksum": "stale"})
        assert plan.checksum == HELLO_MD5


# ---------------------------------------------------------------------------
# SyncEngine.decide
# ---------------------------------------------------------------------------


class TestDecide:
    def test_idempotent_no_network_call(self):
        engine, client = _engine()
        outcome = engine.decide(
            "Hello", {"page_id": 4, "checksum": HELLO_MD5, "page_name": "P"}
        )
        assert outcome.updated is False
        assert outcome.id == 4
        assert outcome.checksum == HELLO_MD5
        assert client.calls == []

    def test_changed_body_triggers_update(self):
        engine, client = _engine()
        outcome = engine.decide(
            "Hello, again", {"page_id": 4, "checksum": HELLO_MD5}
        )
        assert outcome.updated is True
        assert outcome.checksum == content_hash("Hello, again")
        assert len(client.calls) == 1

    def test_update_targets_existing_page(self):
        engine, client = _engine()
        outcome = engine.decide("Body", {"page_id": 42, "page_name": "P"})
        method, path, payload = client.calls[0]
        assert (method, path) == ("PUT", "/api/pages/42")
        assert payload == {"name": "P", "markdown": "Body"}
        assert outcome.id == 42

    def test_create_uses_server_assigned_id(self):
        engine, client = _engine(next_id=77)
        outcome = engine.decide("Body", {"page_id": 0, "page_name": "P", "book_id": 2})
        method, path, payload = client.calls[0]
        assert (method, path) == ("POST", "/api/pages")
        assert payload == {"name": "P", "markdown": "Body", "book_id": 2}
        assert outcome.id == 77

    def test_container_exclusivity_in_request(self):
        engine, client = _engine()
        engine.decide("Body", {"page_name": "P", "book_id": 5, "chapter_id": 7})
        _, _, payload = client.calls[0]
        assert payload["chapter_id"] == 7
        assert "book_id" not in payload

    def test_checksum_comes_from_body_not_response(self):
        engine, _ = _engine(response={"id": 3, "checksum": "server-value"})
        outcome = engine.decide("Body", {})
        assert outcome.checksum == content_hash("Body")

    def test_remote_error_propagates(self):
        engine, _ = _engine(error=RemoteWriteError("boom", status=500))
        with pytest.raises(RemoteWriteError) as exc_info:
            engine.decide("Body", {"page_name": "P"})
        assert exc_info.value.status == 500

    def test_no_fallback_to_create_after_failed_update(self):
        engine, client = _engine(error=RemoteWriteError("gone", status=404))
        with pytest.raises(RemoteWriteError):
            engine.decide("Body", {"page_id": 42})
        assert [c[0] for c in client.calls] == ["PUT"]

    @pytest.mark.parametrize(
        "response", [{}, {"id": None}, {"id": "9"}, {"id": True}]
    )
    def test_response_without_integer_id(self, response):
        engine, _ = _engine(response=response)
        with pytest.raises(RemoteWriteError, match="no integer 'id'") as exc_info:
            engine.decide("Body", {})
        assert exc_info.value.status == 200

    def test_bad_metadata_raises_format_error(self):
        engine, client = _engine()
        with pytest.raises(FormatError):
            engine.decide("Body", {"page_id": "not-a-number"})
        assert client.calls == []


# ---------------------------------------------------------------------------
# SyncEngine.sync_document
# ---------------------------------------------------------------------------


class TestSyncDocument:
    def test_end_to_end_create(self):
        """Header {page_id: 0, page_name: Intro, checksum: ''} + body Hello."""
        doc = "---\npage_id: 0\npage_name: Intro\nchecksum: ''\n---\nHello"
        engine, client = _engine(next_id=9)

        result = engine.sync_document(doc)

        assert client.calls == [
            ("POST", "/api/pages", {"name": "Intro", "markdown": "Hello"})
        ]
        assert result.outcome.model_dump() == {
            "id": 9,
            "checksum": HELLO_MD5,
            "updated": True,
        }
        metadata, body = frontmatter.parse(result.document)
        assert body == "Hello"
        assert metadata == {
            "page_id": 9,
            "page_name": "Intro",
            "checksum": HELLO_MD5,
        }
        assert result.page_name == "Intro"

    def test_second_run_is_noop(self):
        doc = "---\npage_id: 0\npage_name: Intro\nchecksum: ''\n---\nHello"
        engine, client = _engine(next_id=9)
        first = engine.sync_document(doc)

        second = engine.sync_document(first.document)

        assert second.outcome.updated is False
        assert second.outcome.id == 9
        assert second.document == first.document
        assert len(client.calls) == 1

    def test_failure_leaves_document_unchanged(self):
        doc = "---\npage_id: 0\npage_name: Intro\nchecksum: ''\n---\nHello"
        original = str(doc)
        engine, _ = _engine(error=RemoteWriteError("fail", status=500))

        with pytest.raises(RemoteWriteError) as exc_info:
            engine.sync_document(doc)

        assert exc_info.value.status == 500
        assert doc == original

    def test_unchanged_document_returned_byte_identical(self):
        doc = f"---\n# comment kept\npage_id: 4\nchecksum: {HELLO_MD5}\n---\nHello"
        engine, _ = _engine()
        result = engine.sync_document(doc)
        assert result.document == doc

    def test_document_without_header(self):
        engine, client = _engine(next_id=5)
        result = engine.sync_document("Just text")
        assert client.calls[0][2] == {"markdown": "Just text"}
        metadata, body = frontmatter.parse(result.document)
        assert metadata == {"page_id": 5, "checksum": content_hash("Just text")}
        assert body == "Just text"

    def test_string_page_id_written_back_as_int(self):
        doc = "---\npage_id: '12'\npage_name: P\n---\nNew body"
        engine, client = _engine()
        result = engine.sync_document(doc)
        assert client.calls[0][1] == "/api/pages/12"
        metadata, _ = frontmatter.parse(result.document)
        assert metadata["page_id"] == 12

    def test_extra_keys_preserved(self):
        doc = "---\nauthor: sam\npage_name: P\nbook_id: 2\n---\nBody"
        engine, _ = _engine(next_id=3)
        result = engine.sync_document(doc)
        metadata, _ = frontmatter.parse(result.document)
        assert list(metadata) == [
            "author",
            "page_name",
            "book_id",
            "page_id",
            "checksum",
        ]

    def test_malformed_header_raises(self):
        engine, client = _engine()
        with pytest.raises(FormatError):
            engine.sync_document("---\npage_name: [x\n---\nBody")
        assert client.calls == []
