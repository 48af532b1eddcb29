"""Sync decision engine for a single document and a single BookStack page.

The ``SyncEngine``:

1. Fingerprints the body (MD5 hex, metadata excluded).
2. Compares the fingerprint with the ``checksum`` stored in front matter;
   equal means nothing to do and no request is sent.
3. Picks the parent container (chapter over book) and the operation
   (update when ``page_id`` is positive, create otherwise).
4. Sends the request and returns a ``SyncOutcome`` whose ``checksum`` is
   always the local fingerprint, never anything from the response.

The engine never edits the document it was given.  ``sync_document``
returns a rewritten copy only after a successful write.
"""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Mapping
from typing import Any

from bookstack_sync import frontmatter
from bookstack_sync.core.client import BookStackClient
from bookstack_sync.errors import RemoteWriteError
from bookstack_sync.sync.models import (
    PageMetadata,
    SyncAction,
    SyncDocumentResult,
    SyncOutcome,
    SyncPlan,
    SyncTarget,
)

logger = logging.getLogger(__name__)


def content_hash(body: str) -> str:
    """Return the MD5 hex digest of *body* encoded as UTF-8."""
    return hashlib.md5(body.encode("utf-8"), usedforsecurity=False).hexdigest()


def _as_metadata(metadata: Mapping[str, Any] | PageMetadata) -> PageMetadata:
    if isinstance(metadata, PageMetadata):
        return metadata
    return PageMetadata.from_mapping(metadata)


def select_target(
    metadata: Mapping[str, Any] | PageMetadata,
) -> SyncTarget | None:
    """Choose the parent container sent with the page.

    ``book_id`` is taken when positive, then a positive ``chapter_id``
    replaces it.  Returns ``None`` when neither is positive.
    """
    meta = _as_metadata(metadata)
    target = None
    if meta.book_id > 0:
        target = SyncTarget(key="book_id", value=meta.book_id)
    if meta.chapter_id > 0:
        target = SyncTarget(key="chapter_id", value=meta.chapter_id)
    return target


def build_payload(
    body: str, metadata: Mapping[str, Any] | PageMetadata
) -> dict[str, Any]:
    """Build the JSON body for a create/update request.

    ``name`` is left out when the document has no ``page_name``; the
    container key is left out when no container is selected.
    """
    meta = _as_metadata(metadata)
    payload: dict[str, Any] = {}
    if meta.page_name is not None:
        payload["name"] = meta.page_name
    payload["markdown"] = body

    target = select_target(meta)
    if target is not None:
        payload[target.key] = target.value
    return payload


def plan_sync(
    body: str, metadata: Mapping[str, Any] | PageMetadata
) -> SyncPlan:
    """Resolve what ``SyncEngine.decide`` would do, without network traffic."""
    meta = _as_metadata(metadata)
    fingerprint = content_hash(body)

    logger.debug(
        "book_id=%s chapter_id=%s page_id=%s page_name=%r checksum=%r",
        meta.book_id,
        meta.chapter_id,
        meta.page_id,
        meta.page_name,
        meta.checksum,
    )

    if meta.checksum == fingerprint:
        return SyncPlan(
            action=SyncAction.SKIP,
            checksum=fingerprint,
            page_id=meta.page_id,
        )

    payload = build_payload(body, meta)
    target = select_target(meta)

    if meta.page_id > 0:
        return SyncPlan(
            action=SyncAction.UPDATE,
            checksum=fingerprint,
            page_id=meta.page_id,
            method="PUT",
            path=f"/api/pages/{meta.page_id}",
            payload=payload,
            target=target,
        )

    return SyncPlan(
        action=SyncAction.CREATE,
        checksum=fingerprint,
        method="POST",
        path="/api/pages",
        payload=payload,
        target=target,
    )


class SyncEngine:
    """Decide whether a document needs publishing and publish it.

    Args:
        client: BookStack API client used for the write.
    """

    def __init__(self, client: BookStackClient) -> None:
        self.client = client

    # ------------------------------------------------------------------
    # Decision
    # ------------------------------------------------------------------

    def decide(
        self, body: str, metadata: Mapping[str, Any] | PageMetadata
    ) -> SyncOutcome:
        """Publish *body* if it changed since the last recorded sync.

        Args:
            body: Document body (front matter already removed).
            metadata: Parsed front matter mapping or ``PageMetadata``.

        Returns:
            ``SyncOutcome``.  ``updated`` is ``False`` when the stored
            checksum already matches and no request was sent.

        Raises:
            FormatError: If a recognised metadata value has the wrong type.
            RemoteWriteError: If the write fails or the response has no id.
        """
        plan = plan_sync(body, metadata)

        if not plan.needs_write:
            logger.debug("No need to update, checksum %s unchanged", plan.checksum)
            return SyncOutcome(
                id=plan.page_id, checksum=plan.checksum, updated=False
            )

        if plan.action == SyncAction.UPDATE:
            logger.info("Updating page %s", plan.page_id)
            response = self.client.update_page(plan.page_id, plan.payload)
        else:
            logger.info("Creating page %r", plan.payload.get("name"))
            response = self.client.create_page(plan.payload)

        page_id = response.get("id")
        if isinstance(page_id, bool) or not isinstance(page_id, int):
            raise RemoteWriteError(
                f"BookStack response has no integer 'id' field: {page_id!r}",
                status=200,
            )

        return SyncOutcome(id=page_id, checksum=plan.checksum, updated=True)

    # ------------------------------------------------------------------
    # Whole-document convenience
    # ------------------------------------------------------------------

    def sync_document(self, document: str) -> SyncDocumentResult:
        """Parse, decide and, after a successful write, rewrite *document*.

        The returned document carries the new ``page_id`` and ``checksum``
        in its front matter.  When nothing was published the input is
        returned unchanged.  On any error nothing is returned, so the
        caller's copy stays as it was.
        """
        metadata, body = frontmatter.parse(document)
        meta = PageMetadata.from_mapping(metadata)

        outcome = self.decide(body, meta)
        if not outcome.updated:
            return SyncDocumentResult(
                outcome=outcome, document=document, page_name=meta.page_name
            )

        metadata["page_id"] = outcome.id
        metadata["checksum"] = outcome.checksum
        return SyncDocumentResult(
            outcome=outcome,
            document=frontmatter.serialize(body, metadata),
            page_name=meta.page_name,
        )
