"""Pydantic models for the sync decision engine.

Defines the data contracts passed between the splitter, the engine and
the caller:

- ``PageMetadata``: typed view over the recognised front matter keys.
- ``SyncAction``: what a sync run will do with the remote page.
- ``SyncTarget``: the parent container (book or chapter) of a page.
- ``SyncPlan``: the fully resolved request, before it is sent.
- ``SyncOutcome``: what the caller writes back into the document.

All models are frozen (immutable).
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ValidationError, field_validator

from ..errors import FormatError


class SyncAction(str, Enum):
    """Possible outcomes of the sync decision."""

    SKIP = "skip"
    CREATE = "create"
    UPDATE = "update"


class PageMetadata(BaseModel):
    """Recognised front matter keys.

    Unknown keys are ignored here; they stay in the raw mapping and
    survive write-back untouched.  Ids written as strings by older
    releases (``page_id: '9'``) are coerced to int.

    Attributes:
        book_id: Parent book, used when positive.
        chapter_id: Parent chapter, overrides ``book_id`` when positive.
        page_id: Existing remote page; ``0`` means not yet created.
        page_name: Page title sent as ``name``.
        checksum: Fingerprint of the body at the last successful sync.
    """

    book_id: int = 0
    chapter_id: int = 0
    page_id: int = 0
    page_name: str | None = None
    checksum: str = ""

    model_config = {"frozen": True}

    @field_validator("book_id", "chapter_id", "page_id", mode="before")
    @classmethod
    def _null_id_is_zero(cls, value: Any) -> Any:
        # YAML yes/true must not become page 1
        if isinstance(value, bool):
            raise ValueError("boolean is not a valid id")
        if value is None or value == "":
            return 0
        return value

    @field_validator("page_name", mode="before")
    @classmethod
    def _name_to_str(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @field_validator("checksum", mode="before")
    @classmethod
    def _checksum_to_str(cls, value: Any) -> Any:
        if value is None:
            return ""
        return str(value)

    @classmethod
    def from_mapping(cls, metadata: Mapping[str, Any]) -> PageMetadata:
        """Build from a parsed front matter mapping.

        Raises:
            FormatError: If a recognised key holds a value of the wrong
                type (for example ``page_id: abc``).
        """
        try:
            return cls.model_validate(dict(metadata))
        except ValidationError as exc:
            fields = ", ".join(
                str(err["loc"][0]) for err in exc.errors() if err["loc"]
            )
            raise FormatError(
                f"Invalid front matter value for: {fields}"
            ) from exc


class SyncTarget(BaseModel):
    """Parent container reference included in the request payload."""

    key: Literal["book_id", "chapter_id"]
    value: int

    model_config = {"frozen": True}


class SyncPlan(BaseModel):
    """A resolved sync decision, computed without touching the network.

    Attributes:
        action: Skip, create or update.
        checksum: Fingerprint of the local body.
        page_id: Page targeted by an update (``0`` otherwise).
        method: HTTP method (``POST``/``PUT``), ``None`` when skipping.
        path: API path relative to the server URL, ``None`` when skipping.
        payload: JSON body, empty when skipping.
        target: Container reference, if any.
    """

    action: SyncAction
    checksum: str
    page_id: int = 0
    method: str | None = None
    path: str | None = None
    payload: dict[str, Any] = {}
    target: SyncTarget | None = None

    model_config = {"frozen": True}

    @property
    def needs_write(self) -> bool:
        return self.action != SyncAction.SKIP


class SyncOutcome(BaseModel):
    """Result returned to the caller after a sync decision.

    Attributes:
        id: Remote page id (server-assigned on create).
        checksum: Local fingerprint to store in the document.
        updated: ``True`` if a remote write happened.
    """

    id: int
    checksum: str
    updated: bool

    model_config = {"frozen": True}


class SyncDocumentResult(BaseModel):
    """Outcome of a whole-document sync plus the document to persist."""

    outcome: SyncOutcome
    document: str
    page_name: str | None = None

    model_config = {"frozen": True}
