"""YAML front matter splitting and re-serialization.

A document is an optional header delimited by ``---`` lines at the very
start of the text, followed by the body::

    ---
    page_name: Intro
    book_id: 3
    ---
    Body text starts here.

``parse()`` and ``serialize()`` are mutual inverses: the body is carried
byte-for-byte and the mapping keeps its key order.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

import yaml

from .errors import FormatError

# Opening delimiter, then the lazily-matched YAML block, then the first
# line that is exactly ``---``.  The closing delimiter's newline belongs
# to the header so the body starts right after it.
_FRONTMATTER_RE = re.compile(
    r"\A---[ \t]*\r?\n(?P<header>.*?)^---[ \t]*(?:\r?\n|\Z)",
    re.DOTALL | re.MULTILINE,
)
_OPENING_RE = re.compile(r"\A---[ \t]*(?:\r?\n|\Z)")


def has_frontmatter(document: str) -> bool:
    """Return ``True`` if *document* starts with a ``---`` delimiter line."""
    return _OPENING_RE.match(document) is not None


def parse(document: str) -> tuple[dict[str, Any], str]:
    """Split *document* into its metadata mapping and body.

    Args:
        document: Full document text.

    Returns:
        Tuple of (metadata, body).  ``metadata`` is empty when the
        document has no header; ``body`` is the text after the closing
        delimiter, untouched.
        A leading byte-order mark is dropped.

    Raises:
        FormatError: If a header is opened but never closed, its YAML is
            invalid, or its root is not a mapping.
    """
    document = document.removeprefix("\ufeff")
    if not has_frontmatter(document):
        return {}, document

    match = _FRONTMATTER_RE.match(document)
    if match is None:
        raise FormatError(
            "Front matter is not terminated: missing closing '---' line"
        )

    try:
        data = yaml.safe_load(match.group("header"))
    except yaml.YAMLError as exc:
        raise FormatError(f"Invalid YAML in front matter: {exc}") from exc

    if data is None:
        data = {}
    elif not isinstance(data, dict):
        raise FormatError(
            f"Front matter must be a mapping, got {type(data).__name__}"
        )

    return data, document[match.end() :]


def serialize(body: str, metadata: Mapping[str, Any]) -> str:
    """Render *metadata* as a front matter header followed by *body*.

    Keys are emitted in insertion order.  An empty mapping still yields a
    (blank) header so the output always carries one.
    """
    if not metadata:
        return f"---\n---\n{body}"

    header = yaml.safe_dump(
        dict(metadata),
        sort_keys=False,
        default_flow_style=False,
        # escaped output keeps NEL/LS/PS inside values across a reload
        allow_unicode=False,
    )
    return f"---\n{header}---\n{body}"


def update_metadata(document: str, **updates: Any) -> str:
    """Merge *updates* into the document's front matter.

    Existing keys keep their position; new keys are appended.  A document
    without a header gains one.
    """
    metadata, body = parse(document)
    metadata.update(updates)
    return serialize(body, metadata)
