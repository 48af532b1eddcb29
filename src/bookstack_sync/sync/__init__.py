"""Single-document sync decision engine.

Modules:

- ``engine``   -- ``SyncEngine``, ``plan_sync``, ``content_hash``, ``select_target``,
  ``build_payload``: fingerprint comparison and the create/update call.
- ``models``   -- ``PageMetadata``, ``SyncAction``, ``SyncTarget``,
  ``SyncPlan``, ``SyncOutcome``, ``SyncDocumentResult``.
- ``reporter`` -- human-readable and JSON output.

Usage example
-------------
::

    from bookstack_sync.config import load_config
    from bookstack_sync.core.client import BookStackClient
    from bookstack_sync.sync import SyncEngine

    with BookStackClient(load_config()) as client:
        result = SyncEngine(client).sync_document(text)
    if result.outcome.updated:
        path.write_text(result.document)
"""

from .engine import (
    SyncEngine,
    build_payload,
    content_hash,
    plan_sync,
    select_target,
)
from .models import (
    PageMetadata,
    SyncAction,
    SyncDocumentResult,
    SyncOutcome,
    SyncPlan,
    SyncTarget,
)
from .reporter import (
    format_outcome,
    format_plan,
    outcome_to_json,
    plan_to_json,
)

__all__ = [
    "PageMetadata",
    "SyncAction",
    "SyncDocumentResult",
    "SyncEngine",
    "SyncOutcome",
    "SyncPlan",
    "SyncTarget",
    "build_payload",
    "content_hash",
    "format_outcome",
    "format_plan",
    "outcome_to_json",
    "plan_sync",
    "plan_to_json",
    "select_target",
]
