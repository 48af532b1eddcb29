"""Sync result formatting functions.

- ``format_outcome`` -- one-line message after a sync.
- ``format_plan`` -- dry-run preview of the request that would be sent.
- ``outcome_to_json`` / ``plan_to_json`` -- dicts for ``--json`` output.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .models import SyncOutcome, SyncPlan

from .models import SyncAction

PUBLISHED_MESSAGE = "Published to BookStack!"
UP_TO_DATE_MESSAGE = "No need to update since the page is up to date"


def format_outcome(outcome: SyncOutcome, page_name: str | None = None) -> str:
    """Format a completed sync as human-readable text."""
    if not outcome.updated:
        return UP_TO_DATE_MESSAGE

    label = f"'{page_name}' " if page_name else ""
    return f"{PUBLISHED_MESSAGE} Page {label}id={outcome.id}"


def format_plan(plan: SyncPlan) -> str:
    """Format a dry-run plan as human-readable text.

    Payload keys are listed but the markdown body is summarised by size.
    """
    if plan.action == SyncAction.SKIP:
        return f"(dry run) {UP_TO_DATE_MESSAGE}"

    lines = [f"(dry run) Would {plan.action.value} page: {plan.method} {plan.path}"]
    for key, value in plan.payload.items():
        if key == "markdown":
            lines.append(f"  markdown: {len(value)} characters")
        else:
            lines.append(f"  {key}: {value}")
    lines.append(f"  checksum: {plan.checksum}")
    return "\n".join(lines)


def outcome_to_json(outcome: SyncOutcome) -> dict[str, Any]:
    """Convert an outcome to a JSON-serialisable dict."""
    return outcome.model_dump()


def plan_to_json(plan: SyncPlan) -> dict[str, Any]:
    """Convert a plan to a JSON-serialisable dict (without the body text)."""
    data = plan.model_dump(mode="json", exclude={"payload"})
    data["payload_keys"] = list(plan.payload)
    data["dry_run"] = True
    return data
