"""Stage records attached to submission receipts and workflow results."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any


def domain_build_stage_event(
    stage: str,
    status: str,
    details: dict[str, Any] | None = None,
) -> dict[str, object]:
    """Record one workflow stage transition.

    Receipts carry these records in order, for example `emit/started`,
    `emit/completed`, then `observe/listening` once the listener runs.

    Args:
        stage: Workflow stage (`run`, `fetch`, `emit`, `finality`, `observe`).
        status: Outcome of the stage at this point.
        details: Extra context such as attempt number or operation handle;
            omitted from the record when empty.

    Returns:
        dict[str, object]: JSON-ready record stamped with the current UTC time.
    """

    stage_event: dict[str, object] = {
        "stage": stage,
        "status": status,
        "at_utc": datetime.now(timezone.utc).isoformat(),
    }
    if details:
        stage_event["details"] = details
    return stage_event
