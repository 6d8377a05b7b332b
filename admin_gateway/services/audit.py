"""Very lightweight audit trail of admin file operations.

Appends JSON lines to ``AUDIT_LOG_FILE`` and emits a structured Loguru
message. Uses plain ``open(path, "a")`` to avoid the Path.write_text *append*
gotcha.
"""
from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from loguru import logger

from admin_gateway.config import settings


def record(
    *,
    actor: str,
    action: str,
    user_id: str,
    ok: bool,
    file_id: Optional[str] = None,
    detail: Optional[dict[str, Any]] = None,
) -> None:  # noqa: D401
    """Persist an audit event to file and structured logger."""

    event = {
        "ts": datetime.now(tz=timezone.utc).isoformat(),
        "actor": actor,
        "action": action,
        "user_id": user_id,
        "file_id": file_id,
        "ok": ok,
    }
    if detail:
        event["detail"] = detail

    logger.bind(audit=True).info("{event}", event=event)

    path = Path(settings.AUDIT_LOG_FILE).resolve()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as fh:
            fh.write(json.dumps(event, default=str) + "\n")
    except OSError:
        logger.exception("Failed to write audit log to {}", path)
