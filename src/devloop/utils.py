"""Devloop utility functions — timestamps, file writes, and the decision log."""

from __future__ import annotations

import os
import uuid
from datetime import datetime, timezone
from pathlib import Path

from devloop.models import LoggingConfig


# ---------------------------------------------------------------------------
# Timestamp helpers
# ---------------------------------------------------------------------------


def _utc_now() -> str:
    return (
        datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    )


# ---------------------------------------------------------------------------
# Text / file helpers
# ---------------------------------------------------------------------------


def _write_text_atomic(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex[:8]}.tmp")
    try:
        with temp_path.open("w", encoding="utf-8", newline="") as handle:
            handle.write(content)
        os.replace(temp_path, path)
    finally:
        if temp_path.exists():
            temp_path.unlink()


def _compact_log_text(text: str, limit: int = 240) -> str:
    compact = " ".join(text.strip().split())
    if len(compact) <= limit:
        return compact
    return f"{compact[:limit]}..."


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


def _append_log(logging_config: LoggingConfig, message: str) -> None:
    if not logging_config.enabled:
        return
    log_path = logging_config.path
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        with log_path.open("a", encoding="utf-8") as handle:
            handle.write(f"{_utc_now()} {_compact_log_text(message, limit=400)}\n")
    except OSError:
        return
