"""Transcript scanning — pull the latest assistant turn out of a JSONL log."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from devloop.constants import ASSISTANT_ROLE, TEXT_SEGMENT_TYPE
from devloop.models import TranscriptUnavailableError


def _entry_role(entry: dict[str, Any]) -> str:
    message = entry.get("message")
    if isinstance(message, dict) and "role" in message:
        return str(message.get("role", ""))
    return str(entry.get("role", ""))


def _entry_content(entry: dict[str, Any]) -> Any:
    message = entry.get("message")
    if isinstance(message, dict) and "content" in message:
        return message.get("content")
    return entry.get("content")


def _text_segments(content: Any) -> list[str]:
    if isinstance(content, str):
        return [content]
    if not isinstance(content, list):
        return []
    segments: list[str] = []
    for segment in content:
        if not isinstance(segment, dict):
            continue
        if segment.get("type") != TEXT_SEGMENT_TYPE:
            continue
        text = segment.get("text")
        if isinstance(text, str):
            segments.append(text)
    return segments


def iter_transcript_entries(path: Path):
    """Yield each line of the transcript that decodes to a JSON object."""
    with path.open("r", encoding="utf-8", errors="replace") as handle:
        for line in handle:
            if not line.strip():
                continue
            try:
                entry = json.loads(line)
            except json.JSONDecodeError:
                continue
            if isinstance(entry, dict):
                yield entry


def extract_last_assistant_text(path: Path | str) -> str | None:
    transcript_path = Path(path)
    if not transcript_path.is_file():
        raise TranscriptUnavailableError(f"transcript file not found: {transcript_path}")

    last_entry: dict[str, Any] | None = None
    for entry in iter_transcript_entries(transcript_path):
        if _entry_role(entry) == ASSISTANT_ROLE:
            last_entry = entry

    if last_entry is None:
        return None
    text = "\n".join(_text_segments(_entry_content(last_entry)))
    return text or None
