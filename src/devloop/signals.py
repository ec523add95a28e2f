"""Completion-promise detection in assistant output."""

from __future__ import annotations

from devloop.constants import PROMISE_MARKER_PATTERN
from devloop.models import _normalize_promise


def collapse_whitespace(text: str) -> str:
    return " ".join(text.split())


def extract_promise_text(text: str) -> str | None:
    """Return the collapsed text of the first ``<promise>`` marker, if any."""
    match = PROMISE_MARKER_PATTERN.search(text)
    if match is None:
        return None
    return collapse_whitespace(match.group(1))


def promise_satisfied(output: str, completion_promise: str | None) -> bool:
    promise = _normalize_promise(completion_promise)
    if promise is None:
        return False
    promise_text = extract_promise_text(output)
    if not promise_text:
        return False
    return promise_text == collapse_whitespace(promise)
