"""Reading and validating the JSON payload the host sends on stdin."""

from __future__ import annotations

import json
from functools import lru_cache
from typing import Any, TextIO

from jsonschema import Draft202012Validator

from devloop.constants import HOOK_INPUT_SCHEMA_FILE, PACKAGE_SCHEMA_DIR
from devloop.models import HookInput, HookInputError


@lru_cache(maxsize=1)
def _load_schema() -> dict[str, Any]:
    schema_path = PACKAGE_SCHEMA_DIR / HOOK_INPUT_SCHEMA_FILE
    return json.loads(schema_path.read_text(encoding="utf-8"))


def _format_error_path(path: Any) -> str:
    parts = [str(part) for part in path]
    return "/" + "/".join(parts) if parts else "<root>"


def parse_hook_input(raw_text: str) -> HookInput:
    try:
        payload = json.loads(raw_text)
    except json.JSONDecodeError as exc:
        raise HookInputError(f"hook input is not valid JSON: {exc}") from exc

    validator = Draft202012Validator(_load_schema())
    failures = [
        f"hook input schema violation at {_format_error_path(error.path)}: {error.message}"
        for error in sorted(validator.iter_errors(payload), key=lambda item: _format_error_path(item.path))
    ]
    if failures:
        raise HookInputError("; ".join(failures))

    transcript_path = payload.get("transcript_path")
    return HookInput(transcript_path=transcript_path or None)


def read_hook_input(stream: TextIO) -> HookInput:
    """Consume the whole stream before parsing; the host writes one object."""
    try:
        raw_text = stream.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise HookInputError(f"cannot read hook input: {exc}") from exc
    return parse_hook_input(raw_text)
