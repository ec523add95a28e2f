from __future__ import annotations

import io

import pytest

from devloop.hook_input import parse_hook_input, read_hook_input
from devloop.models import HookInputError


def test_read_hook_input_consumes_multiline_stream() -> None:
    stream = io.StringIO('{\n  "session_id": "abc",\n  "transcript_path": "/tmp/t.jsonl"\n}\n')

    hook_input = read_hook_input(stream)

    assert hook_input.transcript_path == "/tmp/t.jsonl"
    assert stream.read() == ""


def test_missing_transcript_path_is_not_a_parse_error() -> None:
    hook_input = parse_hook_input('{"hook_event_name": "Stop"}')

    assert hook_input.transcript_path is None


@pytest.mark.parametrize("raw", ["", "not json", "{\"transcript_path\": "])
def test_invalid_json_raises(raw: str) -> None:
    with pytest.raises(HookInputError, match="not valid JSON"):
        parse_hook_input(raw)


@pytest.mark.parametrize(
    ("raw", "location"),
    [("[]", "<root>"), ('"text"', "<root>"), ('{"transcript_path": 42}', "/transcript_path")],
)
def test_schema_violations_raise(raw: str, location: str) -> None:
    with pytest.raises(HookInputError, match=f"schema violation at {location}"):
        parse_hook_input(raw)
