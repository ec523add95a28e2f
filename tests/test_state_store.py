from __future__ import annotations

import os
from pathlib import Path

import pytest

from devloop.models import StateError, StateReadError
from devloop.state import LoopStateStore, decode_state


def _record(**overrides: str) -> str:
    fields = {
        "active": "true",
        "iteration": "1",
        "max_iterations": "0",
        "completion_promise": "null",
        "started_at": '"2026-10-18T08:00:00.000Z"',
    }
    fields.update(overrides)
    lines = ["---", *(f"{key}: {value}" for key, value in fields.items()), "---", "", "Do the task", ""]
    return "\n".join(lines)


def test_load_returns_none_when_record_is_absent(tmp_path: Path) -> None:
    store = LoopStateStore(tmp_path / ".claude" / "ralph-dev-loop.local.md")

    assert store.exists() is False
    assert store.load() is None
    assert store.load_state() is None


def test_save_creates_parent_and_leaves_no_temp_files(tmp_path: Path) -> None:
    path = tmp_path / ".claude" / "ralph-dev-loop.local.md"
    store = LoopStateStore(path)

    store.save(_record())
    store.save(_record(iteration="2"))

    assert store.load() == _record(iteration="2")
    assert sorted(item.name for item in path.parent.iterdir()) == ["ralph-dev-loop.local.md"]


def test_delete_is_idempotent(tmp_path: Path) -> None:
    store = LoopStateStore(tmp_path / "state.md")
    store.save(_record())

    store.delete()
    store.delete()

    assert store.exists() is False


@pytest.mark.skipif(os.name == "nt" or os.geteuid() == 0, reason="permission bits are not enforced")
def test_load_raises_state_read_error_for_unreadable_record(tmp_path: Path) -> None:
    path = tmp_path / "state.md"
    path.write_text(_record(), encoding="utf-8")
    path.chmod(0)
    try:
        with pytest.raises(StateReadError):
            LoopStateStore(path).load()
    finally:
        path.chmod(0o600)


def test_load_raises_state_read_error_when_path_is_a_directory(tmp_path: Path) -> None:
    path = tmp_path / "state.md"
    path.mkdir()

    with pytest.raises(StateReadError):
        LoopStateStore(path).load()


def test_decode_state_builds_typed_loop_state() -> None:
    state = decode_state(_record(iteration="3", max_iterations="10", completion_promise='"SHIP IT"'))

    assert state.active is True
    assert state.iteration == 3
    assert state.max_iterations == 10
    assert state.completion_promise == "SHIP IT"
    assert state.started_at == "2026-10-18T08:00:00.000Z"
    assert state.prompt_text == "Do the task"
    assert state.limit_reached is False


@pytest.mark.parametrize("raw_promise", ["null", '"null"', '""'])
def test_decode_state_treats_null_and_empty_promise_as_unset(raw_promise: str) -> None:
    assert decode_state(_record(completion_promise=raw_promise)).completion_promise is None


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("7", 7), ("  7", 7), ("+7", 7), ("7 # edited by hand", 7), ("-2", -2)],
)
def test_decode_state_accepts_leading_integer(raw: str, expected: int) -> None:
    assert decode_state(_record(iteration=raw)).iteration == expected


@pytest.mark.parametrize("field", ["iteration", "max_iterations"])
def test_decode_state_rejects_non_numeric_fields(field: str) -> None:
    with pytest.raises(StateError, match=f"'{field}' field is not a valid number \\(got: 'abc'\\)"):
        decode_state(_record(**{field: "abc"}))


def test_decode_state_rejects_missing_iteration() -> None:
    content = "---\nmax_iterations: 0\n---\nprompt"

    with pytest.raises(StateError, match="'iteration' field is not a valid number"):
        decode_state(content)
