"""Stop-hook decision engine.

The host runs the hook once per finished turn, so the loop lives entirely in
the state record: each invocation loads it, walks the checks below in order,
and lands on exactly one outcome. Every outcome other than ``continue`` removes
the record, which is how a loop ends.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Callable, TextIO

from devloop.constants import (
    DECISION_BLOCK,
    OUTCOME_COMPLETED,
    OUTCOME_CONTINUE,
    OUTCOME_CORRUPTED,
    OUTCOME_LIMIT_REACHED,
    OUTCOME_PASS_THROUGH,
)
from devloop.frontmatter import update_iteration
from devloop.hook_input import read_hook_input
from devloop.models import (
    DevLoopConfig,
    HookInput,
    HookInputError,
    StateError,
    StateReadError,
    StopOutcome,
    TranscriptUnavailableError,
)
from devloop.prompts import continue_status_line, corrupted_state_message
from devloop.signals import promise_satisfied
from devloop.state import LoopStateStore, decode_state
from devloop.transcript import extract_last_assistant_text
from devloop.utils import _append_log

LOG_PREFIX = "devloop stop-hook:"


def _stop(store: LoopStateStore, kind: str, message: str) -> StopOutcome:
    store.delete()
    return StopOutcome(kind=kind, message=message)


def evaluate_stop(
    store: LoopStateStore,
    load_hook_input: Callable[[], HookInput],
) -> StopOutcome:
    try:
        content = store.load()
    except StateReadError as exc:
        return _stop(store, OUTCOME_CORRUPTED, f"Cannot read state file: {exc}")
    if content is None:
        return StopOutcome(kind=OUTCOME_PASS_THROUGH)

    state_file = str(store.path)
    try:
        state = decode_state(content)
    except StateError as exc:
        return _stop(store, OUTCOME_CORRUPTED, corrupted_state_message(state_file, str(exc)))

    if state.limit_reached:
        return _stop(
            store,
            OUTCOME_LIMIT_REACHED,
            f"Max iterations ({state.max_iterations}) reached.",
        )

    try:
        hook_input = load_hook_input()
    except HookInputError as exc:
        return _stop(store, OUTCOME_CORRUPTED, f"Failed to parse hook input from stdin ({exc})")

    transcript_path = hook_input.transcript_path
    try:
        if not transcript_path:
            raise TranscriptUnavailableError("transcript_path missing from hook input")
        last_output = extract_last_assistant_text(Path(transcript_path))
    except TranscriptUnavailableError:
        return _stop(
            store,
            OUTCOME_CORRUPTED,
            "Transcript file not found\n"
            f"   Expected: {transcript_path}\n"
            "   Dev loop is stopping.",
        )
    if not last_output:
        return _stop(
            store,
            OUTCOME_CORRUPTED,
            "No assistant messages found in transcript\n"
            f"   Transcript: {transcript_path}\n"
            "   Dev loop is stopping.",
        )

    if promise_satisfied(last_output, state.completion_promise):
        return _stop(
            store,
            OUTCOME_COMPLETED,
            f"Detected <promise>{state.completion_promise}</promise>",
        )

    if not state.prompt_text:
        return _stop(
            store,
            OUTCOME_CORRUPTED,
            corrupted_state_message(state_file, "No prompt text found"),
        )

    next_iteration = state.iteration + 1
    store.save(update_iteration(content, next_iteration))
    return StopOutcome(
        kind=OUTCOME_CONTINUE,
        payload={
            "decision": DECISION_BLOCK,
            "reason": state.prompt_text,
            "systemMessage": continue_status_line(next_iteration, state.completion_promise),
        },
        iteration=next_iteration,
    )


def run_stop_hook(
    config: DevLoopConfig,
    *,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
) -> int:
    """Run one stop-hook cycle. Always returns 0 so the host never sees a crash."""
    stdin = stdin if stdin is not None else sys.stdin
    stdout = stdout if stdout is not None else sys.stdout
    stderr = stderr if stderr is not None else sys.stderr
    store = LoopStateStore(config.state_file)

    try:
        outcome = evaluate_stop(store, lambda: read_hook_input(stdin))
    except Exception as exc:
        print(f"{LOG_PREFIX} Unexpected error: {exc}", file=stderr)
        try:
            store.delete()
        except OSError as cleanup_exc:
            print(f"{LOG_PREFIX} cannot remove {store.path}: {cleanup_exc}", file=stderr)
        _append_log(config.logging, f"stop-hook outcome=error detail={exc}")
        return 0

    if outcome.message:
        print(f"{LOG_PREFIX} {outcome.message}", file=stderr)
    if outcome.kind == OUTCOME_PASS_THROUGH:
        return 0

    if outcome.blocks_exit and outcome.payload is not None:
        stdout.write(json.dumps(outcome.payload))
        stdout.flush()
        _append_log(
            config.logging,
            f"stop-hook outcome={outcome.kind} iteration={outcome.iteration} state_file={store.path}",
        )
    else:
        _append_log(
            config.logging,
            f"stop-hook outcome={outcome.kind} state_file={store.path} detail={outcome.message}",
        )
    return 0
