from __future__ import annotations

import argparse
import sys
from pathlib import Path

from devloop.config import load_config
from devloop.constants import DEFAULT_STATE_FILE, MAX_ITERATIONS_ARG_PATTERN
from devloop.controller import run_stop_hook
from devloop.frontmatter import render_state_record
from devloop.models import DevLoopConfig, SetupError, StateError, _normalize_promise
from devloop.prompts import (
    MISSING_PROMPT_MESSAGE,
    SETUP_DESCRIPTION,
    SETUP_EPILOG,
    promise_rules,
    setup_banner,
)
from devloop.state import LoopStateStore
from devloop.utils import _append_log, _utc_now


def _display_path(config: DevLoopConfig, path: Path) -> str:
    try:
        return str(path.relative_to(config.repo_root))
    except ValueError:
        return str(path)


def _config_from_args(args: argparse.Namespace) -> DevLoopConfig:
    return load_config(Path.cwd(), state_file=getattr(args, "state_file", None))


# ---------------------------------------------------------------------------
# setup
# ---------------------------------------------------------------------------


def _parse_max_iterations(raw: str | None) -> int:
    if raw is None:
        return 0
    if not MAX_ITERATIONS_ARG_PATTERN.match(raw):
        raise SetupError(f"--max-iterations requires a positive integer, got: {raw or '(nothing)'}")
    return int(raw)


def _parse_completion_promise(raw: str | None) -> str | None:
    if raw is None:
        return None
    if not raw:
        raise SetupError(
            "--completion-promise requires a text argument\n"
            "   Example: --completion-promise 'ALL FEATURES COMPLETE'"
        )
    # "null" is stored as a bare null, so it means no promise.
    return _normalize_promise(raw)


def _cmd_setup(args: argparse.Namespace) -> int:
    try:
        max_iterations = _parse_max_iterations(args.max_iterations)
        completion_promise = _parse_completion_promise(args.completion_promise)
    except SetupError as exc:
        print(f"devloop setup: ERROR {exc}", file=sys.stderr)
        return 1

    prompt = " ".join(args.prompt).strip()
    if not prompt:
        print(MISSING_PROMPT_MESSAGE, file=sys.stderr)
        return 1

    config = _config_from_args(args)
    store = LoopStateStore(config.state_file)
    record = render_state_record(
        prompt=prompt,
        max_iterations=max_iterations,
        completion_promise=completion_promise,
        started_at=_utc_now(),
    )
    try:
        store.save(record)
    except OSError as exc:
        print(f"devloop setup: ERROR cannot write {store.path}: {exc}", file=sys.stderr)
        return 1
    _append_log(
        config.logging,
        f"setup state_file={store.path} max_iterations={max_iterations} "
        f"completion_promise={completion_promise or 'null'}",
    )

    print(
        setup_banner(
            max_iterations=max_iterations,
            completion_promise=completion_promise,
            state_file=_display_path(config, store.path),
        )
    )
    print("")
    print(prompt)
    if completion_promise is not None:
        print(promise_rules(completion_promise))
    return 0


# ---------------------------------------------------------------------------
# stop-hook
# ---------------------------------------------------------------------------


def _cmd_stop_hook(args: argparse.Namespace) -> int:
    config = _config_from_args(args)
    return run_stop_hook(config, stdin=sys.stdin, stdout=sys.stdout, stderr=sys.stderr)


# ---------------------------------------------------------------------------
# status
# ---------------------------------------------------------------------------


def _cmd_status(args: argparse.Namespace) -> int:
    config = _config_from_args(args)
    store = LoopStateStore(config.state_file)
    try:
        state = store.load_state()
    except StateError as exc:
        print(f"devloop status: ERROR {exc}", file=sys.stderr)
        return 1
    if state is None:
        print("devloop status: no active loop")
        return 0

    max_text = "unlimited" if state.is_unbounded else str(state.max_iterations)
    print(f"state_file: {_display_path(config, store.path)}")
    print(f"active: {str(state.active).lower()}")
    print(f"iteration: {state.iteration}")
    print(f"max_iterations: {max_text}")
    print(f"completion_promise: {state.completion_promise or 'none'}")
    print(f"started_at: {state.started_at or '<unknown>'}")
    print("prompt:")
    print(state.prompt_text or "<empty>")
    return 0


# ---------------------------------------------------------------------------
# parser
# ---------------------------------------------------------------------------


def _add_state_file_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--state-file",
        default=None,
        help=f"Path to the loop state record (default: {DEFAULT_STATE_FILE})",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="devloop command line interface")
    subparsers = parser.add_subparsers(dest="command")

    setup = subparsers.add_parser(
        "setup",
        help="Start a dev loop in the current session",
        description=SETUP_DESCRIPTION,
        epilog=SETUP_EPILOG.format(state_file=DEFAULT_STATE_FILE),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
    )
    setup.add_argument("prompt", nargs="*", help="Initial prompt to start the loop (can be multiple words)")
    setup.add_argument(
        "--max-iterations",
        default=None,
        metavar="N",
        help="Maximum iterations before auto-stop (default: unlimited)",
    )
    setup.add_argument(
        "--completion-promise",
        default=None,
        metavar="TEXT",
        help="Promise phrase to signal completion (quote multi-word phrases)",
    )
    _add_state_file_argument(setup)
    setup.set_defaults(handler=_cmd_setup, accepts_extra_prompt=True)

    stop_hook = subparsers.add_parser(
        "stop-hook",
        help="Decide whether the session may stop; reads the hook payload from stdin",
    )
    _add_state_file_argument(stop_hook)
    stop_hook.set_defaults(handler=_cmd_stop_hook)

    status = subparsers.add_parser("status", help="Show the active loop state")
    _add_state_file_argument(status)
    status.set_defaults(handler=_cmd_status)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args, extras = parser.parse_known_args(argv)
    if extras:
        if not getattr(args, "accepts_extra_prompt", False):
            parser.error(f"unrecognized arguments: {' '.join(extras)}")
        args.prompt = [*args.prompt, *extras]
    handler = getattr(args, "handler", None)
    if handler is None:
        parser.print_help()
        return 2
    return int(handler(args))
