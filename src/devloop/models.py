"""Devloop data models — exceptions, dataclasses, and coercion helpers."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from devloop.constants import (
    INTEGER_FIELD_PATTERN,
    OUTCOME_CONTINUE,
    TERMINAL_OUTCOMES,
    UNSET_PROMISE,
)


def _coerce_bool(value: Any, *, default: bool = False) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in {"true", "1", "yes", "on"}
    return bool(value) if value is not None else default


def _parse_int_field(value: Any) -> int | None:
    """Parse a leading integer out of a frontmatter value.

    Leading whitespace and an optional sign are accepted, and anything after
    the digits is ignored. Returns ``None`` when no digits lead the value.
    """
    if value is None:
        return None
    match = INTEGER_FIELD_PATTERN.match(str(value))
    if match is None:
        return None
    return int(match.group(1))


def _normalize_promise(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    if not text or text == UNSET_PROMISE:
        return None
    return text


class DevLoopError(RuntimeError):
    """Base class for devloop failures."""


class StateError(DevLoopError):
    """Raised when the loop state record cannot be loaded or validated."""


class StateReadError(StateError):
    """Raised when the state record exists but cannot be read."""


class HookInputError(DevLoopError):
    """Raised when the hook payload on stdin cannot be read or parsed."""


class TranscriptUnavailableError(DevLoopError):
    """Raised when the transcript path does not exist."""


class SetupError(DevLoopError):
    """Raised when the initializer receives unusable arguments."""


@dataclass(frozen=True)
class Frontmatter:
    metadata: dict[str, str]
    body: str


@dataclass(frozen=True)
class LoopState:
    active: bool
    iteration: int
    max_iterations: int
    completion_promise: str | None
    started_at: str
    prompt_text: str

    @property
    def is_unbounded(self) -> bool:
        return self.max_iterations <= 0

    @property
    def limit_reached(self) -> bool:
        return self.max_iterations > 0 and self.iteration >= self.max_iterations


@dataclass(frozen=True)
class HookInput:
    transcript_path: str | None


@dataclass(frozen=True)
class StopOutcome:
    """Single decision produced by one stop-hook invocation."""

    kind: str
    message: str = ""
    payload: dict[str, Any] | None = None
    iteration: int | None = None

    def __post_init__(self) -> None:
        if self.kind not in TERMINAL_OUTCOMES and self.kind != OUTCOME_CONTINUE:
            raise ValueError(f"unknown stop outcome kind: {self.kind}")

    @property
    def blocks_exit(self) -> bool:
        return self.kind == OUTCOME_CONTINUE


@dataclass(frozen=True)
class LoggingConfig:
    enabled: bool
    path: Path


@dataclass(frozen=True)
class DevLoopConfig:
    repo_root: Path
    state_file: Path
    logging: LoggingConfig
