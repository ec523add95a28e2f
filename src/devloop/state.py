"""Devloop state — persistence of the single active loop record."""

from __future__ import annotations

from pathlib import Path

from devloop.frontmatter import parse_frontmatter
from devloop.models import (
    LoopState,
    StateError,
    StateReadError,
    _coerce_bool,
    _normalize_promise,
    _parse_int_field,
)
from devloop.utils import _write_text_atomic


class LoopStateStore:
    """Owns the on-disk loop record; its existence is the "loop active" flag."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> str | None:
        if not self.path.exists():
            return None
        try:
            return self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise StateReadError(f"cannot read state file {self.path}: {exc}") from exc

    def save(self, content: str) -> None:
        _write_text_atomic(self.path, content)

    def delete(self) -> None:
        self.path.unlink(missing_ok=True)

    def load_state(self) -> LoopState | None:
        content = self.load()
        if content is None:
            return None
        return decode_state(content)


def decode_state(content: str) -> LoopState:
    parsed = parse_frontmatter(content)
    metadata = parsed.metadata
    iteration = _parse_int_field(metadata.get("iteration"))
    if iteration is None:
        raise StateError(
            f"'iteration' field is not a valid number (got: '{metadata.get('iteration', '')}')"
        )
    max_iterations = _parse_int_field(metadata.get("max_iterations"))
    if max_iterations is None:
        raise StateError(
            "'max_iterations' field is not a valid number "
            f"(got: '{metadata.get('max_iterations', '')}')"
        )
    return LoopState(
        active=_coerce_bool(metadata.get("active"), default=False),
        iteration=iteration,
        max_iterations=max_iterations,
        completion_promise=_normalize_promise(metadata.get("completion_promise")),
        started_at=str(metadata.get("started_at", "")).strip(),
        prompt_text=parsed.body,
    )
