"""Frontmatter codec for the loop state record.

The record is a small markdown file whose first line is ``---``. The lines up
to the next ``---`` hold ``key: value`` metadata and everything after that is
the task prompt. Only that single-level subset is understood; lines that do
not look like ``key: value`` are skipped so hand edits never break a loop.
"""

from __future__ import annotations

from devloop.constants import (
    FRONTMATTER_DELIMITER,
    FRONTMATTER_LINE_PATTERN,
    ITERATION_LINE_PATTERN,
    UNSET_PROMISE,
)
from devloop.models import Frontmatter


def _strip_matching_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
        return value[1:-1]
    return value


def _closing_delimiter_index(lines: list[str]) -> int | None:
    if not lines or lines[0] != FRONTMATTER_DELIMITER:
        return None
    for index in range(1, len(lines)):
        if lines[index] == FRONTMATTER_DELIMITER:
            return index
    return None


def parse_frontmatter(content: str) -> Frontmatter:
    lines = content.split("\n")
    end_index = _closing_delimiter_index(lines)
    if end_index is None:
        return Frontmatter(metadata={}, body=content)

    metadata: dict[str, str] = {}
    for line in lines[1:end_index]:
        match = FRONTMATTER_LINE_PATTERN.match(line)
        if match is None:
            continue
        metadata[match.group(1)] = _strip_matching_quotes(match.group(2).strip())

    body = "\n".join(lines[end_index + 1 :]).strip()
    return Frontmatter(metadata=metadata, body=body)


def update_iteration(content: str, new_iteration: int) -> str:
    """Rewrite the ``iteration`` line in place, leaving every other byte alone.

    The parser keeps the last duplicate key, so the last ``iteration`` line is
    the one rewritten.
    """
    lines = content.split("\n")
    end_index = _closing_delimiter_index(lines)
    if end_index is None:
        return content
    for index in range(end_index - 1, 0, -1):
        if ITERATION_LINE_PATTERN.match(lines[index]):
            lines[index] = f"iteration: {int(new_iteration)}"
            return "\n".join(lines)
    return content


def render_state_record(
    *,
    prompt: str,
    max_iterations: int,
    completion_promise: str | None,
    started_at: str,
    iteration: int = 1,
) -> str:
    if completion_promise is None or completion_promise == UNSET_PROMISE:
        promise_value = UNSET_PROMISE
    else:
        promise_value = f'"{completion_promise}"'
    return (
        f"{FRONTMATTER_DELIMITER}\n"
        "active: true\n"
        f"iteration: {int(iteration)}\n"
        f"max_iterations: {int(max_iterations)}\n"
        f"completion_promise: {promise_value}\n"
        f'started_at: "{started_at}"\n'
        f"{FRONTMATTER_DELIMITER}\n"
        "\n"
        f"{prompt}\n"
    )
