"""Devloop constants — paths, record delimiters, markers, and defaults."""

from __future__ import annotations

import re
from pathlib import Path

PACKAGE_SCHEMA_DIR = Path(__file__).resolve().parent / "schemas"

DEFAULT_STATE_FILE = ".claude/ralph-dev-loop.local.md"
DEFAULT_CONFIG_FILE = ".claude/devloop.yaml"
DEFAULT_LOG_FILE = ".claude/logs/devloop.log"

FRONTMATTER_DELIMITER = "---"
FRONTMATTER_LINE_PATTERN = re.compile(r"^(\w+):\s*(.*)$", re.ASCII)
ITERATION_LINE_PATTERN = re.compile(r"^iteration:.*$", re.ASCII)
INTEGER_FIELD_PATTERN = re.compile(r"^\s*([+-]?\d+)", re.ASCII)
MAX_ITERATIONS_ARG_PATTERN = re.compile(r"^\d+$", re.ASCII)

PROMISE_MARKER_PATTERN = re.compile(r"<promise>(.*?)</promise>", re.DOTALL)

# The initializer writes this literal when no promise is configured, and the
# controller treats a promise spelled "null" the same way.
UNSET_PROMISE = "null"

ASSISTANT_ROLE = "assistant"
TEXT_SEGMENT_TYPE = "text"

DECISION_BLOCK = "block"

OUTCOME_PASS_THROUGH = "pass_through"
OUTCOME_CORRUPTED = "corrupted"
OUTCOME_LIMIT_REACHED = "limit_reached"
OUTCOME_COMPLETED = "completed"
OUTCOME_CONTINUE = "continue"
TERMINAL_OUTCOMES = (
    OUTCOME_PASS_THROUGH,
    OUTCOME_CORRUPTED,
    OUTCOME_LIMIT_REACHED,
    OUTCOME_COMPLETED,
)

HOOK_INPUT_SCHEMA_FILE = "hook_input.schema.json"

SETUP_COMMAND_HINT = "devloop setup"
