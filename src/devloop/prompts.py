"""User-facing text: loop status lines, setup banner, and help copy."""

from __future__ import annotations

from devloop.constants import SETUP_COMMAND_HINT

SETUP_DESCRIPTION = """\
Start a development loop in the current session. The stop hook prevents the
session from ending and feeds the same prompt back until the completion
promise is detected or the iteration limit is reached.

Each iteration follows the session protocol:
  1. Orient - read progress notes, git log and the feature list
  2. Select - pick the highest-priority unfinished feature
  3. Implement - build the feature
  4. Test - run the end-to-end tests
  5. Commit - commit with a progress update
  6. Repeat until done

To signal completion, output: <promise>YOUR_PHRASE</promise>
"""

SETUP_EPILOG = """\
examples:
  devloop setup "Build a todo API" --completion-promise 'ALL FEATURES COMPLETE' --max-iterations 30
  devloop setup --max-iterations 10 Fix the auth bug

stopping:
  Only by reaching --max-iterations or detecting --completion-promise.

monitoring:
  devloop status
  grep 'iteration:' {state_file}
"""

MISSING_PROMPT_MESSAGE = f"""\
devloop setup: ERROR no prompt provided

  The loop needs a task description to work on.

  Examples:
    {SETUP_COMMAND_HINT} Build a REST API for todos
    {SETUP_COMMAND_HINT} Fix the auth bug --max-iterations 20
    {SETUP_COMMAND_HINT} --completion-promise 'ALL FEATURES COMPLETE' Build the app

  For all options: {SETUP_COMMAND_HINT} --help"""

PROMISE_RULES_RULE = "=" * 59

PROMISE_RULES_TEMPLATE = """
{rule}
CRITICAL - Completion Promise
{rule}

To complete this loop, output this EXACT text:
  <promise>{promise}</promise>

STRICT REQUIREMENTS (DO NOT VIOLATE):
  - Use <promise> XML tags EXACTLY as shown above
  - The statement MUST be completely and unequivocally TRUE
  - Do NOT output false statements to exit the loop
  - Do NOT lie even if you think you should exit

IMPORTANT - Do not circumvent the loop:
  Even if you believe you're stuck, the task is impossible,
  or you've been running too long - you MUST NOT output a
  false promise statement. The loop continues until the
  promise is GENUINELY TRUE.
{rule}"""


def continue_status_line(iteration: int, completion_promise: str | None) -> str:
    if completion_promise:
        return (
            f"Dev loop iteration {iteration} | To stop: output "
            f"<promise>{completion_promise}</promise> "
            "(ONLY when the statement is TRUE - do not lie to exit!)"
        )
    return (
        f"Dev loop iteration {iteration} | No completion promise set - "
        "loop runs until --max-iterations"
    )


def setup_banner(*, max_iterations: int, completion_promise: str | None, state_file: str) -> str:
    max_text = str(max_iterations) if max_iterations > 0 else "unlimited"
    if completion_promise:
        promise_text = f"{completion_promise} (ONLY output when TRUE - do not lie!)"
    else:
        promise_text = "none (runs forever)"
    return (
        "Dev loop activated in this session!\n"
        "\n"
        "Iteration: 1\n"
        f"Max iterations: {max_text}\n"
        f"Completion promise: {promise_text}\n"
        "\n"
        "The stop hook is now active. When you try to exit, the SAME PROMPT will be\n"
        "fed back to you. You'll see your previous work in files, creating a\n"
        "self-referential loop where you iteratively improve on the same task.\n"
        "\n"
        f"To monitor: head -10 {state_file}\n"
        "\n"
        "WARNING: This loop cannot be stopped manually! It will run infinitely\n"
        "    unless you set --max-iterations or --completion-promise."
    )


def promise_rules(completion_promise: str) -> str:
    return PROMISE_RULES_TEMPLATE.format(rule=PROMISE_RULES_RULE, promise=completion_promise)


def corrupted_state_message(state_file: str, problem: str) -> str:
    return (
        "State file corrupted\n"
        f"   File: {state_file}\n"
        f"   Problem: {problem}\n\n"
        f"   Dev loop is stopping. Run '{SETUP_COMMAND_HINT}' again to start fresh."
    )
