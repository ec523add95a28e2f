from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from devloop.constants import DEFAULT_CONFIG_FILE, DEFAULT_LOG_FILE, DEFAULT_STATE_FILE
from devloop.models import DevLoopConfig, LoggingConfig, _coerce_bool


def _load_policy(repo_root: Path) -> dict[str, Any]:
    policy_path = repo_root / DEFAULT_CONFIG_FILE
    if not policy_path.exists():
        return {}
    try:
        loaded = yaml.safe_load(policy_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, yaml.YAMLError):
        return {}
    if not isinstance(loaded, dict):
        return {}
    return loaded


def _resolve_path(repo_root: Path, raw: Any, default: str) -> Path:
    text = str(raw).strip() if raw is not None else ""
    try:
        candidate = Path(text or default).expanduser()
    except RuntimeError:
        # Unknown user or no home directory for "~".
        candidate = Path(default)
    if candidate.is_absolute():
        return candidate
    return repo_root / candidate


def _load_logging_config(repo_root: Path, policy: dict[str, Any]) -> LoggingConfig:
    logging_section = policy.get("logging")
    if not isinstance(logging_section, dict):
        logging_section = {}
    return LoggingConfig(
        enabled=_coerce_bool(logging_section.get("enabled"), default=True),
        path=_resolve_path(repo_root, logging_section.get("path"), DEFAULT_LOG_FILE),
    )


def load_config(repo_root: Path | None = None, *, state_file: str | None = None) -> DevLoopConfig:
    """Build the runtime config; ``state_file`` (from the CLI) beats the policy file."""
    root = Path(repo_root) if repo_root is not None else Path.cwd()
    policy = _load_policy(root)
    raw_state_file = state_file if state_file else policy.get("state_file")
    return DevLoopConfig(
        repo_root=root,
        state_file=_resolve_path(root, raw_state_file, DEFAULT_STATE_FILE),
        logging=_load_logging_config(root, policy),
    )
