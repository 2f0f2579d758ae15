from __future__ import annotations

import json
import logging
from typing import Any

from result import Err, Ok, Result

from skim.config.defaults import default_config
from skim.config.schema import AppConfig, from_dict
from skim.services.fs import DEFAULT_FS, FileSystem

logger = logging.getLogger(__name__)

CONFIG_PATH = "~/.config/skim/config.json"

KNOWN_KEYS = frozenset(default_config().to_dict())


def _parse(text: str, path: str) -> Result[dict[str, Any], str]:
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        return Err(f"Invalid JSON in {path} at line {exc.lineno}, column {exc.colno}: {exc.msg}.")
    if not isinstance(payload, dict):
        return Err(f"Config at {path} must be a JSON object.")
    return Ok(payload)


def load_config(path: str | None = None, fs: FileSystem = DEFAULT_FS) -> Result[AppConfig, str]:
    """Read the user config, falling back to defaults when no file exists.

    Unknown keys are logged and ignored. Values are clamped by ``from_dict``.
    """
    resolved = fs.expanduser(path or CONFIG_PATH)
    if not fs.exists(resolved):
        return Ok(default_config())

    try:
        text = fs.read_text(resolved)
    except (OSError, UnicodeDecodeError) as exc:
        reason = getattr(exc, "strerror", None) or str(exc)
        return Err(f"Cannot read config at {resolved}: {reason}.")

    parsed = _parse(text, resolved)
    if isinstance(parsed, Err):
        return parsed
    payload = parsed.unwrap()

    unknown = sorted(set(payload) - KNOWN_KEYS)
    if unknown:
        logger.warning("Ignoring unknown config keys in %s: %s", resolved, ", ".join(unknown))

    try:
        return Ok(from_dict(payload, default_config()))
    except (TypeError, ValueError) as exc:
        return Err(f"Invalid value in config at {resolved}: {exc}.")


def sample_config_json() -> str:
    return json.dumps(default_config().to_dict(), indent=2)
