"""Configuration loading with precedence resolution.

This module builds the effective :class:`~specref.models.ResolverConfig`
for a run:

* **Project config** -- an optional ``./specref.json`` file holding any of
  the ``ResolverConfig`` fields.  See :func:`load_project_config`.
* **Environment** -- ``SPECREF_MODE``, ``SPECREF_THROW_ON_ERROR``, and
  ``SPECREF_MAX_DEPTH``.
* **CLI flags** -- passed to :func:`resolve_config` by the command line.

It also locates the XDG data directory used for crash logs
(:func:`get_data_dir`).
"""

from __future__ import annotations

import json
import os
import platform
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from specref.exceptions import ConfigError
from specref.models import ResolverConfig

_APP_NAME = "specref"
_PROJECT_CONFIG_FILENAME = "specref.json"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/specref/`` (default ``~/.local/share/specref/``).
    On macOS/Windows: ``~/.specref/logs/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_DATA_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".local" / "share"
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}" / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./specref.json``.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


def _env_bool(name: str) -> Optional[bool]:
    value = os.environ.get(name)
    if value is None or value == "":
        return None
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigError(f"Environment variable {name} must be a boolean, got '{value}'")


# --- Precedence resolution ---


def resolve_config(
    cli_mode: Optional[str] = None,
    cli_throw_on_error: Optional[bool] = None,
    cli_max_depth: Optional[int] = None,
) -> ResolverConfig:
    """Resolve the effective config with the full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_mode``, ``cli_throw_on_error``, ``cli_max_depth``)
        2. Environment variables (``SPECREF_MODE``, ``SPECREF_THROW_ON_ERROR``,
           ``SPECREF_MAX_DEPTH``)
        3. Project config (``./specref.json``)
        4. Defaults

    Raises:
        ConfigError: If any layer holds an invalid value.
    """
    # 4 + 3. Defaults overlaid with the project file
    merged: dict[str, Any] = dict(load_project_config() or {})

    # 2. Environment variables
    env_mode = os.environ.get("SPECREF_MODE")
    if env_mode:
        merged["mode"] = env_mode.strip().lower()
    env_throw = _env_bool("SPECREF_THROW_ON_ERROR")
    if env_throw is not None:
        merged["throw_on_error"] = env_throw
    env_depth = os.environ.get("SPECREF_MAX_DEPTH")
    if env_depth:
        merged["max_depth"] = env_depth

    # 1. CLI flags
    if cli_mode is not None:
        merged["mode"] = cli_mode
    if cli_throw_on_error is not None:
        merged["throw_on_error"] = cli_throw_on_error
    if cli_max_depth is not None:
        merged["max_depth"] = cli_max_depth

    try:
        return ResolverConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid resolver configuration: {exc}") from exc
