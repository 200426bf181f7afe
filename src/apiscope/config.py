"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for apiscope:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.apiscope/`` on macOS and Windows. See :func:`get_config_dir`,
  :func:`get_cache_dir`, :func:`get_data_dir`.
* **User config** -- A single :class:`~apiscope.models.AppConfig` JSON file
  storing the default spec source, output format, cache settings and
  analysis defaults.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags, the
  ``APISCOPE_SPEC`` environment variable, a project-local ``apiscope.json``
  and the user config into the effective configuration.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from apiscope.exceptions import ConfigError
from apiscope.models import AppConfig

_APP_NAME = "apiscope"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "apiscope.json"

SPEC_ENV_VAR = "APISCOPE_SPEC"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    return Path.home() / f".{_APP_NAME}"


def _xdg_dir(env_var: str, default_segments: tuple[str, ...], fallback: str) -> Path:
    """Resolve and create ``$<env_var>/apiscope`` or its non-XDG fallback."""
    if _is_xdg_platform():
        env_value = os.environ.get(env_var, "")
        base = Path(env_value) if env_value else Path.home().joinpath(*default_segments)
        path = base / _APP_NAME
    else:
        path = _fallback_base_dir() / fallback if fallback else _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/apiscope/`` (default ``~/.config/apiscope/``).
    On macOS/Windows: ``~/.apiscope/``.
    """
    return _xdg_dir("XDG_CONFIG_HOME", (".config",), "")


def get_cache_dir() -> Path:
    """Return the cache directory for fetched specs, creating it if necessary.

    On Linux/BSD: ``$XDG_CACHE_HOME/apiscope/`` (default ``~/.cache/apiscope/``).
    On macOS/Windows: ``~/.apiscope/cache/``.
    """
    return _xdg_dir("XDG_CACHE_HOME", (".cache",), "cache")


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/apiscope/`` (default ``~/.local/share/apiscope/``).
    On macOS/Windows: ``~/.apiscope/logs/``.
    """
    return _xdg_dir("XDG_DATA_HOME", (".local", "share"), "logs")


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write *data* to *path* through a temp file in the same directory and a rename."""
    path.parent.mkdir(parents=True, exist_ok=True)

    handle = None
    tmp_path: Optional[str] = None
    try:
        handle = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = handle.name
        handle.write(data)
        handle.flush()
        os.fsync(handle.fileno())
        handle.close()
        handle = None
        os.replace(tmp_path, path)
    except BaseException:
        if handle is not None:
            handle.close()
        if tmp_path is not None and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


# --- User config ---


def config_path() -> Path:
    """Path to the user config file."""
    return get_config_dir() / _CONFIG_FILENAME


def _read_json(path: Path, label: str) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        raise ConfigError(f"Invalid {label} at {path}: {exc}") from exc


def load_app_config() -> AppConfig:
    """Load the user configuration.

    Returns:
        The stored :class:`~apiscope.models.AppConfig`, or a default instance
        when no file exists yet.

    Raises:
        ConfigError: If the file contains invalid JSON or fails validation.
    """
    path = config_path()
    if not path.is_file():
        return AppConfig()
    data = _read_json(path, "config")
    try:
        return AppConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc


def save_app_config(config: AppConfig) -> Path:
    """Persist *config* atomically and return the file path."""
    path = config_path()
    _atomic_write(path, json.dumps(config.model_dump(mode="json"), indent=2) + "\n")
    return path


def set_config_value(config: AppConfig, key: str, value: str) -> AppConfig:
    """Return a copy of *config* with the dotted *key* set to *value*.

    Values are validated by the model, so ``"false"`` becomes ``False`` for a
    boolean field and ``"10"`` becomes ``10`` for an integer field.

    Raises:
        ConfigError: If *key* is unknown or *value* does not validate.
    """
    data = config.model_dump(mode="json")
    parts = key.split(".")
    target = data
    for part in parts[:-1]:
        if not isinstance(target.get(part), dict):
            raise ConfigError(f"Unknown config key: {key}")
        target = target[part]
    if parts[-1] not in target:
        raise ConfigError(f"Unknown config key: {key}")
    target[parts[-1]] = None if value == "" else value
    try:
        return AppConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid value for {key}: {value!r}") from exc


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load ``./apiscope.json`` if present.

    A repository can use it to pin ``default_spec`` and any other user
    config section; keys present here override the user config.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    data = _read_json(path, "project config")
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


# --- Precedence resolution ---


def resolve_config(
    cli_spec: Optional[str] = None,
    cli_format: Optional[str] = None,
) -> AppConfig:
    """Resolve the effective configuration.

    Precedence (high to low):
        1. CLI flags (``cli_spec``, ``cli_format``)
        2. Environment variable ``APISCOPE_SPEC``
        3. Project config (``./apiscope.json``)
        4. User config (``~/.config/apiscope/config.json``)
        5. Defaults

    Raises:
        ConfigError: If either config file is invalid.
    """
    config = load_app_config()

    project = load_project_config()
    if project:
        try:
            config = AppConfig.model_validate(
                _deep_merge(config.model_dump(mode="json"), project)
            )
        except ValidationError as exc:
            raise ConfigError(f"Invalid project config: {exc}") from exc

    env_spec = os.environ.get(SPEC_ENV_VAR)
    if env_spec:
        config.default_spec = env_spec
    if cli_spec is not None:
        config.default_spec = cli_spec
    if cli_format is not None:
        config.output.format = cli_format
    return config
