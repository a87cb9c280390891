"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for plugbuild:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.plugbuild/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- A single :class:`~plugbuild.models.GlobalConfig`
  JSON file whose ``build`` section holds user-wide build defaults.
* **Project config** -- ``./plugbuild.json`` in the working directory, a
  partial :class:`~plugbuild.models.BuildConfig` pinned per repository.
* **Precedence resolution** -- :func:`resolve_build_config` layers CLI
  flags, environment variables, project config, and global config into
  the effective :class:`~plugbuild.models.BuildConfig`.

The environment is consulted here and nowhere else: the base module
replacement ends up as an explicit field on the resolved config.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from plugbuild.exceptions import ConfigError
from plugbuild.models import BuildConfig, GlobalConfig

_APP_NAME = "plugbuild"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "plugbuild.json"

ENV_BASE_REPLACEMENT = "PLUGBUILD_BASE_REPLACEMENT"
ENV_LEGACY_BASE_REPLACEMENT = "ANSWER_MODULE"
ENV_TOOLCHAIN = "PLUGBUILD_TOOLCHAIN"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/plugbuild/`` (default ``~/.config/plugbuild/``).
    On macOS/Windows: ``~/.plugbuild/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/plugbuild/`` (default ``~/.local/share/plugbuild/``).
    On macOS/Windows: ``~/.plugbuild/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is removed.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Global config ---


def global_config_path() -> Path:
    """Path to the global config file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration.

    Returns:
        The deserialised :class:`~plugbuild.models.GlobalConfig`, or a
        default instance if the file does not exist.

    Raises:
        ConfigError: If the file contains invalid JSON or fails validation.
    """
    path = global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk."""
    data = config.model_dump(mode="json")
    _atomic_write(global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load the partial build config from ``./plugbuild.json``.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file is not a JSON object.
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


# --- Precedence resolution ---


def _environment_overrides() -> dict[str, Any]:
    """Build config values taken from the environment."""
    overrides: dict[str, Any] = {}
    replacement = os.environ.get(ENV_BASE_REPLACEMENT) or os.environ.get(
        ENV_LEGACY_BASE_REPLACEMENT
    )
    if replacement:
        overrides["base_module_replacement"] = replacement
    toolchain = os.environ.get(ENV_TOOLCHAIN)
    if toolchain:
        overrides["toolchain"] = toolchain
    return overrides


def resolve_build_config(overrides: Optional[dict[str, Any]] = None) -> BuildConfig:
    """Resolve the effective build configuration.

    Precedence (high to low):
        1. *overrides* (CLI flags; ``None`` values are ignored)
        2. Environment variables (``PLUGBUILD_BASE_REPLACEMENT`` or the
           legacy ``ANSWER_MODULE``, ``PLUGBUILD_TOOLCHAIN``)
        3. Project config (``./plugbuild.json``)
        4. User config (``build`` section of ``config.json``)
        5. Defaults

    Raises:
        ConfigError: If any layer is unreadable or the merged values fail
            validation.
    """
    merged: dict[str, Any] = dict(load_global_config().build)
    merged.update(load_project_config() or {})
    merged.update(_environment_overrides())
    merged.update({k: v for k, v in (overrides or {}).items() if v is not None})
    try:
        return BuildConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid build configuration: {exc}") from exc
