"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for apicol:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.apicol/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- A single :class:`~apicol.models.GlobalConfig`
  JSON file storing default import settings and output preferences.
* **Project config** -- An optional ``./apicol.json`` holding the same
  ``import_settings`` keys, pinned per repository.
* **Precedence resolution** -- :func:`resolve_settings` merges CLI flags,
  environment variables, project-local config, and global config into the
  :class:`~apicol.models.ImportSettings` handed to the importer.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`) to prevent data loss on crash or power failure.
"""

from __future__ import annotations

import json
import logging
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from apicol.exceptions import ConfigError
from apicol.models import GlobalConfig, ImportSettings

logger = logging.getLogger(__name__)

_APP_NAME = "apicol"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "apicol.json"

ENV_OPERATION_ORDER = "APICOL_OPERATION_ORDER"
ENV_BASE_URL_VARIABLE = "APICOL_BASE_URL_VARIABLE"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    return Path.home().joinpath(*default_segments)


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/apicol/`` (default ``~/.config/apicol/``).
    On macOS/Windows: ``~/.apicol/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/apicol/`` (default ``~/.local/share/apicol/``).
    On macOS/Windows: ``~/.apicol/logs/``.
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
    temp file is removed and the original file is left untouched.
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
    """Load the global configuration from the config directory.

    Returns:
        The deserialised :class:`~apicol.models.GlobalConfig`. If the
        file does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
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
    """Load project-local configuration from ``./apicol.json``.

    Only the ``import_settings`` mapping is read from it; unknown keys are
    ignored.

    Returns:
        The parsed JSON as a dict, or ``None`` if the file does not exist.

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


# --- Precedence resolution ---


def resolve_settings(
    cli_order: Optional[str] = None,
    cli_base_url_var: Optional[str] = None,
) -> ImportSettings:
    """Resolve import settings with the full precedence chain.

    Precedence (high to low):
        1. CLI flags (``--order``, ``--base-url-var``)
        2. Environment variables (``APICOL_OPERATION_ORDER``,
           ``APICOL_BASE_URL_VARIABLE``)
        3. Project config (``./apicol.json``, key ``import_settings``)
        4. User config (``~/.config/apicol/config.json``)
        5. Defaults

    Raises:
        ConfigError: If a config file is invalid or the merged values fail
            validation (e.g. an unknown operation order).
    """
    # 5 + 4. Defaults filled in by the model
    merged: dict[str, Any] = load_global_config().import_settings.model_dump(mode="json")

    # 3. Project-local overrides
    project = load_project_config()
    if project is not None:
        project_settings = project.get("import_settings") or {}
        if not isinstance(project_settings, dict):
            raise ConfigError("Project config 'import_settings' must be an object")
        merged.update(project_settings)

    # 2. Environment variables
    env_order = os.environ.get(ENV_OPERATION_ORDER)
    if env_order:
        merged["operation_order"] = env_order
    env_var = os.environ.get(ENV_BASE_URL_VARIABLE)
    if env_var:
        merged["base_url_variable"] = env_var

    # 1. CLI flags
    if cli_order is not None:
        merged["operation_order"] = cli_order
    if cli_base_url_var is not None:
        merged["base_url_variable"] = cli_base_url_var

    try:
        settings = ImportSettings.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid import settings: {exc}") from exc
    logger.debug("Resolved import settings: %s", settings.model_dump(mode="json"))
    return settings
