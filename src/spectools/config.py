"""Configuration with XDG paths and precedence resolution.

This module decides the :class:`~spectools.models.VisitorConfig` a visit runs
with:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.spectools/`` on macOS and Windows. See :func:`get_config_dir`.
* **User config** -- A single :class:`~spectools.models.GlobalConfig` JSON
  file in the config directory.
* **Project config** -- ``./spectools.json``, same shape as the user config.
* **Precedence resolution** -- :func:`resolve_visitor_config` merges CLI
  flags, environment variables, project config and user config;
  :func:`resolve_output_format` picks the default CLI output format.

Example ``spectools.json``::

    {"extraction": {"extract_description": true}, "output": {"format": "json"}}
"""

from __future__ import annotations

import json
import logging
import os
import platform
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from spectools.exceptions import ConfigError
from spectools.models import GlobalConfig, VisitorConfig

logger = logging.getLogger(__name__)

_APP_NAME = "spectools"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "spectools.json"

ENV_EXTRACT_DESCRIPTION = "SPECTOOLS_EXTRACT_DESCRIPTION"
ENV_EXTRACT_DEFAULT = "SPECTOOLS_EXTRACT_DEFAULT"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_config_dir() -> Path:
    """Return the configuration directory.

    On Linux/BSD: ``$XDG_CONFIG_HOME/spectools/`` (default ``~/.config/spectools/``).
    On macOS/Windows: ``~/.spectools/``.

    The directory is not created; a missing directory simply means there is
    no user config.
    """
    if not _is_xdg_platform():
        return Path.home() / f".{_APP_NAME}"
    env_value = os.environ.get("XDG_CONFIG_HOME", "")
    base = Path(env_value) if env_value else Path.home() / ".config"
    return base / _APP_NAME


# --- Config files ---


def _load_config_file(path: Path, label: str) -> Optional[GlobalConfig]:
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as exc:
        raise ConfigError(f"Invalid {label} config at {path}: {exc}") from exc


def load_global_config() -> GlobalConfig:
    """Load the user configuration from the config directory.

    Returns:
        The deserialised :class:`~spectools.models.GlobalConfig`, or a
        default instance if the file does not exist.

    Raises:
        ConfigError: If the file contains invalid JSON or fails validation.
    """
    config = _load_config_file(get_config_dir() / _CONFIG_FILENAME, "global")
    return config if config is not None else GlobalConfig()


def load_project_config() -> Optional[GlobalConfig]:
    """Load project-local configuration from ``./spectools.json``.

    Returns:
        The deserialised config, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file contains invalid JSON or fails validation.
    """
    return _load_config_file(Path.cwd() / _PROJECT_CONFIG_FILENAME, "project")


def _env_flag(name: str) -> Optional[bool]:
    """Read a boolean flag from the environment; ``None`` when unset or empty."""
    value = os.environ.get(name)
    if value is None or not value.strip():
        return None
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ConfigError(
        f"Environment variable {name} must be a boolean (1/0, true/false, yes/no, on/off), "
        f"got {value!r}"
    )


# --- Precedence resolution ---


def resolve_output_format() -> str:
    """Return the default output format from the config files.

    The project config wins over the user config when it sets
    ``output.format``; ``"auto"`` applies when neither does.

    Raises:
        ConfigError: If a config file is invalid.
    """
    project = load_project_config()
    if (
        project is not None
        and "output" in project.model_fields_set
        and "format" in project.output.model_fields_set
    ):
        return project.output.format
    return load_global_config().output.format


def resolve_visitor_config(
    cli_extract_description: Optional[bool] = None,
    cli_extract_default: Optional[bool] = None,
) -> VisitorConfig:
    """Resolve the extraction flags with the full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_extract_description``, ``cli_extract_default``)
        2. Environment variables (``SPECTOOLS_EXTRACT_DESCRIPTION``,
           ``SPECTOOLS_EXTRACT_DEFAULT``)
        3. Project config (``./spectools.json``)
        4. User config (``~/.config/spectools/config.json``)
        5. Defaults (both off)

    Only keys actually present in a config file override lower layers.

    Raises:
        ConfigError: If a config file or an environment variable is invalid.
    """
    # 5 + 4. User config (fills in defaults automatically)
    config = load_global_config().extraction

    # 3. Project config, only for the keys it sets
    project = load_project_config()
    if project is not None and "extraction" in project.model_fields_set:
        explicit = project.extraction.model_fields_set
        config = config.model_copy(
            update={key: getattr(project.extraction, key) for key in explicit}
        )

    # 2 + 1. Environment, then CLI flags
    overrides: dict[str, Any] = {}
    for key, env_name, cli_value in (
        ("extract_description", ENV_EXTRACT_DESCRIPTION, cli_extract_description),
        ("extract_default", ENV_EXTRACT_DEFAULT, cli_extract_default),
    ):
        env_value = _env_flag(env_name)
        if env_value is not None:
            overrides[key] = env_value
        if cli_value is not None:
            overrides[key] = cli_value

    if overrides:
        config = config.model_copy(update=overrides)

    logger.debug("Resolved visitor config: %s", config)
    return config
