"""Configuration resolution with XDG paths and precedence rules.

This module handles all configuration for apicatalog:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.apicatalog/`` on macOS and Windows. See :func:`get_config_dir`.
* **User config** -- ``config.json`` in the config directory.
* **Project config** -- ``./apicatalog.json`` in the working directory,
  typically committed next to the description it points at.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, project config and user config into one
  :class:`~apicatalog.models.CatalogConfig`.
* **Rulesets** -- :func:`load_ruleset` reads a maintainer-authored subsection
  ruleset from JSON or YAML, and :func:`build_classifier` turns the effective
  configuration into a :class:`~apicatalog.classifier.SubsectionClassifier`.
"""

from __future__ import annotations

import json
import os
import platform
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from apicatalog.classifier import SubsectionClassifier
from apicatalog.exceptions import ConfigError
from apicatalog.models import CatalogConfig, SubsectionRule

_APP_NAME = "apicatalog"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "apicatalog.json"

_ENV_SPEC = "APICATALOG_SPEC"
_ENV_RULESET = "APICATALOG_RULESET"
_ENV_UMBRELLA = "APICATALOG_UMBRELLA"
_ENV_STRICT = "APICATALOG_STRICT"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off", ""})


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True on platforms following the XDG Base Directory spec (Linux/BSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/apicatalog/`` (default ``~/.config/apicatalog/``).
    On macOS/Windows: ``~/.apicatalog/``.
    """
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_CONFIG_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".config"
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Config files ---


def _read_json_object(path: Path, label: str) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Invalid {label} at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid {label} at {path}: expected a JSON object")
    return data


def load_user_config() -> dict[str, Any]:
    """Load ``config.json`` from the config directory (empty dict if absent).

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = get_config_dir() / _CONFIG_FILENAME
    if not path.is_file():
        return {}
    return _read_json_object(path, "user config")


def load_project_config() -> dict[str, Any]:
    """Load ``./apicatalog.json`` (empty dict if absent).

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return {}
    return _read_json_object(path, "project config")


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigError(f"Invalid boolean for {name}: '{value}'")


# --- Precedence resolution ---


def resolve_config(
    cli_spec: Optional[str] = None,
    cli_ruleset: Optional[str] = None,
    cli_umbrella: Optional[str] = None,
    cli_strict: Optional[bool] = None,
) -> CatalogConfig:
    """Resolve the effective configuration.

    Precedence (high to low):
        1. CLI flags (``cli_*`` arguments)
        2. Environment variables (``APICATALOG_SPEC``, ``APICATALOG_RULESET``,
           ``APICATALOG_UMBRELLA``, ``APICATALOG_STRICT``)
        3. Project config (``./apicatalog.json``)
        4. User config (``~/.config/apicatalog/config.json``)
        5. Defaults

    Raises:
        ConfigError: If a config file is invalid or a value fails validation.
    """
    merged: dict[str, Any] = {}
    merged.update(load_user_config())
    merged.update(load_project_config())

    env_values = {
        "spec": os.environ.get(_ENV_SPEC),
        "ruleset": os.environ.get(_ENV_RULESET),
        "umbrella": os.environ.get(_ENV_UMBRELLA),
    }
    merged.update({key: value for key, value in env_values.items() if value})
    env_strict = os.environ.get(_ENV_STRICT)
    if env_strict is not None:
        merged["strict_ruleset"] = _parse_bool(_ENV_STRICT, env_strict)

    cli_values = {
        "spec": cli_spec,
        "ruleset": cli_ruleset,
        "umbrella": cli_umbrella,
        "strict_ruleset": cli_strict,
    }
    merged.update({key: value for key, value in cli_values.items() if value is not None})

    try:
        return CatalogConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


# --- Rulesets ---


def load_ruleset(path: str | Path) -> list[SubsectionRule]:
    """Load subsection rules from a JSON or YAML file.

    The file holds a list of rules, or an object with a ``rules`` list::

        [
          {"name": "Me", "parentSectionId": "MeAndMyStuff", "paths": ["/me"]},
          {"name": "My Addresses", "parentSectionId": "MeAndMyStuff",
           "paths": ["/me/addresses", "/me/addresses/{addressID}"]}
        ]

    Raises:
        ConfigError: If the file is missing, unparsable, or a rule is invalid.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise ConfigError(f"Ruleset file not found: {file_path}")
    try:
        # YAML is a superset of JSON, so one parser covers both.
        data = yaml.safe_load(file_path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Cannot read ruleset {file_path}: {exc}") from exc

    if isinstance(data, dict):
        data = data.get("rules")
    if not isinstance(data, list):
        raise ConfigError(f"Ruleset {file_path} must be a list of rules")

    try:
        return [SubsectionRule.model_validate(item) for item in data]
    except ValidationError as exc:
        raise ConfigError(f"Invalid rule in {file_path}: {exc}") from exc


def build_classifier(config: CatalogConfig) -> SubsectionClassifier:
    """Return the classifier for *config*: its ruleset file, or the built-in rules."""
    rules = load_ruleset(config.ruleset) if config.ruleset else None
    return SubsectionClassifier(rules, umbrella=config.umbrella)
