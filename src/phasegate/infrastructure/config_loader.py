"""
Configuration loading: JSON files, environment variables and presets.

Every loader returns a validated OrchestratorConfig or raises
ConfigurationError; nothing here is consulted once the engine is running.
"""

import json
import logging
import os
from collections.abc import Mapping
from dataclasses import fields
from pathlib import Path
from typing import Any

import jsonschema

from phasegate.domain.config import PRESETS, OrchestratorConfig, config_warnings
from phasegate.domain.exceptions import ConfigurationError
from phasegate.schemas import validate_config, validate_plan

logger = logging.getLogger(__name__)

ENV_PREFIX = "PHASEGATE_"

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off"})


def load_preset(name: str) -> OrchestratorConfig:
    """
    Build a named preset.

    Raises:
        ConfigurationError: Unknown preset name
    """
    factory = PRESETS.get(name)
    if factory is None:
        available = ", ".join(sorted(PRESETS))
        raise ConfigurationError(f"Unknown preset '{name}' (available: {available})")
    return factory()


def _read_json(path: Path) -> Any:
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read {path}: {e}") from e


def config_from_mapping(
    data: Mapping[str, Any], base: OrchestratorConfig | None = None
) -> OrchestratorConfig:
    """
    Apply ``data`` on top of ``base`` (or on top of ``data["preset"]``).

    Raises:
        ConfigurationError: Schema violation or invalid values
    """
    try:
        validate_config(dict(data))
    except jsonschema.ValidationError as e:
        location = "/".join(str(p) for p in e.absolute_path) or "<root>"
        raise ConfigurationError(
            f"Invalid configuration at {location}: {e.message}"
        ) from e

    values = dict(data)
    preset = values.pop("preset", None)
    if preset is not None:
        base = load_preset(preset)
    config = (base or OrchestratorConfig()).with_overrides(**values)

    for warning in config_warnings(config):
        logger.warning("Configuration: %s", warning)
    return config


def load_config_file(
    path: str | Path, base: OrchestratorConfig | None = None
) -> OrchestratorConfig:
    """Load and schema-validate a JSON configuration file."""
    path = Path(path)
    data = _read_json(path)
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Expected an object in {path}, got {type(data).__name__}"
        )
    logger.debug("Loaded configuration from %s", path)
    return config_from_mapping(data, base)


def _coerce(name: str, raw: str, kind: type) -> Any:
    if kind is bool:
        lowered = raw.strip().lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        raise ConfigurationError(f"{ENV_PREFIX}{name.upper()} must be a boolean")
    try:
        return kind(raw)
    except ValueError as e:
        raise ConfigurationError(
            f"{ENV_PREFIX}{name.upper()} must be {kind.__name__}, got {raw!r}"
        ) from e


def load_config_from_env(
    environ: Mapping[str, str] | None = None,
    base: OrchestratorConfig | None = None,
) -> OrchestratorConfig:
    """
    Override ``base`` with ``PHASEGATE_<FIELD>`` variables.

    ``PHASEGATE_PRESET`` selects the starting preset when no base is given.
    """
    environ = os.environ if environ is None else environ

    preset = environ.get(f"{ENV_PREFIX}PRESET")
    if base is None and preset:
        base = load_preset(preset)

    defaults = OrchestratorConfig()
    overrides: dict[str, Any] = {}
    for field in fields(OrchestratorConfig):
        raw = environ.get(f"{ENV_PREFIX}{field.name.upper()}")
        if raw is None:
            continue
        kind = type(getattr(defaults, field.name))
        overrides[field.name] = _coerce(field.name, raw, kind)

    config = (base or defaults).with_overrides(**overrides)
    for warning in config_warnings(config):
        logger.warning("Configuration: %s", warning)
    return config


def load_plan(path: str | Path) -> dict[str, Any]:
    """
    Load a workflow plan (name, description, tasks).

    Raises:
        ConfigurationError: Missing file, bad JSON or schema violation
    """
    path = Path(path)
    data = _read_json(path)
    try:
        validate_plan(data)
    except jsonschema.ValidationError as e:
        raise ConfigurationError(f"Invalid plan {path}: {e.message}") from e
    result: dict[str, Any] = data
    return result
