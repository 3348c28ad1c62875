"""PhaseGate JSON Schema definitions and validation utilities.

Schemas:
    - config.schema.json: Orchestrator configuration file
    - plan.schema.json: Workflow plan consumed by ``phasegate run``

Usage:
    from phasegate.schemas import validate_config

    with open("phasegate.json") as f:
        data = json.load(f)
    validate_config(data)  # Raises jsonschema.ValidationError if invalid
"""

import json
from importlib.resources import files
from typing import Any

import jsonschema


def _load_schema(name: str) -> dict[str, Any]:
    """Load a JSON schema from the schemas package.

    Args:
        name: Schema filename (e.g., 'config.schema.json')

    Returns:
        Parsed JSON schema as a dictionary
    """
    schema_text = files("phasegate.schemas").joinpath(name).read_text()
    result: dict[str, Any] = json.loads(schema_text)
    return result


def get_config_schema() -> dict[str, Any]:
    return _load_schema("config.schema.json")


def get_plan_schema() -> dict[str, Any]:
    return _load_schema("plan.schema.json")


def validate_config(data: dict[str, Any]) -> None:
    """Validate an orchestrator configuration mapping.

    Raises:
        jsonschema.ValidationError: If validation fails
    """
    jsonschema.validate(data, get_config_schema())


def validate_plan(data: dict[str, Any]) -> None:
    """Validate a workflow plan mapping.

    Raises:
        jsonschema.ValidationError: If validation fails
    """
    jsonschema.validate(data, get_plan_schema())


__all__ = [
    "get_config_schema",
    "get_plan_schema",
    "validate_config",
    "validate_plan",
]
