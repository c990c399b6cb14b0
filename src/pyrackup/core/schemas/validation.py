"""Schema validation for resolved options.

Schemas are bundled as YAML files (JSON Schema expressed in YAML) under
``pyrackup.data/schemas`` and validated with ``jsonschema``.
"""
from __future__ import annotations

from typing import Any, Dict, List

from jsonschema import Draft202012Validator

from pyrackup.core.exceptions import OptionsError
from pyrackup.data import get_data_path, read_yaml


def load_schema(schema_name: str) -> Dict[str, Any]:
    """Load a bundled schema by name.

    Automatically appends ``.schema.yaml`` if no extension is present.

    Raises:
        FileNotFoundError: If the schema file doesn't exist.
        ValueError: If the schema is not a YAML mapping.
    """
    lowered = schema_name.lower()
    if not (lowered.endswith(".yaml") or lowered.endswith(".yml")):
        schema_name = f"{schema_name}.schema.yaml"

    if not get_data_path("schemas", schema_name).exists():
        raise FileNotFoundError(f"Schema not found: {schema_name}")

    schema = read_yaml("schemas", schema_name)
    if not isinstance(schema, dict):
        raise ValueError(f"Schema must be a YAML mapping, got {type(schema).__name__}")
    return schema


def validate_payload_safe(payload: Dict[str, Any], schema_name: str) -> List[str]:
    """Validate a payload and return list of error messages (empty if valid)."""
    validator = Draft202012Validator(load_schema(schema_name))

    errors: List[str] = []
    for error in sorted(validator.iter_errors(payload), key=lambda e: str(e.path)):
        if error.path:
            path_str = ".".join(str(p) for p in error.path)
            errors.append(f"{path_str}: {error.message}")
        else:
            errors.append(error.message)
    return errors


def validate_payload(payload: Dict[str, Any], schema_name: str) -> None:
    """Validate a payload against a bundled schema.

    Raises:
        OptionsError: If validation fails; ``context["errors"]`` lists every problem.
    """
    errors = validate_payload_safe(payload, schema_name)
    if errors:
        raise OptionsError(
            f"Validation failed against schema '{schema_name}': {errors[0]}",
            context={"schema": schema_name, "errors": errors},
        )


__all__ = ["load_schema", "validate_payload", "validate_payload_safe"]
