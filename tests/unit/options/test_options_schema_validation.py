from __future__ import annotations

import pytest

from pyrackup.core.exceptions import OptionsError
from pyrackup.core.options import default_options
from pyrackup.core.schemas import load_schema, validate_payload, validate_payload_safe


def test_load_schema_appends_suffix() -> None:
    assert load_schema("options") == load_schema("options.schema.yaml")
    assert load_schema("options")["type"] == "object"


def test_missing_schema_raises() -> None:
    with pytest.raises(FileNotFoundError):
        load_schema("does-not-exist")


def test_defaults_are_valid() -> None:
    assert validate_payload_safe(default_options({}), "options") == []


def test_errors_carry_paths() -> None:
    payload = default_options({})
    payload["quiet"] = "yes"
    payload["include"] = ["ok", 3]

    errors = validate_payload_safe(payload, "options")

    assert any(e.startswith("quiet:") for e in errors)
    assert any(e.startswith("include.1:") for e in errors)


def test_missing_required_key() -> None:
    payload = default_options({})
    del payload["host"]

    with pytest.raises(OptionsError) as excinfo:
        validate_payload(payload, "options")

    assert "'host' is a required property" in excinfo.value.context["errors"]
    assert excinfo.value.to_json_error()["code"] == "OptionsError"


def test_adapter_specific_keys_are_allowed() -> None:
    payload = default_options({})
    payload["workers"] = "4"
    validate_payload(payload, "options")
