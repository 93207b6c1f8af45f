# shardflags/validators/configuration_validator.py
"""
Validators for flag and bandit configuration payloads using JSON Schema.

Schemas are loaded once at import time. Violations raise
``InvalidConfigurationError`` so that the loader can be used outside of a
Flask request as well.
"""


from pathlib import Path
import json

from jsonschema import validate as js_validate, ValidationError

from shardflags.errors.exceptions import InvalidConfigurationError


SCHEMA_DIR = Path(__file__).resolve().parent.parent / "schemas"

with (SCHEMA_DIR / "flags_configuration.schema.json").open(
    "r", encoding="utf-8"
) as f:
    FLAGS_CONFIGURATION_SCHEMA = json.load(f)

with (SCHEMA_DIR / "bandits_configuration.schema.json").open(
    "r", encoding="utf-8"
) as f:
    BANDITS_CONFIGURATION_SCHEMA = json.load(f)


def validate_flags_configuration(payload: dict) -> None:
    """
    Validate a flags configuration payload against its schema.

    Args:
        payload: Parsed JSON body with ``flags`` and optional
            ``banditReferences``.

    Raises:
        InvalidConfigurationError: If the payload is not an object or
            violates the schema.
    """
    _validate(payload, FLAGS_CONFIGURATION_SCHEMA, "FlagsConfiguration")


def validate_bandits_configuration(payload: dict) -> None:
    """
    Validate a bandits configuration payload against its schema.

    Raises:
        InvalidConfigurationError: If the payload is not an object or
            violates the schema.
    """
    _validate(payload, BANDITS_CONFIGURATION_SCHEMA, "BanditsConfiguration")


def _validate(payload: dict, schema: dict, title: str) -> None:
    if not isinstance(payload, dict):
        raise InvalidConfigurationError(f"{title} must be a JSON object.")

    try:
        js_validate(instance=payload, schema=schema)
    except ValidationError as e:
        msg = getattr(e, "message", None) or str(e)
        raise InvalidConfigurationError(f"Invalid {title}: {msg}")
