# shardflags/validators/evaluate_validator.py
"""
Validators for HTTP request bodies using JSON Schema.

This module loads the request schemas once at import time and exposes
helpers to validate incoming payloads, raising BadRequest on error.
"""


from pathlib import Path
import json

from jsonschema import validate as js_validate, ValidationError

from shardflags.errors.handlers import BadRequest


# Resolve schema paths
SCHEMA_DIR = Path(__file__).resolve().parent.parent / "schemas"


def _load_schema(name: str) -> dict:
    with (SCHEMA_DIR / name).open("r", encoding="utf-8") as f:
        return json.load(f)


EVALUATE_REQUEST_SCHEMA = _load_schema("EvaluateRequest.schema.json")
BANDIT_ACTION_REQUEST_SCHEMA = _load_schema("BanditActionRequest.schema.json")
CONFIGURATION_UPLOAD_SCHEMA = _load_schema("ConfigurationUpload.schema.json")


def validate_eval_payload(payload: dict) -> None:
    """
    Validate the evaluation request body against the EvaluateRequest schema.

    Args:
        payload: Parsed JSON body.

    Raises:
        BadRequest: If payload is not JSON or doesn't match the schema.
    """
    _validate(payload, EVALUATE_REQUEST_SCHEMA, "EvaluateRequest")


def validate_bandit_action_payload(payload: dict) -> None:
    """
    Validate a bandit action request body.

    Raises:
        BadRequest: If payload is not JSON or doesn't match the schema.
    """
    _validate(payload, BANDIT_ACTION_REQUEST_SCHEMA, "BanditActionRequest")


def validate_configuration_upload(payload: dict) -> None:
    """
    Validate the envelope of an admin configuration upload.

    Only the envelope is checked here; the flags and bandits payloads are
    validated in depth when the snapshot is built.

    Raises:
        BadRequest: If payload is not JSON or doesn't match the schema.
    """
    _validate(payload, CONFIGURATION_UPLOAD_SCHEMA, "ConfigurationUpload")


def _validate(payload: dict, schema: dict, title: str) -> None:
    if not isinstance(payload, dict):
        raise BadRequest("Payload must be a JSON object.")

    try:
        js_validate(instance=payload, schema=schema)
    except ValidationError as e:
        msg = getattr(e, "message", None) or str(e)
        raise BadRequest(f"Invalid {title}: {msg}")
