"""Runtime evaluation endpoint for ShardFlags feature flags.

This blueprint exposes the public `/evaluate/` API used by client
applications to get the variation assigned to a subject.
"""

from __future__ import annotations

from typing import Any

from flask import Blueprint, current_app, jsonify, request

from shardflags.errors.handlers import BadRequest
from shardflags.validators.evaluate_validator import validate_eval_payload


evaluate_bp = Blueprint("evaluate_bp", __name__, url_prefix="/evaluate")


@evaluate_bp.post("/")
def post_evaluate() -> tuple[Any, int]:
    """Evaluate a flag for a subject (public API).

    Request JSON body (EvaluateRequest):
        {
            "flag_key": "string",
            "subject_key": "string",
            "subject_attributes": { ... }
        }

    Behaviour:
        - Looks up the flag in the active configuration snapshot.
        - Unknown, disabled or unmatched flags are not errors: the
          response has ``"assigned": false`` and the caller keeps its
          default value.
        - A snapshot whose split points at a missing variation yields 500.

    Returns:
        A tuple ``(response, status_code)``.
    """
    payload = request.get_json(silent=True)
    validate_eval_payload(payload)

    client = current_app.extensions["shardflags.client"]
    try:
        result = client.get_assignment_details(
            flag_key=payload["flag_key"],
            subject_key=payload["subject_key"],
            subject_attributes=payload.get("subject_attributes") or {},
        )
    except ValueError as exc:
        raise BadRequest(str(exc))

    body = {
        "flag_key": payload["flag_key"],
        "subject_key": payload["subject_key"],
        "assigned": result is not None,
        "variation_key": None,
        "variation_value": None,
        "allocation_key": None,
        "extra_logging": {},
    }
    if result is not None:
        body.update(
            {
                "variation_key": result.variation.key,
                "variation_value": result.variation.value.to_python(),
                "allocation_key": result.allocation_key,
                "extra_logging": dict(result.extra_logging),
            }
        )

    return jsonify(body), 200
