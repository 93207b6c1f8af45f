"""Bandit action endpoint for ShardFlags.

Assigns the flag variation for a subject and, when that variation is backed
by a contextual bandit, selects one of the supplied actions.
"""

from __future__ import annotations

from typing import Any

from flask import Blueprint, current_app, jsonify, request

from shardflags.errors.handlers import BadRequest
from shardflags.validators.evaluate_validator import (
    validate_bandit_action_payload,
)


bandits_bp = Blueprint("bandits_bp", __name__, url_prefix="/bandits")


@bandits_bp.post("/action")
def post_bandit_action() -> tuple[Any, int]:
    """Select a bandit action for a subject.

    Request JSON body (BanditActionRequest):
        {
            "flag_key": "string",
            "subject_key": "string",
            "subject_attributes": { "age": 30, "country": "uk" },
            "actions": ["nike", "adidas"]  or  {"nike": {"price": 10}},
            "default": "string"
        }

    Returns:
        A tuple ``(response, status_code)`` where the JSON body is
        ``{"variation": <str>, "action": <str | null>}``.
    """
    payload = request.get_json(silent=True)
    validate_bandit_action_payload(payload)

    client = current_app.extensions["shardflags.client"]
    try:
        result = client.get_bandit_action(
            flag_key=payload["flag_key"],
            subject_key=payload["subject_key"],
            subject_attributes=payload.get("subject_attributes") or {},
            actions=payload["actions"],
            default=payload["default"],
        )
    except ValueError as exc:
        raise BadRequest(str(exc))

    return jsonify({"variation": result.variation, "action": result.action}), 200
