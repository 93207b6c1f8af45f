# shardflags/blueprints/admin/configuration_admin.py
"""Admin-facing configuration management endpoints for ShardFlags.

Uploading a configuration builds a complete new snapshot and activates it
in one step; evaluations already in flight keep the snapshot they started
with.
"""


from __future__ import annotations

from typing import Any

from flask import Blueprint, current_app, jsonify, request

from shardflags.models.configuration import Configuration
from shardflags.services.auth_service import require_admin_key
from shardflags.services.configuration_loader import build_configuration
from shardflags.validators.evaluate_validator import (
    validate_configuration_upload,
)


configuration_admin_bp = Blueprint(
    "configuration_admin", __name__, url_prefix="/admin/configuration"
)


def _serialize_configuration(configuration: Configuration) -> dict:
    """Serialize a snapshot into a JSON-safe summary.

    Returns:
        dict: Keys and versions of the snapshot.
    """
    return {
        "flag_config_version": configuration.flag_config_version,
        "flags": sorted(configuration.flag_keys),
        "bandits": sorted(configuration.bandit_keys),
        "bandit_model_versions": sorted(configuration.bandit_model_versions),
    }


@configuration_admin_bp.put("/")
@require_admin_key
def put_configuration() -> tuple[Any, int]:
    """Replace the active configuration snapshot.

    Request JSON body:
        {
            "flags": { "flags": {...}, "banditReferences": {...} },
            "bandits": { "bandits": {...} }   (optional)
        }

    - Requires ``X-Api-Key`` when ``ADMIN_API_KEY`` is configured.
    - An optional ``X-Config-Version`` header is kept as the snapshot's
      flag configuration version.

    Returns:
        tuple: (JSON summary of the new snapshot, HTTP status code).
    """
    payload = request.get_json(silent=True)
    validate_configuration_upload(payload)

    configuration = build_configuration(
        payload["flags"],
        payload.get("bandits"),
        flag_config_version=request.headers.get("X-Config-Version"),
    )
    current_app.extensions["shardflags.store"].set(configuration)

    return jsonify(_serialize_configuration(configuration)), 200


@configuration_admin_bp.get("/")
@require_admin_key
def get_configuration() -> tuple[Any, int]:
    """Summarize the active configuration snapshot.

    Returns:
        tuple: (JSON summary, HTTP status code).
    """
    configuration = current_app.extensions["shardflags.store"].get()
    return jsonify(_serialize_configuration(configuration)), 200
