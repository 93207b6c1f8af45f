# shardflags/blueprints/system/health.py
from flask import Blueprint, current_app, jsonify

health_bp = Blueprint("health_bp", __name__, url_prefix="/health")


@health_bp.get("/")
def health() -> jsonify:
    """
    Health probe.

    Returns:
        {"status": "ok", "flags_loaded": <number of flags in the snapshot>}
    """
    configuration = current_app.extensions["shardflags.store"].get()
    return jsonify({"status": "ok", "flags_loaded": len(configuration.flags)})
