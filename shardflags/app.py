# shardflags/app.py

"""ShardFlags service application entrypoint.

This module creates and configures the Flask application, wires the
configuration store and assignment client, and applies development-time
CORS settings for local frontends. It then starts the HTTP server using
environment-based configuration.
"""

from typing import Optional

import structlog
from flask import Flask
from flask_cors import CORS

from shardflags.blueprints.admin.configuration_admin import (
    configuration_admin_bp,
)
from shardflags.blueprints.bandits.bandit_action import bandits_bp
from shardflags.blueprints.flags.evaluate import evaluate_bp
from shardflags.blueprints.system.health import health_bp
from shardflags.config import Settings
from shardflags.errors.handlers import register_error_handlers
from shardflags.logging_config import configure_logging
from shardflags.repositories.memory_repo import ConfigurationStore
from shardflags.services.assignment_service import (
    AssignmentClient,
    AssignmentLogger,
    StructlogAssignmentLogger,
)
from shardflags.services.bandit_service import BanditEvaluator
from shardflags.services.configuration_loader import load_configuration_files


logger = structlog.get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    assignment_logger: Optional[AssignmentLogger] = None,
) -> Flask:
    """Create and configure the ShardFlags Flask application instance.

    This factory reads settings, configures logging, loads the initial
    configuration snapshot (if files are configured), registers
    blueprints, and applies global error handlers.

    Args:
        settings: Explicit settings; read from the environment if omitted.
        assignment_logger: Sink for assignment events; defaults to the
            structured application log.

    Returns:
        Flask: A configured Flask application instance.
    """
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level, settings.log_json)

    app = Flask(__name__)
    app.config["ADMIN_API_KEY"] = settings.admin_api_key
    app.config["SHARDFLAGS_SETTINGS"] = settings

    store = ConfigurationStore()
    if settings.flags_config_path:
        store.set(
            load_configuration_files(
                settings.flags_config_path, settings.bandits_config_path
            )
        )

    client = AssignmentClient(
        store,
        assignment_logger or StructlogAssignmentLogger(),
        BanditEvaluator(settings.bandit_total_shards),
    )
    app.extensions["shardflags.store"] = store
    app.extensions["shardflags.client"] = client

    # Register JSON error handlers (400/404/500, etc.).
    register_error_handlers(app)

    # System & health
    app.register_blueprint(health_bp)               # /health/

    # Admin API (configuration snapshot upload)
    app.register_blueprint(configuration_admin_bp)  # /admin/configuration/

    # Public evaluation endpoints (SDK / runtime)
    app.register_blueprint(evaluate_bp)             # /evaluate/
    app.register_blueprint(bandits_bp)              # /bandits/action

    return app


def main() -> None:
    settings = Settings.from_env()
    app = create_app(settings)

    # Allow local development frontends to call this API directly.
    # In production, CORS should be enforced at the reverse proxy layer.
    CORS(
        app,
        resources={r"/*": {"origins": settings.cors_origins}},
        supports_credentials=False,
        allow_headers=["Content-Type", "X-Api-Key", "X-Config-Version"],
        methods=["GET", "POST", "PUT", "OPTIONS"],
    )

    logger.info("starting_server", port=settings.port, debug=settings.debug)
    app.run(
        host="0.0.0.0",
        port=settings.port,
        debug=settings.debug,
    )


if __name__ == "__main__":
    main()
