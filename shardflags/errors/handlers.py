# shardflags/errors/handlers.py
"""Centralized JSON error handling for the ShardFlags service.

Defines HTTP-facing exceptions and registers Flask error handlers
so that errors are returned as consistent JSON payloads instead of
HTML pages.
"""


from __future__ import annotations

from typing import Any

import structlog
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from shardflags.errors.exceptions import (
    ConfigurationIntegrityError,
    InvalidConfigurationError,
)


logger = structlog.get_logger(__name__)


class BadRequest(Exception):
    """Exception raised for bad requests (HTTP 400).

    Attributes:
        detail: Human-readable description of the error.
    """

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


def register_error_handlers(app: Flask) -> None:
    """Register JSON error handlers for common HTTP and domain errors.

    Attaches Flask error handlers so the API always returns JSON
    instead of HTML error pages.

    Args:
        app: The Flask application instance to configure.
    """

    @app.errorhandler(BadRequest)
    def _on_bad_request(err: BadRequest) -> tuple[Any, int]:
        """Return HTTP 400 for validation/contract issues."""
        return jsonify({"error": "BadRequest", "detail": err.detail}), 400

    @app.errorhandler(InvalidConfigurationError)
    def _on_invalid_configuration(
        err: InvalidConfigurationError,
    ) -> tuple[Any, int]:
        """Return HTTP 400 when an uploaded configuration is malformed."""
        return (
            jsonify({"error": "InvalidConfiguration", "detail": err.detail}),
            400,
        )

    @app.errorhandler(ConfigurationIntegrityError)
    def _on_integrity_error(
        err: ConfigurationIntegrityError,
    ) -> tuple[Any, int]:
        """Return HTTP 500 when the active snapshot is self-inconsistent."""
        logger.error("configuration_integrity_error", detail=str(err))
        return (
            jsonify(
                {"error": "ConfigurationIntegrityError", "detail": str(err)}
            ),
            500,
        )

    @app.errorhandler(HTTPException)
    def _on_http_exception(err: HTTPException) -> tuple[Any, int]:
        """Fallback for other HTTP errors (for example 500, 405)."""
        code = err.code or 500
        name = err.name or "HTTPException"
        return jsonify({"error": name, "detail": err.description}), code

    @app.errorhandler(Exception)
    def _on_unexpected(err: Exception) -> tuple[Any, int]:
        """Last-resort handler to avoid HTML stack traces."""
        logger.exception("unexpected_error", error=str(err))
        return (
            jsonify(
                {
                    "error": "InternalServerError",
                    "detail": "An unexpected error occurred.",
                }
            ),
            500,
        )
