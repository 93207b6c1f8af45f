# shardflags/services/auth_service.py

"""
Admin API key authentication.

Admin routes (configuration uploads) are protected by a shared key sent in
the ``X-Api-Key`` header. When no ``ADMIN_API_KEY`` is configured the admin
routes are open, which is only meant for local development.
"""

from __future__ import annotations

import hashlib
import hmac
from functools import wraps
from typing import Callable, TypeVar, cast

from flask import current_app, jsonify, request


F = TypeVar("F", bound=Callable[..., object])


def hash_api_key(api_key: str) -> str:
    """Hash the API key using SHA-256.

    Args:
        api_key: The plaintext API key.

    Returns:
        str: Hex digest of the SHA-256 hash of the API key.
    """
    return hashlib.sha256(api_key.encode("utf-8")).hexdigest()


def is_valid_admin_key(provided: str, expected: str) -> bool:
    """Compare two keys in constant time via their hashes."""
    if not provided or not expected:
        return False
    return hmac.compare_digest(hash_api_key(provided), hash_api_key(expected))


def require_admin_key(func: F) -> F:
    """Flask view decorator that enforces the admin API key.

    Behaviour:
        - If ``ADMIN_API_KEY`` is not configured -> the view runs.
        - Reads the ``X-Api-Key`` header from the request.
        - If invalid or missing -> returns ``401`` with a JSON error.

    Args:
        func: The view function to wrap.

    Returns:
        F: The wrapped view function.
    """

    @wraps(func)
    def wrapper(*args, **kwargs):
        expected = current_app.config.get("ADMIN_API_KEY")
        if expected:
            api_key = request.headers.get("X-Api-Key", "").strip()
            if not is_valid_admin_key(api_key, expected):
                response = jsonify(
                    {
                        "error": "Invalid or missing API key",
                        "code": "auth.api_key_invalid",
                    }
                )
                return response, 401

        return func(*args, **kwargs)

    return cast(F, wrapper)
