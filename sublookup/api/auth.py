"""Authentication helpers for API endpoints.

Two mechanisms exist: a static bearer token for the public query API, read
from the shared-secret file, and a signed session cookie carrying the
approver role resolved from a PIN at login.
"""

from __future__ import annotations

import logging
import secrets
from functools import wraps

from flask import Request, g, jsonify, request, session

from sublookup.api.services import get_repository
from sublookup.core.errors import ConfigurationError

logger = logging.getLogger(__name__)

SESSION_ROLE_KEY = "role"


def _bearer_token(req: Request) -> str | None:
    auth_header = req.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return None
    return auth_header[7:]


def require_api_key(func):
    """Decorator enforcing ``Authorization: Bearer <shared secret>``."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            expected = get_repository().api_secret()
        except ConfigurationError:
            return (
                jsonify({"error": "Server configuration error: API key not available."}),
                500,
            )
        token = _bearer_token(request)
        if token is None:
            return (
                jsonify(
                    {"error": "Unauthorized: Missing or invalid Authorization header."}
                ),
                401,
            )
        if not secrets.compare_digest(token.encode("utf-8"), expected.encode("utf-8")):
            logger.warning("api_key_rejected remote=%s", request.remote_addr)
            return jsonify({"error": "Unauthorized: Invalid API Key."}), 401
        return func(*args, **kwargs)

    return wrapper


def current_role() -> str | None:
    role = session.get(SESSION_ROLE_KEY)
    return role if isinstance(role, str) and role else None


def require_session_role(func):
    """Decorator requiring a logged-in approver; exposes it as ``g.role``."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        role = current_role()
        if role is None:
            return jsonify({"error": "Unauthorized: Invalid session."}), 401
        g.role = role
        return func(*args, **kwargs)

    return wrapper


__all__ = [
    "SESSION_ROLE_KEY",
    "current_role",
    "require_api_key",
    "require_session_role",
]
