from __future__ import annotations

import logging
from functools import wraps

from flask import jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import (
    AuthorizationError,
    ConfigurationError,
    DomainError,
    GeofenceError,
    NoZoneConfigured,
    SubmissionInvalid,
    UnknownKey,
)

logger = logging.getLogger(__name__)


def current_role() -> Role:
    if session.get("role") == Role.ADMIN.value:
        return Role.ADMIN
    return Role.STUDENT


def admin_required(view):
    """Sign-in happens elsewhere; this only checks the session role."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        if current_role() != Role.ADMIN:
            return jsonify({"success": False, "message": "Administrator access required"}), 403
        return view(*args, **kwargs)

    return wrapper


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def error_response(e: DomainError):
    if isinstance(e, SubmissionInvalid):
        return jsonify({"success": False, "message": "Please check the form", "errors": e.errors}), 400
    if isinstance(e, NoZoneConfigured):
        logger.error("no zone configured: %s", e)
        return jsonify({"success": False, "message": str(e)}), 503
    if isinstance(e, AuthorizationError):
        return jsonify({"success": False, "message": str(e)}), 403
    if isinstance(e, UnknownKey):
        return jsonify({"success": False, "message": str(e)}), 404
    if isinstance(e, ConfigurationError):
        return jsonify({"success": False, "message": str(e)}), 409
    if isinstance(e, GeofenceError):
        return jsonify({"success": False, "message": str(e)}), 400
    return jsonify({"success": False, "message": str(e)}), 400
