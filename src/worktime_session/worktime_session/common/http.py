from __future__ import annotations

import logging
from functools import wraps

from flask import jsonify, session

from ..core.exceptions import (
    DomainError,
    InconsistentStateError,
    OwnershipError,
    PersistenceError,
    PreviousDaySessionError,
    ValidationError,
)

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ValidationError: 400,
    OwnershipError: 403,
    PreviousDaySessionError: 409,
    InconsistentStateError: 409,
    PersistenceError: 503,
}


def login_required(view):
    """JSON flavour of the login guard: caller identity lives in the Flask session."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session or "username" not in session:
            return jsonify({"success": False, "message": "Please log in to continue"}), 401
        return view(*args, **kwargs)

    return wrapper


def current_caller() -> tuple[str, int]:
    return str(session["username"]), int(session["user_id"])


def error_response(exc: DomainError):
    status = ERROR_STATUS.get(type(exc), 500)
    if status >= 500:
        logger.error("Request failed: %s", exc, exc_info=exc)
    return jsonify({"success": False, "error": type(exc).__name__, "message": str(exc)}), status
