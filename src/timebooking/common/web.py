"""Request helpers shared by the JSON controllers."""
from __future__ import annotations

import logging
from functools import wraps

from flask import current_app, jsonify, session

from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
)


def error_response(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def domain_error_response(exc: DomainError):
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return error_response(str(exc), status)
    return error_response(str(exc), 500)


def load_session_user():
    """Re-read the session user from the store; drop the session when it is gone or inactive."""
    if "user_id" not in session:
        return None
    container = current_app.extensions["timebooking"]
    user = container.users_repo.get_by_id(int(session["user_id"]))
    if not user or not user.is_active:
        logger.info("Session of user %s dropped, account missing or inactive", session.get("uid"))
        session.clear()
        return None
    session["groups"] = list(user.groups)
    return user


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if load_session_user() is None:
            return error_response("No active session found.", 401)
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        user = load_session_user()
        if user is None:
            return error_response("No active session found.", 401)
        if Role.ADMIN.value not in user.groups:
            logger.info("User %s denied access to admin-only endpoint", user.uid)
            return error_response("Admin permission required.", 403)
        return view(*args, **kwargs)

    return wrapper


def current_user_id() -> int:
    return int(session["user_id"])
