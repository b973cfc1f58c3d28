"""
Shared helpers used across blueprints.
"""

from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from typing import Any

from flask import request
from flask_login import current_user

from errors import Forbidden, ValidationError
from extensions import login_manager


def current_user_id() -> int:
    """Return the authenticated caller's user id."""
    return int(current_user.id)


def admin_required(f: Callable) -> Callable:
    """Decorator: resolve the caller, then require the admin role.

    No identity -> 401, identity without the admin role -> 403.
    """
    @wraps(f)
    def decorated(*args: Any, **kwargs: Any) -> Any:
        if not current_user.is_authenticated:
            return login_manager.unauthorized()
        if getattr(current_user, "role", "user") != "admin":
            raise Forbidden("Forbidden: Admin access required")
        return f(*args, **kwargs)
    return decorated


def json_body() -> dict:
    """Return the JSON object body of the request, or reject it."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data
