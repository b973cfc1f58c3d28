"""
Caller identity and the signup/login endpoints.

Identity is resolved per request by Flask-Login's request_loader from the
header named in IDENTITY_HEADER. The value is asserted by the client and is
not verified; a verified token scheme can replace ``identity_from_request``
without touching the route gates.
Passwords are stored with werkzeug.security hashes.
"""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify
from flask_login import UserMixin
from werkzeug.security import check_password_hash

from audit import log_event
from db_stores import UserStoreDB, public_user
from errors import Unauthenticated, ValidationError
from extensions import limiter, login_manager
from helpers import json_body

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


class User(UserMixin):
    """Wraps a DB user row for Flask-Login."""

    def __init__(self, id: int, name: str, email: str, role: str = "user"):
        self.id = id
        self.name = name
        self.email = email
        self.role = role

    @property
    def is_admin(self):
        return self.role == "admin"

    @staticmethod
    def get(user_id: int):
        row = UserStoreDB().get(user_id)
        if row:
            return User(row["id"], row["name"], row["email"], row["role"])
        return None


def identity_from_request(req) -> int | None:
    """Return the caller's user id carried in the identity header, if any."""
    header = current_app.config.get("IDENTITY_HEADER", "X-User-Id")
    raw = (req.headers.get(header) or "").strip()
    if not raw.isdigit():
        return None
    return int(raw)


@login_manager.request_loader
def load_user_from_request(req):
    user_id = identity_from_request(req)
    if user_id is None:
        return None
    return User.get(user_id)


@login_manager.unauthorized_handler
def unauthorized():
    raise Unauthenticated("Unauthorized")


def _login_limit() -> str:
    return current_app.config.get("LOGIN_RATE_LIMIT", "10 per minute")


def _signup_limit() -> str:
    return current_app.config.get("SIGNUP_RATE_LIMIT", "5 per hour")


@auth_bp.route("/login", methods=["POST"])
@limiter.limit(_login_limit)
def login():
    data = json_body()
    email = (data.get("email") or "").strip()
    password = data.get("password") or ""

    if not email or not password:
        raise ValidationError("Email and password are required")

    row = UserStoreDB().get_by_email(email)
    if not row or not row["password_hash"] or not check_password_hash(row["password_hash"], password):
        log_event("login_failed", row["id"] if row else None, f"email={email}")
        return jsonify({"error": "Invalid email or password"}), 401

    log_event("login_success", row["id"])
    return jsonify({"user": public_user(row)})


@auth_bp.route("/signup", methods=["POST"])
@limiter.limit(_signup_limit)
def signup():
    data = json_body()
    name = (data.get("name") or "").strip()
    email = (data.get("email") or "").strip()
    password = data.get("password") or ""

    if not name or not email or not password:
        raise ValidationError("Name, email and password are required")

    user = UserStoreDB().create(name, email, password)
    log_event("signup", user["id"], f"email={email}")
    return jsonify({"user": user})
