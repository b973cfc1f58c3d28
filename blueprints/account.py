"""Profile read and partial update for the calling user."""

from __future__ import annotations

from flask import Blueprint, jsonify
from flask_login import login_required

from audit import log_event
from db_stores import UserStoreDB
from errors import NotFound
from helpers import current_user_id, json_body

bp = Blueprint("account", __name__, url_prefix="/api")


@bp.route("/profile")
@login_required
def get_profile():
    user = UserStoreDB().get(current_user_id())
    if not user:
        raise NotFound("User not found")
    return jsonify(user)


@bp.route("/profile", methods=["PATCH"])
@login_required
def update_profile():
    uid = current_user_id()
    user, email_changed = UserStoreDB().update_profile(uid, json_body())
    if email_changed:
        log_event("email_changed", uid, "email_verified reset")
    return jsonify({"user": user, "emailChanged": email_changed})
