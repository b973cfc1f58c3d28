"""Admin routes: users, courses, categories and lessons. All admin-gated."""

from __future__ import annotations

import logging

from flask import Blueprint, jsonify

from audit import log_event
from db_stores import (
    CategoryStoreDB,
    CourseStoreDB,
    LessonStoreDB,
    UserStoreDB,
    admin_stats,
)
from helpers import admin_required, current_user_id, json_body

logger = logging.getLogger(__name__)

bp = Blueprint("admin", __name__, url_prefix="/api/admin")


@bp.route("/stats")
@admin_required
def stats():
    return jsonify(admin_stats())


# ── Users ────────────────────────────────────────────────────────────


@bp.route("/users")
@admin_required
def list_users():
    return jsonify(UserStoreDB().list_all())


@bp.route("/users/<int:user_id>/role", methods=["PATCH"])
@admin_required
def set_role(user_id):
    role = json_body().get("role")
    UserStoreDB().set_role(user_id, role)
    log_event("role_changed", current_user_id(), f"target={user_id} role={role}")
    return jsonify({"success": True})


@bp.route("/users/<int:user_id>/subscription", methods=["PATCH"])
@admin_required
def set_subscription(user_id):
    status = json_body().get("status")
    UserStoreDB().set_subscription(user_id, status)
    log_event("subscription_changed", current_user_id(), f"target={user_id} status={status}")
    return jsonify({"success": True})


@bp.route("/users/<int:user_id>", methods=["DELETE"])
@admin_required
def delete_user(user_id):
    admin_id = current_user_id()
    logger.info("Admin %s attempting to delete user %s", admin_id, user_id)
    removed = UserStoreDB().delete_cascade(user_id, acting_user_id=admin_id)
    log_event("user_deleted", admin_id, f"target={user_id} removed={removed}")
    return jsonify({"success": True})


# ── Courses ──────────────────────────────────────────────────────────


@bp.route("/courses")
@admin_required
def list_courses():
    return jsonify(CourseStoreDB().list_all(published_only=False))


@bp.route("/courses", methods=["POST"])
@admin_required
def create_course():
    course_id = CourseStoreDB().create(json_body())
    return jsonify({"id": course_id})


@bp.route("/courses/<int:course_id>", methods=["PUT"])
@admin_required
def update_course(course_id):
    CourseStoreDB().update(course_id, json_body())
    return jsonify({"success": True})


@bp.route("/courses/<int:course_id>", methods=["DELETE"])
@admin_required
def delete_course(course_id):
    removed = CourseStoreDB().delete_cascade(course_id)
    log_event("course_deleted", current_user_id(), f"course={course_id} removed={removed}")
    return jsonify({"success": True})


# ── Categories ───────────────────────────────────────────────────────


@bp.route("/categories")
@admin_required
def list_categories():
    return jsonify(CategoryStoreDB().list_all())


@bp.route("/categories", methods=["POST"])
@admin_required
def create_category():
    data = json_body()
    category_id = CategoryStoreDB().create((data.get("name") or "").strip(), (data.get("slug") or "").strip())
    return jsonify({"id": category_id})


@bp.route("/categories/<int:category_id>", methods=["PUT"])
@admin_required
def update_category(category_id):
    data = json_body()
    CategoryStoreDB().update(category_id, name=data.get("name"), slug=data.get("slug"))
    return jsonify({"success": True})


# ── Lessons ──────────────────────────────────────────────────────────


@bp.route("/courses/<int:course_id>/lessons")
@admin_required
def list_lessons(course_id):
    return jsonify(LessonStoreDB().list_for_course(course_id))


@bp.route("/courses/<int:course_id>/lessons", methods=["POST"])
@admin_required
def add_lesson(course_id):
    lesson_id = LessonStoreDB().add(course_id, json_body())
    return jsonify({"id": lesson_id})


@bp.route("/lessons/<int:lesson_id>", methods=["PUT"])
@admin_required
def update_lesson(lesson_id):
    return jsonify(LessonStoreDB().update(lesson_id, json_body()))
