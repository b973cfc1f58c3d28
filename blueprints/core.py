"""Public catalogue routes: health check, published courses, course lessons."""

from __future__ import annotations

from flask import Blueprint, jsonify
from flask_login import login_required

from db_stores import CourseStoreDB, LessonStoreDB
from errors import NotFound

bp = Blueprint("core", __name__, url_prefix="/api")


@bp.route("/health")
def health():
    return jsonify({"status": "ok"})


@bp.route("/courses")
def list_courses():
    return jsonify(CourseStoreDB().list_all(published_only=True))


@bp.route("/courses/<int:course_id>")
def get_course(course_id):
    course = CourseStoreDB().get(course_id, published_only=True)
    if not course:
        raise NotFound("Course not found")
    return jsonify(course)


@bp.route("/courses/<int:course_id>/lessons")
@login_required
def course_lessons(course_id):
    """Learner view of a course's lessons. Never creates a module."""
    if not CourseStoreDB().get(course_id, published_only=True):
        raise NotFound("Course not found")
    return jsonify(LessonStoreDB().list_for_course(course_id, create_module=False))
