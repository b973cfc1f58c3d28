"""Learner routes: enrollment, lesson progress, notes, bookmarks, dashboard."""

from __future__ import annotations

from flask import Blueprint, jsonify
from flask_login import login_required

from db_stores import (
    BookmarkStoreDB,
    EnrollmentStoreDB,
    NoteStoreDB,
    ProgressStoreDB,
    dashboard_stats,
)
from errors import ValidationError
from helpers import current_user_id, json_body

bp = Blueprint("learning", __name__, url_prefix="/api")


@bp.route("/courses/<int:course_id>/enroll", methods=["POST"])
@login_required
def enroll(course_id):
    EnrollmentStoreDB(current_user_id()).enroll(course_id)
    return jsonify({"success": True})


@bp.route("/my-courses")
@login_required
def my_courses():
    return jsonify(EnrollmentStoreDB(current_user_id()).courses())


@bp.route("/lessons/<int:lesson_id>/progress", methods=["POST"])
@login_required
def report_progress(lesson_id):
    data = json_body()
    completed = data.get("completed") or False
    if not (isinstance(completed, bool) or completed in (0, 1)):
        raise ValidationError("completed must be true or false")
    ProgressStoreDB(current_user_id()).record(
        lesson_id,
        completed=bool(completed),
        progress_percentage=data.get("progress_percentage"),
    )
    return jsonify({"success": True})


@bp.route("/bookmarks")
@login_required
def list_bookmarks():
    return jsonify([
        {"course_id": course_id}
        for course_id in BookmarkStoreDB(current_user_id()).course_ids()
    ])


@bp.route("/bookmarks", methods=["POST"])
@login_required
def add_bookmark():
    data = json_body()
    course_id = data.get("courseId", data.get("course_id"))
    if course_id is None:
        raise ValidationError("courseId is required")
    try:
        course_id = int(course_id)
    except (TypeError, ValueError):
        raise ValidationError("courseId must be an integer")
    BookmarkStoreDB(current_user_id()).add(course_id)
    return jsonify({"success": True})


@bp.route("/bookmarks/<int:course_id>", methods=["DELETE"])
@login_required
def remove_bookmark(course_id):
    BookmarkStoreDB(current_user_id()).remove(course_id)
    return jsonify({"success": True})


@bp.route("/notes/<int:lesson_id>")
@login_required
def list_notes(lesson_id):
    return jsonify(NoteStoreDB(current_user_id()).for_lesson(lesson_id))


@bp.route("/notes", methods=["POST"])
@login_required
def add_note():
    data = json_body()
    lesson_id = data.get("lessonId", data.get("lesson_id"))
    try:
        lesson_id = int(lesson_id)
    except (TypeError, ValueError):
        raise ValidationError("lessonId is required")
    note_id = NoteStoreDB(current_user_id()).add(lesson_id, data.get("content"))
    return jsonify({"success": True, "id": note_id})


@bp.route("/user/dashboard-stats")
@login_required
def user_dashboard_stats():
    return jsonify(dashboard_stats(current_user_id()))
