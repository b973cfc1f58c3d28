"""
DB-backed store classes for GovLead Academy.

Each store wraps one entity (or one user's view of it) and talks to SQLite
through an injected connection, defaulting to the app-context connection from
get_db(). Stores raise the errors.py taxonomy; they never build HTTP responses.
"""

from __future__ import annotations

import json
import logging
import math
import sqlite3
from datetime import datetime
from typing import Any, Optional

from werkzeug.security import generate_password_hash

from database import get_db
from errors import Conflict, InternalFailure, NotFound, ValidationError

logger = logging.getLogger(__name__)

ROLES = ("user", "admin")
SUBSCRIPTION_STATUSES = ("free", "premium")
COURSE_STATUSES = ("draft", "published", "coming_soon", "archived")

DEFAULT_MODULE_TITLE = "Main Module"
UNCATEGORIZED_LABEL = "Uncategorized"

PROFILE_FIELDS = (
    "name",
    "email",
    "bio",
    "profile_image",
    "business_info",
    "learning_interests",
    "experience_level",
    "business_stage",
)

# Tables holding rows keyed by user_id; cleared before the user row is removed
USER_OWNED_TABLES = ("enrollments", "notes", "bookmarks", "user_progress")


def _now() -> str:
    return datetime.now().isoformat()


def public_user(row) -> Optional[dict]:
    """User row as a JSON-safe dict, without the password hash."""
    if row is None:
        return None
    user = dict(row)
    user.pop("password_hash", None)
    if "email_verified" in user:
        user["email_verified"] = bool(user["email_verified"])
    return user


def encode_outcomes(outcomes: Any) -> str:
    """Serialize learning outcomes for storage."""
    if outcomes is None:
        return "[]"
    if not isinstance(outcomes, (list, tuple)):
        raise ValidationError("learning_outcomes must be a list of strings")
    return json.dumps([str(o) for o in outcomes])


def decode_outcomes(raw: Any) -> list[str]:
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        return []
    return [str(v) for v in value] if isinstance(value, list) else []


def _course_dict(row) -> dict:
    course = dict(row)
    course["is_paid"] = bool(course.get("is_paid"))
    course["learning_outcomes"] = decode_outcomes(course.get("learning_outcomes"))
    if "category_name" in course and not course["category_name"]:
        course["category_name"] = UNCATEGORIZED_LABEL
    return course


def _text(value: Any, field_name: str) -> str:
    """Stripped string value of a JSON field; None reads as empty."""
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string")
    return value.strip()


def _as_int(value: Any, field_name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")


# ── Users ────────────────────────────────────────────────────────────


class UserStoreDB:
    """Accounts, roles, subscriptions and profile fields."""

    def __init__(self, db: sqlite3.Connection | None = None):
        self.db = db if db is not None else get_db()

    def get(self, user_id: int) -> Optional[dict]:
        row = self.db.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        return public_user(row)

    def get_by_email(self, email: str):
        """Raw row including password_hash, for credential checks."""
        return self.db.execute("SELECT * FROM users WHERE email = ?", (email,)).fetchone()

    def role_of(self, user_id: int) -> Optional[str]:
        row = self.db.execute("SELECT role FROM users WHERE id = ?", (user_id,)).fetchone()
        return row["role"] if row else None

    def create(self, name: str, email: str, password: str) -> dict:
        try:
            cur = self.db.execute(
                "INSERT INTO users (name, email, password_hash, created_at) VALUES (?, ?, ?, ?)",
                (name, email, generate_password_hash(password), _now()),
            )
            self.db.commit()
        except sqlite3.IntegrityError:
            self.db.rollback()
            raise Conflict("Email already exists")
        return self.get(cur.lastrowid)

    def list_all(self) -> list[dict]:
        rows = self.db.execute(
            "SELECT id, name, email, role, subscription_status, created_at FROM users ORDER BY id"
        ).fetchall()
        return [dict(r) for r in rows]

    def count(self) -> int:
        return self.db.execute("SELECT COUNT(*) AS c FROM users").fetchone()["c"]

    def _require(self, user_id: int) -> None:
        if not self.db.execute("SELECT 1 FROM users WHERE id = ?", (user_id,)).fetchone():
            raise NotFound("User not found")

    def set_role(self, user_id: int, role: str) -> None:
        if role not in ROLES:
            raise ValidationError(f"role must be one of: {', '.join(ROLES)}")
        self._require(user_id)
        self.db.execute("UPDATE users SET role = ? WHERE id = ?", (role, user_id))
        self.db.commit()

    def set_subscription(self, user_id: int, status: str) -> None:
        if status not in SUBSCRIPTION_STATUSES:
            raise ValidationError(f"status must be one of: {', '.join(SUBSCRIPTION_STATUSES)}")
        self._require(user_id)
        self.db.execute("UPDATE users SET subscription_status = ? WHERE id = ?", (status, user_id))
        self.db.commit()

    def update_profile(self, user_id: int, fields: dict) -> tuple[dict, bool]:
        """Apply a partial profile update.

        Fields that are absent or null keep their stored value. A new, different
        email clears email_verified. Returns (updated user, email_changed).
        """
        current = self.db.execute("SELECT email FROM users WHERE id = ?", (user_id,)).fetchone()
        if not current:
            raise NotFound("User not found")

        values = {f: fields.get(f) for f in PROFILE_FIELDS}
        email = values["email"]
        if email is not None:
            if not isinstance(email, str) or not email.strip():
                raise ValidationError("email cannot be empty")
            email = values["email"] = email.strip()
        email_changed = email is not None and email != current["email"]

        assignments = ", ".join(f"{f} = COALESCE(?, {f})" for f in PROFILE_FIELDS)
        try:
            self.db.execute(
                f"UPDATE users SET {assignments}, "
                "email_verified = CASE WHEN ? THEN 0 ELSE email_verified END "
                "WHERE id = ?",
                (*[values[f] for f in PROFILE_FIELDS], 1 if email_changed else 0, user_id),
            )
            self.db.commit()
        except sqlite3.IntegrityError:
            self.db.rollback()
            raise Conflict("Email already in use")
        return self.get(user_id), email_changed

    def delete_cascade(self, user_id: int, acting_user_id: int | None = None) -> dict[str, int]:
        """Delete a user and every row that references them, atomically.

        Returns the number of rows removed per table.
        """
        if acting_user_id is not None and int(user_id) == int(acting_user_id):
            raise Conflict("Cannot delete your own account")
        self._require(user_id)

        removed: dict[str, int] = {}
        try:
            with self.db:
                for table in USER_OWNED_TABLES:
                    cur = self.db.execute(f"DELETE FROM {table} WHERE user_id = ?", (user_id,))
                    removed[table] = cur.rowcount
                    logger.info("Deleted %d rows from %s for user %s", cur.rowcount, table, user_id)
                cur = self.db.execute("DELETE FROM users WHERE id = ?", (user_id,))
                removed["users"] = cur.rowcount
        except sqlite3.Error as e:
            logger.error("Failed to delete user %s: %s", user_id, e)
            raise InternalFailure(f"Failed to delete user and related data: {e}")
        return removed


# ── Categories ───────────────────────────────────────────────────────


class CategoryStoreDB:

    def __init__(self, db: sqlite3.Connection | None = None):
        self.db = db if db is not None else get_db()

    def list_all(self) -> list[dict]:
        return [dict(r) for r in self.db.execute("SELECT * FROM categories ORDER BY id").fetchall()]

    def exists(self, category_id: int) -> bool:
        return self.db.execute("SELECT 1 FROM categories WHERE id = ?", (category_id,)).fetchone() is not None

    def create(self, name: str, slug: str) -> int:
        if not name or not slug:
            raise ValidationError("name and slug are required")
        try:
            cur = self.db.execute("INSERT INTO categories (name, slug) VALUES (?, ?)", (name, slug))
            self.db.commit()
        except sqlite3.IntegrityError:
            self.db.rollback()
            raise Conflict("Category slug already exists")
        return cur.lastrowid

    def update(self, category_id: int, name: str | None = None, slug: str | None = None) -> None:
        if not self.exists(category_id):
            raise NotFound("Category not found")
        try:
            self.db.execute(
                "UPDATE categories SET name = COALESCE(?, name), slug = COALESCE(?, slug) WHERE id = ?",
                (name or None, slug or None, category_id),
            )
            self.db.commit()
        except sqlite3.IntegrityError:
            self.db.rollback()
            raise Conflict("Category slug already exists")


# ── Courses ──────────────────────────────────────────────────────────


COURSE_FIELDS = (
    "title",
    "description",
    "category_id",
    "difficulty",
    "thumbnail_url",
    "status",
    "is_paid",
    "price",
    "learning_outcomes",
)

_COURSE_SELECT = (
    "SELECT c.*, cat.name AS category_name FROM courses c "
    "LEFT JOIN categories cat ON cat.id = c.category_id"
)


class CourseStoreDB:
    """Course catalogue. Learning outcomes are JSON text only inside SQLite."""

    def __init__(self, db: sqlite3.Connection | None = None):
        self.db = db if db is not None else get_db()

    def list_all(self, published_only: bool = True) -> list[dict]:
        sql = _COURSE_SELECT
        if published_only:
            sql += " WHERE c.status = 'published'"
        rows = self.db.execute(sql + " ORDER BY c.id").fetchall()
        return [_course_dict(r) for r in rows]

    def get(self, course_id: int, published_only: bool = False) -> Optional[dict]:
        sql = _COURSE_SELECT + " WHERE c.id = ?"
        if published_only:
            sql += " AND c.status = 'published'"
        row = self.db.execute(sql, (course_id,)).fetchone()
        return _course_dict(row) if row else None

    def exists(self, course_id: int) -> bool:
        return self.db.execute("SELECT 1 FROM courses WHERE id = ?", (course_id,)).fetchone() is not None

    def count(self) -> int:
        return self.db.execute("SELECT COUNT(*) AS c FROM courses").fetchone()["c"]

    def _clean(self, data: dict, check_category: bool = True) -> dict:
        """Validate and normalise a full set of course fields for storage."""
        title = _text(data.get("title"), "title")
        if not title:
            raise ValidationError("title is required")

        status = data.get("status") or "draft"
        if status not in COURSE_STATUSES:
            raise ValidationError(f"status must be one of: {', '.join(COURSE_STATUSES)}")

        thumbnail = _text(data.get("thumbnail_url"), "thumbnail_url")
        if status == "published" and not thumbnail:
            raise ValidationError("A thumbnail is required before publishing a course")

        try:
            price = float(data.get("price") or 0)
        except (TypeError, ValueError):
            raise ValidationError("price must be a number")
        if math.isnan(price) or price < 0:
            raise ValidationError("price cannot be negative")

        category_id = data.get("category_id")
        if category_id in (None, ""):
            category_id = None
        else:
            category_id = _as_int(category_id, "category_id")
            if check_category and not CategoryStoreDB(self.db).exists(category_id):
                raise ValidationError("Unknown category")

        return {
            "title": title,
            "description": data.get("description") or "",
            "category_id": category_id,
            "difficulty": data.get("difficulty") or "",
            "thumbnail_url": thumbnail,
            "status": status,
            "is_paid": 1 if data.get("is_paid") else 0,
            "price": price,
            "learning_outcomes": encode_outcomes(data.get("learning_outcomes")),
        }

    def create(self, data: dict) -> int:
        clean = self._clean(data)
        columns = ", ".join(COURSE_FIELDS)
        placeholders = ", ".join("?" for _ in COURSE_FIELDS)
        cur = self.db.execute(
            f"INSERT INTO courses ({columns}, created_at) VALUES ({placeholders}, ?)",
            (*[clean[f] for f in COURSE_FIELDS], _now()),
        )
        self.db.commit()
        return cur.lastrowid

    def update(self, course_id: int, data: dict) -> None:
        """Update a course; fields missing from data keep their stored value."""
        existing = self.get(course_id)
        if not existing:
            raise NotFound("Course not found")
        merged = {f: data[f] if f in data else existing[f] for f in COURSE_FIELDS}
        clean = self._clean(merged, check_category="category_id" in data)
        # category_id is written only when supplied; a dangling reference stays as stored
        fields = [f for f in COURSE_FIELDS if f != "category_id" or "category_id" in data]
        assignments = ", ".join(f"{f} = ?" for f in fields)
        self.db.execute(
            f"UPDATE courses SET {assignments} WHERE id = ?",
            (*[clean[f] for f in fields], course_id),
        )
        self.db.commit()

    def delete_cascade(self, course_id: int) -> dict[str, int]:
        """Delete a course with its modules, lessons and learner data, atomically."""
        if not self.exists(course_id):
            raise NotFound("Course not found")

        module_ids = "SELECT id FROM modules WHERE course_id = ?"
        lesson_ids = f"SELECT id FROM lessons WHERE module_id IN ({module_ids})"
        steps = [
            ("user_progress", f"DELETE FROM user_progress WHERE lesson_id IN ({lesson_ids})"),
            ("notes", f"DELETE FROM notes WHERE lesson_id IN ({lesson_ids})"),
            ("lessons", f"DELETE FROM lessons WHERE module_id IN ({module_ids})"),
            ("modules", "DELETE FROM modules WHERE course_id = ?"),
            ("enrollments", "DELETE FROM enrollments WHERE course_id = ?"),
            ("bookmarks", "DELETE FROM bookmarks WHERE course_id = ?"),
            ("courses", "DELETE FROM courses WHERE id = ?"),
        ]
        removed: dict[str, int] = {}
        try:
            with self.db:
                for table, sql in steps:
                    removed[table] = self.db.execute(sql, (course_id,)).rowcount
        except sqlite3.Error as e:
            logger.error("Failed to delete course %s: %s", course_id, e)
            raise InternalFailure(f"Failed to delete course and related data: {e}")
        logger.info("Deleted course %s: %s", course_id, removed)
        return removed


# ── Modules & Lessons ────────────────────────────────────────────────


class ModuleStoreDB:

    def __init__(self, db: sqlite3.Connection | None = None):
        self.db = db if db is not None else get_db()

    def find_for_course(self, course_id: int) -> Optional[int]:
        row = self.db.execute(
            "SELECT id FROM modules WHERE course_id = ? ORDER BY order_index, id LIMIT 1",
            (course_id,),
        ).fetchone()
        return row["id"] if row else None

    def get_or_create_default(self, course_id: int) -> int:
        """Return the course's module id, creating "Main Module" if it has none.

        Idempotent: repeated calls for the same course return the same module.
        """
        module_id = self.find_for_course(course_id)
        if module_id is not None:
            return module_id
        if not CourseStoreDB(self.db).exists(course_id):
            raise NotFound("Course not found")
        cur = self.db.execute(
            "INSERT INTO modules (course_id, title, order_index) VALUES (?, ?, 0)",
            (course_id, DEFAULT_MODULE_TITLE),
        )
        self.db.commit()
        logger.info("Created default module %s for course %s", cur.lastrowid, course_id)
        return cur.lastrowid

    def count_for_course(self, course_id: int) -> int:
        return self.db.execute(
            "SELECT COUNT(*) AS c FROM modules WHERE course_id = ?", (course_id,)
        ).fetchone()["c"]


class LessonStoreDB:

    def __init__(self, db: sqlite3.Connection | None = None):
        self.db = db if db is not None else get_db()
        self.modules = ModuleStoreDB(self.db)

    def get(self, lesson_id: int) -> Optional[dict]:
        row = self.db.execute("SELECT * FROM lessons WHERE id = ?", (lesson_id,)).fetchone()
        return dict(row) if row else None

    def exists(self, lesson_id: int) -> bool:
        return self.db.execute("SELECT 1 FROM lessons WHERE id = ?", (lesson_id,)).fetchone() is not None

    def list_for_course(self, course_id: int, create_module: bool = True) -> list[dict]:
        if create_module:
            module_id = self.modules.get_or_create_default(course_id)
        else:
            module_id = self.modules.find_for_course(course_id)
            if module_id is None:
                return []
        rows = self.db.execute(
            "SELECT * FROM lessons WHERE module_id = ? ORDER BY order_index ASC, id ASC",
            (module_id,),
        ).fetchall()
        return [dict(r) for r in rows]

    def add(self, course_id: int, data: dict) -> int:
        """Append a lesson to the course's module."""
        title = _text(data.get("title"), "title")
        if not title:
            raise ValidationError("title is required")
        duration = _as_int(data.get("duration") or 0, "duration")
        if duration < 0:
            raise ValidationError("duration cannot be negative")

        module_id = self.modules.get_or_create_default(course_id)
        order_index = self.db.execute(
            "SELECT COUNT(*) AS c FROM lessons WHERE module_id = ?", (module_id,)
        ).fetchone()["c"]
        cur = self.db.execute(
            "INSERT INTO lessons (module_id, title, video_url, duration, order_index, content_markdown) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            (module_id, title, data.get("video_url") or "", duration, order_index,
             data.get("content_markdown") or ""),
        )
        self.db.commit()
        return cur.lastrowid

    def update(self, lesson_id: int, data: dict) -> dict:
        if not self.exists(lesson_id):
            raise NotFound("Lesson not found")
        title = data.get("title")
        if title is not None:
            title = _text(title, "title")
            if not title:
                raise ValidationError("title cannot be empty")
        duration = data.get("duration")
        if duration is not None:
            duration = _as_int(duration, "duration")
            if duration < 0:
                raise ValidationError("duration cannot be negative")
        self.db.execute(
            "UPDATE lessons SET title = COALESCE(?, title), video_url = COALESCE(?, video_url), "
            "duration = COALESCE(?, duration), content_markdown = COALESCE(?, content_markdown) "
            "WHERE id = ?",
            (title, data.get("video_url"), duration,
             data.get("content_markdown"), lesson_id),
        )
        self.db.commit()
        return self.get(lesson_id)


# ── Enrollment & Progress ────────────────────────────────────────────


class EnrollmentStoreDB:

    def __init__(self, user_id: int, db: sqlite3.Connection | None = None):
        self.user_id = user_id
        self.db = db if db is not None else get_db()

    def enroll(self, course_id: int) -> None:
        if not CourseStoreDB(self.db).exists(course_id):
            raise NotFound("Course not found")
        try:
            self.db.execute(
                "INSERT INTO enrollments (user_id, course_id, enrolled_at) VALUES (?, ?, ?)",
                (self.user_id, course_id, _now()),
            )
            self.db.commit()
        except sqlite3.IntegrityError:
            self.db.rollback()
            raise Conflict("Already enrolled")

    def courses(self) -> list[dict]:
        rows = self.db.execute(
            "SELECT c.*, cat.name AS category_name, e.enrolled_at FROM courses c "
            "JOIN enrollments e ON c.id = e.course_id "
            "LEFT JOIN categories cat ON cat.id = c.category_id "
            "WHERE e.user_id = ? ORDER BY e.enrolled_at, e.id",
            (self.user_id,),
        ).fetchall()
        return [_course_dict(r) for r in rows]

    def count(self) -> int:
        return self.db.execute(
            "SELECT COUNT(*) AS c FROM enrollments WHERE user_id = ?", (self.user_id,)
        ).fetchone()["c"]


class ProgressStoreDB:
    """Per-lesson progress for one user; each report overwrites the last."""

    def __init__(self, user_id: int, db: sqlite3.Connection | None = None):
        self.user_id = user_id
        self.db = db if db is not None else get_db()

    def record(self, lesson_id: int, completed: bool, progress_percentage: Any = None) -> None:
        if not LessonStoreDB(self.db).exists(lesson_id):
            raise NotFound("Lesson not found")
        if progress_percentage is None:
            progress_percentage = 100 if completed else 0
        pct = max(0, min(100, _as_int(progress_percentage, "progress_percentage")))
        self.db.execute(
            "INSERT INTO user_progress "
            "(user_id, lesson_id, completed, progress_percentage, last_watched_timestamp) "
            "VALUES (?, ?, ?, ?, ?) "
            "ON CONFLICT(user_id, lesson_id) DO UPDATE SET "
            "completed = excluded.completed, "
            "progress_percentage = excluded.progress_percentage, "
            "last_watched_timestamp = excluded.last_watched_timestamp",
            (self.user_id, lesson_id, 1 if completed else 0, pct, _now()),
        )
        self.db.commit()

    def get(self, lesson_id: int) -> Optional[dict]:
        row = self.db.execute(
            "SELECT * FROM user_progress WHERE user_id = ? AND lesson_id = ?",
            (self.user_id, lesson_id),
        ).fetchone()
        if not row:
            return None
        progress = dict(row)
        progress["completed"] = bool(progress["completed"])
        return progress

    def completed_minutes(self) -> int:
        row = self.db.execute(
            "SELECT COALESCE(SUM(l.duration), 0) AS total_minutes "
            "FROM user_progress up JOIN lessons l ON up.lesson_id = l.id "
            "WHERE up.user_id = ? AND up.completed = 1",
            (self.user_id,),
        ).fetchone()
        return row["total_minutes"]

    def most_recent_course(self) -> Optional[dict]:
        row = self.db.execute(
            "SELECT c.*, MAX(up.last_watched_timestamp) AS last_access "
            "FROM courses c "
            "JOIN modules m ON c.id = m.course_id "
            "JOIN lessons l ON m.id = l.module_id "
            "JOIN user_progress up ON l.id = up.lesson_id "
            "WHERE up.user_id = ? "
            "GROUP BY c.id "
            "ORDER BY last_access DESC "
            "LIMIT 1",
            (self.user_id,),
        ).fetchone()
        return _course_dict(row) if row else None


# ── Notes & Bookmarks ────────────────────────────────────────────────


class NoteStoreDB:

    def __init__(self, user_id: int, db: sqlite3.Connection | None = None):
        self.user_id = user_id
        self.db = db if db is not None else get_db()

    def for_lesson(self, lesson_id: int) -> list[dict]:
        rows = self.db.execute(
            "SELECT * FROM notes WHERE user_id = ? AND lesson_id = ? ORDER BY id",
            (self.user_id, lesson_id),
        ).fetchall()
        return [dict(r) for r in rows]

    def add(self, lesson_id: int, content: Any) -> int:
        if not _text(content, "content"):
            raise ValidationError("content is required")
        if not LessonStoreDB(self.db).exists(lesson_id):
            raise NotFound("Lesson not found")
        cur = self.db.execute(
            "INSERT INTO notes (user_id, lesson_id, content, created_at) VALUES (?, ?, ?, ?)",
            (self.user_id, lesson_id, content, _now()),
        )
        self.db.commit()
        return cur.lastrowid


class BookmarkStoreDB:

    def __init__(self, user_id: int, db: sqlite3.Connection | None = None):
        self.user_id = user_id
        self.db = db if db is not None else get_db()

    def course_ids(self) -> list[int]:
        rows = self.db.execute(
            "SELECT course_id FROM bookmarks WHERE user_id = ? ORDER BY created_at, course_id",
            (self.user_id,),
        ).fetchall()
        return [r["course_id"] for r in rows]

    def add(self, course_id: int) -> None:
        if not CourseStoreDB(self.db).exists(course_id):
            raise NotFound("Course not found")
        self.db.execute(
            "INSERT OR IGNORE INTO bookmarks (user_id, course_id, created_at) VALUES (?, ?, ?)",
            (self.user_id, course_id, _now()),
        )
        self.db.commit()

    def remove(self, course_id: int) -> None:
        self.db.execute(
            "DELETE FROM bookmarks WHERE user_id = ? AND course_id = ?",
            (self.user_id, course_id),
        )
        self.db.commit()


# ── Aggregates ───────────────────────────────────────────────────────


# Not backed by any tracking yet; reported as fixed values
STREAK_PLACEHOLDER = 0
CERTIFICATES_PLACEHOLDER = 0


def minutes_to_hours(minutes: int) -> int:
    """Round minutes to the nearest whole hour, halves rounding up."""
    return int(math.floor(minutes / 60 + 0.5))


def dashboard_stats(user_id: int, db: sqlite3.Connection | None = None) -> dict:
    db = db if db is not None else get_db()
    enrolled = EnrollmentStoreDB(user_id, db).count()
    progress = ProgressStoreDB(user_id, db)
    return {
        "enrolledCount": enrolled,
        "hoursCompleted": minutes_to_hours(progress.completed_minutes()),
        "streak": STREAK_PLACEHOLDER,
        "certificates": CERTIFICATES_PLACEHOLDER,
        "placeholders": ["streak", "certificates"],
        "recentCourse": progress.most_recent_course(),
        "roadmapStage": "Strategy" if enrolled > 3 else "Foundation",
    }


def admin_stats(db: sqlite3.Connection | None = None) -> dict:
    db = db if db is not None else get_db()
    completions = db.execute(
        "SELECT COUNT(*) AS c FROM user_progress WHERE completed = 1"
    ).fetchone()["c"]
    return {
        "userCount": UserStoreDB(db).count(),
        "courseCount": CourseStoreDB(db).count(),
        "completionCount": completions,
    }
