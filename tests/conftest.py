"""
Test fixtures for GovLead Academy.

Provides app, client, db and identity-header fixtures backed by a file-based
SQLite database in a temporary directory. The reference seed gives:
user 1 = Alex Rivera (user), user 2 = Admin User (admin), categories 1-4 and
four published courses 1-4.
"""

from __future__ import annotations

import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

LEARNER_ID = 1
ADMIN_ID = 2


@pytest.fixture
def app(tmp_path):
    """Create app with file-based SQLite for testing."""
    from app import create_app

    db_file = str(tmp_path / "test.db")
    app = create_app({
        "TESTING": True,
        "DATABASE": db_file,
        "SECRET_KEY": "test-secret-key",
        "LOG_LEVEL": "WARNING",
    })

    with app.app_context():
        from database import init_db, run_migrations, seed_reference_data

        init_db()
        run_migrations()
        seed_reference_data()

    yield app


@pytest.fixture
def client(app):
    """Test client with no identity header."""
    return app.test_client()


@pytest.fixture
def db(app):
    """Direct database connection, independent of any app context."""
    from database import connect

    conn = connect(app.config["DATABASE"])
    yield conn
    conn.close()


@pytest.fixture
def user_headers():
    return {"X-User-Id": str(LEARNER_ID)}


@pytest.fixture
def admin_headers():
    return {"X-User-Id": str(ADMIN_ID)}


@pytest.fixture
def course_with_lessons(app):
    """Published course 1 with two lessons of 40 and 50 minutes."""
    with app.app_context():
        from db_stores import LessonStoreDB

        lessons = LessonStoreDB()
        first = lessons.add(1, {"title": "Mapping your operations", "duration": 40})
        second = lessons.add(1, {"title": "Choosing automation tools", "duration": 50})
    return {"course_id": 1, "lesson_ids": [first, second]}


def count_rows(db, table: str, where: str = "", params: tuple = ()) -> int:
    sql = f"SELECT COUNT(*) AS c FROM {table}"
    if where:
        sql += f" WHERE {where}"
    return db.execute(sql, params).fetchone()["c"]
