"""Tests for database.py: schema creation, migrations, seed data."""

import sqlite3

import pytest

import database
from database import (
    add_missing_columns,
    connect,
    get_db,
    init_db,
    run_migrations,
    seed_reference_data,
)
from conftest import count_rows


def _schema_snapshot(db):
    return db.execute(
        "SELECT type, name, tbl_name, sql FROM sqlite_master ORDER BY type, name"
    ).fetchall()


def _columns(db, table):
    return [r["name"] for r in db.execute(f"PRAGMA table_info({table})").fetchall()]


class TestSchema:
    def test_tables_exist(self, db):
        tables = [r["name"] for r in db.execute(
            "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name"
        ).fetchall()]
        expected = [
            "audit_log", "bookmarks", "categories", "courses", "enrollments",
            "lessons", "modules", "notes", "schema_version", "user_progress", "users",
        ]
        for t in expected:
            assert t in tables, f"Table {t} not found"

    def test_wal_mode(self, db):
        mode = db.execute("PRAGMA journal_mode").fetchone()[0]
        assert mode == "wal"

    def test_foreign_keys_enabled(self, db):
        assert db.execute("PRAGMA foreign_keys").fetchone()[0] == 1

    def test_evolutionary_columns_present(self, db):
        user_cols = _columns(db, "users")
        for col in ("bio", "profile_image", "business_info", "learning_interests",
                    "experience_level", "business_stage", "email_verified"):
            assert col in user_cols
        course_cols = _columns(db, "courses")
        for col in ("is_paid", "price", "learning_outcomes"):
            assert col in course_cols

    def test_versioned_migrations_recorded(self, db):
        versions = {r["version"] for r in db.execute("SELECT version FROM schema_version").fetchall()}
        assert versions == {v for v, _ in database.MIGRATIONS}


class TestIdempotentStartup:
    def test_second_run_leaves_schema_identical(self, db):
        before = _schema_snapshot(db)
        init_db(db)
        run_migrations(db)
        seed_reference_data(db)
        after = _schema_snapshot(db)
        assert [tuple(r) for r in before] == [tuple(r) for r in after]

    def test_migrations_not_reapplied(self, db):
        run_migrations(db)
        run_migrations(db)
        assert count_rows(db, "schema_version") == len(database.MIGRATIONS)

    def test_existing_columns_are_skipped(self, db):
        assert add_missing_columns(db) == []

    def test_seed_does_not_duplicate(self, db):
        seed_reference_data(db)
        seed_reference_data(db)
        assert count_rows(db, "users") == 2
        assert count_rows(db, "categories") == 4
        assert count_rows(db, "courses") == 4

    def test_seed_does_not_consume_category_ids(self, db):
        for _ in range(4):
            seed_reference_data(db)
        seq = db.execute("SELECT seq FROM sqlite_sequence WHERE name = 'categories'").fetchone()
        assert seq["seq"] == 4


class TestLegacyDatabase:
    """A database created before the evolutionary columns existed."""

    def test_missing_columns_are_added(self, tmp_path):
        conn = connect(str(tmp_path / "legacy.db"))
        conn.executescript("""
            CREATE TABLE users (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT,
                email TEXT UNIQUE,
                password_hash TEXT,
                role TEXT NOT NULL DEFAULT 'user',
                subscription_status TEXT NOT NULL DEFAULT 'free',
                created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
            );
            CREATE TABLE courses (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                title TEXT,
                description TEXT,
                category_id INTEGER,
                difficulty TEXT,
                thumbnail_url TEXT,
                status TEXT NOT NULL DEFAULT 'draft',
                created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
            );
            INSERT INTO users (name, email) VALUES ('Old Timer', 'old@example.com');
        """)

        init_db(conn)
        run_migrations(conn)

        assert "bio" in _columns(conn, "users")
        assert "learning_outcomes" in _columns(conn, "courses")
        row = conn.execute("SELECT email_verified FROM users WHERE email = 'old@example.com'").fetchone()
        assert row["email_verified"] == 1

        # Second startup is a no-op
        assert add_missing_columns(conn) == []
        conn.close()

    def test_other_ddl_errors_are_raised(self, db, monkeypatch):
        monkeypatch.setattr(database, "ADDITIVE_COLUMNS", {"no_such_table": ["extra TEXT"]})
        with pytest.raises(sqlite3.OperationalError):
            add_missing_columns(db)


class TestSeedData:
    def test_seed_users(self, db):
        rows = db.execute("SELECT name, email, role, password_hash FROM users ORDER BY id").fetchall()
        assert [r["email"] for r in rows] == ["alex@example.com", "admin@govlead.com"]
        assert rows[1]["role"] == "admin"

    def test_seed_passwords_are_hashed(self, db):
        row = db.execute("SELECT password_hash FROM users WHERE email = 'alex@example.com'").fetchone()
        assert row["password_hash"] != "password123"

    def test_seed_courses_published_and_categorised(self, db):
        rows = db.execute(
            "SELECT c.status, cat.slug FROM courses c JOIN categories cat ON cat.id = c.category_id"
        ).fetchall()
        assert len(rows) == 4
        assert {r["status"] for r in rows} == {"published"}
        assert {r["slug"] for r in rows} == {"ai", "scaling", "branding", "leadership"}


class TestConnectionLifetime:
    def test_connection_closed_after_context(self, app):
        with app.app_context():
            conn = get_db()
        with pytest.raises(sqlite3.ProgrammingError):
            conn.execute("SELECT 1")
