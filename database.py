"""
SQLite database layer for GovLead Academy.

Uses raw sqlite3 with WAL mode and parameterized queries.
Tables are created declaratively, versioned migrations are tracked in
schema_version, and evolutionary columns are added on every startup.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path

from flask import current_app, g
from werkzeug.security import generate_password_hash

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path(__file__).parent / "govlead.db"


SCHEMA = """
-- Migration tracking
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER NOT NULL,
    applied_at TEXT NOT NULL
);

-- Users
CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT,
    email TEXT UNIQUE,
    password_hash TEXT,
    role TEXT NOT NULL DEFAULT 'user',
    subscription_status TEXT NOT NULL DEFAULT 'free',
    onboarding_preferences TEXT,
    bio TEXT,
    profile_image TEXT,
    business_info TEXT,
    learning_interests TEXT,
    experience_level TEXT,
    business_stage TEXT,
    email_verified INTEGER NOT NULL DEFAULT 1,
    created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS categories (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT,
    slug TEXT UNIQUE
);

CREATE TABLE IF NOT EXISTS courses (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT,
    description TEXT,
    category_id INTEGER REFERENCES categories(id),
    difficulty TEXT,
    thumbnail_url TEXT,
    status TEXT NOT NULL DEFAULT 'draft',
    is_paid INTEGER NOT NULL DEFAULT 0,
    price REAL NOT NULL DEFAULT 0,
    learning_outcomes TEXT NOT NULL DEFAULT '[]',
    created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS modules (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    course_id INTEGER NOT NULL REFERENCES courses(id),
    title TEXT NOT NULL,
    order_index INTEGER NOT NULL DEFAULT 0
);
CREATE INDEX IF NOT EXISTS idx_modules_course ON modules(course_id, order_index);

CREATE TABLE IF NOT EXISTS lessons (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    module_id INTEGER NOT NULL REFERENCES modules(id),
    title TEXT NOT NULL,
    video_url TEXT,
    duration INTEGER NOT NULL DEFAULT 0,
    order_index INTEGER NOT NULL DEFAULT 0,
    content_markdown TEXT
);
CREATE INDEX IF NOT EXISTS idx_lessons_module ON lessons(module_id, order_index);

-- Course access
CREATE TABLE IF NOT EXISTS enrollments (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL REFERENCES users(id),
    course_id INTEGER NOT NULL REFERENCES courses(id),
    enrolled_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
    UNIQUE(user_id, course_id)
);

-- Per-lesson progress (last write wins)
CREATE TABLE IF NOT EXISTS user_progress (
    user_id INTEGER NOT NULL REFERENCES users(id),
    lesson_id INTEGER NOT NULL REFERENCES lessons(id),
    completed INTEGER NOT NULL DEFAULT 0,
    progress_percentage INTEGER NOT NULL DEFAULT 0,
    last_watched_timestamp TEXT,
    PRIMARY KEY(user_id, lesson_id)
);

CREATE TABLE IF NOT EXISTS notes (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL REFERENCES users(id),
    lesson_id INTEGER NOT NULL REFERENCES lessons(id),
    content TEXT NOT NULL DEFAULT '',
    created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
);
CREATE INDEX IF NOT EXISTS idx_notes_user_lesson ON notes(user_id, lesson_id);

CREATE TABLE IF NOT EXISTS bookmarks (
    user_id INTEGER NOT NULL REFERENCES users(id),
    course_id INTEGER NOT NULL REFERENCES courses(id),
    created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
    PRIMARY KEY(user_id, course_id)
);
"""


MIGRATIONS: list[tuple[int, str]] = [
    # Version 1 = base schema.
    # -----------------------------------------------------------
    # Migration 2: Audit log
    (2, """
        CREATE TABLE IF NOT EXISTS audit_log (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER REFERENCES users(id) ON DELETE SET NULL,
            action TEXT NOT NULL,
            detail TEXT NOT NULL DEFAULT '',
            ip_address TEXT NOT NULL DEFAULT '',
            user_agent TEXT NOT NULL DEFAULT '',
            created_at TEXT NOT NULL DEFAULT ''
        );
        CREATE INDEX IF NOT EXISTS idx_audit_log_user ON audit_log(user_id, created_at);
    """),

    # Migration 3: Progress lookups for the dashboard
    (3, """
        CREATE INDEX IF NOT EXISTS idx_progress_user_watched
            ON user_progress(user_id, last_watched_timestamp);
        CREATE INDEX IF NOT EXISTS idx_enrollments_course ON enrollments(course_id);
    """),
]


# Columns added after the first deployments. Databases created before they
# existed receive them here; on every other startup the ALTER fails with
# "duplicate column name", which is the expected path.
ADDITIVE_COLUMNS: dict[str, list[str]] = {
    "users": [
        "bio TEXT",
        "profile_image TEXT",
        "business_info TEXT",
        "learning_interests TEXT",
        "experience_level TEXT",
        "business_stage TEXT",
        "email_verified INTEGER NOT NULL DEFAULT 1",
    ],
    "courses": [
        "is_paid INTEGER NOT NULL DEFAULT 0",
        "price REAL NOT NULL DEFAULT 0",
        "learning_outcomes TEXT NOT NULL DEFAULT '[]'",
    ],
}


SEED_USERS = [
    {"name": "Alex Rivera", "email": "alex@example.com", "password": "password123", "role": "user"},
    {"name": "Admin User", "email": "admin@govlead.com", "password": "admin123", "role": "admin"},
]

SEED_CATEGORIES = [
    ("AI", "ai"),
    ("Scaling", "scaling"),
    ("Branding", "branding"),
    ("Leadership", "leadership"),
]

SEED_COURSES = [
    {
        "title": "AI-Driven Business Systems",
        "description": "Master the art of automating your operations with cutting-edge AI tools.",
        "category_slug": "ai",
        "difficulty": "Intermediate",
        "thumbnail_url": "https://picsum.photos/seed/ai/800/450",
    },
    {
        "title": "Scaling to 7 Figures",
        "description": "A blueprint for high-growth startups ready to dominate their market.",
        "category_slug": "scaling",
        "difficulty": "Advanced",
        "thumbnail_url": "https://picsum.photos/seed/scale/800/450",
    },
    {
        "title": "Premium Brand Authority",
        "description": "Build a brand that commands attention and premium pricing.",
        "category_slug": "branding",
        "difficulty": "Beginner",
        "thumbnail_url": "https://picsum.photos/seed/brand/800/450",
    },
    {
        "title": "Leadership Operating System",
        "description": "Frameworks for building and managing high-performance teams.",
        "category_slug": "leadership",
        "difficulty": "Intermediate",
        "thumbnail_url": "https://picsum.photos/seed/lead/800/450",
    },
]


def connect(db_path: str) -> sqlite3.Connection:
    """Open a configured SQLite connection (row dicts, WAL, enforced FKs)."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")
    return conn


def get_db() -> sqlite3.Connection:
    """Return the DB connection for the current app context, creating if needed."""
    if "db" not in g:
        db_path = current_app.config.get("DATABASE", str(DEFAULT_DB_PATH))
        g.db = connect(db_path)
    return g.db


def close_db(e=None) -> None:
    """Teardown handler: close the DB connection."""
    db = g.pop("db", None)
    if db is not None:
        db.close()


def init_db(db: sqlite3.Connection | None = None) -> None:
    """Execute schema DDL to create all tables."""
    db = db if db is not None else get_db()
    db.executescript(SCHEMA)
    db.commit()


def _is_duplicate_column(err: sqlite3.OperationalError) -> bool:
    return "duplicate column" in str(err).lower()


def add_missing_columns(db: sqlite3.Connection | None = None) -> list[str]:
    """Add every evolutionary column that the database does not have yet.

    Returns the "table.column" definitions that were actually added.
    """
    db = db if db is not None else get_db()
    added = []
    for table, columns in ADDITIVE_COLUMNS.items():
        for column in columns:
            try:
                db.execute(f"ALTER TABLE {table} ADD COLUMN {column}")
            except sqlite3.OperationalError as e:
                if _is_duplicate_column(e):
                    logger.debug("Column %s.%s already present", table, column.split()[0])
                    continue
                logger.error("Failed to add column %s.%s: %s", table, column, e)
                raise
            added.append(f"{table}.{column.split()[0]}")
    db.commit()
    if added:
        logger.info("Added columns: %s", ", ".join(added))
    return added


def run_migrations(db: sqlite3.Connection | None = None) -> None:
    """Apply unapplied versioned migrations, then the additive column list."""
    db = db if db is not None else get_db()
    applied = {
        row["version"]
        for row in db.execute("SELECT version FROM schema_version").fetchall()
    }
    for version, sql in MIGRATIONS:
        if version in applied:
            continue
        try:
            db.executescript(sql)
        except sqlite3.OperationalError as e:
            err_msg = str(e).lower()
            if "duplicate column" not in err_msg and "already exists" not in err_msg:
                logger.error("Migration %d failed: %s", version, e)
                raise
        db.execute(
            "INSERT INTO schema_version (version, applied_at) VALUES (?, ?)",
            (version, datetime.now().isoformat()),
        )
        db.commit()
        logger.info("Applied migration %d", version)

    add_missing_columns(db)


def seed_reference_data(db: sqlite3.Connection | None = None) -> None:
    """Insert the demo users, categories and courses if they are absent.

    Keyed by natural uniqueness (email, slug, course title), so running this on
    every startup never duplicates rows.
    """
    db = db if db is not None else get_db()

    for user in SEED_USERS:
        exists = db.execute("SELECT 1 FROM users WHERE email = ?", (user["email"],)).fetchone()
        if exists:
            continue
        db.execute(
            "INSERT INTO users (name, email, password_hash, role) VALUES (?, ?, ?, ?)",
            (user["name"], user["email"], generate_password_hash(user["password"]), user["role"]),
        )

    # Keyed on slug; rows already present consume no AUTOINCREMENT ids
    db.executemany(
        "INSERT INTO categories (name, slug) SELECT ?, ? "
        "WHERE NOT EXISTS (SELECT 1 FROM categories WHERE slug = ?)",
        [(name, slug, slug) for name, slug in SEED_CATEGORIES],
    )

    for course in SEED_COURSES:
        db.execute(
            "INSERT INTO courses (title, description, category_id, difficulty, thumbnail_url, "
            "status, learning_outcomes) "
            "SELECT ?, ?, (SELECT id FROM categories WHERE slug = ?), ?, ?, 'published', ? "
            "WHERE NOT EXISTS (SELECT 1 FROM courses WHERE title = ?)",
            (
                course["title"],
                course["description"],
                course["category_slug"],
                course["difficulty"],
                course["thumbnail_url"],
                json.dumps([]),
                course["title"],
            ),
        )
    db.commit()


def init_app(app) -> None:
    """Register teardown and auto-init on first request."""
    app.teardown_appcontext(close_db)

    @app.before_request
    def _ensure_db():
        if not getattr(app, "_db_initialized", False):
            init_db()
            run_migrations()
            if app.config.get("SEED_REFERENCE_DATA", True):
                seed_reference_data()
            app._db_initialized = True
