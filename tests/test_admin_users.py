"""Tests for admin user management and the user deletion cascade."""

import pytest

from conftest import count_rows
from database import get_db
from db_stores import UserStoreDB
from errors import InternalFailure


@pytest.fixture
def learner_activity(client, user_headers, course_with_lessons):
    """Give user 1 an enrollment, a note, a bookmark and a progress row."""
    lesson_id = course_with_lessons["lesson_ids"][0]
    client.post("/api/courses/1/enroll", headers=user_headers)
    client.post("/api/notes", json={"lessonId": lesson_id, "content": "remember this"}, headers=user_headers)
    client.post("/api/bookmarks", json={"courseId": 1}, headers=user_headers)
    client.post(f"/api/lessons/{lesson_id}/progress", json={"completed": True}, headers=user_headers)
    return lesson_id


def _user_rows(db, user_id):
    return {
        table: count_rows(db, table, "user_id = ?", (user_id,))
        for table in ("enrollments", "notes", "bookmarks", "user_progress")
    }


class TestUserManagement:
    def test_list_users(self, client, admin_headers):
        users = client.get("/api/admin/users", headers=admin_headers).get_json()
        assert [u["email"] for u in users] == ["alex@example.com", "admin@govlead.com"]
        assert set(users[0]) == {"id", "name", "email", "role", "subscription_status", "created_at"}

    def test_change_role(self, client, admin_headers, db):
        resp = client.patch("/api/admin/users/1/role", json={"role": "admin"}, headers=admin_headers)
        assert resp.status_code == 200
        assert db.execute("SELECT role FROM users WHERE id = 1").fetchone()["role"] == "admin"

    def test_invalid_role(self, client, admin_headers):
        resp = client.patch("/api/admin/users/1/role", json={"role": "owner"}, headers=admin_headers)
        assert resp.status_code == 400

    def test_role_for_unknown_user(self, client, admin_headers):
        resp = client.patch("/api/admin/users/99/role", json={"role": "user"}, headers=admin_headers)
        assert resp.status_code == 404

    def test_change_subscription(self, client, admin_headers, db):
        resp = client.patch("/api/admin/users/1/subscription", json={"status": "premium"},
                            headers=admin_headers)
        assert resp.status_code == 200
        row = db.execute("SELECT subscription_status FROM users WHERE id = 1").fetchone()
        assert row["subscription_status"] == "premium"

    def test_invalid_subscription(self, client, admin_headers):
        resp = client.patch("/api/admin/users/1/subscription", json={"status": "gold"},
                            headers=admin_headers)
        assert resp.status_code == 400

    def test_role_change_is_audited(self, client, admin_headers, db):
        client.patch("/api/admin/users/1/role", json={"role": "admin"}, headers=admin_headers)
        row = db.execute("SELECT * FROM audit_log WHERE action = 'role_changed'").fetchone()
        assert row["user_id"] == 2
        assert "target=1" in row["detail"]

    def test_admin_stats(self, client, admin_headers, user_headers, course_with_lessons):
        client.post(f"/api/lessons/{course_with_lessons['lesson_ids'][0]}/progress",
                    json={"completed": True}, headers=user_headers)
        stats = client.get("/api/admin/stats", headers=admin_headers).get_json()
        assert stats == {"userCount": 2, "courseCount": 4, "completionCount": 1}


class TestDeleteUser:
    def test_delete_cascades(self, client, admin_headers, db, learner_activity):
        assert all(n == 1 for n in _user_rows(db, 1).values())

        resp = client.delete("/api/admin/users/1", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.get_json() == {"success": True}

        assert _user_rows(db, 1) == {"enrollments": 0, "notes": 0, "bookmarks": 0, "user_progress": 0}
        assert count_rows(db, "users", "id = 1") == 0
        # Course content is untouched
        assert count_rows(db, "lessons") == 2

    def test_delete_unknown_user(self, client, admin_headers, db, learner_activity):
        resp = client.delete("/api/admin/users/999", headers=admin_headers)
        assert resp.status_code == 404
        assert count_rows(db, "users") == 2
        assert all(n == 1 for n in _user_rows(db, 1).values())

    def test_self_delete_rejected(self, client, admin_headers, db):
        resp = client.delete("/api/admin/users/2", headers=admin_headers)
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Cannot delete your own account"
        assert count_rows(db, "users", "id = 2") == 1

    def test_failed_delete_rolls_back(self, app, db, learner_activity):
        db.execute(
            "CREATE TRIGGER block_user_delete BEFORE DELETE ON users "
            "BEGIN SELECT RAISE(ABORT, 'user rows are locked'); END"
        )
        db.commit()

        with app.app_context():
            with pytest.raises(InternalFailure) as excinfo:
                UserStoreDB(get_db()).delete_cascade(1, acting_user_id=2)
        assert "user rows are locked" in excinfo.value.message

        # Nothing was removed, including the child rows deleted before the failure
        assert all(n == 1 for n in _user_rows(db, 1).values())
        assert count_rows(db, "users", "id = 1") == 1

    def test_failed_delete_surfaces_message(self, client, admin_headers, db):
        db.execute(
            "CREATE TRIGGER block_user_delete BEFORE DELETE ON users "
            "BEGIN SELECT RAISE(ABORT, 'user rows are locked'); END"
        )
        db.commit()
        resp = client.delete("/api/admin/users/1", headers=admin_headers)
        assert resp.status_code == 500
        assert "user rows are locked" in resp.get_json()["error"]

    def test_deleted_identity_is_rejected(self, client, admin_headers, user_headers):
        client.delete("/api/admin/users/1", headers=admin_headers)
        assert client.get("/api/profile", headers=user_headers).status_code == 401

    def test_delete_is_audited(self, client, admin_headers, db):
        client.delete("/api/admin/users/1", headers=admin_headers)
        row = db.execute("SELECT * FROM audit_log WHERE action = 'user_deleted'").fetchone()
        assert row is not None
        assert row["user_id"] == 2
