"""Tests for attachment cleanup of long-archived tasks, the maintenance endpoint and run_retention."""

import unittest
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

from jobtracker.core.database import build_engine, build_session_factory
from jobtracker.core.security import utcnow
from jobtracker.models import Attachment, Base, Task, User, UserSession
from jobtracker.services.retention import cleanup_archived_attachments, run_retention
from tests.support import CRON_SECRET, ApiTestCase, InMemoryStorage, make_settings

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=UTC)


class CleanupTestCase(ApiTestCase):
    def add_task(self, status: str, age_days: float, attachments: list | None = None) -> int:
        updated = NOW - timedelta(days=age_days)
        with self.session() as db:
            custom_fields = {} if attachments is None else {"attachments": attachments, "budget": 5}
            task = Task(
                title=f"{status} job",
                status=status,
                custom_fields=custom_fields,
                created_at=updated,
                updated_at=updated,
            )
            db.add(task)
            db.commit()
            return task.id

    def add_attachment(self, task_id: int, key: str) -> None:
        self.storage.put(key, b"data")
        with self.session() as db:
            db.add(Attachment(task_id=task_id, key=key, url=f"/api/files/{key}", filename=key, size=4))
            db.commit()

    def custom_fields(self, task_id: int) -> dict:
        with self.session() as db:
            return db.get(Task, task_id).custom_fields


class TestCleanupArchivedAttachments(CleanupTestCase):
    def run_cleanup(self, days=10):
        with self.session() as db:
            return cleanup_archived_attachments(db, self.storage, "/api", days=days, now=NOW)

    def test_deletes_old_archived_attachments(self) -> None:
        for key in ("1-a.jpg", "2-b.jpg"):
            self.storage.put(key, b"data")
        old = self.add_task(
            "ARCHIVED",
            30,
            ["/api/files/1-a.jpg", "https://app.example.com/api/files/2-b.jpg", "https://cdn.other.net/x.png"],
        )
        self.add_attachment(old, "3-c.pdf")

        result = self.run_cleanup()

        self.assertEqual(result.deleted_objects, 3)
        self.assertEqual(result.tasks_updated, 1)
        self.assertEqual(result.cutoff, NOW - timedelta(days=10))
        self.assertEqual(self.storage.objects, {})
        self.assertEqual(
            self.custom_fields(old), {"attachments": ["https://cdn.other.net/x.png"], "budget": 5}
        )
        with self.session() as db:
            self.assertEqual(db.query(Attachment).count(), 0)

    def test_leaves_recent_and_active_tasks_alone(self) -> None:
        self.storage.put("1-a.jpg", b"data")
        recent = self.add_task("ARCHIVED", 3, ["/api/files/1-a.jpg"])
        active = self.add_task("DONE", 60, ["/api/files/1-a.jpg"])
        self.add_attachment(active, "2-b.pdf")

        result = self.run_cleanup()

        self.assertEqual((result.deleted_objects, result.tasks_updated), (0, 0))
        self.assertIn("1-a.jpg", self.storage.objects)
        self.assertEqual(self.custom_fields(recent), {"attachments": ["/api/files/1-a.jpg"], "budget": 5})
        with self.session() as db:
            self.assertEqual(db.query(Attachment).count(), 1)

    def test_failed_delete_keeps_reference_but_rows_go(self) -> None:
        self.storage.put("1-a.jpg", b"data")
        self.storage.put("2-b.jpg", b"data")
        self.storage.fail_deletes.update({"2-b.jpg", "3-c.pdf"})
        old = self.add_task("ARCHIVED", 30, ["/api/files/1-a.jpg", "/api/files/2-b.jpg"])
        self.add_attachment(old, "3-c.pdf")

        result = self.run_cleanup()

        self.assertEqual(result.deleted_objects, 1)
        self.assertEqual(self.custom_fields(old)["attachments"], ["/api/files/2-b.jpg"])
        self.assertIn("3-c.pdf", self.storage.objects)
        with self.session() as db:
            self.assertEqual(db.query(Attachment).count(), 0)

    def test_shared_object_is_deleted_once(self) -> None:
        self.storage.put("1-a.jpg", b"data")
        first = self.add_task("ARCHIVED", 30, ["/api/files/1-a.jpg"])
        second = self.add_task("ARCHIVED", 40, ["/api/files/1-a.jpg"])

        result = self.run_cleanup()

        self.assertEqual(result.deleted_objects, 1)
        self.assertEqual(result.tasks_updated, 2)
        self.assertEqual(self.storage.deleted, ["1-a.jpg"])
        self.assertEqual(self.custom_fields(first)["attachments"], [])
        self.assertEqual(self.custom_fields(second)["attachments"], [])

    def test_is_idempotent(self) -> None:
        self.storage.put("1-a.jpg", b"data")
        self.add_task("ARCHIVED", 30, ["/api/files/1-a.jpg"])
        self.run_cleanup()
        result = self.run_cleanup()
        self.assertEqual((result.deleted_objects, result.tasks_updated), (0, 0))

    def test_non_positive_days_fall_back_to_ten(self) -> None:
        for days in (0, -5, None, float("inf"), float("nan")):
            self.assertEqual(self.run_cleanup(days=days).cutoff, NOW - timedelta(days=10))

    def test_huge_days_are_capped(self) -> None:
        self.assertEqual(self.run_cleanup(days=1000000).cutoff, NOW - timedelta(days=3650))


class TestCleanupEndpoint(CleanupTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.storage.put("1-a.jpg", b"data")
        self.old = self.add_task("ARCHIVED", 400, ["/api/files/1-a.jpg"])

    def test_requires_cron_secret_or_admin(self) -> None:
        self.assertEqual(self.client.post("/api/maintenance/cleanup-attachments").status_code, 401)
        response = self.client.post(
            "/api/maintenance/cleanup-attachments", headers={"X-Cron-Secret": "wrong"}
        )
        self.assertEqual(response.status_code, 401)
        self.login_as("w@b.com", "Worker")
        self.assertEqual(self.client.get("/api/maintenance/cleanup-attachments").status_code, 401)
        self.assertIn("1-a.jpg", self.storage.objects)

    def test_cron_secret(self) -> None:
        response = self.client.post(
            "/api/maintenance/cleanup-attachments?days=10", headers={"X-Cron-Secret": CRON_SECRET}
        )
        self.assertEqual(response.status_code, 200, response.text)
        body = response.json()
        self.assertTrue(body["ok"])
        self.assertEqual(body["deletedObjects"], 1)
        self.assertEqual(body["tasksUpdated"], 1)
        self.assertIn("cutoff", body)
        self.assertNotIn("1-a.jpg", self.storage.objects)

    def test_admin_session_and_get(self) -> None:
        self.login_as("admin@b.com", "Admin", role="ADMIN")
        response = self.client.get("/api/maintenance/cleanup-attachments?days=abc")
        self.assertEqual(response.status_code, 200, response.text)
        cutoff = datetime.fromisoformat(response.json()["cutoff"])
        self.assertAlmostEqual(
            (utcnow() - cutoff).total_seconds(), timedelta(days=10).total_seconds(), delta=60
        )

    def test_out_of_range_days_do_not_fail(self) -> None:
        headers = {"X-Cron-Secret": CRON_SECRET}
        for days, expected in (("inf", 10), ("-inf", 10), ("1000000", 3650)):
            response = self.client.post(
                f"/api/maintenance/cleanup-attachments?days={days}", headers=headers
            )
            self.assertEqual(response.status_code, 200, response.text)
            cutoff = datetime.fromisoformat(response.json()["cutoff"])
            self.assertAlmostEqual(
                (utcnow() - cutoff).total_seconds(),
                timedelta(days=expected).total_seconds(),
                delta=60,
            )


class TestRunRetention(unittest.TestCase):
    def setUp(self) -> None:
        self.settings = make_settings(ATTACHMENT_RETENTION_DAYS=10)
        self.engine = build_engine(self.settings)
        Base.metadata.create_all(self.engine)
        self.db = build_session_factory(self.engine)()
        user = User(name="A", email="a@b.com", password_hash="x")
        self.db.add(user)
        self.db.commit()
        now = utcnow()
        self.db.add_all(
            [
                UserSession(id="old", user_id=user.id, expires_at=now - timedelta(hours=1)),
                UserSession(id="live", user_id=user.id, expires_at=now + timedelta(days=1)),
            ]
        )
        self.db.commit()

    def tearDown(self) -> None:
        self.db.close()
        self.engine.dispose()

    def test_without_storage_only_purges_sessions(self) -> None:
        result = run_retention(self.db, None, self.settings)
        self.assertEqual(result.sessions_deleted, 1)
        self.assertIsNone(result.cleanup)
        self.assertEqual([s.id for s in self.db.query(UserSession).all()], ["live"])

    def test_with_storage_runs_cleanup(self) -> None:
        storage = InMemoryStorage()
        result = run_retention(self.db, storage, self.settings)
        self.assertEqual(result.sessions_deleted, 1)
        self.assertIsNotNone(result.cleanup)
        self.assertEqual(result.cleanup.deleted_objects, 0)

    def test_purge_is_a_single_bulk_delete(self) -> None:
        session = MagicMock()
        session.query.return_value.filter.return_value.delete.return_value = 0
        result = run_retention(session, None, self.settings)
        self.assertEqual(result.sessions_deleted, 0)
        session.commit.assert_called_once()
