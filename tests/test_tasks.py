"""API and unit tests for tasks: listing, create/update, assignment and cascading delete."""

import unittest
from unittest.mock import MagicMock

from sqlalchemy.exc import SQLAlchemyError

from jobtracker.models import Assignment, Attachment, Comment, Subtask, Task
from jobtracker.services.tasks import delete_task_rows
from tests.support import ApiTestCase


class TestTaskCrud(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user_id = self.login_as("boss@b.com", "Boss", role="MANAGER")

    def test_create_defaults_and_creator(self) -> None:
        task = self.create_task(title="Paint hallway")
        self.assertEqual(task["title"], "Paint hallway")
        self.assertEqual(task["status"], "TODO")
        self.assertEqual(task["priority"], "MEDIUM")
        self.assertEqual(task["description"], "")
        self.assertFalse(task["isQuotation"])
        self.assertEqual(task["createdById"], self.user_id)
        self.assertEqual(task["customFields"], {})
        self.assertEqual(task["assignments"], [])

    def test_assignee_creates_one_assignment(self) -> None:
        worker_id = self.create_user("w@b.com", "Wendy")
        task = self.create_task(assigneeId=worker_id)
        self.assertEqual(len(task["assignments"]), 1)
        assignment = task["assignments"][0]
        self.assertEqual(assignment["role"], "assignee")
        self.assertEqual(assignment["user"], {"id": worker_id, "name": "Wendy"})

    def test_unknown_assignee_is_rejected(self) -> None:
        response = self.client.post("/api/tasks", json={"title": "X", "assigneeId": 999})
        self.assertEqual(response.status_code, 400)
        self.assertIn("assigneeId", response.json()["fields"])

    def test_title_is_required(self) -> None:
        response = self.client.post("/api/tasks", json={"description": "no title"})
        self.assertEqual(response.status_code, 400)
        self.assertIn("title", response.json()["fields"])

    def test_get_and_missing(self) -> None:
        task = self.create_task()
        response = self.client.get(f"/api/tasks/{task['id']}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["task"]["id"], task["id"])
        response = self.client.get("/api/tasks/9999")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"error": "Task not found"})

    def test_patch_is_partial_and_replaces_assignee(self) -> None:
        first = self.create_user("one@b.com", "One")
        second = self.create_user("two@b.com", "Two")
        task = self.create_task(title="Tile bathroom", priority="HIGH", assigneeId=first)
        response = self.client.patch(
            f"/api/tasks/{task['id']}",
            json={"status": "IN_PROGRESS", "assigneeId": second, "actualHours": 3.5},
        )
        self.assertEqual(response.status_code, 200, response.text)
        updated = response.json()["task"]
        self.assertEqual(updated["title"], "Tile bathroom")
        self.assertEqual(updated["priority"], "HIGH")
        self.assertEqual(updated["status"], "IN_PROGRESS")
        self.assertEqual(updated["actualHours"], 3.5)
        self.assertEqual([a["userId"] for a in updated["assignments"]], [second])

    def test_patch_rejects_unknown_status(self) -> None:
        task = self.create_task()
        response = self.client.patch(f"/api/tasks/{task['id']}", json={"status": "LOST"})
        self.assertEqual(response.status_code, 400)
        self.assertIn("status", response.json()["fields"])

    def test_patch_missing_task(self) -> None:
        response = self.client.patch("/api/tasks/9999", json={"title": "Nope"})
        self.assertEqual(response.status_code, 404)


class TestTaskListing(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.login_as("boss@b.com", "Boss")

    def test_newest_first_with_pagination(self) -> None:
        ids = [self.create_task(title=f"Job {i}")["id"] for i in range(3)]
        response = self.client.get("/api/tasks?limit=2&offset=0")
        body = response.json()
        self.assertEqual([t["id"] for t in body["tasks"]], [ids[2], ids[1]])
        self.assertEqual(body["pagination"], {"total": 3, "limit": 2, "offset": 0, "hasMore": True})
        body = self.client.get("/api/tasks?limit=2&offset=2").json()
        self.assertEqual([t["id"] for t in body["tasks"]], [ids[0]])
        self.assertFalse(body["pagination"]["hasMore"])

    def test_archived_and_quotations_hidden_by_default(self) -> None:
        live = self.create_task(title="Live")
        archived = self.create_task(title="Old", status="ARCHIVED")
        quote = self.create_task(title="Quote", isQuotation=True)
        listed = [t["id"] for t in self.client.get("/api/tasks").json()["tasks"]]
        self.assertEqual(listed, [live["id"]])
        listed = [
            t["id"]
            for t in self.client.get(
                "/api/tasks?includeArchived=true&includeQuotations=true"
            ).json()["tasks"]
        ]
        self.assertEqual(sorted(listed), sorted([live["id"], archived["id"], quote["id"]]))

    def test_limit_bounds(self) -> None:
        self.assertEqual(self.client.get("/api/tasks?limit=0").status_code, 400)
        self.assertEqual(self.client.get("/api/tasks?limit=201").status_code, 400)
        self.assertEqual(self.client.get("/api/tasks?offset=-1").status_code, 400)


class TestTaskChildren(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user_id = self.login_as("boss@b.com", "Boss")
        self.task = self.create_task()

    def test_comments(self) -> None:
        response = self.client.post(
            f"/api/tasks/{self.task['id']}/comments", json={"body": "Customer called"}
        )
        self.assertEqual(response.status_code, 201, response.text)
        comment = response.json()["comment"]
        self.assertEqual(comment["authorId"], self.user_id)
        self.assertEqual(comment["author"]["name"], "Boss")
        comments = self.client.get(f"/api/tasks/{self.task['id']}/comments").json()["comments"]
        self.assertEqual([c["body"] for c in comments], ["Customer called"])

    def test_empty_comment_rejected(self) -> None:
        response = self.client.post(f"/api/tasks/{self.task['id']}/comments", json={"body": ""})
        self.assertEqual(response.status_code, 400)

    def test_comment_on_missing_task(self) -> None:
        response = self.client.post("/api/tasks/9999/comments", json={"body": "hello"})
        self.assertEqual(response.status_code, 404)

    def test_task_subtasks_continue_order(self) -> None:
        path = f"/api/tasks/{self.task['id']}/subtasks"
        first = self.client.post(path, json={"title": "Measure"}).json()["subtask"]
        second = self.client.post(path, json={"title": "Cut"}).json()["subtask"]
        self.assertEqual((first["order"], second["order"]), (1, 2))
        listed = self.client.get(path).json()["subtasks"]
        self.assertEqual([s["title"] for s in listed], ["Measure", "Cut"])


class TestTaskDelete(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user_id = self.login_as("boss@b.com", "Boss")

    def test_delete_removes_task_and_all_children(self) -> None:
        task = self.create_task(assigneeId=self.user_id)
        task_id = task["id"]
        self.client.post(f"/api/tasks/{task_id}/subtasks", json={"title": "Step"})
        self.client.post(f"/api/tasks/{task_id}/comments", json={"body": "Note"})
        upload = self.client.post(
            "/api/upload",
            files={"file": ("plan.pdf", b"%PDF-1.4", "application/pdf")},
            data={"taskId": str(task_id)},
        )
        self.assertEqual(upload.status_code, 201, upload.text)
        key = upload.json()["filename"]
        other = self.create_task(title="Keep me")
        self.client.post(f"/api/tasks/{other['id']}/comments", json={"body": "Stay"})

        response = self.client.delete(f"/api/tasks/{task_id}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"success": True})

        with self.session() as db:
            self.assertIsNone(db.get(Task, task_id))
            for model in (Subtask, Assignment, Comment, Attachment):
                self.assertEqual(db.query(model).filter(model.task_id == task_id).count(), 0)
            self.assertEqual(db.query(Comment).filter(Comment.task_id == other["id"]).count(), 1)
        self.assertNotIn(key, self.storage.objects)
        self.assertEqual(self.client.get(f"/api/tasks/{task_id}").status_code, 404)

    def test_blob_delete_failure_does_not_fail_the_request(self) -> None:
        task = self.create_task()
        upload = self.client.post(
            "/api/upload",
            files={"file": ("a.txt", b"hello", "text/plain")},
            data={"taskId": str(task["id"])},
        )
        self.storage.fail_deletes.add(upload.json()["filename"])
        response = self.client.delete(f"/api/tasks/{task['id']}")
        self.assertEqual(response.status_code, 200)
        with self.session() as db:
            self.assertIsNone(db.get(Task, task["id"]))

    def test_delete_missing_task(self) -> None:
        self.assertEqual(self.client.delete("/api/tasks/9999").status_code, 404)


class TestDeleteTaskRowsAtomicity(unittest.TestCase):
    """A failure part-way through the cascade rolls everything back."""

    def test_failure_rolls_back_and_reraises(self) -> None:
        db = MagicMock()
        db.query.return_value.filter.return_value.__iter__.return_value = iter([("k1",)])
        db.query.return_value.filter.return_value.delete.side_effect = [
            1,
            1,
            SQLAlchemyError("connection lost"),
        ]
        task = MagicMock(id=5)
        with self.assertRaises(SQLAlchemyError):
            delete_task_rows(db, task)
        db.rollback.assert_called_once()
        db.commit.assert_not_called()

    def test_success_commits_once_and_returns_keys(self) -> None:
        db = MagicMock()
        db.query.return_value.filter.return_value.__iter__.return_value = iter([("k1",), ("k2",)])
        db.query.return_value.filter.return_value.delete.return_value = 1
        keys = delete_task_rows(db, MagicMock(id=5))
        self.assertEqual(keys, ["k1", "k2"])
        db.commit.assert_called_once()
        db.rollback.assert_not_called()
        self.assertEqual(db.query.return_value.filter.return_value.delete.call_count, 5)
