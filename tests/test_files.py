"""API tests for file upload, listing, download and delete against the storage double."""

import inspect
import re
from urllib.parse import quote

from jobtracker.api.v1.files import upload_file
from jobtracker.models import Attachment
from tests.support import ApiTestCase


class TestFiles(ApiTestCase):
    settings_overrides = {"MAX_UPLOAD_FILE_BYTES": 64}

    def setUp(self) -> None:
        super().setUp()
        self.login_as("boss@b.com", "Boss")

    def upload(self, name: str, content: bytes, content_type: str = "text/plain", **data):
        return self.client.post(
            "/api/upload", files={"file": (name, content, content_type)}, data=data
        )

    def test_upload_without_task(self) -> None:
        response = self.upload("site  photo 1.jpg", b"jpeg-bytes", "image/jpeg")
        self.assertEqual(response.status_code, 201, response.text)
        body = response.json()
        self.assertRegex(body["filename"], r"^\d{13}-site_photo_1\.jpg$")
        self.assertEqual(body["originalName"], "site  photo 1.jpg")
        self.assertEqual(body["url"], "/api/files/" + quote(body["filename"], safe=""))
        self.assertIsNone(body["attachmentId"])
        self.assertEqual(self.storage.objects[body["filename"]].content, b"jpeg-bytes")

    def test_upload_with_task_records_attachment(self) -> None:
        task = self.create_task()
        response = self.upload("invoice.pdf", b"%PDF", "application/pdf", taskId=str(task["id"]))
        self.assertEqual(response.status_code, 201, response.text)
        body = response.json()
        self.assertIsNotNone(body["attachmentId"])
        attachments = self.client.get(f"/api/tasks/{task['id']}/attachments").json()["attachments"]
        self.assertEqual(len(attachments), 1)
        self.assertEqual(attachments[0]["key"], body["filename"])
        self.assertEqual(attachments[0]["filename"], "invoice.pdf")
        self.assertEqual(attachments[0]["contentType"], "application/pdf")
        self.assertEqual(attachments[0]["size"], 4)

    def test_upload_to_missing_task_stores_nothing(self) -> None:
        response = self.upload("a.txt", b"x", taskId="9999")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(self.storage.objects, {})
        with self.session() as db:
            self.assertEqual(db.query(Attachment).count(), 0)

    def test_upload_handler_runs_off_the_event_loop(self) -> None:
        self.assertFalse(inspect.iscoroutinefunction(upload_file))

    def test_upload_too_large(self) -> None:
        response = self.upload("big.bin", b"x" * 65)
        self.assertEqual(response.status_code, 413)
        self.assertEqual(self.storage.objects, {})
        self.assertEqual(self.upload("ok.bin", b"x" * 64).status_code, 201)

    def test_upload_requires_file(self) -> None:
        response = self.client.post("/api/upload", data={"taskId": "1"})
        self.assertEqual(response.status_code, 400)
        self.assertIn("file", response.json()["fields"])

    def test_list_get_and_delete(self) -> None:
        key = self.upload("notes.txt", b"hello world").json()["filename"]
        files = self.client.get("/api/files").json()["files"]
        self.assertEqual([f["key"] for f in files], [key])
        self.assertEqual(files[0]["size"], 11)
        self.assertEqual(files[0]["contentType"], "text/plain")
        self.assertTrue(files[0]["url"].endswith(key))

        response = self.client.get(f"/api/files/{key}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.content, b"hello world")
        self.assertTrue(response.headers["content-type"].startswith("text/plain"))
        self.assertEqual(response.headers["cache-control"], "no-cache")

        response = self.client.delete(f"/api/files/{key}")
        self.assertEqual(response.json(), {"success": True})
        self.assertEqual(self.client.get(f"/api/files/{key}").status_code, 404)

    def test_missing_file(self) -> None:
        response = self.client.get("/api/files/123-nothing.txt")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"error": "File not found"})

    def test_listing_is_newest_first(self) -> None:
        first = self.upload("a.txt", b"a").json()["filename"]
        second = self.upload("b.txt", b"b").json()["filename"]
        keys = [f["key"] for f in self.client.get("/api/files").json()["files"]]
        self.assertEqual(keys, [second, first])
        self.assertTrue(all(re.match(r"^\d+-", k) for k in keys))


class TestFilesWithoutStorage(ApiTestCase):
    with_storage = False

    def test_storage_endpoints_return_503(self) -> None:
        self.login_as("boss@b.com", "Boss")
        response = self.client.post("/api/upload", files={"file": ("a.txt", b"x", "text/plain")})
        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json(), {"error": "Object storage is not configured"})
        self.assertEqual(self.client.get("/api/files").status_code, 503)
        self.assertEqual(self.client.get("/api/files/1-a.txt").status_code, 503)
        self.assertEqual(self.client.delete("/api/files/1-a.txt").status_code, 503)

    def test_anonymous_caller_gets_401_before_storage_check(self) -> None:
        response = self.client.post("/api/upload", files={"file": ("a.txt", b"x", "text/plain")})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(self.client.get("/api/files").status_code, 401)
        self.assertEqual(self.client.get("/api/files/1-a.txt").status_code, 401)
        self.assertEqual(self.client.delete("/api/files/1-a.txt").status_code, 401)

    def test_task_delete_still_works(self) -> None:
        self.login_as("boss@b.com", "Boss")
        task = self.create_task()
        self.assertEqual(self.client.delete(f"/api/tasks/{task['id']}").status_code, 200)

    def test_health_reports_storage_missing(self) -> None:
        self.assertEqual(self.client.get("/api/health/").json()["storage"], "not_configured")
