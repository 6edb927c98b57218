"""Shared fixtures for API tests: an app on in-memory SQLite with an in-memory object store."""

import unittest
from dataclasses import dataclass
from datetime import datetime

from fastapi.testclient import TestClient

from jobtracker.core.config import Settings
from jobtracker.core.security import utcnow
from jobtracker.application import create_app
from jobtracker.models import Base, User
from jobtracker.services.storage import DEFAULT_CONTENT_TYPE, ObjectNotFoundError, StorageError, StoredObject
from jobtracker.services.users import register_user

TEST_PASSWORD = "correct-horse-battery"
CRON_SECRET = "cron-test-secret"


@dataclass
class _Blob:
    content: bytes
    content_type: str
    last_modified: datetime


class InMemoryStorage:
    """Drop-in for ObjectStorage that keeps objects in a dict. Keys in fail_deletes fail to delete."""

    def __init__(self) -> None:
        self.objects: dict[str, _Blob] = {}
        self.fail_deletes: set[str] = set()
        self.deleted: list[str] = []

    def put(self, key: str, body: bytes, content_type: str | None = None) -> None:
        self.objects[key] = _Blob(body, content_type or DEFAULT_CONTENT_TYPE, utcnow())

    def get(self, key: str) -> tuple[bytes, str]:
        blob = self.objects.get(key)
        if blob is None:
            raise ObjectNotFoundError(key)
        return blob.content, blob.content_type

    def delete(self, key: str) -> None:
        if key in self.fail_deletes:
            raise StorageError("Failed to delete file")
        self.objects.pop(key, None)
        self.deleted.append(key)

    def list(self) -> list[StoredObject]:
        items = [
            StoredObject(key, len(blob.content), blob.last_modified, blob.content_type)
            for key, blob in self.objects.items()
        ]
        return sorted(items, key=lambda o: o.last_modified, reverse=True)


def make_settings(**overrides) -> Settings:
    values = {
        "APP_ENV": "dev",
        "DATABASE_URL": "sqlite://",
        "CRON_SECRET": CRON_SECRET,
        "S3_ENDPOINT_URL": None,
        "S3_BUCKET": None,
        "S3_ACCESS_KEY_ID": None,
        "S3_SECRET_ACCESS_KEY": None,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class ApiTestCase(unittest.TestCase):
    """Fresh app, schema and storage double per test."""

    with_storage = True
    settings_overrides: dict = {}

    def setUp(self) -> None:
        self.storage = InMemoryStorage() if self.with_storage else None
        self.app = create_app(make_settings(**self.settings_overrides), storage=self.storage)
        Base.metadata.create_all(self.app.state.engine)
        self.client = TestClient(self.app)

    def tearDown(self) -> None:
        self.client.close()
        Base.metadata.drop_all(self.app.state.engine)
        self.app.state.engine.dispose()

    def session(self):
        return self.app.state.session_factory()

    def create_user(self, email: str, name: str = "User", role: str = "WORKER", active: bool = True) -> int:
        with self.session() as db:
            user = register_user(db, email, TEST_PASSWORD, name, role=role)
            if not active:
                user.active = False
                db.commit()
            return user.id

    def login(self, email: str, password: str = TEST_PASSWORD):
        return self.client.post("/api/auth/login", json={"email": email, "password": password})

    def login_as(self, email: str, name: str = "User", role: str = "WORKER") -> int:
        """Create a user and sign the test client in as them."""
        user_id = self.create_user(email, name, role)
        response = self.login(email)
        self.assertEqual(response.status_code, 200, response.text)
        return user_id

    def get_user(self, user_id: int) -> User | None:
        with self.session() as db:
            return db.get(User, user_id)

    def create_task(self, **body) -> dict:
        body.setdefault("title", "Fit kitchen cabinets")
        response = self.client.post("/api/tasks", json=body)
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()["task"]
