"""Tests for settings validation."""

import sys
import unittest

from pydantic import ValidationError

from tests.support import make_settings


class TestSettings(unittest.TestCase):
    def test_defaults(self) -> None:
        settings = make_settings()
        self.assertEqual(settings.API_PREFIX, "/api")
        self.assertEqual(settings.SESSION_COOKIE_NAME, "auth_session")
        self.assertEqual(settings.ATTACHMENT_RETENTION_DAYS, 10)
        self.assertFalse(settings.storage_configured)

    def test_database_url_must_be_postgres_or_sqlite(self) -> None:
        make_settings(DATABASE_URL="postgresql://u:p@db:5432/jobs")
        with self.assertRaises(ValidationError):
            make_settings(DATABASE_URL="mysql://u:p@db/jobs")
        with self.assertRaises(ValidationError):
            make_settings(DATABASE_URL="  ")

    def test_api_prefix(self) -> None:
        self.assertEqual(make_settings(API_PREFIX="/api/").API_PREFIX, "/api")
        self.assertEqual(make_settings(API_PREFIX="/").API_PREFIX, "")
        with self.assertRaises(ValidationError):
            make_settings(API_PREFIX="api")

    def test_s3_endpoint_scheme(self) -> None:
        self.assertIsNone(make_settings(S3_ENDPOINT_URL=" ").S3_ENDPOINT_URL)
        with self.assertRaises(ValidationError):
            make_settings(S3_ENDPOINT_URL="ftp://files")

    def test_numeric_bounds(self) -> None:
        with self.assertRaises(ValidationError):
            make_settings(MAX_UPLOAD_FILE_BYTES=0)
        with self.assertRaises(ValidationError):
            make_settings(ATTACHMENT_RETENTION_DAYS=0)

    def test_cors_wildcard_only_in_dev(self) -> None:
        origins = "*, https://jobs.example.com"
        self.assertEqual(make_settings(CORS_ORIGINS=origins).cors_origins_list, ["*", "https://jobs.example.com"])
        self.assertEqual(
            make_settings(APP_ENV="prod", CORS_ORIGINS=origins).cors_origins_list,
            ["https://jobs.example.com"],
        )

    def test_storage_configured(self) -> None:
        settings = make_settings(
            S3_ENDPOINT_URL="https://acct.r2.cloudflarestorage.com",
            S3_BUCKET="jobs",
            S3_ACCESS_KEY_ID="key",
            S3_SECRET_ACCESS_KEY="secret",
        )
        self.assertTrue(settings.storage_configured)
        self.assertNotIn("secret", repr(settings.S3_SECRET_ACCESS_KEY))


class TestApplicationFactory(unittest.TestCase):
    def test_importing_the_factory_builds_no_app(self) -> None:
        import jobtracker.application as application

        self.assertFalse(hasattr(application, "app"))
        self.assertNotIn("jobtracker.main", sys.modules)
