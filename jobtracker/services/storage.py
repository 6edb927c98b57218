"""S3-compatible object storage (Cloudflare R2, MinIO, AWS S3) for file attachments."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any
from urllib.parse import quote, unquote

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import Request

from jobtracker.core.errors import AppError, ServiceUnavailableError

if TYPE_CHECKING:
    from jobtracker.core.config import Settings

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"

# S3 error codes meaning "no such object".
NOT_FOUND_CODES: frozenset[str] = frozenset({"NoSuchKey", "404", "NotFound"})


class StorageError(AppError):
    """Raised when the object store rejects or fails a request."""

    status_code = 502


class ObjectNotFoundError(StorageError):
    status_code = 404

    def __init__(self, key: str) -> None:
        super().__init__("File not found")
        self.key = key


class StorageNotConfiguredError(StorageError, ServiceUnavailableError):
    status_code = 503

    def __init__(self) -> None:
        super().__init__("Object storage is not configured")


@dataclass(frozen=True)
class StoredObject:
    key: str
    size: int
    last_modified: datetime
    content_type: str


def _error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", ""))


class ObjectStorage:
    """Thin wrapper over a boto3 S3 client bound to one bucket."""

    def __init__(self, client: Any, bucket: str) -> None:
        self._client = client
        self.bucket = bucket

    @classmethod
    def from_settings(cls, settings: Settings) -> ObjectStorage:
        secret = settings.S3_SECRET_ACCESS_KEY.get_secret_value() if settings.S3_SECRET_ACCESS_KEY else None
        client = boto3.client(
            "s3",
            endpoint_url=settings.S3_ENDPOINT_URL,
            region_name=settings.S3_REGION,
            aws_access_key_id=settings.S3_ACCESS_KEY_ID,
            aws_secret_access_key=secret,
            # R2 and MinIO need path-style addressing.
            config=Config(s3={"addressing_style": "path"}),
        )
        return cls(client, settings.S3_BUCKET or "")

    def put(self, key: str, body: bytes, content_type: str | None = None) -> None:
        try:
            self._client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=body,
                ContentType=content_type or DEFAULT_CONTENT_TYPE,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("Upload of %s failed: %s", key, e)
            raise StorageError("Failed to upload file") from e
        logger.info("Stored object %s (%s bytes)", key, len(body))

    def get(self, key: str) -> tuple[bytes, str]:
        """Return (content, content_type) for key."""
        try:
            response = self._client.get_object(Bucket=self.bucket, Key=key)
            content = response["Body"].read()
        except ClientError as e:
            if _error_code(e) in NOT_FOUND_CODES:
                raise ObjectNotFoundError(key) from e
            logger.error("Download of %s failed: %s", key, e)
            raise StorageError("Failed to read file") from e
        except BotoCoreError as e:
            logger.error("Download of %s failed: %s", key, e)
            raise StorageError("Failed to read file") from e
        return content, response.get("ContentType") or DEFAULT_CONTENT_TYPE

    def delete(self, key: str) -> None:
        try:
            self._client.delete_object(Bucket=self.bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            logger.error("Delete of %s failed: %s", key, e)
            raise StorageError("Failed to delete file") from e
        logger.info("Deleted object %s", key)

    def list(self) -> list[StoredObject]:
        """All objects in the bucket, newest first."""
        objects: list[StoredObject] = []
        try:
            paginator = self._client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.bucket):
                for item in page.get("Contents", []):
                    key = item.get("Key")
                    if not key:
                        continue
                    objects.append(
                        StoredObject(
                            key=key,
                            size=int(item.get("Size") or 0),
                            last_modified=item["LastModified"],
                            content_type=self._content_type(key),
                        )
                    )
        except (ClientError, BotoCoreError) as e:
            logger.error("Listing bucket %s failed: %s", self.bucket, e)
            raise StorageError("Failed to list files") from e
        objects.sort(key=lambda o: o.last_modified, reverse=True)
        return objects

    def _content_type(self, key: str) -> str:
        try:
            head = self._client.head_object(Bucket=self.bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            logger.warning("Could not read metadata for %s: %s", key, e)
            return DEFAULT_CONTENT_TYPE
        return head.get("ContentType") or DEFAULT_CONTENT_TYPE


def build_object_storage(settings: Settings) -> ObjectStorage | None:
    """Storage client for the app, or None when S3 settings are incomplete."""
    if not settings.storage_configured:
        logger.info("Object storage not configured; file endpoints will return 503")
        return None
    return ObjectStorage.from_settings(settings)


def get_optional_storage(request: Request) -> ObjectStorage | None:
    """Dependency: the app's storage handle, or None when not configured."""
    return getattr(request.app.state, "storage", None)


def get_storage(request: Request) -> ObjectStorage:
    """Dependency: the app's storage handle. Raises 503 when not configured."""
    storage = get_optional_storage(request)
    if storage is None:
        raise StorageNotConfiguredError()
    return storage


def make_object_key(filename: str, now: datetime) -> str:
    """Key '<epoch-ms>-<basename with whitespace runs replaced by _>'."""
    name = filename.replace("\\", "/").rsplit("/", 1)[-1].strip()
    name = re.sub(r"\s+", "_", name) or "file"
    return f"{int(now.timestamp() * 1000)}-{name}"


def files_path(api_prefix: str) -> str:
    return f"{api_prefix}/files/"


def file_url(api_prefix: str, key: str) -> str:
    """Proxy URL under the files API for key."""
    return files_path(api_prefix) + quote(key, safe="")


def key_from_url(url: str, api_prefix: str) -> str | None:
    """
    Recover the object key from a files API URL (absolute or relative).

    A bare key (no scheme, no leading slash) is returned unchanged; anything
    else that does not point at the files API yields None.
    """
    marker = files_path(api_prefix)
    idx = url.find(marker)
    if idx >= 0:
        key = unquote(url[idx + len(marker):])
        return key or None
    if "://" not in url and not url.startswith("/") and url:
        return url
    return None


def delete_objects_best_effort(storage: ObjectStorage | None, keys: list[str]) -> int:
    """Delete keys, logging and skipping failures. Returns the number deleted."""
    if storage is None:
        if keys:
            logger.warning("Object storage not configured; %s object(s) left in place", len(keys))
        return 0
    deleted = 0
    for key in keys:
        try:
            storage.delete(key)
            deleted += 1
        except StorageError:
            logger.warning("Could not delete object %s; leaving it in place", key)
    return deleted
