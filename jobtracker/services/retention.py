"""Data retention: purge expired sessions and attachments of long-archived tasks."""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from jobtracker.core.security import utcnow
from jobtracker.models import Attachment, Task
from jobtracker.services.sessions import purge_expired_sessions
from jobtracker.services.storage import ObjectStorage, StorageError, key_from_url

if TYPE_CHECKING:
    from jobtracker.core.config import Settings

logger = logging.getLogger(__name__)

DEFAULT_ATTACHMENT_RETENTION_DAYS = 10
MAX_ATTACHMENT_RETENTION_DAYS = 3650


@dataclass
class CleanupResult:
    deleted_objects: int
    tasks_updated: int
    cutoff: datetime


@dataclass
class RetentionResult:
    sessions_deleted: int
    cleanup: CleanupResult | None


def _try_delete(storage: ObjectStorage, key: str) -> bool:
    try:
        storage.delete(key)
        return True
    except StorageError:
        logger.warning("Cleanup could not delete %s; keeping its reference", key)
        return False


def cleanup_archived_attachments(
    db: Session,
    storage: ObjectStorage,
    api_prefix: str,
    days: float | None = DEFAULT_ATTACHMENT_RETENTION_DAYS,
    now: datetime | None = None,
) -> CleanupResult:
    """
    Free storage held by tasks ARCHIVED and untouched for more than days.

    A missing, non-finite or non-positive days falls back to 10; larger values
    are capped at MAX_ATTACHMENT_RETENTION_DAYS.

    Objects referenced from custom_fields['attachments'] are deleted and their
    references dropped; a reference whose delete fails is kept. Attachment rows
    of those tasks are removed whether or not their object could be deleted.
    Idempotent: safe to run repeatedly.
    """
    if days is None or not math.isfinite(days) or days <= 0:
        days = DEFAULT_ATTACHMENT_RETENTION_DAYS
    days = min(days, MAX_ATTACHMENT_RETENTION_DAYS)
    cutoff = (now or utcnow()) - timedelta(days=days)

    archived = (
        db.query(Task)
        .filter(Task.status == "ARCHIVED", Task.updated_at < cutoff)
        .order_by(Task.id)
        .all()
    )
    archived_ids = [task.id for task in archived]
    processed: set[str] = set()
    deleted_objects = 0
    tasks_updated = 0

    for task in archived:
        custom_fields = task.custom_fields if isinstance(task.custom_fields, dict) else {}
        urls = custom_fields.get("attachments")
        if not isinstance(urls, list) or not urls:
            continue
        remaining = []
        for url in urls:
            key = key_from_url(url, api_prefix) if isinstance(url, str) else None
            if key is None:
                remaining.append(url)
                continue
            if key in processed:
                continue
            if _try_delete(storage, key):
                processed.add(key)
                deleted_objects += 1
            else:
                remaining.append(url)
        if len(remaining) != len(urls):
            task.custom_fields = {**custom_fields, "attachments": remaining}
            tasks_updated += 1

    if archived_ids:
        rows = db.query(Attachment).filter(Attachment.task_id.in_(archived_ids)).all()
        for row in rows:
            key = row.key or key_from_url(row.url, api_prefix)
            if key and key not in processed and _try_delete(storage, key):
                processed.add(key)
                deleted_objects += 1
        if rows:
            db.query(Attachment).filter(
                Attachment.id.in_([row.id for row in rows])
            ).delete(synchronize_session=False)

    db.commit()
    logger.info(
        "Attachment cleanup: cutoff=%s, archived_tasks=%s, deleted_objects=%s, tasks_updated=%s",
        cutoff.isoformat(),
        len(archived_ids),
        deleted_objects,
        tasks_updated,
    )
    return CleanupResult(
        deleted_objects=deleted_objects,
        tasks_updated=tasks_updated,
        cutoff=cutoff,
    )


def run_retention(
    session: Session,
    storage: ObjectStorage | None,
    settings: "Settings",
) -> RetentionResult:
    """Purge expired sessions, then clean up archived attachments when storage is configured."""
    sessions_deleted = purge_expired_sessions(session)
    if storage is None:
        logger.info("Object storage not configured; skipping attachment cleanup.")
        return RetentionResult(sessions_deleted=sessions_deleted, cleanup=None)
    cleanup = cleanup_archived_attachments(
        session,
        storage,
        settings.API_PREFIX,
        days=settings.ATTACHMENT_RETENTION_DAYS,
    )
    return RetentionResult(sessions_deleted=sessions_deleted, cleanup=cleanup)
