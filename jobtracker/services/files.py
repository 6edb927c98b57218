"""Uploading files to object storage and recording them as task attachments."""

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from jobtracker.core.errors import NotFoundError
from jobtracker.core.security import utcnow
from jobtracker.models import Attachment, Task
from jobtracker.services.storage import (
    DEFAULT_CONTENT_TYPE,
    ObjectStorage,
    file_url,
    make_object_key,
)

logger = logging.getLogger(__name__)


@dataclass
class StoredUpload:
    key: str
    original_name: str
    url: str
    attachment: Attachment | None = None


def store_upload(
    db: Session,
    storage: ObjectStorage,
    api_prefix: str,
    content: bytes,
    filename: str,
    content_type: str | None = None,
    task_id: int | None = None,
    now: datetime | None = None,
) -> StoredUpload:
    """
    Put content in object storage and, when task_id is given, record an Attachment.

    The task is checked before anything is uploaded so a bad task id leaves no
    orphaned object behind.
    """
    if task_id is not None and db.get(Task, task_id) is None:
        raise NotFoundError("Task not found")
    key = make_object_key(filename, now or utcnow())
    url = file_url(api_prefix, key)
    storage.put(key, content, content_type or DEFAULT_CONTENT_TYPE)

    attachment = None
    if task_id is not None:
        attachment = Attachment(
            task_id=task_id,
            key=key,
            url=url,
            filename=filename,
            content_type=content_type or DEFAULT_CONTENT_TYPE,
            size=len(content),
        )
        db.add(attachment)
        db.commit()
        db.refresh(attachment)
        logger.info("Attached %s to task id=%s", key, task_id)
    return StoredUpload(key=key, original_name=filename, url=url, attachment=attachment)


def list_attachments(db: Session, task_id: int) -> list[Attachment]:
    if db.get(Task, task_id) is None:
        raise NotFoundError("Task not found")
    return (
        db.query(Attachment)
        .filter(Attachment.task_id == task_id)
        .order_by(Attachment.created_at, Attachment.id)
        .all()
    )
