"""Quotations: tasks flagged is_quotation that can be converted into scheduled tasks."""

import logging
from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from jobtracker.core.errors import BadRequestError
from jobtracker.models import Task, User
from jobtracker.services import tasks as task_service

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Quotation not found"
NOT_A_QUOTATION_MESSAGE = "Task is not a quotation"


def list_quotations(db: Session) -> list[Task]:
    return (
        task_service.task_query(db)
        .filter(Task.is_quotation.is_(True))
        .order_by(Task.created_at.desc(), Task.id.desc())
        .all()
    )


def get_quotation(db: Session, quotation_id: int) -> Task:
    """Return the quotation; 404 when missing, 400 when the row is a regular task."""
    task = task_service.get_task(db, quotation_id, not_found_message=NOT_FOUND_MESSAGE)
    if not task.is_quotation:
        raise BadRequestError(NOT_A_QUOTATION_MESSAGE)
    return task


def create_quotation(db: Session, creator: User, data: dict[str, Any]) -> Task:
    return task_service.create_task(db, creator, {**data, "is_quotation": True})


def update_quotation(db: Session, quotation_id: int, changes: dict[str, Any]) -> Task:
    task = get_quotation(db, quotation_id)
    task_service.apply_task_changes(db, task, changes)
    db.commit()
    db.expire_all()
    return task_service.get_task(db, quotation_id)


def delete_quotation(db: Session, quotation_id: int) -> list[str]:
    return task_service.delete_task_rows(db, get_quotation(db, quotation_id))


def convert_to_task(db: Session, quotation_id: int, start_at: datetime, due_at: datetime) -> Task:
    """Schedule the quotation and clear its quotation flag."""
    task = get_quotation(db, quotation_id)
    task.start_at = start_at
    task.due_at = due_at
    task.is_quotation = False
    custom_fields = dict(task.custom_fields or {})
    custom_fields.pop("isQuotation", None)
    task.custom_fields = custom_fields
    db.commit()
    logger.info("Converted quotation id=%s to task", quotation_id)
    db.expire_all()
    return task_service.get_task(db, quotation_id)
