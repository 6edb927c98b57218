"""Subtasks belonging to a task, kept in a per-task display order."""

import logging
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from jobtracker.core.errors import BadRequestError, NotFoundError
from jobtracker.models import Subtask, Task
from jobtracker.services.tasks import ensure_user_exists

logger = logging.getLogger(__name__)

SUBTASK_COLUMNS = ("title", "status", "assignee_id", "due_at", "estimated_hours", "order")


def _ensure_task(db: Session, task_id: int) -> None:
    if db.get(Task, task_id) is None:
        raise NotFoundError("Task not found")


def list_subtasks(db: Session, task_id: int) -> list[Subtask]:
    return (
        db.query(Subtask)
        .options(selectinload(Subtask.assignee))
        .filter(Subtask.task_id == task_id)
        .order_by(Subtask.order, Subtask.id)
        .all()
    )


def get_subtask(db: Session, subtask_id: int) -> Subtask:
    subtask = (
        db.query(Subtask)
        .options(selectinload(Subtask.assignee))
        .filter(Subtask.id == subtask_id)
        .first()
    )
    if subtask is None:
        raise NotFoundError("Subtask not found")
    return subtask


def next_order(db: Session, task_id: int) -> int:
    """One past the highest order used on the task (1 for the first subtask)."""
    highest = db.query(func.max(Subtask.order)).filter(Subtask.task_id == task_id).scalar()
    return (highest or 0) + 1


def create_subtask(db: Session, task_id: int, data: dict[str, Any]) -> Subtask:
    _ensure_task(db, task_id)
    if data.get("assignee_id") is not None:
        ensure_user_exists(db, data["assignee_id"])
    order = data.get("order")
    subtask = Subtask(
        task_id=task_id,
        title=data["title"],
        status=data.get("status") or "TODO",
        assignee_id=data.get("assignee_id"),
        due_at=data.get("due_at"),
        estimated_hours=data.get("estimated_hours"),
        order=order if order is not None else next_order(db, task_id),
    )
    db.add(subtask)
    db.commit()
    logger.info("Created subtask id=%s on task id=%s", subtask.id, task_id)
    return get_subtask(db, subtask.id)


def update_subtask(db: Session, subtask_id: int, changes: dict[str, Any]) -> Subtask:
    subtask = get_subtask(db, subtask_id)
    for name in ("title", "status", "order"):
        if name in changes and changes[name] is None:
            if name == "title":
                raise BadRequestError("title must not be null", fields={"title": ["must not be null"]})
            changes.pop(name)
    if changes.get("assignee_id") is not None:
        ensure_user_exists(db, changes["assignee_id"])
    for name in SUBTASK_COLUMNS:
        if name in changes:
            setattr(subtask, name, changes[name])
    db.commit()
    return get_subtask(db, subtask_id)


def delete_subtask(db: Session, subtask_id: int) -> None:
    subtask = get_subtask(db, subtask_id)
    db.delete(subtask)
    db.commit()
