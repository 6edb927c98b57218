"""Tasks: listing, creation, partial updates, assignment and cascading delete."""

import logging
from typing import Any

from sqlalchemy.orm import Session, selectinload

from jobtracker.core.errors import BadRequestError, NotFoundError
from jobtracker.models import Assignment, Attachment, Comment, Customer, Subtask, Task, User
from jobtracker.services.custom_fields import validate_custom_fields

logger = logging.getLogger(__name__)

ASSIGNEE_ROLE = "assignee"

# Child tables removed together with a task, children first.
TASK_CHILD_MODELS = (Subtask, Assignment, Comment, Attachment)

# Columns a caller may set directly on create/update (assignee and custom fields are handled apart).
TASK_COLUMNS = (
    "title",
    "description",
    "status",
    "priority",
    "start_at",
    "due_at",
    "estimated_hours",
    "actual_hours",
    "customer",
    "customer_id",
    "job_number",
)


def task_query(db: Session):
    return db.query(Task).options(
        selectinload(Task.assignments).selectinload(Assignment.user),
        selectinload(Task.subtasks),
        selectinload(Task.customer_ref),
    )


def get_task(db: Session, task_id: int, not_found_message: str = "Task not found") -> Task:
    task = task_query(db).filter(Task.id == task_id).first()
    if task is None:
        raise NotFoundError(not_found_message)
    return task


def list_tasks(
    db: Session,
    limit: int,
    offset: int,
    include_archived: bool = False,
    include_quotations: bool = False,
) -> tuple[list[Task], int]:
    """Return one page of tasks (newest first) and the total matching count."""
    query = db.query(Task)
    if not include_archived:
        query = query.filter(Task.status != "ARCHIVED")
    if not include_quotations:
        query = query.filter(Task.is_quotation.is_(False))
    total = query.count()
    ids = [
        row.id
        for row in query.with_entities(Task.id)
        .order_by(Task.created_at.desc(), Task.id.desc())
        .limit(limit)
        .offset(offset)
    ]
    if not ids:
        return [], total
    by_id = {t.id: t for t in task_query(db).filter(Task.id.in_(ids)).all()}
    return [by_id[i] for i in ids if i in by_id], total


def ensure_user_exists(db: Session, user_id: int, field: str = "assigneeId") -> None:
    if db.get(User, user_id) is None:
        raise BadRequestError("Unknown user", fields={field: ["user does not exist"]})


def ensure_customer_exists(db: Session, customer_id: int) -> None:
    if db.get(Customer, customer_id) is None:
        raise BadRequestError("Unknown customer", fields={"customerId": ["customer does not exist"]})


def replace_assignee(db: Session, task: Task, assignee_id: int) -> None:
    """Make assignee_id the task's only assignee. Caller commits."""
    ensure_user_exists(db, assignee_id)
    db.query(Assignment).filter(Assignment.task_id == task.id).delete(synchronize_session=False)
    db.add(Assignment(task_id=task.id, user_id=assignee_id, role=ASSIGNEE_ROLE))


def create_task(db: Session, creator: User, data: dict[str, Any]) -> Task:
    """
    Create a task (or a quotation when data['is_quotation'] is true).

    custom_fields are validated with required definitions enforced; an
    assignee_id creates the initial assignment.
    """
    if data.get("customer_id") is not None:
        ensure_customer_exists(db, data["customer_id"])
    if data.get("assignee_id") is not None:
        ensure_user_exists(db, data["assignee_id"])
    custom_fields = validate_custom_fields(db, data.get("custom_fields"), enforce_required=True)

    task = Task(
        title=data["title"],
        description=data.get("description") or "",
        status=data.get("status") or "TODO",
        priority=data.get("priority") or "MEDIUM",
        start_at=data.get("start_at"),
        due_at=data.get("due_at"),
        estimated_hours=data.get("estimated_hours"),
        actual_hours=data.get("actual_hours"),
        customer=data.get("customer"),
        customer_id=data.get("customer_id"),
        job_number=data.get("job_number"),
        custom_fields=custom_fields,
        is_quotation=bool(data.get("is_quotation")),
        created_by_id=creator.id,
    )
    db.add(task)
    db.flush()
    if data.get("assignee_id") is not None:
        db.add(Assignment(task_id=task.id, user_id=data["assignee_id"], role=ASSIGNEE_ROLE))
    db.commit()
    logger.info(
        "Created %s id=%s by user id=%s",
        "quotation" if task.is_quotation else "task",
        task.id,
        creator.id,
    )
    return get_task(db, task.id)


def apply_task_changes(db: Session, task: Task, changes: dict[str, Any]) -> None:
    """Apply a partial update to task in the current transaction. Caller commits."""
    if "title" in changes and changes["title"] is None:
        raise BadRequestError("title must not be null", fields={"title": ["must not be null"]})
    for name in ("status", "priority"):
        if name in changes and changes[name] is None:
            changes.pop(name)
    if changes.get("customer_id") is not None:
        ensure_customer_exists(db, changes["customer_id"])
    for name in TASK_COLUMNS:
        if name in changes:
            value = changes[name]
            if name == "description" and value is None:
                value = ""
            setattr(task, name, value)
    if "custom_fields" in changes:
        task.custom_fields = validate_custom_fields(db, changes["custom_fields"])
    if changes.get("assignee_id") is not None:
        replace_assignee(db, task, changes["assignee_id"])


def update_task(db: Session, task_id: int, changes: dict[str, Any]) -> Task:
    task = get_task(db, task_id)
    apply_task_changes(db, task, changes)
    db.commit()
    db.expire_all()
    return get_task(db, task_id)


def delete_task_rows(db: Session, task: Task) -> list[str]:
    """
    Delete task and its subtasks, assignments, comments and attachments atomically.

    Every statement runs in one transaction that is committed once at the end
    and rolled back on any failure, so a crash never leaves orphaned children.
    Returns the object storage keys of the deleted attachments.
    """
    task_id = task.id
    keys = [key for (key,) in db.query(Attachment.key).filter(Attachment.task_id == task_id)]
    try:
        for model in TASK_CHILD_MODELS:
            db.query(model).filter(model.task_id == task_id).delete(synchronize_session=False)
        db.query(Task).filter(Task.id == task_id).delete(synchronize_session=False)
        db.commit()
    except Exception:
        db.rollback()
        logger.error("Delete of task id=%s rolled back", task_id)
        raise
    db.expire_all()
    logger.info("Deleted task id=%s with %s attachment(s)", task_id, len(keys))
    return keys


def delete_task(db: Session, task_id: int) -> list[str]:
    return delete_task_rows(db, get_task(db, task_id))
