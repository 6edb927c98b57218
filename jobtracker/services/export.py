"""CSV export of tasks."""

import csv
import io
import json
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from jobtracker.models import Task

CSV_HEADERS = (
    "id",
    "title",
    "description",
    "status",
    "priority",
    "startAt",
    "dueAt",
    "estimatedHours",
    "actualHours",
    "customer",
    "jobNumber",
    "customFields",
    "createdAt",
    "updatedAt",
)

EXPORT_FILENAME = "tasks-export.csv"


def _cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return json.dumps(value, separators=(",", ":")) if value else ""
    return value


def task_row(task: Task) -> list[Any]:
    return [
        _cell(v)
        for v in (
            task.id,
            task.title,
            task.description,
            task.status,
            task.priority,
            task.start_at,
            task.due_at,
            task.estimated_hours,
            task.actual_hours,
            task.customer,
            task.job_number,
            task.custom_fields,
            task.created_at,
            task.updated_at,
        )
    ]


def tasks_to_csv(tasks: Iterable[Task]) -> str:
    """
    Render tasks as CSV: header row first, one line per task, '\\n' line endings.

    Values containing a comma, quote or newline are quoted with doubled quotes.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for task in tasks:
        writer.writerow(task_row(task))
    return buffer.getvalue()


def export_tasks_csv(db: Session) -> str:
    """Every task, quotations and archived ones included, newest first."""
    tasks = db.query(Task).order_by(Task.created_at.desc(), Task.id.desc()).all()
    return tasks_to_csv(tasks)
