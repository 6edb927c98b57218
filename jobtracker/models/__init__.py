"""SQLAlchemy ORM models."""

from jobtracker.models.base import Base
from jobtracker.models.custom_field import CustomFieldDef
from jobtracker.models.customer import Customer
from jobtracker.models.task import Assignment, Attachment, Comment, Subtask, Task
from jobtracker.models.user import User, UserSession

__all__ = [
    "Assignment",
    "Attachment",
    "Base",
    "Comment",
    "Customer",
    "CustomFieldDef",
    "Subtask",
    "Task",
    "User",
    "UserSession",
]
