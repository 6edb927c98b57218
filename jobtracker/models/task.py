"""ORM models for tasks (and quotations) with their child records."""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import relationship

from jobtracker.core.security import utcnow
from jobtracker.models.base import Base


class Task(Base):
    """
    A job in the tracker. Quotations are tasks with is_quotation set; converting a
    quotation clears the flag and schedules it.

    Children (subtasks, assignments, comments, attachments) are removed by the
    service layer, not by the database.
    """

    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    status = Column(String(32), nullable=False, default="TODO", index=True)
    priority = Column(String(16), nullable=False, default="MEDIUM")
    start_at = Column(DateTime(timezone=True), nullable=True)
    due_at = Column(DateTime(timezone=True), nullable=True)
    estimated_hours = Column(Float, nullable=True)
    actual_hours = Column(Float, nullable=True)
    customer = Column(String(255), nullable=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=True, index=True)
    job_number = Column(String(64), nullable=True)
    custom_fields = Column(JSON, nullable=False, default=dict)
    is_quotation = Column(Boolean, nullable=False, default=False, index=True)
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
    )

    customer_ref = relationship("Customer")
    created_by = relationship("User")
    assignments = relationship("Assignment", back_populates="task", order_by="Assignment.id")
    subtasks = relationship("Subtask", back_populates="task", order_by="Subtask.order")
    comments = relationship("Comment", back_populates="task", order_by="Comment.created_at")
    attachments = relationship("Attachment", back_populates="task", order_by="Attachment.id")


class Subtask(Base):
    __tablename__ = "subtasks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    task_id = Column(Integer, ForeignKey("tasks.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    status = Column(String(32), nullable=False, default="TODO")
    assignee_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    due_at = Column(DateTime(timezone=True), nullable=True)
    estimated_hours = Column(Float, nullable=True)
    order = Column(Integer, nullable=False, default=0)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    task = relationship("Task", back_populates="subtasks")
    assignee = relationship("User")


class Assignment(Base):
    """Links a user to a task; role is free text ('assignee' by default)."""

    __tablename__ = "assignments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    task_id = Column(Integer, ForeignKey("tasks.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    role = Column(String(32), nullable=False, default="assignee")

    task = relationship("Task", back_populates="assignments")
    user = relationship("User")


class Comment(Base):
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    task_id = Column(Integer, ForeignKey("tasks.id"), nullable=False, index=True)
    author_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    body = Column(Text, nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    task = relationship("Task", back_populates="comments")
    author = relationship("User")


class Attachment(Base):
    """File stored in object storage under key and served through the files API."""

    __tablename__ = "attachments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    task_id = Column(Integer, ForeignKey("tasks.id"), nullable=False, index=True)
    key = Column(String(1024), nullable=False)
    url = Column(String(2048), nullable=False)
    filename = Column(String(1024), nullable=False)
    content_type = Column(String(255), nullable=False, default="application/octet-stream")
    size = Column(Integer, nullable=False, default=0)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    task = relationship("Task", back_populates="attachments")
