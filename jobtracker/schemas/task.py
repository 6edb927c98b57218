"""Schemas for tasks, quotations and their child records (subtasks, comments, attachments)."""

from datetime import datetime
from typing import Any

from pydantic import Field, model_validator

from jobtracker.core.security import as_utc
from jobtracker.schemas.common import ApiModel, Priority, SubtaskStatus, TaskStatus
from jobtracker.schemas.customer import CustomerRef
from jobtracker.schemas.user import UserContact, UserRef

TITLE_MAX_LENGTH = 255
JOB_NUMBER_MAX_LENGTH = 64
COMMENT_MAX_LENGTH = 10_000

# Pagination bounds for GET /tasks.
DEFAULT_PAGE_LIMIT = 50
MAX_PAGE_LIMIT = 200


class AssignmentOut(ApiModel):
    id: int
    user_id: int
    role: str
    user: UserRef


class SubtaskSummary(ApiModel):
    """Subtask fields embedded in task listings."""

    id: int
    title: str
    status: SubtaskStatus
    assignee_id: int | None = None
    due_at: datetime | None = None
    order: int


class TaskOut(ApiModel):
    id: int
    title: str
    description: str
    status: TaskStatus
    priority: Priority
    start_at: datetime | None = None
    due_at: datetime | None = None
    estimated_hours: float | None = None
    actual_hours: float | None = None
    customer: str | None = None
    customer_id: int | None = None
    job_number: str | None = None
    custom_fields: dict[str, Any] = Field(default_factory=dict)
    is_quotation: bool
    created_by_id: int | None = None
    created_at: datetime
    updated_at: datetime
    customer_ref: CustomerRef | None = None
    assignments: list[AssignmentOut] = Field(default_factory=list)
    subtasks: list[SubtaskSummary] = Field(default_factory=list)


class TaskCreate(ApiModel):
    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str | None = None
    status: TaskStatus | None = None
    priority: Priority | None = None
    start_at: datetime | None = None
    due_at: datetime | None = None
    estimated_hours: float | None = Field(default=None, ge=0)
    actual_hours: float | None = Field(default=None, ge=0)
    customer: str | None = Field(default=None, max_length=255)
    customer_id: int | None = None
    job_number: str | None = Field(default=None, max_length=JOB_NUMBER_MAX_LENGTH)
    custom_fields: dict[str, Any] | None = None
    assignee_id: int | None = None
    is_quotation: bool = False


class TaskUpdate(ApiModel):
    """Partial update; only fields present in the body are applied."""

    title: str | None = Field(default=None, min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str | None = None
    status: TaskStatus | None = None
    priority: Priority | None = None
    start_at: datetime | None = None
    due_at: datetime | None = None
    estimated_hours: float | None = Field(default=None, ge=0)
    actual_hours: float | None = Field(default=None, ge=0)
    customer: str | None = Field(default=None, max_length=255)
    customer_id: int | None = None
    job_number: str | None = Field(default=None, max_length=JOB_NUMBER_MAX_LENGTH)
    custom_fields: dict[str, Any] | None = None
    assignee_id: int | None = None


class Pagination(ApiModel):
    total: int
    limit: int
    offset: int
    has_more: bool


class TaskResponse(ApiModel):
    task: TaskOut


class TasksListResponse(ApiModel):
    tasks: list[TaskOut]
    pagination: Pagination


class QuotationCreate(ApiModel):
    """A quotation is an unscheduled task; dates are set on conversion."""

    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str | None = None
    status: TaskStatus | None = None
    priority: Priority | None = None
    estimated_hours: float | None = Field(default=None, ge=0)
    customer: str | None = Field(default=None, max_length=255)
    customer_id: int | None = None
    job_number: str | None = Field(default=None, max_length=JOB_NUMBER_MAX_LENGTH)
    custom_fields: dict[str, Any] | None = None
    assignee_id: int | None = None


class QuotationUpdate(ApiModel):
    title: str | None = Field(default=None, min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str | None = None
    status: TaskStatus | None = None
    priority: Priority | None = None
    estimated_hours: float | None = Field(default=None, ge=0)
    customer: str | None = Field(default=None, max_length=255)
    customer_id: int | None = None
    job_number: str | None = Field(default=None, max_length=JOB_NUMBER_MAX_LENGTH)
    custom_fields: dict[str, Any] | None = None
    assignee_id: int | None = None


class ConvertQuotationRequest(ApiModel):
    start_at: datetime
    due_at: datetime

    @model_validator(mode="after")
    def check_dates(self) -> "ConvertQuotationRequest":
        # Naive values are read as UTC so mixed inputs compare.
        self.start_at = as_utc(self.start_at)
        self.due_at = as_utc(self.due_at)
        if self.due_at < self.start_at:
            raise ValueError("dueAt must not be before startAt")
        return self


class QuotationResponse(ApiModel):
    quotation: TaskOut


class QuotationsListResponse(ApiModel):
    quotations: list[TaskOut]


class SubtaskOut(ApiModel):
    id: int
    task_id: int
    title: str
    status: SubtaskStatus
    assignee_id: int | None = None
    assignee: UserContact | None = None
    due_at: datetime | None = None
    estimated_hours: float | None = None
    order: int
    created_at: datetime


class TaskSubtaskCreate(ApiModel):
    """Body for POST /tasks/{id}/subtasks; order defaults to the end of the list."""

    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)
    status: SubtaskStatus | None = None
    assignee_id: int | None = None
    due_at: datetime | None = None
    estimated_hours: float | None = Field(default=None, ge=0)
    order: int | None = None


class SubtaskCreate(TaskSubtaskCreate):
    """Body for POST /subtasks, which names the parent task in the payload."""

    task_id: int


class SubtaskUpdate(ApiModel):
    title: str | None = Field(default=None, min_length=1, max_length=TITLE_MAX_LENGTH)
    status: SubtaskStatus | None = None
    assignee_id: int | None = None
    due_at: datetime | None = None
    estimated_hours: float | None = Field(default=None, ge=0)
    order: int | None = None


class SubtaskResponse(ApiModel):
    subtask: SubtaskOut


class SubtasksListResponse(ApiModel):
    subtasks: list[SubtaskOut]


class CommentCreate(ApiModel):
    body: str = Field(..., min_length=1, max_length=COMMENT_MAX_LENGTH)


class CommentOut(ApiModel):
    id: int
    task_id: int
    author_id: int | None = None
    author: UserContact | None = None
    body: str
    created_at: datetime


class CommentResponse(ApiModel):
    comment: CommentOut


class CommentsListResponse(ApiModel):
    comments: list[CommentOut]


class AttachmentOut(ApiModel):
    id: int
    task_id: int
    key: str
    url: str
    filename: str
    content_type: str
    size: int
    created_at: datetime


class AttachmentsListResponse(ApiModel):
    attachments: list[AttachmentOut]
