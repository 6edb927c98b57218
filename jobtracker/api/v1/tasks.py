"""Task endpoints, including the per-task subtask, comment and attachment collections."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from jobtracker.api.v1.auth import get_current_user
from jobtracker.core.database import get_db
from jobtracker.models import User
from jobtracker.schemas.common import SuccessResponse
from jobtracker.schemas.task import (
    DEFAULT_PAGE_LIMIT,
    MAX_PAGE_LIMIT,
    AttachmentOut,
    AttachmentsListResponse,
    CommentCreate,
    CommentOut,
    CommentResponse,
    CommentsListResponse,
    Pagination,
    SubtaskOut,
    SubtaskResponse,
    SubtasksListResponse,
    TaskCreate,
    TaskOut,
    TaskResponse,
    TasksListResponse,
    TaskSubtaskCreate,
    TaskUpdate,
)
from jobtracker.services import comments as comment_service
from jobtracker.services import subtasks as subtask_service
from jobtracker.services import tasks as task_service
from jobtracker.services.files import list_attachments
from jobtracker.services.storage import ObjectStorage, delete_objects_best_effort, get_optional_storage

router = APIRouter()


@router.get("", response_model=TasksListResponse)
def list_tasks(
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[User, Depends(get_current_user)],
    limit: Annotated[int, Query(ge=1, le=MAX_PAGE_LIMIT)] = DEFAULT_PAGE_LIMIT,
    offset: Annotated[int, Query(ge=0)] = 0,
    include_archived: Annotated[bool, Query(alias="includeArchived")] = False,
    include_quotations: Annotated[bool, Query(alias="includeQuotations")] = False,
) -> TasksListResponse:
    """
    Page through tasks, newest first.

    Archived tasks and quotations are hidden unless includeArchived /
    includeQuotations are true.
    """
    tasks, total = task_service.list_tasks(
        db,
        limit=limit,
        offset=offset,
        include_archived=include_archived,
        include_quotations=include_quotations,
    )
    return TasksListResponse(
        tasks=[TaskOut.model_validate(t) for t in tasks],
        pagination=Pagination(
            total=total,
            limit=limit,
            offset=offset,
            has_more=offset + limit < total,
        ),
    )


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    body: TaskCreate,
    db: Annotated[Session, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
) -> TaskResponse:
    task = task_service.create_task(db, user, body.model_dump())
    return TaskResponse(task=TaskOut.model_validate(task))


@router.get("/{task_id}", response_model=TaskResponse)
def get_task(
    task_id: int,
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[User, Depends(get_current_user)],
) -> TaskResponse:
    return TaskResponse(task=TaskOut.model_validate(task_service.get_task(db, task_id)))


@router.patch("/{task_id}", response_model=TaskResponse)
def update_task(
    task_id: int,
    body: TaskUpdate,
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[User, Depends(get_current_user)],
) -> TaskResponse:
    """Partial update; assigneeId replaces the task's assignments."""
    task = task_service.update_task(db, task_id, body.model_dump(exclude_unset=True))
    return TaskResponse(task=TaskOut.model_validate(task))


@router.delete("/{task_id}", response_model=SuccessResponse)
def delete_task(
    task_id: int,
    db: Annotated[Session, Depends(get_db)],
    storage: Annotated[ObjectStorage | None, Depends(get_optional_storage)],
    _user: Annotated[User, Depends(get_current_user)],
) -> SuccessResponse:
    """
    Delete the task with its subtasks, assignments, comments and attachments in
    one transaction, then remove the attachment files from storage (best effort).
    """
    keys = task_service.delete_task(db, task_id)
    delete_objects_best_effort(storage, keys)
    return SuccessResponse()


@router.get("/{task_id}/subtasks", response_model=SubtasksListResponse)
def list_task_subtasks(
    task_id: int,
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[User, Depends(get_current_user)],
) -> SubtasksListResponse:
    subtasks = subtask_service.list_subtasks(db, task_id)
    return SubtasksListResponse(subtasks=[SubtaskOut.model_validate(s) for s in subtasks])


@router.post(
    "/{task_id}/subtasks",
    response_model=SubtaskResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_task_subtask(
    task_id: int,
    body: TaskSubtaskCreate,
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[User, Depends(get_current_user)],
) -> SubtaskResponse:
    subtask = subtask_service.create_subtask(db, task_id, body.model_dump())
    return SubtaskResponse(subtask=SubtaskOut.model_validate(subtask))


@router.get("/{task_id}/comments", response_model=CommentsListResponse)
def list_task_comments(
    task_id: int,
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[User, Depends(get_current_user)],
) -> CommentsListResponse:
    comments = comment_service.list_comments(db, task_id)
    return CommentsListResponse(comments=[CommentOut.model_validate(c) for c in comments])


@router.post(
    "/{task_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_task_comment(
    task_id: int,
    body: CommentCreate,
    db: Annotated[Session, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
) -> CommentResponse:
    comment = comment_service.add_comment(db, task_id, user, body.body)
    return CommentResponse(comment=CommentOut.model_validate(comment))


@router.get("/{task_id}/attachments", response_model=AttachmentsListResponse)
def list_task_attachments(
    task_id: int,
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[User, Depends(get_current_user)],
) -> AttachmentsListResponse:
    attachments = list_attachments(db, task_id)
    return AttachmentsListResponse(attachments=[AttachmentOut.model_validate(a) for a in attachments])
