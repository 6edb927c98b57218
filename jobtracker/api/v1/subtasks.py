"""Subtask endpoints addressed by subtask id (or by taskId query for listing)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from jobtracker.api.v1.auth import get_current_user
from jobtracker.core.database import get_db
from jobtracker.core.errors import BadRequestError
from jobtracker.models import User
from jobtracker.schemas.common import OkResponse
from jobtracker.schemas.task import (
    SubtaskCreate,
    SubtaskOut,
    SubtaskResponse,
    SubtasksListResponse,
    SubtaskUpdate,
)
from jobtracker.services import subtasks as subtask_service

router = APIRouter()


@router.get("", response_model=SubtasksListResponse)
def list_subtasks(
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[User, Depends(get_current_user)],
    task_id: Annotated[int | None, Query(alias="taskId")] = None,
) -> SubtasksListResponse:
    """Subtasks of one task in display order. taskId is required."""
    if task_id is None:
        raise BadRequestError("Task ID is required", fields={"taskId": ["Field required"]})
    subtasks = subtask_service.list_subtasks(db, task_id)
    return SubtasksListResponse(subtasks=[SubtaskOut.model_validate(s) for s in subtasks])


@router.post("", response_model=SubtaskResponse, status_code=status.HTTP_201_CREATED)
def create_subtask(
    body: SubtaskCreate,
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[User, Depends(get_current_user)],
) -> SubtaskResponse:
    """Append a subtask to taskId; order continues after the task's last subtask."""
    data = body.model_dump(exclude={"task_id"})
    subtask = subtask_service.create_subtask(db, body.task_id, data)
    return SubtaskResponse(subtask=SubtaskOut.model_validate(subtask))


@router.get("/{subtask_id}", response_model=SubtaskResponse)
def get_subtask(
    subtask_id: int,
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[User, Depends(get_current_user)],
) -> SubtaskResponse:
    return SubtaskResponse(subtask=SubtaskOut.model_validate(subtask_service.get_subtask(db, subtask_id)))


@router.patch("/{subtask_id}", response_model=SubtaskResponse)
def update_subtask(
    subtask_id: int,
    body: SubtaskUpdate,
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[User, Depends(get_current_user)],
) -> SubtaskResponse:
    subtask = subtask_service.update_subtask(db, subtask_id, body.model_dump(exclude_unset=True))
    return SubtaskResponse(subtask=SubtaskOut.model_validate(subtask))


@router.delete("/{subtask_id}", response_model=OkResponse)
def delete_subtask(
    subtask_id: int,
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[User, Depends(get_current_user)],
) -> OkResponse:
    subtask_service.delete_subtask(db, subtask_id)
    return OkResponse()
