"""Pydantic request/response schemas."""

from jobtracker.schemas.auth import CurrentUser, LoginRequest, RegisterRequest
from jobtracker.schemas.common import (
    ApiModel,
    FieldType,
    OkResponse,
    Priority,
    Role,
    SubtaskStatus,
    SuccessResponse,
    TaskStatus,
)
from jobtracker.schemas.health import HealthResponse

__all__ = [
    "ApiModel",
    "CurrentUser",
    "FieldType",
    "HealthResponse",
    "LoginRequest",
    "OkResponse",
    "Priority",
    "RegisterRequest",
    "Role",
    "SubtaskStatus",
    "SuccessResponse",
    "TaskStatus",
]
