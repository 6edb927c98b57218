"""Shared pydantic base model, enumerations and small response bodies."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Coarse permission tiers; ADMIN gates user management.
Role = Literal["WORKER", "MANAGER", "ADMIN"]
ROLE_VALUES: frozenset[str] = frozenset({"WORKER", "MANAGER", "ADMIN"})

TaskStatus = Literal[
    "TODO",
    "IN_PROGRESS",
    "BLOCKED",
    "DONE",
    "CANCELLED",
    "ARCHIVED",
    "CLIENT_TO_REVERT",
    "OTHERS",
]
SubtaskStatus = Literal["TODO", "IN_PROGRESS", "BLOCKED", "DONE", "CANCELLED"]
Priority = Literal["LOW", "MEDIUM", "HIGH", "URGENT"]
FieldType = Literal["TEXT", "NUMBER", "DATE", "BOOLEAN"]


class ApiModel(BaseModel):
    """Base for API bodies: camelCase on the wire, snake_case in Python, readable from ORM rows."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class OkResponse(ApiModel):
    ok: bool = Field(default=True)


class SuccessResponse(ApiModel):
    success: bool = Field(default=True)
