"""Schemas for user listing and admin updates."""

from datetime import datetime

from pydantic import EmailStr, Field

from jobtracker.core.security import NAME_MAX_LEN, NAME_MIN_LEN
from jobtracker.schemas.common import ApiModel, Role


class UserRef(ApiModel):
    """Minimal user reference embedded in assignments."""

    id: int
    name: str


class UserContact(UserRef):
    """User reference with email, embedded in subtasks and comments."""

    email: str


class UserOut(ApiModel):
    id: int
    name: str
    email: str
    role: Role
    active: bool
    created_at: datetime


class UserUpdate(ApiModel):
    """Admin-only partial update; omitted fields are left unchanged."""

    name: str | None = Field(default=None, min_length=NAME_MIN_LEN, max_length=NAME_MAX_LEN)
    email: EmailStr | None = None
    role: Role | None = None
    active: bool | None = None


class UserResponse(ApiModel):
    user: UserOut


class UsersListResponse(ApiModel):
    users: list[UserOut]
