"""Request/response schemas for auth endpoints."""

from pydantic import EmailStr, Field

from jobtracker.core.security import (
    NAME_MAX_LEN,
    NAME_MIN_LEN,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
)
from jobtracker.schemas.common import ApiModel, Role


class LoginRequest(ApiModel):
    """Credentials for login."""

    email: EmailStr = Field(..., description="Account email")
    password: str = Field(
        ...,
        min_length=1,
        max_length=PASSWORD_MAX_LEN,
        description="Password",
    )


class RegisterRequest(ApiModel):
    """New account details; the role defaults to WORKER."""

    email: EmailStr = Field(..., description="Account email (unique)")
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
    name: str = Field(..., min_length=NAME_MIN_LEN, max_length=NAME_MAX_LEN)


class RegisteredUser(ApiModel):
    id: int
    email: str
    name: str
    role: Role


class RegisterResponse(ApiModel):
    user: RegisteredUser


class CurrentUser(ApiModel):
    """Authenticated user as returned by GET /auth/me."""

    id: int
    name: str
    email: str
    role: Role
    active: bool
