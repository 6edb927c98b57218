"""User directory and admin-only user management."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from jobtracker.api.v1.auth import get_current_user, require_admin
from jobtracker.core.database import get_db
from jobtracker.models import User
from jobtracker.schemas.common import SuccessResponse
from jobtracker.schemas.user import UserOut, UserResponse, UsersListResponse, UserUpdate
from jobtracker.services import users as user_service

router = APIRouter()


@router.get("", response_model=UsersListResponse)
def list_users(
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[User, Depends(get_current_user)],
) -> UsersListResponse:
    """Active users, by name. Any signed-in user may list them (for assignment pickers)."""
    users = user_service.list_active_users(db)
    return UsersListResponse(users=[UserOut.model_validate(u) for u in users])


@router.patch("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    body: UserUpdate,
    db: Annotated[Session, Depends(get_db)],
    _admin: Annotated[User, Depends(require_admin)],
) -> UserResponse:
    """Change name, email, role or active flag (admin only)."""
    user = user_service.update_user(db, user_id, body.model_dump(exclude_unset=True))
    return UserResponse(user=UserOut.model_validate(user))


@router.delete("/{user_id}", response_model=SuccessResponse)
def delete_user(
    user_id: int,
    db: Annotated[Session, Depends(get_db)],
    admin: Annotated[User, Depends(require_admin)],
) -> SuccessResponse:
    """Delete a user (admin only). Admins cannot delete themselves."""
    user_service.delete_user(db, admin, user_id)
    return SuccessResponse()
