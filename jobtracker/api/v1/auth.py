"""Cookie-session login, logout, registration and the auth dependencies (get_current_user, require_admin)."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from jobtracker.api.dependencies import get_app_settings
from jobtracker.core.config import Settings
from jobtracker.core.database import get_db
from jobtracker.core.errors import ForbiddenError, UnauthorizedError
from jobtracker.core.security import SESSION_MAX_AGE_SECONDS
from jobtracker.models import User
from jobtracker.schemas.auth import (
    CurrentUser,
    LoginRequest,
    RegisteredUser,
    RegisterRequest,
    RegisterResponse,
)
from jobtracker.schemas.common import OkResponse
from jobtracker.services.sessions import create_session, delete_session, resolve_current_user
from jobtracker.services.users import authenticate, register_user

logger = logging.getLogger(__name__)
router = APIRouter()

INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"


def get_current_user(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> User:
    """Dependency: resolve the session cookie to a user once per request. Raises 401 if absent or expired."""
    user = getattr(request.state, "current_user", None)
    if user is None:
        session_id = request.cookies.get(settings.SESSION_COOKIE_NAME)
        user = resolve_current_user(db, session_id)
        request.state.current_user = user
    if user is None:
        raise UnauthorizedError()
    return user


def require_admin(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Dependency: require an authenticated user with role ADMIN. Raises 403 otherwise."""
    if current_user.role != "ADMIN":
        raise ForbiddenError()
    return current_user


def _set_session_cookie(response: Response, settings: Settings, session_id: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=session_id,
        max_age=SESSION_MAX_AGE_SECONDS,
        path="/",
        httponly=True,
        secure=settings.APP_ENV == "prod",
        samesite="lax",
    )


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    db: Annotated[Session, Depends(get_db)],
) -> RegisterResponse:
    """Create a WORKER account. 409 when the email is already registered."""
    user = register_user(db, body.email, body.password, body.name)
    return RegisterResponse(user=RegisteredUser.model_validate(user))


@router.post("/login", response_model=OkResponse)
def login(
    body: LoginRequest,
    response: Response,
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> OkResponse:
    """
    Authenticate with email and password; on success a 7-day session is created
    and returned in an httpOnly cookie.
    """
    user = authenticate(db, body.email, body.password)
    if user is None:
        logger.info("Rejected login attempt")
        raise UnauthorizedError(INVALID_CREDENTIALS_MESSAGE)
    session = create_session(db, user)
    _set_session_cookie(response, settings, session.id)
    logger.info("User id=%s logged in", user.id)
    return OkResponse()


@router.post("/logout", response_model=OkResponse)
def logout(
    request: Request,
    response: Response,
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> OkResponse:
    """Delete the current session (if any) and clear the cookie. Always succeeds."""
    session_id = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if session_id and delete_session(db, session_id):
        logger.info("Session ended by logout")
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=settings.APP_ENV == "prod",
        samesite="lax",
    )
    return OkResponse()


@router.get("/me", response_model=CurrentUser)
def me(current_user: Annotated[User, Depends(get_current_user)]) -> CurrentUser:
    return CurrentUser.model_validate(current_user)
