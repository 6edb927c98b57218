"""User accounts: registration, credential checks and admin management."""

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from jobtracker.core.errors import BadRequestError, ConflictError, NotFoundError
from jobtracker.core.security import hash_password, verify_password
from jobtracker.models import Assignment, Comment, Subtask, Task, User, UserSession

logger = logging.getLogger(__name__)

EMAIL_IN_USE_MESSAGE = "Email already in use"


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def register_user(
    db: Session,
    email: str,
    password: str,
    name: str,
    role: str = "WORKER",
) -> User:
    """Create a user with a bcrypt hash. Raises ConflictError when the email is taken."""
    email = normalize_email(email)
    if get_user_by_email(db, email) is not None:
        raise ConflictError(EMAIL_IN_USE_MESSAGE)
    user = User(
        email=email,
        name=name.strip(),
        password_hash=hash_password(password),
        role=role,
        active=True,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        # Concurrent registration with the same email lost the race on the unique index.
        db.rollback()
        raise ConflictError(EMAIL_IN_USE_MESSAGE) from e
    db.refresh(user)
    logger.info("Registered user id=%s role=%s", user.id, user.role)
    return user


def authenticate(db: Session, email: str, password: str) -> User | None:
    """
    Return the user for valid credentials, else None.

    Unknown email, wrong password and inactive accounts are indistinguishable to callers.
    """
    user = get_user_by_email(db, email)
    if user is None:
        return None
    if not verify_password(password, user.password_hash):
        return None
    if not user.active:
        return None
    return user


def list_active_users(db: Session) -> list[User]:
    return db.query(User).filter(User.active.is_(True)).order_by(User.name, User.id).all()


def update_user(db: Session, user_id: int, changes: dict[str, Any]) -> User:
    user = get_user(db, user_id)
    if "email" in changes and changes["email"] is not None:
        email = normalize_email(changes["email"])
        other = get_user_by_email(db, email)
        if other is not None and other.id != user.id:
            raise ConflictError(EMAIL_IN_USE_MESSAGE)
        user.email = email
    for field in ("name", "role", "active"):
        if field in changes and changes[field] is not None:
            setattr(user, field, changes[field])
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ConflictError(EMAIL_IN_USE_MESSAGE) from e
    db.refresh(user)
    logger.info("Updated user id=%s fields=%s", user.id, sorted(changes))
    return user


def delete_user(db: Session, acting_user: User, user_id: int) -> None:
    """
    Delete a user and everything that only makes sense with them present.

    Sessions and assignments are removed; tasks, subtasks and comments are kept
    and detached. Runs in one transaction.
    """
    if user_id == acting_user.id:
        raise BadRequestError("Cannot delete your own account")
    user = get_user(db, user_id)
    try:
        db.query(UserSession).filter(UserSession.user_id == user.id).delete(synchronize_session=False)
        db.query(Assignment).filter(Assignment.user_id == user.id).delete(synchronize_session=False)
        db.query(Subtask).filter(Subtask.assignee_id == user.id).update(
            {Subtask.assignee_id: None}, synchronize_session=False
        )
        db.query(Comment).filter(Comment.author_id == user.id).update(
            {Comment.author_id: None}, synchronize_session=False
        )
        db.query(Task).filter(Task.created_by_id == user.id).update(
            {Task.created_by_id: None}, synchronize_session=False
        )
        db.query(User).filter(User.id == user.id).delete(synchronize_session=False)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Deleted user id=%s by admin id=%s", user_id, acting_user.id)
