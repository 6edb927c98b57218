"""Session store operations: issue, resolve, revoke and purge login sessions."""

import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from jobtracker.core.security import SESSION_LIFETIME, as_utc, new_session_id, utcnow
from jobtracker.models import User, UserSession

logger = logging.getLogger(__name__)


def create_session(db: Session, user: User, now: datetime | None = None) -> UserSession:
    """Persist a new session for user expiring SESSION_LIFETIME after issuance."""
    issued_at = now or utcnow()
    row = UserSession(
        id=new_session_id(),
        user_id=user.id,
        expires_at=issued_at + SESSION_LIFETIME,
        created_at=issued_at,
    )
    db.add(row)
    db.commit()
    return row


def delete_session(db: Session, session_id: str) -> bool:
    """
    Delete a session row, best effort.

    Store failures are rolled back and logged, never raised; returns True only
    when a row was removed.
    """
    try:
        deleted = (
            db.query(UserSession)
            .filter(UserSession.id == session_id)
            .delete(synchronize_session=False)
        )
        db.commit()
        return deleted > 0
    except SQLAlchemyError:
        db.rollback()
        logger.warning("Failed to delete session; it will be purged later", exc_info=True)
        return False


def resolve_current_user(
    db: Session,
    session_id: str | None,
    now: datetime | None = None,
) -> User | None:
    """
    Return the active user owning session_id, or None.

    An expired session never authenticates: it is removed (best effort) and None
    is returned whether or not the removal succeeds.
    """
    if not session_id:
        return None
    row = db.get(UserSession, session_id)
    if row is None:
        return None
    current = now or utcnow()
    if as_utc(row.expires_at) < current:
        logger.info("Session for user_id=%s expired at %s; removing", row.user_id, row.expires_at)
        delete_session(db, session_id)
        return None
    user = db.get(User, row.user_id)
    if user is None or not user.active:
        return None
    return user


def purge_expired_sessions(db: Session, now: datetime | None = None) -> int:
    """Delete every session past its expiry. Idempotent: safe to run repeatedly."""
    current = now or utcnow()
    deleted_count = (
        db.query(UserSession)
        .filter(UserSession.expires_at < current)
        .delete(synchronize_session=False)
    )
    db.commit()
    if deleted_count > 0:
        logger.info("Purged expired sessions: cutoff=%s, deleted=%s", current.isoformat(), deleted_count)
    return deleted_count
