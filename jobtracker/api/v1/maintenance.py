"""Maintenance endpoints called by a scheduler (cron) or an administrator."""

import math
import secrets
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from jobtracker.api.dependencies import get_app_settings
from jobtracker.core.config import Settings
from jobtracker.core.database import get_db
from jobtracker.core.errors import UnauthorizedError
from jobtracker.schemas.maintenance import CleanupResponse
from jobtracker.services.retention import DEFAULT_ATTACHMENT_RETENTION_DAYS, cleanup_archived_attachments
from jobtracker.services.sessions import resolve_current_user
from jobtracker.services.storage import ObjectStorage, get_storage

router = APIRouter()

CRON_SECRET_HEADER = "X-Cron-Secret"


def _has_cron_secret(request: Request, settings: Settings) -> bool:
    expected = settings.CRON_SECRET.get_secret_value() if settings.CRON_SECRET else ""
    provided = request.headers.get(CRON_SECRET_HEADER, "")
    if not expected or not provided:
        return False
    return secrets.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


def require_cron_or_admin(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> None:
    """Dependency: allow a caller holding the cron secret or an ADMIN session. Raises 401 otherwise."""
    if _has_cron_secret(request, settings):
        return
    user = resolve_current_user(db, request.cookies.get(settings.SESSION_COOKIE_NAME))
    if user is None or user.role != "ADMIN":
        raise UnauthorizedError()


def _parse_days(days: str | None) -> float:
    try:
        value = float(days) if days is not None else DEFAULT_ATTACHMENT_RETENTION_DAYS
    except ValueError:
        return DEFAULT_ATTACHMENT_RETENTION_DAYS
    if not math.isfinite(value) or value <= 0:
        return DEFAULT_ATTACHMENT_RETENTION_DAYS
    return value


@router.api_route(
    "/cleanup-attachments",
    methods=["GET", "POST"],
    response_model=CleanupResponse,
    dependencies=[Depends(require_cron_or_admin)],
)
def cleanup_attachments(
    db: Annotated[Session, Depends(get_db)],
    storage: Annotated[ObjectStorage, Depends(get_storage)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    days: Annotated[str | None, Query()] = None,
) -> CleanupResponse:
    """
    Delete stored files of tasks ARCHIVED and not updated for `days` days.

    A missing, malformed, non-finite or non-positive `days` falls back to 10;
    values above 3650 are capped.
    """
    result = cleanup_archived_attachments(db, storage, settings.API_PREFIX, days=_parse_days(days))
    return CleanupResponse(
        deleted_objects=result.deleted_objects,
        tasks_updated=result.tasks_updated,
        cutoff=result.cutoff,
    )
