"""CSV export of tasks."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from jobtracker.api.v1.auth import get_current_user
from jobtracker.core.database import get_db
from jobtracker.models import User
from jobtracker.services.export import EXPORT_FILENAME, export_tasks_csv

router = APIRouter()


@router.get("/tasks-csv")
def export_tasks(
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[User, Depends(get_current_user)],
) -> Response:
    """Download all tasks, newest first, as a CSV attachment."""
    return Response(
        content=export_tasks_csv(db),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
    )
