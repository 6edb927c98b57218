"""Health check endpoint with database connectivity and storage configuration status."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from jobtracker.api.dependencies import get_app_settings
from jobtracker.core.config import Settings
from jobtracker.core.database import check_db_connected, get_db
from jobtracker.schemas.health import HealthResponse
from jobtracker.services.storage import ObjectStorage, get_optional_storage

router = APIRouter()


@router.get("/", response_model=HealthResponse)
def get_health(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    storage: Annotated[ObjectStorage | None, Depends(get_optional_storage)],
) -> HealthResponse:
    """
    Return service health status and database connectivity.
    Used by load balancers and monitoring; requires no session.
    """
    db_status = "connected" if check_db_connected(db) else "disconnected"

    return HealthResponse(
        status="ok",
        environment=settings.APP_ENV,
        database=db_status,
        storage="configured" if storage is not None else "not_configured",
    )
