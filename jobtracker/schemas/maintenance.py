"""Schemas for maintenance endpoints."""

from datetime import datetime

from jobtracker.schemas.common import ApiModel


class CleanupResponse(ApiModel):
    ok: bool = True
    deleted_objects: int
    tasks_updated: int
    cutoff: datetime
