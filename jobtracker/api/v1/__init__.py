"""API routes."""

from fastapi import APIRouter

from jobtracker.api.v1 import (
    auth,
    custom_fields,
    customers,
    export,
    files,
    health,
    maintenance,
    quotations,
    subtasks,
    tasks,
    users,
)

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
router.include_router(subtasks.router, prefix="/subtasks", tags=["subtasks"])
router.include_router(quotations.router, prefix="/quotations", tags=["quotations"])
router.include_router(customers.router, prefix="/customers", tags=["customers"])
router.include_router(custom_fields.router, prefix="/custom-fields", tags=["custom-fields"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(files.router, tags=["files"])
router.include_router(export.router, prefix="/export", tags=["export"])
router.include_router(maintenance.router, prefix="/maintenance", tags=["maintenance"])
