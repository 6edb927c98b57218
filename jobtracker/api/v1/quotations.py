"""Quotation endpoints: quotes are unscheduled tasks that can be converted into tasks."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from jobtracker.api.v1.auth import get_current_user
from jobtracker.core.database import get_db
from jobtracker.models import User
from jobtracker.schemas.common import SuccessResponse
from jobtracker.schemas.task import (
    ConvertQuotationRequest,
    QuotationCreate,
    QuotationResponse,
    QuotationsListResponse,
    QuotationUpdate,
    TaskOut,
    TaskResponse,
)
from jobtracker.services import quotations as quotation_service
from jobtracker.services.storage import ObjectStorage, delete_objects_best_effort, get_optional_storage

router = APIRouter()


@router.get("", response_model=QuotationsListResponse)
def list_quotations(
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[User, Depends(get_current_user)],
) -> QuotationsListResponse:
    quotations = quotation_service.list_quotations(db)
    return QuotationsListResponse(quotations=[TaskOut.model_validate(q) for q in quotations])


@router.post("", response_model=QuotationResponse, status_code=status.HTTP_201_CREATED)
def create_quotation(
    body: QuotationCreate,
    db: Annotated[Session, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
) -> QuotationResponse:
    quotation = quotation_service.create_quotation(db, user, body.model_dump())
    return QuotationResponse(quotation=TaskOut.model_validate(quotation))


@router.patch("/{quotation_id}", response_model=QuotationResponse)
def update_quotation(
    quotation_id: int,
    body: QuotationUpdate,
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[User, Depends(get_current_user)],
) -> QuotationResponse:
    """Partial update. 400 when the id belongs to a regular task."""
    quotation = quotation_service.update_quotation(
        db, quotation_id, body.model_dump(exclude_unset=True)
    )
    return QuotationResponse(quotation=TaskOut.model_validate(quotation))


@router.delete("/{quotation_id}", response_model=SuccessResponse)
def delete_quotation(
    quotation_id: int,
    db: Annotated[Session, Depends(get_db)],
    storage: Annotated[ObjectStorage | None, Depends(get_optional_storage)],
    _user: Annotated[User, Depends(get_current_user)],
) -> SuccessResponse:
    keys = quotation_service.delete_quotation(db, quotation_id)
    delete_objects_best_effort(storage, keys)
    return SuccessResponse()


@router.post("/{quotation_id}/convert", response_model=TaskResponse)
def convert_quotation(
    quotation_id: int,
    body: ConvertQuotationRequest,
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[User, Depends(get_current_user)],
) -> TaskResponse:
    """Schedule the quotation with startAt/dueAt and turn it into a regular task."""
    task = quotation_service.convert_to_task(db, quotation_id, body.start_at, body.due_at)
    return TaskResponse(task=TaskOut.model_validate(task))
