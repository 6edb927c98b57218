"""Custom field definition endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from jobtracker.api.v1.auth import get_current_user
from jobtracker.core.database import get_db
from jobtracker.models import User
from jobtracker.schemas.common import OkResponse
from jobtracker.schemas.custom_field import (
    CustomFieldCreate,
    CustomFieldOut,
    CustomFieldResponse,
    CustomFieldsListResponse,
    CustomFieldUpdate,
)
from jobtracker.services import custom_fields as field_service

router = APIRouter()


@router.get("", response_model=CustomFieldsListResponse)
def list_fields(
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[User, Depends(get_current_user)],
) -> CustomFieldsListResponse:
    return CustomFieldsListResponse(
        fields=[CustomFieldOut.model_validate(f) for f in field_service.list_fields(db)]
    )


@router.post("", response_model=CustomFieldResponse, status_code=status.HTTP_201_CREATED)
def create_field(
    body: CustomFieldCreate,
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[User, Depends(get_current_user)],
) -> CustomFieldResponse:
    field = field_service.create_field(db, body.model_dump())
    return CustomFieldResponse(field=CustomFieldOut.model_validate(field))


@router.patch("/{field_id}", response_model=CustomFieldResponse)
def update_field(
    field_id: int,
    body: CustomFieldUpdate,
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[User, Depends(get_current_user)],
) -> CustomFieldResponse:
    field = field_service.update_field(db, field_id, body.model_dump(exclude_unset=True))
    return CustomFieldResponse(field=CustomFieldOut.model_validate(field))


@router.delete("/{field_id}", response_model=OkResponse)
def delete_field(
    field_id: int,
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[User, Depends(get_current_user)],
) -> OkResponse:
    field_service.delete_field(db, field_id)
    return OkResponse()
