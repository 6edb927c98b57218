"""Customer endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from jobtracker.api.v1.auth import get_current_user
from jobtracker.core.database import get_db
from jobtracker.models import User
from jobtracker.schemas.common import OkResponse
from jobtracker.schemas.customer import (
    CustomerCreate,
    CustomerOut,
    CustomerResponse,
    CustomersListResponse,
    CustomerUpdate,
)
from jobtracker.services import customers as customer_service

router = APIRouter()


@router.get("", response_model=CustomersListResponse)
def list_customers(
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[User, Depends(get_current_user)],
) -> CustomersListResponse:
    customers = customer_service.list_customers(db)
    return CustomersListResponse(customers=[CustomerOut.model_validate(c) for c in customers])


@router.post("", response_model=CustomerResponse, status_code=status.HTTP_201_CREATED)
def create_customer(
    body: CustomerCreate,
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[User, Depends(get_current_user)],
) -> CustomerResponse:
    customer = customer_service.create_customer(db, body.model_dump())
    return CustomerResponse(customer=CustomerOut.model_validate(customer))


@router.get("/{customer_id}", response_model=CustomerResponse)
def get_customer(
    customer_id: int,
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[User, Depends(get_current_user)],
) -> CustomerResponse:
    return CustomerResponse(
        customer=CustomerOut.model_validate(customer_service.get_customer(db, customer_id))
    )


@router.patch("/{customer_id}", response_model=CustomerResponse)
def update_customer(
    customer_id: int,
    body: CustomerUpdate,
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[User, Depends(get_current_user)],
) -> CustomerResponse:
    customer = customer_service.update_customer(db, customer_id, body.model_dump(exclude_unset=True))
    return CustomerResponse(customer=CustomerOut.model_validate(customer))


@router.delete("/{customer_id}", response_model=OkResponse)
def delete_customer(
    customer_id: int,
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[User, Depends(get_current_user)],
) -> OkResponse:
    """Delete the customer; its tasks are kept and detached."""
    customer_service.delete_customer(db, customer_id)
    return OkResponse()
