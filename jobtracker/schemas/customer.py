"""Schemas for customers."""

from datetime import datetime

from pydantic import EmailStr, Field

from jobtracker.schemas.common import ApiModel


class CustomerCreate(ApiModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=64)
    company: str | None = Field(default=None, max_length=255)
    address: str | None = None


class CustomerUpdate(ApiModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=64)
    company: str | None = Field(default=None, max_length=255)
    address: str | None = None


class CustomerRef(ApiModel):
    """Customer summary embedded in tasks."""

    id: int
    name: str
    email: str | None = None


class CustomerOut(ApiModel):
    id: int
    name: str
    email: str | None = None
    phone: str | None = None
    company: str | None = None
    address: str | None = None
    created_at: datetime
    updated_at: datetime


class CustomerResponse(ApiModel):
    customer: CustomerOut


class CustomersListResponse(ApiModel):
    customers: list[CustomerOut]
