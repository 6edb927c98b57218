"""Schemas for custom field definitions."""

from pydantic import Field, field_validator

from jobtracker.schemas.common import ApiModel, FieldType

KEY_MAX_LENGTH = 64


class CustomFieldCreate(ApiModel):
    key: str = Field(..., min_length=1, max_length=KEY_MAX_LENGTH)
    label: str = Field(..., min_length=1, max_length=255)
    type: FieldType
    required: bool = False
    order: int = 0

    @field_validator("key")
    @classmethod
    def validate_key(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("key must be non-empty")
        return v


class CustomFieldUpdate(ApiModel):
    """Partial update; the key of a definition cannot change."""

    label: str | None = Field(default=None, min_length=1, max_length=255)
    type: FieldType | None = None
    required: bool | None = None
    order: int | None = None


class CustomFieldOut(ApiModel):
    id: int
    key: str
    label: str
    type: FieldType
    required: bool
    order: int


class CustomFieldResponse(ApiModel):
    field: CustomFieldOut


class CustomFieldsListResponse(ApiModel):
    fields: list[CustomFieldOut]
