"""Custom field definitions and validation of task custom field values against them."""

import logging
from datetime import date, datetime
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from jobtracker.core.errors import BadRequestError, ConflictError, NotFoundError
from jobtracker.models import CustomFieldDef

logger = logging.getLogger(__name__)

# Keys the application itself writes into custom_fields; never validated against definitions.
SYSTEM_KEYS: frozenset[str] = frozenset({"attachments", "paymentStatus"})


def list_fields(db: Session) -> list[CustomFieldDef]:
    return db.query(CustomFieldDef).order_by(CustomFieldDef.order, CustomFieldDef.id).all()


def get_field(db: Session, field_id: int) -> CustomFieldDef:
    field = db.get(CustomFieldDef, field_id)
    if field is None:
        raise NotFoundError("Custom field not found")
    return field


def create_field(db: Session, data: dict[str, Any]) -> CustomFieldDef:
    key = data["key"]
    if key in SYSTEM_KEYS:
        raise BadRequestError(f"'{key}' is reserved", fields={"key": ["reserved key"]})
    if db.query(CustomFieldDef).filter(CustomFieldDef.key == key).first() is not None:
        raise ConflictError(f"Custom field '{key}' already exists")
    field = CustomFieldDef(
        key=key,
        label=data["label"],
        type=data["type"],
        required=data.get("required") or False,
        order=data.get("order") or 0,
    )
    db.add(field)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ConflictError(f"Custom field '{key}' already exists") from e
    db.refresh(field)
    logger.info("Created custom field key=%s type=%s", field.key, field.type)
    return field


def update_field(db: Session, field_id: int, changes: dict[str, Any]) -> CustomFieldDef:
    field = get_field(db, field_id)
    for name in ("label", "type", "required", "order"):
        if name in changes and changes[name] is not None:
            setattr(field, name, changes[name])
    db.commit()
    db.refresh(field)
    return field


def delete_field(db: Session, field_id: int) -> None:
    """Remove a definition. Stored values under its key are left on tasks untouched."""
    field = get_field(db, field_id)
    db.delete(field)
    db.commit()
    logger.info("Deleted custom field key=%s", field.key)


def _is_iso_date(value: str) -> bool:
    try:
        date.fromisoformat(value)
        return True
    except ValueError:
        pass
    try:
        datetime.fromisoformat(value)
        return True
    except ValueError:
        return False


def _type_error(field_type: str, value: Any) -> str | None:
    """Return a message when value does not fit field_type, else None."""
    if field_type == "TEXT":
        return None if isinstance(value, str) else "must be a string"
    if field_type == "NUMBER":
        ok = isinstance(value, (int, float)) and not isinstance(value, bool)
        return None if ok else "must be a number"
    if field_type == "BOOLEAN":
        return None if isinstance(value, bool) else "must be true or false"
    if field_type == "DATE":
        ok = isinstance(value, str) and _is_iso_date(value)
        return None if ok else "must be an ISO-8601 date"
    return f"has unknown type {field_type}"


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_custom_fields(
    db: Session,
    values: dict[str, Any] | None,
    *,
    enforce_required: bool = False,
) -> dict[str, Any]:
    """
    Check values against the custom field definitions and return a copy to store.

    Keys without a definition pass through unchanged. None clears a value.
    Raises BadRequestError with per-field messages.
    """
    values = dict(values or {})
    errors: dict[str, list[str]] = {}
    for definition in list_fields(db):
        value = values.get(definition.key)
        if _is_empty(value):
            if enforce_required and definition.required:
                errors.setdefault(definition.key, []).append("is required")
            continue
        message = _type_error(definition.type, value)
        if message:
            errors.setdefault(definition.key, []).append(message)
    if errors:
        summary = ", ".join(f"{key} {msgs[0]}" for key, msgs in errors.items())
        raise BadRequestError(
            f"Invalid custom fields: {summary}",
            fields={f"customFields.{key}": msgs for key, msgs in errors.items()},
        )
    return values
