"""ORM model for user-defined custom field definitions."""

from sqlalchemy import Boolean, Column, Integer, String

from jobtracker.models.base import Base


class CustomFieldDef(Base):
    """
    Definition of a dynamically typed attribute on tasks and quotations.

    type: 'TEXT', 'NUMBER', 'DATE' or 'BOOLEAN'. Values live in Task.custom_fields
    under the definition's key.
    """

    __tablename__ = "custom_field_defs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    key = Column(String(64), nullable=False, unique=True, index=True)
    label = Column(String(255), nullable=False)
    type = Column(String(16), nullable=False)
    required = Column(Boolean, nullable=False, default=False)
    order = Column(Integer, nullable=False, default=0)
