"""ORM model for customers referenced by tasks and quotations."""

from sqlalchemy import Column, DateTime, Integer, String, Text, func

from jobtracker.core.security import utcnow
from jobtracker.models.base import Base


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, index=True)
    email = Column(String(320), nullable=True)
    phone = Column(String(64), nullable=True)
    company = Column(String(255), nullable=True)
    address = Column(Text, nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
    )
