"""Customer records."""

import logging
from typing import Any

from sqlalchemy.orm import Session

from jobtracker.core.errors import NotFoundError
from jobtracker.models import Customer, Task

logger = logging.getLogger(__name__)


def list_customers(db: Session) -> list[Customer]:
    return db.query(Customer).order_by(Customer.name, Customer.id).all()


def get_customer(db: Session, customer_id: int) -> Customer:
    customer = db.get(Customer, customer_id)
    if customer is None:
        raise NotFoundError("Customer not found")
    return customer


def create_customer(db: Session, data: dict[str, Any]) -> Customer:
    customer = Customer(**data)
    db.add(customer)
    db.commit()
    db.refresh(customer)
    logger.info("Created customer id=%s", customer.id)
    return customer


def update_customer(db: Session, customer_id: int, changes: dict[str, Any]) -> Customer:
    customer = get_customer(db, customer_id)
    for name, value in changes.items():
        if name == "name" and value is None:
            continue
        setattr(customer, name, value)
    db.commit()
    db.refresh(customer)
    return customer


def delete_customer(db: Session, customer_id: int) -> None:
    """Delete a customer and detach it from its tasks in one transaction."""
    customer = get_customer(db, customer_id)
    try:
        db.query(Task).filter(Task.customer_id == customer.id).update(
            {Task.customer_id: None}, synchronize_session=False
        )
        db.query(Customer).filter(Customer.id == customer.id).delete(synchronize_session=False)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Deleted customer id=%s", customer_id)
