"""Customers: walk-in buyers we keep a record of, mostly for repeat prescriptions."""
import logging
from typing import List

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pharmacare.core.audit import AuditLog
from pharmacare.core.exceptions import NotFoundError, ValidationError, translate_integrity_error
from pharmacare.models.customer import Customer
from pharmacare.models.sale import Sale
from pharmacare.schemas.customer import CustomerCreate, CustomerUpdate, CustomerWithStats

logger = logging.getLogger(__name__)


def _clean(data: dict) -> dict:
    if "name" in data:
        if data["name"] is None or not data["name"].strip():
            raise ValidationError("Customer name cannot be blank")
        data["name"] = " ".join(data["name"].split())
    for field in ("phone", "email"):
        if data.get(field) is not None:
            data[field] = data[field].strip() or None
    return data


def create_customer(db: Session, data: CustomerCreate) -> Customer:
    customer = Customer(**_clean(data.model_dump()))
    db.add(customer)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise translate_integrity_error(e, "customer") from e
    db.refresh(customer)

    logger.info(f"[CUSTOMER] Created {customer.id} {customer.name}")
    AuditLog.log_action("create", "customer", customer.id)
    return customer


def get_customer(db: Session, customer_id: int) -> Customer:
    customer = db.get(Customer, customer_id)
    if customer is None:
        raise NotFoundError("Customer", customer_id)
    return customer


def update_customer(db: Session, customer_id: int, patch: CustomerUpdate) -> Customer:
    data = _clean(patch.model_dump(exclude_unset=True))
    customer = get_customer(db, customer_id)
    if not data:
        return customer
    for field, value in data.items():
        setattr(customer, field, value)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise translate_integrity_error(e, "customer") from e
    db.refresh(customer)
    AuditLog.log_action("update", "customer", customer.id, changes=sorted(data))
    return customer


def search_customers(db: Session, term: str, limit: int = 50) -> List[Customer]:
    """Substring match on name, phone or email."""
    pattern = f"%{term.strip()}%"
    return (
        db.query(Customer)
        .filter(
            or_(
                Customer.name.ilike(pattern),
                Customer.phone.ilike(pattern),
                Customer.email.ilike(pattern),
            )
        )
        .order_by(Customer.name)
        .limit(limit)
        .all()
    )


def customers_with_stats(db: Session) -> List[CustomerWithStats]:
    """Every customer with purchase count and last purchase date, most purchases first."""
    rows = (
        db.query(
            Customer,
            func.count(Sale.id).label("total_purchases"),
            func.max(Sale.sale_date).label("last_purchase_date"),
        )
        .outerjoin(Sale, Sale.customer_id == Customer.id)
        .group_by(Customer.id)
        .order_by(func.count(Sale.id).desc(), Customer.name)
        .all()
    )
    return [
        CustomerWithStats(
            id=customer.id,
            name=customer.name,
            phone=customer.phone,
            email=customer.email,
            total_purchases=total,
            last_purchase_date=last,
        )
        for customer, total, last in rows
    ]
