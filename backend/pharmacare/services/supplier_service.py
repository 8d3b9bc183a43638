"""Suppliers and the payments made to them."""
import logging
from typing import List

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pharmacare.core.audit import AuditLog
from pharmacare.core.exceptions import (
    NotFoundError,
    ReferentialError,
    ValidationError,
    translate_integrity_error,
)
from pharmacare.models.supplier import Supplier, SupplierPayment
from pharmacare.schemas.supplier import (
    SupplierCreate,
    SupplierPaymentCreate,
    SupplierUpdate,
    SupplierWithPayments,
)
from pharmacare.services.sale_service import validate_payment_mode

logger = logging.getLogger(__name__)


def _commit(db: Session, context: str) -> None:
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise translate_integrity_error(e, context) from e


def _check_name(data: dict) -> None:
    if "name" in data and (data["name"] is None or not data["name"].strip()):
        raise ValidationError("Supplier name cannot be blank")


def create_supplier(db: Session, data: SupplierCreate) -> Supplier:
    values = data.model_dump()
    _check_name(values)
    values["name"] = values["name"].strip()

    supplier = Supplier(**values)
    db.add(supplier)
    _commit(db, "supplier")
    db.refresh(supplier)

    logger.info(f"[SUPPLIER] Created {supplier.id} {supplier.name}")
    AuditLog.log_action("create", "supplier", supplier.id)
    return supplier


def get_supplier(db: Session, supplier_id: int) -> Supplier:
    supplier = db.get(Supplier, supplier_id)
    if supplier is None:
        raise NotFoundError("Supplier", supplier_id)
    return supplier


def update_supplier(db: Session, supplier_id: int, patch: SupplierUpdate) -> Supplier:
    data = patch.model_dump(exclude_unset=True)
    _check_name(data)
    supplier = get_supplier(db, supplier_id)
    if not data:
        return supplier
    for field, value in data.items():
        setattr(supplier, field, value.strip() if field == "name" else value)
    _commit(db, "supplier")
    db.refresh(supplier)
    AuditLog.log_action("update", "supplier", supplier.id, changes=sorted(data))
    return supplier


def search_suppliers(db: Session, term: str, limit: int = 50) -> List[Supplier]:
    pattern = f"%{term.strip()}%"
    return (
        db.query(Supplier)
        .filter(or_(Supplier.name.ilike(pattern), Supplier.phone.ilike(pattern)))
        .order_by(Supplier.name)
        .limit(limit)
        .all()
    )


def record_supplier_payment(db: Session, supplier_id: int, data: SupplierPaymentCreate) -> SupplierPayment:
    """Payment out to a supplier. Amount must be positive; the supplier must exist."""
    if data.amount_paise <= 0:
        raise ValidationError(f"Payment amount must be positive, got {data.amount_paise}")
    validate_payment_mode(data.payment_mode)
    if db.get(Supplier, supplier_id) is None:
        raise ReferentialError(f"Supplier {supplier_id} does not exist")

    payment = SupplierPayment(supplier_id=supplier_id, **data.model_dump())
    db.add(payment)
    _commit(db, "supplier payment")
    db.refresh(payment)

    logger.info(f"[SUPPLIER] Payment {payment.amount_paise} to supplier {supplier_id}")
    AuditLog.log_action(
        "payment", "supplier", supplier_id,
        changes={"amount_paise": payment.amount_paise, "mode": payment.payment_mode},
    )
    return payment


def list_supplier_payments(db: Session, supplier_id: int) -> List[SupplierPayment]:
    return (
        db.query(SupplierPayment)
        .filter(SupplierPayment.supplier_id == supplier_id)
        .order_by(SupplierPayment.payment_date.desc(), SupplierPayment.id.desc())
        .all()
    )


def suppliers_with_payments(db: Session) -> List[SupplierWithPayments]:
    """Every supplier with the total paid to date."""
    total = func.coalesce(func.sum(SupplierPayment.amount_paise), 0)
    rows = (
        db.query(Supplier, total.label("total_payments_paise"))
        .outerjoin(SupplierPayment, SupplierPayment.supplier_id == Supplier.id)
        .group_by(Supplier.id)
        .order_by(Supplier.name)
        .all()
    )
    return [
        SupplierWithPayments(
            id=supplier.id,
            name=supplier.name,
            gst_in=supplier.gst_in,
            total_payments_paise=int(paid),
        )
        for supplier, paid in rows
    ]
