"""Prescriptions on file for a customer, optionally tied to the sale that dispensed them."""
import logging
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pharmacare.core.audit import AuditLog
from pharmacare.core.exceptions import NotFoundError, ReferentialError, ValidationError, translate_integrity_error
from pharmacare.models.customer import Customer
from pharmacare.models.prescription import Prescription
from pharmacare.models.sale import Sale
from pharmacare.schemas.prescription import PrescriptionCreate

logger = logging.getLogger(__name__)


def _commit(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise translate_integrity_error(e, "prescription") from e


def create_prescription(db: Session, data: PrescriptionCreate) -> Prescription:
    if not data.doctor_name.strip():
        raise ValidationError("Doctor name cannot be blank")
    if db.get(Customer, data.customer_id) is None:
        raise ReferentialError(f"Customer {data.customer_id} does not exist")
    if data.sale_id is not None and db.get(Sale, data.sale_id) is None:
        raise ReferentialError(f"Sale {data.sale_id} does not exist")

    prescription = Prescription(**data.model_dump())
    prescription.doctor_name = prescription.doctor_name.strip()
    db.add(prescription)
    _commit(db)
    db.refresh(prescription)

    AuditLog.log_action("create", "prescription", prescription.id, changes={"customer_id": data.customer_id})
    return prescription


def get_prescription(db: Session, prescription_id: int) -> Prescription:
    prescription = db.get(Prescription, prescription_id)
    if prescription is None:
        raise NotFoundError("Prescription", prescription_id)
    return prescription


def link_prescription_to_sale(db: Session, prescription_id: int, sale_id: int) -> Prescription:
    prescription = get_prescription(db, prescription_id)
    sale = db.get(Sale, sale_id)
    if sale is None:
        raise ReferentialError(f"Sale {sale_id} does not exist")
    if sale.customer_id is not None and sale.customer_id != prescription.customer_id:
        raise ValidationError(
            f"Sale {sale_id} belongs to customer {sale.customer_id}, "
            f"prescription to customer {prescription.customer_id}"
        )

    prescription.sale_id = sale_id
    _commit(db)
    db.refresh(prescription)
    logger.info(f"[RX] Prescription {prescription_id} dispensed by sale {sale_id}")
    AuditLog.log_action("link", "prescription", prescription_id, changes={"sale_id": sale_id})
    return prescription


def list_prescriptions_for_customer(db: Session, customer_id: int) -> List[Prescription]:
    return (
        db.query(Prescription)
        .filter(Prescription.customer_id == customer_id)
        .order_by(Prescription.prescription_date.desc(), Prescription.id.desc())
        .all()
    )
