"""Medicine catalogue and GST slab lookups."""
import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pharmacare.core.audit import AuditLog
from pharmacare.core.exceptions import NotFoundError, ReferentialError, ValidationError, translate_integrity_error
from pharmacare.models.batch import Batch
from pharmacare.models.gst_slab import GstSlab
from pharmacare.models.medicine import Medicine
from pharmacare.models.sale import SaleItem
from pharmacare.schemas.medicine import MedicineCreate, MedicineUpdate

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 50
_NOT_NULL = ("name", "dosage_form", "hsn_code", "gst_slab_id", "reorder_level", "is_active")


def list_gst_slabs(db: Session) -> List[GstSlab]:
    return db.query(GstSlab).order_by(GstSlab.rate).all()


def get_gst_slab(db: Session, slab_id: int) -> Optional[GstSlab]:
    return db.get(GstSlab, slab_id)


def _require_slab(db: Session, slab_id: int) -> GstSlab:
    slab = db.get(GstSlab, slab_id)
    if slab is None:
        logger.info(f"[MEDICINE] Unknown GST slab {slab_id}")
        raise ReferentialError(f"GST slab {slab_id} does not exist")
    return slab


def _validate(data: dict) -> None:
    for field in _NOT_NULL:
        if field in data and data[field] is None:
            raise ValidationError(f"{field} cannot be empty")
    for field in ("name", "dosage_form", "hsn_code"):
        if field in data and not data[field].strip():
            raise ValidationError(f"{field} cannot be blank")
    if "reorder_level" in data and data["reorder_level"] < 0:
        raise ValidationError("Reorder level must be zero or more")


def create_medicine(db: Session, data: MedicineCreate) -> Medicine:
    """Create a catalogue entry. The GST slab must exist, else ReferentialError and no row."""
    values = data.model_dump()
    _validate(values)
    _require_slab(db, data.gst_slab_id)

    medicine = Medicine(**values)
    medicine.name = medicine.name.strip()
    db.add(medicine)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise translate_integrity_error(e, "medicine") from e
    db.refresh(medicine)

    logger.info(f"[MEDICINE] Created {medicine.id} {medicine.name}")
    AuditLog.log_action("create", "medicine", medicine.id, changes={"name": medicine.name})
    return medicine


def get_medicine(db: Session, medicine_id: int) -> Medicine:
    medicine = db.get(Medicine, medicine_id)
    if medicine is None:
        raise NotFoundError("Medicine", medicine_id)
    return medicine


def update_medicine(db: Session, medicine_id: int, patch: MedicineUpdate) -> Medicine:
    data = patch.model_dump(exclude_unset=True)
    _validate(data)
    medicine = get_medicine(db, medicine_id)
    if "gst_slab_id" in data:
        _require_slab(db, data["gst_slab_id"])
    if not data:
        return medicine

    for field, value in data.items():
        setattr(medicine, field, value.strip() if field == "name" else value)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise translate_integrity_error(e, "medicine") from e
    db.refresh(medicine)

    AuditLog.log_action("update", "medicine", medicine.id, changes=data)
    return medicine


def deactivate_medicine(db: Session, medicine_id: int) -> Medicine:
    """Soft delete: hidden from sale and search, history untouched."""
    return update_medicine(db, medicine_id, MedicineUpdate(is_active=False))


def delete_medicine(db: Session, medicine_id: int) -> None:
    """
    Hard delete, only for entries created by mistake. Refused with
    ReferentialError while any batch or sale line references the medicine.
    """
    medicine = get_medicine(db, medicine_id)
    in_use = (
        db.query(Batch.id).filter(Batch.medicine_id == medicine_id).first()
        or db.query(SaleItem.id).filter(SaleItem.medicine_id == medicine_id).first()
    )
    if in_use:
        raise ReferentialError(f"Medicine {medicine_id} has stock or sales; deactivate it instead")

    db.delete(medicine)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise translate_integrity_error(e, "medicine") from e
    AuditLog.log_action("delete", "medicine", medicine_id)


def list_medicines(db: Session, include_inactive: bool = False) -> List[Medicine]:
    q = db.query(Medicine)
    if not include_inactive:
        q = q.filter(Medicine.is_active.is_(True))
    return q.order_by(Medicine.name).all()


def find_medicines_by_name(db: Session, name: str) -> List[Medicine]:
    """Exact, case-insensitive name match."""
    return (
        db.query(Medicine)
        .filter(Medicine.name.ilike(name.strip()))
        .order_by(Medicine.id)
        .all()
    )


def search_medicines(db: Session, term: str) -> List[Medicine]:
    """Active medicines whose name, generic or brand name contains `term`."""
    pattern = f"%{term.strip()}%"
    return (
        db.query(Medicine)
        .filter(Medicine.is_active.is_(True))
        .filter(
            or_(
                Medicine.name.ilike(pattern),
                Medicine.generic_name.ilike(pattern),
                Medicine.brand_name.ilike(pattern),
            )
        )
        .order_by(Medicine.name)
        .limit(SEARCH_LIMIT)
        .all()
    )


def get_gst_rate(db: Session, medicine: Medicine) -> Decimal:
    slab = medicine.gst_slab or _require_slab(db, medicine.gst_slab_id)
    return Decimal(slab.rate)
