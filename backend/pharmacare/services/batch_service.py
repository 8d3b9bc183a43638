"""Batch stock: receipts, corrections and First-Expiry-First-Out lookups.

Stock is tracked per batch. Every quantity change goes through a write
transaction so it serializes with sales touching the same batch.
"""
import logging
from datetime import date
from typing import List, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.orm import Session

from pharmacare.core.audit import AuditLog
from pharmacare.core.exceptions import (
    InsufficientStockError,
    NotFoundError,
    ReferentialError,
    ValidationError,
)
from pharmacare.db.session import write_transaction
from pharmacare.models.batch import Batch
from pharmacare.models.medicine import Medicine
from pharmacare.schemas.batch import BatchCreate, FefoAllocation

logger = logging.getLogger(__name__)


def validate_batch_values(
    cost_price_paise: int,
    mrp_paise: int,
    selling_price_paise: int,
    quantity: int,
) -> None:
    """The batch CHECK constraints, evaluated before anything is written."""
    for name, value in (
        ("cost_price_paise", cost_price_paise),
        ("mrp_paise", mrp_paise),
        ("selling_price_paise", selling_price_paise),
        ("quantity", quantity),
    ):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(f"{name} must be an integer, got {value!r}")
    if mrp_paise <= 0:
        raise ValidationError(f"MRP must be positive, got {mrp_paise}")
    if selling_price_paise <= 0:
        raise ValidationError(f"Selling price must be positive, got {selling_price_paise}")
    if selling_price_paise > mrp_paise:
        raise ValidationError(
            f"Selling price {selling_price_paise} exceeds MRP {mrp_paise}"
        )
    if cost_price_paise < 0:
        raise ValidationError(f"Cost price cannot be negative, got {cost_price_paise}")
    if quantity < 0:
        raise ValidationError(f"Quantity cannot be negative, got {quantity}")


def receive_batch(db: Session, medicine_id: int, data: BatchCreate) -> Batch:
    """
    Record a stock receipt for an active medicine.

    A receipt for a lot already on file (same batch number and expiry) tops up
    that batch, provided the pricing matches; otherwise a new batch is created.
    """
    validate_batch_values(
        data.cost_price_paise, data.mrp_paise, data.selling_price_paise, data.quantity
    )
    batch_number = data.batch_number.strip()
    if not batch_number:
        raise ValidationError("Batch number cannot be blank")
    if data.manufacturing_date and data.manufacturing_date > data.expiry_date:
        raise ValidationError("Manufacturing date is after the expiry date")

    with write_transaction(db):
        medicine = db.get(Medicine, medicine_id)
        if medicine is None:
            raise ReferentialError(f"Medicine {medicine_id} does not exist")
        if not medicine.is_active:
            raise ValidationError(f"Medicine {medicine_id} is inactive")

        batch = (
            db.query(Batch)
            .filter(
                Batch.medicine_id == medicine_id,
                Batch.batch_number == batch_number,
                Batch.expiry_date == data.expiry_date,
            )
            .first()
        )
        if batch is not None:
            same_pricing = (
                batch.cost_price_paise == data.cost_price_paise
                and batch.mrp_paise == data.mrp_paise
                and batch.selling_price_paise == data.selling_price_paise
            )
            if not same_pricing:
                raise ValidationError(
                    f"Batch {batch_number} is already on file with different pricing"
                )
            batch.quantity = batch.quantity + data.quantity
            action = "topup"
        else:
            batch = Batch(
                medicine_id=medicine_id,
                batch_number=batch_number,
                expiry_date=data.expiry_date,
                manufacturing_date=data.manufacturing_date,
                cost_price_paise=data.cost_price_paise,
                mrp_paise=data.mrp_paise,
                selling_price_paise=data.selling_price_paise,
                quantity=data.quantity,
            )
            db.add(batch)
            action = "receive"
        db.flush()

    db.refresh(batch)
    logger.info(f"[BATCH] {action} {batch.batch_number} medicine={medicine_id} +{data.quantity} -> {batch.quantity}")
    AuditLog.log_action(
        action, "batch", batch.id,
        changes={"medicine_id": medicine_id, "quantity_received": data.quantity},
    )
    return batch


def adjust_batch_quantity(db: Session, batch_id: int, delta: int, reason: Optional[str] = None) -> Batch:
    """Stock correction or customer return. The result may not go below zero."""
    if isinstance(delta, bool) or not isinstance(delta, int):
        raise ValidationError(f"Quantity change must be an integer, got {delta!r}")
    if delta == 0:
        return get_batch(db, batch_id)

    with write_transaction(db):
        batch = db.get(Batch, batch_id)
        if batch is None:
            raise NotFoundError("Batch", batch_id)
        if batch.quantity + delta < 0:
            raise InsufficientStockError(batch_id, -delta, batch.quantity)
        batch.quantity = batch.quantity + delta

    db.refresh(batch)
    AuditLog.log_action(
        "adjust", "batch", batch_id, changes={"delta": delta, "reason": reason or ""}
    )
    return batch


def get_batch(db: Session, batch_id: int) -> Batch:
    batch = db.get(Batch, batch_id)
    if batch is None:
        raise NotFoundError("Batch", batch_id)
    return batch


def list_batches_for_medicine(
    db: Session, medicine_id: int, include_expired: bool = False, today: Optional[date] = None
) -> List[Batch]:
    q = db.query(Batch).filter(Batch.medicine_id == medicine_id)
    if not include_expired:
        q = q.filter(Batch.expiry_date > (today or date.today()))
    return q.order_by(Batch.expiry_date, Batch.id).all()


def get_batches_fefo(db: Session, medicine_id: int, today: Optional[date] = None) -> List[Batch]:
    """Sellable batches (in stock, not expired), earliest expiry first."""
    return (
        db.query(Batch)
        .filter(
            Batch.medicine_id == medicine_id,
            Batch.quantity > 0,
            Batch.expiry_date > (today or date.today()),
        )
        .order_by(Batch.expiry_date, Batch.id)
        .all()
    )


def get_medicine_stock(db: Session, medicine_id: int, today: Optional[date] = None) -> int:
    """Units on hand across non-expired batches."""
    total = (
        db.query(func.coalesce(func.sum(Batch.quantity), 0))
        .filter(Batch.medicine_id == medicine_id, Batch.expiry_date > (today or date.today()))
        .scalar()
    )
    return int(total)


def allocate_fefo(batches: Sequence[Batch], requested_qty: int) -> List[FefoAllocation]:
    """
    Split `requested_qty` across `batches`, earliest expiry first.

    `batches` should come from get_batches_fefo(). Raises
    InsufficientStockError when their combined quantity is short.
    """
    if requested_qty <= 0:
        raise ValidationError("Requested quantity must be greater than 0")

    ordered = sorted(batches, key=lambda b: (b.expiry_date, b.id))
    available = sum(max(b.quantity, 0) for b in ordered)
    if available < requested_qty:
        batch_id = ordered[0].id if ordered else 0
        raise InsufficientStockError(batch_id, requested_qty, available)

    allocations = []
    remaining = requested_qty
    for batch in ordered:
        if remaining <= 0:
            break
        if batch.quantity <= 0:
            continue
        take = min(batch.quantity, remaining)
        allocations.append(
            FefoAllocation(
                batch_id=batch.id,
                batch_number=batch.batch_number,
                quantity=take,
                expiry_date=batch.expiry_date,
            )
        )
        remaining -= take
    return allocations
