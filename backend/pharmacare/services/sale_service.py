"""Sale recording. One call = one invoice, committed atomically or not at all."""
import logging
from collections import OrderedDict
from datetime import date, datetime, time, timedelta, timezone
from typing import Dict, List, Optional, Sequence

from sqlalchemy import update
from sqlalchemy.orm import Session, selectinload

from pharmacare.core.audit import AuditLog
from pharmacare.core.exceptions import (
    ConcurrencyError,
    InsufficientStockError,
    NotFoundError,
    ReferentialError,
    ValidationError,
)
from pharmacare.db.session import write_transaction
from pharmacare.models.batch import Batch
from pharmacare.models.customer import Customer
from pharmacare.models.sale import Sale, SaleItem
from pharmacare.models.user import User
from pharmacare.schemas.sale import SaleCreate, SaleItemCreate
from pharmacare.services import gst_service
from pharmacare.services.medicine_service import get_gst_rate
from pharmacare.services.settings_service import allocate_invoice_number

logger = logging.getLogger(__name__)

PAYMENT_MODES = ("cash", "card", "upi", "credit")


def validate_payment_mode(mode: str) -> None:
    if mode not in PAYMENT_MODES:
        raise ValidationError(
            f"Unknown payment mode {mode!r}, expected one of {', '.join(PAYMENT_MODES)}"
        )


def _validate_items(items: Sequence[SaleItemCreate]) -> None:
    if not items:
        raise ValidationError("A sale needs at least one item")
    for item in items:
        if item.quantity <= 0:
            raise ValidationError(f"Quantity must be positive (batch {item.batch_id})")
        if item.discount_paise < 0:
            raise ValidationError(f"Discount cannot be negative (batch {item.batch_id})")
        if item.unit_price_paise is not None and item.unit_price_paise <= 0:
            raise ValidationError(f"Unit price must be positive (batch {item.batch_id})")


def _load_batches(db: Session, items: Sequence[SaleItemCreate], today: date) -> Dict[int, Batch]:
    """
    Load every referenced batch and check stock before anything is written.

    Quantities are summed per batch, so two lines drawing on the same batch
    cannot oversell it between them.
    """
    requested: Dict[int, int] = OrderedDict()
    for item in items:
        requested[item.batch_id] = requested.get(item.batch_id, 0) + item.quantity

    batches = {}
    for batch_id, quantity in requested.items():
        batch = db.get(Batch, batch_id)
        if batch is None:
            raise ReferentialError(f"Batch {batch_id} does not exist")
        if batch.is_expired(today):
            raise ValidationError(
                f"Batch {batch.batch_number} expired on {batch.expiry_date}; it cannot be sold"
            )
        if batch.quantity < quantity:
            logger.info(f"[SALE] Short stock batch={batch_id} requested={quantity} available={batch.quantity}")
            raise InsufficientStockError(batch_id, quantity, batch.quantity)
        batches[batch_id] = batch
    return batches


def record_sale(db: Session, sale_input: SaleCreate, items: Sequence[SaleItemCreate]) -> Sale:
    """
    Record a sale and decrement stock.

    Inside one BEGIN IMMEDIATE transaction:
      1. check user, customer, batches and stock
      2. compute line taxes and invoice totals
      3. take the next invoice number
      4. insert the sale and its lines
      5. decrement each batch, guarded by WHERE quantity >= sold

    Any failure rolls the whole thing back, including the invoice counter.
    """
    validate_payment_mode(sale_input.payment_mode)
    _validate_items(items)
    today = date.today()

    with write_transaction(db):
        user = db.get(User, sale_input.user_id)
        if user is None:
            raise ReferentialError(f"User {sale_input.user_id} does not exist")
        if not user.is_active:
            raise ValidationError(f"User {user.username} is inactive and cannot record sales")
        if sale_input.customer_id is not None and db.get(Customer, sale_input.customer_id) is None:
            raise ReferentialError(f"Customer {sale_input.customer_id} does not exist")

        batches = _load_batches(db, items, today)

        lines = []
        for item in items:
            batch = batches[item.batch_id]
            unit_price = item.unit_price_paise or batch.selling_price_paise
            if unit_price > batch.mrp_paise:
                raise ValidationError(
                    f"Unit price {unit_price} exceeds MRP {batch.mrp_paise} for batch {batch.batch_number}"
                )
            rate = get_gst_rate(db, batch.medicine)
            lines.append(gst_service.calculate_line(unit_price, item.quantity, rate, item.discount_paise))

        totals = gst_service.calculate_invoice_totals(lines)
        gst_service.verify_totals(totals, lines)
        expected = sale_input.expected_grand_total_paise
        if expected is not None and expected != totals.grand_total_paise:
            raise ValidationError(
                f"Grand total {totals.grand_total_paise} does not match expected {expected}"
            )

        invoice_number = allocate_invoice_number(db)
        sale = Sale(
            invoice_number=invoice_number,
            customer_id=sale_input.customer_id,
            user_id=user.id,
            subtotal_paise=totals.subtotal_paise,
            discount_paise=totals.discount_paise,
            total_cgst_paise=totals.total_cgst_paise,
            total_sgst_paise=totals.total_sgst_paise,
            total_gst_paise=totals.total_gst_paise,
            grand_total_paise=totals.grand_total_paise,
            payment_mode=sale_input.payment_mode,
            notes=sale_input.notes,
        )
        db.add(sale)
        db.flush()

        for item, line in zip(items, lines):
            batch = batches[item.batch_id]
            db.add(
                SaleItem(
                    sale_id=sale.id,
                    batch_id=batch.id,
                    medicine_id=batch.medicine_id,
                    quantity=line.quantity,
                    unit_price_paise=line.unit_price_paise,
                    discount_paise=line.discount_paise,
                    taxable_amount_paise=line.taxable_amount_paise,
                    cgst_rate=line.cgst_rate,
                    cgst_amount_paise=line.cgst_amount_paise,
                    sgst_rate=line.sgst_rate,
                    sgst_amount_paise=line.sgst_amount_paise,
                    total_paise=line.total_paise,
                    hsn_code=batch.medicine.hsn_code,
                )
            )
        db.flush()

        sold: Dict[int, int] = OrderedDict()
        for item in items:
            sold[item.batch_id] = sold.get(item.batch_id, 0) + item.quantity
        for batch_id, quantity in sold.items():
            result = db.execute(
                update(Batch)
                .where(Batch.id == batch_id, Batch.quantity >= quantity)
                .values(quantity=Batch.quantity - quantity)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                logger.warning(f"[SALE] Stock guard missed on batch {batch_id}")
                raise ConcurrencyError(f"Stock of batch {batch_id} changed during the sale")

    db.refresh(sale)

    logger.info(
        f"[SALE] {sale.invoice_number} user={sale.user_id} lines={len(lines)} total={sale.grand_total_paise}"
    )
    AuditLog.log_action(
        "create", "sale", sale.id, user_id=sale.user_id,
        changes={
            "invoice_number": sale.invoice_number,
            "grand_total_paise": sale.grand_total_paise,
            "batches": {str(k): v for k, v in sold.items()},
        },
    )
    return sale


def get_sale(db: Session, sale_id: int) -> Sale:
    sale = (
        db.query(Sale)
        .options(selectinload(Sale.items))
        .filter(Sale.id == sale_id)
        .first()
    )
    if sale is None:
        raise NotFoundError("Sale", sale_id)
    return sale


def get_sale_by_invoice(db: Session, invoice_number: str) -> Optional[Sale]:
    return (
        db.query(Sale)
        .options(selectinload(Sale.items))
        .filter(Sale.invoice_number == invoice_number)
        .first()
    )


def list_sales(db: Session, limit: int = 50, offset: int = 0) -> List[Sale]:
    """Most recent first."""
    return (
        db.query(Sale)
        .order_by(Sale.sale_date.desc(), Sale.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )


def _local_midnight_as_utc(day: date) -> datetime:
    # naive datetimes are taken as local time by astimezone()
    return datetime.combine(day, time.min).astimezone(timezone.utc).replace(tzinfo=None)


def date_bounds(start: date, end: date):
    """
    Naive UTC bounds [start 00:00, day after end 00:00) so `end` is inclusive.

    `start` and `end` are calendar days in the host's local timezone, while
    sale_date is stored as naive UTC, so both bounds are shifted to UTC.
    """
    if end < start:
        raise ValidationError(f"End date {end} is before start date {start}")
    return _local_midnight_as_utc(start), _local_midnight_as_utc(end + timedelta(days=1))


def list_sales_by_date_range(db: Session, start: date, end: date) -> List[Sale]:
    lower, upper = date_bounds(start, end)
    return (
        db.query(Sale)
        .filter(Sale.sale_date >= lower, Sale.sale_date < upper)
        .order_by(Sale.sale_date, Sale.id)
        .all()
    )


def list_sales_by_customer(db: Session, customer_id: int) -> List[Sale]:
    return (
        db.query(Sale)
        .filter(Sale.customer_id == customer_id)
        .order_by(Sale.sale_date.desc(), Sale.id.desc())
        .all()
    )
