"""
Read-only reports: stock and expiry alerts, dashboard counts, sales and profit.

Stock counts only non-expired batches. Sale timestamps are stored in UTC, so
"today" for sales means the current UTC date.
"""
from datetime import date, timedelta
from typing import List, Optional

from sqlalchemy import and_, case, func
from sqlalchemy.orm import Session

from pharmacare.models.batch import Batch
from pharmacare.models.medicine import Medicine
from pharmacare.models.sale import Sale, SaleItem
from pharmacare.schemas.reports import (
    DashboardCounts,
    ExpiryAlert,
    ProfitSummary,
    SalesSummary,
    StockAlert,
)
from pharmacare.services.sale_service import date_bounds
from pharmacare.services.settings_service import get_settings


def low_stock_alerts(
    db: Session, threshold: Optional[int] = None, today: Optional[date] = None
) -> List[StockAlert]:
    """
    Active medicines whose sellable stock is below their reorder level,
    or below `threshold` when one is given. Lowest stock first.
    """
    today = today or date.today()
    stock = func.coalesce(
        func.sum(
            case(
                (and_(Batch.expiry_date > today, Batch.quantity > 0), Batch.quantity),
                else_=0,
            )
        ),
        0,
    )
    rows = (
        db.query(Medicine, stock.label("current_stock"))
        .outerjoin(Batch, Batch.medicine_id == Medicine.id)
        .filter(Medicine.is_active.is_(True))
        .group_by(Medicine.id)
        .all()
    )

    alerts = []
    for medicine, current in rows:
        limit = medicine.reorder_level if threshold is None else threshold
        if current < limit:
            alerts.append(
                StockAlert(
                    medicine_id=medicine.id,
                    medicine_name=medicine.name,
                    current_stock=int(current),
                    reorder_level=medicine.reorder_level,
                )
            )
    alerts.sort(key=lambda a: (a.current_stock, a.medicine_name))
    return alerts


def _batch_alerts(rows, today: date) -> List[ExpiryAlert]:
    return [
        ExpiryAlert(
            batch_id=batch.id,
            medicine_name=name,
            batch_number=batch.batch_number,
            expiry_date=batch.expiry_date,
            days_until_expiry=(batch.expiry_date - today).days,
            quantity=batch.quantity,
        )
        for batch, name in rows
    ]


def expiry_alerts(
    db: Session, within_days: Optional[int] = None, today: Optional[date] = None
) -> List[ExpiryAlert]:
    """Batches with stock that expire within the window (default: settings.near_expiry_days)."""
    today = today or date.today()
    if within_days is None:
        within_days = get_settings(db).near_expiry_days
    rows = (
        db.query(Batch, Medicine.name)
        .join(Medicine, Batch.medicine_id == Medicine.id)
        .filter(
            Batch.quantity > 0,
            Batch.expiry_date > today,
            Batch.expiry_date <= today + timedelta(days=within_days),
        )
        .order_by(Batch.expiry_date, Batch.id)
        .all()
    )
    return _batch_alerts(rows, today)


def expired_batches(db: Session, today: Optional[date] = None) -> List[ExpiryAlert]:
    """Batches still holding stock past expiry, for write-off. days_until_expiry is <= 0."""
    today = today or date.today()
    rows = (
        db.query(Batch, Medicine.name)
        .join(Medicine, Batch.medicine_id == Medicine.id)
        .filter(Batch.quantity > 0, Batch.expiry_date <= today)
        .order_by(Batch.expiry_date, Batch.id)
        .all()
    )
    return _batch_alerts(rows, today)


def sales_summary(db: Session, start: date, end: date) -> SalesSummary:
    """Totals over sales dated start..end inclusive, in local calendar days."""
    lower, upper = date_bounds(start, end)
    row = (
        db.query(
            func.count(Sale.id),
            func.coalesce(func.sum(Sale.subtotal_paise), 0),
            func.coalesce(func.sum(Sale.discount_paise), 0),
            func.coalesce(func.sum(Sale.total_gst_paise), 0),
            func.coalesce(func.sum(Sale.grand_total_paise), 0),
        )
        .filter(Sale.sale_date >= lower, Sale.sale_date < upper)
        .one()
    )
    count, subtotal, discount, gst, grand_total = row
    return SalesSummary(
        sales_count=count,
        subtotal_paise=subtotal,
        discount_paise=discount,
        total_gst_paise=gst,
        grand_total_paise=grand_total,
    )


def profit_summary(db: Session, start: date, end: date) -> ProfitSummary:
    """Taxable sales value minus the cost price of the batches the units came from."""
    lower, upper = date_bounds(start, end)
    revenue, cost = (
        db.query(
            func.coalesce(func.sum(SaleItem.taxable_amount_paise), 0),
            func.coalesce(func.sum(SaleItem.quantity * Batch.cost_price_paise), 0),
        )
        .join(Sale, SaleItem.sale_id == Sale.id)
        .join(Batch, SaleItem.batch_id == Batch.id)
        .filter(Sale.sale_date >= lower, Sale.sale_date < upper)
        .one()
    )
    return ProfitSummary(revenue_paise=revenue, cost_paise=cost, gross_profit_paise=revenue - cost)


def dashboard_counts(db: Session, today: Optional[date] = None) -> DashboardCounts:
    today = today or date.today()
    total_medicines = (
        db.query(func.count(Medicine.id)).filter(Medicine.is_active.is_(True)).scalar() or 0
    )
    sales_today = sales_summary(db, today, today)
    return DashboardCounts(
        total_medicines=total_medicines,
        low_stock_count=len(low_stock_alerts(db, today=today)),
        expiring_count=len(expiry_alerts(db, today=today)),
        today_sales_count=sales_today.sales_count,
        today_revenue_paise=sales_today.grand_total_paise,
    )
