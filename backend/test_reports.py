from datetime import date, timedelta

import pytest

from pharmacare.core.exceptions import ReferentialError, ValidationError
from pharmacare.schemas.customer import CustomerCreate, CustomerUpdate
from pharmacare.schemas.medicine import MedicineCreate
from pharmacare.schemas.prescription import PrescriptionCreate
from pharmacare.schemas.sale import SaleCreate, SaleItemCreate
from pharmacare.schemas.supplier import SupplierCreate, SupplierPaymentCreate
from pharmacare.services import (
    customer_service,
    medicine_service,
    prescription_service,
    report_service,
    sale_service,
    supplier_service,
)

from conftest import receive, slab_id


def sell(db, user_id, batch_id, quantity, customer_id=None):
    return sale_service.record_sale(
        db,
        SaleCreate(user_id=user_id, customer_id=customer_id),
        [SaleItemCreate(batch_id=batch_id, quantity=quantity)],
    )


def test_low_stock_alerts(db, paracetamol):
    cetirizine = medicine_service.create_medicine(
        db, MedicineCreate(name="Cetirizine 10mg", gst_slab_id=slab_id(db, 12), reorder_level=20)
    )
    receive(db, paracetamol.id, quantity=8)
    receive(db, paracetamol.id, batch_number="OLD", quantity=100, expiry_days=-10)
    receive(db, cetirizine.id, quantity=40)

    alerts = report_service.low_stock_alerts(db)
    assert [(a.medicine_name, a.current_stock) for a in alerts] == [("Paracetamol 500mg", 8)]

    alerts = report_service.low_stock_alerts(db, threshold=50)
    assert [a.medicine_name for a in alerts] == ["Paracetamol 500mg", "Cetirizine 10mg"]


def test_expiry_alerts(db, paracetamol):
    soon = receive(db, paracetamol.id, batch_number="SOON", expiry_days=30)
    receive(db, paracetamol.id, batch_number="LATER", expiry_days=200)
    receive(db, paracetamol.id, batch_number="SOLDOUT", quantity=0, expiry_days=10)
    gone = receive(db, paracetamol.id, batch_number="GONE", expiry_days=-3)

    alerts = report_service.expiry_alerts(db)
    assert [a.batch_id for a in alerts] == [soon.id]
    assert alerts[0].days_until_expiry == 30
    assert len(report_service.expiry_alerts(db, within_days=365)) == 2

    expired = report_service.expired_batches(db)
    assert [a.batch_id for a in expired] == [gone.id]
    assert expired[0].days_until_expiry == -3


def test_dashboard_and_summaries(db, admin, paracetamol, paracetamol_batch):
    sell(db, admin.id, paracetamol_batch.id, 10)
    sell(db, admin.id, paracetamol_batch.id, 2)

    counts = report_service.dashboard_counts(db)
    assert counts.total_medicines == 1
    assert counts.today_sales_count == 2
    assert counts.today_revenue_paise == 9450 + 1890
    assert counts.low_stock_count == 0

    start, end = date.today() - timedelta(days=1), date.today() + timedelta(days=1)
    summary = report_service.sales_summary(db, start, end)
    assert summary.sales_count == 2
    assert summary.subtotal_paise == 10800
    assert summary.total_gst_paise == 540
    assert summary.grand_total_paise == 11340

    profit = report_service.profit_summary(db, start, end)
    assert profit.revenue_paise == 10800
    assert profit.cost_paise == 12 * 600
    assert profit.gross_profit_paise == 10800 - 7200

    empty = report_service.sales_summary(db, date(2001, 1, 1), date(2001, 1, 31))
    assert empty.sales_count == 0
    assert empty.grand_total_paise == 0


def test_customers(db, admin, paracetamol_batch):
    anita = customer_service.create_customer(
        db, CustomerCreate(name="  Anita   Sharma ", phone="9876543210", email="anita@example.com")
    )
    assert anita.name == "Anita Sharma"
    walk_in = customer_service.create_customer(db, CustomerCreate(name="Walk-in"))
    with pytest.raises(ValidationError):
        customer_service.create_customer(db, CustomerCreate(name=" "))

    customer_service.update_customer(db, walk_in.id, CustomerUpdate(phone="9000000001"))
    assert [c.id for c in customer_service.search_customers(db, "98765")] == [anita.id]
    assert [c.id for c in customer_service.search_customers(db, "example.com")] == [anita.id]

    sell(db, admin.id, paracetamol_batch.id, 1, customer_id=anita.id)
    sell(db, admin.id, paracetamol_batch.id, 1, customer_id=anita.id)

    stats = customer_service.customers_with_stats(db)
    assert [(s.name, s.total_purchases) for s in stats] == [("Anita Sharma", 2), ("Walk-in", 0)]
    assert stats[0].last_purchase_date is not None
    assert stats[1].last_purchase_date is None


def test_suppliers(db):
    supplier = supplier_service.create_supplier(
        db, SupplierCreate(name="Mehta Distributors", gst_in="27AAAAA0000A1Z5")
    )
    other = supplier_service.create_supplier(db, SupplierCreate(name="Apex Pharma"))

    def payment(amount, mode="upi"):
        return SupplierPaymentCreate(amount_paise=amount, payment_date=date.today(), payment_mode=mode)

    supplier_service.record_supplier_payment(db, supplier.id, payment(500000))
    supplier_service.record_supplier_payment(db, supplier.id, payment(250000, "cash"))
    with pytest.raises(ValidationError):
        supplier_service.record_supplier_payment(db, supplier.id, payment(0))
    with pytest.raises(ValidationError):
        supplier_service.record_supplier_payment(db, supplier.id, payment(100, "barter"))
    with pytest.raises(ReferentialError):
        supplier_service.record_supplier_payment(db, 999, payment(100))

    assert len(supplier_service.list_supplier_payments(db, supplier.id)) == 2
    totals = {s.name: s.total_payments_paise for s in supplier_service.suppliers_with_payments(db)}
    assert totals == {"Apex Pharma": 0, "Mehta Distributors": 750000}
    assert [s.id for s in supplier_service.search_suppliers(db, "mehta")] == [supplier.id]
    assert supplier_service.get_supplier(db, other.id).name == "Apex Pharma"


def test_prescriptions(db, admin, paracetamol_batch):
    customer = customer_service.create_customer(db, CustomerCreate(name="Farhan Ali"))
    with pytest.raises(ReferentialError):
        prescription_service.create_prescription(
            db, PrescriptionCreate(customer_id=999, doctor_name="Dr. Rao", prescription_date=date.today())
        )

    rx = prescription_service.create_prescription(
        db,
        PrescriptionCreate(
            customer_id=customer.id, doctor_name="Dr. Rao", rx_number="RX-17", prescription_date=date.today()
        ),
    )
    assert rx.sale_id is None

    sale = sell(db, admin.id, paracetamol_batch.id, 1, customer_id=customer.id)
    linked = prescription_service.link_prescription_to_sale(db, rx.id, sale.id)
    assert linked.sale_id == sale.id
    with pytest.raises(ReferentialError):
        prescription_service.link_prescription_to_sale(db, rx.id, 999)

    assert [p.id for p in prescription_service.list_prescriptions_for_customer(db, customer.id)] == [rx.id]
