from decimal import Decimal

import pytest

from pharmacare.core.exceptions import NotFoundError
from pharmacare.schemas.customer import CustomerCreate
from pharmacare.schemas.medicine import MedicineCreate
from pharmacare.schemas.sale import SaleCreate, SaleItemCreate
from pharmacare.services import customer_service, medicine_service, pdf_service, sale_service
from pharmacare.services.currency import paise_to_words

from conftest import receive, slab_id


def mixed_sale(db, admin, paracetamol, paracetamol_batch, customer_id=None):
    second_lot = receive(db, paracetamol.id, batch_number="B002", expiry_days=500)
    cetirizine = medicine_service.create_medicine(
        db, MedicineCreate(name="Cetirizine 10mg", gst_slab_id=slab_id(db, 12), hsn_code="3003")
    )
    cetirizine_batch = receive(db, cetirizine.id, batch_number="C001")
    return sale_service.record_sale(
        db,
        SaleCreate(user_id=admin.id, customer_id=customer_id),
        [
            SaleItemCreate(batch_id=paracetamol_batch.id, quantity=10),
            SaleItemCreate(batch_id=cetirizine_batch.id, quantity=4),
            SaleItemCreate(batch_id=second_lot.id, quantity=2),
        ],
    )


def test_hsn_summary_groups_by_code_and_rate(db, admin, paracetamol, paracetamol_batch):
    sale = mixed_sale(db, admin, paracetamol, paracetamol_batch)

    summary = pdf_service.build_hsn_summary(sale)

    assert [(row.hsn_code, row.gst_rate) for row in summary] == [
        ("3004", Decimal("5")),
        ("3003", Decimal("12")),
    ]
    assert [row.taxable_paise for row in summary] == [10800, 3600]
    assert [row.cgst_paise for row in summary] == [270, 216]
    assert [row.total_gst_paise for row in summary] == [540, 432]
    assert sum(row.total_gst_paise for row in summary) == sale.total_gst_paise


def test_generate_invoice_pdf(db, admin, paracetamol, paracetamol_batch):
    customer = customer_service.create_customer(
        db, CustomerCreate(name="Sharma & Sons", phone="9876543210")
    )
    sale = mixed_sale(db, admin, paracetamol, paracetamol_batch, customer_id=customer.id)

    buffer = pdf_service.generate_invoice_pdf(db, sale.id)

    data = buffer.read()
    assert data.startswith(b"%PDF")
    assert len(data) > 1000


def test_format_invoice_text(db, admin, paracetamol, paracetamol_batch):
    sale = mixed_sale(db, admin, paracetamol, paracetamol_batch)

    text = pdf_service.format_invoice_text(db, sale.id)

    assert sale.invoice_number in text
    assert "Cetirizine 10mg" in text
    assert text.splitlines()[-1] == paise_to_words(sale.grand_total_paise)


def test_invoice_for_unknown_sale(db):
    with pytest.raises(NotFoundError):
        pdf_service.generate_invoice_pdf(db, 999)
