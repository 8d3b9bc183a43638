from datetime import date, timedelta

import pytest

from pharmacare.core.exceptions import (
    InsufficientStockError,
    NotFoundError,
    ReferentialError,
    ValidationError,
)
from pharmacare.models import Batch, Medicine
from pharmacare.schemas.batch import BatchCreate, BatchRecord
from pharmacare.schemas.medicine import MedicineCreate, MedicineRecord, MedicineUpdate
from pharmacare.services import batch_service, medicine_service

from conftest import receive, slab_id


def test_create_medicine_with_unknown_slab(db):
    with pytest.raises(ReferentialError):
        medicine_service.create_medicine(db, MedicineCreate(name="Ghost", gst_slab_id=999))
    assert db.query(Medicine).count() == 0


def test_create_and_look_up_medicine(db, paracetamol):
    assert paracetamol.id is not None
    assert paracetamol.created_at is not None
    assert paracetamol.hsn_code == "3004"
    assert medicine_service.get_gst_rate(db, paracetamol) == 5
    assert medicine_service.get_medicine(db, paracetamol.id).name == "Paracetamol 500mg"
    assert [m.id for m in medicine_service.find_medicines_by_name(db, "paracetamol 500MG")] == [paracetamol.id]
    assert [m.id for m in medicine_service.search_medicines(db, "cetam")] == [paracetamol.id]

    record = MedicineRecord.model_validate(paracetamol)
    record.gst_rate = medicine_service.get_gst_rate(db, paracetamol)
    assert record.gst_rate == 5
    assert record.is_active is True

    slab = medicine_service.get_gst_slab(db, paracetamol.gst_slab_id)
    assert slab in medicine_service.list_gst_slabs(db)
    assert medicine_service.get_gst_slab(db, 999) is None


@pytest.mark.parametrize("fields", [{"name": "  "}, {"reorder_level": -1}])
def test_create_medicine_validation(db, fields):
    values = {"name": "Bad", "gst_slab_id": slab_id(db, 5)}
    values.update(fields)
    with pytest.raises(ValidationError):
        medicine_service.create_medicine(db, MedicineCreate(**values))


def test_update_and_deactivate_medicine(db, paracetamol):
    before = paracetamol.updated_at
    updated = medicine_service.update_medicine(
        db, paracetamol.id, MedicineUpdate(gst_slab_id=slab_id(db, 12), reorder_level=5)
    )
    assert medicine_service.get_gst_rate(db, updated) == 12
    assert updated.reorder_level == 5
    assert updated.updated_at > before
    assert updated.created_at < updated.updated_at

    with pytest.raises(ReferentialError):
        medicine_service.update_medicine(db, paracetamol.id, MedicineUpdate(gst_slab_id=999))

    medicine_service.deactivate_medicine(db, paracetamol.id)
    assert medicine_service.search_medicines(db, "Paracetamol") == []
    assert medicine_service.list_medicines(db) == []
    assert len(medicine_service.list_medicines(db, include_inactive=True)) == 1


def test_delete_medicine(db, paracetamol):
    receive(db, paracetamol.id)
    with pytest.raises(ReferentialError):
        medicine_service.delete_medicine(db, paracetamol.id)

    spare = medicine_service.create_medicine(
        db, MedicineCreate(name="Typo Entry", gst_slab_id=slab_id(db, 5))
    )
    medicine_service.delete_medicine(db, spare.id)
    with pytest.raises(NotFoundError):
        medicine_service.get_medicine(db, spare.id)


def test_receive_batch(db, paracetamol_batch):
    assert paracetamol_batch.quantity == 50
    assert paracetamol_batch.selling_price_paise == 900
    record = BatchRecord.model_validate(paracetamol_batch)
    assert record.mrp_paise == 1000
    assert record.cost_price_paise == 600


def test_receive_batch_for_missing_medicine(db):
    with pytest.raises(ReferentialError):
        receive(db, 12345)
    assert db.query(Batch).count() == 0


def test_receive_batch_for_inactive_medicine(db, paracetamol):
    medicine_service.deactivate_medicine(db, paracetamol.id)
    with pytest.raises(ValidationError):
        receive(db, paracetamol.id)


@pytest.mark.parametrize("prices", [
    {"mrp": 1000, "selling": 1100},
    {"mrp": 0, "selling": 0},
    {"mrp": 1000, "selling": 0},
    {"cost": -1},
    {"quantity": -1},
])
def test_receive_batch_rejects_bad_values(db, paracetamol, prices):
    with pytest.raises(ValidationError):
        receive(db, paracetamol.id, **prices)
    assert db.query(Batch).count() == 0


def test_manufacturing_after_expiry_rejected(db, paracetamol):
    data = BatchCreate(
        batch_number="B9",
        expiry_date=date.today() + timedelta(days=30),
        manufacturing_date=date.today() + timedelta(days=31),
        cost_price_paise=100,
        mrp_paise=200,
        selling_price_paise=150,
        quantity=1,
    )
    with pytest.raises(ValidationError):
        batch_service.receive_batch(db, paracetamol.id, data)


def test_same_lot_tops_up(db, paracetamol, paracetamol_batch):
    again = receive(db, paracetamol.id, quantity=25)
    assert again.id == paracetamol_batch.id
    assert again.quantity == 75
    assert db.query(Batch).count() == 1

    with pytest.raises(ValidationError):
        receive(db, paracetamol.id, quantity=5, selling=950)
    assert batch_service.get_batch(db, paracetamol_batch.id).quantity == 75


def test_adjust_batch_quantity(db, paracetamol_batch):
    assert batch_service.adjust_batch_quantity(db, paracetamol_batch.id, -10, "damaged").quantity == 40
    assert batch_service.adjust_batch_quantity(db, paracetamol_batch.id, 5, "return").quantity == 45
    with pytest.raises(InsufficientStockError):
        batch_service.adjust_batch_quantity(db, paracetamol_batch.id, -46)
    assert batch_service.get_batch(db, paracetamol_batch.id).quantity == 45
    with pytest.raises(NotFoundError):
        batch_service.adjust_batch_quantity(db, 999, 1)


def test_fefo_and_stock(db, paracetamol):
    late = receive(db, paracetamol.id, batch_number="LATE", quantity=30, expiry_days=400)
    early = receive(db, paracetamol.id, batch_number="EARLY", quantity=10, expiry_days=60)
    receive(db, paracetamol.id, batch_number="GONE", quantity=99, expiry_days=-1)
    receive(db, paracetamol.id, batch_number="EMPTY", quantity=0, expiry_days=30)

    fefo = batch_service.get_batches_fefo(db, paracetamol.id)
    assert [b.id for b in fefo] == [early.id, late.id]
    assert batch_service.get_medicine_stock(db, paracetamol.id) == 40
    assert len(batch_service.list_batches_for_medicine(db, paracetamol.id)) == 3
    assert len(batch_service.list_batches_for_medicine(db, paracetamol.id, include_expired=True)) == 4

    allocation = batch_service.allocate_fefo(fefo, 15)
    assert [(a.batch_id, a.quantity) for a in allocation] == [(early.id, 10), (late.id, 5)]

    with pytest.raises(InsufficientStockError):
        batch_service.allocate_fefo(fefo, 41)
    with pytest.raises(ValidationError):
        batch_service.allocate_fefo(fefo, 0)
