"""Shared fixtures: a fresh, fully migrated SQLite file per test."""
from datetime import date, timedelta

import pytest

from pharmacare.core.config import settings
from pharmacare.db.migrations import apply_migrations
from pharmacare.db.session import create_db_engine, create_session_factory
from pharmacare.models.gst_slab import GstSlab
from pharmacare.schemas.batch import BatchCreate
from pharmacare.schemas.medicine import MedicineCreate
from pharmacare.services import batch_service, medicine_service, user_service

ADMIN_PASSWORD = "admin12345"


@pytest.fixture
def engine(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "DEFAULT_ADMIN_PASSWORD", ADMIN_PASSWORD)
    engine = create_db_engine(f"sqlite:///{tmp_path / 'pharmacare.db'}", echo=False)
    apply_migrations(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def admin(db):
    return user_service.get_user_by_username(db, settings.DEFAULT_ADMIN_USERNAME)


def slab_id(db, rate: int) -> int:
    return db.query(GstSlab).filter(GstSlab.rate == rate).one().id


@pytest.fixture
def paracetamol(db):
    return medicine_service.create_medicine(
        db,
        MedicineCreate(
            name="Paracetamol 500mg",
            generic_name="Paracetamol",
            strength="500mg",
            gst_slab_id=slab_id(db, 5),
            reorder_level=10,
        ),
    )


def receive(db, medicine_id, quantity=50, expiry_days=365, batch_number="B001",
            mrp=1000, selling=900, cost=600):
    return batch_service.receive_batch(
        db,
        medicine_id,
        BatchCreate(
            batch_number=batch_number,
            expiry_date=date.today() + timedelta(days=expiry_days),
            cost_price_paise=cost,
            mrp_paise=mrp,
            selling_price_paise=selling,
            quantity=quantity,
        ),
    )


@pytest.fixture
def paracetamol_batch(db, paracetamol):
    """mrp 1000, selling 900, cost 600, qty 50, a year from expiry."""
    return receive(db, paracetamol.id)
