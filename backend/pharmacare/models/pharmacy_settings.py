"""
PharmacySettings: the store's single configuration record.

Exactly one row may exist; the CHECK pins its primary key to 1. Only
settings_service reads or writes it, including the invoice counter.
"""
from sqlalchemy import CheckConstraint, Column, DateTime, Integer, String, Text

from pharmacare.db.base import Base, utcnow

SETTINGS_ID = 1


class PharmacySettings(Base):
    __tablename__ = "pharmacy_settings"
    __table_args__ = (
        CheckConstraint("id = 1", name="ck_pharmacy_settings_singleton"),
        CheckConstraint("next_invoice_number >= 1", name="ck_pharmacy_settings_invoice_counter"),
        CheckConstraint("low_stock_threshold >= 0", name="ck_pharmacy_settings_low_stock"),
        CheckConstraint("near_expiry_days >= 0", name="ck_pharmacy_settings_near_expiry"),
    )

    id = Column(Integer, primary_key=True, autoincrement=False, default=SETTINGS_ID)
    name = Column(String(255), nullable=False, default="My Pharmacy")
    address = Column(Text, nullable=False, default="")
    phone = Column(String(64), nullable=False, default="")
    email = Column(String(255), nullable=True)
    gstin = Column(String(32), nullable=False, default="")
    drug_license_no = Column(String(64), nullable=False, default="")
    state_code = Column(String(8), nullable=False, default="")
    invoice_prefix = Column(String(16), nullable=False, default="INV")
    next_invoice_number = Column(Integer, nullable=False, default=1)
    low_stock_threshold = Column(Integer, nullable=False, default=20)
    near_expiry_days = Column(Integer, nullable=False, default=90)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
