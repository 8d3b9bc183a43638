from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from pharmacare.db.base import Base, utcnow


class Supplier(Base):
    """Wholesaler. gst_in and drug_license_no are kept for regulatory paperwork."""
    __tablename__ = "suppliers"
    __table_args__ = (Index("idx_suppliers_name", "name"),)

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    phone = Column(String(64), nullable=True)
    email = Column(String(255), nullable=True)
    address = Column(Text, nullable=True)
    gst_in = Column(String(32), nullable=True)
    drug_license_no = Column(String(64), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    payments = relationship("SupplierPayment", back_populates="supplier", passive_deletes="all")


class SupplierPayment(Base):
    __tablename__ = "supplier_payments"
    __table_args__ = (
        CheckConstraint("amount_paise > 0", name="ck_supplier_payments_amount_positive"),
        CheckConstraint(
            "payment_mode IN ('cash', 'card', 'upi', 'credit')",
            name="ck_supplier_payments_mode",
        ),
    )

    id = Column(Integer, primary_key=True)
    supplier_id = Column(Integer, ForeignKey("suppliers.id"), nullable=False)
    amount_paise = Column(Integer, nullable=False)
    payment_date = Column(Date, nullable=False)
    payment_mode = Column(String(16), nullable=False)  # cash | card | upi | credit
    reference = Column(String(128), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    supplier = relationship("Supplier", back_populates="payments")
