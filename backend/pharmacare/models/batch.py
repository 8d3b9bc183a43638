from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from pharmacare.db.base import Base, utcnow


class Batch(Base):
    """
    A physical stock lot of one medicine, with its own expiry and pricing.

    All prices are integer paise. Quantity only changes through
    batch_service (receipts, adjustments) and sale_service (sales).
    """
    __tablename__ = "batches"
    __table_args__ = (
        CheckConstraint("selling_price_paise <= mrp_paise", name="ck_batches_selling_le_mrp"),
        CheckConstraint("cost_price_paise >= 0", name="ck_batches_cost_nonneg"),
        CheckConstraint("mrp_paise > 0", name="ck_batches_mrp_positive"),
        CheckConstraint("selling_price_paise > 0", name="ck_batches_selling_positive"),
        CheckConstraint("quantity >= 0", name="ck_batches_quantity_nonneg"),
        Index("idx_batches_medicine_id", "medicine_id"),
        Index("idx_batches_expiry_date", "expiry_date"),
    )

    id = Column(Integer, primary_key=True)
    medicine_id = Column(Integer, ForeignKey("medicines.id"), nullable=False)
    batch_number = Column(String(64), nullable=False)
    expiry_date = Column(Date, nullable=False)
    manufacturing_date = Column(Date, nullable=True)
    cost_price_paise = Column(Integer, nullable=False)
    mrp_paise = Column(Integer, nullable=False)
    selling_price_paise = Column(Integer, nullable=False)
    quantity = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    medicine = relationship("Medicine", back_populates="batches")

    def is_expired(self, on_date) -> bool:
        """A batch expiring today is already unsellable."""
        return self.expiry_date <= on_date

    def __repr__(self):
        return (
            f"<Batch medicine_id={self.medicine_id} batch_number={self.batch_number} "
            f"qty={self.quantity} expiry={self.expiry_date}>"
        )
