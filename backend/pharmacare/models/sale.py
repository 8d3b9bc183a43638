"""
Sale (one invoice) and its lines. Written once by sale_service.record_sale,
never updated; corrections are new sales.

The CHECK constraints restate the tax identities so that a row with
inconsistent totals can never be committed, whatever code path wrote it.
"""
from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from pharmacare.db.base import Base, utcnow


class Sale(Base):
    __tablename__ = "sales"
    __table_args__ = (
        CheckConstraint(
            "payment_mode IN ('cash', 'card', 'upi', 'credit')", name="ck_sales_payment_mode"
        ),
        CheckConstraint(
            "total_gst_paise = total_cgst_paise + total_sgst_paise", name="ck_sales_gst_split"
        ),
        CheckConstraint(
            "grand_total_paise = subtotal_paise - discount_paise + total_gst_paise",
            name="ck_sales_grand_total",
        ),
        Index("idx_sales_invoice_number", "invoice_number"),
        Index("idx_sales_sale_date", "sale_date"),
    )

    id = Column(Integer, primary_key=True)
    invoice_number = Column(String(32), unique=True, nullable=False)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    sale_date = Column(DateTime, nullable=False, default=utcnow)
    subtotal_paise = Column(Integer, nullable=False, default=0)
    discount_paise = Column(Integer, nullable=False, default=0)
    total_cgst_paise = Column(Integer, nullable=False, default=0)
    total_sgst_paise = Column(Integer, nullable=False, default=0)
    total_gst_paise = Column(Integer, nullable=False, default=0)
    grand_total_paise = Column(Integer, nullable=False, default=0)
    payment_mode = Column(String(16), nullable=False, default="cash")
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    customer = relationship("Customer")
    user = relationship("User")
    items = relationship(
        "SaleItem", back_populates="sale", order_by="SaleItem.id", passive_deletes="all"
    )

    def __repr__(self):
        return f"<Sale invoice={self.invoice_number} total={self.grand_total_paise}>"


class SaleItem(Base):
    __tablename__ = "sale_items"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_sale_items_quantity_positive"),
        CheckConstraint("discount_paise >= 0", name="ck_sale_items_discount_nonneg"),
        CheckConstraint(
            "taxable_amount_paise = unit_price_paise * quantity - discount_paise",
            name="ck_sale_items_taxable",
        ),
        CheckConstraint(
            "total_paise = taxable_amount_paise + cgst_amount_paise + sgst_amount_paise",
            name="ck_sale_items_total",
        ),
        Index("idx_sale_items_sale_id", "sale_id"),
    )

    id = Column(Integer, primary_key=True)
    sale_id = Column(Integer, ForeignKey("sales.id"), nullable=False)
    batch_id = Column(Integer, ForeignKey("batches.id"), nullable=False)
    medicine_id = Column(Integer, ForeignKey("medicines.id"), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price_paise = Column(Integer, nullable=False)
    discount_paise = Column(Integer, nullable=False, default=0)
    taxable_amount_paise = Column(Integer, nullable=False)
    cgst_rate = Column(Numeric(5, 2), nullable=False, default=0)
    cgst_amount_paise = Column(Integer, nullable=False, default=0)
    sgst_rate = Column(Numeric(5, 2), nullable=False, default=0)
    sgst_amount_paise = Column(Integer, nullable=False, default=0)
    total_paise = Column(Integer, nullable=False)
    hsn_code = Column(String(16), nullable=True)  # copied from the medicine at sale time

    sale = relationship("Sale", back_populates="items")
    batch = relationship("Batch")
    medicine = relationship("Medicine")
