from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from pharmacare.db.base import Base, utcnow


class Medicine(Base):
    """
    Catalogue entry. Stock lives on Batch rows, never on the medicine itself.

    gst_slab_id decides the CGST/SGST split used on every sale line.
    """
    __tablename__ = "medicines"
    __table_args__ = (
        CheckConstraint("reorder_level >= 0", name="ck_medicines_reorder_level"),
        Index("idx_medicines_name", "name"),
    )

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    generic_name = Column(String(255), nullable=True)
    brand_name = Column(String(255), nullable=True)
    manufacturer = Column(String(255), nullable=True)
    dosage_form = Column(String(64), nullable=False, default="tablet")
    strength = Column(String(64), nullable=True)
    category = Column(String(128), nullable=True)
    hsn_code = Column(String(16), nullable=False, default="3004")
    gst_slab_id = Column(Integer, ForeignKey("gst_slabs.id"), nullable=False)
    reorder_level = Column(Integer, nullable=False, default=20)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    gst_slab = relationship("GstSlab")
    # passive_deletes="all": deleting a medicine with batches must fail on the FK
    batches = relationship("Batch", back_populates="medicine", passive_deletes="all")

    def label(self) -> str:
        """Readable label for pick lists and invoices."""
        parts = [self.name or ""]
        if self.strength and self.strength not in parts[0]:
            parts.append(self.strength)
        return " ".join(p for p in parts if p).strip()

    def __repr__(self):
        return f"<Medicine name={self.name} active={self.is_active}>"
