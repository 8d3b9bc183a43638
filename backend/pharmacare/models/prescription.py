from sqlalchemy import Column, Date, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from pharmacare.db.base import Base, utcnow


class Prescription(Base):
    __tablename__ = "prescriptions"
    __table_args__ = (Index("idx_prescriptions_customer_id", "customer_id"),)

    id = Column(Integer, primary_key=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False)
    sale_id = Column(Integer, ForeignKey("sales.id"), nullable=True)  # set once dispensed
    doctor_name = Column(String(255), nullable=False)
    rx_number = Column(String(64), nullable=True)
    prescription_date = Column(Date, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    customer = relationship("Customer")
    sale = relationship("Sale")
