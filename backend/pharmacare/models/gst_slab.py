from sqlalchemy import Column, Integer, Numeric, String

from pharmacare.db.base import Base


class GstSlab(Base):
    """Reference data seeded by migration 2. Rates are percentages (5 means 5%)."""
    __tablename__ = "gst_slabs"

    id = Column(Integer, primary_key=True)
    rate = Column(Numeric(5, 2), unique=True, nullable=False)
    description = Column(String(255), nullable=False)

    def __repr__(self):
        return f"<GstSlab rate={self.rate}>"
