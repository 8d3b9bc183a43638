from typing import Optional
from datetime import date

from pydantic import BaseModel


class PrescriptionCreate(BaseModel):
    customer_id: int
    doctor_name: str
    prescription_date: date
    sale_id: Optional[int] = None
    rx_number: Optional[str] = None
    notes: Optional[str] = None

    class Config:
        strict = True
        extra = "forbid"
