from typing import Optional
from datetime import date, datetime

from pydantic import BaseModel


class BatchCreate(BaseModel):
    """A stock receipt. All prices in paise."""
    batch_number: str
    expiry_date: date
    cost_price_paise: int
    mrp_paise: int
    selling_price_paise: int
    quantity: int
    manufacturing_date: Optional[date] = None

    class Config:
        strict = True
        extra = "forbid"


class BatchRecord(BaseModel):
    id: int
    medicine_id: int
    batch_number: str
    expiry_date: date
    manufacturing_date: Optional[date] = None
    cost_price_paise: int
    mrp_paise: int
    selling_price_paise: int
    quantity: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class FefoAllocation(BaseModel):
    batch_id: int
    batch_number: str
    quantity: int
    expiry_date: date
