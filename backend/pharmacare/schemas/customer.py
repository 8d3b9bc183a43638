from typing import Optional
from datetime import datetime

from pydantic import BaseModel


class CustomerCreate(BaseModel):
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None

    class Config:
        strict = True
        extra = "forbid"


class CustomerUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None

    class Config:
        strict = True
        extra = "forbid"


class CustomerWithStats(BaseModel):
    id: int
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    total_purchases: int
    last_purchase_date: Optional[datetime] = None
