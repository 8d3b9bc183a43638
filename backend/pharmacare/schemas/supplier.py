from typing import Optional
from datetime import date

from pydantic import BaseModel


class SupplierCreate(BaseModel):
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    gst_in: Optional[str] = None
    drug_license_no: Optional[str] = None

    class Config:
        strict = True
        extra = "forbid"


class SupplierUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    gst_in: Optional[str] = None
    drug_license_no: Optional[str] = None

    class Config:
        strict = True
        extra = "forbid"


class SupplierPaymentCreate(BaseModel):
    amount_paise: int
    payment_date: date
    payment_mode: str  # cash | card | upi | credit
    reference: Optional[str] = None
    notes: Optional[str] = None

    class Config:
        strict = True
        extra = "forbid"


class SupplierWithPayments(BaseModel):
    id: int
    name: str
    gst_in: Optional[str] = None
    total_payments_paise: int
