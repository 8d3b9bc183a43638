from typing import Optional

from pydantic import BaseModel


class SettingsUpdate(BaseModel):
    """
    Store identity and thresholds. next_invoice_number is deliberately absent:
    only sale recording moves the counter.
    """
    name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    gstin: Optional[str] = None
    drug_license_no: Optional[str] = None
    state_code: Optional[str] = None
    invoice_prefix: Optional[str] = None
    low_stock_threshold: Optional[int] = None
    near_expiry_days: Optional[int] = None

    class Config:
        strict = True
        extra = "forbid"


class SettingsResponse(BaseModel):
    name: str
    address: str
    phone: str
    email: Optional[str] = None
    gstin: str
    drug_license_no: str
    state_code: str
    invoice_prefix: str
    next_invoice_number: int
    low_stock_threshold: int
    near_expiry_days: int

    class Config:
        from_attributes = True
