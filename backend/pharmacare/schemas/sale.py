from typing import List, Optional
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel


class SaleItemCreate(BaseModel):
    """
    One invoice line. unit_price_paise defaults to the batch's selling price;
    discount_paise is a flat amount off the line, before tax.
    """
    batch_id: int
    quantity: int
    discount_paise: int = 0
    unit_price_paise: Optional[int] = None

    class Config:
        strict = True
        extra = "forbid"


class SaleCreate(BaseModel):
    user_id: int
    customer_id: Optional[int] = None
    payment_mode: str = "cash"  # cash | card | upi | credit
    notes: Optional[str] = None
    # Total the operator saw on screen; the sale is refused if it disagrees
    expected_grand_total_paise: Optional[int] = None

    class Config:
        strict = True
        extra = "forbid"


class SaleItemRecord(BaseModel):
    id: int
    batch_id: int
    medicine_id: int
    quantity: int
    unit_price_paise: int
    discount_paise: int
    taxable_amount_paise: int
    cgst_rate: Decimal
    cgst_amount_paise: int
    sgst_rate: Decimal
    sgst_amount_paise: int
    total_paise: int
    hsn_code: Optional[str] = None

    class Config:
        from_attributes = True


class SaleRecord(BaseModel):
    id: int
    invoice_number: str
    customer_id: Optional[int] = None
    user_id: int
    sale_date: datetime
    subtotal_paise: int
    discount_paise: int
    total_cgst_paise: int
    total_sgst_paise: int
    total_gst_paise: int
    grand_total_paise: int
    payment_mode: str
    notes: Optional[str] = None
    items: List[SaleItemRecord] = []

    class Config:
        from_attributes = True
