from typing import Optional
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel


class MedicineCreate(BaseModel):
    name: str
    generic_name: Optional[str] = None
    brand_name: Optional[str] = None
    manufacturer: Optional[str] = None
    dosage_form: str = "tablet"
    strength: Optional[str] = None
    category: Optional[str] = None
    hsn_code: str = "3004"
    gst_slab_id: int
    reorder_level: int = 20

    class Config:
        strict = True
        extra = "forbid"


class MedicineUpdate(BaseModel):
    """Patch: only fields explicitly set are written."""
    name: Optional[str] = None
    generic_name: Optional[str] = None
    brand_name: Optional[str] = None
    manufacturer: Optional[str] = None
    dosage_form: Optional[str] = None
    strength: Optional[str] = None
    category: Optional[str] = None
    hsn_code: Optional[str] = None
    gst_slab_id: Optional[int] = None
    reorder_level: Optional[int] = None
    is_active: Optional[bool] = None

    class Config:
        strict = True
        extra = "forbid"


class MedicineRecord(BaseModel):
    id: int
    name: str
    generic_name: Optional[str] = None
    brand_name: Optional[str] = None
    manufacturer: Optional[str] = None
    dosage_form: str
    strength: Optional[str] = None
    category: Optional[str] = None
    hsn_code: str
    gst_slab_id: int
    gst_rate: Optional[Decimal] = None
    reorder_level: int
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
