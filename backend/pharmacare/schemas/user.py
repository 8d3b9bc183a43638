from typing import Optional
from datetime import datetime

from pydantic import BaseModel


class UserCreate(BaseModel):
    username: str
    password: str
    full_name: str
    role: str  # admin | pharmacist | cashier

    class Config:
        strict = True
        extra = "forbid"


class UserUpdate(BaseModel):
    full_name: Optional[str] = None
    role: Optional[str] = None
    is_active: Optional[bool] = None

    class Config:
        strict = True
        extra = "forbid"


class UserResponse(BaseModel):
    """Never carries the password hash."""
    id: int
    username: str
    full_name: str
    role: str
    is_active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
