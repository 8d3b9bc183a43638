"""
User: a store operator. Never hard-deleted; deactivated via is_active so
historical sales keep a valid user_id.
"""
from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Integer, String

from pharmacare.db.base import Base, utcnow


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("role IN ('admin', 'pharmacist', 'cashier')", name="ck_users_role"),
    )

    id = Column(Integer, primary_key=True)
    username = Column(String(64), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)  # bcrypt
    full_name = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False)  # admin | pharmacist | cashier
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<User username={self.username} role={self.role} active={self.is_active}>"
