"""Store operators: accounts, login and roles.

Users are never deleted. Deactivation keeps every historical sale pointing at
a valid user row.
"""
import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pharmacare.core.audit import AuditLog
from pharmacare.core.exceptions import NotFoundError, UniquenessError, ValidationError, translate_integrity_error
from pharmacare.core.permissions import ROLES
from pharmacare.core.security import get_password_hash, validate_password_strength, verify_password
from pharmacare.models.user import User
from pharmacare.schemas.user import UserCreate, UserUpdate

logger = logging.getLogger(__name__)


def _validate_role(role: str) -> None:
    if role not in ROLES:
        raise ValidationError(f"Unknown role {role!r}, expected one of {', '.join(ROLES)}")


def _commit(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise translate_integrity_error(e, "user") from e


def create_user(db: Session, data: UserCreate) -> User:
    """
    Create an account.

    Raises:
        ValidationError: blank username/full name, unknown role, weak password
        UniquenessError: username taken
    """
    username = data.username.strip()
    if not username:
        raise ValidationError("Username cannot be blank")
    if not data.full_name.strip():
        raise ValidationError("Full name cannot be blank")
    _validate_role(data.role)
    validate_password_strength(data.password)

    if get_user_by_username(db, username) is not None:
        logger.info(f"[USER] Username already taken: {username}")
        raise UniquenessError(f"Username {username} already exists")

    user = User(
        username=username,
        password_hash=get_password_hash(data.password),
        full_name=data.full_name.strip(),
        role=data.role,
        is_active=True,
    )
    db.add(user)
    _commit(db)
    db.refresh(user)

    logger.info(f"[USER] Created {user.username} ({user.role})")
    AuditLog.log_action("create", "user", user.id, changes={"username": user.username, "role": user.role})
    return user


def authenticate(db: Session, username: str, password: str) -> Optional[User]:
    """Return the user for a correct username/password, else None. Inactive users never authenticate."""
    user = get_user_by_username(db, username.strip())
    if user is None or not verify_password(password, user.password_hash):
        AuditLog.log_authentication(username, False, reason="Invalid credentials")
        return None
    if not user.is_active:
        AuditLog.log_authentication(username, False, reason="Inactive account")
        return None
    AuditLog.log_authentication(username, True)
    return user


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User", user_id)
    return user


def get_user_by_username(db: Session, username: str) -> Optional[User]:
    return db.query(User).filter(User.username == username).first()


def list_users(db: Session) -> List[User]:
    return db.query(User).order_by(User.username).all()


def list_active_users(db: Session) -> List[User]:
    return db.query(User).filter(User.is_active.is_(True)).order_by(User.username).all()


def count_users(db: Session) -> int:
    return db.query(func.count(User.id)).scalar()


def update_user(db: Session, user_id: int, patch: UserUpdate) -> User:
    data = patch.model_dump(exclude_unset=True)
    for field, value in data.items():
        if value is None:
            raise ValidationError(f"{field} cannot be empty")
    if "full_name" in data and not data["full_name"].strip():
        raise ValidationError("Full name cannot be blank")
    if "role" in data:
        _validate_role(data["role"])

    user = get_user(db, user_id)
    old_role = user.role
    for field, value in data.items():
        setattr(user, field, value.strip() if field == "full_name" else value)
    _commit(db)
    db.refresh(user)

    if "role" in data and data["role"] != old_role:
        AuditLog.log_permission_change(user.id, old_role, user.role)
    if data.get("is_active") is False:
        AuditLog.log_action("deactivate", "user", user.id)
    elif data:
        AuditLog.log_action("update", "user", user.id, changes=data)
    return user


def deactivate_user(db: Session, user_id: int) -> User:
    return update_user(db, user_id, UserUpdate(is_active=False))


def change_password(
    db: Session, user_id: int, new_password: str, current_password: Optional[str] = None
) -> User:
    """
    Replace the password hash. When `current_password` is given it must match;
    admins resetting someone else's password pass None.
    """
    user = get_user(db, user_id)
    if current_password is not None and not verify_password(current_password, user.password_hash):
        AuditLog.log_security_event("password_change_rejected", user.id)
        raise ValidationError("Current password is incorrect")
    validate_password_strength(new_password)

    user.password_hash = get_password_hash(new_password)
    _commit(db)
    db.refresh(user)
    AuditLog.log_security_event("password_changed", user.id)
    return user
