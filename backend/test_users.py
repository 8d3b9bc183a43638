import pytest

from pharmacare.core.exceptions import NotFoundError, PermissionDeniedError, UniquenessError, ValidationError
from pharmacare.core.permissions import get_permissions, has_permission, require_permission
from pharmacare.core.security import get_password_hash, verify_password
from pharmacare.schemas.user import UserCreate, UserResponse, UserUpdate
from pharmacare.services import user_service


def make_user(db, username="pharma1", role="pharmacist", password="tablets2024"):
    return user_service.create_user(
        db, UserCreate(username=username, password=password, full_name="Meera Iyer", role=role)
    )


def test_create_and_authenticate(db):
    user = make_user(db)
    assert user.password_hash != "tablets2024"
    assert "password_hash" not in UserResponse.model_validate(user).model_dump()

    assert user_service.authenticate(db, "pharma1", "tablets2024").id == user.id
    assert user_service.authenticate(db, "pharma1", "wrong-pass1") is None
    assert user_service.authenticate(db, "nobody", "tablets2024") is None
    assert user_service.count_users(db) == 2


def test_duplicate_username(db):
    make_user(db)
    with pytest.raises(UniquenessError):
        make_user(db)
    assert user_service.count_users(db) == 2


@pytest.mark.parametrize("fields", [
    {"password": "short1"},
    {"password": "nodigitshere"},
    {"role": "owner"},
    {"username": "   "},
])
def test_create_user_validation(db, fields):
    values = {"username": "pharma1", "password": "tablets2024", "role": "pharmacist"}
    values.update(fields)
    with pytest.raises(ValidationError):
        make_user(db, **values)


def test_inactive_user_cannot_log_in(db):
    user = make_user(db)
    user_service.deactivate_user(db, user.id)
    assert user_service.authenticate(db, "pharma1", "tablets2024") is None
    assert [u.username for u in user_service.list_active_users(db)] == ["admin"]
    assert len(user_service.list_users(db)) == 2


def test_update_role(db):
    user = make_user(db)
    before = user.updated_at
    updated = user_service.update_user(db, user.id, UserUpdate(role="cashier", full_name=" Meera I. "))
    assert updated.role == "cashier"
    assert updated.full_name == "Meera I."
    assert updated.updated_at > before
    with pytest.raises(ValidationError):
        user_service.update_user(db, user.id, UserUpdate(role="superuser"))
    with pytest.raises(NotFoundError):
        user_service.get_user(db, 999)


def test_change_password(db):
    user = make_user(db)
    with pytest.raises(ValidationError):
        user_service.change_password(db, user.id, "newpass2025", current_password="not-it-1")
    user_service.change_password(db, user.id, "newpass2025", current_password="tablets2024")
    assert user_service.authenticate(db, "pharma1", "newpass2025") is not None
    assert user_service.authenticate(db, "pharma1", "tablets2024") is None


def test_password_hashing():
    hashed = get_password_hash("secret123")
    assert verify_password("secret123", hashed)
    assert not verify_password("secret124", hashed)
    assert not verify_password("secret123", "not-a-bcrypt-hash")
    with pytest.raises(ValidationError):
        get_password_hash("x" * 73)


def test_role_permissions(db):
    assert has_permission("admin", "users:manage")
    assert has_permission("pharmacist", "inventory:edit")
    assert not has_permission("pharmacist", "settings:manage")
    assert not has_permission("cashier", "inventory:edit")
    assert has_permission("cashier", "sales:create")
    assert get_permissions("owner") == frozenset()

    cashier = make_user(db, username="till1", role="cashier")
    require_permission(cashier, "sales:create")
    with pytest.raises(PermissionDeniedError):
        require_permission(cashier, "users:manage")

    user_service.deactivate_user(db, cashier.id)
    with pytest.raises(PermissionDeniedError):
        require_permission(cashier, "sales:create")
