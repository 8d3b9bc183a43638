"""
Role permissions.
Trust: only admins manage users and store settings; cashiers only sell.
"""
from pharmacare.core.exceptions import PermissionDeniedError

ROLES = ("admin", "pharmacist", "cashier")

ROLE_PERMISSIONS = {
    "admin": frozenset({
        "dashboard:view",
        "inventory:view",
        "inventory:edit",
        "sales:view",
        "sales:create",
        "customers:view",
        "customers:edit",
        "suppliers:view",
        "reports:view",
        "users:manage",
        "settings:manage",
    }),
    "pharmacist": frozenset({
        "dashboard:view",
        "inventory:view",
        "inventory:edit",
        "sales:view",
        "sales:create",
        "customers:view",
        "customers:edit",
        "suppliers:view",
        "reports:view",
    }),
    "cashier": frozenset({
        "dashboard:view",
        "sales:view",
        "sales:create",
        "customers:view",
    }),
}


def get_permissions(role: str) -> frozenset:
    return ROLE_PERMISSIONS.get(role, frozenset())


def has_permission(role: str, permission: str) -> bool:
    return permission in get_permissions(role)


def require_permission(user, permission: str) -> None:
    """Raise PermissionDeniedError unless `user` is active and its role grants `permission`."""
    if not user.is_active or not has_permission(user.role, permission):
        raise PermissionDeniedError(f"User {user.username} may not {permission}")
