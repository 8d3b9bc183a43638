"""
Audit logging for stock, sales and account changes.

Each event is one JSON line on the "audit" logger, so it can be routed to a
separate file by the application's logging config.

LOGGING SENSITIVE DATA: passwords and password hashes are never logged.
"""
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# Separate logger for audit events
audit_logger = logging.getLogger("audit")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class AuditLog:
    """Central audit logging for data-store events."""

    @staticmethod
    def log_authentication(username: str, success: bool, reason: str = ""):
        """
        Log login attempts.

        Usage:
            AuditLog.log_authentication("cashier1", True)
            AuditLog.log_authentication("cashier1", False, reason="Inactive account")
        """
        log_entry = {
            "timestamp": _now(),
            "event_type": "auth.login" if success else "auth.failed_login",
            "username": username,
            "success": success,
        }
        if reason and not success:
            log_entry["reason"] = reason

        if success:
            audit_logger.info(json.dumps(log_entry))
        else:
            audit_logger.warning(json.dumps(log_entry))

    @staticmethod
    def log_action(
        action: str,  # "create", "update", "deactivate", "receive", "adjust"
        resource_type: str,  # "sale", "batch", "medicine", "user", "settings", ...
        resource_id: Optional[int],
        user_id: Optional[int] = None,
        changes: Optional[Dict[str, Any]] = None,
    ):
        """
        Log a committed change to a business record.

        Usage:
            AuditLog.log_action("create", "sale", sale.id, user_id=sale.user_id,
                                changes={"invoice_number": sale.invoice_number})
        """
        log_entry = {
            "timestamp": _now(),
            "event_type": f"{resource_type}.{action}",
            "resource_id": resource_id,
        }
        if user_id is not None:
            log_entry["user_id"] = user_id
        if changes:
            log_entry["changes"] = changes

        audit_logger.info(json.dumps(log_entry, default=str))

    @staticmethod
    def log_permission_change(user_id: int, old_role: str, new_role: str):
        """Log role changes, to spot privilege escalation."""
        log_entry = {
            "timestamp": _now(),
            "event_type": "permissions.changed",
            "user_id": user_id,
            "old_role": old_role,
            "new_role": new_role,
        }
        audit_logger.info(json.dumps(log_entry))

    @staticmethod
    def log_security_event(event_type: str, user_id: Optional[int], details: Optional[str] = None):
        """
        Log security-related events.

        Usage:
            AuditLog.log_security_event("password_changed", user_id=1)
            AuditLog.log_security_event("default_admin_seeded", user_id=1, details="random password")
        """
        log_entry = {
            "timestamp": _now(),
            "event_type": f"security.{event_type}",
            "user_id": user_id,
        }
        if details:
            log_entry["details"] = details

        audit_logger.info(json.dumps(log_entry))
