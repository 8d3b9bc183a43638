"""
Typed errors raised by the data store.

Every invariant the schema declares (CHECK, UNIQUE, FOREIGN KEY) is validated
explicitly before a write reaches the database. When SQLite rejects a write
anyway, translate_integrity_error() maps the driver error onto the same
taxonomy so callers only ever deal with PharmacyError subclasses.

All errors are recoverable. The store never clamps or coerces a bad value,
it rejects the write and leaves the database unchanged.
"""
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError, OperationalError

logger = logging.getLogger(__name__)


class PharmacyError(Exception):
    """Base class. `detail` is safe to show to an operator."""

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(PharmacyError):
    """A numeric or invariant violation, e.g. price or quantity out of range."""


class ReferentialError(PharmacyError):
    """A reference to a parent row that does not exist, or a delete of a parent still referenced."""


class UniquenessError(PharmacyError):
    """Duplicate username, invoice number, GST rate, or a second settings row."""


class InsufficientStockError(PharmacyError):
    def __init__(self, batch_id: int, requested: int, available: int):
        super().__init__(
            f"Insufficient stock in batch {batch_id}: requested {requested}, available {available}"
        )
        self.batch_id = batch_id
        self.requested = requested
        self.available = available


class ConcurrencyError(PharmacyError):
    """Write conflict on the invoice counter or a batch quantity, or a lock timeout."""


class NotFoundError(PharmacyError):
    def __init__(self, resource: str, resource_id=None):
        if resource_id is None:
            super().__init__(f"{resource} not found")
        else:
            super().__init__(f"{resource} {resource_id} not found")
        self.resource = resource
        self.resource_id = resource_id


class PermissionDeniedError(PharmacyError):
    """The acting user's role lacks the required permission."""


def translate_integrity_error(exc: Exception, context: Optional[str] = None) -> PharmacyError:
    """
    Map a SQLAlchemy/SQLite error onto the store's taxonomy.

    SQLite reports constraint failures only through the message text, e.g.
    "UNIQUE constraint failed: users.username".

    Usage:
        except IntegrityError as e:
            db.rollback()
            raise translate_integrity_error(e, "user") from e
    """
    message = str(getattr(exc, "orig", None) or exc)
    prefix = f"{context}: " if context else ""

    if isinstance(exc, OperationalError):
        if "locked" in message or "busy" in message:
            logger.warning(f"[DB] Lock timeout {prefix}{message}")
            return ConcurrencyError(f"{prefix}database is busy, try again")
        logger.error(f"[DB] Operational error {prefix}{message}")
        return PharmacyError(f"{prefix}database error")

    if not isinstance(exc, IntegrityError):
        logger.error(f"[DB] Unexpected error {prefix}{type(exc).__name__}: {message}")
        return PharmacyError(f"{prefix}database error")

    if "UNIQUE constraint failed" in message:
        field = message.split("UNIQUE constraint failed:", 1)[1].strip()
        logger.info(f"[DB] Uniqueness violation {prefix}{field}")
        return UniquenessError(f"{prefix}duplicate value for {field}")
    if "FOREIGN KEY constraint failed" in message:
        logger.info(f"[DB] Foreign key violation {prefix}{message}")
        return ReferentialError(f"{prefix}referenced row does not exist or is still in use")
    if "CHECK constraint failed" in message:
        rule = message.split("CHECK constraint failed:", 1)[1].strip()
        logger.info(f"[DB] Check violation {prefix}{rule}")
        return ValidationError(f"{prefix}value violates rule {rule}")
    if "NOT NULL constraint failed" in message:
        field = message.split("NOT NULL constraint failed:", 1)[1].strip()
        logger.info(f"[DB] Missing value {prefix}{field}")
        return ValidationError(f"{prefix}{field} is required")

    logger.error(f"[DB] Unclassified integrity error {prefix}{message}")
    return PharmacyError(f"{prefix}database constraint violated")
