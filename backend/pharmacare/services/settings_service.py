"""Store settings: the singleton PharmacySettings record and the invoice counter."""
import logging

from sqlalchemy.orm import Session

from pharmacare.core.audit import AuditLog
from pharmacare.core.config import settings as app_settings
from pharmacare.core.exceptions import NotFoundError, UniquenessError, ValidationError
from pharmacare.db.session import write_transaction
from pharmacare.models.pharmacy_settings import SETTINGS_ID, PharmacySettings
from pharmacare.models.sale import Sale
from pharmacare.schemas.settings import SettingsUpdate

logger = logging.getLogger(__name__)

_REQUIRED_TEXT = ("name", "address", "phone", "gstin", "drug_license_no", "state_code", "invoice_prefix")


def get_settings(db: Session) -> PharmacySettings:
    row = db.get(PharmacySettings, SETTINGS_ID)
    if row is None:
        raise NotFoundError("Pharmacy settings")
    return row


def create_settings(db: Session, **fields) -> PharmacySettings:
    """
    Insert the settings row. Normally done once by migration 2; a second row
    is always refused.
    """
    if "id" in fields and fields["id"] != SETTINGS_ID:
        raise ValidationError(f"Pharmacy settings id is fixed at {SETTINGS_ID}")
    fields.pop("id", None)
    _validate_fields(fields)

    with write_transaction(db):
        if db.get(PharmacySettings, SETTINGS_ID) is not None:
            logger.info("[SETTINGS] Refused to create a second settings row")
            raise UniquenessError("Pharmacy settings already exist; update them instead")
        row = PharmacySettings(id=SETTINGS_ID, **fields)
        db.add(row)

    db.refresh(row)
    AuditLog.log_action("create", "settings", SETTINGS_ID)
    return row


def _validate_fields(data: dict) -> None:
    for field in _REQUIRED_TEXT:
        if field in data and data[field] is None:
            raise ValidationError(f"{field} cannot be empty")
    for field in ("name", "invoice_prefix"):
        if field in data and not data[field].strip():
            raise ValidationError(f"{field} cannot be blank")
    prefix = data.get("invoice_prefix")
    if prefix is not None and any(c.isspace() for c in prefix):
        raise ValidationError("Invoice prefix cannot contain spaces")
    for field in ("low_stock_threshold", "near_expiry_days"):
        if field in data:
            value = data[field]
            if value is None or value < 0:
                raise ValidationError(f"{field} must be zero or more")


def update_settings(db: Session, patch: SettingsUpdate) -> PharmacySettings:
    """Apply only the fields set on `patch`; refreshes updated_at."""
    data = patch.model_dump(exclude_unset=True)
    _validate_fields(data)
    if not data:
        return get_settings(db)

    with write_transaction(db):
        row = get_settings(db)
        for field, value in data.items():
            setattr(row, field, value)

    db.refresh(row)
    logger.info(f"[SETTINGS] Updated fields: {sorted(data)}")
    AuditLog.log_action("update", "settings", SETTINGS_ID, changes=data)
    return row


def format_invoice_number(prefix: str, number: int) -> str:
    """INV, 42 -> INV-000042"""
    return f"{prefix}-{number:0{app_settings.INVOICE_NUMBER_PADDING}d}"


def allocate_invoice_number(db: Session) -> str:
    """
    Take the next invoice number and advance the counter.

    Must run inside the caller's write transaction (see sale_service) so the
    number is only consumed if the sale commits.
    """
    row = (
        db.query(PharmacySettings)
        .filter(PharmacySettings.id == SETTINGS_ID)
        .with_for_update()
        .first()
    )
    if row is None:
        raise NotFoundError("Pharmacy settings")

    number = int(row.next_invoice_number)
    invoice_number = format_invoice_number(row.invoice_prefix, number)
    taken = db.query(Sale.id).filter(Sale.invoice_number == invoice_number).first()
    if taken:
        raise UniquenessError(f"Invoice number {invoice_number} already used")

    row.next_invoice_number = number + 1
    db.flush()
    return invoice_number
