"""
Schema versioning.

Migrations form an ordered list. Each one runs in its own transaction
together with the insert of its row in the schema_migrations ledger, so a
migration is either fully applied and recorded or not applied at all.
Re-running apply_migrations() is a no-op once the ledger is current.

Version 1 creates every table and index from the frozen tables in
schema_v1; version 2 seeds reference data through them. Later schema
changes go in new migrations.

Upgrade functions check before inserting so they are safe on a database
that already holds the rows.
"""
import logging
import secrets
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, List, Optional

from sqlalchemy import Column, DateTime, Integer, MetaData, String, Table, func, insert, select
from sqlalchemy.engine import Connection, Engine

from pharmacare.core.audit import AuditLog
from pharmacare.core.config import settings
from pharmacare.core.security import get_password_hash
from pharmacare.db import schema_v1
from pharmacare.db.base import utcnow
from pharmacare.db.schema_v1 import gst_slabs, pharmacy_settings, users
from pharmacare.db.session import IMMEDIATE
from pharmacare.models.pharmacy_settings import SETTINGS_ID

logger = logging.getLogger(__name__)

ledger_metadata = MetaData()

schema_migrations = Table(
    "schema_migrations",
    ledger_metadata,
    Column("version", Integer, primary_key=True, autoincrement=False),
    Column("description", String(255), nullable=False),
    Column("applied_at", DateTime, nullable=False),
)

DEFAULT_GST_SLABS = [
    (Decimal("0"), "GST Exempt (0%)"),
    (Decimal("5"), "GST 5% (Most medicines post Sep 2025)"),
    (Decimal("12"), "GST 12%"),
    (Decimal("18"), "GST 18%"),
]


@dataclass(frozen=True)
class Migration:
    version: int
    description: str
    upgrade: Callable[[Connection], None]


def _create_initial_schema(conn: Connection) -> None:
    # checkfirst: tables that already exist are left untouched
    schema_v1.metadata.create_all(conn, checkfirst=True)


def _seed_default_data(conn: Connection) -> None:
    for rate, description in DEFAULT_GST_SLABS:
        exists = conn.execute(select(gst_slabs.c.id).where(gst_slabs.c.rate == rate)).first()
        if not exists:
            conn.execute(insert(gst_slabs).values(rate=rate, description=description))

    username = settings.DEFAULT_ADMIN_USERNAME
    exists = conn.execute(select(users.c.id).where(users.c.username == username)).first()
    if not exists:
        generated = not settings.DEFAULT_ADMIN_PASSWORD
        password = settings.DEFAULT_ADMIN_PASSWORD or secrets.token_urlsafe(16)
        result = conn.execute(
            insert(users).values(
                username=username,
                password_hash=get_password_hash(password),
                full_name="Administrator",
                role="admin",
                is_active=True,
            )
        )
        admin_id = result.inserted_primary_key[0]
        if generated:
            # Shown once, on the seeding run only
            logger.warning(
                f"[MIGRATE] Default admin user created. Username: {username} Password: {password} "
                "- change this password immediately after first login"
            )
        AuditLog.log_security_event(
            "default_admin_seeded",
            user_id=admin_id,
            details="random password" if generated else "password from configuration",
        )

    exists = conn.execute(select(pharmacy_settings.c.id).where(pharmacy_settings.c.id == SETTINGS_ID)).first()
    if not exists:
        conn.execute(
            insert(pharmacy_settings).values(
                id=SETTINGS_ID,
                name="My Pharmacy",
                address="123 Main Street",
                phone="0000000000",
                gstin="",
                drug_license_no="",
                state_code="",
            )
        )


MIGRATIONS: List[Migration] = [
    Migration(1, "create initial schema", _create_initial_schema),
    Migration(2, "seed default data", _seed_default_data),
]


def _check_order(migrations: List[Migration]) -> None:
    versions = [m.version for m in migrations]
    if versions != sorted(set(versions)) or any(v < 1 for v in versions):
        raise ValueError(f"Migration versions must be unique, positive and ascending: {versions}")


def current_version(engine: Engine) -> int:
    """Highest applied migration version, 0 for an empty database."""
    ledger_metadata.create_all(engine, checkfirst=True)
    with engine.connect() as conn:
        version = conn.execute(select(func.max(schema_migrations.c.version))).scalar()
    return version or 0


def applied_migrations(engine: Engine) -> List[dict]:
    ledger_metadata.create_all(engine, checkfirst=True)
    with engine.connect() as conn:
        rows = conn.execute(select(schema_migrations).order_by(schema_migrations.c.version)).mappings().all()
    return [dict(r) for r in rows]


def apply_migrations(
    engine: Engine,
    migrations: Optional[List[Migration]] = None,
    target: Optional[int] = None,
) -> List[int]:
    """
    Apply every pending migration up to `target` (default: latest).

    Returns the versions applied by this call, empty when already current.
    """
    migrations = MIGRATIONS if migrations is None else migrations
    _check_order(migrations)
    ledger_metadata.create_all(engine, checkfirst=True)

    applied = []
    for migration in migrations:
        if target is not None and migration.version > target:
            break
        with engine.connect().execution_options(**{IMMEDIATE: True}) as conn:
            with conn.begin():
                # Re-check under the write lock: another process may have just applied it
                done = conn.execute(
                    select(schema_migrations.c.version).where(
                        schema_migrations.c.version == migration.version
                    )
                ).first()
                if done:
                    continue
                logger.info(f"[MIGRATE] Applying {migration.version}: {migration.description}")
                migration.upgrade(conn)
                conn.execute(
                    insert(schema_migrations).values(
                        version=migration.version,
                        description=migration.description,
                        applied_at=utcnow(),
                    )
                )
        applied.append(migration.version)

    if applied:
        logger.info(f"[MIGRATE] Schema now at version {applied[-1]}")
    return applied
