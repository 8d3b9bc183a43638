"""Bring the database schema up to date. Run on application startup.

SECURITY: When DEFAULT_ADMIN_PASSWORD is not configured, migration 2
generates a random admin password and logs it once.
Owner must change this after first login.

Usage:
    pharmacare-init
    python -m pharmacare.db.init_db
"""
import logging
import sys
from typing import Optional

from sqlalchemy.engine import Engine

from pharmacare.core.config import settings
from pharmacare.db import session
from pharmacare.db.migrations import apply_migrations, current_version

logger = logging.getLogger(__name__)


def init_db(bind: Optional[Engine] = None) -> int:
    """Apply pending migrations; returns the resulting schema version."""
    engine = bind or session.engine
    applied = apply_migrations(engine)
    version = current_version(engine)
    if applied:
        logger.info(f"[DB] Applied migrations {applied}, schema version {version}")
    else:
        logger.info(f"[DB] Schema up to date at version {version}")
    return version


def main() -> int:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        version = init_db()
    except Exception as e:
        logger.error(f"[DB] Initialization failed: {type(e).__name__}: {e}", exc_info=True)
        return 1
    print(f"[OK] Database {settings.DATABASE_URL} at schema version {version}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
