from datetime import datetime, timezone

from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp; SQLite stores datetimes without a zone."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
