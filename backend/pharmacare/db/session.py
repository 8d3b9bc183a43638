"""Database engine and sessions. SQLite single-writer with explicit transactions."""
import logging
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import NullPool, StaticPool

from pharmacare.core.config import settings
from pharmacare.core.exceptions import PharmacyError, translate_integrity_error

logger = logging.getLogger(__name__)

# Execution option asking the begin hook for BEGIN IMMEDIATE
IMMEDIATE = "sqlite_begin_immediate"


def _install_sqlite_hooks(engine: Engine, in_memory: bool) -> None:
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # pysqlite must not issue its own BEGIN; _on_begin does it
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        if not in_memory:
            cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        if conn.get_execution_options().get(IMMEDIATE):
            conn.exec_driver_sql("BEGIN IMMEDIATE")
        else:
            conn.exec_driver_sql("BEGIN")


def create_db_engine(database_url: Optional[str] = None, echo: Optional[bool] = None) -> Engine:
    url = database_url or settings.DATABASE_URL
    echo = settings.SQL_ECHO if echo is None else echo

    if url.startswith("sqlite"):
        in_memory = ":memory:" in url or url in ("sqlite://", "sqlite:///")
        # File: NullPool so every session gets its own connection and lock state.
        # Memory: one shared connection, or each checkout would see an empty database.
        engine = create_engine(
            url,
            echo=echo,
            connect_args={
                "check_same_thread": False,
                "timeout": settings.DB_BUSY_TIMEOUT_SECONDS,
            },
            poolclass=StaticPool if in_memory else NullPool,
        )
        _install_sqlite_hooks(engine, in_memory=in_memory)
    else:
        # PostgreSQL/MySQL: QueuePool with sensible defaults
        engine = create_engine(
            url,
            echo=echo,
            pool_size=5,
            max_overflow=10,
            pool_timeout=30,
            pool_recycle=3600,
            pool_pre_ping=True,
        )
    return engine


def create_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=bind)


engine = create_db_engine()
SessionLocal = create_session_factory(engine)


@contextmanager
def write_transaction(db: Session) -> Generator[Session, None, None]:
    """
    Run the block inside a single BEGIN IMMEDIATE transaction.

    SQLite grants its one RESERVED lock at BEGIN, so two writers using this
    helper can never interleave their reads and writes: the second waits up to
    DB_BUSY_TIMEOUT_SECONDS and then sees the first one's committed state.
    Commits on success; rolls back on any exception, so no partial write is
    ever visible.

    The session must not carry unsaved changes of its own: they would be
    committed or discarded together with this block's writes, so they are
    refused up front.
    """
    if db.new or db.dirty or db.deleted:
        logger.warning("[DB] Refused write transaction on a session with unsaved changes")
        raise PharmacyError("Session has unsaved changes; commit or roll back before this operation")
    if db.in_transaction():
        # end the read transaction left open by earlier queries on this session
        db.rollback()
    try:
        db.connection(execution_options={IMMEDIATE: True})
        yield db
        db.commit()
    except (IntegrityError, OperationalError) as e:
        db.rollback()
        raise translate_integrity_error(e) from e
    except Exception:
        db.rollback()
        raise
