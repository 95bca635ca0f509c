import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlmodel import SQLModel, Session
from sqlalchemy import event
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy import create_engine as create_sync_engine

from checkin_backend.core.config import DATABASE_PATH, TEST_MODE
from checkin_backend.core.errors import DependencyUnavailable

logger = logging.getLogger(__name__)

# --- Database URLs ---
DATABASE_URL = f"sqlite+aiosqlite:///{DATABASE_PATH}"    # Async engine (routes/services)
SYNC_DATABASE_URL = f"sqlite:///{DATABASE_PATH}"         # Sync engine (seeding/scripts)

# --- Snapshot reads ---
def enable_sqlite_snapshots(async_engine: AsyncEngine) -> AsyncEngine:
    """
    Make every session transaction a real SQLite transaction.

    The sqlite driver only sends BEGIN before a write, so consecutive SELECTs
    in one session can each see a different committed state. Here the driver
    is put in autocommit mode and SQLAlchemy emits BEGIN itself, so all reads
    up to the next commit/rollback share one snapshot. WAL lets other
    connections keep committing while that snapshot is open.
    """

    @event.listens_for(async_engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    @event.listens_for(async_engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return async_engine


# --- Engines ---
engine = enable_sqlite_snapshots(create_async_engine(DATABASE_URL, echo=TEST_MODE, future=True))
sync_engine = create_sync_engine(SYNC_DATABASE_URL, echo=TEST_MODE, future=True)

# --- Async session maker ---
async_session_maker = sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


# --- Async DB session (used in routes) ---
async def get_db():
    async with async_session_maker() as session:
        yield session


# --- Initialize DB tables ---
async def init_db():
    """Create tables asynchronously if they don't exist."""
    # Import for side effects: every table must be registered on the metadata.
    from checkin_backend import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("Database tables ready at %s", DATABASE_PATH)


# --- Explicit write transaction for ledger mutations ---
@asynccontextmanager
async def transaction(db: AsyncSession) -> AsyncIterator[AsyncSession]:
    """
    Commit everything written inside the block, or nothing.
    Any exception rolls the whole unit back. Driver failures (locked or
    unreachable database, failed flush or commit) come out as a retryable
    DependencyUnavailable, everything else is re-raised as is.
    """
    try:
        yield db
        await db.commit()
    except DBAPIError as exc:
        await db.rollback()
        logger.error("Write transaction failed: %s", exc)
        raise DependencyUnavailable("ledger write failed") from exc
    except BaseException:
        await db.rollback()
        raise


# --- Sync session for seeding/scripts ---
def get_sync_session():
    return Session(sync_engine)
