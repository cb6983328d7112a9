"""
Database engine, session factory and the per-request session dependency.

The Database object is built from Settings by the application factory and
kept on app.state; nothing here is module-global.
"""

from typing import AsyncGenerator, Optional

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from dance_events.core.config import Settings
from dance_events.core.logging import get_logger

logger = get_logger(__name__)


class IntegrityViolation(Exception):
    pass


class DuplicateKeyError(IntegrityViolation):
    """An insert collided with a unique constraint."""


class MissingReferenceError(IntegrityViolation):
    """An insert referenced a row that no longer exists."""


# SQLSTATE (postgres) and extended result names (sqlite) per violation kind
_UNIQUE_CODES = {"23505", "SQLITE_CONSTRAINT_UNIQUE", "SQLITE_CONSTRAINT_PRIMARYKEY"}
_FOREIGN_KEY_CODES = {"23503", "SQLITE_CONSTRAINT_FOREIGNKEY"}


def _violation_code(error: IntegrityError) -> Optional[str]:
    # Async adapters may wrap the driver exception; look through the wrapper too
    candidates = [error.orig, getattr(error.orig, "orig", None), error.orig.__cause__]
    for orig in candidates:
        for attr in ("sqlstate", "pgcode", "sqlite_errorname"):
            code = getattr(orig, attr, None)
            if code:
                return code
    return None


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    def __init__(self, settings: Settings):
        url = settings.DATABASE_URL
        if url.startswith("sqlite"):
            # SQLite has no server-side pool; busy writers wait on the file lock
            self.engine = create_async_engine(
                url, echo=settings.DEBUG, connect_args={"timeout": 30}
            )
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        else:
            self.engine = create_async_engine(
                url,
                echo=settings.DEBUG,
                pool_pre_ping=True,
                pool_size=settings.DB_POOL_SIZE,
                max_overflow=settings.DB_MAX_OVERFLOW,
                pool_timeout=settings.DB_POOL_TIMEOUT,
                pool_recycle=settings.DB_POOL_RECYCLE,
            )
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    async def create_all(self) -> None:
        """Create tables directly. Alembic owns the schema outside of tests."""
        from dance_events.db.base import Base
        import dance_events.models  # noqa: F401 - register models on Base.metadata

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self) -> None:
        from dance_events.db.base import Base

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    One session per request: commit when the handler returns normally,
    roll back when it raises.
    """
    database: Database = request.app.state.db
    async with database.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def insert_unique(db: AsyncSession, instance) -> None:
    """
    Insert a row and flush immediately so the database checks its
    constraints now. A unique collision raises DuplicateKeyError, a dangling
    foreign key raises MissingReferenceError; either way the transaction is
    rolled back first. Other integrity errors propagate unchanged.
    """
    db.add(instance)
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        code = _violation_code(e)
        logger.info(
            "integrity_violation",
            table=getattr(instance, "__tablename__", None),
            code=code,
        )
        if code in _UNIQUE_CODES:
            raise DuplicateKeyError(str(e.orig)) from e
        if code in _FOREIGN_KEY_CODES:
            raise MissingReferenceError(str(e.orig)) from e
        raise
