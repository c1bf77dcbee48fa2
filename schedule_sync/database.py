import logging
from contextlib import asynccontextmanager
from pathlib import Path
from collections.abc import AsyncIterator

from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy import event

from schedule_sync.config import settings
from schedule_sync.exceptions import StoreOperationError
from schedule_sync.models import Base

logger = logging.getLogger(__name__)

# Engine and session factory - initialized in init_db() during startup
_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def _create_session_factory(engine):
    """Create async session factory from engine"""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
        autocommit=False,
    )


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get the session factory (initialized in init_db)"""
    global _session_factory
    if _session_factory is None:
        raise RuntimeError("Database not initialized. Call init_db() during startup.")
    return _session_factory


def _ensure_sqlite_directory(database_url: str) -> None:
    """Create the parent directory of a file-backed SQLite database."""
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite" or not url.database or url.database == ":memory:":
        return
    try:
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)
    except (OSError, PermissionError) as exc:
        raise RuntimeError(f"Cannot access database path '{url.database}': {exc}") from exc


async def init_db(database_url: str | None = None) -> None:
    """Initialize database schema and engine"""
    global _engine, _session_factory

    url = database_url or settings.database_url
    logger.info("Initializing database at %s", make_url(url).render_as_string(hide_password=True))

    _ensure_sqlite_directory(url)
    is_sqlite = make_url(url).get_backend_name() == "sqlite"

    # Create engine
    _engine = create_async_engine(
        url,
        echo=False,
        pool_pre_ping=True,
        connect_args={"timeout": 30} if is_sqlite else {},
    )

    if is_sqlite:
        def configure_sqlite(dbapi_conn, _):
            """Configure SQLite connection parameters"""
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys = ON")
            cursor.close()

        event.listen(_engine.sync_engine, "connect", configure_sqlite)

    # Create all tables
    async with _engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    # Create session factory
    _session_factory = _create_session_factory(_engine)

    logger.info("Database initialized successfully")


async def close_db() -> None:
    """Close database connections on shutdown"""
    global _engine, _session_factory
    if _engine:
        await _engine.dispose()
        logger.info("Database connections closed")
    _engine = None
    _session_factory = None


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    """
    Provide a session wrapped in a single transaction.

    Commits when the block exits normally and rolls back when it raises, so
    everything done through the yielded session is all-or-nothing.

    Raises:
        StoreOperationError: If the transaction cannot be committed
    """
    session_factory = get_session_factory()

    async with session_factory() as session:
        try:
            async with session.begin():
                yield session
        except StoreOperationError:
            raise
        except SQLAlchemyError as exc:
            raise StoreOperationError("commit", str(exc)) from exc
