"""Async database engine and session factory."""

from collections.abc import AsyncGenerator

from sqlalchemy import event, func, select
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from app.core.config import get_settings

settings = get_settings()


def build_engine(url: str, **kwargs) -> AsyncEngine:
    """Create an async engine; SQLite engines start every transaction with BEGIN IMMEDIATE."""
    is_sqlite = make_url(url).get_backend_name() == "sqlite"
    if not is_sqlite:
        kwargs.setdefault("pool_size", settings.database_pool_size)
        kwargs.setdefault("max_overflow", settings.database_max_overflow)
    engine = create_async_engine(url, echo=settings.debug, **kwargs)
    if is_sqlite:
        # Take the write lock up front so count-then-insert cannot interleave.
        @event.listens_for(engine.sync_engine, "connect")
        def _disable_driver_begin(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None

        @event.listens_for(engine.sync_engine, "begin")
        def _begin_immediate(conn):
            conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


def build_session_maker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


engine = build_engine(settings.async_database_url)
async_session_maker = build_session_maker(engine)


async def lock_for_key(session: AsyncSession, key: str) -> None:
    """Serialize transactions touching `key` until the current transaction ends.

    PostgreSQL: transaction-scoped advisory lock on the key's hash.
    SQLite: nothing to do, writers already hold the database lock.
    """
    if session.get_bind().dialect.name == "postgresql":
        await session.execute(select(func.pg_advisory_xact_lock(func.hashtext(key))))


def get_session_maker() -> async_sessionmaker[AsyncSession]:
    """Dependency for services that manage their own short transactions."""
    return async_session_maker


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency that yields an async DB session."""
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
