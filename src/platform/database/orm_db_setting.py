"""
SQLAlchemy async engine and session management

This module provides:
1. AsyncEngineManager: event-loop-aware write/read engines for one database URL
2. Base: declarative base for the server-side ledger tables
3. Database: DI-friendly session provider (`session_factory=database.provided.session`)

Read-Write Separation:
- Write operations: always the primary database
- Read operations: the read replica if POSTGRES_REPLICA_SERVER is configured, else the primary
- The redemption check-and-set is a write and never runs against the replica

SQLite URLs (sqlite+aiosqlite://) are accepted for local runs and tests; pool
sizing does not apply to them.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger


def _is_sqlite(url: str) -> bool:
    return url.startswith('sqlite')


def build_async_engine(url: str, *, pool_size: int) -> AsyncEngine:
    if _is_sqlite(url):
        engine = create_async_engine(url, echo=False, connect_args={'timeout': 30})

        @event.listens_for(engine.sync_engine, 'connect')
        def _set_sqlite_pragma(dbapi_connection: Any, _record: Any) -> None:
            cursor = dbapi_connection.cursor()
            cursor.execute('PRAGMA journal_mode=WAL')
            cursor.execute('PRAGMA busy_timeout=30000')
            cursor.close()

        return engine

    return create_async_engine(
        url,
        echo=False,
        pool_size=pool_size,
        max_overflow=settings.DB_POOL_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_recycle=settings.DB_POOL_RECYCLE,
        pool_pre_ping=settings.DB_POOL_PRE_PING,
    )


class AsyncEngineManager:
    """
    Owns the write/read engines for one database and rebinds them when the
    running event loop changes (test runners create one loop per test).
    """

    def __init__(self, *, url: Optional[str] = None, read_url: Optional[str] = None) -> None:
        self._url = url or settings.DATABASE_URL_ASYNC
        self._read_url = read_url or (self._url if url else settings.DATABASE_READ_URL_ASYNC)
        self._write_engine: Optional[AsyncEngine] = None
        self._read_engine: Optional[AsyncEngine] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._session_makers: dict[bool, async_sessionmaker[AsyncSession]] = {}

    @property
    def url(self) -> str:
        return self._url

    def get_engine(self, *, read_only: bool = False) -> AsyncEngine:
        try:
            current_loop: Optional[asyncio.AbstractEventLoop] = asyncio.get_running_loop()
        except RuntimeError:
            current_loop = None

        if current_loop is not None and self._loop is not current_loop:
            if self._write_engine is not None:
                Logger.base.warning('🔄 [DB] Event loop changed, recreating engines')
            self._write_engine = None
            self._read_engine = None
            self._session_makers.clear()
            self._loop = current_loop

        if self._write_engine is None:
            Logger.base.info(f'🔗 [DB] Creating engines for {self._url.split("@")[-1]}')
            self._write_engine = build_async_engine(
                self._url, pool_size=settings.DB_POOL_SIZE_WRITE
            )
            self._read_engine = (
                self._write_engine
                if self._read_url == self._url
                else build_async_engine(self._read_url, pool_size=settings.DB_POOL_SIZE_READ)
            )

        engine = self._read_engine if read_only else self._write_engine
        assert engine is not None
        return engine

    def get_session_maker(self, *, read_only: bool = False) -> async_sessionmaker[AsyncSession]:
        engine = self.get_engine(read_only=read_only)
        if read_only not in self._session_makers:
            self._session_makers[read_only] = async_sessionmaker(
                engine, class_=AsyncSession, expire_on_commit=False
            )
        return self._session_makers[read_only]

    async def dispose(self) -> None:
        engines = {id(e): e for e in (self._write_engine, self._read_engine) if e is not None}
        for engine in engines.values():
            await engine.dispose()
        self._write_engine = None
        self._read_engine = None
        self._session_makers.clear()


# Global engine manager (settings-driven)
_engine_manager = AsyncEngineManager()


def get_engine(*, read_only: bool = False) -> AsyncEngine:
    return _engine_manager.get_engine(read_only=read_only)


class Base(DeclarativeBase):
    pass


async def create_db_and_tables(engine_manager: Optional[AsyncEngineManager] = None) -> None:
    """Create database tables if they don't exist"""
    manager = engine_manager or _engine_manager
    try:
        async with manager.get_engine().begin() as conn:
            await conn.run_sync(Base.metadata.create_all, checkfirst=True)
    except Exception as e:
        error_msg = str(e).lower()
        if any(keyword in error_msg for keyword in ['already exists', 'duplicate key']):
            Logger.base.info('Tables already exist, skipping creation')
        else:
            Logger.base.error(f'Error creating tables: {e}')
            raise


class Database:
    """
    Session provider for repositories.

    Repositories receive `session_factory=database.provided.session` and open
    one short-lived session per operation.
    """

    def __init__(
        self, *, read_only: bool = False, engine_manager: Optional[AsyncEngineManager] = None
    ) -> None:
        self._read_only = read_only
        self.engine_manager = engine_manager or _engine_manager

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        session_maker = self.engine_manager.get_session_maker(read_only=self._read_only)
        async with session_maker() as session:
            yield session
