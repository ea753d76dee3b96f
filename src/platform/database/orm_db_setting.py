"""
SQLAlchemy async engine and session management with Read-Write Separation

This module provides:
1. AsyncEngineManager: owns the read/write engines (and their pools) for one process
2. Database: session provider bound to an engine manager, created by the DI container
3. Base: declarative base for all ORM models

Read-Write Separation:
- Write operations (booking transactions): always use primary database
- Read operations (catalog, order history): use read replica if configured
- Inside a unit of work every operation uses the write session

SQLite:
- Transactions open with BEGIN IMMEDIATE, so a unit of work holds the write lock
  from its first read; concurrent writers queue behind it for up to
  BOOKING_LOCK_TIMEOUT_SECONDS and then fail with "database is locked"

Lifecycle:
- Engines are created lazily on first use and re-created if the event loop changes
- `dispose()` drains the pools; called from the FastAPI lifespan on shutdown
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
from sqlalchemy.pool import NullPool

from src.platform.config.core_setting import Settings
from src.platform.logging.loguru_io import Logger


class Base(DeclarativeBase):
    pass


def _configure_sqlite_connection(dbapi_connection: Any, connection_record: Any) -> None:
    # Leave BEGIN to _begin_sqlite_immediate instead of the driver's deferred BEGIN
    dbapi_connection.isolation_level = None
    # SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection
    cursor = dbapi_connection.cursor()
    cursor.execute('PRAGMA foreign_keys=ON')
    cursor.close()


def _begin_sqlite_immediate(conn: Any) -> None:
    # Take the database write lock at BEGIN, so the first read of a unit of work
    # already excludes other writers (SQLite has no SELECT ... FOR UPDATE)
    conn.exec_driver_sql('BEGIN IMMEDIATE')


class AsyncEngineManager:
    """
    Manages SQLAlchemy async engines with event loop awareness.

    Supports read-write separation:
    - Write engine: connects to primary database
    - Read engine: connects to read replica (falls back to primary if not configured)

    Pool bounds (size, overflow, checkout timeout) come from settings, so the number
    of concurrent booking transactions a process can run is capped here.
    """

    def __init__(self, *, settings: Settings) -> None:
        self._settings = settings
        self._write_engine: Optional[AsyncEngine] = None
        self._read_engine: Optional[AsyncEngine] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._write_session_maker: Optional[async_sessionmaker[AsyncSession]] = None
        self._read_session_maker: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def dialect_name(self) -> str:
        return self.get_engine().dialect.name

    def get_engine(self, *, read_only: bool = False) -> AsyncEngine:
        """
        Get engine for current event loop, creating new one if needed

        Args:
            read_only: If True, return read engine (replica), otherwise write engine (primary)
        """
        try:
            current_loop: Optional[asyncio.AbstractEventLoop] = asyncio.get_running_loop()
        except RuntimeError:
            current_loop = None

        if current_loop is not None and self._loop is not current_loop:
            if self._write_engine is not None or self._read_engine is not None:
                # Old engines belong to a dead loop; they cannot be awaited from here
                Logger.base.warning('🔄 [DB] Event loop changed, dropping old engines...')
                self._reset()
            self._loop = current_loop

        if self._write_engine is None:
            Logger.base.info('🔗 [DB] Creating engines')
            self._write_engine = self._create_engine(
                self._settings.DATABASE_URL_ASYNC, pool_size=self._settings.DB_POOL_SIZE_WRITE
            )
            read_url = self._settings.DATABASE_READ_URL_ASYNC
            self._read_engine = (
                self._write_engine
                if read_url == self._settings.DATABASE_URL_ASYNC
                else self._create_engine(read_url, pool_size=self._settings.DB_POOL_SIZE_READ)
            )

        engine = self._read_engine if read_only else self._write_engine
        if engine is None:
            raise RuntimeError('Engine manager was reset while building engines')
        return engine

    def get_session_maker(self, *, read_only: bool = False) -> async_sessionmaker[AsyncSession]:
        engine = self.get_engine(read_only=read_only)

        if read_only:
            if self._read_session_maker is None:
                self._read_session_maker = async_sessionmaker(
                    engine, class_=AsyncSession, expire_on_commit=False
                )
            return self._read_session_maker

        if self._write_session_maker is None:
            self._write_session_maker = async_sessionmaker(
                engine, class_=AsyncSession, expire_on_commit=False
            )
        return self._write_session_maker

    def _create_engine(self, url: str, *, pool_size: int) -> AsyncEngine:
        if url.startswith('sqlite'):
            # timeout is the busy wait for the write lock, the SQLite counterpart of lock_timeout
            engine = create_async_engine(
                url,
                echo=False,
                poolclass=NullPool,
                connect_args={'timeout': self._settings.BOOKING_LOCK_TIMEOUT_SECONDS},
            )
            event.listen(engine.sync_engine, 'connect', _configure_sqlite_connection)
            event.listen(engine.sync_engine, 'begin', _begin_sqlite_immediate)
            return engine

        return create_async_engine(
            url,
            echo=False,
            pool_size=pool_size,
            max_overflow=self._settings.DB_POOL_MAX_OVERFLOW,
            pool_timeout=self._settings.DB_POOL_TIMEOUT,
            pool_recycle=self._settings.DB_POOL_RECYCLE,
            pool_pre_ping=self._settings.DB_POOL_PRE_PING,
        )

    def _reset(self) -> None:
        self._write_engine = None
        self._read_engine = None
        self._write_session_maker = None
        self._read_session_maker = None

    async def dispose(self) -> None:
        """Close every pooled connection; in-flight sessions finish on their own connection"""
        engines = {id(e): e for e in (self._write_engine, self._read_engine) if e is not None}
        for engine in engines.values():
            await engine.dispose()
        self._reset()
        Logger.base.info('🧹 [DB] Engines disposed')


class Database:
    """
    Session provider bound to an AsyncEngineManager.

    Injected into repositories and units of work by the DI container.
    """

    def __init__(self, *, engine_manager: AsyncEngineManager, read_only: bool = False) -> None:
        self._engine_manager = engine_manager
        self._read_only = read_only

    @property
    def engine_manager(self) -> AsyncEngineManager:
        return self._engine_manager

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Context manager for database sessions

        Note: the session rolls back anything uncommitted on exit
        """
        session_maker = self._engine_manager.get_session_maker(read_only=self._read_only)
        async with session_maker() as session:
            yield session

    async def create_tables(self) -> None:
        """Create database tables if they don't exist"""
        engine = self._engine_manager.get_engine()
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all, checkfirst=True)

    async def drop_tables(self) -> None:
        engine = self._engine_manager.get_engine()
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self) -> None:
        await self._engine_manager.dispose()
