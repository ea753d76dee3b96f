"""
Unit of Work Pattern - one booking transaction

Architecture:
- UoW owns the session (or the in-memory transaction) lifecycle
- UoW owns commit/rollback
- Repositories obtain the shared session through the UoW
- Row locks taken through `inventory_repo.lock_and_read` live until commit or rollback
"""

from __future__ import annotations

import abc
from contextlib import AsyncExitStack
from typing import TYPE_CHECKING, AsyncContextManager, Callable, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger


if TYPE_CHECKING:
    from src.service.booking.app.interface.i_inventory_command_repo import (
        IInventoryCommandRepo,
    )
    from src.service.booking.app.interface.i_order_command_repo import IOrderCommandRepo


class AbstractUnitOfWork(abc.ABC):
    """
    Abstract Unit of Work for the booking engine

    Responsibilities:
    - Open one transaction per `async with`
    - Coordinate inventory and ledger writes in that transaction
    - Provide commit/rollback interface

    Leaving the block without `commit()` rolls everything back and releases
    every lock the transaction holds.

    Usage:
        async with uow:
            row = await uow.inventory_repo.lock_and_read(item_id='VIP')
            ...
            await uow.commit()
    """

    inventory_repo: IInventoryCommandRepo
    order_repo: IOrderCommandRepo

    async def __aenter__(self) -> AbstractUnitOfWork:
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    async def commit(self):
        """Commit the transaction"""
        await self._commit()

    @abc.abstractmethod
    async def _commit(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    async def rollback(self) -> None:
        raise NotImplementedError


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    """
    SQLAlchemy implementation of Unit of Work

    Row locks are `SELECT ... FOR UPDATE`. On PostgreSQL the wait for a lock is
    bounded with `SET LOCAL lock_timeout`, so a stuck holder surfaces as a
    database error instead of an indefinite hang.
    SQLite engines begin every transaction IMMEDIATE, which bounds the wait
    the same way through the driver's busy timeout.
    """

    def __init__(
        self,
        *,
        session_factory: Callable[[], AsyncContextManager[AsyncSession]],
        lock_timeout_seconds: float,
    ):
        self.session_factory = session_factory
        self.lock_timeout_seconds = lock_timeout_seconds
        self.session: Optional[AsyncSession] = None
        self._exit_stack: Optional[AsyncExitStack] = None

    async def __aenter__(self):
        from src.service.booking.driven_adapter.repo.inventory_command_repo_impl import (
            InventoryCommandRepoImpl,
        )
        from src.service.booking.driven_adapter.repo.order_command_repo_impl import (
            OrderCommandRepoImpl,
        )

        self._exit_stack = AsyncExitStack()
        self.session = await self._exit_stack.enter_async_context(self.session_factory())

        if self.session.get_bind().dialect.name == 'postgresql':
            timeout_ms = max(1, int(self.lock_timeout_seconds * 1000))
            await self.session.execute(text(f"SET LOCAL lock_timeout = '{timeout_ms}ms'"))

        # Repositories share this session
        self.inventory_repo = InventoryCommandRepoImpl(session=self.session)
        self.order_repo = OrderCommandRepoImpl(session=self.session)

        return await super().__aenter__()

    async def __aexit__(self, *args):
        try:
            await super().__aexit__(*args)
        finally:
            if self._exit_stack is not None:
                await self._exit_stack.aclose()
                self._exit_stack = None
            self.session = None

    async def _commit(self):
        if self.session is None:
            raise RuntimeError('commit() outside of `async with`')
        await self.session.commit()

    async def rollback(self) -> None:
        if self.session is None:
            return
        try:
            await self.session.rollback()
        except Exception as e:
            # The connection may already be gone; closing the session still releases it
            Logger.base.warning(f'⚠️ [UOW] Rollback failed: {e}')
