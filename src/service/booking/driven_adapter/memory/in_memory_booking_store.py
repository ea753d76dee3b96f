"""
In-memory booking store

Process-local backend for the booking engine (BOOKING_STORE_BACKEND=memory).
Row locks are keyed asyncio locks; writes are staged per transaction and
applied to the shared tables on commit, so a rolled-back transaction leaves
no trace.
"""

import itertools
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional, Set, Tuple

import attrs

from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.logging.loguru_io import Logger
from src.platform.state.keyed_lock_table import KeyedLockTable
from src.service.booking.app.interface.i_inventory_command_repo import IInventoryCommandRepo
from src.service.booking.app.interface.i_item_class_query_repo import IItemClassQueryRepo
from src.service.booking.app.interface.i_order_command_repo import IOrderCommandRepo
from src.service.booking.app.interface.i_order_query_repo import IOrderQueryRepo
from src.service.booking.domain.entity.item_class_entity import (
    InventoryInvariantError,
    ItemClass,
)
from src.service.booking.domain.entity.order_entity import Order
from src.service.booking.domain.enum.order_status import OrderStatus


class InMemoryBookingStore:
    """Committed state shared by every transaction of one process"""

    def __init__(self) -> None:
        self.item_classes: Dict[str, ItemClass] = {}
        # (ledger sequence, order) in commit order
        self.orders: List[Tuple[int, Order]] = []
        self.locks = KeyedLockTable()
        self._order_seq = itertools.count(1)
        self._line_seq = itertools.count(1)

    def next_line_id(self) -> int:
        return next(self._line_seq)

    def apply(
        self,
        *,
        rows: Dict[str, ItemClass],
        inserts: Dict[str, ItemClass],
        orders: List[Order],
    ) -> None:
        # No await in here: the whole commit is one step for the event loop
        for item_id, item_class in inserts.items():
            self.item_classes.setdefault(item_id, item_class)
        self.item_classes.update(rows)
        for order in orders:
            self.orders.append((next(self._order_seq), order))


class InMemoryTransaction:
    """Locks held and writes staged by one unit of work"""

    def __init__(self, *, store: InMemoryBookingStore, lock_timeout_seconds: float) -> None:
        self.store = store
        self.lock_timeout_seconds = lock_timeout_seconds
        self.held: List[str] = []
        self._held_set: Set[str] = set()
        self.rows: Dict[str, ItemClass] = {}
        self.inserts: Dict[str, ItemClass] = {}
        self.orders: List[Order] = []
        self.closed = False

    def holds(self, item_id: str) -> bool:
        return item_id in self._held_set

    async def lock(self, item_id: str) -> None:
        if self.holds(item_id):
            return
        await self.store.locks.acquire(key=item_id, timeout=self.lock_timeout_seconds)
        self.held.append(item_id)
        self._held_set.add(item_id)

    def read(self, item_id: str) -> Optional[ItemClass]:
        if item_id in self.rows:
            return self.rows[item_id]
        if item_id in self.inserts:
            return self.inserts[item_id]
        return self.store.item_classes.get(item_id)

    def commit(self) -> None:
        self.store.apply(rows=self.rows, inserts=self.inserts, orders=self.orders)
        self._close()

    def rollback(self) -> None:
        self._close()

    def _close(self) -> None:
        if self.closed:
            return
        self.rows.clear()
        self.inserts.clear()
        self.orders.clear()
        for item_id in reversed(self.held):
            self.store.locks.release(key=item_id)
        self.held.clear()
        self._held_set.clear()
        self.closed = True


class InMemoryInventoryCommandRepo(IInventoryCommandRepo):
    def __init__(self, *, tx: InMemoryTransaction) -> None:
        self.tx = tx

    @Logger.io
    async def lock_and_read(self, *, item_id: str) -> ItemClass | None:
        # Rows are never deleted, so an absent id needs no lock
        if self.tx.read(item_id) is None:
            return None
        await self.tx.lock(item_id)
        return self.tx.read(item_id)

    def _require_locked_row(self, item_id: str) -> ItemClass:
        if not self.tx.holds(item_id):
            raise InventoryInvariantError(f'Write to {item_id} without holding its lock')
        row = self.tx.read(item_id)
        if row is None:
            raise InventoryInvariantError(f'Write to missing item class {item_id}')
        return row

    @Logger.io
    async def decrement(self, *, item_id: str, quantity: int) -> ItemClass:
        row = self._require_locked_row(item_id)
        updated = row.decrement(quantity, now=datetime.now(timezone.utc))
        self.tx.rows[item_id] = updated
        return updated

    @Logger.io
    async def update_unit_price(self, *, item_id: str, unit_price: Decimal) -> ItemClass:
        row = self._require_locked_row(item_id)
        updated = row.with_unit_price(unit_price, now=datetime.now(timezone.utc))
        self.tx.rows[item_id] = updated
        return updated

    @Logger.io
    async def add_if_absent(self, *, item_class: ItemClass) -> bool:
        if self.tx.read(item_class.id) is not None:
            return False
        self.tx.inserts[item_class.id] = item_class
        return True


class InMemoryOrderCommandRepo(IOrderCommandRepo):
    def __init__(self, *, tx: InMemoryTransaction) -> None:
        self.tx = tx

    @Logger.io
    async def append(self, *, order: Order) -> Order:
        lines = [attrs.evolve(line, id=self.tx.store.next_line_id()) for line in order.lines]
        persisted = order.with_persisted_lines(lines)
        self.tx.orders.append(persisted)
        return persisted


class InMemoryUnitOfWork(AbstractUnitOfWork):
    def __init__(self, *, store: InMemoryBookingStore, lock_timeout_seconds: float):
        self.store = store
        self.lock_timeout_seconds = lock_timeout_seconds
        self.tx: Optional[InMemoryTransaction] = None

    async def __aenter__(self):
        self.tx = InMemoryTransaction(
            store=self.store, lock_timeout_seconds=self.lock_timeout_seconds
        )
        self.inventory_repo = InMemoryInventoryCommandRepo(tx=self.tx)
        self.order_repo = InMemoryOrderCommandRepo(tx=self.tx)
        return await super().__aenter__()

    async def _commit(self) -> None:
        if self.tx is None:
            raise RuntimeError('commit() outside of `async with`')
        self.tx.commit()

    async def rollback(self) -> None:
        if self.tx is not None:
            self.tx.rollback()


class InMemoryItemClassQueryRepo(IItemClassQueryRepo):
    def __init__(self, *, store: InMemoryBookingStore) -> None:
        self.store = store

    @Logger.io
    async def list_item_classes(self) -> List[ItemClass]:
        return sorted(self.store.item_classes.values(), key=lambda ic: ic.id)


class InMemoryOrderQueryRepo(IOrderQueryRepo):
    def __init__(self, *, store: InMemoryBookingStore) -> None:
        self.store = store

    @Logger.io
    async def list_by_buyer(self, *, buyer_id: str) -> List[Order]:
        entries = [(seq, order) for seq, order in self.store.orders if order.buyer_id == buyer_id]
        entries.sort(key=lambda entry: (entry[1].created_at, entry[0]), reverse=True)
        return [order for _, order in entries]

    @Logger.io
    async def sum_paid_quantities_by_item_class(self) -> Dict[str, int]:
        totals: Dict[str, int] = {}
        for _, order in self.store.orders:
            if order.status != OrderStatus.PAID:
                continue
            for line in order.lines:
                totals[line.item_class_id] = totals.get(line.item_class_id, 0) + line.quantity
        return totals
