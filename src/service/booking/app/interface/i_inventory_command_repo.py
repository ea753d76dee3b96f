"""
Inventory Command Repository Interface

Row-locking primitives over the item_class table. Every method runs inside
the caller's unit of work; nothing here commits.
"""

from abc import ABC, abstractmethod
from decimal import Decimal

from src.service.booking.domain.entity.item_class_entity import ItemClass


class IInventoryCommandRepo(ABC):
    @abstractmethod
    async def lock_and_read(self, *, item_id: str) -> ItemClass | None:
        """
        Take the exclusive, transaction-scoped lock on one item class and read it.

        Blocks while another transaction holds the same item class; the lock is
        released when the enclosing unit of work commits or rolls back. Taking a
        lock the current transaction already holds returns the current row.

        Args:
            item_id: Tier key (e.g. 'VIP')

        Returns:
            The locked row, or None if no such item class exists
        """
        pass

    @abstractmethod
    async def decrement(self, *, item_id: str, quantity: int) -> ItemClass:
        """
        Subtract quantity from available.

        Precondition: lock_and_read(item_id) was called in this transaction and
        the caller checked quantity <= available.

        Raises:
            InventoryInvariantError: lock not held, or the result would leave
                available outside 0..total
        """
        pass

    @abstractmethod
    async def update_unit_price(self, *, item_id: str, unit_price: Decimal) -> ItemClass:
        """Change the catalog price of a locked item class; quantities are untouched"""
        pass

    @abstractmethod
    async def add_if_absent(self, *, item_class: ItemClass) -> bool:
        """
        Insert a new item class unless one with the same id exists.

        Returns:
            True if inserted
        """
        pass
