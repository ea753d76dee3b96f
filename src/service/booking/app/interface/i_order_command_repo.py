from abc import ABC, abstractmethod

from src.service.booking.domain.entity.order_entity import Order


class IOrderCommandRepo(ABC):
    """Append-only order ledger, written inside the booking transaction"""

    @abstractmethod
    async def append(self, *, order: Order) -> Order:
        """
        Stage the order and all of its lines in the current transaction.

        Returns:
            The order with ledger-assigned line ids
        """
        pass
