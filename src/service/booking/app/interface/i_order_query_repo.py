from abc import ABC, abstractmethod
from typing import Dict, List

from src.service.booking.domain.entity.order_entity import Order


class IOrderQueryRepo(ABC):
    @abstractmethod
    async def list_by_buyer(self, *, buyer_id: str) -> List[Order]:
        """
        Committed orders of one buyer with their lines, newest first.

        Orders created in the same clock tick keep ledger insertion order
        (newest first) as the tie-break.
        """
        pass

    @abstractmethod
    async def sum_paid_quantities_by_item_class(self) -> Dict[str, int]:
        """Sum of line quantities over PAID orders, keyed by item class id"""
        pass
