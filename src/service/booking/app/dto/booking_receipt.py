from datetime import datetime
from decimal import Decimal
from typing import List

import attrs
from uuid_utils import UUID

from src.service.booking.domain.entity.order_entity import Order, OrderLine
from src.service.booking.domain.enum.order_status import OrderStatus


@attrs.define(frozen=True)
class BookingReceipt:
    """What a successful booking hands back to the caller"""

    order_id: UUID
    buyer_id: str
    total_amount: Decimal
    status: OrderStatus
    created_at: datetime
    lines: List[OrderLine]

    @classmethod
    def from_order(cls, order: Order) -> 'BookingReceipt':
        return cls(
            order_id=order.id,
            buyer_id=order.buyer_id,
            total_amount=order.total_amount,
            status=order.status,
            created_at=order.created_at,
            lines=list(order.lines),
        )


@attrs.define(frozen=True)
class InventoryAuditEntry:
    """
    Conservation check for one tier.

    `sold` is total - available from the inventory row; `paid_quantity` is
    the sum of PAID order-line quantities in the ledger. They must match.
    """

    item_class_id: str
    total: int
    available: int
    sold: int
    paid_quantity: int

    @property
    def balanced(self) -> bool:
        return self.sold == self.paid_quantity
