from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

import attrs
import uuid_utils
from uuid_utils import UUID

from src.platform.exception.exceptions import DomainError
from src.service.booking.domain.entity.item_class_entity import ItemClass
from src.service.booking.domain.enum.order_status import OrderStatus
from src.service.booking.domain.value_object.money import sum_money, to_money


@attrs.define(frozen=True)
class OrderLine:
    item_class_id: str
    quantity: int
    unit_price_at_purchase: Decimal = attrs.field(converter=to_money)
    id: Optional[int] = None  # Assigned by the ledger on append
    order_id: Optional[UUID] = None

    def __attrs_post_init__(self) -> None:
        if self.quantity <= 0:
            raise DomainError(f'Order line quantity must be positive, got {self.quantity}')

    @classmethod
    def snapshot(cls, *, item_class: ItemClass, quantity: int) -> 'OrderLine':
        """Freeze the tier's current price into the line"""
        return cls(
            item_class_id=item_class.id,
            quantity=quantity,
            unit_price_at_purchase=item_class.unit_price,
        )

    @property
    def line_total(self) -> Decimal:
        return to_money(self.unit_price_at_purchase * self.quantity)


def total_of(lines: List[OrderLine]) -> Decimal:
    return sum_money(line.line_total for line in lines)


@attrs.define(frozen=True)
class Order:
    id: UUID
    buyer_id: str
    total_amount: Decimal = attrs.field(converter=to_money)
    status: OrderStatus
    created_at: datetime
    lines: List[OrderLine] = attrs.field(factory=list)

    def __attrs_post_init__(self) -> None:
        if not self.lines:
            raise DomainError('Order must have at least one line')
        if self.total_amount != total_of(self.lines):
            raise DomainError(
                f'Order total {self.total_amount} does not match its lines {total_of(self.lines)}'
            )

    @classmethod
    def create_paid(
        cls, *, buyer_id: str, lines: List[OrderLine], now: Optional[datetime] = None
    ) -> 'Order':
        order_id = uuid_utils.uuid7()
        return cls(
            id=order_id,
            buyer_id=buyer_id,
            total_amount=total_of(lines),
            status=OrderStatus.PAID,
            created_at=now or datetime.now(timezone.utc),
            lines=[attrs.evolve(line, order_id=order_id) for line in lines],
        )

    def with_persisted_lines(self, lines: List[OrderLine]) -> 'Order':
        return attrs.evolve(self, lines=lines)
