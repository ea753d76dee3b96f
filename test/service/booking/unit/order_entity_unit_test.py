from datetime import datetime, timezone
from decimal import Decimal

import pytest
from uuid_utils import UUID

from src.platform.exception.exceptions import DomainError
from src.service.booking.domain.entity.item_class_entity import ItemClass
from src.service.booking.domain.entity.order_entity import Order, OrderLine, total_of
from src.service.booking.domain.enum.order_status import OrderStatus


pytestmark = pytest.mark.unit


def _line(item_id: str = 'VIP', quantity: int = 2, price: str = '100.00') -> OrderLine:
    return OrderLine(
        item_class_id=item_id, quantity=quantity, unit_price_at_purchase=Decimal(price)
    )


class TestOrderLine:
    def test_snapshot_freezes_current_price(self):
        vip = ItemClass.create(id='VIP', unit_price=Decimal('100.00'), total=10)

        line = OrderLine.snapshot(item_class=vip, quantity=3)

        assert line.item_class_id == 'VIP'
        assert line.unit_price_at_purchase == Decimal('100.00')
        assert line.line_total == Decimal('300.00')

    def test_rejects_non_positive_quantity(self):
        with pytest.raises(DomainError):
            _line(quantity=0)


class TestOrder:
    def test_create_paid(self):
        """
        Arrange: two lines (2 x 100.00, 3 x 10.00)
        Act: create a PAID order
        Assert: UUID7 id shared with the lines, total is the sum of line totals
        """
        lines = [_line('VIP', 2, '100.00'), _line('GA', 3, '10.00')]

        order = Order.create_paid(buyer_id='alice', lines=lines)

        assert isinstance(order.id, UUID)
        assert order.id.version == 7
        assert order.status == OrderStatus.PAID
        assert order.total_amount == Decimal('230.00')
        assert order.created_at.tzinfo is not None
        assert all(line.order_id == order.id for line in order.lines)

    def test_rejects_empty_order(self):
        with pytest.raises(DomainError):
            Order.create_paid(buyer_id='alice', lines=[])

    def test_rejects_total_that_does_not_match_lines(self):
        lines = [_line('VIP', 1, '100.00')]

        with pytest.raises(DomainError):
            Order(
                id=UUID('01936d8f-5e73-7c4e-a9c5-123456789abc'),
                buyer_id='alice',
                total_amount=Decimal('99.99'),
                status=OrderStatus.PAID,
                created_at=datetime.now(timezone.utc),
                lines=lines,
            )

    def test_total_of_rounds_to_cents(self):
        assert total_of([_line('GA', 3, '0.33')]) == Decimal('0.99')
