"""
Concurrency tests for BookTicketsUseCase

Real concurrent bookings (asyncio.gather) against the in-memory store. The
payment gateway sleeps so that transactions overlap while holding locks.

Test Coverage:
1. No oversell: N buyers racing for A tickets, at most floor(A / qty) succeed
2. Last ticket: two concurrent buyers, exactly one wins
3. Opposite cart orders on two tiers never deadlock
4. Conservation and the row invariant hold after the race
"""

import asyncio
import random
from decimal import Decimal

import pytest

from src.service.booking.app.command.book_tickets_use_case import BookTicketsUseCase
from src.service.booking.app.query.audit_inventory_use_case import AuditInventoryUseCase
from src.service.booking.domain.booking_errors import InsufficientStockError
from src.service.booking.domain.enum.order_status import OrderStatus
from src.service.booking.domain.value_object.cart_item import CartItem
from src.service.booking.driven_adapter.memory.in_memory_booking_store import (
    InMemoryItemClassQueryRepo,
    InMemoryOrderQueryRepo,
)
from src.service.booking.driven_adapter.payment.mock_payment_gateway_impl import (
    MockPaymentGatewayImpl,
)

from test.shared.utils import seed_store


pytestmark = pytest.mark.unit


def _use_case(uow_factory, *, approval_rate: float = 1.0) -> BookTicketsUseCase:
    return BookTicketsUseCase(
        uow_factory=uow_factory,
        payment_gateway=MockPaymentGatewayImpl(
            approval_rate=approval_rate, latency_seconds=0.001, rng=random.Random(7)
        ),
    )


async def _audit_is_balanced(store) -> bool:
    audit = AuditInventoryUseCase(
        item_class_query_repo=InMemoryItemClassQueryRepo(store=store),
        order_query_repo=InMemoryOrderQueryRepo(store=store),
    )
    return all(entry.balanced for entry in await audit.audit())


class TestNoOversell:
    @pytest.mark.asyncio
    @pytest.mark.parametrize('available,quantity,buyers', [(10, 1, 30), (10, 3, 12), (7, 2, 20)])
    async def test_racing_buyers_never_oversell(
        self, memory_store, memory_uow_factory, available, quantity, buyers
    ):
        """
        Arrange: one tier with `available` tickets
        Act: `buyers` concurrent bookings of `quantity` each
        Assert: exactly floor(available / quantity) succeed, the rest are
                InsufficientStockError, and available never goes negative
        """
        seed_store(memory_store, [('RACE', '25.00', available)])
        use_case = _use_case(memory_uow_factory)

        results = await asyncio.gather(
            *(
                use_case.book(
                    buyer_id=f'buyer-{i}', cart_items=[CartItem(item_id='RACE', quantity=quantity)]
                )
                for i in range(buyers)
            ),
            return_exceptions=True,
        )

        successes = [r for r in results if not isinstance(r, BaseException)]
        failures = [r for r in results if isinstance(r, BaseException)]
        expected = available // quantity

        assert len(successes) == expected
        assert all(isinstance(f, InsufficientStockError) for f in failures)
        assert all(r.status == OrderStatus.PAID for r in successes)
        assert memory_store.item_classes['RACE'].available == available - expected * quantity
        assert await _audit_is_balanced(memory_store)

    @pytest.mark.asyncio
    async def test_last_ticket_has_exactly_one_winner(self, memory_store, memory_uow_factory):
        """
        Arrange: VIP with a single ticket left
        Act: two concurrent bookings of 1
        Assert: one PAID order, one InsufficientStockError that saw available=0
        """
        seed_store(memory_store, [('VIP', '100.00', 1)])
        use_case = _use_case(memory_uow_factory)

        results = await asyncio.gather(
            use_case.book(buyer_id='alice', cart_items=[CartItem(item_id='VIP', quantity=1)]),
            use_case.book(buyer_id='bob', cart_items=[CartItem(item_id='VIP', quantity=1)]),
            return_exceptions=True,
        )

        winners = [r for r in results if not isinstance(r, BaseException)]
        losers = [r for r in results if isinstance(r, InsufficientStockError)]
        assert len(winners) == 1
        assert winners[0].status == OrderStatus.PAID
        assert len(losers) == 1
        assert losers[0].available == 0
        assert memory_store.item_classes['VIP'].available == 0
        assert len(memory_store.orders) == 1


class TestLockOrdering:
    @pytest.mark.asyncio
    async def test_opposite_cart_orders_do_not_deadlock(self, memory_store, memory_uow_factory):
        """
        Arrange: carts listing VIP/GA in opposite orders
        Act: run 20 of them concurrently
        Assert: all complete well within the lock timeout
        """
        use_case = _use_case(memory_uow_factory)

        def cart(i: int) -> list[CartItem]:
            items = [CartItem(item_id='VIP', quantity=1), CartItem(item_id='GA', quantity=1)]
            return items if i % 2 else list(reversed(items))

        results = await asyncio.wait_for(
            asyncio.gather(
                *(use_case.book(buyer_id=f'buyer-{i}', cart_items=cart(i)) for i in range(20)),
                return_exceptions=True,
            ),
            timeout=1.5,
        )

        successes = [r for r in results if not isinstance(r, BaseException)]
        assert len(successes) == 10  # VIP has 10
        assert all(
            isinstance(r, InsufficientStockError) for r in results if isinstance(r, BaseException)
        )
        assert memory_store.item_classes['VIP'].available == 0
        assert memory_store.item_classes['GA'].available == 190

    @pytest.mark.asyncio
    async def test_disjoint_tiers_do_not_block_each_other(self, memory_store, memory_uow_factory):
        """
        Arrange: a transaction holds the VIP lock
        Act: book GA
        Assert: GA booking completes while VIP stays locked
        """
        await memory_store.locks.acquire(key='VIP', timeout=1)
        try:
            receipt = await asyncio.wait_for(
                _use_case(memory_uow_factory).book(
                    buyer_id='alice', cart_items=[CartItem(item_id='GA', quantity=2)]
                ),
                timeout=1,
            )
        finally:
            memory_store.locks.release(key='VIP')

        assert receipt.total_amount == Decimal('20.00')


class TestMixedOutcomes:
    @pytest.mark.asyncio
    async def test_declines_under_contention_keep_conservation(
        self, memory_store, memory_uow_factory
    ):
        """
        Arrange: gateway approving about half of the charges
        Act: 40 concurrent multi-tier bookings
        Assert: every row keeps 0 <= available <= total and sold equals PAID quantities
        """
        use_case = _use_case(memory_uow_factory, approval_rate=0.5)

        await asyncio.gather(
            *(
                use_case.book(
                    buyer_id=f'buyer-{i % 5}',
                    cart_items=[
                        CartItem(item_id='FRONT_ROW', quantity=1 + i % 3),
                        CartItem(item_id='VIP', quantity=1),
                    ],
                )
                for i in range(40)
            ),
            return_exceptions=True,
        )

        for row in memory_store.item_classes.values():
            assert 0 <= row.available <= row.total
        assert await _audit_is_balanced(memory_store)
        assert all(not memory_store.locks.locked(item_id) for item_id in memory_store.item_classes)
