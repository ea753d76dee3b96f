"""
Integration tests for the SQLAlchemy adapters (aiosqlite)

Exercises the real ORM mapping, FK cascade and transaction boundaries. SQLite
transactions open with BEGIN IMMEDIATE, so concurrent bookings queue on the
database write lock.

Test Coverage:
1. Seeding through INSERT ... ON CONFLICT DO NOTHING
2. Commit writes the order, its lines and the decrement together
3. Any failure inside the transaction leaves no trace
4. Price snapshots survive catalog price changes
5. Order history ordering, audit sums and line cascade on delete
6. Two concurrent bookings for the last seat: one wins, the other sees 0 left
"""

import asyncio
import uuid
from decimal import Decimal
from functools import partial
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from sqlalchemy import delete, func, select

from src.platform.config.core_setting import SeedItemClass
from src.platform.database.unit_of_work import SqlAlchemyUnitOfWork
from src.service.booking.app.command.book_tickets_use_case import BookTicketsUseCase
from src.service.booking.app.command.seed_inventory_use_case import SeedInventoryUseCase
from src.service.booking.app.command.update_item_class_price_use_case import (
    UpdateItemClassPriceUseCase,
)
from src.service.booking.app.query.audit_inventory_use_case import AuditInventoryUseCase
from src.service.booking.domain.booking_errors import (
    InsufficientStockError,
    PaymentDeclinedError,
    UnknownTierError,
)
from src.service.booking.domain.entity.item_class_entity import InventoryInvariantError
from src.service.booking.domain.enum.order_status import OrderStatus
from src.service.booking.domain.value_object.cart_item import CartItem
from src.service.booking.driven_adapter.model.order_model import OrderLineModel, OrderModel
from src.service.booking.driven_adapter.payment.mock_payment_gateway_impl import (
    MockPaymentGatewayImpl,
)
from src.service.booking.driven_adapter.repo.item_class_query_repo_impl import (
    ItemClassQueryRepoImpl,
)
from src.service.booking.driven_adapter.repo.order_query_repo_impl import OrderQueryRepoImpl

from test.test_constants import ANOTHER_BUYER_ID, DEFAULT_SEED, TEST_BUYER_ID


pytestmark = pytest.mark.integration


SEEDS = [
    SeedItemClass(id=item_id, unit_price=Decimal(price), total=total)
    for item_id, price, total in DEFAULT_SEED
]


@pytest.fixture
def uow_factory(sqlite_database):
    return partial(
        SqlAlchemyUnitOfWork, session_factory=sqlite_database.session, lock_timeout_seconds=2.0
    )


@pytest.fixture
def payment_gateway():
    gateway = AsyncMock()
    gateway.charge.return_value = True
    return gateway


@pytest.fixture
def catalog_repo(sqlite_database):
    return ItemClassQueryRepoImpl(session_factory=sqlite_database.session)


@pytest.fixture
def order_query_repo(sqlite_database):
    return OrderQueryRepoImpl(session_factory=sqlite_database.session)


async def _catalog(catalog_repo) -> dict:
    return {ic.id: ic for ic in await catalog_repo.list_item_classes()}


class TestSeedInventorySql:
    @pytest.mark.asyncio
    async def test_seed_is_idempotent(self, uow_factory, catalog_repo):
        use_case = SeedInventoryUseCase(uow_factory=uow_factory)

        first = await use_case.seed(item_classes=SEEDS)
        second = await use_case.seed(item_classes=SEEDS)

        assert sorted(first) == ['FRONT_ROW', 'GA', 'VIP']
        assert second == []
        catalog = await _catalog(catalog_repo)
        assert catalog['VIP'].unit_price == Decimal('100.00')
        assert catalog['GA'].available == catalog['GA'].total == 200


class TestBookTicketsSql:
    @pytest_asyncio.fixture(autouse=True)
    async def _seeded(self, uow_factory):
        await SeedInventoryUseCase(uow_factory=uow_factory).seed(item_classes=SEEDS)

    @pytest.mark.asyncio
    async def test_commit_persists_order_lines_and_stock(
        self, uow_factory, payment_gateway, catalog_repo, order_query_repo
    ):
        """
        Given: seeded catalog
        When: alice books 2 VIP + 3 GA
        Then: one PAID order with both lines is stored, stock drops by the same amounts
        """
        use_case = BookTicketsUseCase(uow_factory=uow_factory, payment_gateway=payment_gateway)

        receipt = await use_case.book(
            buyer_id=TEST_BUYER_ID,
            cart_items=[CartItem(item_id='VIP', quantity=2), CartItem(item_id='GA', quantity=3)],
        )

        assert receipt.total_amount == Decimal('230.00')
        catalog = await _catalog(catalog_repo)
        assert catalog['VIP'].available == 8
        assert catalog['GA'].available == 197
        assert catalog['VIP'].updated_at is not None

        orders = await order_query_repo.list_by_buyer(buyer_id=TEST_BUYER_ID)
        assert len(orders) == 1
        assert orders[0].id == receipt.order_id
        assert orders[0].status == OrderStatus.PAID
        assert {(line.item_class_id, line.quantity) for line in orders[0].lines} == {
            ('VIP', 2),
            ('GA', 3),
        }
        assert all(line.id is not None for line in orders[0].lines)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        'cart,charge_result,expected_error',
        [
            ([('GA', 1), ('NOPE', 1)], True, UnknownTierError),
            ([('GA', 5), ('VIP', 11)], True, InsufficientStockError),
            ([('GA', 5), ('VIP', 1)], False, PaymentDeclinedError),
        ],
    )
    async def test_failure_rolls_back_everything(
        self,
        uow_factory,
        payment_gateway,
        catalog_repo,
        order_query_repo,
        cart,
        charge_result,
        expected_error,
    ):
        payment_gateway.charge.return_value = charge_result
        use_case = BookTicketsUseCase(uow_factory=uow_factory, payment_gateway=payment_gateway)

        with pytest.raises(expected_error):
            await use_case.book(
                buyer_id=TEST_BUYER_ID,
                cart_items=[CartItem(item_id=i, quantity=q) for i, q in cart],
            )

        catalog = await _catalog(catalog_repo)
        assert catalog['GA'].available == 200
        assert catalog['VIP'].available == 10
        assert await order_query_repo.list_by_buyer(buyer_id=TEST_BUYER_ID) == []

    @pytest.mark.asyncio
    async def test_price_update_keeps_purchase_snapshot(
        self, uow_factory, payment_gateway, order_query_repo
    ):
        use_case = BookTicketsUseCase(uow_factory=uow_factory, payment_gateway=payment_gateway)
        await use_case.book(
            buyer_id=TEST_BUYER_ID, cart_items=[CartItem(item_id='VIP', quantity=1)]
        )

        updated = await UpdateItemClassPriceUseCase(uow_factory=uow_factory).update_price(
            item_id='VIP', unit_price=Decimal('175.5')
        )
        second = await use_case.book(
            buyer_id=TEST_BUYER_ID, cart_items=[CartItem(item_id='VIP', quantity=1)]
        )

        assert updated.unit_price == Decimal('175.50')
        assert second.total_amount == Decimal('175.50')
        newest, oldest = await order_query_repo.list_by_buyer(buyer_id=TEST_BUYER_ID)
        assert newest.id == second.order_id
        assert oldest.total_amount == Decimal('100.00')
        assert oldest.lines[0].unit_price_at_purchase == Decimal('100.00')

    @pytest.mark.asyncio
    async def test_history_is_per_buyer_newest_first(
        self, uow_factory, payment_gateway, order_query_repo
    ):
        use_case = BookTicketsUseCase(uow_factory=uow_factory, payment_gateway=payment_gateway)
        receipts = [
            await use_case.book(
                buyer_id=TEST_BUYER_ID, cart_items=[CartItem(item_id='GA', quantity=n)]
            )
            for n in (1, 2, 3)
        ]
        await use_case.book(
            buyer_id=ANOTHER_BUYER_ID, cart_items=[CartItem(item_id='GA', quantity=1)]
        )

        orders = await order_query_repo.list_by_buyer(buyer_id=TEST_BUYER_ID)

        assert [o.id for o in orders] == [r.order_id for r in reversed(receipts)]
        assert await order_query_repo.list_by_buyer(buyer_id='nobody') == []

    @pytest.mark.asyncio
    async def test_audit_sums_paid_lines(
        self, uow_factory, payment_gateway, catalog_repo, order_query_repo
    ):
        use_case = BookTicketsUseCase(uow_factory=uow_factory, payment_gateway=payment_gateway)
        await use_case.book(
            buyer_id=TEST_BUYER_ID, cart_items=[CartItem(item_id='VIP', quantity=4)]
        )
        await use_case.book(
            buyer_id=ANOTHER_BUYER_ID,
            cart_items=[CartItem(item_id='VIP', quantity=1), CartItem(item_id='GA', quantity=7)],
        )
        audit = AuditInventoryUseCase(
            item_class_query_repo=catalog_repo, order_query_repo=order_query_repo
        )

        entries = {entry.item_class_id: entry for entry in await audit.audit()}

        assert entries['VIP'].paid_quantity == entries['VIP'].sold == 5
        assert entries['GA'].paid_quantity == entries['GA'].sold == 7
        assert entries['FRONT_ROW'].paid_quantity == 0
        assert all(entry.balanced for entry in entries.values())


class TestSqlAdapterInvariants:
    @pytest_asyncio.fixture(autouse=True)
    async def _seeded(self, uow_factory):
        await SeedInventoryUseCase(uow_factory=uow_factory).seed(item_classes=SEEDS)

    @pytest.mark.asyncio
    async def test_write_without_lock_is_refused(self, uow_factory):
        async with uow_factory() as uow:
            with pytest.raises(InventoryInvariantError):
                await uow.inventory_repo.decrement(item_id='VIP', quantity=1)

    @pytest.mark.asyncio
    async def test_uncommitted_work_is_discarded(self, uow_factory, catalog_repo):
        async with uow_factory() as uow:
            await uow.inventory_repo.lock_and_read(item_id='VIP')
            await uow.inventory_repo.decrement(item_id='VIP', quantity=3)
            # leave without commit

        assert (await _catalog(catalog_repo))['VIP'].available == 10

    @pytest.mark.asyncio
    async def test_commit_after_the_block_is_refused(self, uow_factory):
        uow = uow_factory()
        async with uow:
            await uow.inventory_repo.lock_and_read(item_id='VIP')

        with pytest.raises(RuntimeError, match='outside of `async with`'):
            await uow.commit()

    @pytest.mark.asyncio
    async def test_deleting_order_cascades_to_lines(
        self, uow_factory, payment_gateway, sqlite_database
    ):
        use_case = BookTicketsUseCase(uow_factory=uow_factory, payment_gateway=payment_gateway)
        receipt = await use_case.book(
            buyer_id=TEST_BUYER_ID,
            cart_items=[CartItem(item_id='VIP', quantity=1), CartItem(item_id='GA', quantity=1)],
        )

        order_id = uuid.UUID(str(receipt.order_id))
        async with sqlite_database.session() as session:
            await session.execute(delete(OrderModel).where(OrderModel.id == order_id))
            await session.commit()

        async with sqlite_database.session() as session:
            remaining = await session.scalar(select(func.count()).select_from(OrderLineModel))

        assert remaining == 0


class TestSqlRowLocking:
    @pytest.mark.asyncio
    async def test_concurrent_bookings_for_last_seat_do_not_oversell(
        self, uow_factory, catalog_repo, order_query_repo
    ):
        """
        Given: VIP with a single seat and a gateway that takes 50ms to answer
        When: two buyers book that seat at the same time
        Then: exactly one PAID order, the other gets InsufficientStockError with 0 left
        """
        await SeedInventoryUseCase(uow_factory=uow_factory).seed(
            item_classes=[SeedItemClass(id='VIP', unit_price=Decimal('100.00'), total=1)]
        )
        use_case = BookTicketsUseCase(
            uow_factory=uow_factory,
            payment_gateway=MockPaymentGatewayImpl(latency_seconds=0.05),
        )

        results = await asyncio.gather(
            use_case.book(buyer_id=TEST_BUYER_ID, cart_items=[CartItem(item_id='VIP', quantity=1)]),
            use_case.book(
                buyer_id=ANOTHER_BUYER_ID, cart_items=[CartItem(item_id='VIP', quantity=1)]
            ),
            return_exceptions=True,
        )

        receipts = [r for r in results if not isinstance(r, BaseException)]
        errors = [r for r in results if isinstance(r, BaseException)]
        assert len(receipts) == 1
        assert receipts[0].status == OrderStatus.PAID
        assert len(errors) == 1
        assert isinstance(errors[0], InsufficientStockError)
        assert (errors[0].requested, errors[0].available) == (1, 0)

        assert (await _catalog(catalog_repo))['VIP'].available == 0
        audit = AuditInventoryUseCase(
            item_class_query_repo=catalog_repo, order_query_repo=order_query_repo
        )
        (entry,) = await audit.audit()
        assert entry.paid_quantity == entry.sold == 1
        assert entry.balanced
