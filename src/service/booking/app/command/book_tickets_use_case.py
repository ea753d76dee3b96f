"""
Book Tickets Use Case

The booking transaction coordinator: turns a cart into a PAID order while
keeping inventory and ledger consistent under any number of concurrent callers.

Flow (one unit of work):
1. Validate and merge the cart (no transaction yet)
2. Lock every requested item class in sorted id order, checking stock
3. Price the cart from the locked rows
4. Charge the payment gateway
5. Append the order and its lines
6. Decrement every locked row
7. Commit (locks release with it)

Any failure in steps 2-6 rolls the unit of work back, so inventory and the
ledger are left exactly as they were.
"""

import time
from typing import Callable, Dict, List, Mapping, Self, Sequence, Tuple

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import booking_metrics
from src.service.booking.app.dto.booking_receipt import BookingReceipt
from src.service.booking.app.interface.i_payment_gateway import IPaymentGateway
from src.service.booking.domain.booking_errors import (
    BookingError,
    InfrastructureFailureError,
    InsufficientStockError,
    InvalidInputError,
    PaymentDeclinedError,
    UnknownTierError,
)
from src.service.booking.domain.entity.item_class_entity import ItemClass
from src.service.booking.domain.entity.order_entity import Order, OrderLine, total_of
from src.service.booking.domain.value_object.cart_item import CartItem


def _is_positive_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


class BookTicketsUseCase:
    """
    Booking transaction coordinator

    Dependencies:
    - uow_factory: builds a fresh unit of work per booking (SQL or in-memory)
    - payment_gateway: charges the buyer once stock is confirmed
    """

    def __init__(
        self,
        *,
        uow_factory: Callable[[], AbstractUnitOfWork],
        payment_gateway: IPaymentGateway,
    ) -> None:
        self.uow_factory = uow_factory
        self.payment_gateway = payment_gateway
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: Callable[[], AbstractUnitOfWork] = Depends(
            Provide[Container.unit_of_work.provider]
        ),
        payment_gateway: IPaymentGateway = Depends(Provide[Container.payment_gateway]),
    ) -> Self:
        return cls(uow_factory=uow_factory, payment_gateway=payment_gateway)

    @staticmethod
    def validate_cart(
        *, buyer_id: object, cart_items: Sequence[CartItem]
    ) -> Tuple[str, Dict[str, int]]:
        """
        Check the request shape and merge duplicate item ids.

        Returns:
            (buyer_id, {item_id: total quantity})

        Raises:
            InvalidInputError: empty buyer, empty cart, blank item id or non-positive quantity
        """
        if not isinstance(buyer_id, str) or not buyer_id.strip():
            raise InvalidInputError('buyer_id must be a non-empty string', field='buyer_id')
        if not cart_items:
            raise InvalidInputError('cart_items must not be empty', field='cart_items')

        quantities: Dict[str, int] = {}
        for item in cart_items:
            if not isinstance(item.item_id, str) or not item.item_id.strip():
                raise InvalidInputError('item_id must be a non-empty string', field='item_id')
            if not _is_positive_int(item.quantity):
                raise InvalidInputError(
                    f'quantity for {item.item_id} must be a positive integer, '
                    f'got {item.quantity!r}',
                    field='quantity',
                )
            # Duplicates are merged; the cart is validated against the combined quantity
            quantities[item.item_id] = quantities.get(item.item_id, 0) + item.quantity

        return buyer_id, quantities

    @Logger.io
    async def book(self, *, buyer_id: str, cart_items: Sequence[CartItem]) -> BookingReceipt:
        """
        Book a cart for a buyer, all or nothing.

        Raises:
            InvalidInputError: malformed request (nothing was locked)
            UnknownTierError: an item id has no inventory row
            InsufficientStockError: a tier cannot cover the requested quantity
            PaymentDeclinedError: the gateway refused the charge
            InfrastructureFailureError: lock timeout, storage fault or any other internal error
        """
        started = time.perf_counter()
        result = 'success'
        booking_metrics.bookings_in_flight.inc()

        try:
            buyer_id, quantities = self.validate_cart(buyer_id=buyer_id, cart_items=cart_items)

            with self.tracer.start_as_current_span(
                'use_case.book_tickets',
                attributes={
                    'booking.buyer_id': buyer_id,
                    'booking.item_ids': sorted(quantities),
                    'booking.quantity': sum(quantities.values()),
                },
            ) as span:
                order = await self._run_transaction(buyer_id=buyer_id, quantities=quantities)
                span.set_attribute('booking.order_id', str(order.id))
                span.set_attribute('booking.total_amount', str(order.total_amount))

        except BookingError as e:
            result = e.error_code
            raise
        except Exception as e:
            result = InfrastructureFailureError.error_code
            Logger.base.opt(exception=e).error(
                f'💥 [BOOK] Internal failure for buyer {buyer_id}: {type(e).__name__}: {e}'
            )
            raise InfrastructureFailureError() from e
        finally:
            booking_metrics.bookings_in_flight.dec()
            booking_metrics.record_booking(result=result, duration=time.perf_counter() - started)

        for line in order.lines:
            booking_metrics.record_tickets_sold(
                item_class_id=line.item_class_id, quantity=line.quantity
            )
        return BookingReceipt.from_order(order)

    async def _run_transaction(self, *, buyer_id: str, quantities: Mapping[str, int]) -> Order:
        item_ids = sorted(quantities)

        async with self.uow_factory() as uow:
            try:
                # Step 1: lock in a global order so two carts can never wait on each other
                locked: Dict[str, ItemClass] = {}
                for item_id in item_ids:
                    row = await uow.inventory_repo.lock_and_read(item_id=item_id)
                    if row is None:
                        raise UnknownTierError(item_id=item_id)

                    requested = quantities[item_id]
                    if not row.can_fulfil(requested):
                        raise InsufficientStockError(
                            item_id=item_id, requested=requested, available=row.available
                        )
                    locked[item_id] = row

                # Step 2: price from the locked rows; these prices go into the ledger unchanged
                lines: List[OrderLine] = [
                    OrderLine.snapshot(item_class=locked[item_id], quantity=quantities[item_id])
                    for item_id in item_ids
                ]
                total = total_of(lines)
                Logger.base.info(
                    f'🔒 [BOOK] Locked {item_ids} for buyer {buyer_id}, total {total}'
                )

                # Step 3: charge before any write
                if not await self.payment_gateway.charge(buyer_id=buyer_id, amount=total):
                    raise PaymentDeclinedError(amount=total)

                # Step 4: ledger, then inventory
                order = await uow.order_repo.append(
                    order=Order.create_paid(buyer_id=buyer_id, lines=lines)
                )
                for item_id in item_ids:
                    await uow.inventory_repo.decrement(
                        item_id=item_id, quantity=quantities[item_id]
                    )

                await uow.commit()
            except BaseException as e:
                Logger.base.info(f'↩️ [ROLLBACK] Buyer {buyer_id}: {type(e).__name__}')
                raise

        Logger.base.info(
            f'✅ [COMMIT] Order {order.id} for buyer {buyer_id}: '
            f'{dict(quantities)} total {order.total_amount}'
        )
        return order
