from typing import List

from fastapi import APIRouter, Depends, status
from opentelemetry import trace

from src.platform.constant.route_constant import BOOK, ORDERS_BY_BUYER
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.command.book_tickets_use_case import BookTicketsUseCase
from src.service.booking.app.query.list_orders_by_buyer_use_case import ListOrdersByBuyerUseCase
from src.service.booking.domain.entity.order_entity import OrderLine
from src.service.booking.domain.value_object.cart_item import CartItem
from src.service.booking.driving_adapter.http_controller.schema.booking_schema import (
    BookCartRequest,
    BookingResponse,
    OrderLineResponse,
    OrderResponse,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


def _line_response(line: OrderLine) -> OrderLineResponse:
    return OrderLineResponse(
        item_class_id=line.item_class_id,
        quantity=line.quantity,
        unit_price_at_purchase=line.unit_price_at_purchase,
        line_total=line.line_total,
    )


@router.post(BOOK, status_code=status.HTTP_201_CREATED)
@Logger.io
async def book_tickets(
    request: BookCartRequest,
    use_case: BookTicketsUseCase = Depends(BookTicketsUseCase.depends),
) -> BookingResponse:
    with tracer.start_as_current_span('controller.book_tickets') as span:
        span.set_attribute('buyer_id', request.buyer_id)

        receipt = await use_case.book(
            buyer_id=request.buyer_id,
            cart_items=[
                CartItem(item_id=item.item_id, quantity=item.quantity)
                for item in request.cart_items
            ],
        )

        span.set_attribute('order.id', str(receipt.order_id))

        return BookingResponse(
            order_id=receipt.order_id,
            buyer_id=receipt.buyer_id,
            total_amount=receipt.total_amount,
            status=receipt.status.value,
            created_at=receipt.created_at,
            lines=[_line_response(line) for line in receipt.lines],
        )


@router.get(ORDERS_BY_BUYER)
@Logger.io
async def list_orders_by_buyer(
    buyer_id: str,
    use_case: ListOrdersByBuyerUseCase = Depends(ListOrdersByBuyerUseCase.depends),
) -> List[OrderResponse]:
    orders = await use_case.list_by_buyer(buyer_id=buyer_id)
    return [
        OrderResponse(
            id=order.id,
            buyer_id=order.buyer_id,
            total_amount=order.total_amount,
            status=order.status.value,
            created_at=order.created_at,
            lines=[_line_response(line) for line in order.lines],
        )
        for order in orders
    ]
