from datetime import datetime
from decimal import Decimal
from typing import Annotated, List, Optional

from pydantic import BaseModel, Field, PlainSerializer, StrictInt

from src.platform.types import UtilsUUID7


# Two-decimal string on the wire, e.g. "200.00"
Money = Annotated[Decimal, PlainSerializer(lambda v: f'{v:.2f}', return_type=str)]


class CartItemRequest(BaseModel):
    item_id: str
    quantity: StrictInt


class BookCartRequest(BaseModel):
    buyer_id: str
    cart_items: List[CartItemRequest]

    class Config:
        json_schema_extra = {
            'examples': [
                {'buyer_id': 'alice', 'cart_items': [{'item_id': 'VIP', 'quantity': 2}]},
                {
                    'buyer_id': 'bob',
                    'cart_items': [
                        {'item_id': 'GA', 'quantity': 4},
                        {'item_id': 'FRONT_ROW', 'quantity': 1},
                    ],
                },
            ]
        }


class OrderLineResponse(BaseModel):
    item_class_id: str
    quantity: int
    unit_price_at_purchase: Money
    line_total: Money


class BookingResponse(BaseModel):
    model_config = {
        'json_schema_extra': {
            'example': {
                'order_id': '01936d8f-5e73-7c4e-a9c5-123456789abc',  # UUID7
                'buyer_id': 'alice',
                'total_amount': '200.00',
                'status': 'PAID',
                'created_at': '2025-01-10T10:30:00Z',
                'lines': [
                    {
                        'item_class_id': 'VIP',
                        'quantity': 2,
                        'unit_price_at_purchase': '100.00',
                        'line_total': '200.00',
                    }
                ],
            }
        },
    }

    order_id: UtilsUUID7  # UUID7
    buyer_id: str
    total_amount: Money
    status: str
    created_at: datetime
    lines: List[OrderLineResponse]


class OrderResponse(BaseModel):
    id: UtilsUUID7  # UUID7
    buyer_id: str
    total_amount: Money
    status: str
    created_at: datetime
    lines: List[OrderLineResponse]


class ItemClassResponse(BaseModel):
    id: str
    unit_price: Money
    available: int
    total: int
    updated_at: Optional[datetime] = None


class PriceUpdateRequest(BaseModel):
    unit_price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)

    class Config:
        json_schema_extra = {'example': {'unit_price': '120.00'}}


class InventoryAuditResponse(BaseModel):
    item_class_id: str
    total: int
    available: int
    sold: int
    paid_quantity: int
    balanced: bool
