"""
Model <-> entity conversion shared by the SQLAlchemy repositories

Note:
- SQLAlchemy `Uuid` columns hold stdlib uuid.UUID; entities carry uuid_utils.UUID.
- SQLite drops tzinfo on DateTime(timezone=True); values read back are treated as UTC.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from uuid_utils import UUID

from src.service.booking.domain.entity.item_class_entity import ItemClass
from src.service.booking.domain.entity.order_entity import Order, OrderLine
from src.service.booking.domain.enum.order_status import OrderStatus
from src.service.booking.driven_adapter.model.item_class_model import ItemClassModel
from src.service.booking.driven_adapter.model.order_model import OrderLineModel, OrderModel


def _as_utc(value: datetime) -> datetime:
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


def _optional_as_utc(value: Optional[datetime]) -> Optional[datetime]:
    return None if value is None else _as_utc(value)


def item_class_to_entity(model: ItemClassModel) -> ItemClass:
    return ItemClass(
        id=model.id,
        unit_price=model.unit_price,
        available=model.available,
        total=model.total,
        updated_at=_optional_as_utc(model.updated_at),
    )


def item_class_to_model(item_class: ItemClass) -> ItemClassModel:
    return ItemClassModel(
        id=item_class.id,
        unit_price=item_class.unit_price,
        available=item_class.available,
        total=item_class.total,
        updated_at=item_class.updated_at,
    )


def order_to_entity(model: OrderModel) -> Order:
    order_id = UUID(str(model.id))
    created_at = _as_utc(model.created_at)
    return Order(
        id=order_id,
        buyer_id=model.buyer_id,
        total_amount=model.total_amount,
        status=OrderStatus(model.status),
        created_at=created_at,
        lines=[
            OrderLine(
                id=line.id,
                order_id=order_id,
                item_class_id=line.item_class_id,
                quantity=line.quantity,
                unit_price_at_purchase=line.unit_price_at_purchase,
            )
            for line in model.lines
        ],
    )


def order_to_model(order: Order) -> OrderModel:
    return OrderModel(
        id=uuid.UUID(str(order.id)),
        buyer_id=order.buyer_id,
        total_amount=order.total_amount,
        status=order.status.value,
        created_at=order.created_at,
        lines=[
            OrderLineModel(
                item_class_id=line.item_class_id,
                quantity=line.quantity,
                unit_price_at_purchase=line.unit_price_at_purchase,
            )
            for line in order.lines
        ],
    )
