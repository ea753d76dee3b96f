from decimal import Decimal

from src.service.booking.domain.entity.item_class_entity import ItemClass
from src.service.booking.driven_adapter.memory.in_memory_booking_store import InMemoryBookingStore


def seed_store(store: InMemoryBookingStore, rows: list[tuple[str, str, int]]) -> None:
    """Put (id, unit_price, total) rows straight into the committed tables"""
    for item_id, unit_price, total in rows:
        store.item_classes[item_id] = ItemClass.create(
            id=item_id, unit_price=Decimal(unit_price), total=total
        )
