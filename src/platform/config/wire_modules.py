"""
Wire Modules Configuration

Defines the modules that need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from src.service.booking.app.command import (
    book_tickets_use_case,
    seed_inventory_use_case,
    update_item_class_price_use_case,
)
from src.service.booking.app.query import (
    audit_inventory_use_case,
    list_catalog_use_case,
    list_orders_by_buyer_use_case,
)


WIRE_MODULES: list[ModuleType] = [
    book_tickets_use_case,
    seed_inventory_use_case,
    update_item_class_price_use_case,
    audit_inventory_use_case,
    list_catalog_use_case,
    list_orders_by_buyer_use_case,
]
