"""
Database Models

Import all models here to ensure they are registered with SQLAlchemy
"""

from src.service.booking.driven_adapter.model.item_class_model import ItemClassModel
from src.service.booking.driven_adapter.model.order_model import OrderLineModel, OrderModel

__all__ = [
    'ItemClassModel',
    'OrderLineModel',
    'OrderModel',
]
