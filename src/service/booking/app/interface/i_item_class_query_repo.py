from abc import ABC, abstractmethod
from typing import List

from src.service.booking.domain.entity.item_class_entity import ItemClass


class IItemClassQueryRepo(ABC):
    @abstractmethod
    async def list_item_classes(self) -> List[ItemClass]:
        """Catalog read without locks; may lag behind in-flight bookings"""
        pass
