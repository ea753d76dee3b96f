from typing import AsyncContextManager, Callable, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_item_class_query_repo import IItemClassQueryRepo
from src.service.booking.domain.entity.item_class_entity import ItemClass
from src.service.booking.driven_adapter.model.item_class_model import ItemClassModel
from src.service.booking.driven_adapter.repo.booking_model_mapper import item_class_to_entity


class ItemClassQueryRepoImpl(IItemClassQueryRepo):
    def __init__(self, *, session_factory: Callable[..., AsyncContextManager[AsyncSession]]):
        self.session_factory = session_factory

    @Logger.io
    async def list_item_classes(self) -> List[ItemClass]:
        async with self.session_factory() as session:
            result = await session.execute(select(ItemClassModel).order_by(ItemClassModel.id))
            return [item_class_to_entity(model) for model in result.scalars().all()]
