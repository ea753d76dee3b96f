from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_order_command_repo import IOrderCommandRepo
from src.service.booking.domain.entity.order_entity import Order
from src.service.booking.driven_adapter.repo.booking_model_mapper import (
    order_to_entity,
    order_to_model,
)


class OrderCommandRepoImpl(IOrderCommandRepo):
    def __init__(self, *, session: AsyncSession):
        self.session = session

    @Logger.io
    async def append(self, *, order: Order) -> Order:
        model = order_to_model(order)
        self.session.add(model)
        # Flush assigns line ids; the insert only becomes visible on commit
        await self.session.flush()
        return order_to_entity(model)
