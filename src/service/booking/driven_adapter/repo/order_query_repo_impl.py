from typing import AsyncContextManager, Callable, Dict, List

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_order_query_repo import IOrderQueryRepo
from src.service.booking.domain.entity.order_entity import Order
from src.service.booking.domain.enum.order_status import OrderStatus
from src.service.booking.driven_adapter.model.order_model import OrderLineModel, OrderModel
from src.service.booking.driven_adapter.repo.booking_model_mapper import order_to_entity


class OrderQueryRepoImpl(IOrderQueryRepo):
    def __init__(self, *, session_factory: Callable[..., AsyncContextManager[AsyncSession]]):
        self.session_factory = session_factory

    @Logger.io
    async def list_by_buyer(self, *, buyer_id: str) -> List[Order]:
        async with self.session_factory() as session:
            # UUID7 ids grow with creation time, so id breaks created_at ties newest first
            stmt = (
                select(OrderModel)
                .options(selectinload(OrderModel.lines))
                .where(OrderModel.buyer_id == buyer_id)
                .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            )
            result = await session.execute(stmt)
            return [order_to_entity(model) for model in result.scalars().all()]

    @Logger.io
    async def sum_paid_quantities_by_item_class(self) -> Dict[str, int]:
        async with self.session_factory() as session:
            stmt = (
                select(OrderLineModel.item_class_id, func.sum(OrderLineModel.quantity))
                .join(OrderModel, OrderModel.id == OrderLineModel.order_id)
                .where(OrderModel.status == OrderStatus.PAID.value)
                .group_by(OrderLineModel.item_class_id)
            )
            result = await session.execute(stmt)
            return {item_class_id: int(quantity) for item_class_id, quantity in result.all()}
