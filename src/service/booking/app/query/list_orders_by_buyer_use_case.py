from typing import List, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_order_query_repo import IOrderQueryRepo
from src.service.booking.domain.booking_errors import InvalidInputError
from src.service.booking.domain.entity.order_entity import Order


class ListOrdersByBuyerUseCase:
    def __init__(self, order_query_repo: IOrderQueryRepo) -> None:
        self.order_query_repo = order_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        order_query_repo: IOrderQueryRepo = Depends(Provide[Container.order_query_repo]),
    ) -> Self:
        return cls(order_query_repo=order_query_repo)

    @Logger.io
    async def list_by_buyer(self, *, buyer_id: str) -> List[Order]:
        """Committed orders of the buyer with their lines, newest first"""
        if not buyer_id.strip():
            raise InvalidInputError('buyer_id must be a non-empty string', field='buyer_id')

        orders = await self.order_query_repo.list_by_buyer(buyer_id=buyer_id)
        Logger.base.info(f'📋 [ORDERS] Found {len(orders)} orders for buyer {buyer_id}')
        return orders
