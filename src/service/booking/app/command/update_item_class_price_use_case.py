from decimal import Decimal
from typing import Callable, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.logging.loguru_io import Logger
from src.service.booking.domain.booking_errors import InvalidInputError, UnknownTierError
from src.service.booking.domain.entity.item_class_entity import ItemClass
from src.service.booking.domain.value_object.money import to_money


class UpdateItemClassPriceUseCase:
    def __init__(self, *, uow_factory: Callable[[], AbstractUnitOfWork]) -> None:
        self.uow_factory = uow_factory

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: Callable[[], AbstractUnitOfWork] = Depends(
            Provide[Container.unit_of_work.provider]
        ),
    ) -> Self:
        return cls(uow_factory=uow_factory)

    @Logger.io
    async def update_price(self, *, item_id: str, unit_price: Decimal) -> ItemClass:
        """
        Change a tier's catalog price under its row lock.

        Only future bookings see the new price; existing order lines keep the
        price they were bought at.
        """
        try:
            price = to_money(unit_price)
        except (TypeError, ValueError) as e:
            raise InvalidInputError(str(e), field='unit_price') from e
        if price < 0:
            raise InvalidInputError('unit_price must not be negative', field='unit_price')

        async with self.uow_factory() as uow:
            row = await uow.inventory_repo.lock_and_read(item_id=item_id)
            if row is None:
                raise UnknownTierError(item_id=item_id)

            updated = await uow.inventory_repo.update_unit_price(item_id=item_id, unit_price=price)
            await uow.commit()

        Logger.base.info(f'🏷️ [PRICE] {item_id}: {row.unit_price} -> {updated.unit_price}')
        return updated
