from typing import Callable, Iterable, List, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.core_setting import SeedItemClass
from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.logging.loguru_io import Logger
from src.service.booking.domain.entity.item_class_entity import ItemClass


class SeedInventoryUseCase:
    """
    Insert the configured ticket tiers that do not exist yet.

    Idempotent: tiers already present keep their current price and stock, so
    restarting the service never resets sold inventory.
    """

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
    async def seed(self, *, item_classes: Iterable[SeedItemClass]) -> List[str]:
        """
        Returns:
            Ids of the tiers that were inserted by this call
        """
        # Build every entity first so a bad seed row fails before anything is written
        candidates = [
            ItemClass.create(id=seed.id, unit_price=seed.unit_price, total=seed.total)
            for seed in item_classes
        ]

        inserted: List[str] = []
        async with self.uow_factory() as uow:
            for item_class in candidates:
                if await uow.inventory_repo.add_if_absent(item_class=item_class):
                    inserted.append(item_class.id)
            await uow.commit()

        Logger.base.info(
            f'🌱 [SEED] Inserted {inserted or "nothing"} '
            f'({len(candidates) - len(inserted)} already present)'
        )
        return inserted
