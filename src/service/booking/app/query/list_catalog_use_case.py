from typing import List, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_item_class_query_repo import IItemClassQueryRepo
from src.service.booking.domain.entity.item_class_entity import ItemClass


class ListCatalogUseCase:
    def __init__(self, item_class_query_repo: IItemClassQueryRepo) -> None:
        self.item_class_query_repo = item_class_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        item_class_query_repo: IItemClassQueryRepo = Depends(
            Provide[Container.item_class_query_repo]
        ),
    ) -> Self:
        return cls(item_class_query_repo=item_class_query_repo)

    @Logger.io
    async def list_item_classes(self) -> List[ItemClass]:
        """All tiers ordered by id, read without locks"""
        item_classes = await self.item_class_query_repo.list_item_classes()
        Logger.base.info(f'📋 [CATALOG] {len(item_classes)} item classes')
        return item_classes
