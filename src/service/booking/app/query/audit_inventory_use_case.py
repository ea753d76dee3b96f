from typing import List, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.dto.booking_receipt import InventoryAuditEntry
from src.service.booking.app.interface.i_item_class_query_repo import IItemClassQueryRepo
from src.service.booking.app.interface.i_order_query_repo import IOrderQueryRepo


class AuditInventoryUseCase:
    """
    Conservation check: for every tier, sold (total - available) must equal the
    quantity recorded on PAID order lines.

    The two reads are not one snapshot, so a booking committing in between can
    show a transient mismatch; at rest the entries always balance.
    """

    def __init__(
        self, item_class_query_repo: IItemClassQueryRepo, order_query_repo: IOrderQueryRepo
    ) -> None:
        self.item_class_query_repo = item_class_query_repo
        self.order_query_repo = order_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        item_class_query_repo: IItemClassQueryRepo = Depends(
            Provide[Container.item_class_query_repo]
        ),
        order_query_repo: IOrderQueryRepo = Depends(Provide[Container.order_query_repo]),
    ) -> Self:
        return cls(item_class_query_repo=item_class_query_repo, order_query_repo=order_query_repo)

    @Logger.io
    async def audit(self) -> List[InventoryAuditEntry]:
        item_classes = await self.item_class_query_repo.list_item_classes()
        paid = await self.order_query_repo.sum_paid_quantities_by_item_class()

        entries = [
            InventoryAuditEntry(
                item_class_id=item_class.id,
                total=item_class.total,
                available=item_class.available,
                sold=item_class.sold,
                paid_quantity=paid.get(item_class.id, 0),
            )
            for item_class in item_classes
        ]

        unbalanced = [entry.item_class_id for entry in entries if not entry.balanced]
        if unbalanced:
            Logger.base.warning(f'⚠️ [AUDIT] Unbalanced item classes: {unbalanced}')
        else:
            Logger.base.info(f'✅ [AUDIT] {len(entries)} item classes balanced')
        return entries
