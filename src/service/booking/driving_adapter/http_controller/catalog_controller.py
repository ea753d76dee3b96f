from typing import List

from fastapi import APIRouter, Depends, status

from src.platform.constant.route_constant import CATALOG_AUDIT, CATALOG_LIST, CATALOG_PRICE_UPDATE
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.command.update_item_class_price_use_case import (
    UpdateItemClassPriceUseCase,
)
from src.service.booking.app.query.audit_inventory_use_case import AuditInventoryUseCase
from src.service.booking.app.query.list_catalog_use_case import ListCatalogUseCase
from src.service.booking.domain.entity.item_class_entity import ItemClass
from src.service.booking.driving_adapter.http_controller.schema.booking_schema import (
    InventoryAuditResponse,
    ItemClassResponse,
    PriceUpdateRequest,
)


router = APIRouter()


def _item_class_response(item_class: ItemClass) -> ItemClassResponse:
    return ItemClassResponse(
        id=item_class.id,
        unit_price=item_class.unit_price,
        available=item_class.available,
        total=item_class.total,
        updated_at=item_class.updated_at,
    )


@router.get(CATALOG_LIST)
@Logger.io
async def list_catalog(
    use_case: ListCatalogUseCase = Depends(ListCatalogUseCase.depends),
) -> List[ItemClassResponse]:
    item_classes = await use_case.list_item_classes()
    return [_item_class_response(item_class) for item_class in item_classes]


@router.get(CATALOG_AUDIT)
@Logger.io
async def audit_inventory(
    use_case: AuditInventoryUseCase = Depends(AuditInventoryUseCase.depends),
) -> List[InventoryAuditResponse]:
    entries = await use_case.audit()
    return [
        InventoryAuditResponse(
            item_class_id=entry.item_class_id,
            total=entry.total,
            available=entry.available,
            sold=entry.sold,
            paid_quantity=entry.paid_quantity,
            balanced=entry.balanced,
        )
        for entry in entries
    ]


@router.patch(CATALOG_PRICE_UPDATE, status_code=status.HTTP_200_OK)
@Logger.io
async def update_item_class_price(
    item_id: str,
    request: PriceUpdateRequest,
    use_case: UpdateItemClassPriceUseCase = Depends(UpdateItemClassPriceUseCase.depends),
) -> ItemClassResponse:
    item_class = await use_case.update_price(item_id=item_id, unit_price=request.unit_price)
    return _item_class_response(item_class)
