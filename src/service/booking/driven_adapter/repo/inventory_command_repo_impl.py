"""
Inventory Command Repository Implementation

Row locks are `SELECT ... FOR UPDATE` on item_class, held until the session's
transaction ends. SQLite drops the clause; its transactions open with
BEGIN IMMEDIATE (see orm_db_setting), so the first locked read already holds
the database write lock.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Set

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_inventory_command_repo import IInventoryCommandRepo
from src.service.booking.domain.entity.item_class_entity import (
    InventoryInvariantError,
    ItemClass,
)
from src.service.booking.driven_adapter.model.item_class_model import ItemClassModel
from src.service.booking.driven_adapter.repo.booking_model_mapper import (
    item_class_to_entity,
    item_class_to_model,
)


class InventoryCommandRepoImpl(IInventoryCommandRepo):
    def __init__(self, *, session: AsyncSession):
        self.session = session
        self._locked: Set[str] = set()

    @Logger.io
    async def lock_and_read(self, *, item_id: str) -> ItemClass | None:
        stmt = (
            select(ItemClassModel)
            .where(ItemClassModel.id == item_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()
        if model is None:
            return None

        self._locked.add(item_id)
        return item_class_to_entity(model)

    async def _get_locked_model(self, item_id: str) -> ItemClassModel:
        if item_id not in self._locked:
            raise InventoryInvariantError(f'Write to {item_id} without holding its lock')
        model = await self.session.get(ItemClassModel, item_id)
        if model is None:
            raise InventoryInvariantError(f'Write to missing item class {item_id}')
        return model

    @Logger.io
    async def decrement(self, *, item_id: str, quantity: int) -> ItemClass:
        model = await self._get_locked_model(item_id)
        # The entity re-checks 0 <= available <= total before anything is written
        updated = item_class_to_entity(model).decrement(quantity, now=datetime.now(timezone.utc))

        model.available = updated.available
        model.updated_at = updated.updated_at
        await self.session.flush()
        return updated

    @Logger.io
    async def update_unit_price(self, *, item_id: str, unit_price: Decimal) -> ItemClass:
        model = await self._get_locked_model(item_id)
        updated = item_class_to_entity(model).with_unit_price(
            unit_price, now=datetime.now(timezone.utc)
        )

        model.unit_price = updated.unit_price
        model.updated_at = updated.updated_at
        await self.session.flush()
        return updated

    @Logger.io
    async def add_if_absent(self, *, item_class: ItemClass) -> bool:
        dialect = self.session.get_bind().dialect.name
        values = {
            'id': item_class.id,
            'unit_price': item_class.unit_price,
            'available': item_class.available,
            'total': item_class.total,
            'updated_at': item_class.updated_at,
        }

        if dialect in ('postgresql', 'sqlite'):
            insert = pg_insert if dialect == 'postgresql' else sqlite_insert
            stmt = insert(ItemClassModel).values(**values).on_conflict_do_nothing(
                index_elements=[ItemClassModel.id]
            )
            result = await self.session.execute(stmt)
            return result.rowcount == 1

        if await self.session.get(ItemClassModel, item_class.id) is not None:
            return False
        self.session.add(item_class_to_model(item_class))
        await self.session.flush()
        return True
