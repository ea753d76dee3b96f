from datetime import datetime
from decimal import Decimal
from typing import Optional

import attrs

from src.platform.exception.exceptions import DomainError
from src.service.booking.domain.value_object.money import to_money


class InventoryInvariantError(DomainError):
    error_code = 'inventory_invariant'


def _check_quantities(instance: 'ItemClass', attribute: attrs.Attribute, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise InventoryInvariantError(f'{attribute.name} must be an integer, got {value!r}')


@attrs.define(frozen=True)
class ItemClass:
    """
    A fungible ticket tier (inventory row).

    Invariant: 0 <= available <= total, enforced on every construction, so every
    evolved copy produced by a mutation is re-checked.
    """

    id: str
    unit_price: Decimal = attrs.field(converter=to_money)
    available: int = attrs.field(validator=_check_quantities)
    total: int = attrs.field(validator=_check_quantities)
    updated_at: Optional[datetime] = None

    def __attrs_post_init__(self) -> None:
        if not 0 <= self.available <= self.total:
            raise InventoryInvariantError(
                f'Inventory invariant violated for {self.id}: '
                f'available={self.available}, total={self.total}'
            )
        if self.unit_price < 0:
            raise InventoryInvariantError(f'Negative unit price for {self.id}')

    @classmethod
    def create(cls, *, id: str, unit_price: Decimal, total: int) -> 'ItemClass':
        """Fresh tier with full stock"""
        return cls(id=id, unit_price=unit_price, available=total, total=total)

    @property
    def sold(self) -> int:
        return self.total - self.available

    def can_fulfil(self, quantity: int) -> bool:
        return quantity <= self.available

    def decrement(self, quantity: int, *, now: Optional[datetime] = None) -> 'ItemClass':
        if quantity <= 0:
            raise InventoryInvariantError(f'Decrement quantity must be positive, got {quantity}')
        return attrs.evolve(self, available=self.available - quantity, updated_at=now)

    def with_unit_price(
        self, unit_price: Decimal, *, now: Optional[datetime] = None
    ) -> 'ItemClass':
        return attrs.evolve(self, unit_price=unit_price, updated_at=now)
