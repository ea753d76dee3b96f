import attrs


@attrs.define(frozen=True)
class CartItem:
    item_id: str
    quantity: int
