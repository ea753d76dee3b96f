from src.service.booking.domain.value_object.cart_item import CartItem
from src.service.booking.domain.value_object.money import MONEY_QUANTUM, sum_money, to_money

__all__ = ['CartItem', 'MONEY_QUANTUM', 'sum_money', 'to_money']
