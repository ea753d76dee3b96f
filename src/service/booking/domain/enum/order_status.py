from enum import StrEnum


class OrderStatus(StrEnum):
    PAID = 'PAID'
    FAILED = 'FAILED'
