"""
Booking error taxonomy

Every failed `book` call raises exactly one of these. All of them leave the
inventory and the order ledger untouched.

| Error                      | HTTP | Raised                                   |
|----------------------------|------|------------------------------------------|
| InvalidInputError          | 400  | before any transaction opens             |
| UnknownTierError           | 404  | item class missing at lock time          |
| InsufficientStockError     | 409  | quantity > available at validation time  |
| PaymentDeclinedError       | 502  | gateway rejected, before any write       |
| InfrastructureFailureError | 503  | lock timeout, storage error, other fault |
"""

from decimal import Decimal

from src.platform.exception.exceptions import (
    ConflictError,
    CustomBaseError,
    DomainError,
    NotFoundError,
    ServiceUnavailableError,
    UpstreamError,
)


class BookingError(CustomBaseError):
    """Marker base so callers can catch every booking failure at once"""


class InvalidInputError(BookingError, DomainError):
    error_code = 'invalid_input'

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message, context={'field': field} if field else None)


class UnknownTierError(BookingError, NotFoundError):
    error_code = 'unknown_tier'

    def __init__(self, *, item_id: str) -> None:
        self.item_id = item_id
        super().__init__(f'Unknown ticket tier: {item_id}', context={'item_id': item_id})


class InsufficientStockError(BookingError, ConflictError):
    error_code = 'insufficient_stock'

    def __init__(self, *, item_id: str, requested: int, available: int) -> None:
        self.item_id = item_id
        self.requested = requested
        self.available = available
        super().__init__(
            f'Insufficient stock for {item_id}: requested {requested}, available {available}',
            context={'item_id': item_id, 'requested': requested, 'available': available},
        )


class PaymentDeclinedError(BookingError, UpstreamError):
    error_code = 'payment_declined'

    def __init__(self, *, amount: Decimal) -> None:
        self.amount = amount
        super().__init__(f'Payment declined for amount {amount}', context={'amount': str(amount)})


class InfrastructureFailureError(BookingError, ServiceUnavailableError):
    error_code = 'infrastructure_failure'

    def __init__(self) -> None:
        # Internal fault text stays in the logs
        super().__init__('Booking temporarily unavailable, please retry')
