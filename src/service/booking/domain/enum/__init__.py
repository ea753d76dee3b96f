from src.service.booking.domain.enum.order_status import OrderStatus

__all__ = ['OrderStatus']
