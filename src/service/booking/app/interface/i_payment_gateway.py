from abc import ABC, abstractmethod
from decimal import Decimal


class IPaymentGateway(ABC):
    @abstractmethod
    async def charge(self, *, buyer_id: str, amount: Decimal) -> bool:
        """
        Charge the buyer.

        Called after stock validation and before any durable write, while the
        cart's item locks are held.

        Returns:
            True if the charge was accepted
        """
        pass
