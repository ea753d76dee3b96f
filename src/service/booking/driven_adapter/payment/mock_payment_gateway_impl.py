"""
Mock payment gateway

Stands in for a real provider: approves a configurable share of charges after
an optional simulated latency. Swapped out through the DI container.
"""

import random
from decimal import Decimal
from typing import Optional

import anyio

from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import booking_metrics
from src.service.booking.app.interface.i_payment_gateway import IPaymentGateway


class MockPaymentGatewayImpl(IPaymentGateway):
    def __init__(
        self,
        *,
        approval_rate: float = 1.0,
        latency_seconds: float = 0.0,
        rng: Optional[random.Random] = None,
    ) -> None:
        if not 0.0 <= approval_rate <= 1.0:
            raise ValueError(f'approval_rate must be within [0, 1], got {approval_rate}')
        if latency_seconds < 0:
            raise ValueError(f'latency_seconds must be >= 0, got {latency_seconds}')

        self.approval_rate = approval_rate
        self.latency_seconds = latency_seconds
        self._rng = rng or random.Random()

    @Logger.io
    async def charge(self, *, buyer_id: str, amount: Decimal) -> bool:
        if self.latency_seconds:
            await anyio.sleep(self.latency_seconds)

        # random() is in [0, 1): rate 1.0 always approves, 0.0 never does
        approved = self._rng.random() < self.approval_rate
        booking_metrics.record_payment(approved=approved)

        if approved:
            Logger.base.info(f'💳 [PAYMENT] Approved {amount} for buyer {buyer_id}')
        else:
            Logger.base.warning(f'🚫 [PAYMENT] Declined {amount} for buyer {buyer_id}')
        return approved
