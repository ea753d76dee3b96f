"""
Production FastAPI Application

Booking API backed by PostgreSQL (or the in-memory store when
BOOKING_STORE_BACKEND=memory).
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from src.platform.app_factory import create_app
from src.platform.config.di import container
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.command.seed_inventory_use_case import SeedInventoryUseCase
from src.service.booking.driven_adapter import model  # noqa: F401  registers tables on Base


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan: startup and shutdown."""
    Logger.base.info('🚀 [Booking Service] Starting up...')
    config = container.config_service()

    # Wire dependency injection for all modules
    container.wire(modules=WIRE_MODULES)
    Logger.base.info('🔌 [Booking Service] Dependency injection wired')

    if config.BOOKING_STORE_BACKEND == 'sql':
        await container.database().create_tables()
        Logger.base.info('🗄️  [Booking Service] Database tables ensured')
    else:
        Logger.base.warning('🧪 [Booking Service] Using in-memory store, nothing is persisted')

    if config.SEED_INVENTORY_ON_STARTUP:
        seeder = SeedInventoryUseCase(uow_factory=container.unit_of_work)
        await seeder.seed(item_classes=config.SEED_ITEM_CLASSES)

    Logger.base.info('✅ [Booking Service] Ready to serve requests')

    try:
        yield
    finally:
        Logger.base.info('🛑 [Booking Service] Shutting down...')

        if config.BOOKING_STORE_BACKEND == 'sql':
            await container.database().dispose()

        # Unwire DI
        container.unwire()

        Logger.base.info('👋 [Booking Service] Shutdown complete')


# Create FastAPI app using shared factory
app = create_app(lifespan=lifespan)


@app.get('/')
async def root() -> RedirectResponse:
    """Root endpoint - redirect to docs."""
    return RedirectResponse(url='/docs')
