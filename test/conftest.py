"""
Test Configuration and Fixtures

This module provides:
- Environment setup before any application module reads settings
- In-memory booking store fixtures (unit tests)
- SQLite file database fixtures (integration tests)

Architecture:
- Unit tests (test/**/unit/): in-memory store, real asyncio locks, mocked collaborators
- Integration tests (test/**/integration/): SQLAlchemy against aiosqlite, or the full
  FastAPI app through TestClient with the in-memory backend
"""

# =============================================================================
# CRITICAL: Environment setup MUST happen before any other imports
# `settings` and the loguru sinks are built at import time
# =============================================================================
import os
from pathlib import Path


def _early_setup_test_environment() -> None:
    """Set test environment variables before any module imports."""
    os.environ['DEBUG'] = 'false'
    os.environ['BOOKING_STORE_BACKEND'] = 'memory'
    os.environ['BOOKING_LOCK_TIMEOUT_SECONDS'] = '2'
    os.environ['PAYMENT_APPROVAL_RATE'] = '1.0'
    os.environ['PAYMENT_LATENCY_SECONDS'] = '0'
    os.environ['SEED_INVENTORY_ON_STARTUP'] = 'true'


# Call immediately to set env vars before any imports
_early_setup_test_environment()

from collections.abc import AsyncGenerator, Callable  # noqa: E402
from functools import partial  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402

from src.platform.config.core_setting import Settings  # noqa: E402
from src.platform.database.db_setting import AsyncEngineManager, Database  # noqa: E402
from src.platform.database.unit_of_work import AbstractUnitOfWork  # noqa: E402
from src.service.booking.driven_adapter import model  # noqa: E402, F401
from src.service.booking.driven_adapter.memory.in_memory_booking_store import (  # noqa: E402
    InMemoryBookingStore,
    InMemoryUnitOfWork,
)

from test.shared.utils import seed_store  # noqa: E402
from test.test_constants import DEFAULT_SEED  # noqa: E402


# =============================================================================
# In-memory backend
# =============================================================================
@pytest.fixture
def memory_store() -> InMemoryBookingStore:
    store = InMemoryBookingStore()
    seed_store(store, DEFAULT_SEED)
    return store


@pytest.fixture
def memory_uow_factory(memory_store: InMemoryBookingStore) -> Callable[[], AbstractUnitOfWork]:
    return partial(InMemoryUnitOfWork, store=memory_store, lock_timeout_seconds=2.0)


# =============================================================================
# SQLite file database (one per test)
# =============================================================================
@pytest_asyncio.fixture
async def sqlite_database(tmp_path: Path) -> AsyncGenerator[Database, None]:
    settings = Settings(DATABASE_URL_OVERRIDE=f'sqlite+aiosqlite:///{tmp_path / "booking.db"}')
    database = Database(engine_manager=AsyncEngineManager(settings=settings))
    await database.create_tables()

    yield database

    await database.dispose()
