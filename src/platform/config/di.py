"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html
"""

from dependency_injector import containers, providers

from src.platform.config.core_setting import Settings
from src.platform.database.db_setting import AsyncEngineManager, Database
from src.platform.database.unit_of_work import SqlAlchemyUnitOfWork
from src.service.booking.driven_adapter.memory.in_memory_booking_store import (
    InMemoryBookingStore,
    InMemoryItemClassQueryRepo,
    InMemoryOrderQueryRepo,
    InMemoryUnitOfWork,
)
from src.service.booking.driven_adapter.payment.mock_payment_gateway_impl import (
    MockPaymentGatewayImpl,
)
from src.service.booking.driven_adapter.repo.item_class_query_repo_impl import (
    ItemClassQueryRepoImpl,
)
from src.service.booking.driven_adapter.repo.order_query_repo_impl import OrderQueryRepoImpl


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    # Database (engines are built lazily by the manager, disposed in the lifespan)
    engine_manager = providers.Singleton(AsyncEngineManager, settings=config_service)
    database = providers.Singleton(Database, engine_manager=engine_manager, read_only=False)
    read_database = providers.Singleton(Database, engine_manager=engine_manager, read_only=True)

    # In-memory backend state (one per process)
    memory_store = providers.Singleton(InMemoryBookingStore)

    # Unit of work: a fresh one per booking transaction, backend picked by settings
    unit_of_work = providers.Selector(
        config_service.provided.BOOKING_STORE_BACKEND,
        sql=providers.Factory(
            SqlAlchemyUnitOfWork,
            session_factory=database.provided.session,
            lock_timeout_seconds=config_service.provided.BOOKING_LOCK_TIMEOUT_SECONDS,
        ),
        memory=providers.Factory(
            InMemoryUnitOfWork,
            store=memory_store,
            lock_timeout_seconds=config_service.provided.BOOKING_LOCK_TIMEOUT_SECONDS,
        ),
    )

    # Query repositories (stateless - use session_factory per call)
    item_class_query_repo = providers.Selector(
        config_service.provided.BOOKING_STORE_BACKEND,
        sql=providers.Singleton(
            ItemClassQueryRepoImpl, session_factory=read_database.provided.session
        ),
        memory=providers.Singleton(InMemoryItemClassQueryRepo, store=memory_store),
    )
    order_query_repo = providers.Selector(
        config_service.provided.BOOKING_STORE_BACKEND,
        sql=providers.Singleton(OrderQueryRepoImpl, session_factory=read_database.provided.session),
        memory=providers.Singleton(InMemoryOrderQueryRepo, store=memory_store),
    )

    # Payment
    payment_gateway = providers.Singleton(
        MockPaymentGatewayImpl,
        approval_rate=config_service.provided.PAYMENT_APPROVAL_RATE,
        latency_seconds=config_service.provided.PAYMENT_LATENCY_SECONDS,
    )


container = Container()


def setup() -> None:
    container.config_service()


def cleanup() -> None:
    container.reset_singletons()
