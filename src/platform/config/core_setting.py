from decimal import Decimal
from pathlib import Path
from typing import List, Literal

from pydantic import BaseModel, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_ENV_PATH = _PROJECT_ROOT / '.env'
_ENV_FILE = _ENV_PATH if _ENV_PATH.exists() else (_PROJECT_ROOT / '.env.example')


class SeedItemClass(BaseModel):
    id: str
    unit_price: Decimal
    total: int


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_ignore_empty=True,
        extra='ignore',
    )

    PROJECT_NAME: str = 'Tier Booking System'
    VERSION: str = '0.1.0'
    DEBUG: bool = True  # Set to False in production

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = []  # add your frontend URL here

    @field_validator('BACKEND_CORS_ORIGINS', mode='before')
    @classmethod
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str]:
        if isinstance(v, str) and not v.startswith('['):
            return [i.strip() for i in v.split(',')]
        elif isinstance(v, list):
            return v
        return []

    # PostgreSQL
    POSTGRES_SERVER: str = 'localhost'
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = 'postgres'
    POSTGRES_PASSWORD: SecretStr = SecretStr('postgres')
    POSTGRES_DB: str = 'tier_booking'

    # Optional read replica (falls back to primary)
    POSTGRES_REPLICA_SERVER: str = ''
    POSTGRES_REPLICA_PORT: int = 0

    # Full URL override, e.g. sqlite+aiosqlite:///./booking.db for local runs and tests
    DATABASE_URL_OVERRIDE: str = ''

    @property
    def DATABASE_URL_ASYNC(self) -> str:
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        return (
            f'postgresql+asyncpg://{self.POSTGRES_USER}:'
            f'{self.POSTGRES_PASSWORD.get_secret_value()}'
            f'@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}'
        )

    @property
    def DATABASE_READ_URL_ASYNC(self) -> str:
        if self.DATABASE_URL_OVERRIDE or not self.POSTGRES_REPLICA_SERVER:
            return self.DATABASE_URL_ASYNC
        return (
            f'postgresql+asyncpg://{self.POSTGRES_USER}:'
            f'{self.POSTGRES_PASSWORD.get_secret_value()}'
            f'@{self.POSTGRES_REPLICA_SERVER}:'
            f'{self.POSTGRES_REPLICA_PORT or self.POSTGRES_PORT}/{self.POSTGRES_DB}'
        )

    # SQLAlchemy pool
    DB_POOL_SIZE_WRITE: int = 20
    DB_POOL_SIZE_READ: int = 20
    DB_POOL_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 5  # Seconds to wait for a free connection
    DB_POOL_RECYCLE: int = 3600
    DB_POOL_PRE_PING: bool = True

    # Booking engine
    BOOKING_STORE_BACKEND: Literal['sql', 'memory'] = 'sql'
    BOOKING_LOCK_TIMEOUT_SECONDS: float = 5.0

    # Mock payment gateway
    PAYMENT_APPROVAL_RATE: float = 1.0  # 1.0 = always approve
    PAYMENT_LATENCY_SECONDS: float = 0.0

    # Inventory seed
    SEED_INVENTORY_ON_STARTUP: bool = True
    SEED_ITEM_CLASSES: List[SeedItemClass] = [
        SeedItemClass(id='VIP', unit_price=Decimal('100.00'), total=10),
        SeedItemClass(id='FRONT_ROW', unit_price=Decimal('50.00'), total=50),
        SeedItemClass(id='GA', unit_price=Decimal('10.00'), total=200),
    ]


settings = Settings()  # type: ignore
