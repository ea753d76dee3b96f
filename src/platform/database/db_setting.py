"""
Database configuration entry point

Re-exports the SQLAlchemy engine/session management from orm_db_setting so
models and repositories import from a single place.
"""

from src.platform.database.orm_db_setting import (
    AsyncEngineManager,
    Base,
    Database,
)

__all__ = [
    'AsyncEngineManager',
    'Base',
    'Database',
]
