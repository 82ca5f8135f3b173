"""
Database configuration entry point

Re-exports the SQLAlchemy pieces models and the DI container import.
"""

from src.platform.database.orm_db_setting import (
    AsyncEngineManager,
    Base,
    Database,
    create_db_and_tables,
    get_engine,
)

__all__ = [
    'AsyncEngineManager',
    'Base',
    'Database',
    'create_db_and_tables',
    'get_engine',
]
