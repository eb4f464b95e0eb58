"""
Database Module

Async engine, sessions and the declarative base.
"""

from app.database.async_db import (
    check_db_connection,
    close_db,
    get_async_db,
    get_async_db_context,
    init_db,
)
from app.database.base import Base, TimestampMixin

__all__ = [
    "Base",
    "TimestampMixin",
    "check_db_connection",
    "close_db",
    "get_async_db",
    "get_async_db_context",
    "init_db",
]
