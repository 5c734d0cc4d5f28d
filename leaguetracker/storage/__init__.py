"""
Storage module for league state.

Provides a unified interface for the shared completion store:
- SQLite (local development, single process)
- Supabase (PostgreSQL with realtime change notifications)

and for the per-process local key-value store.

Usage:
    from leaguetracker.storage import get_database, get_local_store

    db = get_database()  # Uses DB_TYPE env var
    await db.initialize()
    rows = await db.fetch_match_rows('A')
"""

from .base import DatabaseInterface, Subscription
from .local import LocalStore, MemoryLocalStore, SQLiteLocalStore
from .factory import get_database, get_local_store
from .exceptions import (
    DatabaseError,
    ConnectionError,
    ConfigurationError,
    SchemaError,
    QueryError
)

__all__ = [
    'DatabaseInterface',
    'Subscription',
    'LocalStore',
    'MemoryLocalStore',
    'SQLiteLocalStore',
    'get_database',
    'get_local_store',
    'DatabaseError',
    'ConnectionError',
    'ConfigurationError',
    'SchemaError',
    'QueryError'
]
