"""
Factory functions to create the configured store implementations.

Reads configuration from environment variables to determine which
backend to use. Instances are not cached here; the application composition
root owns them.
"""

import os

from .base import DatabaseInterface
from .exceptions import ConfigurationError
from .local import LocalStore, MemoryLocalStore, SQLiteLocalStore
from .. import config


def _data_dir() -> str:
    """Priority: DATA_DIR > /app/data (container) > data (local)."""
    return (
        os.environ.get('DATA_DIR') or
        ('/app/data' if os.path.exists('/app') else 'data')
    )


def get_database() -> DatabaseInterface:
    """
    Create the remote store.

    Uses the DB_TYPE environment variable to determine which implementation:
    - "sqlite" (default): Local SQLite database, in-process notifications
    - "supabase": Supabase PostgreSQL database with realtime channels

    Additional environment variables per type:
    - SQLite: DATA_DIR, or uses the "data" directory
    - Supabase: SUPABASE_URL, SUPABASE_KEY

    The returned instance still has to be initialized (await initialize()).

    Raises:
        ConfigurationError: If DB_TYPE is unknown
    """
    db_type = os.environ.get('DB_TYPE', config.DB_TYPE).lower()

    if db_type == 'sqlite':
        from .sqlite_db import SQLiteDatabase
        return SQLiteDatabase(db_path=os.path.join(_data_dir(), 'leagues.db'))

    if db_type == 'supabase':
        from .supabase_db import SupabaseDatabase
        return SupabaseDatabase()

    raise ConfigurationError(
        f"Unknown DB_TYPE: {db_type}. "
        f"Valid options: sqlite, supabase"
    )


def get_local_store() -> LocalStore:
    """
    Create the local key-value store.

    Uses LOCAL_STORE_TYPE: "sqlite" (default) or "memory".

    Raises:
        ConfigurationError: If LOCAL_STORE_TYPE is unknown
    """
    store_type = os.environ.get('LOCAL_STORE_TYPE', config.LOCAL_STORE_TYPE).lower()

    if store_type == 'sqlite':
        return SQLiteLocalStore(db_path=os.path.join(_data_dir(), 'local_state.db'))

    if store_type == 'memory':
        return MemoryLocalStore()

    raise ConfigurationError(
        f"Unknown LOCAL_STORE_TYPE: {store_type}. "
        f"Valid options: sqlite, memory"
    )
