"""
Application configuration.

Loads settings from environment variables with sensible defaults.
"""

import os
from typing import List


def _get_int(key: str, default: int) -> int:
    """Get integer from environment variable."""
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_bool(key: str, default: bool) -> bool:
    """Get boolean from environment variable."""
    value = os.environ.get(key)
    if value is None:
        return default
    return value.lower() in ('true', '1', 'yes')


def _get_str(key: str, default: str) -> str:
    """Get string from environment variable."""
    return os.environ.get(key, default)


def _get_list(key: str, default: List[str]) -> List[str]:
    """Get comma separated list from environment variable."""
    value = os.environ.get(key)
    if value is None:
        return list(default)
    items = [item.strip() for item in value.split(',') if item.strip()]
    return items or list(default)


# =============================================================================
# SERVER SETTINGS
# =============================================================================
PORT = _get_int('PORT', 8000)
HOST = _get_str('HOST', '0.0.0.0')

# =============================================================================
# STORAGE SETTINGS
# =============================================================================
# Data directory (DATA_DIR) is resolved by storage.factory at creation time

# Remote store backend: sqlite | supabase
DB_TYPE = _get_str('DB_TYPE', 'sqlite').lower()

# Local key-value store backend: sqlite | memory
LOCAL_STORE_TYPE = _get_str('LOCAL_STORE_TYPE', 'sqlite').lower()

MATCHES_TABLE = _get_str('MATCHES_TABLE', 'matches')
SETTINGS_TABLE = _get_str('SETTINGS_TABLE', 'league_settings')

# Subscribe to remote change notifications for the active league
REALTIME_ENABLED = _get_bool('REALTIME_ENABLED', True)

# =============================================================================
# LOCAL PERSISTENCE KEYS
# =============================================================================
STORAGE_NAMESPACE = _get_str('STORAGE_NAMESPACE', 'tennisMatchApp:league')
ACTIVE_LEAGUE_KEY = _get_str('ACTIVE_LEAGUE_KEY', 'tennisMatchApp:activeLeague')
LEGACY_STORAGE_KEY = _get_str('LEGACY_STORAGE_KEY', 'tennis-match-progress')

# =============================================================================
# LEAGUE SETTINGS
# =============================================================================
LEAGUES = _get_list('LEAGUES', ['A', 'B'])

# Only this league picks up the single-league legacy state
LEGACY_LEAGUE = _get_str('LEGACY_LEAGUE', 'A')

DEFAULT_PAIR_COUNT = _get_int('DEFAULT_PAIR_COUNT', 4)
MIN_PAIR_COUNT = _get_int('MIN_PAIR_COUNT', 2)
MAX_PAIR_COUNT = _get_int('MAX_PAIR_COUNT', 100)

# combinatorial | circle
FIXTURE_ALGORITHM = _get_str('FIXTURE_ALGORITHM', 'combinatorial').lower()

# =============================================================================
# LOGGING
# =============================================================================
LOG_LEVEL = _get_str('LOG_LEVEL', 'INFO')
