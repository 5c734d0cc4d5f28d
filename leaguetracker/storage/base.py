"""
Abstract base classes defining the remote store interface.

All remote store implementations must inherit from DatabaseInterface and
implement all abstract methods. This ensures consistent behavior across
backends.
"""

from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from ..models import ChangeEvent, LeagueSettingsRow, MatchRow


ChangeCallback = Callable[[ChangeEvent], None]


class Subscription(ABC):
    """Handle for a live change subscription on one league."""

    def __init__(self, league: str):
        self.league = league

    @abstractmethod
    async def unsubscribe(self) -> None:
        """
        Stop delivering change notifications.

        Should be idempotent (safe to call multiple times).
        """
        pass


class DatabaseInterface(ABC):
    """
    Abstract interface for the shared match completion store.

    Two tables are involved:
    - matches: (league, match_key) -> completed
    - league settings: league -> pair_count

    Implementations wrap backend failures in the exceptions from
    storage.exceptions so callers only handle DatabaseError.
    """

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    @abstractmethod
    async def initialize(self) -> None:
        """
        Initialize the connection and verify or create the schema.

        Should be idempotent (safe to call multiple times).
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close connections and drop active subscriptions."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check if the store is reachable.

        Returns:
            True if accessible, False otherwise
        """
        pass

    # =========================================================================
    # MATCH COMPLETION ROWS
    # =========================================================================

    @abstractmethod
    async def fetch_match_rows(self, league: str) -> List[MatchRow]:
        """
        Get every completion row of a league.

        Args:
            league: League label to filter by

        Returns:
            List of rows, ordered by match_key
        """
        pass

    @abstractmethod
    async def upsert_match_rows(self, rows: List[MatchRow]) -> int:
        """
        Insert or update completion rows keyed by (league, match_key).

        Args:
            rows: Rows to write; a league reset passes one row per fixture

        Returns:
            Number of rows written
        """
        pass

    # =========================================================================
    # LEAGUE SETTINGS
    # =========================================================================

    @abstractmethod
    async def fetch_settings(self, league: str) -> Optional[LeagueSettingsRow]:
        """
        Get the stored settings of a league.

        Returns:
            The settings row, or None if the league has none yet
        """
        pass

    @abstractmethod
    async def upsert_settings(self, row: LeagueSettingsRow) -> None:
        """Insert or update the settings row of a league."""
        pass

    # =========================================================================
    # CHANGE NOTIFICATIONS
    # =========================================================================

    @abstractmethod
    async def subscribe(
        self,
        league: str,
        on_match_change: ChangeCallback,
        on_settings_change: ChangeCallback
    ) -> Subscription:
        """
        Subscribe to inserted, updated and deleted rows of one league.

        Args:
            league: League label to filter by
            on_match_change: Called with each matches table event
            on_settings_change: Called with each settings table event

        Returns:
            Subscription handle

        Raises:
            ConnectionError: If the subscription cannot be established
        """
        pass
