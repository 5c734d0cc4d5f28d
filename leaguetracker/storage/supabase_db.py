"""
Supabase Database Storage for the league tracker.

Provides the shared PostgreSQL completion store through Supabase.
Key differences from SQLite:
- Uses the async supabase-py client (PostgREST + Realtime)
- upsert() with on_conflict instead of INSERT ... ON CONFLICT
- Batch size limits (chunk large upserts at 500 rows)
- Change notifications come from realtime postgres_changes channels,
  so edits by other clients propagate live
- initialize() verifies tables exist (doesn't create them)

Requires: pip install supabase
Schema must be created first via scripts/supabase_schema.sql
"""

import logging
import os
from typing import List, Optional

from .base import ChangeCallback, DatabaseInterface, Subscription
from .exceptions import ConfigurationError, ConnectionError, QueryError
from ..models import ChangeEvent, LeagueSettingsRow, MatchRow
from .. import config

logger = logging.getLogger(__name__)


# Batch size for upsert operations
BATCH_SIZE = 500


class SupabaseSubscription(Subscription):
    """Realtime channel listening to one league."""

    def __init__(self, client, channel, league: str):
        super().__init__(league)
        self._client = client
        self._channel = channel

    async def unsubscribe(self) -> None:
        if self._channel is None:
            return
        channel, self._channel = self._channel, None
        try:
            await self._client.remove_channel(channel)
        except Exception as e:
            raise ConnectionError(f"Failed to remove realtime channel: {e}") from e


class SupabaseDatabase(DatabaseInterface):
    """
    Supabase cloud database implementation.

    Uses PostgreSQL via Supabase's REST API and realtime channels.
    Implements the DatabaseInterface abstract base class.
    """

    def __init__(
        self,
        matches_table: str = config.MATCHES_TABLE,
        settings_table: str = config.SETTINGS_TABLE
    ):
        """
        Create Supabase database instance.

        Reads configuration from environment variables:
        - SUPABASE_URL: Project URL (e.g., https://your-project.supabase.co)
        - SUPABASE_KEY: Anon or service key
        """
        self._url = os.environ.get('SUPABASE_URL')
        self._key = os.environ.get('SUPABASE_KEY')
        self.matches_table = matches_table
        self.settings_table = settings_table
        self._client = None
        self._initialized = False

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def initialize(self) -> None:
        """Initialize the client and verify schema."""
        if self._initialized:
            return

        if not self._url:
            raise ConfigurationError(
                "SUPABASE_URL environment variable is required for Supabase backend"
            )
        if not self._key:
            raise ConfigurationError(
                "SUPABASE_KEY environment variable is required for Supabase backend"
            )

        client = await self._get_client()
        try:
            # Check if tables exist
            await client.table(self.matches_table).select('match_key').limit(1).execute()
            await client.table(self.settings_table).select('league').limit(1).execute()
        except Exception as e:
            raise ConnectionError(
                f"Failed to connect to Supabase or schema not initialized. "
                f"Run scripts/supabase_schema.sql in Supabase SQL Editor first. "
                f"Error: {e}"
            )

        self._initialized = True

    async def _get_client(self):
        """Get or create the async Supabase client."""
        if self._client is None:
            try:
                from supabase import acreate_client
            except ImportError:
                raise ConfigurationError(
                    "supabase package not installed. "
                    "Install with: pip install supabase"
                )

            try:
                self._client = await acreate_client(self._url, self._key)
            except Exception as e:
                raise ConnectionError(f"Failed to create Supabase client: {e}")

        return self._client

    async def close(self) -> None:
        """Drop realtime channels and the client."""
        if self._client is not None:
            try:
                await self._client.remove_all_channels()
            except Exception as e:
                logger.warning(f"Failed to remove realtime channels: {e}")
        self._client = None
        self._initialized = False

    async def health_check(self) -> bool:
        """Check if the database connection is healthy."""
        try:
            client = await self._get_client()
            await client.table(self.matches_table).select('match_key').limit(1).execute()
            return True
        except Exception:
            return False

    # =========================================================================
    # MATCH COMPLETION ROWS
    # =========================================================================

    async def fetch_match_rows(self, league: str) -> List[MatchRow]:
        """Get all completion rows of a league."""
        client = await self._get_client()
        try:
            response = await (
                client.table(self.matches_table)
                .select('league, match_key, completed')
                .eq('league', league)
                .order('match_key')
                .execute()
            )
        except Exception as e:
            raise QueryError(f"Failed to load matches for league {league}: {e}") from e

        return [MatchRow.model_validate(row) for row in response.data or []]

    async def upsert_match_rows(self, rows: List[MatchRow]) -> int:
        """Upsert completion rows in batches."""
        client = await self._get_client()
        payload = [row.model_dump() for row in rows]

        try:
            for i in range(0, len(payload), BATCH_SIZE):
                batch = payload[i:i + BATCH_SIZE]
                await (
                    client.table(self.matches_table)
                    .upsert(batch, on_conflict='league,match_key')
                    .execute()
                )
        except Exception as e:
            raise QueryError(f"Failed to save match rows: {e}") from e

        return len(rows)

    # =========================================================================
    # LEAGUE SETTINGS
    # =========================================================================

    async def fetch_settings(self, league: str) -> Optional[LeagueSettingsRow]:
        """Get the settings row of a league."""
        client = await self._get_client()
        try:
            response = await (
                client.table(self.settings_table)
                .select('league, pair_count')
                .eq('league', league)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise QueryError(f"Failed to load settings for league {league}: {e}") from e

        if not response.data:
            return None
        return LeagueSettingsRow.model_validate(response.data[0])

    async def upsert_settings(self, row: LeagueSettingsRow) -> None:
        """Upsert the settings row of a league."""
        client = await self._get_client()
        try:
            await (
                client.table(self.settings_table)
                .upsert(row.model_dump(), on_conflict='league')
                .execute()
            )
        except Exception as e:
            raise QueryError(f"Failed to save settings for league {row.league}: {e}") from e

    # =========================================================================
    # CHANGE NOTIFICATIONS
    # =========================================================================

    async def subscribe(
        self,
        league: str,
        on_match_change: ChangeCallback,
        on_settings_change: ChangeCallback
    ) -> Subscription:
        """Open a realtime channel filtered by league."""
        client = await self._get_client()
        league_filter = f"league=eq.{league}"

        def _match_handler(payload):
            on_match_change(ChangeEvent.from_payload(payload))

        def _settings_handler(payload):
            on_settings_change(ChangeEvent.from_payload(payload))

        try:
            channel = client.channel(f"realtime:{self.matches_table}:{league}")
            channel.on_postgres_changes(
                '*',
                schema='public',
                table=self.matches_table,
                filter=league_filter,
                callback=_match_handler
            )
            channel.on_postgres_changes(
                '*',
                schema='public',
                table=self.settings_table,
                filter=league_filter,
                callback=_settings_handler
            )
            await channel.subscribe()
        except Exception as e:
            raise ConnectionError(f"Failed to subscribe to league {league}: {e}") from e

        logger.debug(f"Realtime channel open for league {league}")
        return SupabaseSubscription(client, channel, league)
