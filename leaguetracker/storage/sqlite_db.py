"""
SQLite Database Storage for the league tracker.

Provides the shared completion store for local development and
self-hosted single-process deployments:
- Same tables as the Supabase schema (matches, league settings)
- Atomic transactions for data safety
- Concurrent read access via WAL mode
- Change notifications delivered to in-process subscribers only

Queries run in a worker thread so callers on the event loop never block
on disk I/O.

This is the SQLite implementation of the DatabaseInterface.
"""

import asyncio
import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple

from .base import ChangeCallback, DatabaseInterface, Subscription
from .exceptions import ConnectionError, QueryError, SchemaError
from ..models import ChangeEvent, LeagueSettingsRow, MatchRow
from .. import config

logger = logging.getLogger(__name__)


class SQLiteSubscription(Subscription):
    """In-process subscription registered on a SQLiteDatabase."""

    def __init__(
        self,
        database: "SQLiteDatabase",
        league: str,
        on_match_change: ChangeCallback,
        on_settings_change: ChangeCallback
    ):
        super().__init__(league)
        self._database = database
        self.on_match_change = on_match_change
        self.on_settings_change = on_settings_change

    async def unsubscribe(self) -> None:
        self._database._remove_subscription(self)


class SQLiteDatabase(DatabaseInterface):
    """
    SQLite database for match completion storage.
    One shared connection guarded by a lock.

    Implements the DatabaseInterface abstract base class.
    """

    SCHEMA_VERSION = 1

    def __init__(
        self,
        db_path: str = "data/leagues.db",
        matches_table: str = config.MATCHES_TABLE,
        settings_table: str = config.SETTINGS_TABLE
    ):
        """
        Create SQLite database instance.

        Args:
            db_path: Path to the SQLite database file
            matches_table: Name of the completion table
            settings_table: Name of the league settings table
        """
        self.db_path = Path(db_path)
        self.matches_table = matches_table
        self.settings_table = settings_table
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.Lock()
        self._subscriptions: Dict[str, List[SQLiteSubscription]] = {}

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def initialize(self) -> None:
        """Open the connection and create the schema."""
        await asyncio.to_thread(self._open)

    def _open(self) -> None:
        with self._lock:
            self._ensure_connection()

    async def close(self) -> None:
        """Close the connection and drop subscriptions."""
        self._subscriptions.clear()
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    async def health_check(self) -> bool:
        """Check if the database connection is healthy."""
        try:
            await asyncio.to_thread(self._execute_read, "SELECT 1", ())
            return True
        except Exception:
            return False

    # =========================================================================
    # CONNECTION MANAGEMENT
    # =========================================================================

    def _ensure_connection(self) -> sqlite3.Connection:
        """Get the shared connection, creating file and schema on first use."""
        if self._conn is None:
            conn = None
            try:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
                conn = sqlite3.connect(
                    str(self.db_path),
                    check_same_thread=False,
                    timeout=30.0
                )
                conn.row_factory = sqlite3.Row
                # Enable WAL mode for better concurrent access
                conn.execute("PRAGMA journal_mode=WAL")
                conn.execute("PRAGMA synchronous=NORMAL")
            except (OSError, sqlite3.Error) as e:
                if conn is not None:
                    conn.close()
                raise ConnectionError(f"Failed to open SQLite database {self.db_path}: {e}") from e

            try:
                self._init_schema(conn)
            except SchemaError:
                conn.close()
                raise
            self._conn = conn
        return self._conn

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Context manager for database transactions."""
        with self._lock:
            conn = self._ensure_connection()
            try:
                yield conn
                conn.commit()
            except sqlite3.Error as e:
                conn.rollback()
                raise QueryError(f"SQLite query failed: {e}") from e

    def _init_schema(self, conn: sqlite3.Connection) -> None:
        """Initialize database schema."""
        try:
            conn.executescript(f'''
                -- Metadata table
                CREATE TABLE IF NOT EXISTS metadata (
                    key TEXT PRIMARY KEY,
                    value TEXT,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                );

                -- Per-match completion rows
                CREATE TABLE IF NOT EXISTS {self.matches_table} (
                    league TEXT NOT NULL,
                    match_key TEXT NOT NULL,
                    completed INTEGER NOT NULL DEFAULT 0,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    PRIMARY KEY (league, match_key)
                );

                -- Per-league settings
                CREATE TABLE IF NOT EXISTS {self.settings_table} (
                    league TEXT PRIMARY KEY,
                    pair_count INTEGER NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                );
            ''')
            conn.execute(
                "INSERT OR REPLACE INTO metadata (key, value) VALUES (?, ?)",
                ('schema_version', str(self.SCHEMA_VERSION))
            )
            conn.commit()
        except sqlite3.Error as e:
            raise SchemaError(f"Failed to initialize SQLite schema: {e}") from e

    def _execute_read(self, sql: str, params: tuple) -> List[sqlite3.Row]:
        with self.transaction() as conn:
            return conn.execute(sql, params).fetchall()

    # =========================================================================
    # MATCH COMPLETION ROWS
    # =========================================================================

    async def fetch_match_rows(self, league: str) -> List[MatchRow]:
        """Get all completion rows of a league."""
        rows = await asyncio.to_thread(
            self._execute_read,
            f"SELECT league, match_key, completed FROM {self.matches_table} "
            f"WHERE league = ? ORDER BY match_key",
            (league,)
        )
        return [
            MatchRow(league=r['league'], match_key=r['match_key'], completed=bool(r['completed']))
            for r in rows
        ]

    def _upsert_match_rows(self, rows: List[MatchRow]) -> List[Tuple[str, MatchRow]]:
        """Write rows, returning (event type, row) pairs for notification."""
        written = []
        with self.transaction() as conn:
            for row in rows:
                exists = conn.execute(
                    f"SELECT 1 FROM {self.matches_table} WHERE league = ? AND match_key = ?",
                    (row.league, row.match_key)
                ).fetchone()
                conn.execute(f'''
                    INSERT INTO {self.matches_table} (league, match_key, completed, updated_at)
                    VALUES (?, ?, ?, CURRENT_TIMESTAMP)
                    ON CONFLICT (league, match_key)
                    DO UPDATE SET completed = excluded.completed, updated_at = CURRENT_TIMESTAMP
                ''', (row.league, row.match_key, int(row.completed)))
                written.append(('UPDATE' if exists else 'INSERT', row))
        return written

    async def upsert_match_rows(self, rows: List[MatchRow]) -> int:
        """Upsert completion rows and notify subscribers."""
        if not rows:
            return 0
        written = await asyncio.to_thread(self._upsert_match_rows, rows)
        for event_type, row in written:
            self._notify(row.league, ChangeEvent(
                type=event_type,
                table=self.matches_table,
                record=row.model_dump()
            ))
        return len(written)

    # =========================================================================
    # LEAGUE SETTINGS
    # =========================================================================

    async def fetch_settings(self, league: str) -> Optional[LeagueSettingsRow]:
        """Get the settings row of a league."""
        rows = await asyncio.to_thread(
            self._execute_read,
            f"SELECT league, pair_count FROM {self.settings_table} WHERE league = ?",
            (league,)
        )
        if not rows:
            return None
        return LeagueSettingsRow(league=rows[0]['league'], pair_count=rows[0]['pair_count'])

    def _upsert_settings(self, row: LeagueSettingsRow) -> str:
        with self.transaction() as conn:
            exists = conn.execute(
                f"SELECT 1 FROM {self.settings_table} WHERE league = ?",
                (row.league,)
            ).fetchone()
            conn.execute(f'''
                INSERT INTO {self.settings_table} (league, pair_count, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT (league)
                DO UPDATE SET pair_count = excluded.pair_count, updated_at = CURRENT_TIMESTAMP
            ''', (row.league, row.pair_count))
        return 'UPDATE' if exists else 'INSERT'

    async def upsert_settings(self, row: LeagueSettingsRow) -> None:
        """Upsert the settings row of a league and notify subscribers."""
        event_type = await asyncio.to_thread(self._upsert_settings, row)
        self._notify(row.league, ChangeEvent(
            type=event_type,
            table=self.settings_table,
            record=row.model_dump()
        ))

    # =========================================================================
    # CHANGE NOTIFICATIONS
    # =========================================================================

    async def subscribe(
        self,
        league: str,
        on_match_change: ChangeCallback,
        on_settings_change: ChangeCallback
    ) -> Subscription:
        """Register an in-process subscriber for one league."""
        subscription = SQLiteSubscription(self, league, on_match_change, on_settings_change)
        self._subscriptions.setdefault(league, []).append(subscription)
        logger.debug(f"Subscribed to league {league}")
        return subscription

    def _remove_subscription(self, subscription: SQLiteSubscription) -> None:
        subscribers = self._subscriptions.get(subscription.league, [])
        if subscription in subscribers:
            subscribers.remove(subscription)
            logger.debug(f"Unsubscribed from league {subscription.league}")

    def _notify(self, league: str, event: ChangeEvent) -> None:
        """Deliver an event to every subscriber of the league."""
        for subscription in list(self._subscriptions.get(league, [])):
            if event.table == self.settings_table:
                subscription.on_settings_change(event)
            else:
                subscription.on_match_change(event)
