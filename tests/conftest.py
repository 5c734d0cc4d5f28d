"""
Shared test fixtures and configuration.

Provides reusable fixtures for all test files including local stores,
remote store instances, an in-memory fake remote and tracker factories.
"""

import asyncio
import os
import shutil
import tempfile
from typing import Dict, List, Optional

import pytest

from leaguetracker.models import LeagueSettingsRow, MatchRow
from leaguetracker.services.fixtures import FixtureAlgorithm
from leaguetracker.services.local_state import LocalStateRepository
from leaguetracker.services.tracker import LeagueTracker
from leaguetracker.storage import DatabaseInterface, MemoryLocalStore, QueryError, Subscription
from leaguetracker.storage.sqlite_db import SQLiteDatabase


# =============================================================================
# FAKE REMOTE STORE
# =============================================================================

class FakeSubscription(Subscription):
    def __init__(self, remote: "FakeRemote", league: str):
        super().__init__(league)
        self._remote = remote

    async def unsubscribe(self) -> None:
        self._remote.unsubscribed.append(self.league)


class FakeRemote(DatabaseInterface):
    """
    In-memory remote store.

    Set `fail` to make every call raise QueryError, or put an asyncio.Event
    in `gates[league]` (`subscribe_gates[league]`) to hold fetches
    (subscribes) for that league until it is set.
    """

    def __init__(self):
        self.rows: Dict[str, List[MatchRow]] = {}
        self.settings: Dict[str, LeagueSettingsRow] = {}
        self.upserted: List[MatchRow] = []
        self.gates: Dict[str, asyncio.Event] = {}
        self.subscribe_gates: Dict[str, asyncio.Event] = {}
        self.subscribed: List[str] = []
        self.unsubscribed: List[str] = []
        self.fail = False

    def _check(self) -> None:
        if self.fail:
            raise QueryError("remote unavailable")

    async def initialize(self) -> None:
        self._check()

    async def close(self) -> None:
        pass

    async def health_check(self) -> bool:
        return not self.fail

    async def fetch_match_rows(self, league: str) -> List[MatchRow]:
        self._check()
        return list(self.rows.get(league, []))

    async def upsert_match_rows(self, rows: List[MatchRow]) -> int:
        self._check()
        self.upserted.extend(rows)
        return len(rows)

    async def fetch_settings(self, league: str) -> Optional[LeagueSettingsRow]:
        if league in self.gates:
            await self.gates[league].wait()
        self._check()
        return self.settings.get(league)

    async def upsert_settings(self, row: LeagueSettingsRow) -> None:
        self._check()
        self.settings[row.league] = row

    async def subscribe(self, league, on_match_change, on_settings_change) -> Subscription:
        if league in self.subscribe_gates:
            await self.subscribe_gates[league].wait()
        self._check()
        self.subscribed.append(league)
        return FakeSubscription(self, league)

    @property
    def live_subscriptions(self) -> int:
        return len(self.subscribed) - len(self.unsubscribed)


# =============================================================================
# STORE FIXTURES
# =============================================================================

@pytest.fixture
def test_data_dir():
    """Provide a temporary directory for test data."""
    temp_dir = tempfile.mkdtemp(prefix="leaguetracker_test_")
    yield temp_dir

    # Cleanup
    if os.path.exists(temp_dir):
        shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def local_store():
    """Provide an empty in-memory local store."""
    return MemoryLocalStore()


@pytest.fixture
def repository(local_store):
    """Provide a repository with explicit keys and bounds."""
    return LocalStateRepository(
        local_store,
        namespace='test:league',
        active_key='test:active',
        legacy_key='test-legacy',
        legacy_league='A',
        default_pair_count=4,
        min_pair_count=2,
        max_pair_count=100
    )


@pytest.fixture
def sqlite_db(test_data_dir):
    """Provide a SQLite remote store in a temporary directory."""
    db = SQLiteDatabase(db_path=os.path.join(test_data_dir, 'leagues.db'))
    yield db
    asyncio.run(db.close())


@pytest.fixture
def fake_remote():
    """Provide an in-memory remote store."""
    return FakeRemote()


# =============================================================================
# TRACKER FIXTURES
# =============================================================================

@pytest.fixture
def make_tracker(repository):
    """Factory for trackers sharing the test repository unless one is given."""

    def _make(
        remote: Optional[DatabaseInterface] = None,
        algorithm: FixtureAlgorithm = FixtureAlgorithm.COMBINATORIAL,
        repo: Optional[LocalStateRepository] = None,
        leagues: Optional[List[str]] = None
    ) -> LeagueTracker:
        return LeagueTracker(
            repository=repo or repository,
            remote=remote,
            leagues=leagues or ['A', 'B'],
            algorithm=algorithm,
            min_pair_count=2,
            max_pair_count=100
        )

    return _make
