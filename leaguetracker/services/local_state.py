"""
Local persistence of league state.

Each league is stored under "<namespace>:<league>" as
{"pairCount": int, "completedMap": {match_key: bool}}, plus one key holding
the active league label. Missing or malformed entries fall back to the
default state. The legacy single-league shape
{"pairCount": int, "completedIds": [...]} is migrated into exactly one
designated league the first time that league is loaded.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from ..models import LeagueState
from ..storage import LocalStore
from .. import config

logger = logging.getLogger(__name__)


def parse_pair_count(value: Any) -> Optional[int]:
    """Accept ints and integral floats; bools are not counts."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _load_json(raw: Optional[str]) -> Optional[Dict[str, Any]]:
    if not raw:
        return None
    try:
        parsed = json.loads(raw)
    except ValueError:
        return None
    return parsed if isinstance(parsed, dict) else None


class LocalStateRepository:
    """Reads and writes league state through a LocalStore."""

    def __init__(
        self,
        store: LocalStore,
        namespace: str = config.STORAGE_NAMESPACE,
        active_key: str = config.ACTIVE_LEAGUE_KEY,
        legacy_key: str = config.LEGACY_STORAGE_KEY,
        legacy_league: Optional[str] = config.LEGACY_LEAGUE,
        default_pair_count: int = config.DEFAULT_PAIR_COUNT,
        min_pair_count: int = config.MIN_PAIR_COUNT,
        max_pair_count: int = config.MAX_PAIR_COUNT
    ):
        self.store = store
        self.namespace = namespace
        self.active_key = active_key
        self.legacy_key = legacy_key
        self.legacy_league = legacy_league
        self.default_pair_count = default_pair_count
        self.min_pair_count = min_pair_count
        self.max_pair_count = max_pair_count

    def league_key(self, league: str) -> str:
        return f"{self.namespace}:{league}"

    def default_state(self) -> LeagueState:
        return LeagueState(pair_count=self._clamp(self.default_pair_count), completed_map={})

    def _clamp(self, pair_count: int) -> int:
        return max(self.min_pair_count, min(self.max_pair_count, pair_count))

    # =========================================================================
    # LEAGUE STATE
    # =========================================================================

    def load_league(self, league: str) -> LeagueState:
        """
        Load a league's state, migrating legacy data when applicable.

        Never raises for bad stored data; the default state is returned instead.
        """
        raw = self.store.get_item(self.league_key(league))
        if raw is None:
            if league == self.legacy_league:
                migrated = self._load_legacy()
                if migrated is not None:
                    logger.info(f"Migrated legacy state into league {league}")
                    self.save_league(league, migrated)
                    return migrated
            return self.default_state()

        parsed = _load_json(raw)
        pair_count = parse_pair_count(parsed.get('pairCount')) if parsed else None
        if pair_count is None:
            logger.debug(f"Discarding malformed state for league {league}")
            return self.default_state()

        completed_map = parsed.get('completedMap')
        if not isinstance(completed_map, dict):
            completed_map = {}

        return LeagueState(
            pair_count=self._clamp(pair_count),
            completed_map={
                key: done for key, done in completed_map.items()
                if isinstance(key, str) and isinstance(done, bool)
            }
        )

    def _load_legacy(self) -> Optional[LeagueState]:
        parsed = _load_json(self.store.get_item(self.legacy_key))
        if parsed is None:
            return None
        pair_count = parse_pair_count(parsed.get('pairCount'))
        if pair_count is None:
            return None

        completed_ids = parsed.get('completedIds')
        ids: List[str] = (
            [i for i in completed_ids if isinstance(i, str)]
            if isinstance(completed_ids, list) else []
        )
        return LeagueState(
            pair_count=self._clamp(pair_count),
            completed_map={i: True for i in ids}
        )

    def save_league(self, league: str, state: LeagueState) -> None:
        self.store.set_item(self.league_key(league), state.to_json())

    # =========================================================================
    # ACTIVE LEAGUE
    # =========================================================================

    def load_active_league(self, leagues: List[str]) -> str:
        """Stored active label, or the first league when missing or unknown."""
        stored = self.store.get_item(self.active_key)
        if stored in leagues:
            return stored
        return leagues[0]

    def save_active_league(self, league: str) -> None:
        self.store.set_item(self.active_key, league)
