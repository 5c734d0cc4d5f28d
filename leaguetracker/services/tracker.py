"""
League Tracker - application state for all leagues.

Owns the active league label and one state slot per league, and exposes the
operations the presentation layer needs: toggle a match, change the pair
count, reset a league, switch the active league.

Write policy is local-first, eventually consistent:
- every mutation is applied to the in-memory slot and local store first
- the matching remote write is attempted afterwards
- remote failures are logged; local state stands and is corrected by the
  next reload or change notification

All methods run on a single event loop. A remote fetch that completes after
the active league changed is discarded, as are change notifications for a
league that is no longer active.
"""

import logging
import math
from functools import partial
from typing import Dict, FrozenSet, List, Optional, Tuple

from ..models import (
    ChangeEvent,
    LeagueSettingsRow,
    LeagueState,
    LeagueView,
    Match,
    MatchRound,
    MatchRow,
    MatchView,
)
from ..storage import ConfigurationError, DatabaseError, DatabaseInterface, Subscription
from .fixtures import FixtureAlgorithm, circle_method_rounds, generate_matches, valid_match_keys
from .local_state import LocalStateRepository, parse_pair_count
from .reconcile import apply_change_event, prune_completed, rows_to_completed
from .. import config

logger = logging.getLogger(__name__)


class UnknownLeagueError(LookupError):
    """League label is not configured."""
    pass


class UnknownMatchError(LookupError):
    """Match key is not part of the league's current fixture set."""
    pass


def _percent(done: int, total: int) -> int:
    """Rounded percentage, halves rounded up."""
    if total == 0:
        return 0
    return int(math.floor(done / total * 100 + 0.5))


class LeagueTracker:
    """
    Application state object, owned by the composition root.

    Args:
        repository: Local persistence of league state
        remote: Shared remote store, or None to run local-only
        leagues: Configured league labels, first one is the default
        algorithm: Fixture generation strategy for this deployment
        min_pair_count: Lower bound for pair counts
        max_pair_count: Upper bound for pair counts
        realtime: Subscribe to remote change notifications
    """

    def __init__(
        self,
        repository: LocalStateRepository,
        remote: Optional[DatabaseInterface] = None,
        leagues: Optional[List[str]] = None,
        algorithm: FixtureAlgorithm = FixtureAlgorithm.COMBINATORIAL,
        min_pair_count: int = config.MIN_PAIR_COUNT,
        max_pair_count: int = config.MAX_PAIR_COUNT,
        realtime: bool = True
    ):
        self.repository = repository
        self.remote = remote
        self.leagues: List[str] = list(leagues or config.LEAGUES)
        if not self.leagues:
            raise ValueError("At least one league must be configured")
        self.algorithm = algorithm
        self.min_pair_count = min_pair_count
        self.max_pair_count = max_pair_count
        self.realtime = realtime

        self._states: Dict[str, LeagueState] = {}
        self._active = repository.load_active_league(self.leagues)
        self._generation = 0
        self._subscription: Optional[Subscription] = None

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def start(self) -> None:
        """Connect the remote store, subscribe and load the active league."""
        self.state(self._active)
        if self.remote is None:
            return

        try:
            await self.remote.initialize()
        except ConfigurationError:
            raise
        except DatabaseError as e:
            logger.error(f"Remote store unavailable, continuing with local state: {e}")

        await self._subscribe(self._active)
        await self.load_remote()

    async def stop(self) -> None:
        """Drop the active subscription; pending subscribes and fetches are discarded."""
        self._generation += 1
        await self._unsubscribe()

    # =========================================================================
    # STATE ACCESS
    # =========================================================================

    @property
    def active_league(self) -> str:
        return self._active

    def _check_league(self, league: Optional[str]) -> str:
        league = league or self._active
        if league not in self.leagues:
            raise UnknownLeagueError(f"Unknown league: {league}")
        return league

    def state(self, league: Optional[str] = None) -> LeagueState:
        """State slot of a league, loaded from local persistence on first access."""
        league = self._check_league(league)
        if league not in self._states:
            loaded = self.repository.load_league(league)
            valid = self._valid_keys(loaded.pair_count)
            self._states[league] = loaded.model_copy(
                update={'completed_map': prune_completed(loaded.completed_map, valid)}
            )
        return self._states[league]

    def _set_state(self, league: str, state: LeagueState) -> None:
        self._states[league] = state
        self.repository.save_league(league, state)

    def _valid_keys(self, pair_count: int) -> FrozenSet[str]:
        return valid_match_keys(pair_count, self.algorithm)

    def clamp_pair_count(self, value: int) -> int:
        return max(self.min_pair_count, min(self.max_pair_count, value))

    def matches(self, league: Optional[str] = None) -> Tuple[Match, ...]:
        return generate_matches(self.state(league).pair_count, self.algorithm)

    def rounds(self, league: Optional[str] = None) -> Tuple[MatchRound, ...]:
        """Round grouping; only the circle method schedules rounds."""
        if self.algorithm != FixtureAlgorithm.CIRCLE_METHOD:
            return ()
        return circle_method_rounds(self.state(league).pair_count)

    def completed_count(self, league: Optional[str] = None) -> int:
        state = self.state(league)
        return sum(1 for m in self.matches(league) if state.is_completed(m.id))

    def is_edit_locked(self, league: Optional[str] = None) -> bool:
        """Pair count is frozen once any match is complete."""
        return self.completed_count(league) > 0

    def view(self, league: Optional[str] = None) -> LeagueView:
        """Snapshot of a league for the presentation layer."""
        league = self._check_league(league)
        state = self.state(league)
        matches = self.matches(league)
        completed = self.completed_count(league)

        return LeagueView(
            league=league,
            pair_count=state.pair_count,
            min_pair_count=self.min_pair_count,
            max_pair_count=self.max_pair_count,
            algorithm=self.algorithm.value,
            matches=[
                MatchView(
                    number=number,
                    key=m.id,
                    pair_a=m.pair_a,
                    pair_b=m.pair_b,
                    round=m.round,
                    completed=state.is_completed(m.id)
                )
                for number, m in enumerate(matches, start=1)
            ],
            completed_count=completed,
            total_matches=len(matches),
            progress=_percent(completed, len(matches)),
            edit_locked=completed > 0
        )

    # =========================================================================
    # ACTIONS
    # =========================================================================

    async def toggle(self, match_key: str) -> bool:
        """
        Flip the completion flag of a match in the active league.

        Returns:
            The new completion flag

        Raises:
            UnknownMatchError: If the key is not in the current fixture set
        """
        league = self._active
        state = self.state(league)
        if match_key not in self._valid_keys(state.pair_count):
            raise UnknownMatchError(f"Unknown match {match_key} in league {league}")

        completed = not state.is_completed(match_key)
        self._set_state(league, state.model_copy(
            update={'completed_map': {**state.completed_map, match_key: completed}}
        ))

        if self.remote is not None:
            try:
                await self.remote.upsert_match_rows([
                    MatchRow(league=league, match_key=match_key, completed=completed)
                ])
            except DatabaseError as e:
                logger.error(f"Failed to save match {match_key} in league {league}: {e}")

        return completed

    async def set_pair_count(self, value: int) -> bool:
        """
        Change the pair count of the active league, clamped to bounds.

        Returns:
            False if the league is edit-locked and nothing changed
        """
        league = self._active
        if self.is_edit_locked(league):
            logger.warning(f"Pair count of league {league} is locked while matches are complete")
            return False

        state = self.state(league)
        pair_count = self.clamp_pair_count(value)
        if pair_count == state.pair_count:
            return True

        self._set_state(league, LeagueState(
            pair_count=pair_count,
            completed_map=prune_completed(state.completed_map, self._valid_keys(pair_count))
        ))
        logger.info(f"League {league} pair count set to {pair_count}")

        if self.remote is not None:
            try:
                await self.remote.upsert_settings(
                    LeagueSettingsRow(league=league, pair_count=pair_count)
                )
            except DatabaseError as e:
                logger.error(f"Failed to save settings of league {league}: {e}")

        return True

    async def step_pair_count(self, delta: int) -> bool:
        """Stepper variant of set_pair_count."""
        return await self.set_pair_count(self.state().pair_count + delta)

    async def reset_league(self) -> None:
        """Mark every match of the active league incomplete, locally and remotely."""
        league = self._active
        state = self.state(league)
        self._set_state(league, state.model_copy(update={'completed_map': {}}))
        logger.info(f"League {league} reset")

        if self.remote is not None:
            rows = [
                MatchRow(league=league, match_key=m.id, completed=False)
                for m in generate_matches(state.pair_count, self.algorithm)
            ]
            try:
                await self.remote.upsert_match_rows(rows)
            except DatabaseError as e:
                logger.error(f"Failed to reset league {league} remotely: {e}")

    async def switch_league(self, league: str) -> None:
        """
        Make another league active.

        In-flight fetches for the previous league are discarded when they
        complete, and the subscription moves to the new league.

        Raises:
            UnknownLeagueError: If the label is not configured
        """
        league = self._check_league(league)
        if league == self._active:
            return

        self._generation += 1
        generation = self._generation
        self._active = league
        self.repository.save_active_league(league)
        self.state(league)

        await self._unsubscribe()
        await self._subscribe(league)
        if generation != self._generation:
            return
        await self.load_remote()

    # =========================================================================
    # REMOTE SYNC
    # =========================================================================

    async def load_remote(self) -> bool:
        """
        Replace the active league's state with the remote copy.

        Returns:
            True if remote data was applied
        """
        if self.remote is None:
            return False

        league = self._active
        generation = self._generation
        try:
            settings = await self.remote.fetch_settings(league)
            rows = await self.remote.fetch_match_rows(league)
        except DatabaseError as e:
            logger.error(f"Failed to load league {league} from remote store: {e}")
            return False

        if generation != self._generation or league != self._active:
            logger.debug(f"Discarding stale fetch for league {league}")
            return False

        state = self.state(league)
        pair_count = self.clamp_pair_count(settings.pair_count) if settings else state.pair_count
        self._set_state(league, LeagueState(
            pair_count=pair_count,
            completed_map=rows_to_completed(rows, self._valid_keys(pair_count))
        ))
        logger.debug(f"Loaded {len(rows)} remote rows for league {league}")
        return True

    async def _subscribe(self, league: str) -> None:
        if self.remote is None or not self.realtime:
            return
        generation = self._generation
        try:
            subscription = await self.remote.subscribe(
                league,
                partial(self.handle_match_change, league),
                partial(self.handle_settings_change, league)
            )
        except DatabaseError as e:
            logger.error(f"Failed to subscribe to league {league}: {e}")
            return

        # Another switch or stop() ran while subscribing
        if generation != self._generation or league != self._active:
            logger.debug(f"Dropping stale subscription for league {league}")
            await self._release(subscription)
            return

        previous, self._subscription = self._subscription, subscription
        if previous is not None:
            await self._release(previous)

    async def _unsubscribe(self) -> None:
        subscription, self._subscription = self._subscription, None
        if subscription is not None:
            await self._release(subscription)

    async def _release(self, subscription: Subscription) -> None:
        try:
            await subscription.unsubscribe()
        except DatabaseError as e:
            logger.error(f"Failed to unsubscribe from league {subscription.league}: {e}")

    def handle_match_change(self, league: str, event: ChangeEvent) -> None:
        """Merge a remote completion change into the league's state."""
        if league != self._active:
            logger.debug(f"Dropping match change for inactive league {league}")
            return

        state = self.state(league)
        updated = apply_change_event(
            state.completed_map, event, self._valid_keys(state.pair_count)
        )
        if updated is None:
            return
        self._set_state(league, state.model_copy(update={'completed_map': updated}))

    def handle_settings_change(self, league: str, event: ChangeEvent) -> None:
        """Apply a remote pair count change; the last delivered one wins."""
        if league != self._active or event.is_delete:
            return

        pair_count = parse_pair_count(event.row.get('pair_count'))
        if pair_count is None:
            return
        pair_count = self.clamp_pair_count(pair_count)

        state = self.state(league)
        if pair_count == state.pair_count:
            return
        self._set_state(league, LeagueState(
            pair_count=pair_count,
            completed_map=prune_completed(state.completed_map, self._valid_keys(pair_count))
        ))
        logger.info(f"League {league} pair count changed remotely to {pair_count}")
