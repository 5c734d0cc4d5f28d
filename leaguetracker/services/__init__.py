"""Services for the league tracker application."""

from leaguetracker.services.fixtures import (
    FixtureAlgorithm,
    generate_matches,
    match_key,
    valid_match_keys,
)
from leaguetracker.services.local_state import LocalStateRepository
from leaguetracker.services.tracker import LeagueTracker, UnknownLeagueError, UnknownMatchError

__all__ = [
    "FixtureAlgorithm",
    "generate_matches",
    "match_key",
    "valid_match_keys",
    "LocalStateRepository",
    "LeagueTracker",
    "UnknownLeagueError",
    "UnknownMatchError",
]
