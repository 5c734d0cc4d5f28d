"""Data models for the league tracker application."""

from leaguetracker.models.match import Match, MatchRound
from leaguetracker.models.league import (
    ChangeEvent,
    LeagueSettingsRow,
    LeagueState,
    LeagueView,
    MatchRow,
    MatchView,
)

__all__ = [
    "Match",
    "MatchRound",
    "LeagueState",
    "MatchRow",
    "LeagueSettingsRow",
    "ChangeEvent",
    "MatchView",
    "LeagueView",
]
