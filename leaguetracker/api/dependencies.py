"""FastAPI dependencies for dependency injection."""

from fastapi import Request

from leaguetracker.services.tracker import LeagueTracker


def get_tracker(request: Request) -> LeagueTracker:
    """Get the tracker owned by the running application."""
    return request.app.state.tracker
