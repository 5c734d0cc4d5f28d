"""API route definitions."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from leaguetracker.api.dependencies import get_tracker
from leaguetracker.models import LeagueView
from leaguetracker.services.tracker import LeagueTracker, UnknownLeagueError, UnknownMatchError

logger = logging.getLogger(__name__)
router = APIRouter()


class ActiveLeagueRequest(BaseModel):
    """Body of PUT /api/leagues/active."""

    league: str


class PairCountRequest(BaseModel):
    """Body of PUT /api/league/pair-count."""

    value: int


class PairCountStepRequest(BaseModel):
    """Body of POST /api/league/pair-count/step."""

    delta: int


def _locked(tracker: LeagueTracker) -> HTTPException:
    return HTTPException(
        status_code=409,
        detail=(
            f"Pair count of league {tracker.active_league} cannot change "
            f"while matches are complete. Reset the league or clear all matches first."
        ),
    )


@router.get("/api/leagues")
async def list_leagues(tracker: LeagueTracker = Depends(get_tracker)) -> JSONResponse:
    """List configured leagues.

    Returns:
        League labels and the active one
    """
    return JSONResponse(content={"leagues": tracker.leagues, "active": tracker.active_league})


@router.put("/api/leagues/active", response_model=LeagueView)
async def switch_league(
    body: ActiveLeagueRequest,
    tracker: LeagueTracker = Depends(get_tracker),
) -> LeagueView:
    """Make another league active.

    Returns:
        View of the newly active league
    """
    try:
        await tracker.switch_league(body.league)
    except UnknownLeagueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return tracker.view()


@router.get("/api/league", response_model=LeagueView)
async def get_league(tracker: LeagueTracker = Depends(get_tracker)) -> LeagueView:
    """Fixture list, progress and edit lock of the active league."""
    return tracker.view()


@router.get("/api/league/rounds")
async def get_rounds(tracker: LeagueTracker = Depends(get_tracker)) -> JSONResponse:
    """Round grouping of the active league (circle method only).

    Returns:
        List of rounds with match keys and the pair on a bye
    """
    return JSONResponse(
        content=[
            {
                "round": r.index + 1,
                "matches": [m.id for m in r.matches],
                "bye": r.bye,
            }
            for r in tracker.rounds()
        ]
    )


@router.post("/api/league/matches/{match_key}/toggle", response_model=LeagueView)
async def toggle_match(
    match_key: str,
    tracker: LeagueTracker = Depends(get_tracker),
) -> LeagueView:
    """Flip the completion flag of a match.

    Args:
        match_key: Match key such as "2-3"
    """
    try:
        await tracker.toggle(match_key)
    except UnknownMatchError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return tracker.view()


@router.put("/api/league/pair-count", response_model=LeagueView)
async def set_pair_count(
    body: PairCountRequest,
    tracker: LeagueTracker = Depends(get_tracker),
) -> LeagueView:
    """Set the pair count; values outside the bounds are clamped."""
    if not await tracker.set_pair_count(body.value):
        raise _locked(tracker)
    return tracker.view()


@router.post("/api/league/pair-count/step", response_model=LeagueView)
async def step_pair_count(
    body: PairCountStepRequest,
    tracker: LeagueTracker = Depends(get_tracker),
) -> LeagueView:
    """Increase or decrease the pair count by delta."""
    if not await tracker.step_pair_count(body.delta):
        raise _locked(tracker)
    return tracker.view()


@router.post("/api/league/reset", response_model=LeagueView)
async def reset_league(tracker: LeagueTracker = Depends(get_tracker)) -> LeagueView:
    """Mark every match of the active league incomplete."""
    await tracker.reset_league()
    return tracker.view()


@router.post("/api/league/reload", response_model=LeagueView)
async def reload_league(tracker: LeagueTracker = Depends(get_tracker)) -> LeagueView:
    """Reload the active league from the remote store."""
    await tracker.load_remote()
    return tracker.view()


@router.get("/health")
async def health_check(tracker: LeagueTracker = Depends(get_tracker)) -> JSONResponse:
    """Health check endpoint.

    Returns:
        Health status and remote store reachability
    """
    remote_ok = await tracker.remote.health_check() if tracker.remote is not None else None
    return JSONResponse(
        content={
            "status": "healthy",
            "version": "1.0.0",
            "active_league": tracker.active_league,
            "remote": remote_ok,
        }
    )
