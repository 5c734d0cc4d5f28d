"""
League Tracker - FastAPI Application

Round-robin match progress for pair-based leagues, shared between clients
through a remote store.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse

from .api.routes import router
from .services.fixtures import FixtureAlgorithm
from .services.local_state import LocalStateRepository
from .services.tracker import LeagueTracker
from .storage import get_database, get_local_store
from . import config

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


def build_tracker() -> LeagueTracker:
    """
    Compose the tracker from configuration.

    Raises:
        ConfigurationError: If a store backend is misconfigured
        ValueError: If FIXTURE_ALGORITHM is unknown
    """
    repository = LocalStateRepository(get_local_store())
    return LeagueTracker(
        repository=repository,
        remote=get_database(),
        leagues=config.LEAGUES,
        algorithm=FixtureAlgorithm.from_name(config.FIXTURE_ALGORITHM),
        min_pair_count=config.MIN_PAIR_COUNT,
        max_pair_count=config.MAX_PAIR_COUNT,
        realtime=config.REALTIME_ENABLED,
    )


def create_app(tracker: Optional[LeagueTracker] = None) -> FastAPI:
    """
    Create the application.

    Args:
        tracker: Pre-built tracker (tests); built from configuration at
                 startup when omitted
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup and shutdown events."""
        owned = tracker is None
        app.state.tracker = build_tracker() if owned else tracker

        logger.info(
            f"Starting with leagues {app.state.tracker.leagues}, "
            f"algorithm {app.state.tracker.algorithm.value}"
        )
        await app.state.tracker.start()
        logger.info(f"Active league: {app.state.tracker.active_league}")

        yield

        logger.info("Shutting down...")
        await app.state.tracker.stop()
        if owned:
            if app.state.tracker.remote is not None:
                await app.state.tracker.remote.close()
            app.state.tracker.repository.store.close()

    app = FastAPI(
        title="League Tracker",
        description="Round-robin match progress for pair-based leagues",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)

    @app.get("/", response_class=HTMLResponse)
    async def home():
        """Serve a minimal index page."""
        return HTMLResponse(
            content="""
            <html>
            <head><title>League Tracker</title></head>
            <body style="font-family: sans-serif; padding: 40px;">
                <h1>League Tracker</h1>
                <h2>API Endpoints:</h2>
                <ul>
                    <li><a href="/api/leagues">GET /api/leagues</a> - List leagues</li>
                    <li><a href="/api/league">GET /api/league</a> - Active league fixtures and progress</li>
                    <li><a href="/api/league/rounds">GET /api/league/rounds</a> - Round schedule</li>
                    <li><a href="/health">GET /health</a> - Health check</li>
                    <li><a href="/docs">API Documentation</a></li>
                </ul>
            </body>
            </html>
            """,
            status_code=200,
        )

    return app


app = create_app()


# Run with: uvicorn leaguetracker.main:app --reload
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.HOST, port=config.PORT)
