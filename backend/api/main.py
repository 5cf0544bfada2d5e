"""
Five-a-side Fantasy League API

Rosters, transfers, chips, gameweek lifecycle and leaderboard.
"""

import os
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

load_dotenv()

# Import our modules
import sys
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from api.config import setup_logging, validate_env, get_cors_origins, scheduler_enabled
from api.routes import (
    health_router, rosters_router, chips_router, gameweek_router,
    players_router, leaderboard_router
)
from services.dependencies import init_dependencies
from scheduler.jobs import LeagueScheduler

setup_logging()
logger = logging.getLogger(__name__)

league_scheduler = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize dependencies and the background scheduler."""
    global league_scheduler

    validate_env()
    deps = init_dependencies()

    if scheduler_enabled():
        league_scheduler = LeagueScheduler(
            deps.league_service,
            scoring_interval_minutes=deps.settings.scoring_interval_minutes,
        )
        league_scheduler.start()
    else:
        logger.info("Scheduler disabled (ENABLE_SCHEDULER=false)")

    yield

    if league_scheduler:
        league_scheduler.stop()
        league_scheduler = None


# Create FastAPI app
app = FastAPI(
    title="Five-a-side Fantasy League",
    description="Fantasy league backend: rosters, transfers, chips and gameweek scoring",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router, prefix="/api", tags=["health"])
app.include_router(rosters_router, prefix="/api", tags=["rosters"])
app.include_router(chips_router, prefix="/api", tags=["chips"])
app.include_router(gameweek_router, prefix="/api", tags=["gameweek"])
app.include_router(players_router, prefix="/api", tags=["players"])
app.include_router(leaderboard_router, prefix="/api", tags=["leaderboard"])


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", "8000"))
    uvicorn.run(app, host="0.0.0.0", port=port)
