"""
Health check and status endpoints.
"""

import logging
from datetime import datetime

from fastapi import APIRouter

from services.dependencies import get_dependencies

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    deps = get_dependencies()
    return {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat(),
        "stats_feed": bool(deps.stats_feed),
    }
