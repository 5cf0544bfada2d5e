"""
Configuration and Environment Variable Validation

Validates league environment variables and provides configuration helpers.
"""

import os
import logging
from typing import List

logger = logging.getLogger(__name__)


# Numeric league rules read by LeagueSettings.from_env
NUMERIC_VARS = {
    "BUDGET_LIMIT": float,
    "TRANSFER_COST_POINTS": int,
    "DEFAULT_FREE_TRANSFERS": int,
    "LOCK_MINUTES": int,
    "SCORING_INTERVAL_MINUTES": int,
}


def validate_env() -> None:
    """
    Validate league environment variables.
    Raises ValueError if a numeric rule is not a non-negative number.
    """
    invalid = []
    for var, parse in NUMERIC_VARS.items():
        raw = os.getenv(var)
        if raw is None:
            continue
        try:
            if parse(raw) < 0:
                invalid.append(var)
        except ValueError:
            invalid.append(var)
    if invalid:
        raise ValueError(f"Invalid numeric environment variables: {', '.join(invalid)}")

    # Validate optional but important vars
    optional_vars = {
        "DATABASE_URL": "Database connection",
        "STATS_FEED_URL": "Player stats feed",
        "BUDGET_LIMIT": "Squad budget cap",
        "LOCK_MINUTES": "Lock window before deadline",
        "CORS_ORIGINS": "CORS configuration",
    }

    for var, description in optional_vars.items():
        if os.getenv(var):
            logger.info(f"✓ {var} is set ({description})")
        else:
            logger.debug(f"⚠ {var} not set ({description} - optional)")


def get_log_level() -> str:
    """Get log level from environment or default to INFO."""
    return os.getenv("LOG_LEVEL", "INFO").upper()


def get_cors_origins() -> List[str]:
    origins = os.getenv("CORS_ORIGINS", "*")
    return [o.strip() for o in origins.split(",") if o.strip()]


def scheduler_enabled() -> bool:
    return os.getenv("ENABLE_SCHEDULER", "true").lower() in ("1", "true", "yes")


def setup_logging() -> None:
    """Configure structured logging."""
    log_level = get_log_level()

    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    logger.info(f"Logging configured at {log_level} level")
