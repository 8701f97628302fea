"""Centralized configuration for the transaction tracker."""

import os
import sys
from typing import Optional

from dotenv import load_dotenv
from loguru import logger

load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


class TrackerConfig:
    """Configuration read from the environment (and a local .env file)."""

    @staticmethod
    def get_log_level() -> str:
        """Get the loguru log level from environment variable."""
        return os.environ.get("LOG_LEVEL", "INFO").upper()

    @staticmethod
    def is_unpin_enabled() -> bool:
        """Whether obsolete blocks are reported back to the source via unpin."""
        return _env_flag("TRACKER_UNPIN_ENABLED", "true")

    @staticmethod
    def get_retired_capacity() -> int:
        """How many completed or orphaned transaction ids are remembered."""
        return int(os.environ.get("TRACKER_RETIRED_CAPACITY", "100000"))

    @staticmethod
    def get_initial_finalized() -> Optional[str]:
        """Block hash to seed the finalization cursor with, if any."""
        value = os.environ.get("TRACKER_INITIAL_FINALIZED", "").strip()
        return value or None


def configure_logging(level: Optional[str] = None) -> None:
    """Replace loguru's default sink with a stderr sink at the configured level."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level or TrackerConfig.get_log_level(),
        format="<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | {message}",
    )
