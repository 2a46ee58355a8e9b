"""
Logging setup for processes that embed the analytics engine.

Services only create module loggers via logging.getLogger(__name__); handler
and level configuration belongs to the host process, which calls
configure_logging() once at startup.
"""

import logging
from typing import Optional

from market_signals.core.config import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """
    Apply the engine's log format at the configured level.

    Args:
        level: Explicit level name; defaults to Settings.log_level.
    """
    logging.basicConfig(
        level=(level or get_settings().log_level).upper(),
        format=LOG_FORMAT,
    )
