"""
Core infrastructure package for the analytics engine.

Provides:
- Configuration management via pydantic-settings
- The engine's error taxonomy
- Logging setup for host processes

This module re-exports key components from submodules for convenient importing:

    from market_signals.core import get_settings, ConfigError, NoDataError
"""

# =============================================================================
# Re-exports from market_signals.core.config
# =============================================================================
from market_signals.core.config import (
    ScoringConfig,
    Settings,
    get_scoring_config,
    get_settings,
)

# =============================================================================
# Re-exports from market_signals.core.errors
# =============================================================================
from market_signals.core.errors import AnalyticsError, ConfigError, NoDataError

# =============================================================================
# Re-exports from market_signals.core.logging
# =============================================================================
from market_signals.core.logging import LOG_FORMAT, configure_logging

__all__ = [
    # Configuration management (from config.py)
    'Settings',
    'ScoringConfig',
    'get_settings',
    'get_scoring_config',
    # Error taxonomy (from errors.py)
    'AnalyticsError',
    'ConfigError',
    'NoDataError',
    # Logging (from logging.py)
    'LOG_FORMAT',
    'configure_logging',
]
