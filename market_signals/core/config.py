"""
Settings and environment management for the Market Signal analytics engine.

This module provides centralized configuration management using pydantic-settings,
which automatically loads settings from environment variables and .env files.

Key Features:
- Environment variable validation and type coercion (MARKET_SIGNALS_ prefix)
- Business constants (weight tables, lag bounds, highlight limits) with defaults
- Singleton pattern via @lru_cache for efficient access
- Weight tables validated once at configuration load, not per analysis call

Environment Variables:
- MARKET_SIGNALS_LOG_LEVEL: Root log level (default: INFO)
- MARKET_SIGNALS_TRENDING_WEIGHTS: JSON object of trending weights
  (default: {"ccu": 0.40, "review": 0.30, "price": 0.15, "news": 0.15})
- MARKET_SIGNALS_ENGAGEMENT_WEIGHTS: JSON object of retention engagement weights
  (default: {"activePlayers": 0.30, "positiveRate": 0.30, "playtime": 0.40})
- MARKET_SIGNALS_MAX_LAG_DAYS: Upper bound of the streaming lag search (default: 3)

Usage:
    from market_signals.core.config import get_settings, get_scoring_config

    settings = get_settings()
    scoring = get_scoring_config()
    weights = scoring.trending
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING, Dict

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from market_signals.services.scoring import WeightTable


class Settings(BaseSettings):
    """
    Engine settings loaded from environment variables.

    Attributes:
        log_level: Log level passed to logging.basicConfig.
        trending_weights: Weight per trending sub-score. Must sum to 1.0.
        engagement_weights: Weight per retention engagement component. Must sum to 1.0.
        max_lag_days: Largest viewer->CCU shift evaluated by the lag analysis.
        min_correlation_samples: Minimum aligned days for a Pearson coefficient.
        min_elasticity_samples: Minimum positive day pairs for the log-log fit.
        elasticity_full_confidence_samples: Sample size at which sample-size
            penalties stop applying to lag and elasticity confidence.
        highlight_context_chars: Characters kept on each side of a matched keyword.
        highlight_min_length: Excerpts at or below this length are discarded.
        highlights_per_category: Max excerpts per category and sentiment.
        highlights_per_sentiment: Max excerpts per sentiment overall.
        min_category_mentions: Evidence required before a fun category can be
            reported as a primary fun driver or as a weakness.
        min_keyword_frequency: Occurrences required for a representative tier keyword.
        max_tier_keywords: Representative keywords kept per persona tier.
        peak_hours_min_distinct_hours: Distinct hours of day required before peak
            hours are measured from CCU timestamps.
    """

    model_config = SettingsConfigDict(
        env_prefix='MARKET_SIGNALS_',
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore',
        case_sensitive=False,
    )

    log_level: str = 'INFO'

    # =========================================================================
    # Composite weight tables
    # =========================================================================

    trending_weights: Dict[str, float] = Field(
        default_factory=lambda: {
            'ccu': 0.40,
            'review': 0.30,
            'price': 0.15,
            'news': 0.15,
        }
    )

    # activeRatio*30 + positiveRate*0.3 + playtimeScore*0.4 on the 0-100 scale
    engagement_weights: Dict[str, float] = Field(
        default_factory=lambda: {
            'activePlayers': 0.30,
            'positiveRate': 0.30,
            'playtime': 0.40,
        }
    )

    # =========================================================================
    # Streaming correlation
    # =========================================================================

    max_lag_days: int = Field(default=3, ge=0, le=14)
    min_correlation_samples: int = Field(default=3, ge=2)
    min_elasticity_samples: int = Field(default=5, ge=2)
    elasticity_full_confidence_samples: int = Field(default=14, ge=1)

    # =========================================================================
    # Review classification
    # =========================================================================

    highlight_context_chars: int = Field(default=50, ge=0)
    highlight_min_length: int = Field(default=20, ge=0)
    highlights_per_category: int = Field(default=3, ge=0)
    highlights_per_sentiment: int = Field(default=6, ge=0)
    min_category_mentions: int = Field(default=2, ge=1)
    min_keyword_frequency: int = Field(default=2, ge=1)
    max_tier_keywords: int = Field(default=10, ge=0)

    # =========================================================================
    # Volatility patterns
    # =========================================================================

    peak_hours_min_distinct_hours: int = Field(default=12, ge=1, le=24)


@lru_cache()
def get_settings() -> Settings:
    """
    Get the settings singleton.

    Note:
        To refresh settings in tests, clear both caches:
        >>> get_settings.cache_clear()
        >>> get_scoring_config.cache_clear()
    """
    return Settings()


@dataclass(frozen=True)
class ScoringConfig:
    """Validated weight tables shared by the composite scorers."""

    trending: "WeightTable"
    engagement: "WeightTable"


@lru_cache()
def get_scoring_config() -> ScoringConfig:
    """
    Build the validated weight tables from settings.

    Validation happens here, once per process. A table that does not sum to
    1.0 raises ConfigError on first use instead of being renormalized.

    Raises:
        ConfigError: If any configured weight table is invalid.
    """
    # Deferred to avoid a core -> services import cycle at module load
    from market_signals.services.scoring import WeightTable

    settings = get_settings()
    return ScoringConfig(
        trending=WeightTable(settings.trending_weights, name='trending'),
        engagement=WeightTable(settings.engagement_weights, name='engagement'),
    )
