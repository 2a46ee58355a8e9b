"""
Package initialization file for engine models.

Re-exports all enumerations from enums.py and all pydantic records from
schemas.py, so analyzers and callers can import from market_signals.models
directly:

    from market_signals.models import ReviewRecord, PersonaResult, PlayerTier
"""

# =============================================================================
# Enums
# =============================================================================

from market_signals.models.enums import (
    CorrelationDirection,
    CorrelationStrength,
    FunCategory,
    Grade,
    HealthStatus,
    MatchMode,
    PatternAvailability,
    PlayerBaseTrend,
    PlayerTier,
    RecentActivity,
    Sentiment,
    TimeRange,
    Trend,
    VolatilityGrade,
)

# =============================================================================
# Schemas
# =============================================================================

from market_signals.models.schemas import (
    RESULT_SCHEMA_VERSION,
    # -------------------------------------------------------------------------
    # Shared primitives
    # -------------------------------------------------------------------------
    AnalysisRecord,
    CategoryClassification,
    DistributionEntry,
    MetricPoint,
    ReviewRecord,
    ScoreBreakdown,
    ValueRecord,
    # -------------------------------------------------------------------------
    # Trending / volatility / retention
    # -------------------------------------------------------------------------
    RetentionInput,
    RetentionInsights,
    RetentionResult,
    TrendingInput,
    TrendingResult,
    VolatilityInput,
    VolatilityPatterns,
    VolatilityResult,
    # -------------------------------------------------------------------------
    # Review classification
    # -------------------------------------------------------------------------
    CategoryScore,
    CommunicationStrategy,
    CoreFunResult,
    PersonaResult,
    ReviewHighlight,
    TierKeyword,
    TierKeywords,
    # -------------------------------------------------------------------------
    # Streaming correlation
    # -------------------------------------------------------------------------
    CorrelationResult,
    DailyMetric,
    ElasticityEstimate,
    LagAnalysis,
    LagCorrelation,
)

__all__ = [
    # Enums
    'CorrelationDirection',
    'CorrelationStrength',
    'FunCategory',
    'Grade',
    'HealthStatus',
    'MatchMode',
    'PatternAvailability',
    'PlayerBaseTrend',
    'PlayerTier',
    'RecentActivity',
    'Sentiment',
    'TimeRange',
    'Trend',
    'VolatilityGrade',
    # Schemas
    'RESULT_SCHEMA_VERSION',
    'AnalysisRecord',
    'CategoryClassification',
    'CategoryScore',
    'CommunicationStrategy',
    'CoreFunResult',
    'CorrelationResult',
    'DailyMetric',
    'DistributionEntry',
    'ElasticityEstimate',
    'LagAnalysis',
    'LagCorrelation',
    'MetricPoint',
    'PersonaResult',
    'RetentionInput',
    'RetentionInsights',
    'RetentionResult',
    'ReviewHighlight',
    'ReviewRecord',
    'ScoreBreakdown',
    'TierKeyword',
    'TierKeywords',
    'TrendingInput',
    'TrendingResult',
    'ValueRecord',
    'VolatilityInput',
    'VolatilityPatterns',
    'VolatilityResult',
]
