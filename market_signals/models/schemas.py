"""
Pydantic value records for the Market Signal analytics engine.

This module defines the inputs handed to each analyzer by the fetch layer and
the immutable result records returned to callers. Every record:

- is frozen (results are plain values owned by the caller)
- uses camelCase field names, the JSON contract shared with dashboards and
  with the text-generation service that receives results as grounding context
- contains no cyclic references, so model_dump(mode="json") is always safe

All models use Pydantic v2 syntax with field validation and examples.
"""

from datetime import date as DateType, datetime, timezone
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from market_signals.models.enums import (
    FunCategory,
    Grade,
    HealthStatus,
    PatternAvailability,
    PlayerBaseTrend,
    PlayerTier,
    RecentActivity,
    Sentiment,
    TimeRange,
    Trend,
    VolatilityGrade,
)

# Bumped whenever a result record changes shape, so cached results written by
# an older engine can be told apart by the store layer.
RESULT_SCHEMA_VERSION = "1"


class ValueRecord(BaseModel):
    """Base for every engine record: immutable, strict about unknown fields."""
    model_config = ConfigDict(
        frozen=True,
        extra='forbid',
        allow_inf_nan=False,
        str_strip_whitespace=False,
    )


class AnalysisRecord(ValueRecord):
    """Common envelope of analyzer results."""

    schemaVersion: str = Field(
        default=RESULT_SCHEMA_VERSION,
        description="Result record version"
    )
    gameId: str = Field(
        default="",
        description="Subject identifier (store app id)"
    )
    gameName: str = Field(
        default="",
        description="Subject display name"
    )
    analyzedAt: datetime = Field(
        ...,
        description="When this result was produced"
    )


# =============================================================================
# Shared primitives
# =============================================================================


class MetricPoint(ValueRecord):
    """A single time-stamped observation (CCU, viewers, streams)."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {"timestamp": "2026-01-15T20:00:00Z", "value": 1520}
        }
    )

    timestamp: datetime = Field(..., description="Observation time")
    value: float = Field(..., description="Observed value")

    @field_validator("timestamp")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        """Naive timestamps are UTC."""
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class ScoreBreakdown(ValueRecord):
    """
    Weighted composite of 0-100 component scores.

    Invariants: weights sum to 1.0 (+/- 1e-6), compositeScore is the weighted
    sum of componentScores, and grade is a pure function of compositeScore
    rounded half up to one decimal.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "componentScores": {"ccu": 100, "review": 100, "price": 90, "news": 80},
                "weights": {"ccu": 0.4, "review": 0.3, "price": 0.15, "news": 0.15},
                "compositeScore": 95.5,
                "grade": "S"
            }
        }
    )

    componentScores: Dict[str, float] = Field(
        ...,
        description="Sub-score per component on the 0-100 scale"
    )
    weights: Dict[str, float] = Field(
        ...,
        description="Weight per component; sums to 1.0"
    )
    compositeScore: float = Field(..., ge=0.0, le=100.0)
    grade: Grade


class ReviewRecord(ValueRecord):
    """A player review as delivered by the review source."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "text": "Tight combat and a great soundtrack. 120 hours in.",
                "recommended": True,
                "playtimeHours": 120.5,
                "helpfulVotes": 14
            }
        }
    )

    text: str = Field(default="", description="Review body")
    recommended: bool = Field(..., description="Thumbs up / thumbs down")
    playtimeHours: float = Field(default=0.0, ge=0.0)
    helpfulVotes: Optional[int] = Field(default=None, ge=0)


class CategoryClassification(ValueRecord):
    """Result of scanning one text against one lexicon category."""

    category: str = Field(..., description="Category value from the lexicon")
    score: float = Field(..., ge=0.0, description="Sum of matched rule weights")
    matchedKeywords: List[str] = Field(
        default_factory=list,
        description="Matched rule terms, in lexicon declaration order"
    )


class DistributionEntry(ValueRecord):
    """
    One bucket of a tier or category distribution.

    Across a distribution, counts sum to the reviews analyzed and percentages
    sum to 100.
    """

    key: str
    count: int = Field(..., ge=0)
    percentage: float = Field(..., ge=0.0, le=100.0)


# =============================================================================
# Trending
# =============================================================================


class TrendingInput(ValueRecord):
    """Raw signals for the trending score."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "currentCcu": 1500,
                "previousCcu": 1000,
                "recentReviews": 80,
                "previousReviews": 40,
                "currentPrice": 11.99,
                "previousPrice": 29.99,
                "isOnSale": True,
                "discountPercent": 60,
                "newsCount": 4
            }
        }
    )

    gameId: str = ""
    gameName: str = ""
    currentCcu: float = Field(..., ge=0.0)
    previousCcu: float = Field(..., ge=0.0, description="CCU one period ago")
    recentReviews: float = Field(..., ge=0.0)
    previousReviews: float = Field(..., ge=0.0)
    currentPrice: float = Field(default=0.0, ge=0.0)
    previousPrice: float = Field(default=0.0, ge=0.0)
    isOnSale: bool = False
    discountPercent: float = Field(default=0.0, ge=0.0, le=100.0)
    newsCount: int = Field(default=0, ge=0)


class TrendingResult(AnalysisRecord):
    """Trending composite with the signals that explain it."""

    score: float = Field(..., ge=0.0, le=100.0, description="Composite, one decimal")
    grade: Grade
    breakdown: ScoreBreakdown
    signals: List[str] = Field(default_factory=list)


# =============================================================================
# Volatility
# =============================================================================


class VolatilityInput(ValueRecord):
    """CCU history plus current and all-time peak CCU."""

    gameId: str = ""
    gameName: str = ""
    ccuHistory: List[MetricPoint] = Field(default_factory=list)
    currentCcu: float = Field(default=0.0, ge=0.0)
    peakCcu: float = Field(default=0.0, ge=0.0)


class VolatilityPatterns(ValueRecord):
    """
    Usage patterns of a CCU series.

    weekdayVsWeekend and peakHours are measured from timestamps or reported
    as None with availability=unavailable; they are never estimated.
    """

    weekdayVsWeekend: Optional[float] = Field(
        default=None,
        description="Mean weekday CCU / mean weekend CCU"
    )
    weekdayVsWeekendAvailability: PatternAvailability = PatternAvailability.UNAVAILABLE
    peakHours: Optional[List[str]] = Field(
        default=None,
        description="Top hours of day (UTC, HH:00) by mean CCU"
    )
    peakHoursAvailability: PatternAvailability = PatternAvailability.UNAVAILABLE
    trend: Trend


class VolatilityResult(AnalysisRecord):
    """CCU volatility index, grade and derived guidance."""

    volatilityIndex: float = Field(..., ge=0.0, description="Coefficient of variation (%)")
    volatilityGrade: VolatilityGrade
    stabilityScore: float = Field(..., ge=0.0, le=100.0)
    sampleSize: int = Field(..., ge=0)
    usedFallbackSeries: bool = Field(
        default=False,
        description="True when [current, peak] replaced a missing history"
    )
    patterns: VolatilityPatterns
    signals: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


# =============================================================================
# Retention
# =============================================================================


class RetentionInput(ValueRecord):
    """Playtime (minutes), ownership and review counts for one game."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "averagePlaytimeForever": 600,
                "averagePlaytime2Weeks": 300,
                "medianPlaytimeForever": 240,
                "medianPlaytime2Weeks": 120,
                "owners": "200,000 .. 500,000",
                "ccu": 4200,
                "positiveReviews": 9100,
                "negativeReviews": 900
            }
        }
    )

    gameId: str = ""
    gameName: str = ""
    averagePlaytimeForever: float = Field(default=0.0, ge=0.0)
    averagePlaytime2Weeks: float = Field(default=0.0, ge=0.0)
    medianPlaytimeForever: float = Field(default=0.0, ge=0.0)
    medianPlaytime2Weeks: float = Field(default=0.0, ge=0.0)
    owners: str = Field(default="", description='Owner range, e.g. "20,000 .. 50,000"')
    ccu: float = Field(default=0.0, ge=0.0)
    positiveReviews: int = Field(default=0, ge=0)
    negativeReviews: int = Field(default=0, ge=0)


class RetentionInsights(ValueRecord):
    avgVsMedian: float = Field(..., ge=0.0, description="Lifetime avg / median playtime")
    recentActivity: RecentActivity
    playerBase: PlayerBaseTrend
    ownerMidpoint: float = Field(..., ge=0.0)


class RetentionResult(AnalysisRecord):
    """Retention index, engagement composite and health classification."""

    retentionIndex: float = Field(..., ge=0.0)
    retentionGrade: Grade
    engagementScore: float = Field(..., ge=0.0, le=100.0)
    engagementBreakdown: ScoreBreakdown
    healthStatus: HealthStatus
    signals: List[str] = Field(default_factory=list)
    insights: RetentionInsights


# =============================================================================
# Player persona (Player DNA)
# =============================================================================


class TierKeyword(ValueRecord):
    keyword: str
    frequency: int = Field(..., ge=1)
    sentiment: Sentiment


class TierKeywords(ValueRecord):
    """Representative vocabulary of the reviews assigned to one tier."""

    tier: PlayerTier
    keywords: List[TierKeyword] = Field(default_factory=list)


class CommunicationStrategy(ValueRecord):
    """Marketing playbook for one player tier."""

    tier: PlayerTier
    channels: List[str]
    messaging: List[str]
    contentTypes: List[str]
    tone: str


class PersonaResult(AnalysisRecord):
    """Distribution of reviewers over player tiers."""

    distribution: List[DistributionEntry]
    primaryTier: PlayerTier
    secondaryTier: Optional[PlayerTier] = None
    tierKeywords: List[TierKeywords] = Field(default_factory=list)
    strategies: List[CommunicationStrategy] = Field(default_factory=list)
    reviewsAnalyzed: int = Field(..., ge=1)
    avgPlaytimeHours: float = Field(..., ge=0.0)
    signals: List[str] = Field(default_factory=list)


# =============================================================================
# Core fun
# =============================================================================


class CategoryScore(ValueRecord):
    category: FunCategory
    score: int = Field(..., ge=0, le=100, description="Positive share of mentions")
    positiveCount: int = Field(..., ge=0)
    negativeCount: int = Field(..., ge=0)
    keywords: List[str] = Field(default_factory=list)

    @property
    def mentions(self) -> int:
        return self.positiveCount + self.negativeCount


class ReviewHighlight(ValueRecord):
    """A verbatim excerpt around a matched keyword."""

    quote: str
    category: FunCategory
    sentiment: Sentiment
    playtimeHours: Optional[float] = None


class CoreFunResult(AnalysisRecord):
    """Fun-driver category scores, highlights and overall fun score."""

    categoryScores: List[CategoryScore]
    primaryFun: List[FunCategory] = Field(default_factory=list)
    weaknesses: List[FunCategory] = Field(default_factory=list)
    positiveHighlights: List[ReviewHighlight] = Field(default_factory=list)
    negativeHighlights: List[ReviewHighlight] = Field(default_factory=list)
    overallFunScore: int = Field(..., ge=0, le=100)
    funGrade: Grade
    distribution: List[DistributionEntry] = Field(
        default_factory=list,
        description="Top fun category per review; 'unclassified' when none matched"
    )
    reviewsAnalyzed: int = Field(..., ge=1)
    signals: List[str] = Field(default_factory=list)


# =============================================================================
# Streaming correlation
# =============================================================================


class DailyMetric(ValueRecord):
    """One aligned day of game and streaming metrics; any metric may be missing."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "date": "2026-01-15",
                "ccuAvg": 12000,
                "ccuPeak": 18500,
                "streamingViewersAvg": 3400,
                "streamingStreamsAvg": 120,
                "reviewCount": 85
            }
        }
    )

    date: DateType
    ccuAvg: Optional[float] = None
    ccuPeak: Optional[float] = None
    streamingViewersAvg: Optional[float] = None
    streamingStreamsAvg: Optional[float] = None
    reviewCount: Optional[float] = None


class LagCorrelation(ValueRecord):
    lagDays: int = Field(..., ge=0)
    lagHours: int = Field(..., ge=0)
    correlation: float = Field(..., ge=-1.0, le=1.0)
    sampleSize: int = Field(..., ge=0)


class LagAnalysis(ValueRecord):
    optimalLagHours: int = Field(default=0, ge=0)
    correlationAtLag: float = Field(default=0.0, ge=-1.0, le=1.0)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    allLags: List[LagCorrelation] = Field(default_factory=list)


class ElasticityEstimate(ValueRecord):
    """Log-log slope: % change in CCU per % change in viewers."""

    viewersToCcu: float = 0.0
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    rSquared: float = 0.0
    sampleSize: int = Field(default=0, ge=0)


class CorrelationResult(AnalysisRecord):
    """
    Streaming viewership vs CCU/review correlation analysis.

    When fewer than the minimum aligned samples exist, sufficientData is False,
    every coefficient is 0 and message explains why; this is a valid outcome.
    """

    timeRange: TimeRange
    sufficientData: bool
    message: Optional[str] = None
    sampleSize: int = Field(..., ge=0)
    pairwiseCorrelations: Dict[str, float]
    optimalLagHours: int = Field(..., ge=0)
    correlationAtLag: float = Field(..., ge=-1.0, le=1.0)
    confidenceScore: float = Field(..., ge=0.0, le=1.0)
    elasticity: float
    lagAnalysis: LagAnalysis
    elasticityEstimate: ElasticityEstimate
    insights: List[str] = Field(default_factory=list)
    dailySeries: Dict[str, List[MetricPoint]] = Field(default_factory=dict)
