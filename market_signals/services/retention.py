"""
Player Retention Service

Uses lifetime and recent (2-week) average playtime to gauge retention:

    retention index = (2-week avg playtime / lifetime avg playtime) * 100

- 100% or more: recent inflow or an update re-activated players
- 50-100%: healthy retention
- 30-50%: average retention
- below 30%: early churn risk

Engagement is a composite through the shared scoring framework:

    activePlayers  min(100, active% * 100), active% = CCU / owner midpoint * 100
    positiveRate   positive review share (50 with no reviews)
    playtime       min(100, lifetime hours * 2), 50 hours = 100 points

weighted 0.30 / 0.30 / 0.40 (Settings.engagement_weights).
"""

import logging
import re
from datetime import datetime, timezone
from typing import Dict, List, Optional

from market_signals.core.config import get_scoring_config
from market_signals.models.enums import Grade, HealthStatus, PlayerBaseTrend, RecentActivity
from market_signals.models.schemas import RetentionInput, RetentionInsights, RetentionResult
from market_signals.services.scoring import (
    ThresholdBands,
    WeightTable,
    build_breakdown,
    round_half_up,
    safe_ratio,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

# Midpoint used when the owners range cannot be parsed
DEFAULT_OWNER_MIDPOINT: float = 10000.0

OWNER_RANGE_PATTERN = re.compile(r"(\d[\d,]*)\s*\.\.\s*(\d[\d,]*)")

RETENTION_GRADE_SCALE: ThresholdBands[Grade] = ThresholdBands(
    [(80, Grade.S), (50, Grade.A), (30, Grade.B), (15, Grade.C)],
    fallback=Grade.D,
    name="retention_grade",
)

HEALTH_BANDS: ThresholdBands[HealthStatus] = ThresholdBands(
    [
        (70, HealthStatus.THRIVING),
        (50, HealthStatus.HEALTHY),
        (30, HealthStatus.STABLE),
        (15, HealthStatus.DECLINING),
    ],
    fallback=HealthStatus.CRITICAL,
    name="health_status",
)

# Recent / lifetime playtime ratio thresholds (strictly above)
SURGING_RATIO: float = 1.5
ACTIVE_RATIO: float = 0.5
NORMAL_RATIO: float = 0.2

# CCU / owner midpoint thresholds (strictly above)
GROWING_CCU_RATIO: float = 0.02
STABLE_CCU_RATIO: float = 0.005

HEAVY_USER_RATIO: float = 3.0


# =============================================================================
# Components
# =============================================================================


def parse_owner_range(owners: str) -> Optional[float]:
    """
    Midpoint of an owner range such as "20,000 .. 50,000".

    Returns None when the string does not contain a range.

    Example:
        >>> parse_owner_range("20,000 .. 50,000")
        35000.0
    """
    match = OWNER_RANGE_PATTERN.search(owners or "")
    if not match:
        return None
    low = int(match.group(1).replace(",", ""))
    high = int(match.group(2).replace(",", ""))
    return (low + high) / 2


def owner_midpoint(owners: str) -> float:
    midpoint = parse_owner_range(owners)
    if midpoint is None:
        logger.debug("Unparseable owners range %r; using %s", owners, DEFAULT_OWNER_MIDPOINT)
        return DEFAULT_OWNER_MIDPOINT
    return midpoint


def calculate_retention_index(avg_2weeks: float, avg_forever: float) -> float:
    """Recent / lifetime playtime as a percentage; 0 when lifetime is 0."""
    if avg_forever == 0:
        return 0.0
    return avg_2weeks / avg_forever * 100.0


def engagement_components(data: RetentionInput, midpoint: float) -> Dict[str, float]:
    active_ratio = safe_ratio(data.ccu, midpoint) * 100.0
    total_reviews = data.positiveReviews + data.negativeReviews
    positive_rate = safe_ratio(data.positiveReviews, total_reviews, default=0.5) * 100.0
    lifetime_hours = data.averagePlaytimeForever / 60.0

    return {
        # activeRatio% * 30 caps at 100 once 1% of owners are online
        "activePlayers": min(100.0, active_ratio * 100.0),
        "positiveRate": positive_rate,
        "playtime": min(100.0, lifetime_hours * 2.0),
    }


# =============================================================================
# Insights and Signals
# =============================================================================


def generate_insights(data: RetentionInput, midpoint: float) -> RetentionInsights:
    avg_vs_median = safe_ratio(
        data.averagePlaytimeForever, data.medianPlaytimeForever, default=1.0
    )

    recent_ratio = data.averagePlaytime2Weeks / max(1.0, data.averagePlaytimeForever)
    if recent_ratio > SURGING_RATIO:
        recent_activity = RecentActivity.SURGING
    elif recent_ratio > ACTIVE_RATIO:
        recent_activity = RecentActivity.ACTIVE
    elif recent_ratio > NORMAL_RATIO:
        recent_activity = RecentActivity.NORMAL
    else:
        recent_activity = RecentActivity.DECLINING

    ccu_ratio = data.ccu / max(1.0, midpoint)
    if ccu_ratio > GROWING_CCU_RATIO:
        player_base = PlayerBaseTrend.GROWING
    elif ccu_ratio > STABLE_CCU_RATIO:
        player_base = PlayerBaseTrend.STABLE
    else:
        player_base = PlayerBaseTrend.SHRINKING

    return RetentionInsights(
        avgVsMedian=round(avg_vs_median, 2),
        recentActivity=recent_activity,
        playerBase=player_base,
        ownerMidpoint=midpoint,
    )


def generate_signals(retention_index: float, insights: RetentionInsights) -> List[str]:
    signals: List[str] = []

    if retention_index >= 100:
        signals.append("Recent player surge")
    elif retention_index >= 70:
        signals.append("High retention")
    elif retention_index < 20:
        signals.append("Retention risk")

    if insights.avgVsMedian > HEAVY_USER_RATIO:
        signals.append("Heavy-user dependency")

    if insights.recentActivity == RecentActivity.SURGING:
        signals.append("Recent activity surging")
    elif insights.recentActivity == RecentActivity.DECLINING:
        signals.append("Recent activity declining")

    if insights.playerBase == PlayerBaseTrend.GROWING:
        signals.append("Player base expanding")
    elif insights.playerBase == PlayerBaseTrend.SHRINKING:
        signals.append("Player base shrinking")

    return signals


# =============================================================================
# Main Entry Point
# =============================================================================


def compute_retention(
    data: RetentionInput,
    weights: Optional[WeightTable] = None,
    analyzed_at: Optional[datetime] = None,
) -> RetentionResult:
    """
    Compute retention index, engagement, health status and signals.

    Args:
        data: Playtime (minutes), owners range, CCU and review counts.
        weights: Engagement weight table; defaults to the configured one.
        analyzed_at: Result timestamp; defaults to now (UTC).

    Example:
        >>> result = compute_retention(RetentionInput(
        ...     averagePlaytimeForever=600, averagePlaytime2Weeks=300))
        >>> result.retentionIndex, result.retentionGrade
        (50.0, <Grade.A: 'A'>)
    """
    table = weights if weights is not None else get_scoring_config().engagement
    midpoint = owner_midpoint(data.owners)

    retention_index = calculate_retention_index(
        data.averagePlaytime2Weeks, data.averagePlaytimeForever
    )
    breakdown = build_breakdown(engagement_components(data, midpoint), table)
    engagement = breakdown.compositeScore

    health = HEALTH_BANDS.classify((retention_index + engagement) / 2)
    insights = generate_insights(data, midpoint)

    logger.debug(
        "Retention for %s: index=%.3f engagement=%.3f health=%s",
        data.gameId or "<unnamed>", retention_index, engagement, health.value,
    )

    return RetentionResult(
        gameId=data.gameId,
        gameName=data.gameName,
        retentionIndex=round_half_up(retention_index, 1),
        retentionGrade=RETENTION_GRADE_SCALE.classify(retention_index),
        engagementScore=round_half_up(engagement, 1),
        engagementBreakdown=breakdown,
        healthStatus=health,
        signals=generate_signals(retention_index, insights),
        insights=insights,
        analyzedAt=analyzed_at or datetime.now(timezone.utc),
    )
