"""
CCU Volatility Index Service

Measures how steady a game's concurrent-player count is, to time marketing:

    volatility index (CV) = population std-dev / mean * 100

- High volatility: audience depends on events and sales; needs marketing
- Low volatility: stable player base

Grade bands (CV %):
    < 15 stable, < 30 moderate, < 50 volatile, >= 50 extreme

Stability score = clamp(100 - CV, 0, 100).

Trend:
    With 2+ history points, mean of the last 5 vs mean of the first 5
    (ratio > 1.1 growing, < 0.9 declining). Otherwise current / peak CCU
    (> 0.7 growing, < 0.3 declining).

Patterns:
    Weekday-vs-weekend ratio and peak hours are measured from the history's
    timestamps (bucketed in UTC with pandas) when the history covers them.
    When it does not, the fields are None and marked unavailable. Nothing is
    estimated or randomized, so results are reproducible.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from market_signals.core.config import Settings, get_settings
from market_signals.models.enums import PatternAvailability, Trend, VolatilityGrade
from market_signals.models.schemas import (
    MetricPoint,
    VolatilityInput,
    VolatilityPatterns,
    VolatilityResult,
)
from market_signals.services.scoring import BELOW, ThresholdBands, clamp, round_half_up

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

VOLATILITY_BANDS: ThresholdBands[VolatilityGrade] = ThresholdBands(
    [
        (15, VolatilityGrade.STABLE),
        (30, VolatilityGrade.MODERATE),
        (50, VolatilityGrade.VOLATILE),
    ],
    fallback=VolatilityGrade.EXTREME,
    direction=BELOW,
    name="volatility_grade",
)

# Points averaged at each end of the history for the trend comparison
TREND_WINDOW_POINTS: int = 5
TREND_GROWTH_RATIO: float = 1.1
TREND_DECLINE_RATIO: float = 0.9

# current / peak thresholds used when the history is too short
PEAK_RATIO_GROWING: float = 0.7
PEAK_RATIO_DECLINING: float = 0.3

# current / peak thresholds for signals
NEAR_PEAK_RATIO: float = 0.8
FAR_FROM_PEAK_RATIO: float = 0.2

WEEKEND_HEAVY_RATIO: float = 0.7
WEEKDAY_HEAVY_RATIO: float = 1.3

PEAK_HOURS_REPORTED: int = 3


# =============================================================================
# Statistics
# =============================================================================


def calculate_std_dev(values: Sequence[float]) -> float:
    """Population standard deviation (ddof=0); 0 for an empty series."""
    if len(values) == 0:
        return 0.0
    return float(np.std(np.asarray(values, dtype=np.float64)))


def calculate_cv(values: Sequence[float]) -> float:
    """
    Coefficient of variation in percent.

    Returns 0 for an empty series or a zero mean, and exactly 0 for any
    constant series.

    Example:
        >>> round(calculate_cv([100, 120, 90, 150, 130]), 1)
        18.1
    """
    if len(values) == 0:
        return 0.0
    series = np.asarray(values, dtype=np.float64)
    if np.ptp(series) == 0:
        return 0.0
    mean_val = float(np.mean(series))
    if mean_val == 0:
        return 0.0
    return calculate_std_dev(values) / mean_val * 100.0


def calculate_stability_score(cv: float) -> float:
    """CV 0% -> 100 points, CV 100% or more -> 0 points."""
    return clamp(100.0 - cv)


# =============================================================================
# Patterns
# =============================================================================


def detect_trend(values: Sequence[float], current_ccu: float, peak_ccu: float) -> Trend:
    """Coarse trend from the series ends, or from current / peak CCU."""
    if len(values) >= 2:
        recent_avg = float(np.mean(values[-TREND_WINDOW_POINTS:]))
        earlier_avg = float(np.mean(values[:TREND_WINDOW_POINTS]))
        if recent_avg > earlier_avg * TREND_GROWTH_RATIO:
            return Trend.GROWING
        if recent_avg < earlier_avg * TREND_DECLINE_RATIO:
            return Trend.DECLINING
        return Trend.STABLE

    ratio = current_ccu / max(1.0, peak_ccu)
    if ratio > PEAK_RATIO_GROWING:
        return Trend.GROWING
    if ratio < PEAK_RATIO_DECLINING:
        return Trend.DECLINING
    return Trend.STABLE


def _history_frame(history: Sequence[MetricPoint]) -> pd.DataFrame:
    return pd.DataFrame({
        "timestamp": pd.to_datetime([p.timestamp for p in history], utc=True),
        "value": [p.value for p in history],
    })


def measure_weekday_ratio(history: Sequence[MetricPoint]) -> Optional[float]:
    """
    Mean weekday CCU divided by mean weekend CCU (UTC calendar).

    Returns None unless the history has both weekday and weekend points and a
    non-zero weekend mean.
    """
    if not history:
        return None

    frame = _history_frame(history)
    is_weekend = frame["timestamp"].dt.dayofweek >= 5
    weekday = frame.loc[~is_weekend, "value"]
    weekend = frame.loc[is_weekend, "value"]
    if weekday.empty or weekend.empty:
        return None

    weekend_mean = float(weekend.mean())
    if weekend_mean == 0:
        return None
    return round(float(weekday.mean()) / weekend_mean, 2)


def measure_peak_hours(
    history: Sequence[MetricPoint],
    min_distinct_hours: int,
) -> Optional[List[str]]:
    """
    Top hours of day (UTC) by mean CCU, formatted HH:00.

    Returns None when fewer than min_distinct_hours hours of day are covered.
    Ties go to the earlier hour.
    """
    if not history:
        return None

    frame = _history_frame(history)
    hourly = frame.groupby(frame["timestamp"].dt.hour)["value"].mean()
    if len(hourly) < min_distinct_hours:
        return None

    top = hourly.sort_index().sort_values(ascending=False, kind="mergesort")
    return [f"{int(hour):02d}:00" for hour in top.index[:PEAK_HOURS_REPORTED]]


def analyze_patterns(
    history: Sequence[MetricPoint],
    current_ccu: float,
    peak_ccu: float,
    settings: Settings,
) -> VolatilityPatterns:
    values = [p.value for p in history]
    weekday_ratio = measure_weekday_ratio(history)
    peak_hours = measure_peak_hours(history, settings.peak_hours_min_distinct_hours)

    return VolatilityPatterns(
        weekdayVsWeekend=weekday_ratio,
        weekdayVsWeekendAvailability=(
            PatternAvailability.MEASURED if weekday_ratio is not None
            else PatternAvailability.UNAVAILABLE
        ),
        peakHours=peak_hours,
        peakHoursAvailability=(
            PatternAvailability.MEASURED if peak_hours is not None
            else PatternAvailability.UNAVAILABLE
        ),
        trend=detect_trend(values, current_ccu, peak_ccu),
    )


# =============================================================================
# Signals and Recommendations
# =============================================================================


def generate_signals(
    volatility_index: float,
    patterns: VolatilityPatterns,
    current_ccu: float,
    peak_ccu: float,
) -> List[str]:
    signals: List[str] = []

    if volatility_index > 50:
        signals.append("Extreme CCU swings")
    elif volatility_index < 15:
        signals.append("Stable player base")

    if peak_ccu > 0:
        peak_ratio = current_ccu / max(1.0, peak_ccu)
        if peak_ratio > NEAR_PEAK_RATIO:
            signals.append("Trading near peak CCU")
        elif peak_ratio < FAR_FROM_PEAK_RATIO:
            signals.append("Far below peak CCU")

    if patterns.trend == Trend.GROWING:
        signals.append("Upward trend")
    elif patterns.trend == Trend.DECLINING:
        signals.append("Downward trend")

    # Only measured ratios produce audience-timing signals
    if patterns.weekdayVsWeekend is not None:
        if patterns.weekdayVsWeekend < WEEKEND_HEAVY_RATIO:
            signals.append("Weekend-driven audience")
        elif patterns.weekdayVsWeekend > WEEKDAY_HEAVY_RATIO:
            signals.append("Weekday-driven audience")

    return signals


def generate_recommendations(volatility_grade: VolatilityGrade, trend: Trend) -> List[str]:
    """Guidance driven only by the grade and trend."""
    recommendations: List[str] = []

    if volatility_grade in (VolatilityGrade.EXTREME, VolatilityGrade.VOLATILE):
        recommendations.append("Ship regular updates to hold players between events")
        recommendations.append("Strengthen content beyond events and sales")
    elif volatility_grade == VolatilityGrade.STABLE:
        recommendations.append("An established community is in place")
        recommendations.append("New content can drive further growth")

    if trend == Trend.DECLINING:
        recommendations.append("Consider a marketing campaign or discount")
        recommendations.append("Re-activate players with community events")
    elif trend == Trend.GROWING:
        recommendations.append("Sustaining growth momentum is the priority")
        recommendations.append("Streamer and influencer collaborations are effective now")

    return recommendations


# =============================================================================
# Main Entry Point
# =============================================================================


def _series_for(data: VolatilityInput) -> Tuple[List[MetricPoint], List[float], bool]:
    history = sorted(data.ccuHistory, key=lambda p: p.timestamp)
    values = [p.value for p in history]
    if values:
        return history, values, False

    fallback = [data.currentCcu]
    if data.peakCcu > 0:
        fallback.append(data.peakCcu)
    return history, fallback, True


def compute_volatility(
    data: VolatilityInput,
    settings: Optional[Settings] = None,
    analyzed_at: Optional[datetime] = None,
) -> VolatilityResult:
    """
    Compute the CCU volatility index, grade, patterns and guidance.

    Args:
        data: CCU history plus current and peak CCU. An empty history is
            replaced by [current, peak] (peak only when > 0).
        settings: Engine settings; defaults to get_settings().
        analyzed_at: Result timestamp; defaults to now (UTC).

    Returns:
        VolatilityResult with index and stability score rounded to one decimal.
    """
    settings = settings or get_settings()
    history, values, used_fallback = _series_for(data)

    if used_fallback:
        logger.warning(
            "No CCU history for %s; using current/peak fallback series %s",
            data.gameId or "<unnamed>", values,
        )

    volatility_index = calculate_cv(values)
    volatility_grade = VOLATILITY_BANDS.classify(volatility_index)
    stability_score = calculate_stability_score(volatility_index)
    patterns = analyze_patterns(history, data.currentCcu, data.peakCcu, settings)

    logger.debug(
        "Volatility for %s: n=%d cv=%.3f grade=%s trend=%s",
        data.gameId or "<unnamed>", len(values), volatility_index,
        volatility_grade.value, patterns.trend.value,
    )

    return VolatilityResult(
        gameId=data.gameId,
        gameName=data.gameName,
        volatilityIndex=round_half_up(volatility_index, 1),
        volatilityGrade=volatility_grade,
        stabilityScore=round_half_up(stability_score, 1),
        sampleSize=len(values),
        usedFallbackSeries=used_fallback,
        patterns=patterns,
        signals=generate_signals(volatility_index, patterns, data.currentCcu, data.peakCcu),
        recommendations=generate_recommendations(volatility_grade, patterns.trend),
        analyzedAt=analyzed_at or datetime.now(timezone.utc),
    )
