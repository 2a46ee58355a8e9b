"""
Streaming Correlation Service

Relates daily streaming viewership to game metrics:

1. Pearson correlation for viewers vs CCU, streams vs CCU and viewers vs
   review count, over the days where both values exist
2. Lag analysis: viewers on day d against CCU on day d + lag, for lags of
   0..max_lag_days; the lag with the largest |r| wins (earlier lag on ties)
3. Elasticity: slope of a log-log least-squares fit of CCU on viewers,
   i.e. % CCU change per 1% viewer change
4. Insight sentences for dashboards and report generation

Sparse input is a normal outcome: with fewer than min_correlation_samples
aligned viewer/CCU days the result has sufficientData=False, zeroed
statistics and an explanatory message. Nothing here raises for sparse data.

Confidence heuristics:
    lag         |r at lag| * min(1, samples at lag / 14)
    elasticity  max(R^2, 0) * min(1, pairs / 14)
"""

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from market_signals.core.config import Settings, get_settings
from market_signals.models.enums import CorrelationDirection, CorrelationStrength, TimeRange
from market_signals.models.schemas import (
    CorrelationResult,
    DailyMetric,
    ElasticityEstimate,
    LagAnalysis,
    LagCorrelation,
    MetricPoint,
)
from market_signals.services.scoring import clamp

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

PAIR_VIEWERS_CCU = "viewers_vs_ccu"
PAIR_STREAMS_CCU = "streams_vs_ccu"
PAIR_VIEWERS_REVIEWS = "viewers_vs_reviews"

# (x field, y field) per correlation pair
CORRELATION_PAIRS: Dict[str, Tuple[str, str]] = {
    PAIR_VIEWERS_CCU: ("streamingViewersAvg", "ccuAvg"),
    PAIR_STREAMS_CCU: ("streamingStreamsAvg", "ccuAvg"),
    PAIR_VIEWERS_REVIEWS: ("streamingViewersAvg", "reviewCount"),
}

METRIC_FIELDS = ("ccuAvg", "ccuPeak", "streamingViewersAvg", "streamingStreamsAvg", "reviewCount")

# (minimum |r|, strength), strongest first
STRENGTH_BANDS = (
    (0.9, CorrelationStrength.VERY_STRONG),
    (0.7, CorrelationStrength.STRONG),
    (0.5, CorrelationStrength.MODERATE),
    (0.3, CorrelationStrength.WEAK),
    (0.1, CorrelationStrength.VERY_WEAK),
)
DIRECTION_THRESHOLD: float = 0.1

LAG_INSIGHT_MIN_CONFIDENCE: float = 0.5
ELASTICITY_INSIGHT_MIN_CONFIDENCE: float = 0.3

HOURS_PER_DAY = 24


# =============================================================================
# Statistics
# =============================================================================


def pearson_correlation(x: Sequence[float], y: Sequence[float], min_samples: int = 3) -> float:
    """
    Pearson correlation coefficient of two equal-length series.

    Returns 0 for mismatched lengths, fewer than min_samples points or zero
    variance in either series, and clamps the result to [-1, 1].

    Example:
        >>> pearson_correlation([1, 2, 3, 4], [2, 4, 6, 8])
        1.0
    """
    if len(x) != len(y) or len(x) < min_samples:
        return 0.0

    xs = np.asarray(x, dtype=np.float64)
    ys = np.asarray(y, dtype=np.float64)
    if np.ptp(xs) == 0 or np.ptp(ys) == 0:
        return 0.0
    dx = xs - xs.mean()
    dy = ys - ys.mean()

    denominator = float(np.sqrt(np.sum(dx * dx) * np.sum(dy * dy)))
    if denominator == 0:
        return 0.0
    return clamp(float(np.sum(dx * dy)) / denominator, -1.0, 1.0)


def interpret_correlation(r: float) -> Tuple[CorrelationStrength, CorrelationDirection]:
    """Strength bucket of |r| and the sign of r (|r| <= 0.1 has no direction)."""
    abs_r = abs(r)
    strength = CorrelationStrength.NONE
    for minimum, label in STRENGTH_BANDS:
        if abs_r >= minimum:
            strength = label
            break

    if r > DIRECTION_THRESHOLD:
        direction = CorrelationDirection.POSITIVE
    elif r < -DIRECTION_THRESHOLD:
        direction = CorrelationDirection.NEGATIVE
    else:
        direction = CorrelationDirection.NONE
    return strength, direction


def describe_correlation(r: float) -> str:
    """Short human-readable label, e.g. "strong positive correlation"."""
    strength, direction = interpret_correlation(r)
    if strength == CorrelationStrength.NONE:
        return "no correlation"
    label = strength.value.replace("_", " ")
    if direction == CorrelationDirection.NONE:
        return f"{label} correlation"
    return f"{label} {direction.value} correlation"


def correlation_to_percentage(r: float) -> int:
    """Coefficient of determination (r^2) as a whole percentage."""
    return int(round(r * r * 100))


# =============================================================================
# Alignment
# =============================================================================


def _window(daily_series: Sequence[DailyMetric], days: int) -> List[DailyMetric]:
    """Date-sorted rows within the last `days` days ending at the latest date."""
    ordered = sorted(daily_series, key=lambda m: m.date)
    if not ordered:
        return []
    first_day = ordered[-1].date - timedelta(days=days - 1)
    return [m for m in ordered if m.date >= first_day]


def _by_date(rows: Sequence[DailyMetric], field_name: str) -> Dict[date, float]:
    values: Dict[date, float] = {}
    for row in rows:
        value = getattr(row, field_name)
        if value is not None:
            values[row.date] = float(value)
    return values


def _aligned(
    x_by_date: Dict[date, float],
    y_by_date: Dict[date, float],
    lag_days: int = 0,
) -> Tuple[List[float], List[float]]:
    """Pairs (x on day d, y on day d + lag) where both exist, in date order."""
    xs: List[float] = []
    ys: List[float] = []
    shift = timedelta(days=lag_days)
    for day in sorted(x_by_date):
        later = day + shift
        if later in y_by_date:
            xs.append(x_by_date[day])
            ys.append(y_by_date[later])
    return xs, ys


# =============================================================================
# Lag and elasticity
# =============================================================================


def analyze_lag_correlation(
    viewers_by_date: Dict[date, float],
    ccu_by_date: Dict[date, float],
    max_lag_days: int,
    min_samples: int = 3,
    full_confidence_samples: int = 14,
) -> LagAnalysis:
    """
    Best viewer -> CCU lag in 0..max_lag_days.

    Lags with fewer than min_samples aligned days are skipped. With no
    evaluable lag the analysis is all zeros.
    """
    all_lags: List[LagCorrelation] = []
    best: Optional[LagCorrelation] = None

    for lag in range(max_lag_days + 1):
        xs, ys = _aligned(viewers_by_date, ccu_by_date, lag)
        if len(xs) < min_samples:
            continue
        entry = LagCorrelation(
            lagDays=lag,
            lagHours=lag * HOURS_PER_DAY,
            correlation=round(pearson_correlation(xs, ys, min_samples), 4),
            sampleSize=len(xs),
        )
        all_lags.append(entry)
        if best is None or abs(entry.correlation) > abs(best.correlation):
            best = entry

    if best is None:
        return LagAnalysis()

    confidence = abs(best.correlation) * min(1.0, best.sampleSize / full_confidence_samples)
    return LagAnalysis(
        optimalLagHours=best.lagHours,
        correlationAtLag=best.correlation,
        confidence=round(clamp(confidence, 0.0, 1.0), 3),
        allLags=all_lags,
    )


def estimate_elasticity(
    viewers: Sequence[float],
    ccu: Sequence[float],
    min_samples: int = 5,
    full_confidence_samples: int = 14,
) -> ElasticityEstimate:
    """
    Log-log least-squares slope of CCU on viewers.

    Only pairs where both values are positive are used. Fewer than
    min_samples pairs, or no spread in viewers, yields a zero estimate.
    """
    pairs = [(v, c) for v, c in zip(viewers, ccu) if v > 0 and c > 0]
    if len(pairs) < min_samples:
        return ElasticityEstimate(sampleSize=len(pairs))

    log_v = np.log(np.asarray([p[0] for p in pairs], dtype=np.float64))
    log_c = np.log(np.asarray([p[1] for p in pairs], dtype=np.float64))

    dx = log_v - log_v.mean()
    sxx = float(np.sum(dx * dx))
    if sxx == 0:
        return ElasticityEstimate(sampleSize=len(pairs))

    slope = float(np.sum(dx * (log_c - log_c.mean()))) / sxx
    intercept = float(log_c.mean()) - slope * float(log_v.mean())

    ss_total = float(np.sum((log_c - log_c.mean()) ** 2))
    ss_residual = float(np.sum((log_c - (slope * log_v + intercept)) ** 2))
    r_squared = 1.0 - ss_residual / ss_total if ss_total > 0 else 0.0

    confidence = max(r_squared, 0.0) * min(1.0, len(pairs) / full_confidence_samples)
    return ElasticityEstimate(
        viewersToCcu=round(slope, 4),
        confidence=round(clamp(confidence, 0.0, 1.0), 3),
        rSquared=round(r_squared, 4),
        sampleSize=len(pairs),
    )


# =============================================================================
# Insights
# =============================================================================


def generate_insights(
    game_name: str,
    correlations: Dict[str, float],
    lag: LagAnalysis,
    elasticity: ElasticityEstimate,
) -> List[str]:
    insights: List[str] = []
    subject = game_name or "This game"

    viewers_ccu = correlations[PAIR_VIEWERS_CCU]
    strength, _ = interpret_correlation(viewers_ccu)
    if strength != CorrelationStrength.NONE:
        insights.append(
            f"{subject} shows a {describe_correlation(viewers_ccu)} between "
            f"streaming viewers and CCU (r={viewers_ccu:.2f})"
        )
    else:
        insights.append(f"No meaningful correlation between streaming viewers and CCU for {subject}")

    if lag.optimalLagHours > 0 and lag.confidence > LAG_INSIGHT_MIN_CONFIDENCE:
        lag_days = lag.optimalLagHours // HOURS_PER_DAY
        insights.append(f"Streaming impact on CCU peaks about {lag_days} day(s) later")
    elif lag.allLags and lag.optimalLagHours == 0 and lag.confidence > LAG_INSIGHT_MIN_CONFIDENCE:
        insights.append("Streaming impact shows up in CCU on the same day")

    if elasticity.confidence > ELASTICITY_INSIGHT_MIN_CONFIDENCE and elasticity.viewersToCcu > 0:
        insights.append(
            f"A 10% rise in streaming viewers is associated with a "
            f"{elasticity.viewersToCcu * 10:.1f}% rise in CCU"
        )

    streams_strength, streams_direction = interpret_correlation(correlations[PAIR_STREAMS_CCU])
    if (
        streams_strength in (CorrelationStrength.STRONG, CorrelationStrength.VERY_STRONG)
        and streams_direction == CorrelationDirection.POSITIVE
    ):
        insights.append("More live streams go with higher CCU; broad streamer outreach pays off")

    reviews_strength, reviews_direction = interpret_correlation(correlations[PAIR_VIEWERS_REVIEWS])
    if (
        reviews_strength in (CorrelationStrength.MODERATE, CorrelationStrength.STRONG)
        and reviews_direction == CorrelationDirection.POSITIVE
    ):
        insights.append("Reviews tend to increase on high-viewership days")

    return insights


# =============================================================================
# Daily series
# =============================================================================


def _daily_values(points: Sequence[MetricPoint], how: str) -> pd.Series:
    if not points:
        return pd.Series(dtype="float64")
    frame = pd.DataFrame({
        "timestamp": pd.to_datetime([p.timestamp for p in points], utc=True),
        "value": [p.value for p in points],
    })
    return frame.groupby(frame["timestamp"].dt.date)["value"].agg(how)


def build_daily_series(
    ccu: Sequence[MetricPoint] = (),
    viewers: Sequence[MetricPoint] = (),
    streams: Sequence[MetricPoint] = (),
    reviews: Sequence[MetricPoint] = (),
) -> List[DailyMetric]:
    """
    Aggregate raw (e.g. hourly) observations into UTC calendar-day rows.

    CCU gives the daily mean and max, viewers and streams the daily mean,
    and review observations are summed per day. Days missing a metric carry
    None for it.
    """
    columns = {
        "ccuAvg": _daily_values(ccu, "mean"),
        "ccuPeak": _daily_values(ccu, "max"),
        "streamingViewersAvg": _daily_values(viewers, "mean"),
        "streamingStreamsAvg": _daily_values(streams, "mean"),
        "reviewCount": _daily_values(reviews, "sum"),
    }
    frame = pd.concat(columns, axis=1).sort_index()

    rows: List[DailyMetric] = []
    for day, values in frame.iterrows():
        rows.append(DailyMetric(
            date=day,
            **{name: None if pd.isna(values[name]) else float(values[name]) for name in columns},
        ))
    return rows


def _series_points(rows: Sequence[DailyMetric]) -> Dict[str, List[MetricPoint]]:
    series: Dict[str, List[MetricPoint]] = {}
    for name in METRIC_FIELDS:
        points = [
            MetricPoint(
                timestamp=datetime.combine(row.date, time.min, tzinfo=timezone.utc),
                value=getattr(row, name),
            )
            for row in rows
            if getattr(row, name) is not None
        ]
        series[name] = points
    return series


# =============================================================================
# Main Entry Point
# =============================================================================


def analyze_streaming_correlation(
    game_name: str,
    game_id: str,
    daily_series: Sequence[DailyMetric],
    time_range: TimeRange,
    settings: Optional[Settings] = None,
    analyzed_at: Optional[datetime] = None,
) -> CorrelationResult:
    """
    Correlate streaming viewership with CCU and reviews for one game.

    Args:
        game_name: Subject display name (used in insight sentences).
        game_id: Subject identifier.
        daily_series: One row per day; any metric may be None.
        time_range: Day range to analyze, ending at the latest row.
        settings: Engine settings; defaults to get_settings().
        analyzed_at: Result timestamp; defaults to now (UTC).

    Returns:
        CorrelationResult; sufficientData is False when fewer than
        min_correlation_samples days have both viewers and CCU.
    """
    settings = settings or get_settings()
    analyzed_at = analyzed_at or datetime.now(timezone.utc)
    rows = _window(daily_series, time_range.days)
    min_samples = settings.min_correlation_samples

    ccu_by_date = _by_date(rows, "ccuAvg")
    viewers_by_date = _by_date(rows, "streamingViewersAvg")
    viewers, ccu = _aligned(viewers_by_date, ccu_by_date)

    if len(viewers) < min_samples:
        message = (
            f"Insufficient data: {len(viewers)} day(s) with both streaming viewers and CCU "
            f"in the last {time_range.days} days; at least {min_samples} are required"
        )
        logger.warning("Streaming correlation for %s: %s", game_id or game_name, message)
        return CorrelationResult(
            gameId=game_id,
            gameName=game_name,
            timeRange=time_range,
            sufficientData=False,
            message=message,
            sampleSize=len(viewers),
            pairwiseCorrelations={name: 0.0 for name in CORRELATION_PAIRS},
            optimalLagHours=0,
            correlationAtLag=0.0,
            confidenceScore=0.0,
            elasticity=0.0,
            lagAnalysis=LagAnalysis(),
            elasticityEstimate=ElasticityEstimate(),
            insights=[],
            dailySeries=_series_points(rows),
            analyzedAt=analyzed_at,
        )

    correlations: Dict[str, float] = {}
    for name, (x_field, y_field) in CORRELATION_PAIRS.items():
        xs, ys = _aligned(_by_date(rows, x_field), _by_date(rows, y_field))
        correlations[name] = round(pearson_correlation(xs, ys, min_samples), 4)

    lag = analyze_lag_correlation(
        viewers_by_date,
        ccu_by_date,
        settings.max_lag_days,
        min_samples,
        settings.elasticity_full_confidence_samples,
    )
    elasticity = estimate_elasticity(
        viewers,
        ccu,
        settings.min_elasticity_samples,
        settings.elasticity_full_confidence_samples,
    )

    logger.info(
        "Streaming correlation for %s over %s: n=%d r=%.4f lag=%dh elasticity=%.4f",
        game_id or game_name, time_range.value, len(viewers),
        correlations[PAIR_VIEWERS_CCU], lag.optimalLagHours, elasticity.viewersToCcu,
    )

    return CorrelationResult(
        gameId=game_id,
        gameName=game_name,
        timeRange=time_range,
        sufficientData=True,
        sampleSize=len(viewers),
        pairwiseCorrelations=correlations,
        optimalLagHours=lag.optimalLagHours,
        correlationAtLag=lag.correlationAtLag,
        confidenceScore=lag.confidence,
        elasticity=elasticity.viewersToCcu,
        lagAnalysis=lag,
        elasticityEstimate=elasticity,
        insights=generate_insights(game_name, correlations, lag, elasticity),
        dailySeries=_series_points(rows),
        analyzedAt=analyzed_at,
    )
