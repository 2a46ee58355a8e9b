"""
Trending Score Service

Combines four market signals into a 0-100 trending composite:

    trending = ccuScore * 0.40 + reviewScore * 0.30 + priceScore * 0.15 + newsScore * 0.15

Sub-scores:
    ccu     CCU growth % clamped to [-50, +50] -> [0, 100].
            No previous CCU: 100 if players are present, else 50.
    review  Review-count change % clamped to [-30, +100] -> [0, 100].
            No previous reviews: 80 if any new reviews, else 50.
    price   On sale: discount tiers 75/50/30/10 -> 100/90/80/60, else 55.
            Price increase without a sale: 30. Otherwise 50.
    news    Recent news items: 0 -> 30, 1-2 -> 60, 3-5 -> 80, 6+ -> 100.

The weights are business constants read from Settings.trending_weights and
validated once by get_scoring_config().

Usage:
    from market_signals.services.trending import compute_trending_score

    result = compute_trending_score(TrendingInput(
        currentCcu=1500, previousCcu=1000,
        recentReviews=80, previousReviews=40,
        isOnSale=True, discountPercent=60, newsCount=4,
    ))
    result.score   # 95.5
    result.grade   # Grade.S
"""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from market_signals.core.config import get_scoring_config
from market_signals.models.schemas import ScoreBreakdown, TrendingInput, TrendingResult
from market_signals.services.scoring import (
    WeightTable,
    build_breakdown,
    normalize,
    round_half_up,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

# CCU growth saturation points (%)
CCU_GROWTH_FLOOR: float = -50.0
CCU_GROWTH_CEILING: float = 50.0

# Review velocity saturation points (%)
REVIEW_VELOCITY_FLOOR: float = -30.0
REVIEW_VELOCITY_CEILING: float = 100.0

# (minimum discount %, score), highest tier first
DISCOUNT_TIERS = ((75, 100.0), (50, 90.0), (30, 80.0), (10, 60.0))
SMALL_DISCOUNT_SCORE: float = 55.0
PRICE_INCREASE_SCORE: float = 30.0
PRICE_UNCHANGED_SCORE: float = 50.0

# (minimum news items, score), highest tier first
NEWS_TIERS = ((6, 100.0), (3, 80.0), (1, 60.0))
NO_NEWS_SCORE: float = 30.0

# Sub-score thresholds that emit human-readable signals
SIGNAL_HIGH: float = 80.0
SIGNAL_LOW: float = 20.0
DEEP_DISCOUNT_PERCENT: float = 50.0


# =============================================================================
# Sub-scores
# =============================================================================


def calculate_ccu_score(current: float, previous: float) -> float:
    """CCU growth sub-score; +50% or more saturates at 100, -50% or less at 0."""
    if previous == 0:
        return 100.0 if current > 0 else 50.0

    growth_rate = (current - previous) / previous * 100.0
    if growth_rate >= CCU_GROWTH_CEILING:
        return 100.0
    if growth_rate <= CCU_GROWTH_FLOOR:
        return 0.0
    return normalize(growth_rate, CCU_GROWTH_FLOOR, CCU_GROWTH_CEILING)


def calculate_review_score(recent: float, previous: float) -> float:
    """Review velocity sub-score; +100% or more saturates at 100, -30% or less at 0."""
    if previous == 0:
        return 80.0 if recent > 0 else 50.0

    velocity = (recent - previous) / previous * 100.0
    if velocity >= REVIEW_VELOCITY_CEILING:
        return 100.0
    if velocity <= REVIEW_VELOCITY_FLOOR:
        return 0.0
    return normalize(velocity, REVIEW_VELOCITY_FLOOR, REVIEW_VELOCITY_CEILING)


def calculate_price_score(
    current: float,
    previous: float,
    is_on_sale: bool,
    discount_percent: float,
) -> float:
    """Discounts raise interest; an unsold price increase lowers it."""
    if is_on_sale:
        for minimum, score in DISCOUNT_TIERS:
            if discount_percent >= minimum:
                return score
        return SMALL_DISCOUNT_SCORE

    if current > previous and previous > 0:
        return PRICE_INCREASE_SCORE

    return PRICE_UNCHANGED_SCORE


def calculate_news_score(news_count: int) -> float:
    for minimum, score in NEWS_TIERS:
        if news_count >= minimum:
            return score
    return NO_NEWS_SCORE


# =============================================================================
# Signals
# =============================================================================


def _format_percent(value: float) -> str:
    return f"{int(round_half_up(value, 0))}"


def generate_signals(data: TrendingInput, components: Dict[str, float]) -> List[str]:
    """
    Short tags for sub-scores that crossed a signal threshold.

    The CCU surge tag carries the literal growth percentage.
    """
    signals: List[str] = []

    ccu_score = components["ccu"]
    if ccu_score >= SIGNAL_HIGH:
        if data.previousCcu > 0:
            growth = (data.currentCcu - data.previousCcu) / data.previousCcu * 100.0
            signals.append(f"CCU surge +{_format_percent(growth)}%")
        else:
            signals.append("CCU surge (new player activity)")
    elif ccu_score <= SIGNAL_LOW:
        signals.append("CCU dropping sharply")

    if components["review"] >= SIGNAL_HIGH:
        signals.append("Review activity spiking")

    if data.isOnSale and data.discountPercent >= DEEP_DISCOUNT_PERCENT:
        signals.append(f"Deep discount {_format_percent(data.discountPercent)}%")
    elif data.isOnSale:
        signals.append(f"On sale {_format_percent(data.discountPercent)}%")

    if components["news"] >= SIGNAL_HIGH:
        signals.append("Active update cadence")

    return signals


# =============================================================================
# Main Entry Points
# =============================================================================


def compute_trending_score(
    data: TrendingInput,
    weights: Optional[WeightTable] = None,
    analyzed_at: Optional[datetime] = None,
) -> TrendingResult:
    """
    Compute the trending composite, grade and signals for one game.

    Args:
        data: Current and previous-period market signals.
        weights: Validated weight table; defaults to the configured
            trending weights (ccu 0.40, review 0.30, price 0.15, news 0.15).
        analyzed_at: Result timestamp; defaults to now (UTC).

    Returns:
        TrendingResult whose score is the composite rounded to one decimal.
    """
    table = weights if weights is not None else get_scoring_config().trending

    components: Dict[str, float] = {
        "ccu": calculate_ccu_score(data.currentCcu, data.previousCcu),
        "review": calculate_review_score(data.recentReviews, data.previousReviews),
        "price": calculate_price_score(
            data.currentPrice,
            data.previousPrice,
            data.isOnSale,
            data.discountPercent,
        ),
        "news": calculate_news_score(data.newsCount),
    }

    breakdown: ScoreBreakdown = build_breakdown(components, table)
    signals = generate_signals(data, components)

    logger.debug(
        "Trending components for %s: %s -> %.3f",
        data.gameId or "<unnamed>", components, breakdown.compositeScore,
    )

    return TrendingResult(
        gameId=data.gameId,
        gameName=data.gameName,
        score=round_half_up(breakdown.compositeScore, 1),
        grade=breakdown.grade,
        breakdown=breakdown,
        signals=signals,
        analyzedAt=analyzed_at or datetime.now(timezone.utc),
    )


def compute_simple_trending_score(current_ccu: float, previous_ccu: float) -> float:
    """Quick trending estimate from CCU alone (the CCU sub-score)."""
    return calculate_ccu_score(current_ccu, previous_ccu)
