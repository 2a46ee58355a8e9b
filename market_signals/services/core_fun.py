"""
Core Fun Service

Extracts what players find fun (or not) from review text, across six
categories: gameplay, story, audiovisual, social, progression, freedom.

Per category:
    mentions  matched positive and negative lexicon keywords over all reviews
    score     round(positive / (positive + negative) * 100), 50 with no mentions

Derived views:
    primaryFun    up to 2 best categories with score >= 70
    weaknesses    up to 2 worst categories with score < 50
    overall       mention-weighted composite of category scores

Both primaryFun and weaknesses require min_category_mentions mentions, so a
category nobody talked about is never reported as a strength or weakness.

Highlights are verbatim excerpts around the matched keyword; they are never
generated text.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence, Set, Tuple

from market_signals.core.config import Settings, get_settings
from market_signals.core.errors import ConfigError, NoDataError
from market_signals.models.enums import FunCategory, Sentiment
from market_signals.models.schemas import (
    CategoryClassification,
    CategoryScore,
    CoreFunResult,
    DistributionEntry,
    ReviewHighlight,
    ReviewRecord,
)
from market_signals.services.lexicons import FUN_NEGATIVE_LEXICON, FUN_POSITIVE_LEXICON
from market_signals.services.scoring import (
    NEUTRAL_SCORE,
    distribute_percentages,
    grade,
    round_half_up,
    weighted_composite,
)
from market_signals.services.text_classifier import Lexicon, category_value, primary_category

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

PRIMARY_FUN_MIN_SCORE: int = 70
WEAKNESS_MAX_SCORE: int = 50
MAX_PRIMARY_FUN: int = 2
MAX_WEAKNESSES: int = 2

UNCLASSIFIED_KEY = "unclassified"
ELLIPSIS = "..."


@dataclass(frozen=True)
class CoreFunConfig:
    """Lexicons and highlight limits for core-fun analysis."""

    positive_lexicon: Lexicon = FUN_POSITIVE_LEXICON
    negative_lexicon: Lexicon = FUN_NEGATIVE_LEXICON
    highlight_context_chars: int = 50
    highlight_min_length: int = 20
    highlights_per_category: int = 3
    highlights_per_sentiment: int = 6
    min_category_mentions: int = 2

    def __post_init__(self) -> None:
        positive = set(self.positive_lexicon.categories)
        negative = set(self.negative_lexicon.categories)
        if positive != negative:
            raise ConfigError(
                f"core fun lexicons disagree on categories: "
                f"{self.positive_lexicon.name}={sorted(map(category_value, positive))}, "
                f"{self.negative_lexicon.name}={sorted(map(category_value, negative))}"
            )

    @classmethod
    def from_settings(cls, settings: Settings) -> "CoreFunConfig":
        return cls(
            highlight_context_chars=settings.highlight_context_chars,
            highlight_min_length=settings.highlight_min_length,
            highlights_per_category=settings.highlights_per_category,
            highlights_per_sentiment=settings.highlights_per_sentiment,
            min_category_mentions=settings.min_category_mentions,
        )


# =============================================================================
# Highlights
# =============================================================================


def extract_quote(text: str, keyword: str, context_chars: int = 50) -> str:
    """
    Excerpt of text around the first occurrence of keyword.

    Keeps context_chars characters on each side and marks a cut with "...".
    Returns "" when the keyword does not occur.

    Example:
        >>> extract_quote("The soundtrack is stunning", "soundtrack", 4)
        'The soundtrack is...'
    """
    match = re.search(re.escape(keyword), text, re.IGNORECASE)
    if match is None:
        return ""

    start = max(0, match.start() - context_chars)
    end = min(len(text), match.end() + context_chars)

    quote = text[start:end].strip()
    if start > 0:
        quote = ELLIPSIS + quote
    if end < len(text):
        quote = quote + ELLIPSIS
    return quote


class _HighlightCollector:
    """Caps highlights per category and per sentiment, in review order."""

    def __init__(self, config: CoreFunConfig) -> None:
        self.config = config
        self.items: Dict[Sentiment, List[ReviewHighlight]] = {
            Sentiment.POSITIVE: [],
            Sentiment.NEGATIVE: [],
        }
        self._per_category: Dict[Tuple[Sentiment, FunCategory], int] = {}

    def offer(
        self,
        review: ReviewRecord,
        category: FunCategory,
        sentiment: Sentiment,
        keyword: str,
    ) -> None:
        bucket = self.items[sentiment]
        key = (sentiment, category)
        if len(bucket) >= self.config.highlights_per_sentiment:
            return
        if self._per_category.get(key, 0) >= self.config.highlights_per_category:
            return

        quote = extract_quote(review.text, keyword, self.config.highlight_context_chars)
        if len(quote) <= self.config.highlight_min_length:
            return

        bucket.append(ReviewHighlight(
            quote=quote,
            category=category,
            sentiment=sentiment,
            playtimeHours=review.playtimeHours,
        ))
        self._per_category[key] = self._per_category.get(key, 0) + 1


# =============================================================================
# Scoring
# =============================================================================


def category_score(positive: int, negative: int) -> int:
    """Positive share of mentions on a 0-100 scale; 50 without mentions."""
    total = positive + negative
    if total == 0:
        return int(NEUTRAL_SCORE)
    return int(round_half_up(positive / total * 100, 0))


def overall_fun_score(scores: Sequence[CategoryScore]) -> int:
    """Mention-weighted composite of category scores; 50 without mentions."""
    total_mentions = sum(score.mentions for score in scores)
    if total_mentions == 0:
        return int(NEUTRAL_SCORE)

    components = {score.category.value: float(score.score) for score in scores}
    weights = {score.category.value: score.mentions / total_mentions for score in scores}
    return int(round_half_up(weighted_composite(components, weights), 0))


def select_primary_fun(scores: Sequence[CategoryScore], min_mentions: int) -> List[FunCategory]:
    ranked = sorted(scores, key=lambda s: -s.score)
    return [
        s.category for s in ranked
        if s.score >= PRIMARY_FUN_MIN_SCORE and s.mentions >= min_mentions
    ][:MAX_PRIMARY_FUN]


def select_weaknesses(scores: Sequence[CategoryScore], min_mentions: int) -> List[FunCategory]:
    """Lowest-scoring categories first."""
    ranked = sorted(scores, key=lambda s: s.score)
    return [
        s.category for s in ranked
        if s.score < WEAKNESS_MAX_SCORE and s.mentions >= min_mentions
    ][:MAX_WEAKNESSES]


def generate_signals(
    primary_fun: Sequence[FunCategory],
    weaknesses: Sequence[FunCategory],
    overall: int,
    total_mentions: int,
) -> List[str]:
    signals: List[str] = []
    if total_mentions == 0:
        signals.append("No fun-related mentions found in reviews")
        return signals

    for category in primary_fun:
        signals.append(f"Players praise {category.value}")
    for category in weaknesses:
        signals.append(f"Players criticize {category.value}")

    if overall >= 85:
        signals.append("Overwhelmingly positive about the fun factor")
    elif overall < 30:
        signals.append("Fun factor is a major complaint")
    return signals


# =============================================================================
# Main Entry Point
# =============================================================================


def classify_core_fun(
    game_id: str,
    game_name: str,
    reviews: Sequence[ReviewRecord],
    config: Optional[CoreFunConfig] = None,
    analyzed_at: Optional[datetime] = None,
) -> CoreFunResult:
    """
    Score fun categories, pick strengths and weaknesses, collect highlights.

    Args:
        game_id: Subject identifier.
        game_name: Subject display name.
        reviews: Review batch; must not be empty.
        config: Lexicons and limits; defaults to CoreFunConfig.from_settings().
        analyzed_at: Result timestamp; defaults to now (UTC).

    Raises:
        NoDataError: If the batch is empty.
    """
    if not reviews:
        raise NoDataError("core_fun", f"no reviews to analyze for {game_id or game_name!r}")

    config = config or CoreFunConfig.from_settings(get_settings())
    categories = [FunCategory(c) for c in config.positive_lexicon.categories]

    positive_counts: Dict[FunCategory, int] = {c: 0 for c in categories}
    negative_counts: Dict[FunCategory, int] = {c: 0 for c in categories}
    keywords: Dict[FunCategory, List[str]] = {c: [] for c in categories}
    seen_keywords: Dict[FunCategory, Set[str]] = {c: set() for c in categories}
    top_categories: List[str] = []
    highlights = _HighlightCollector(config)

    for review in reviews:
        positive = config.positive_lexicon.classify(review.text)
        negative = config.negative_lexicon.classify(review.text)

        for sentiment, classifications, counts in (
            (Sentiment.POSITIVE, positive, positive_counts),
            (Sentiment.NEGATIVE, negative, negative_counts),
        ):
            for classification in classifications:
                category = FunCategory(classification.category)
                counts[category] += len(classification.matchedKeywords)
                for keyword in classification.matchedKeywords:
                    if keyword not in seen_keywords[category]:
                        seen_keywords[category].add(keyword)
                        keywords[category].append(keyword)
                    highlights.offer(review, category, sentiment, keyword)

        # Combined mention count per category decides the review's top category
        combined = _combine(positive, negative)
        top = primary_category(combined)
        top_categories.append(top if top is not None else UNCLASSIFIED_KEY)

    category_scores = [
        CategoryScore(
            category=category,
            score=category_score(positive_counts[category], negative_counts[category]),
            positiveCount=positive_counts[category],
            negativeCount=negative_counts[category],
            keywords=keywords[category],
        )
        for category in categories
    ]
    # Best first; ties keep category declaration order
    category_scores.sort(key=lambda s: -s.score)

    total_mentions = sum(s.mentions for s in category_scores)
    overall = overall_fun_score(category_scores)
    primary_fun = select_primary_fun(category_scores, config.min_category_mentions)
    weaknesses = select_weaknesses(category_scores, config.min_category_mentions)

    logger.info(
        "Core fun for %s: %d reviews, %d mentions, overall=%d",
        game_id or game_name, len(reviews), total_mentions, overall,
    )

    return CoreFunResult(
        gameId=game_id,
        gameName=game_name,
        categoryScores=category_scores,
        primaryFun=primary_fun,
        weaknesses=weaknesses,
        positiveHighlights=highlights.items[Sentiment.POSITIVE],
        negativeHighlights=highlights.items[Sentiment.NEGATIVE],
        overallFunScore=overall,
        funGrade=grade(overall),
        distribution=_distribution(top_categories, categories),
        reviewsAnalyzed=len(reviews),
        signals=generate_signals(primary_fun, weaknesses, overall, total_mentions),
        analyzedAt=analyzed_at or datetime.now(timezone.utc),
    )


def _combine(
    positive: Sequence[CategoryClassification],
    negative: Sequence[CategoryClassification],
) -> List[CategoryClassification]:
    negative_by_category = {c.category: c for c in negative}
    combined: List[CategoryClassification] = []
    for pos in positive:
        neg = negative_by_category.get(pos.category)
        if neg is None:
            combined.append(pos)
            continue
        combined.append(CategoryClassification(
            category=pos.category,
            score=pos.score + neg.score,
            matchedKeywords=pos.matchedKeywords + neg.matchedKeywords,
        ))
    return combined


def _distribution(top_categories: Sequence[str], categories: Sequence[FunCategory]) -> List[DistributionEntry]:
    keys = [c.value for c in categories] + [UNCLASSIFIED_KEY]
    counts = [sum(1 for top in top_categories if top == key) for key in keys]
    percentages = distribute_percentages(counts)
    return [
        DistributionEntry(key=key, count=count, percentage=percentage)
        for key, count, percentage in zip(keys, counts, percentages)
    ]
