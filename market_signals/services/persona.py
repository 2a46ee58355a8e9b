"""
Player Persona Service (Player DNA)

Places each reviewer on the five-tier Player Spectrum and aggregates the
batch into a tier distribution with marketing playbooks.

Per review, each tier scores:
    lexicon matches        keyword 1 point, regex pattern 2 points
    playtime bucket        +3 to the tier implied by hours played
                           (>= 100 core, >= 30 dedicated, >= 10 engaged,
                            >= 2 casual, else broad)
    review length          > 500 chars: core and dedicated +1
                           < 50 chars: casual and broad +1
    helpfulness            > 10 helpful votes: core and dedicated +1

The per-review classification stays multi-label; the distribution counts
only each review's top tier (ties go to the tier declared first).
"""

import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from functools import lru_cache
from typing import Dict, List, Optional, Sequence, Tuple

from market_signals.core.config import get_settings
from market_signals.core.errors import NoDataError
from market_signals.models.enums import PlayerTier, Sentiment
from market_signals.models.schemas import (
    CommunicationStrategy,
    DistributionEntry,
    PersonaResult,
    ReviewRecord,
    TierKeyword,
    TierKeywords,
)
from market_signals.services.lexicons import PERSONA_LEXICON, TIER_STRATEGIES
from market_signals.services.scoring import ThresholdBands, distribute_percentages, round_half_up
from market_signals.services.text_classifier import Lexicon

logger = logging.getLogger(__name__)


# =============================================================================
# Configuration
# =============================================================================

DEFAULT_PLAYTIME_BUCKETS: ThresholdBands[PlayerTier] = ThresholdBands(
    [
        (100, PlayerTier.CORE),
        (30, PlayerTier.DEDICATED),
        (10, PlayerTier.ENGAGED),
        (2, PlayerTier.CASUAL),
    ],
    fallback=PlayerTier.BROAD,
    name="playtime_tier",
)

# Candidate vocabulary: 2+ Hangul syllables or a 3+ letter Latin word
KOREAN_TOKEN_PATTERN = re.compile(r"[가-힣]{2,}")
ENGLISH_TOKEN_PATTERN = re.compile(r"\b[a-zA-Z]{3,}\b", re.ASCII)

STRATEGY_TIER_COUNT = 3


@dataclass(frozen=True)
class PersonaConfig:
    """Tier set, lexicon, playtime buckets and bonuses for persona scoring."""

    lexicon: Lexicon = PERSONA_LEXICON
    tiers: Tuple[PlayerTier, ...] = tuple(PlayerTier)
    playtime_buckets: ThresholdBands[PlayerTier] = DEFAULT_PLAYTIME_BUCKETS
    playtime_bonus: float = 3.0
    long_review_chars: int = 500
    long_review_tiers: Tuple[PlayerTier, ...] = (PlayerTier.CORE, PlayerTier.DEDICATED)
    short_review_chars: int = 50
    short_review_tiers: Tuple[PlayerTier, ...] = (PlayerTier.CASUAL, PlayerTier.BROAD)
    length_bonus: float = 1.0
    helpful_votes_threshold: int = 10
    helpful_tiers: Tuple[PlayerTier, ...] = (PlayerTier.CORE, PlayerTier.DEDICATED)
    helpful_bonus: float = 1.0
    min_keyword_frequency: int = 2
    max_tier_keywords: int = 10
    strategies: Dict[PlayerTier, CommunicationStrategy] = field(
        default_factory=lambda: dict(TIER_STRATEGIES)
    )


@lru_cache()
def default_persona_config() -> PersonaConfig:
    """PersonaConfig with keyword limits taken from settings."""
    settings = get_settings()
    return PersonaConfig(
        min_keyword_frequency=settings.min_keyword_frequency,
        max_tier_keywords=settings.max_tier_keywords,
    )


# =============================================================================
# Per-review classification
# =============================================================================


def estimate_tier_by_playtime(
    playtime_hours: float,
    buckets: ThresholdBands[PlayerTier] = DEFAULT_PLAYTIME_BUCKETS,
) -> PlayerTier:
    return buckets.classify(playtime_hours)


def score_review_tiers(review: ReviewRecord, config: PersonaConfig) -> Dict[PlayerTier, float]:
    """Multi-label tier scores of one review, in tier declaration order."""
    scores: Dict[PlayerTier, float] = {tier: 0.0 for tier in config.tiers}

    for classification in config.lexicon.classify(review.text):
        tier = PlayerTier(classification.category)
        if tier in scores:
            scores[tier] += classification.score

    playtime_tier = estimate_tier_by_playtime(review.playtimeHours, config.playtime_buckets)
    if playtime_tier in scores:
        scores[playtime_tier] += config.playtime_bonus

    length = len(review.text)
    if length > config.long_review_chars:
        bonus_tiers: Sequence[PlayerTier] = config.long_review_tiers
    elif length < config.short_review_chars:
        bonus_tiers = config.short_review_tiers
    else:
        bonus_tiers = ()
    for tier in bonus_tiers:
        if tier in scores:
            scores[tier] += config.length_bonus

    if review.helpfulVotes is not None and review.helpfulVotes > config.helpful_votes_threshold:
        for tier in config.helpful_tiers:
            if tier in scores:
                scores[tier] += config.helpful_bonus

    return scores


def classify_review_tier(review: ReviewRecord, config: Optional[PersonaConfig] = None) -> PlayerTier:
    """Top tier of one review; the earlier-declared tier wins a tie."""
    config = config or default_persona_config()
    scores = score_review_tiers(review, config)

    best_tier = config.tiers[0]
    best_score = scores[best_tier]
    for tier in config.tiers[1:]:
        if scores[tier] > best_score:
            best_tier, best_score = tier, scores[tier]
    return best_tier


# =============================================================================
# Aggregation
# =============================================================================


def extract_tier_keywords(
    reviews: Sequence[ReviewRecord],
    assignments: Sequence[PlayerTier],
    config: PersonaConfig,
) -> List[TierKeywords]:
    """
    Representative vocabulary per tier.

    A token qualifies when it appears at least min_keyword_frequency times
    among the tier's reviews. Sentiment is the majority of the recommending
    flags of the reviews it appeared in, neutral on a tie.
    """
    counts: Dict[PlayerTier, Counter] = {tier: Counter() for tier in config.tiers}
    positives: Dict[PlayerTier, Counter] = {tier: Counter() for tier in config.tiers}

    for review, tier in zip(reviews, assignments):
        tokens = KOREAN_TOKEN_PATTERN.findall(review.text) + ENGLISH_TOKEN_PATTERN.findall(review.text)
        for token in tokens:
            word = token.lower()
            counts[tier][word] += 1
            if review.recommended:
                positives[tier][word] += 1

    result: List[TierKeywords] = []
    for tier in config.tiers:
        # Counter keeps first-seen order, so equal frequencies stay in text order
        frequent = [
            (word, count) for word, count in counts[tier].items()
            if count >= config.min_keyword_frequency
        ]
        frequent.sort(key=lambda item: -item[1])

        keywords: List[TierKeyword] = []
        for word, count in frequent[:config.max_tier_keywords]:
            positive = positives[tier][word]
            negative = count - positive
            if positive > negative:
                sentiment = Sentiment.POSITIVE
            elif negative > positive:
                sentiment = Sentiment.NEGATIVE
            else:
                sentiment = Sentiment.NEUTRAL
            keywords.append(TierKeyword(keyword=word, frequency=count, sentiment=sentiment))

        result.append(TierKeywords(tier=tier, keywords=keywords))
    return result


def generate_signals(
    distribution: Sequence[DistributionEntry],
    primary: PlayerTier,
    avg_playtime_hours: float,
) -> List[str]:
    share = {entry.key: entry.percentage for entry in distribution}
    signals = [f"Primary audience: {primary.value} players ({share.get(primary.value, 0.0):.1f}%)"]

    enthusiasts = share.get(PlayerTier.CORE.value, 0.0) + share.get(PlayerTier.DEDICATED.value, 0.0)
    light = share.get(PlayerTier.CASUAL.value, 0.0) + share.get(PlayerTier.BROAD.value, 0.0)
    if enthusiasts >= 50:
        signals.append("Enthusiast-heavy audience")
    elif light >= 50:
        signals.append("Light-player-heavy audience")

    if avg_playtime_hours >= 100:
        signals.append("Very long average playtime")
    elif avg_playtime_hours < 2:
        signals.append("Most reviewers barely played")

    return signals


# =============================================================================
# Main Entry Point
# =============================================================================


def classify_persona(
    game_id: str,
    game_name: str,
    reviews: Sequence[ReviewRecord],
    config: Optional[PersonaConfig] = None,
    analyzed_at: Optional[datetime] = None,
) -> PersonaResult:
    """
    Classify a review batch into the Player Spectrum.

    Args:
        game_id: Subject identifier.
        game_name: Subject display name.
        reviews: Review batch; must not be empty.
        config: Scoring configuration; defaults to default_persona_config().
        analyzed_at: Result timestamp; defaults to now (UTC). Pin it for
            fully reproducible output.

    Raises:
        NoDataError: If the batch is empty.
    """
    if not reviews:
        raise NoDataError("persona", f"no reviews to classify for {game_id or game_name!r}")

    config = config or default_persona_config()
    assignments = [classify_review_tier(review, config) for review in reviews]

    tier_counts = Counter(assignments)
    counts = [tier_counts.get(tier, 0) for tier in config.tiers]
    percentages = distribute_percentages(counts)
    distribution = [
        DistributionEntry(key=tier.value, count=count, percentage=percentage)
        for tier, count, percentage in zip(config.tiers, counts, percentages)
    ]

    ranked = sorted(config.tiers, key=lambda tier: -tier_counts.get(tier, 0))
    primary = ranked[0]
    secondary = ranked[1] if len(ranked) > 1 and tier_counts.get(ranked[1], 0) > 0 else None

    strategies = [
        config.strategies[tier]
        for tier in ranked[:STRATEGY_TIER_COUNT]
        if tier_counts.get(tier, 0) > 0 and tier in config.strategies
    ]

    avg_playtime = round_half_up(
        sum(review.playtimeHours for review in reviews) / len(reviews), 1
    )

    logger.info(
        "Persona for %s: %d reviews, primary=%s secondary=%s",
        game_id or game_name, len(reviews), primary.value,
        secondary.value if secondary else None,
    )

    return PersonaResult(
        gameId=game_id,
        gameName=game_name,
        distribution=distribution,
        primaryTier=primary,
        secondaryTier=secondary,
        tierKeywords=extract_tier_keywords(reviews, assignments, config),
        strategies=strategies,
        reviewsAnalyzed=len(reviews),
        avgPlaytimeHours=avg_playtime,
        signals=generate_signals(distribution, primary, avg_playtime),
        analyzedAt=analyzed_at or datetime.now(timezone.utc),
    )
