"""
Enumeration definitions for the Market Signal analytics engine.

All enums inherit from both `str` and `Enum` so that pydantic result records
serialize to plain JSON strings for dashboards and for the downstream
text-generation service.

Grade scales:
- Grade: S/A/B/C/D letter buckets shared by trending, retention and fun scores
- VolatilityGrade: CV-based buckets (lower CV = more stable)
- HealthStatus: combined retention + engagement buckets
"""

from enum import Enum


class Grade(str, Enum):
    """
    Letter grade derived from a 0-100 composite score.

    Default thresholds: S >= 85, A >= 70, B >= 50, C >= 30, D otherwise.
    Retention overrides them with its own 80/50/30/15 cutoffs.
    """
    S = "S"
    A = "A"
    B = "B"
    C = "C"
    D = "D"


class VolatilityGrade(str, Enum):
    """
    CCU volatility bucket from the coefficient of variation (%).

    - stable: CV < 15
    - moderate: CV < 30
    - volatile: CV < 50
    - extreme: CV >= 50
    """
    STABLE = "stable"
    MODERATE = "moderate"
    VOLATILE = "volatile"
    EXTREME = "extreme"


class Trend(str, Enum):
    """Coarse direction of a CCU series."""
    GROWING = "growing"
    STABLE = "stable"
    DECLINING = "declining"


class PatternAvailability(str, Enum):
    """
    Whether a volatility pattern field was measured from timestamps.

    Pattern fields are never estimated: when the CCU history cannot support a
    measurement the field is None and marked unavailable.
    """
    MEASURED = "measured"
    UNAVAILABLE = "unavailable"


class HealthStatus(str, Enum):
    """
    Game health from the mean of retention index and engagement score.

    thriving >= 70, healthy >= 50, stable >= 30, declining >= 15, else critical.
    """
    THRIVING = "thriving"
    HEALTHY = "healthy"
    STABLE = "stable"
    DECLINING = "declining"
    CRITICAL = "critical"


class RecentActivity(str, Enum):
    """Recent-window vs lifetime playtime activity level."""
    SURGING = "surging"
    ACTIVE = "active"
    NORMAL = "normal"
    DECLINING = "declining"


class PlayerBaseTrend(str, Enum):
    """Player base direction estimated from the CCU / owner ratio."""
    GROWING = "growing"
    STABLE = "stable"
    SHRINKING = "shrinking"


class PlayerTier(str, Enum):
    """
    Player Spectrum tiers, from genre experts to drive-by players.

    Declaration order is significant: it breaks ties in review classification.
    """
    CORE = "core"
    DEDICATED = "dedicated"
    ENGAGED = "engaged"
    CASUAL = "casual"
    BROAD = "broad"


class FunCategory(str, Enum):
    """
    "What makes the game fun" dimensions.

    - gameplay: controls, combat, puzzles
    - story: narrative, characters, world
    - audiovisual: graphics, sound, music
    - social: multiplayer, community, competition
    - progression: leveling, collecting, achievements
    - freedom: exploration, creation, choice
    """
    GAMEPLAY = "gameplay"
    STORY = "story"
    AUDIOVISUAL = "audiovisual"
    SOCIAL = "social"
    PROGRESSION = "progression"
    FREEDOM = "freedom"


class Sentiment(str, Enum):
    """Polarity of a review mention or keyword."""
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class MatchMode(str, Enum):
    """
    Keyword matching strategy for lexicon scans.

    - substring: casefolded substring search; works for agglutinative
      languages (Korean particles attach directly to nouns)
    - word: casefolded search bounded by non-word characters
    """
    SUBSTRING = "substring"
    WORD = "word"


class TimeRange(str, Enum):
    """Day range of a streaming correlation request."""
    DAYS_7 = "7d"
    DAYS_14 = "14d"
    DAYS_30 = "30d"
    DAYS_90 = "90d"

    @property
    def days(self) -> int:
        return int(self.value[:-1])


class CorrelationStrength(str, Enum):
    """
    Strength bucket of |r|.

    very_strong >= 0.9, strong >= 0.7, moderate >= 0.5, weak >= 0.3,
    very_weak >= 0.1, else none.
    """
    VERY_STRONG = "very_strong"
    STRONG = "strong"
    MODERATE = "moderate"
    WEAK = "weak"
    VERY_WEAK = "very_weak"
    NONE = "none"


class CorrelationDirection(str, Enum):
    """Sign of r, with |r| <= 0.1 treated as no direction."""
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NONE = "none"
