"""
Composite Scoring Framework

The normalize -> weighted composite -> grade primitive shared by every scorer.
Trending, volatility and retention each supply their own weight table and
threshold bands instead of repeating the arithmetic.

Contracts:
    normalize(value, min, max)     linear interpolation clamped to [0, 100];
                                   min == max returns 50 (neutral)
    grade(score)                   S >= 85, A >= 70, B >= 50, C >= 30, else D
    WeightTable(weights)           validated at construction: non-empty,
                                   finite, non-negative, sums to 1.0 +/- 1e-6
    weighted_composite(c, w)       sum(c[k] * w[k]) clamped to [0, 100];
                                   component and weight keys must match
    distribute_percentages(counts) percentages summing to exactly 100

Weight tables are built once at configuration load (see
market_signals.core.config.get_scoring_config); a table that does not sum to
1.0 raises ConfigError and is never silently renormalized.
"""

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Generic, Iterator, List, Mapping, Sequence, Tuple, TypeVar

from market_signals.core.errors import ConfigError
from market_signals.models.enums import Grade
from market_signals.models.schemas import ScoreBreakdown


# =============================================================================
# Constants
# =============================================================================

# Allowed drift of a weight table's sum from 1.0
WEIGHT_TOLERANCE: float = 1e-6

# Score returned when a normalization range is degenerate
NEUTRAL_SCORE: float = 50.0

SCORE_MIN: float = 0.0
SCORE_MAX: float = 100.0

# Band directions for ThresholdBands
AT_LEAST = "at_least"
BELOW = "below"

L = TypeVar("L")


# =============================================================================
# Numeric helpers
# =============================================================================


def clamp(value: float, low: float = SCORE_MIN, high: float = SCORE_MAX) -> float:
    """Clamp value into [low, high]."""
    return max(low, min(high, value))


def safe_ratio(numerator: float, denominator: float, default: float = 0.0) -> float:
    """
    Divide, returning default instead of raising or producing inf/NaN.

    Args:
        numerator: Dividend.
        denominator: Divisor; 0 yields default.
        default: Value returned for a zero denominator.
    """
    if denominator == 0:
        return default
    return numerator / denominator


def round_half_up(value: float, decimals: int = 1) -> float:
    """
    Round halves away from zero at the given number of decimals.

    Python's round() uses banker's rounding (round(0.25, 1) == 0.2); displayed
    scores round halves up so 84.95 shows as 85.0.
    """
    quantum = Decimal(1).scaleb(-decimals)
    return float(Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP))


def normalize(value: float, min_value: float, max_value: float) -> float:
    """
    Map value linearly from [min_value, max_value] onto [0, 100].

    Values outside the range saturate at 0 or 100. A degenerate range
    (min_value == max_value) returns the neutral score 50 for any value.

    Example:
        >>> normalize(0, -50, 50)
        50.0
        >>> normalize(75, -50, 50)
        100.0
    """
    if max_value == min_value:
        return NEUTRAL_SCORE
    normalized = (value - min_value) / (max_value - min_value) * 100.0
    return clamp(normalized)


# =============================================================================
# Threshold bands
# =============================================================================


class ThresholdBands(Generic[L]):
    """
    Ordered threshold -> label table.

    With direction AT_LEAST, bands are listed from the highest threshold down
    and a value gets the label of the first threshold it reaches (value >= t).
    With direction BELOW, bands are listed from the lowest threshold up and a
    value gets the label of the first threshold it is under (value < t).
    Values matching no band get the fallback label.

    Thresholds must be strictly ordered in the band direction, which makes the
    mapping monotonic. A misordered table raises ConfigError at construction.
    """

    def __init__(
        self,
        bands: Sequence[Tuple[float, L]],
        fallback: L,
        direction: str = AT_LEAST,
        name: str = "bands",
    ) -> None:
        if direction not in (AT_LEAST, BELOW):
            raise ConfigError(f"{name}: unknown band direction {direction!r}")
        if not bands:
            raise ConfigError(f"{name}: at least one band is required")

        thresholds = [float(t) for t, _ in bands]
        if not all(math.isfinite(t) for t in thresholds):
            raise ConfigError(f"{name}: thresholds must be finite")

        pairs = zip(thresholds, thresholds[1:])
        if direction == AT_LEAST:
            ordered = all(a > b for a, b in pairs)
        else:
            ordered = all(a < b for a, b in pairs)
        if not ordered:
            raise ConfigError(
                f"{name}: thresholds {thresholds} are not strictly "
                f"{'descending' if direction == AT_LEAST else 'ascending'}"
            )

        self.name = name
        self.direction = direction
        self.fallback = fallback
        self._bands: Tuple[Tuple[float, L], ...] = tuple(
            (t, label) for t, (_, label) in zip(thresholds, bands)
        )

    @property
    def bands(self) -> Tuple[Tuple[float, L], ...]:
        return self._bands

    def classify(self, value: float) -> L:
        """Return the label of the band containing value."""
        for threshold, label in self._bands:
            if self.direction == AT_LEAST and value >= threshold:
                return label
            if self.direction == BELOW and value < threshold:
                return label
        return self.fallback

    def __repr__(self) -> str:
        return (
            f"ThresholdBands(name={self.name!r}, direction={self.direction!r}, "
            f"bands={list(self._bands)!r}, fallback={self.fallback!r})"
        )


DEFAULT_GRADE_SCALE: ThresholdBands[Grade] = ThresholdBands(
    [(85, Grade.S), (70, Grade.A), (50, Grade.B), (30, Grade.C)],
    fallback=Grade.D,
    name="default_grade",
)


def grade(score: float, scale: ThresholdBands[Grade] = DEFAULT_GRADE_SCALE) -> Grade:
    """Letter grade for a 0-100 score under the given scale."""
    return scale.classify(score)


# =============================================================================
# Weight tables
# =============================================================================


class WeightTable(Mapping[str, float]):
    """
    Immutable, validated component weight table.

    Raises:
        ConfigError: If the table is empty, holds a negative or non-finite
            weight, or does not sum to 1.0 within WEIGHT_TOLERANCE.
    """

    def __init__(self, weights: Mapping[str, float], name: str = "weights") -> None:
        if not weights:
            raise ConfigError(f"{name}: weight table is empty")

        table: Dict[str, float] = {}
        for key, weight in weights.items():
            weight = float(weight)
            if not math.isfinite(weight) or weight < 0:
                raise ConfigError(f"{name}: weight for {key!r} must be a finite number >= 0, got {weight}")
            table[str(key)] = weight

        total = math.fsum(table.values())
        if abs(total - 1.0) > WEIGHT_TOLERANCE:
            raise ConfigError(f"{name}: weights sum to {total:.6f}, expected 1.0")

        self.name = name
        self._weights = table

    def __getitem__(self, key: str) -> float:
        return self._weights[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._weights)

    def __len__(self) -> int:
        return len(self._weights)

    def as_dict(self) -> Dict[str, float]:
        return dict(self._weights)

    def __repr__(self) -> str:
        return f"WeightTable(name={self.name!r}, weights={self._weights!r})"


def weighted_composite(
    components: Mapping[str, float],
    weights: Mapping[str, float],
) -> float:
    """
    Weighted sum of 0-100 component scores, clamped to [0, 100].

    Args:
        components: Sub-score per component name.
        weights: A WeightTable, or a plain mapping that is validated into one.

    Raises:
        ConfigError: If the weights are invalid or the component and weight
            keys differ.
    """
    if not isinstance(weights, WeightTable):
        weights = WeightTable(weights)

    missing = [key for key in components if key not in weights]
    unused = [key for key in weights if key not in components]
    if missing or unused:
        raise ConfigError(
            f"{weights.name}: component/weight mismatch "
            f"(no weight for {missing}, no component for {unused})"
        )

    total = math.fsum(components[key] * weights[key] for key in weights)
    # Drop float noise so exact boundary scores (e.g. 85.0) grade as expected
    return clamp(round(total, 9))


def build_breakdown(
    components: Mapping[str, float],
    weights: Mapping[str, float],
    scale: ThresholdBands[Grade] = DEFAULT_GRADE_SCALE,
) -> ScoreBreakdown:
    """Composite, grade and inputs packaged as a ScoreBreakdown."""
    if not isinstance(weights, WeightTable):
        weights = WeightTable(weights)
    composite = weighted_composite(components, weights)
    return ScoreBreakdown(
        componentScores={key: float(components[key]) for key in weights},
        weights=weights.as_dict(),
        compositeScore=composite,
        # Grade of the score as displayed (one decimal, half up)
        grade=grade(round_half_up(composite, 1), scale),
    )


# =============================================================================
# Distributions
# =============================================================================


def distribute_percentages(counts: Sequence[int], decimals: int = 1) -> List[float]:
    """
    Convert bucket counts to percentages that sum to exactly 100.

    Uses the largest-remainder method on integer units of 10**-decimals
    percent; leftover units go to the largest remainders, ties to the earliest
    bucket. All-zero counts yield all-zero percentages.

    Example:
        >>> distribute_percentages([1, 1, 1])
        [33.4, 33.3, 33.3]
    """
    total = sum(counts)
    if total <= 0:
        return [0.0 for _ in counts]

    units = 100 * 10 ** decimals
    floors: List[int] = []
    remainders: List[int] = []
    for count in counts:
        quotient, remainder = divmod(count * units, total)
        floors.append(quotient)
        remainders.append(remainder)

    leftover = units - sum(floors)
    order = sorted(range(len(counts)), key=lambda i: (-remainders[i], i))
    for index in order[:leftover]:
        floors[index] += 1

    return [unit / 10 ** decimals for unit in floors]
