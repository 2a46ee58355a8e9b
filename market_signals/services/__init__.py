"""
Analytics Services Module

Each service is a stateless function of its input records; none performs
I/O or holds mutable state, so all of them are safe to call concurrently.

Services:
- scoring: normalize -> weighted composite -> grade framework
- trending: CCU / review / price / news trending composite
- volatility: CCU coefficient of variation and usage patterns
- retention: playtime retention index and engagement composite
- text_classifier: keyword-lexicon review classification
- persona: Player Spectrum tier distribution (Player DNA)
- core_fun: fun-driver category scores and review highlights
- streaming_correlation: viewership vs CCU correlation, lag and elasticity
"""

# =============================================================================
# Scoring Framework Exports
# =============================================================================

from market_signals.services.scoring import (
    DEFAULT_GRADE_SCALE,
    ThresholdBands,
    WeightTable,
    build_breakdown,
    distribute_percentages,
    grade,
    normalize,
    round_half_up,
    weighted_composite,
)

# =============================================================================
# Market Metric Exports
# =============================================================================

from market_signals.services.trending import (
    compute_simple_trending_score,
    compute_trending_score,
)
from market_signals.services.volatility import (
    calculate_cv,
    calculate_std_dev,
    compute_volatility,
)
from market_signals.services.retention import (
    compute_retention,
    parse_owner_range,
)

# =============================================================================
# Review Classification Exports
# =============================================================================

from market_signals.services.text_classifier import (
    KeywordRule,
    Lexicon,
    classify_text,
    primary_category,
)
from market_signals.services.persona import (
    PersonaConfig,
    classify_persona,
    classify_review_tier,
    estimate_tier_by_playtime,
)
from market_signals.services.core_fun import (
    CoreFunConfig,
    classify_core_fun,
    extract_quote,
)

# =============================================================================
# Streaming Correlation Exports
# =============================================================================

from market_signals.services.streaming_correlation import (
    analyze_lag_correlation,
    analyze_streaming_correlation,
    build_daily_series,
    correlation_to_percentage,
    describe_correlation,
    estimate_elasticity,
    interpret_correlation,
    pearson_correlation,
)

__all__ = [
    # Scoring framework
    'DEFAULT_GRADE_SCALE',
    'ThresholdBands',
    'WeightTable',
    'build_breakdown',
    'distribute_percentages',
    'grade',
    'normalize',
    'round_half_up',
    'weighted_composite',
    # Trending
    'compute_trending_score',
    'compute_simple_trending_score',
    # Volatility
    'compute_volatility',
    'calculate_cv',
    'calculate_std_dev',
    # Retention
    'compute_retention',
    'parse_owner_range',
    # Review classification
    'KeywordRule',
    'Lexicon',
    'classify_text',
    'primary_category',
    # Persona
    'PersonaConfig',
    'classify_persona',
    'classify_review_tier',
    'estimate_tier_by_playtime',
    # Core fun
    'CoreFunConfig',
    'classify_core_fun',
    'extract_quote',
    # Streaming correlation
    'analyze_streaming_correlation',
    'analyze_lag_correlation',
    'build_daily_series',
    'correlation_to_percentage',
    'describe_correlation',
    'estimate_elasticity',
    'interpret_correlation',
    'pearson_correlation',
]
