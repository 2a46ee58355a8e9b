"""
Tests for the CCU volatility service.
"""

from datetime import datetime, timedelta, timezone
from typing import List

import pytest

from market_signals.models import (
    MetricPoint,
    PatternAvailability,
    Trend,
    VolatilityGrade,
    VolatilityInput,
)
from market_signals.services.volatility import (
    calculate_cv,
    calculate_stability_score,
    calculate_std_dev,
    compute_volatility,
    detect_trend,
    measure_peak_hours,
    measure_weekday_ratio,
)


class TestStatistics:

    def test_population_std_dev(self) -> None:
        assert calculate_std_dev([2, 4, 4, 4, 5, 5, 7, 9]) == pytest.approx(2.0)

    def test_empty_series(self) -> None:
        assert calculate_std_dev([]) == 0.0
        assert calculate_cv([]) == 0.0

    def test_zero_mean(self) -> None:
        assert calculate_cv([0, 0, 0]) == 0.0

    @pytest.mark.parametrize("value", [1, 500, 123456, 0.1, 1234.56])
    def test_constant_series_has_zero_cv(self, value: float) -> None:
        assert calculate_cv([value] * 12) == 0.0

    @pytest.mark.parametrize("cv, expected", [(0, 100.0), (18.1, 81.9), (100, 0.0), (250, 0.0)])
    def test_stability_score(self, cv: float, expected: float) -> None:
        assert calculate_stability_score(cv) == pytest.approx(expected)


class TestTrend:

    def test_growing_series(self) -> None:
        assert detect_trend([100, 100, 100, 100, 100, 150, 150, 150, 150, 150], 0, 0) == Trend.GROWING

    def test_declining_series(self) -> None:
        assert detect_trend([200, 200, 200, 200, 200, 100, 100, 100, 100, 100], 0, 0) == Trend.DECLINING

    def test_short_history_uses_peak_ratio(self) -> None:
        assert detect_trend([], 80, 100) == Trend.GROWING
        assert detect_trend([], 20, 100) == Trend.DECLINING
        assert detect_trend([50], 50, 100) == Trend.STABLE


class TestPatterns:

    def test_weekday_ratio_measured(self, week_of_ccu: List[MetricPoint]) -> None:
        assert measure_weekday_ratio(week_of_ccu) == 2.0

    def test_weekday_ratio_needs_both_kinds_of_day(self, week_of_ccu: List[MetricPoint]) -> None:
        assert measure_weekday_ratio(week_of_ccu[:5]) is None
        assert measure_weekday_ratio([]) is None

    def test_peak_hours_measured(self, monday: datetime) -> None:
        history = [
            MetricPoint(timestamp=monday + timedelta(hours=h), value=float(h))
            for h in range(24)
        ]
        assert measure_peak_hours(history, 12) == ["23:00", "22:00", "21:00"]

    def test_peak_hours_need_enough_distinct_hours(self, scenario_ccu_history: List[MetricPoint]) -> None:
        assert measure_peak_hours(scenario_ccu_history, 12) is None


class TestComputeVolatility:

    @pytest.mark.scenario
    def test_worked_example(self, scenario_ccu_history: List[MetricPoint], analyzed_at: datetime) -> None:
        result = compute_volatility(
            VolatilityInput(ccuHistory=scenario_ccu_history, currentCcu=130, peakCcu=150),
            analyzed_at=analyzed_at,
        )
        assert result.volatilityIndex == 18.1
        assert result.volatilityGrade == VolatilityGrade.MODERATE
        assert result.stabilityScore == 81.9
        assert result.sampleSize == 5
        assert not result.usedFallbackSeries

    def test_unmeasurable_patterns_are_unavailable(self, scenario_ccu_history: List[MetricPoint]) -> None:
        result = compute_volatility(VolatilityInput(ccuHistory=scenario_ccu_history))
        assert result.patterns.weekdayVsWeekend is None
        assert result.patterns.weekdayVsWeekendAvailability == PatternAvailability.UNAVAILABLE
        assert result.patterns.peakHours is None
        assert result.patterns.peakHoursAvailability == PatternAvailability.UNAVAILABLE

    def test_constant_series_is_fully_stable(self, monday: datetime) -> None:
        history = [MetricPoint(timestamp=monday + timedelta(hours=i), value=500) for i in range(10)]
        result = compute_volatility(VolatilityInput(ccuHistory=history, currentCcu=500, peakCcu=900))
        assert result.volatilityIndex == 0.0
        assert result.stabilityScore == 100.0
        assert result.volatilityGrade == VolatilityGrade.STABLE
        assert "Stable player base" in result.signals
        assert "An established community is in place" in result.recommendations

    def test_naive_and_aware_timestamps_mix(self) -> None:
        history = [
            MetricPoint(timestamp=datetime(2026, 1, 5, 2, tzinfo=timezone.utc), value=120),
            MetricPoint(timestamp=datetime(2026, 1, 5, 1), value=100),
        ]
        result = compute_volatility(VolatilityInput(ccuHistory=history, currentCcu=120, peakCcu=150))
        assert result.sampleSize == 2
        assert result.volatilityIndex == pytest.approx(9.1)

    def test_missing_history_uses_current_and_peak(self) -> None:
        result = compute_volatility(VolatilityInput(currentCcu=100, peakCcu=200))
        assert result.usedFallbackSeries
        assert result.sampleSize == 2
        assert result.volatilityIndex == pytest.approx(33.3)
        assert result.volatilityGrade == VolatilityGrade.VOLATILE

    def test_missing_history_without_peak(self) -> None:
        result = compute_volatility(VolatilityInput(currentCcu=100))
        assert result.sampleSize == 1
        assert result.volatilityIndex == 0.0

    def test_measured_weekday_pattern_signal(self, week_of_ccu: List[MetricPoint]) -> None:
        result = compute_volatility(VolatilityInput(ccuHistory=week_of_ccu, currentCcu=100, peakCcu=200))
        assert result.patterns.weekdayVsWeekendAvailability == PatternAvailability.MEASURED
        assert result.patterns.weekdayVsWeekend == 2.0
        assert "Weekday-driven audience" in result.signals

    def test_history_order_does_not_matter(self, scenario_ccu_history: List[MetricPoint], analyzed_at: datetime) -> None:
        forward = compute_volatility(VolatilityInput(ccuHistory=scenario_ccu_history), analyzed_at=analyzed_at)
        backward = compute_volatility(
            VolatilityInput(ccuHistory=list(reversed(scenario_ccu_history))),
            analyzed_at=analyzed_at,
        )
        assert forward == backward

    @pytest.mark.parametrize(
        "values, expected",
        [
            ([100, 101, 99, 100], VolatilityGrade.STABLE),
            ([100, 150, 60, 120], VolatilityGrade.VOLATILE),
            ([10, 300, 20, 400], VolatilityGrade.EXTREME),
        ],
    )
    def test_grade_bands(self, values, expected, monday: datetime) -> None:
        history = [MetricPoint(timestamp=monday + timedelta(hours=i), value=v) for i, v in enumerate(values)]
        assert compute_volatility(VolatilityInput(ccuHistory=history)).volatilityGrade == expected
