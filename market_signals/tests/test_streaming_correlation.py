"""
Tests for the streaming correlation service.
"""

from datetime import date, datetime, timedelta, timezone
from typing import List

import pytest

from market_signals.models import (
    CorrelationDirection,
    CorrelationStrength,
    DailyMetric,
    MetricPoint,
    TimeRange,
)
from market_signals.services.streaming_correlation import (
    analyze_streaming_correlation,
    build_daily_series,
    correlation_to_percentage,
    describe_correlation,
    estimate_elasticity,
    interpret_correlation,
    pearson_correlation,
)


def linear_days(count: int, start: date = date(2026, 1, 1)) -> List[DailyMetric]:
    return [
        DailyMetric(
            date=start + timedelta(days=i),
            ccuAvg=100.0 + 10 * i,
            streamingViewersAvg=20.0 + 3 * i,
        )
        for i in range(count)
    ]


class TestPearson:

    def test_perfect_positive(self) -> None:
        assert pearson_correlation([1, 2, 3, 4], [2, 4, 6, 8]) == pytest.approx(1.0)

    def test_perfect_negative(self) -> None:
        assert pearson_correlation([1, 2, 3, 4], [8, 6, 4, 2]) == pytest.approx(-1.0)

    def test_constant_series(self) -> None:
        assert pearson_correlation([5, 5, 5], [1, 2, 3]) == 0.0

    def test_constant_float_series(self) -> None:
        assert pearson_correlation([0.7] * 7, [1, 5, 2, 8, 3, 9, 4]) == 0.0
        assert pearson_correlation([1, 5, 2, 8, 3, 9, 4], [0.1] * 7) == 0.0

    def test_too_few_samples(self) -> None:
        assert pearson_correlation([1, 2], [2, 4]) == 0.0

    def test_mismatched_lengths(self) -> None:
        assert pearson_correlation([1, 2, 3], [1, 2]) == 0.0


class TestInterpretation:

    @pytest.mark.parametrize(
        "r, strength, direction",
        [
            (0.95, CorrelationStrength.VERY_STRONG, CorrelationDirection.POSITIVE),
            (-0.75, CorrelationStrength.STRONG, CorrelationDirection.NEGATIVE),
            (0.5, CorrelationStrength.MODERATE, CorrelationDirection.POSITIVE),
            (0.1, CorrelationStrength.VERY_WEAK, CorrelationDirection.NONE),
            (0.05, CorrelationStrength.NONE, CorrelationDirection.NONE),
        ],
    )
    def test_buckets(self, r: float, strength: CorrelationStrength, direction: CorrelationDirection) -> None:
        assert interpret_correlation(r) == (strength, direction)

    def test_descriptions(self) -> None:
        assert describe_correlation(0.8) == "strong positive correlation"
        assert describe_correlation(0.02) == "no correlation"

    def test_percentage(self) -> None:
        assert correlation_to_percentage(0.7) == 49
        assert correlation_to_percentage(-1.0) == 100


class TestElasticity:

    def test_square_root_relationship(self) -> None:
        viewers = [1.0, 2.0, 4.0, 8.0, 16.0, 32.0]
        ccu = [3.0 * v ** 0.5 for v in viewers]
        estimate = estimate_elasticity(viewers, ccu)

        assert estimate.viewersToCcu == pytest.approx(0.5)
        assert estimate.rSquared == pytest.approx(1.0)
        assert estimate.confidence == pytest.approx(0.429)
        assert estimate.sampleSize == 6

    def test_non_positive_pairs_are_dropped(self) -> None:
        estimate = estimate_elasticity([0, 1, 2, 3, 4, 5], [10, 0, 20, 30, 40, 50])
        assert estimate.sampleSize == 4
        assert estimate.viewersToCcu == 0.0
        assert estimate.confidence == 0.0


class TestBuildDailySeries:

    def test_aggregates_by_utc_day(self) -> None:
        day1 = datetime(2026, 1, 1, tzinfo=timezone.utc)
        day2 = day1 + timedelta(days=1)
        rows = build_daily_series(
            ccu=[
                MetricPoint(timestamp=day1 + timedelta(hours=10), value=100),
                MetricPoint(timestamp=day1 + timedelta(hours=14), value=200),
                MetricPoint(timestamp=day2 + timedelta(hours=10), value=50),
            ],
            viewers=[MetricPoint(timestamp=day1 + timedelta(hours=20), value=30)],
            reviews=[
                MetricPoint(timestamp=day2 + timedelta(hours=1), value=3),
                MetricPoint(timestamp=day2 + timedelta(hours=5), value=4),
            ],
        )

        assert [row.date for row in rows] == [date(2026, 1, 1), date(2026, 1, 2)]
        first, second = rows
        assert (first.ccuAvg, first.ccuPeak, first.streamingViewersAvg) == (150.0, 200.0, 30.0)
        assert first.streamingStreamsAvg is None
        assert first.reviewCount is None
        assert second.streamingViewersAvg is None
        assert second.reviewCount == 7.0

    def test_no_points(self) -> None:
        assert build_daily_series() == []


class TestAnalyzeStreamingCorrelation:

    @pytest.mark.scenario
    def test_one_day_lag(self, lagged_daily_metrics: List[DailyMetric], analyzed_at: datetime) -> None:
        result = analyze_streaming_correlation(
            "Lagged", "7", lagged_daily_metrics, TimeRange.DAYS_14, analyzed_at=analyzed_at,
        )

        assert result.sufficientData is True
        assert result.message is None
        assert result.sampleSize == 10
        assert result.optimalLagHours == 24
        assert result.correlationAtLag == pytest.approx(1.0)
        # 9 aligned days out of 14 for full confidence
        assert result.confidenceScore == pytest.approx(0.643)
        assert [entry.lagDays for entry in result.lagAnalysis.allLags] == [0, 1, 2, 3]
        assert result.pairwiseCorrelations["viewers_vs_reviews"] == 0.0
        assert "Streaming impact on CCU peaks about 1 day(s) later" in result.insights

    def test_window_limits_sample(self) -> None:
        result = analyze_streaming_correlation("Linear", "8", linear_days(20), TimeRange.DAYS_7)
        assert result.sampleSize == 7
        assert result.pairwiseCorrelations["viewers_vs_ccu"] == pytest.approx(1.0)
        assert result.dailySeries["ccuAvg"][0].timestamp == datetime(2026, 1, 14, tzinfo=timezone.utc)

    def test_insufficient_data(self) -> None:
        result = analyze_streaming_correlation("Sparse", "9", linear_days(2), TimeRange.DAYS_30)

        assert result.sufficientData is False
        assert result.message is not None
        assert result.sampleSize == 2
        assert result.pairwiseCorrelations == {
            "viewers_vs_ccu": 0.0,
            "streams_vs_ccu": 0.0,
            "viewers_vs_reviews": 0.0,
        }
        assert result.elasticity == 0.0
        assert result.insights == []

    def test_daily_series_keys(self, lagged_daily_metrics: List[DailyMetric]) -> None:
        result = analyze_streaming_correlation("Lagged", "7", lagged_daily_metrics, TimeRange.DAYS_30)
        assert set(result.dailySeries) == {
            "ccuAvg", "ccuPeak", "streamingViewersAvg", "streamingStreamsAvg", "reviewCount",
        }
        assert len(result.dailySeries["streamingViewersAvg"]) == 10

    def test_missing_metrics_are_skipped(self) -> None:
        rows = linear_days(6)
        rows[2] = DailyMetric(date=rows[2].date, ccuAvg=None, streamingViewersAvg=26.0)
        result = analyze_streaming_correlation("Gaps", "10", rows, TimeRange.DAYS_7)
        assert result.sampleSize == 5

    def test_constant_ccu_has_no_correlation(self) -> None:
        rows = [
            DailyMetric(
                date=date(2026, 1, 1) + timedelta(days=i),
                ccuAvg=500.0,
                streamingViewersAvg=float(10 + i * i),
                streamingStreamsAvg=float(i + 1),
                reviewCount=float(i),
            )
            for i in range(8)
        ]
        result = analyze_streaming_correlation("Flat", "11", rows, TimeRange.DAYS_14)

        assert result.sufficientData is True
        assert result.pairwiseCorrelations["viewers_vs_ccu"] == 0.0
        assert result.pairwiseCorrelations["streams_vs_ccu"] == 0.0
        assert all(entry.correlation == 0.0 for entry in result.lagAnalysis.allLags)
        assert result.elasticity == 0.0
