"""
Tests for result record immutability and JSON round trips.
"""

from datetime import datetime, timezone
from typing import List

import pytest
from pydantic import ValidationError

from market_signals.models import (
    CorrelationResult,
    DailyMetric,
    MetricPoint,
    PersonaResult,
    ReviewRecord,
    TimeRange,
    TrendingInput,
    TrendingResult,
)
from market_signals.services.persona import classify_persona
from market_signals.services.streaming_correlation import analyze_streaming_correlation
from market_signals.services.trending import compute_trending_score


class TestJsonRoundTrip:

    def test_trending_result(self, analyzed_at: datetime) -> None:
        result = compute_trending_score(
            TrendingInput(currentCcu=1500, previousCcu=1000, recentReviews=80, previousReviews=40),
            analyzed_at=analyzed_at,
        )
        payload = result.model_dump(mode="json")

        assert payload["grade"] == result.grade.value
        assert payload["breakdown"]["weights"]["ccu"] == 0.4
        assert payload["analyzedAt"].startswith("2026-01-20T12:00:00")
        assert TrendingResult.model_validate(payload) == result

    def test_persona_result(self, mixed_reviews: List[ReviewRecord], analyzed_at: datetime) -> None:
        result = classify_persona("1", "Mixed", mixed_reviews, analyzed_at=analyzed_at)
        payload = result.model_dump(mode="json")

        assert payload["primaryTier"] == "core"
        assert payload["secondaryTier"] == "casual"
        assert PersonaResult.model_validate(payload) == result

    def test_correlation_result(self, lagged_daily_metrics: List[DailyMetric], analyzed_at: datetime) -> None:
        result = analyze_streaming_correlation(
            "Lagged", "7", lagged_daily_metrics, TimeRange.DAYS_30, analyzed_at=analyzed_at,
        )
        payload = result.model_dump(mode="json")

        assert payload["timeRange"] == "30d"
        assert set(payload["dailySeries"]) >= {"ccuAvg", "streamingViewersAvg"}
        assert CorrelationResult.model_validate(payload) == result


class TestRecordValidation:

    def test_records_are_frozen(self) -> None:
        point = MetricPoint(timestamp=datetime(2026, 1, 1, tzinfo=timezone.utc), value=1.0)
        with pytest.raises(ValidationError):
            point.value = 2.0

    def test_unknown_fields_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ReviewRecord(text="ok", recommended=True, stars=5)

    def test_naive_timestamp_is_utc(self) -> None:
        point = MetricPoint(timestamp=datetime(2026, 1, 1, 9, 30), value=1.0)
        assert point.timestamp == datetime(2026, 1, 1, 9, 30, tzinfo=timezone.utc)
        assert point.model_dump(mode="json")["timestamp"].endswith("Z")

    def test_non_finite_values_rejected(self) -> None:
        with pytest.raises(ValidationError):
            MetricPoint(timestamp=datetime(2026, 1, 1, tzinfo=timezone.utc), value=float("nan"))

    def test_negative_counts_rejected(self) -> None:
        with pytest.raises(ValidationError):
            TrendingInput(currentCcu=-1, previousCcu=0, recentReviews=0, previousReviews=0)
