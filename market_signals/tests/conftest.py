"""
Pytest Configuration and Shared Fixtures for the Analytics Engine Tests.

Provides:
- Custom markers (scenario)
- Settings cache isolation, so environment overrides in one test never leak
- A pinned analysis timestamp for deterministic results
- Review batches, CCU series and daily streaming metrics
"""

from datetime import date, datetime, timedelta, timezone
from typing import Generator, List

import pytest

from market_signals.core.config import get_scoring_config, get_settings
from market_signals.models import DailyMetric, MetricPoint, ReviewRecord
from market_signals.services.persona import default_persona_config


# ============================================================
# PYTEST HOOKS
# ============================================================

def pytest_configure(config) -> None:
    """
    Register custom markers.

    - scenario: end-to-end worked examples with exact expected numbers
    """
    config.addinivalue_line(
        'markers',
        'scenario: end-to-end worked examples with exact expected numbers'
    )


# ============================================================
# SETTINGS ISOLATION
# ============================================================

def _clear_config_caches() -> None:
    get_settings.cache_clear()
    get_scoring_config.cache_clear()
    default_persona_config.cache_clear()


@pytest.fixture(autouse=True)
def isolated_settings() -> Generator[None, None, None]:
    """Rebuild settings for every test and discard them afterwards."""
    _clear_config_caches()
    yield
    _clear_config_caches()


# ============================================================
# TIME FIXTURES
# ============================================================

@pytest.fixture
def analyzed_at() -> datetime:
    """Fixed result timestamp."""
    return datetime(2026, 1, 20, 12, 0, tzinfo=timezone.utc)


# ============================================================
# CCU SERIES FIXTURES
# ============================================================

def hourly_points(values: List[float], start: datetime) -> List[MetricPoint]:
    """One MetricPoint per hour starting at start."""
    return [
        MetricPoint(timestamp=start + timedelta(hours=i), value=value)
        for i, value in enumerate(values)
    ]


@pytest.fixture
def monday() -> datetime:
    """2026-01-05 00:00 UTC, a Monday."""
    return datetime(2026, 1, 5, tzinfo=timezone.utc)


@pytest.fixture
def scenario_ccu_history(monday: datetime) -> List[MetricPoint]:
    """The [100, 120, 90, 150, 130] worked example, hourly on one day."""
    return hourly_points([100, 120, 90, 150, 130], monday + timedelta(hours=10))


@pytest.fixture
def week_of_ccu(monday: datetime) -> List[MetricPoint]:
    """Noon samples Monday-Sunday: 200 on weekdays, 100 on the weekend."""
    return [
        MetricPoint(
            timestamp=monday + timedelta(days=day, hours=12),
            value=200.0 if day < 5 else 100.0,
        )
        for day in range(7)
    ]


# ============================================================
# REVIEW FIXTURES
# ============================================================

@pytest.fixture
def core_review() -> ReviewRecord:
    return ReviewRecord(
        text="빌드 최적화와 메타 분석이 훌륭하다",
        recommended=True,
        playtimeHours=150,
    )


@pytest.fixture
def casual_review() -> ReviewRecord:
    return ReviewRecord(
        text="가볍게 힐링하기 좋아요",
        recommended=True,
        playtimeHours=3,
    )


@pytest.fixture
def mixed_reviews(core_review: ReviewRecord, casual_review: ReviewRecord) -> List[ReviewRecord]:
    """Three core-leaning reviews and two casual ones."""
    return [
        core_review,
        ReviewRecord(text="밸런스 패치가 좋다", recommended=True, playtimeHours=220),
        ReviewRecord(text="밸런스 패치가 아쉽다", recommended=False, playtimeHours=180, helpfulVotes=25),
        casual_review,
        ReviewRecord(text="쉽게 즐기는 심플한 게임", recommended=True, playtimeHours=4),
    ]


# ============================================================
# STREAMING FIXTURES
# ============================================================

VIEWERS = [10, 50, 20, 80, 30, 60, 40, 90, 15, 70]


@pytest.fixture
def lagged_daily_metrics() -> List[DailyMetric]:
    """
    Ten days where CCU equals twice the previous day's viewers.

    Viewers on day d fully determine CCU on day d + 1.
    """
    start = date(2026, 1, 1)
    rows = []
    for i, viewers in enumerate(VIEWERS):
        ccu = 100.0 if i == 0 else 2.0 * VIEWERS[i - 1]
        rows.append(DailyMetric(
            date=start + timedelta(days=i),
            ccuAvg=ccu,
            ccuPeak=ccu * 1.5,
            streamingViewersAvg=float(viewers),
            streamingStreamsAvg=float(viewers) / 10,
            reviewCount=5.0,
        ))
    return rows
