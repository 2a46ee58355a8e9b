"""
Tests for the composite scoring framework.

Covers normalization, grade bands, weight-table validation, the weighted
composite and largest-remainder percentage distribution.
"""

import math

import pytest

from market_signals.core.errors import ConfigError
from market_signals.models import Grade
from market_signals.services.scoring import (
    BELOW,
    DEFAULT_GRADE_SCALE,
    ThresholdBands,
    WeightTable,
    build_breakdown,
    distribute_percentages,
    grade,
    normalize,
    round_half_up,
    safe_ratio,
    weighted_composite,
)


class TestNormalize:

    def test_midpoint_maps_to_fifty(self) -> None:
        assert normalize(0, -50, 50) == 50.0

    def test_values_saturate_outside_range(self) -> None:
        assert normalize(75, -50, 50) == 100.0
        assert normalize(-80, -50, 50) == 0.0

    def test_degenerate_range_is_neutral(self) -> None:
        assert normalize(12345, 10, 10) == 50.0

    @pytest.mark.parametrize("value", [-1000, -50, -10, 0, 25, 50, 1000])
    def test_output_always_in_bounds(self, value: float) -> None:
        assert 0.0 <= normalize(value, -50, 50) <= 100.0

    def test_monotonic_non_decreasing(self) -> None:
        outputs = [normalize(v, -30, 100) for v in range(-60, 140, 5)]
        assert outputs == sorted(outputs)


class TestGrade:

    @pytest.mark.parametrize(
        "score, expected",
        [
            (100, Grade.S),
            (85, Grade.S),
            (84.99, Grade.A),
            (70, Grade.A),
            (69.9, Grade.B),
            (50, Grade.B),
            (30, Grade.C),
            (29.99, Grade.D),
            (0, Grade.D),
        ],
    )
    def test_default_scale_boundaries(self, score: float, expected: Grade) -> None:
        assert grade(score) == expected

    def test_grade_is_monotonic(self) -> None:
        order = [Grade.D, Grade.C, Grade.B, Grade.A, Grade.S]
        ranks = [order.index(grade(s)) for s in range(0, 101)]
        assert ranks == sorted(ranks)


class TestThresholdBands:

    def test_misordered_descending_bands_rejected(self) -> None:
        with pytest.raises(ConfigError):
            ThresholdBands([(50, "B"), (85, "S")], fallback="D")

    def test_misordered_ascending_bands_rejected(self) -> None:
        with pytest.raises(ConfigError):
            ThresholdBands([(30, "moderate"), (15, "stable")], fallback="x", direction=BELOW)

    def test_unknown_direction_rejected(self) -> None:
        with pytest.raises(ConfigError):
            ThresholdBands([(1, "a")], fallback="b", direction="sideways")

    def test_below_direction_classifies_first_band_under(self) -> None:
        bands = ThresholdBands([(15, "stable"), (30, "moderate")], fallback="wild", direction=BELOW)
        assert bands.classify(14.9) == "stable"
        assert bands.classify(15) == "moderate"
        assert bands.classify(30) == "wild"

    def test_default_grade_scale_thresholds(self) -> None:
        assert [t for t, _ in DEFAULT_GRADE_SCALE.bands] == [85.0, 70.0, 50.0, 30.0]


class TestWeightTable:

    def test_valid_table(self) -> None:
        table = WeightTable({"a": 0.25, "b": 0.75})
        assert dict(table) == {"a": 0.25, "b": 0.75}
        assert len(table) == 2

    def test_sum_within_tolerance_accepted(self) -> None:
        WeightTable({"a": 0.1, "b": 0.2, "c": 0.7 + 5e-7})

    @pytest.mark.parametrize(
        "weights",
        [
            {},
            {"a": 0.5, "b": 0.4},
            {"a": 1.2, "b": -0.2},
            {"a": math.inf},
            {"a": math.nan},
        ],
    )
    def test_invalid_tables_rejected(self, weights) -> None:
        with pytest.raises(ConfigError):
            WeightTable(weights)

    def test_error_names_the_table(self) -> None:
        with pytest.raises(ConfigError, match="trending"):
            WeightTable({"ccu": 0.9}, name="trending")


class TestWeightedComposite:

    def test_weighted_sum(self) -> None:
        components = {"ccu": 100, "review": 100, "price": 90, "news": 80}
        weights = {"ccu": 0.40, "review": 0.30, "price": 0.15, "news": 0.15}
        assert weighted_composite(components, weights) == pytest.approx(95.5)

    def test_all_components_at_maximum_is_hundred(self) -> None:
        weights = {"a": 0.3, "b": 0.3, "c": 0.4}
        assert weighted_composite({"a": 100, "b": 100, "c": 100}, weights) == 100.0

    def test_key_mismatch_rejected(self) -> None:
        with pytest.raises(ConfigError):
            weighted_composite({"a": 10, "x": 20}, {"a": 0.5, "b": 0.5})

    def test_build_breakdown_grades_composite(self) -> None:
        breakdown = build_breakdown({"a": 90, "b": 80}, {"a": 0.5, "b": 0.5})
        assert breakdown.compositeScore == pytest.approx(85.0)
        assert breakdown.grade == Grade.S
        assert breakdown.weights == {"a": 0.5, "b": 0.5}

    @pytest.mark.parametrize("composite, expected", [(84.96, Grade.S), (84.95, Grade.S), (84.94, Grade.A)])
    def test_build_breakdown_grades_displayed_score(self, composite: float, expected: Grade) -> None:
        breakdown = build_breakdown({"a": composite}, {"a": 1.0})
        assert breakdown.grade == expected


class TestDistributePercentages:

    def test_thirds_sum_to_hundred(self) -> None:
        assert distribute_percentages([1, 1, 1]) == [33.4, 33.3, 33.3]

    @pytest.mark.parametrize(
        "counts",
        [[1, 2, 3], [7, 0, 0, 1], [3, 3, 3, 3, 3, 3, 1], [1] * 7, [999, 1]],
    )
    def test_always_sums_to_hundred(self, counts) -> None:
        percentages = distribute_percentages(counts)
        assert round(sum(percentages), 6) == 100.0
        assert all(p >= 0 for p in percentages)

    def test_all_zero_counts(self) -> None:
        assert distribute_percentages([0, 0, 0]) == [0.0, 0.0, 0.0]


class TestNumericHelpers:

    def test_round_half_up(self) -> None:
        assert round_half_up(0.25, 1) == 0.3
        assert round_half_up(84.95, 1) == 85.0
        assert round_half_up(2.5, 0) == 3.0

    def test_safe_ratio_zero_denominator(self) -> None:
        assert safe_ratio(5, 0) == 0.0
        assert safe_ratio(5, 0, default=1.0) == 1.0
        assert safe_ratio(6, 3) == 2.0
