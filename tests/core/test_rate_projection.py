# tests/core/test_rate_projection.py

import pytest

from core.config import MS_PER_HOUR
from core.rate_projection import RateAndProjection


def test_hourly_timestamps_give_slope_per_hour():
    values = [0.0, 1.0, 2.0, 3.0]
    times = [i * MS_PER_HOUR for i in range(4)]

    assert RateAndProjection.rate_of_change_per_hour(values, times).slope_per_hour == 1.0


def test_half_hourly_samples_double_the_rate():
    values = [0.0, 1.0, 2.0, 3.0]
    times = [i * MS_PER_HOUR / 2 for i in range(4)]

    assert RateAndProjection.rate_of_change_per_hour(values, times).slope_per_hour == 2.0


def test_unpaired_timestamps_fall_back_to_sample_index():
    """Each sample counts as one hour when timestamps do not pair 1:1 with values."""
    values = [0.0, 1.0, 2.0, 3.0]

    assert RateAndProjection.rate_of_change_per_hour(values).slope_per_hour == 1.0
    assert RateAndProjection.rate_of_change_per_hour(values, [0, 1, 2, 3, 4]).slope_per_hour == 1.0


def test_only_recent_window_is_used():
    """Older history outside the last 48 samples does not affect the rate."""
    values = [100.0] * 20 + [float(i) for i in range(48)]

    assert RateAndProjection.rate_of_change_per_hour(values).slope_per_hour == 1.0


def test_rate_is_rounded_to_four_decimals():
    assert RateAndProjection.rate_of_change_per_hour([0.0, 0.123456]).slope_per_hour == 0.1235


@pytest.mark.parametrize("values", [[], [5.0]])
def test_rate_needs_two_points(values):
    assert RateAndProjection.rate_of_change_per_hour(values).slope_per_hour == 0


def test_time_to_target_projects_linearly():
    result = RateAndProjection.time_to_target([0.0, 1.0, 2.0, 3.0], None, 10.0, now_ms=1000)

    assert result.hours == pytest.approx(7.0)
    assert result.eta == 1000 + 7 * MS_PER_HOUR


def test_time_to_target_on_a_falling_series():
    result = RateAndProjection.time_to_target([10.0, 8.0, 6.0], None, 0.0, now_ms=0)

    assert result.hours == pytest.approx(3.0)


def test_time_to_target_without_data_or_trend_is_none():
    assert RateAndProjection.time_to_target([], None, 10.0) is None
    assert RateAndProjection.time_to_target([4.0, 4.0, 4.0], None, 10.0) is None


def test_time_to_target_defaults_to_wall_clock():
    result = RateAndProjection.time_to_target([0.0, 1.0], None, 2.0)

    assert result.hours == pytest.approx(1.0)
    assert result.eta > 1_600_000_000_000


def test_time_to_target_too_far_away_is_none():
    """A finite number of hours can still overflow once converted to milliseconds."""
    assert RateAndProjection.time_to_target([0.0, 1.0], None, 1e303, now_ms=0) is None
