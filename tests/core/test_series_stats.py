# tests/core/test_series_stats.py

from core.series_stats import SeriesStats


def test_mean_of_empty_series_is_zero():
    assert SeriesStats.mean([]) == 0.0


def test_mean_of_values():
    assert SeriesStats.mean([1, 2, 3, 4]) == 2.5


def test_stddev_empty_and_constant_are_zero():
    """Empty and flat series have no spread."""
    assert SeriesStats.stddev([]) == 0
    assert SeriesStats.stddev([5, 5, 5, 5]) == 0


def test_stddev_is_population_and_rounded():
    """Population sd (divide by N) of [2,4,4,4,5,5,7,9] is exactly 2."""
    assert SeriesStats.stddev([2, 4, 4, 4, 5, 5, 7, 9]) == 2.0
    # sqrt(2/3) = 0.8164... -> 0.82
    assert SeriesStats.stddev([1, 2, 3]) == 0.82


def test_moving_average_window_shrinks_at_start():
    """The first outputs average over fewer samples instead of being padded."""
    assert SeriesStats.moving_average([1, 2, 3, 4, 5], 3) == [1, 1.5, 2, 3, 4]


def test_moving_average_rounds_to_two_decimals():
    assert SeriesStats.moving_average([1, 2, 2], 3) == [1.0, 1.5, 1.67]


def test_moving_average_empty_input():
    assert SeriesStats.moving_average([]) == []


def test_moving_average_does_not_mutate_input():
    values = [3.0, 1.0, 2.0]
    SeriesStats.moving_average(values, 2)
    assert values == [3.0, 1.0, 2.0]


def test_summarize_reports_avg_min_max():
    summary = SeriesStats.summarize([20.0, 25.0, 30.5])
    assert summary.avg == 25.2
    assert summary.min == 20.0
    assert summary.max == 30.5


def test_summarize_empty_series_is_all_zero():
    summary = SeriesStats.summarize([])
    assert (summary.avg, summary.min, summary.max) == (0.0, 0.0, 0.0)


def test_exact_ties_round_up():
    """Population sd of [0, 0.25] is exactly 0.125."""
    assert SeriesStats.stddev([0, 0.25]) == 0.13
    assert SeriesStats.moving_average([0, 0.25]) == [0.0, 0.13]
