# tests/core/test_rounding.py

import math

import pytest

from core.rounding import round_half_up, round_to_int


@pytest.mark.parametrize(
    "value, decimals, expected",
    [
        (0.125, 2, 0.13),
        (0.25, 1, 0.3),
        (5.25, 1, 5.3),
        (2.5, 0, 3.0),
        (-0.25, 1, -0.3),
        (1.23456, 4, 1.2346),
        (12.0, 3, 12.0),
    ],
)
def test_ties_round_away_from_zero(value, decimals, expected):
    assert round_half_up(value, decimals) == expected


def test_rounding_uses_the_exact_binary_value():
    """1.005 is stored as 1.00499999..., so it rounds down."""
    assert round_half_up(1.005, 2) == 1.0


def test_non_finite_values_pass_through():
    assert math.isnan(round_half_up(math.nan, 2))
    assert round_half_up(math.inf, 1) == math.inf


def test_large_values_do_not_lose_precision():
    assert round_half_up(1e300, 2) == 1e300


@pytest.mark.parametrize("value, expected", [(2.5, 3), (-2.5, -2), (82.5, 83), (41.2, 41), (-0.4, 0)])
def test_round_to_int_rounds_halves_up(value, expected):
    assert round_to_int(value) == expected
