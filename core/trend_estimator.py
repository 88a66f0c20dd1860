import logging
import math
from typing import Optional, Sequence

import numpy as np

from .config import (
    INTERP_FALLING,
    INTERP_NOT_ENOUGH_DATA,
    INTERP_RISING,
    INTERP_STABLE,
    MS_PER_DAY,
    TREND_FALLING,
    TREND_NA,
    TREND_RISING,
    TREND_SLIGHTLY_FALLING,
    TREND_SLIGHTLY_RISING,
    TREND_STABLE,
)
from .models import RegressionOutcome, TrendResult, TrendSettings
from .rounding import round_half_up, round_to_int

logger = logging.getLogger(__name__)


class TrendEstimator:
    """
    Estimates the direction and strength of change in a sensor series.

    Combines end-to-end percent change with an OLS slope (per day when
    timestamps are supplied, per sample otherwise). The slope is normalized
    by the series mean so one set of thresholds works for every sensor.
    """

    @classmethod
    def compute_trend(
        cls,
        values: Sequence[float],
        timestamps: Optional[Sequence[float]] = None,
        settings: Optional[TrendSettings] = None,
    ) -> TrendResult:
        """Main pipeline: percent change → regression → classification → interpretation."""
        settings = settings or TrendSettings()

        n = len(values)
        if n < 2:
            return TrendResult(
                pct=0.0, slope=0.0, slope_norm=0.0, trend=TREND_NA, interp=INTERP_NOT_ENOUGH_DATA
            )

        pct = cls._percent_change(float(values[0]), float(values[-1]))
        outcome = cls.regress(values, timestamps)
        trend = cls._classify(pct, outcome.slope_norm, settings)

        return TrendResult(
            pct=pct,
            slope=outcome.slope,
            slope_norm=outcome.slope_norm,
            trend=trend,
            interp=cls._interpret(trend),
        )

    @classmethod
    def regress(
        cls,
        values: Sequence[float],
        timestamps: Optional[Sequence[float]] = None,
    ) -> RegressionOutcome:
        """
        Fit a line through the series and normalize its slope.

        Uses elapsed days as x when at least len(values) timestamps are given
        (trailing-aligned), the sample index otherwise. Never raises: a
        failed fit comes back as zeros with ok=False.
        """
        n = len(values)
        if n < 2:
            return RegressionOutcome()

        try:
            with np.errstate(divide='raise', invalid='raise', over='raise'):
                ys = np.asarray(values, dtype=float)
                mean_scale = max(1.0, abs(float(np.mean(ys))))

                if timestamps is not None and len(timestamps) >= n:
                    ts = np.asarray(timestamps, dtype=float)[-n:]
                    xs = (ts - ts[0]) / MS_PER_DAY
                    slope = cls._ols_slope(xs, ys)
                    # zero span (duplicate timestamps) falls back to n - 1 units
                    span_days = float(xs[-1] - xs[0]) or float(n - 1)
                    slope_norm = slope * span_days / mean_scale
                else:
                    xs = np.arange(n, dtype=float)
                    slope = cls._ols_slope(xs, ys)
                    slope_norm = slope * n / mean_scale
        except (FloatingPointError, ValueError, TypeError, OverflowError) as exc:
            logger.debug("Regression failed, defaulting slope to 0: %s", exc)
            return RegressionOutcome(slope=0.0, slope_norm=0.0, ok=False, error=str(exc))

        if not (math.isfinite(slope) and math.isfinite(slope_norm)):
            logger.debug("Regression produced a non-finite slope, defaulting to 0")
            return RegressionOutcome(slope=0.0, slope_norm=0.0, ok=False, error="non-finite slope")

        return RegressionOutcome(slope=float(slope), slope_norm=float(slope_norm))

    @staticmethod
    def format_value(v, unit: Optional[str] = None) -> str:
        """Display formatting shared by every card and badge."""
        try:
            v = float(v)
        except (TypeError, ValueError):
            return "--"
        if not math.isfinite(v):
            return "--"

        if not unit:
            return f"{round_to_int(v)}"
        if unit in ("°C", "%"):
            return f"{round_half_up(v, 1):.1f}{unit}"
        if "ppm" in unit.lower():
            return f"{round_to_int(v)} ppm"
        return f"{int(v) if v.is_integer() else format(round_half_up(v, 1), '.1f')}{unit}"

    # -------------------------------------------------------------------------
    # Helper methods
    # -------------------------------------------------------------------------
    @staticmethod
    def _percent_change(first: float, last: float) -> float:
        """Relative change of last vs first in percent; 0 when first is 0."""
        if first == 0:
            return 0.0
        return (last - first) / abs(first) * 100

    @staticmethod
    def _ols_slope(xs: np.ndarray, ys: np.ndarray) -> float:
        """Ordinary least squares slope from running sums."""
        n = len(xs)
        sum_x = float(np.sum(xs))
        sum_y = float(np.sum(ys))
        sum_xy = float(np.sum(xs * ys))
        sum_xx = float(np.sum(xs * xs))

        denom = n * sum_xx - sum_x * sum_x
        if denom == 0:
            denom = 1.0
        return (n * sum_xy - sum_x * sum_y) / denom

    @staticmethod
    def _classify(pct: float, slope_norm: float, settings: TrendSettings) -> str:
        """First matching rule wins: strong moves, then slight moves, then stable."""
        if slope_norm > settings.slope_norm_threshold or pct > settings.pct_threshold:
            return TREND_RISING
        if slope_norm < -settings.slope_norm_threshold or pct < -settings.pct_threshold:
            return TREND_FALLING
        if abs(pct) > settings.slight_pct:
            return TREND_SLIGHTLY_RISING if pct > 0 else TREND_SLIGHTLY_FALLING
        return TREND_STABLE

    @staticmethod
    def _interpret(trend: str) -> str:
        # Slight moves share the stable wording
        if trend == TREND_RISING:
            return INTERP_RISING
        if trend == TREND_FALLING:
            return INTERP_FALLING
        return INTERP_STABLE