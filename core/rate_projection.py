import logging
import math
import time
from typing import Optional, Sequence

import numpy as np

from .config import MIN_MEANINGFUL_SLOPE, MS_PER_HOUR, RATE_WINDOW_SAMPLES
from .models import RateResult, TargetEta
from .rounding import round_half_up

logger = logging.getLogger(__name__)


class RateAndProjection:
    """
    Hourly rate of change over the recent window and a linear ETA to a target value.
    """

    @staticmethod
    def rate_of_change_per_hour(
        values: Sequence[float],
        timestamps: Optional[Sequence[float]] = None,
    ) -> RateResult:
        """
        OLS slope over at most the last 48 samples, in value units per hour.

        Timestamps are only used when they pair 1:1 with the values; otherwise
        each sample counts as one hour.
        """
        n = len(values)
        if n < 2:
            return RateResult(slope_per_hour=0.0)

        window = min(RATE_WINDOW_SAMPLES, n)
        try:
            with np.errstate(divide='raise', invalid='raise', over='raise'):
                ys = np.asarray(values, dtype=float)[-window:]
                if timestamps is not None and len(timestamps) == n:
                    ts = np.asarray(timestamps, dtype=float)[-window:]
                    xs = (ts - ts[0]) / MS_PER_HOUR
                else:
                    xs = np.arange(window, dtype=float)

                dx = xs - xs.mean()
                num = float(np.sum(dx * (ys - ys.mean())))
                den = float(np.sum(dx * dx))
        except (FloatingPointError, ValueError, TypeError) as exc:
            logger.debug("Hourly rate failed, defaulting to 0: %s", exc)
            return RateResult(slope_per_hour=0.0)

        slope = num / den if den else 0.0
        if not math.isfinite(slope):
            return RateResult(slope_per_hour=0.0)
        return RateResult(slope_per_hour=round_half_up(slope, 4))

    @classmethod
    def time_to_target(
        cls,
        values: Sequence[float],
        timestamps: Optional[Sequence[float]],
        target: float,
        now_ms: Optional[int] = None,
    ) -> Optional[TargetEta]:
        """
        Hours until the series reaches `target` at the current hourly rate, plus the wall-clock ETA.

        Returns None without data, when the rate is too small to give a meaningful projection,
        or when the projected time is not representable.
        """
        if len(values) == 0:
            return None

        last = float(values[-1])
        slope = cls.rate_of_change_per_hour(values, timestamps).slope_per_hour
        if not math.isfinite(slope) or abs(slope) < MIN_MEANINGFUL_SLOPE:
            return None

        hours = (target - last) / slope
        if not math.isfinite(hours):
            return None

        offset_ms = hours * MS_PER_HOUR
        if not math.isfinite(offset_ms):
            return None

        if now_ms is None:
            now_ms = int(time.time() * 1000)
        eta = now_ms + math.floor(offset_ms + 0.5)
        return TargetEta(hours=hours, eta=int(eta))
