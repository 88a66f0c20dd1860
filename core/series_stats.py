from typing import List, Sequence

import numpy as np

from .config import MOVING_AVERAGE_WINDOW
from .models import SeriesSummary
from .rounding import round_half_up


class SeriesStats:
    """
    Basic descriptive statistics over a numeric sensor series.
    All methods are pure: inputs are never mutated and empty input yields a neutral value.
    """

    @staticmethod
    def mean(values: Sequence[float]) -> float:
        """Arithmetic mean; 0 for an empty series."""
        if len(values) == 0:
            return 0.0
        return float(np.mean(np.asarray(values, dtype=float)))

    @staticmethod
    def stddev(values: Sequence[float]) -> float:
        """Population standard deviation (divide by N), rounded to 2 decimals."""
        if len(values) == 0:
            return 0.0
        return round_half_up(float(np.std(np.asarray(values, dtype=float))), 2)

    @staticmethod
    def moving_average(values: Sequence[float], window_size: int = MOVING_AVERAGE_WINDOW) -> List[float]:
        """
        Trailing moving average.

        The window ending at index i covers at most `window_size` elements and
        shrinks near the start of the series instead of being padded.
        """
        if len(values) == 0:
            return []

        window_size = max(1, int(window_size))
        arr = np.asarray(values, dtype=float)
        result = []
        for i in range(len(arr)):
            start = max(0, i - window_size + 1)
            result.append(round_half_up(float(np.mean(arr[start:i + 1])), 2))
        return result

    @staticmethod
    def summarize(values: Sequence[float], decimals: int = 1) -> SeriesSummary:
        """Average/min/max used for KPI cards; all zeros for an empty series."""
        if len(values) == 0:
            return SeriesSummary(avg=0.0, min=0.0, max=0.0)

        arr = np.asarray(values, dtype=float)
        return SeriesSummary(
            avg=round_half_up(float(np.mean(arr)), decimals),
            min=float(np.min(arr)),
            max=float(np.max(arr)),
        )
