import math
from typing import Sequence

import numpy as np

from .rounding import round_half_up


class CorrelationEngine:
    """Pearson correlation between two sensor series aligned by their most recent samples."""

    @staticmethod
    def pearson_correlation(a: Sequence[float], b: Sequence[float]) -> float:
        """
        Pearson r over the trailing overlap of `a` and `b`, rounded to 2 decimals.

        Returns NaN instead of a plausible-looking number when the inputs are
        not sequences, overlap by fewer than 2 samples, or either side is flat.
        """
        if not _is_series(a) or not _is_series(b):
            return math.nan

        n = min(len(a), len(b))
        if n < 2:
            return math.nan

        try:
            ax = np.asarray(a, dtype=float)[-n:]
            bx = np.asarray(b, dtype=float)[-n:]
        except (TypeError, ValueError):
            return math.nan

        da = ax - ax.mean()
        db = bx - bx.mean()
        num = float(np.sum(da * db))
        den = math.sqrt(float(np.sum(da * da)) * float(np.sum(db * db)))
        if den == 0:
            return math.nan
        return round_half_up(num / den, 2)


def _is_series(obj) -> bool:
    return isinstance(obj, (list, tuple, np.ndarray))
