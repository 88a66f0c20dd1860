from typing import List, Sequence

import numpy as np
from scipy.stats import zscore

from .config import ANOMALY_Z_THRESHOLD


class AnomalyDetector:
    """Flags outlier samples by their population z-score."""

    @staticmethod
    def detect_anomalies(values: Sequence[float], z_threshold: float = ANOMALY_Z_THRESHOLD) -> List[int]:
        """
        Return the indices whose |z| is at least `z_threshold`.

        A constant series has no spread, so no sample can be an outlier and
        the result is empty whatever the threshold.
        """
        arr = np.asarray(values, dtype=float)
        if arr.size == 0 or np.ptp(arr) == 0:
            return []

        z = zscore(arr, ddof=0)
        return [int(i) for i in np.flatnonzero(np.abs(z) >= z_threshold)]
