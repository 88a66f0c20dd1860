from typing import Optional, Sequence

import numpy as np

from .config import (
    CDH_BASELINE,
    FALLBACK_SAMPLE_SECONDS,
    MS_PER_HOUR,
    RATE_WINDOW_HOURS,
    TARGET_CDH,
)
from .models import CdhResult, HarvestMetrics
from .readiness_scorer import ReadinessScorer
from .rounding import round_half_up


class DegreeHourAccumulator:
    """
    Cumulative degree-hours (CDH): temperature excess above a baseline integrated over time.
    CDH is the maturity signal behind the harvest readiness estimate.
    """

    @classmethod
    def compute_cdh(
        cls,
        temperatures: Sequence[float],
        timestamps: Optional[Sequence[float]] = None,
        baseline: float = CDH_BASELINE,
    ) -> CdhResult:
        """
        Accumulate max(0, temp - baseline) * dt for every sample.

        dt is the gap to the next sample, the gap from the previous sample at
        the end of the series, and a fixed 9 s when no timestamps exist.
        The running total is reported per sample, rounded to 3 decimals.
        """
        n = len(temperatures)
        if n == 0:
            return CdhResult(cdh=0.0, series=[])

        ts = cls._align_timestamps(timestamps, n)

        series = []
        total = 0.0
        for i, temp in enumerate(temperatures):
            dt_hours = cls._interval_hours(ts, i)
            total += max(0.0, float(temp) - baseline) * dt_hours
            series.append(round_half_up(total, 3))

        return CdhResult(cdh=round_half_up(total, 3), series=series)

    @classmethod
    def estimate_rate(
        cls,
        cdh_series: Sequence[float],
        timestamps: Optional[Sequence[float]] = None,
        window_hours: float = RATE_WINDOW_HOURS,
    ) -> float:
        """Recent CDH growth in degree-hours per hour over the trailing `window_hours`."""
        n = len(cdh_series)
        if n < 2:
            return 0.0

        ts = cls._align_timestamps(timestamps, n)
        ts = None if ts is None else np.asarray(ts, dtype=float)

        # Approximate sample count for the window from the observed cadence
        cadence_s = float(FALLBACK_SAMPLE_SECONDS)
        if ts is not None:
            deltas = np.diff(ts) / 1000.0
            deltas = deltas[deltas > 0]
            if deltas.size:
                cadence_s = float(np.median(deltas))

        window_samples = max(2, int(window_hours * 3600 // cadence_s))
        start_idx = max(0, n - window_samples)

        if ts is not None:
            span_hours = float(ts[-1] - ts[start_idx]) / MS_PER_HOUR
        else:
            span_hours = (n - 1 - start_idx) * cadence_s / 3600

        delta = float(cdh_series[-1]) - float(cdh_series[start_idx])
        return delta / max(1e-6, span_hours)

    @classmethod
    def harvest_metrics(
        cls,
        temperatures: Sequence[float],
        timestamps: Optional[Sequence[float]] = None,
        moisture: Optional[Sequence[float]] = None,
        base_temp: float = CDH_BASELINE,
        target_cdh: float = TARGET_CDH,
    ) -> HarvestMetrics:
        """Full harvest report: CDH → growth rate → ETA to target → readiness."""
        latest_moisture = float(moisture[-1]) if moisture is not None and len(moisture) else None

        result = cls.compute_cdh(temperatures, timestamps, base_temp)
        rate = cls.estimate_rate(result.series, timestamps, RATE_WINDOW_HOURS)
        eta_hours = max(0.0, (target_cdh - result.cdh) / rate) if rate > 0 else None
        readiness = ReadinessScorer.compute_readiness(result.cdh, target_cdh, latest_moisture, temperatures)

        return HarvestMetrics(
            cdh=result.cdh,
            cdh_series=result.series,
            target_cdh=target_cdh,
            percent=round_half_up(min(1.0, max(0.0, result.cdh / max(1.0, target_cdh))), 3),
            rate_per_hour=round_half_up(rate, 3),
            eta_hours=None if eta_hours is None else round_half_up(eta_hours, 2),
            readiness=readiness.readiness,
        )

    @classmethod
    def trapezoid_degree_hours(
        cls,
        temperatures: Sequence[float],
        timestamps: Optional[Sequence[float]] = None,
        baseline: float = CDH_BASELINE,
    ) -> float:
        """
        Trapezoidal degree-hours between consecutive timestamped samples, 1 decimal.
        Without timestamps every sample is assumed to cover one hour.
        """
        n = len(temperatures)
        if n == 0:
            return 0.0

        temps = np.asarray(temperatures, dtype=float)
        ts = cls._align_timestamps(timestamps, n)
        if ts is None:
            total = float(np.sum(np.clip(temps - baseline, 0.0, None)))
        else:
            dt_hours = np.clip(np.diff(np.asarray(ts, dtype=float)) / MS_PER_HOUR, 0.0, None)
            avg_temps = (temps[1:] + temps[:-1]) / 2.0
            total = float(np.sum(np.clip(avg_temps - baseline, 0.0, None) * dt_hours))
        return round_half_up(total, 1)

    # -------------------------------------------------------------------------
    # Helper methods
    # -------------------------------------------------------------------------
    @staticmethod
    def _align_timestamps(timestamps: Optional[Sequence[float]], n: int):
        """Trailing n timestamps as floats, or None when there are too few to pair up."""
        if timestamps is None or len(timestamps) < n:
            return None
        return [float(t) for t in list(timestamps)[len(timestamps) - n:]]

    @staticmethod
    def _interval_hours(ts, i: int) -> float:
        """Forward gap, backward gap at the last sample, or the fallback cadence."""
        if ts is not None and i + 1 < len(ts):
            return max(0.0, (ts[i + 1] - ts[i]) / MS_PER_HOUR)
        if ts is not None and i > 0:
            return max(0.0, (ts[i] - ts[i - 1]) / MS_PER_HOUR)
        return FALLBACK_SAMPLE_SECONDS / 3600
