import math
from typing import Mapping, Optional, Sequence

import numpy as np

from .config import (
    MIN_OVERALL_STABILITY_SAMPLES,
    MIN_STABILITY_SAMPLES,
    MOISTURE_IDEAL,
    MOISTURE_TARGET_HIGH,
    MOISTURE_TARGET_LOW,
    MOISTURE_TOLERANCE,
    NEUTRAL_SCORE,
    READINESS_CDH_WEIGHT,
    READINESS_MOISTURE_WEIGHT,
    READINESS_STABILITY_WEIGHT,
    STABILITY_SCALES,
    STABILITY_WEIGHTS,
    TARGET_CDH,
    TEMP_VARIABLE_SD,
)
from .models import MoistureDeficit, ReadinessComponents, ReadinessResult
from .rounding import round_half_up, round_to_int
from .series_stats import SeriesStats


def _clamp(v: float, lo: float = 0.0, hi: float = 1.0) -> float:
    return max(lo, min(hi, v))


class ReadinessScorer:
    """
    Composite 0-100 scores for the compost batch.

    Readiness weighs CDH progress (70%), moisture closeness to 60% (20%) and
    temperature stability (10%). The overall stability score penalizes
    variability across every monitored field.
    """

    @classmethod
    def compute_readiness(
        cls,
        cdh: float,
        target_cdh: float = TARGET_CDH,
        moisture: Optional[float] = None,
        temperatures: Sequence[float] = (),
    ) -> ReadinessResult:
        """Weighted readiness; each component is also reported on a 0-100 scale."""
        norm_cdh = _clamp(cdh / max(1.0, target_cdh))
        moisture_score = cls._moisture_component(moisture)
        stability = cls._temperature_stability_component(temperatures)

        readiness = _clamp(
            norm_cdh * READINESS_CDH_WEIGHT
            + moisture_score * READINESS_MOISTURE_WEIGHT
            + stability * READINESS_STABILITY_WEIGHT
        )

        return ReadinessResult(
            readiness=round_half_up(readiness * 100, 1),
            components=ReadinessComponents(
                cdh=round_half_up(norm_cdh * 100, 1),
                moisture=round_half_up(moisture_score * 100, 1),
                stability=round_half_up(stability * 100, 1),
            ),
        )

    @staticmethod
    def overall_stability_score(series_map: Mapping[str, Sequence[float]]) -> int:
        """
        100 minus a weighted variability penalty per field (temp, moist, n, p, k).
        Fields with fewer than 4 samples are skipped.
        """
        score = 100.0
        for key, weight in STABILITY_WEIGHTS.items():
            values = series_map.get(key)
            if values is None or len(values) < MIN_OVERALL_STABILITY_SAMPLES:
                continue
            norm = min(1.0, SeriesStats.stddev(values) / STABILITY_SCALES[key])
            score -= norm * weight * 100
        return round_to_int(_clamp(score, 0.0, 100.0))

    @staticmethod
    def moisture_deficit(
        avg_moisture: Optional[float],
        target_low: float = MOISTURE_TARGET_LOW,
        target_high: float = MOISTURE_TARGET_HIGH,
    ) -> MoistureDeficit:
        """Distance of average moisture from the target band and which side it is on."""
        if avg_moisture is None or not math.isfinite(avg_moisture):
            return MoistureDeficit(deficit=0.0, status="unknown")
        if target_low <= avg_moisture <= target_high:
            return MoistureDeficit(deficit=0.0, status="within")
        if avg_moisture < target_low:
            return MoistureDeficit(deficit=round_half_up(target_low - avg_moisture, 1), status="dry")
        return MoistureDeficit(deficit=round_half_up(avg_moisture - target_high, 1), status="wet")

    # -------------------------------------------------------------------------
    # Helper methods
    # -------------------------------------------------------------------------
    @staticmethod
    def _moisture_component(moisture: Optional[float]) -> float:
        """1 at the ideal moisture, falling linearly to 0 at ±tolerance; neutral when unknown."""
        if moisture is None or math.isnan(moisture):
            return NEUTRAL_SCORE
        return 1.0 - _clamp(abs(moisture - MOISTURE_IDEAL) / MOISTURE_TOLERANCE)

    @staticmethod
    def _temperature_stability_component(temperatures: Sequence[float]) -> float:
        """1 for a flat temperature trace, 0 once the sd reaches 6°C; neutral below 3 samples."""
        if temperatures is None or len(temperatures) < MIN_STABILITY_SAMPLES:
            return NEUTRAL_SCORE
        sd = float(np.std(np.asarray(temperatures, dtype=float)))
        return 1.0 - _clamp(sd / TEMP_VARIABLE_SD)
