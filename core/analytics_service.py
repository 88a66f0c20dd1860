import logging
import math
from typing import Dict, List, Optional, Sequence, Tuple

from core.anomaly_detector import AnomalyDetector
from core.correlation_engine import CorrelationEngine
from core.degree_hours import DegreeHourAccumulator
from core.models import (
    DashboardReport,
    FieldReport,
    FieldThreshold,
    Reading,
    Thresholds,
    TrendSettings,
)
from core.readiness_scorer import ReadinessScorer
from core.sensor_status import health_level_for, overall_health, sensor_health_metrics, status_for
from core.series_stats import SeriesStats
from core.trend_estimator import TrendEstimator

logger = logging.getLogger(__name__)

# reading attribute -> (thresholds attribute, stability series key, summary decimals)
FIELD_KEYS = {
    "temperature": ("temperature", "temp", 1),
    "moisture": ("moisture", "moist", 1),
    "nitrogen": ("n", "n", 0),
    "phosphorus": ("p", "p", 0),
    "potassium": ("k", "k", 0),
}


class AnalyticsService:
    """High-level service turning a batch of readings into the dashboard report."""

    @classmethod
    def build_report(
        cls,
        raw_readings: Sequence[Reading],
        trend_settings: Optional[TrendSettings] = None,
        thresholds: Optional[Thresholds] = None,
        now_ms: Optional[int] = None,
    ) -> DashboardReport:
        """
        Full analytics pipeline used by the API: sort → split per field →
        per-field stats/trend/anomalies → cross-field scores and health rank.

        Settings are passed in by the caller; this service never touches storage.
        """
        trend_settings = trend_settings or TrendSettings()
        thresholds = thresholds or Thresholds()

        # 1. Chronological order
        readings = cls._sort_by_timestamp(raw_readings)

        # 2. One (values, timestamps) pair per field, skipping missing values
        series = cls._extract_series(readings)

        # 3. Per-field reports
        fields: Dict[str, FieldReport] = {}
        levels: Dict[str, str] = {}
        for name, (values, times) in series.items():
            if not values:
                continue
            threshold_key, _, decimals = FIELD_KEYS[name]
            band = getattr(thresholds, threshold_key)
            fields[name] = cls._field_report(values, times, band, trend_settings, decimals)
            levels[name] = health_level_for(fields[name].summary.avg, band.minimum, band.maximum)

        # 4. Cross-field metrics
        temps, temp_times = series["temperature"]
        moist, _ = series["moisture"]

        correlation = CorrelationEngine.pearson_correlation(temps, moist)
        harvest = DegreeHourAccumulator.harvest_metrics(temps, temp_times, moist) if temps else None
        stability = ReadinessScorer.overall_stability_score(
            {FIELD_KEYS[name][1]: values for name, (values, _) in series.items()}
        )
        deficit = ReadinessScorer.moisture_deficit(SeriesStats.mean(moist) if moist else None)
        health = sensor_health_metrics([r.timestamp for r in readings], now_ms)

        cls._log_field_table(fields)

        return DashboardReport(
            sample_count=len(readings),
            fields=fields,
            temperature_moisture_correlation=None if math.isnan(correlation) else correlation,
            stability_score=stability,
            moisture_deficit=deficit,
            harvest=harvest,
            health=health,
            overall=overall_health(levels),
        )

    # -------------------------------------------------------------------------
    # Helper methods
    # -------------------------------------------------------------------------
    @staticmethod
    def _sort_by_timestamp(readings: Sequence[Reading]) -> List[Reading]:
        """Readings may arrive out of order from the live feed."""
        return sorted(readings, key=lambda r: r.timestamp)

    @staticmethod
    def _extract_series(readings: Sequence[Reading]) -> Dict[str, Tuple[List[float], List[float]]]:
        """Split readings into per-field value/timestamp lists that stay paired 1:1."""
        series: Dict[str, Tuple[List[float], List[float]]] = {name: ([], []) for name in FIELD_KEYS}
        for reading in readings:
            for name, (values, times) in series.items():
                value = getattr(reading, name)
                if value is None:
                    continue
                values.append(value)
                times.append(float(reading.timestamp))
        return series

    @staticmethod
    def _field_report(
        values: List[float],
        times: List[float],
        band: FieldThreshold,
        trend_settings: TrendSettings,
        decimals: int,
    ) -> FieldReport:
        summary = SeriesStats.summarize(values, decimals)
        return FieldReport(
            summary=summary,
            status=status_for(summary.avg, band.minimum, band.maximum),
            trend=TrendEstimator.compute_trend(values, times, trend_settings),
            moving_average=SeriesStats.moving_average(values),
            anomalies=AnomalyDetector.detect_anomalies(values),
        )

    @staticmethod
    def _log_field_table(fields: Dict[str, FieldReport]) -> None:
        """Debug table of the per-field results."""
        if not logger.isEnabledFor(logging.DEBUG):
            return

        lines = [
            "",
            "+-------------+-----------+--------+------------------+------------+-----------+",
            "| Field       |       Avg | Status | Trend            |      Slope | Anomalies |",
            "+-------------+-----------+--------+------------------+------------+-----------+",
        ]
        for name, report in fields.items():
            lines.append(
                f"| {name:<11} "
                f"| {report.summary.avg:>9.2f} "
                f"| {report.status:<6} "
                f"| {report.trend.trend:<16} "
                f"| {report.trend.slope:>10.4f} "
                f"| {len(report.anomalies):>9d} |"
            )
        lines.append("+-------------+-----------+--------+------------------+------------+-----------+")
        logger.debug("\n".join(lines))
