import time
from typing import List, Mapping, Optional, Sequence

import numpy as np

from .config import FIELD_LABELS, HEALTH_ALERT_BUFFER, STALE_AFTER_MS, TIME_WINDOWS
from .models import HealthAlert, OverallHealth, Reading, SensorHealth
from .rounding import round_half_up

STATUS_LOW = "low"
STATUS_OK = "ok"
STATUS_HIGH = "high"

HEALTH_OK = "ok"
HEALTH_WARN = "warn"
HEALTH_ALERT = "alert"

# worst first
_HEALTH_RANKING = (HEALTH_ALERT, HEALTH_WARN, HEALTH_OK)


def status_for(value: float, minimum: float, maximum: float) -> str:
    """Badge status of a value against its configured band."""
    if value < minimum:
        return STATUS_LOW
    if value > maximum:
        return STATUS_HIGH
    return STATUS_OK


def health_level_for(value: float, minimum: float, maximum: float) -> str:
    """Severity of a value: alert beyond the band plus a 5% buffer, warn just outside it."""
    if value < minimum * (1 - HEALTH_ALERT_BUFFER) or value > maximum * (1 + HEALTH_ALERT_BUFFER):
        return HEALTH_ALERT
    if value < minimum or value > maximum:
        return HEALTH_WARN
    return HEALTH_OK


def overall_health(levels: Mapping[str, str]) -> OverallHealth:
    """Roll per-field levels up into one rank (worst wins) and an alert list in field order."""
    present = set(levels.values())
    rank = next((level for level in _HEALTH_RANKING if level in present), HEALTH_OK)

    alerts = []
    for name, level in levels.items():
        if level == HEALTH_OK:
            continue
        label = FIELD_LABELS.get(name, name.capitalize())
        msg = f"{label} nearing threshold" if level == HEALTH_WARN else f"{label} out of range"
        alerts.append(HealthAlert(id=name, level=level, msg=msg))
    return OverallHealth(rank=rank, alerts=alerts)


def sensor_health_metrics(timestamps: Optional[Sequence[float]], now_ms: Optional[int] = None) -> SensorHealth:
    """
    Feed health from sample timestamps: last sample time, median sampling
    interval and its jitter (mean absolute deviation, minutes), and whether
    the feed has gone quiet for more than an hour.
    """
    if timestamps is None or len(timestamps) == 0:
        return SensorHealth()
    if len(timestamps) < 2:
        return SensorHealth(last_seen=int(timestamps[-1]))

    ts = np.asarray(timestamps, dtype=float)
    diffs_min = np.diff(ts) / 60000.0
    median = float(np.median(diffs_min))
    jitter = float(np.mean(np.abs(diffs_min - median)))

    if now_ms is None:
        now_ms = int(time.time() * 1000)
    last_seen = int(ts[-1])

    return SensorHealth(
        last_seen=last_seen,
        median_interval_min=round_half_up(median, 1),
        jitter=round_half_up(jitter, 1),
        stale=(now_ms - last_seen) > STALE_AFTER_MS,
    )


def window_readings(readings: Sequence[Reading], range_key: str, now_ms: Optional[int] = None) -> List[Reading]:
    """Readings inside the named history window (live, 1h, 24h, 7d)."""
    if range_key not in TIME_WINDOWS:
        raise ValueError(f"unknown range {range_key!r}, expected one of {sorted(TIME_WINDOWS)}")
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    cutoff = now_ms - TIME_WINDOWS[range_key]
    return [r for r in readings if r.timestamp >= cutoff]
