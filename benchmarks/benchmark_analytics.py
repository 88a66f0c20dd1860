import math
import random
import time

from core.analytics_service import AnalyticsService
from core.degree_hours import DegreeHourAccumulator
from core.models import Reading


SAMPLE_SECONDS = 9

DATASETS = {
    "live_30min": 200,
    "day_9s": 24 * 3600 // SAMPLE_SECONDS,
}


def generate_readings(count: int, seed: int = 7):
    """Synthetic compost readings: slow warm-up with a daily cycle plus sensor noise."""
    rng = random.Random(seed)
    start = 1_700_000_000_000
    readings = []
    for i in range(count):
        hours = i * SAMPLE_SECONDS / 3600
        readings.append(
            Reading(
                timestamp=start + i * SAMPLE_SECONDS * 1000,
                temperature=35 + 0.5 * hours + 3 * math.sin(hours / 24 * 2 * math.pi) + rng.gauss(0, 0.4),
                moisture=min(100.0, max(0.0, 62 - 0.1 * hours + rng.gauss(0, 1.0))),
                nitrogen=max(0.0, 450 + rng.gauss(0, 15)),
                phosphorus=max(0.0, 120 + rng.gauss(0, 6)),
                potassium=max(0.0, 320 + rng.gauss(0, 10)),
            )
        )
    return readings


def benchmark(readings):
    """
    Benchmark utility: measure full report time and the harvest metrics alone.
    Returns: (report_time, harvest_time, readiness)
    """
    temps = [r.temperature for r in readings]
    times = [r.timestamp for r in readings]

    t0 = time.perf_counter()
    AnalyticsService.build_report(readings)
    t1 = time.perf_counter()
    harvest = DegreeHourAccumulator.harvest_metrics(temps, times)
    t2 = time.perf_counter()

    return t1 - t0, t2 - t1, harvest.readiness


if __name__ == "__main__":
    for label, count in DATASETS.items():
        data = generate_readings(count)
        report_time, harvest_time, readiness = benchmark(data)

        print(f"\n=== Benchmark Results ({label}, {count} readings) ===")
        print(f"  Report time    : {report_time:.6f} seconds")
        print(f"  Harvest time   : {harvest_time:.6f} seconds")
        print(f"  Readiness      : {readiness:.1f}")
