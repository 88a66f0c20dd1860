"""
Configuration constants for compost monitor analytics.

This module contains all tunable parameters for trend analysis, degree-hour
accumulation, readiness scoring and sensor status evaluation.
"""
import os

# ============================================================================
# Trend Classification Configuration
# ============================================================================

# Defaults used when no trend settings are stored (or they are corrupt)
DEFAULT_SLOPE_NORM_THRESHOLD = 0.6
DEFAULT_PCT_THRESHOLD = 3.0
DEFAULT_SLIGHT_PCT = 1.5

MS_PER_HOUR = 60 * 60 * 1000
MS_PER_DAY = 24 * MS_PER_HOUR

# Trend labels and their interpretation strings
TREND_NA = "N/A"
TREND_RISING = "Rising"
TREND_FALLING = "Falling"
TREND_SLIGHTLY_RISING = "Slightly rising"
TREND_SLIGHTLY_FALLING = "Slightly falling"
TREND_STABLE = "Stable"

INTERP_NOT_ENOUGH_DATA = "Not enough data"
INTERP_RISING = "Increasing — investigate causes"
INTERP_FALLING = "Decreasing — consider corrective action"
INTERP_STABLE = "Stable — within expected variation"

# ============================================================================
# Series Statistics / Anomaly Configuration
# ============================================================================

MOVING_AVERAGE_WINDOW = 5
ANOMALY_Z_THRESHOLD = 2.0

# ============================================================================
# Rate & Projection Configuration
# ============================================================================

RATE_WINDOW_SAMPLES = 48  # most recent samples used for the hourly rate
MIN_MEANINGFUL_SLOPE = 1e-6  # below this no ETA is projected

# ============================================================================
# Degree-Hour / Readiness Configuration
# ============================================================================

CDH_BASELINE = 20.0  # °C
TARGET_CDH = 1000.0
FALLBACK_SAMPLE_SECONDS = 9  # cadence of the simulated feed
RATE_WINDOW_HOURS = 6.0

# Readiness weights (must sum to 1)
READINESS_CDH_WEIGHT = 0.7
READINESS_MOISTURE_WEIGHT = 0.2
READINESS_STABILITY_WEIGHT = 0.1

MOISTURE_IDEAL = 60.0  # %
MOISTURE_TOLERANCE = 20.0
TEMP_VARIABLE_SD = 6.0  # °C, sd at which temperature counts as fully unstable
MIN_STABILITY_SAMPLES = 3
NEUTRAL_SCORE = 0.5

# Overall stability score: per-field weight and sd normalization scale
STABILITY_WEIGHTS = {"temp": 0.35, "moist": 0.35, "n": 0.1, "p": 0.1, "k": 0.1}
STABILITY_SCALES = {"temp": 12.0, "moist": 10.0, "n": 100.0, "p": 100.0, "k": 100.0}
MIN_OVERALL_STABILITY_SAMPLES = 4

# Moisture target band for deficit reporting
MOISTURE_TARGET_LOW = 50.0
MOISTURE_TARGET_HIGH = 65.0

# ============================================================================
# Sensor Status Configuration
# ============================================================================

DEFAULT_THRESHOLDS = {
    "temperature": {"min": 15.0, "max": 65.0},
    "moisture": {"min": 40.0, "max": 80.0},
    "n": {"min": 150.0, "max": 900.0},
    "p": {"min": 50.0, "max": 300.0},
    "k": {"min": 100.0, "max": 800.0},
}

STALE_AFTER_MS = MS_PER_HOUR

# Overall health: values past the band by more than this fraction raise an alert
HEALTH_ALERT_BUFFER = 0.05

FIELD_LABELS = {
    "temperature": "Temperature",
    "moisture": "Moisture",
    "nitrogen": "Nitrogen",
    "phosphorus": "Phosphorus",
    "potassium": "Potassium",
}

# History windows (ms)
TIME_WINDOWS = {
    "live": 30 * 60 * 1000,
    "1h": MS_PER_HOUR,
    "24h": 24 * MS_PER_HOUR,
    "7d": 7 * MS_PER_DAY,
}

# ============================================================================
# Maintenance Configuration
# ============================================================================

# Store keys holding the last time each action was logged (epoch ms)
MAINTENANCE_KEYS = {
    "water": "tt_last_water",
    "feed": "tt_last_feed",
    "turn": "tt_last_turn",
}

# Reminder becomes due once this long has passed since the last action
REMINDER_INTERVALS_MS = {
    "water": 2 * MS_PER_DAY,
    "feed": 7 * MS_PER_DAY,
    "turn": 3 * MS_PER_DAY,
}

# ============================================================================
# Settings Storage
# ============================================================================

TREND_SETTINGS_KEY = "tt_trend_settings"
THRESHOLDS_KEY = "tt_thresholds"

SETTINGS_FILE = os.environ.get("COMPOST_SETTINGS_FILE", "settings.json")
