from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .config import (
    CDH_BASELINE,
    DEFAULT_PCT_THRESHOLD,
    DEFAULT_SLIGHT_PCT,
    DEFAULT_SLOPE_NORM_THRESHOLD,
    DEFAULT_THRESHOLDS,
    TARGET_CDH,
)


class CamelModel(BaseModel):
    """Base model: snake_case attributes, camelCase field names on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ----------------------------------------------------------------------------
# Inbound sensor data
# ----------------------------------------------------------------------------

class Reading(CamelModel):
    """Single compost sensor reading; timestamp is epoch milliseconds."""

    timestamp: int = Field(..., ge=0)
    temperature: Optional[float] = Field(None, ge=-50, le=100)
    moisture: Optional[float] = Field(None, ge=0, le=100)
    nitrogen: Optional[float] = Field(None, ge=0)
    phosphorus: Optional[float] = Field(None, ge=0)
    potassium: Optional[float] = Field(None, ge=0)

    @field_validator('timestamp', mode='before')
    @classmethod
    def validate_timestamp(cls, v):
        """Accept epoch milliseconds or an ISO-8601 string."""
        if isinstance(v, str) and not v.strip().lstrip('-').isdigit():
            try:
                ts_str = v.replace('Z', '+00:00') if v.endswith('Z') else v
                return int(datetime.fromisoformat(ts_str).timestamp() * 1000)
            except ValueError:
                raise ValueError('timestamp must be epoch milliseconds or an ISO-8601 string (e.g., "2025-08-01T10:00:00Z")')
        return v


# ----------------------------------------------------------------------------
# Settings
# ----------------------------------------------------------------------------

class TrendSettings(CamelModel):
    slope_norm_threshold: float = Field(DEFAULT_SLOPE_NORM_THRESHOLD, ge=0)
    pct_threshold: float = Field(DEFAULT_PCT_THRESHOLD, ge=0)
    slight_pct: float = Field(DEFAULT_SLIGHT_PCT, ge=0)


class FieldThreshold(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    minimum: float = Field(..., alias='min')
    maximum: float = Field(..., alias='max')


def _default_threshold(name: str):
    return lambda: FieldThreshold(**DEFAULT_THRESHOLDS[name])


class Thresholds(BaseModel):
    """Acceptable min/max band for each monitored field."""

    temperature: FieldThreshold = Field(default_factory=_default_threshold('temperature'))
    moisture: FieldThreshold = Field(default_factory=_default_threshold('moisture'))
    n: FieldThreshold = Field(default_factory=_default_threshold('n'))
    p: FieldThreshold = Field(default_factory=_default_threshold('p'))
    k: FieldThreshold = Field(default_factory=_default_threshold('k'))


# ----------------------------------------------------------------------------
# Analytics results
# ----------------------------------------------------------------------------

class RegressionOutcome(CamelModel):
    """Slope estimate; ok=False means the arithmetic failed and zeros were substituted."""

    slope: float = 0.0
    slope_norm: float = 0.0
    ok: bool = True
    error: Optional[str] = None


class TrendResult(CamelModel):
    pct: float
    slope: float
    slope_norm: float
    trend: str
    interp: str


class SeriesSummary(CamelModel):
    avg: float
    min: float
    max: float


class RateResult(CamelModel):
    slope_per_hour: float


class TargetEta(CamelModel):
    hours: float
    eta: int


class CdhResult(CamelModel):
    cdh: float
    series: List[float]


class ReadinessComponents(CamelModel):
    cdh: float
    moisture: float
    stability: float


class ReadinessResult(CamelModel):
    readiness: float
    components: ReadinessComponents


class HarvestMetrics(CamelModel):
    cdh: float
    cdh_series: List[float]
    target_cdh: float
    percent: float
    rate_per_hour: float
    eta_hours: Optional[float]
    readiness: float


class MoistureDeficit(CamelModel):
    deficit: float
    status: str


class SensorHealth(CamelModel):
    last_seen: Optional[int] = None
    median_interval_min: Optional[float] = None
    jitter: Optional[float] = None
    stale: bool = False


class HealthAlert(CamelModel):
    id: str
    level: str
    msg: str


class OverallHealth(CamelModel):
    """Worst per-field level across the batch, plus one alert per field that is not ok."""

    rank: str
    alerts: List[HealthAlert]


class MaintenanceLog(CamelModel):
    """Last logged time (epoch ms) of each maintenance action; None when never logged."""

    water: Optional[int] = None
    feed: Optional[int] = None
    turn: Optional[int] = None


class MaintenanceStatus(CamelModel):
    last: MaintenanceLog
    due: Dict[str, bool]


class FieldReport(CamelModel):
    summary: SeriesSummary
    status: str
    trend: TrendResult
    moving_average: List[float]
    anomalies: List[int]


class DashboardReport(CamelModel):
    sample_count: int
    fields: Dict[str, FieldReport]
    temperature_moisture_correlation: Optional[float]
    stability_score: int
    moisture_deficit: MoistureDeficit
    harvest: Optional[HarvestMetrics]
    health: SensorHealth
    overall: OverallHealth


# ----------------------------------------------------------------------------
# API request bodies
# ----------------------------------------------------------------------------

class TrendRequest(CamelModel):
    values: List[float]
    timestamps: Optional[List[float]] = None


class HarvestRequest(CamelModel):
    temperatures: List[float]
    timestamps: Optional[List[float]] = None
    moisture: Optional[List[float]] = None
    base_temp: float = CDH_BASELINE
    target_cdh: float = Field(TARGET_CDH, gt=0)

    @model_validator(mode='after')
    def check_timestamps(self):
        if self.timestamps is not None and 0 < len(self.timestamps) < len(self.temperatures):
            raise ValueError('timestamps must be at least as long as temperatures')
        return self
