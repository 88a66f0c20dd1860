from typing import List, Literal, Optional

from fastapi import APIRouter, Depends

from core.analytics_service import AnalyticsService
from core.config import SETTINGS_FILE
from core.degree_hours import DegreeHourAccumulator
from core.maintenance import log_action, maintenance_status
from core.models import (
    DashboardReport,
    HarvestMetrics,
    HarvestRequest,
    MaintenanceStatus,
    Reading,
    Thresholds,
    TrendRequest,
    TrendResult,
    TrendSettings,
)
from core.sensor_status import window_readings
from core.settings_store import (
    JsonFileSettingsStore,
    SettingsStore,
    load_thresholds,
    load_trend_settings,
    save_thresholds,
    save_trend_settings,
)
from core.trend_estimator import TrendEstimator
from .validation import validate_analysis_input, validate_series_input, validate_thresholds_input

router = APIRouter()


def get_settings_store() -> SettingsStore:
    """Settings are read through on every request; overridden in tests."""
    return JsonFileSettingsStore(SETTINGS_FILE)


@router.post("/analyze", response_model=DashboardReport)
def analyze(
    request: List[Reading],
    window: Optional[Literal["live", "1h", "24h", "7d"]] = None,
    store: SettingsStore = Depends(get_settings_store),
):
    # Validate input data
    validate_analysis_input(request)

    readings = window_readings(request, window) if window else request

    return AnalyticsService.build_report(
        readings,
        trend_settings=load_trend_settings(store),
        thresholds=load_thresholds(store),
    )


@router.post("/trend", response_model=TrendResult)
def trend(request: TrendRequest, store: SettingsStore = Depends(get_settings_store)):
    return TrendEstimator.compute_trend(request.values, request.timestamps, load_trend_settings(store))


@router.post("/harvest", response_model=HarvestMetrics)
def harvest(request: HarvestRequest):
    validate_series_input(request.temperatures, "temperatures")

    return DegreeHourAccumulator.harvest_metrics(
        request.temperatures,
        request.timestamps or None,
        request.moisture,
        base_temp=request.base_temp,
        target_cdh=request.target_cdh,
    )


@router.get("/settings/trend", response_model=TrendSettings)
def get_trend_settings(store: SettingsStore = Depends(get_settings_store)):
    return load_trend_settings(store)


@router.put("/settings/trend", response_model=TrendSettings)
def put_trend_settings(settings: TrendSettings, store: SettingsStore = Depends(get_settings_store)):
    save_trend_settings(store, settings)
    return settings


@router.get("/settings/thresholds", response_model=Thresholds)
def get_thresholds(store: SettingsStore = Depends(get_settings_store)):
    return load_thresholds(store)


@router.put("/settings/thresholds", response_model=Thresholds)
def put_thresholds(thresholds: Thresholds, store: SettingsStore = Depends(get_settings_store)):
    validate_thresholds_input(thresholds)
    save_thresholds(store, thresholds)
    return thresholds


@router.get("/maintenance", response_model=MaintenanceStatus)
def get_maintenance(store: SettingsStore = Depends(get_settings_store)):
    return maintenance_status(store)


@router.post("/maintenance/{action}", response_model=MaintenanceStatus)
def post_maintenance(
    action: Literal["water", "feed", "turn"],
    store: SettingsStore = Depends(get_settings_store),
):
    log_action(store, action)
    return maintenance_status(store)


@router.get("/health")
def health():
    return {"status": "ok"}
