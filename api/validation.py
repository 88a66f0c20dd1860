from typing import List, Sequence

from fastapi import HTTPException

from core.models import Reading, Thresholds
from core.settings_store import validate_thresholds


def validate_analysis_input(readings: List[Reading]) -> None:
    """Guardrail around the core logic: reject empty payloads early."""
    if not readings:
        raise HTTPException(
            status_code=422,
            detail="Input data cannot be empty. Please provide at least one reading."
        )


def validate_series_input(values: Sequence[float], name: str) -> None:
    if not values:
        raise HTTPException(
            status_code=422,
            detail=f"'{name}' cannot be empty. Please provide at least one value."
        )


def validate_thresholds_input(thresholds: Thresholds) -> None:
    error = validate_thresholds(thresholds)
    if error:
        raise HTTPException(status_code=422, detail=error)
